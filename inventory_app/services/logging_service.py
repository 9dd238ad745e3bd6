import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_app.database.database import begin_write
from inventory_app.models.logs import OperationLog, OperationStatus
from inventory_app.utils.clock import utcnow

logger = logging.getLogger(__name__)


class LoggingService:
    """
    Audit log of the operations applied to items and reservations.

    Entries are added to the caller's session, so they commit or roll back
    together with the change they describe.
    """

    def __init__(self, db: Session, clock=utcnow):
        self.db = db
        self.clock = clock

    def log_operation(
        self,
        operation_type: str,
        status: str = OperationStatus.SUCCESS,
        item_id: Optional[str] = None,
        reservation_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        quantity: Optional[int] = None,
        error_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        execution_time_ms: Optional[int] = None,
        api_endpoint: Optional[str] = None,
        operation_id: Optional[str] = None
    ) -> str:
        """
        Add a single operation to the log.

        The entry is flushed and committed with the caller's transaction, so it
        is written only if the change it describes is.

        Returns:
            str: the operation_id of the recorded entry
        """
        if not operation_id:
            operation_id = str(uuid.uuid4())

        log_entry = OperationLog(
            operation_id=operation_id,
            timestamp=self.clock(),
            operation_type=operation_type,
            status=status,
            item_id=item_id,
            reservation_id=reservation_id,
            customer_id=customer_id,
            quantity=quantity,
            error_message=error_message,
            details=details,
            execution_time_ms=execution_time_ms,
            api_endpoint=api_endpoint
        )
        self.db.add(log_entry)

        return operation_id

    def log_and_commit(self, operation_type: str, **kwargs) -> Optional[str]:
        """
        Record an entry in its own transaction.

        Used for outcomes whose business transaction was rolled back, such as a
        rejected admission. A failure here is logged and returns None.
        """
        try:
            begin_write(self.db)
            operation_id = self.log_operation(operation_type, **kwargs)
            self.db.commit()
            return operation_id
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to commit %s to the operation log: %s", operation_type, e)
            return None

    def get_logs(
        self,
        limit: int = 100,
        offset: int = 0,
        operation_type: Optional[str] = None,
        status: Optional[str] = None,
        item_id: Optional[str] = None,
        reservation_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Fetch log entries, newest first, with filters and paging."""
        query = self.db.query(OperationLog)

        if operation_type:
            query = query.filter(OperationLog.operation_type == operation_type)
        if status:
            query = query.filter(OperationLog.status == status)
        if item_id:
            query = query.filter(OperationLog.item_id == item_id)
        if reservation_id:
            query = query.filter(OperationLog.reservation_id == reservation_id)

        total = query.count()
        logs = query.order_by(desc(OperationLog.timestamp), desc(OperationLog.id)).offset(offset).limit(limit).all()

        return {
            "logs": logs,
            "total": total,
            "limit": limit,
            "offset": offset
        }
