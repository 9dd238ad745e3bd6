import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from inventory_app.database import get_db
from inventory_app.schemas import logs as log_schemas
from inventory_app.services.logging_service import LoggingService

router = APIRouter(
    prefix="/v1/logs",
    tags=["logs"],
)


@router.get("", response_model=log_schemas.OperationLogListResponse)
def get_logs(
    operation_type: Optional[str] = Query(None, max_length=50),
    status: Optional[str] = Query(None, max_length=20),
    item_id: Optional[uuid.UUID] = Query(None),
    reservation_id: Optional[uuid.UUID] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Operation audit log, newest first."""
    logging_service = LoggingService(db)
    result = logging_service.get_logs(
        limit=limit,
        offset=offset,
        operation_type=operation_type,
        status=status,
        item_id=str(item_id) if item_id else None,
        reservation_id=str(reservation_id) if reservation_id else None
    )

    return {
        "data": result["logs"],
        "pagination": {"limit": result["limit"], "offset": result["offset"], "total": result["total"]}
    }
