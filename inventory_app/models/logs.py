import uuid

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, Index

from inventory_app.database.database import Base
from inventory_app.utils.clock import utcnow


class OperationLog(Base):
    __tablename__ = "operation_logs"

    # Primary identifiers
    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)
    operation_id = Column(String(36), default=lambda: str(uuid.uuid4()), nullable=False, index=True)

    # Classification
    operation_type = Column(String(50), nullable=False, index=True)  # RESERVATION_CREATED, ...
    status = Column(String(20), default="SUCCESS", nullable=False, index=True)  # SUCCESS, ERROR, WARNING

    # Subject of the operation
    item_id = Column(String(36), index=True)
    reservation_id = Column(String(36), index=True)
    customer_id = Column(String(255))
    quantity = Column(Integer)

    # Messages and free-form details
    error_message = Column(Text)
    details = Column(JSON)

    # Performance and origin
    execution_time_ms = Column(Integer)
    api_endpoint = Column(String(200))


Index('idx_logs_timestamp_type', OperationLog.timestamp, OperationLog.operation_type)
Index('idx_logs_status_timestamp', OperationLog.status, OperationLog.timestamp)


class OperationType:
    ITEM_CREATED = "ITEM_CREATED"

    RESERVATION_CREATED = "RESERVATION_CREATED"
    RESERVATION_REJECTED = "RESERVATION_REJECTED"
    RESERVATION_CONFIRMED = "RESERVATION_CONFIRMED"
    RESERVATION_CANCELLED = "RESERVATION_CANCELLED"

    RESERVATIONS_EXPIRED = "RESERVATIONS_EXPIRED"


class OperationStatus:
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    WARNING = "WARNING"
