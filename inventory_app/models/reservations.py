import enum
import uuid

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint, Index

from inventory_app.database.database import Base
from inventory_app.utils.clock import utcnow


class ReservationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="reservations_quantity_positive"),
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'CANCELLED', 'EXPIRED')",
            name="reservations_status_valid",
        ),
        CheckConstraint("expires_at > created_at", name="reservations_expires_after_creation"),
        # Admission aggregates and the expiry sweep
        Index("idx_reservations_item_status_expires", "item_id", "status", "expires_at"),
        Index("idx_reservations_status_expires", "status", "expires_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    item_id = Column(String(36), ForeignKey("items.id"), nullable=False, index=True)
    customer_id = Column(String(255), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Set exactly once, by the transition into the matching terminal state
    confirmed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    expired_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Reservation(id={self.id}, item={self.item_id}, qty={self.quantity}, status={self.status})>"
