import logging
import time
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.orm import Session

from inventory_app.config import settings
from inventory_app.database.database import begin_write
from inventory_app.models.items import Item
from inventory_app.models.logs import OperationType, OperationStatus
from inventory_app.models.reservations import Reservation, ReservationStatus
from inventory_app.services.exceptions import (
    InsufficientQuantity,
    ItemNotFound,
    ReservationNotFound,
    ValidationFailed,
)
from inventory_app.services.item_service import held_quantities
from inventory_app.services.logging_service import LoggingService
from inventory_app.utils.clock import utcnow

logger = logging.getLogger(__name__)

MAX_CUSTOMER_ID_LENGTH = 255


class ReservationService:
    """
    Admission of new reservations and reservation queries.

    Admission is serialized per item: the item row is locked, availability is
    recomputed from the reservation rows and the new reservation is inserted
    in the same transaction.
    """

    def __init__(self, db: Session, clock=utcnow, default_expiry: Optional[timedelta] = None):
        self.db = db
        self.clock = clock
        self.default_expiry = default_expiry or timedelta(minutes=settings.reservation_expiry_minutes)
        self.audit = LoggingService(db, clock)

    def _validate_request(self, customer_id: str, quantity: int, expiry: timedelta):
        if not customer_id or len(customer_id) > MAX_CUSTOMER_ID_LENGTH:
            raise ValidationFailed(f"Customer ID must be between 1 and {MAX_CUSTOMER_ID_LENGTH} characters")
        if quantity is None or quantity <= 0:
            raise ValidationFailed("Quantity must be positive")
        if expiry <= timedelta(0):
            raise ValidationFailed("Expiry duration must be positive")

    def _lock_item(self, item_id: str) -> Optional[Item]:
        """
        Read the item holding an exclusive lock until the transaction ends.

        FOR UPDATE is a no-op on SQLite, where the transaction already holds
        the database write lock (BEGIN IMMEDIATE).
        """
        if self.db.get_bind().dialect.name == "postgresql":
            lock_timeout_ms = int(settings.lock_timeout_seconds * 1000)
            self.db.execute(text(f"SET LOCAL lock_timeout = {lock_timeout_ms}"))

        return (
            self.db.query(Item)
            .filter(Item.id == item_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def create_reservation(
        self,
        item_id: str,
        customer_id: str,
        quantity: int,
        expiry_duration: Optional[timedelta] = None
    ) -> Reservation:
        """
        Atomically check availability and create a PENDING reservation.

        Raises:
            ItemNotFound: the item does not exist
            InsufficientQuantity: fewer than `quantity` units are available
        """
        expiry = expiry_duration if expiry_duration is not None else self.default_expiry
        self._validate_request(customer_id, quantity, expiry)

        started = time.perf_counter()
        item = None
        reservation = None
        available = None

        try:
            begin_write(self.db)
            item = self._lock_item(item_id)
            if item is not None:
                # Clock read after the lock is granted
                now = self.clock()
                reserved, confirmed = held_quantities(self.db, item.id, now)
                available = item.total_quantity - reserved - confirmed

                if available >= quantity:
                    reservation = Reservation(
                        item_id=item.id,
                        customer_id=customer_id,
                        quantity=quantity,
                        status=ReservationStatus.PENDING.value,
                        created_at=now,
                        expires_at=now + expiry,
                    )
                    self.db.add(reservation)
                    self.db.flush()

                    self.audit.log_operation(
                        OperationType.RESERVATION_CREATED,
                        item_id=item.id,
                        reservation_id=reservation.id,
                        customer_id=customer_id,
                        quantity=quantity,
                        details={"available_before": available, "expires_at": reservation.expires_at.isoformat()},
                        execution_time_ms=int((time.perf_counter() - started) * 1000)
                    )
                    self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if item is None:
            self.db.rollback()
            raise ItemNotFound(item_id)

        if reservation is None:
            # Release the item lock before recording the rejection
            self.db.rollback()
            logger.info(
                "Reservation rejected for item %s: requested %s, available %s",
                item_id, quantity, available
            )
            self.audit.log_and_commit(
                OperationType.RESERVATION_REJECTED,
                status=OperationStatus.WARNING,
                item_id=item_id,
                customer_id=customer_id,
                quantity=quantity,
                error_message="Insufficient quantity",
                details={"requested": quantity, "available": available}
            )
            raise InsufficientQuantity(quantity, available)

        logger.info(
            "Reservation %s created: item %s, %s units, expires at %s",
            reservation.id, item_id, quantity, reservation.expires_at.isoformat()
        )
        return reservation

    def get_reservation(self, reservation_id: str) -> Reservation:
        reservation = self.db.query(Reservation).filter(Reservation.id == reservation_id).first()
        if not reservation:
            raise ReservationNotFound(reservation_id)
        return reservation

    def list_reservations(
        self,
        item_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Reservation], int]:
        """List reservations, newest first. Returns (page, total matching)."""
        query = self.db.query(Reservation)

        if item_id:
            query = query.filter(Reservation.item_id == item_id)
        if customer_id:
            query = query.filter(Reservation.customer_id == customer_id)
        if status:
            query = query.filter(Reservation.status == status)

        total = query.count()
        reservations = query.order_by(
            Reservation.created_at.desc(), Reservation.id
        ).offset(offset).limit(limit).all()

        return reservations, total
