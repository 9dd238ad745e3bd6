import logging
from datetime import datetime
from typing import Dict, Tuple

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from inventory_app.database.database import begin_write
from inventory_app.models.items import Item
from inventory_app.models.logs import OperationType
from inventory_app.models.reservations import Reservation, ReservationStatus
from inventory_app.services.exceptions import ItemNotFound, ValidationFailed
from inventory_app.services.logging_service import LoggingService
from inventory_app.utils.clock import utcnow

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255


def held_quantities(db: Session, item_id: str, now: datetime) -> Tuple[int, int]:
    """
    Return (reserved, confirmed) for an item.

    reserved counts PENDING reservations that have not yet expired at `now`,
    confirmed counts CONFIRMED ones. Both sums come from a single statement so
    they describe the same snapshot.
    """
    reserved_expr = func.coalesce(func.sum(case(
        (and_(Reservation.status == ReservationStatus.PENDING.value, Reservation.expires_at > now),
         Reservation.quantity),
        else_=0,
    )), 0)
    confirmed_expr = func.coalesce(func.sum(case(
        (Reservation.status == ReservationStatus.CONFIRMED.value, Reservation.quantity),
        else_=0,
    )), 0)

    reserved, confirmed = db.query(reserved_expr, confirmed_expr).filter(
        Reservation.item_id == item_id
    ).one()
    return int(reserved), int(confirmed)


class ItemService:
    """Item creation and availability queries."""

    def __init__(self, db: Session, clock=utcnow):
        self.db = db
        self.clock = clock
        self.audit = LoggingService(db, clock)

    def create_item(self, name: str, total_quantity: int) -> Item:
        name = (name or "").strip()
        if not name or len(name) > MAX_NAME_LENGTH:
            raise ValidationFailed(f"Name must be between 1 and {MAX_NAME_LENGTH} characters")
        if total_quantity is None or total_quantity <= 0:
            raise ValidationFailed("Initial quantity must be positive")

        now = self.clock()
        item = Item(name=name, total_quantity=total_quantity, created_at=now, updated_at=now)

        try:
            begin_write(self.db)
            self.db.add(item)
            self.db.flush()
            self.audit.log_operation(
                OperationType.ITEM_CREATED,
                item_id=item.id,
                quantity=total_quantity,
                details={"name": name}
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Item created: %s (%s units)", item.id, total_quantity)
        return item

    def get_item(self, item_id: str) -> Item:
        item = self.db.query(Item).filter(Item.id == item_id).first()
        if not item:
            raise ItemNotFound(item_id)
        return item

    def get_availability(self, item_id: str) -> Dict[str, int]:
        """
        Availability breakdown for an item.

        Read-only and takes no lock: under concurrent writes it is a snapshot,
        not an admission decision.
        """
        item = self.get_item(item_id)
        reserved, confirmed = held_quantities(self.db, item.id, self.clock())

        return {
            "total": item.total_quantity,
            "reserved": reserved,
            "confirmed": confirmed,
            "available": item.total_quantity - reserved - confirmed,
        }
