"""
Reservation state machine: confirm, cancel and the expiry sweep.

Every transition is a guarded update: the new status is written only if the
row is still in the state the transition starts from, and the affected-row
count tells whether this caller won. A caller that loses re-reads the row and
reconciles its answer with whatever state the winner left behind.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from inventory_app.database.database import begin_write
from inventory_app.models.logs import OperationType
from inventory_app.models.reservations import Reservation, ReservationStatus
from inventory_app.services.exceptions import (
    InvalidTransition,
    ReservationExpired,
    ReservationNotFound,
    ReservationServiceError,
)
from inventory_app.services.logging_service import LoggingService
from inventory_app.utils.clock import utcnow

logger = logging.getLogger(__name__)

PENDING = ReservationStatus.PENDING.value
CONFIRMED = ReservationStatus.CONFIRMED.value
CANCELLED = ReservationStatus.CANCELLED.value
EXPIRED = ReservationStatus.EXPIRED.value


class TransitionOutcome(str, enum.Enum):
    APPLIED = "APPLIED"          # this call performed the transition
    IDEMPOTENT = "IDEMPOTENT"    # already in the requested terminal state
    CONFLICT = "CONFLICT"        # business rule forbids the transition
    NOT_FOUND = "NOT_FOUND"


@dataclass
class TransitionResult:
    outcome: TransitionOutcome
    reservation: Optional[Reservation] = None
    error: Optional[ReservationServiceError] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (TransitionOutcome.APPLIED, TransitionOutcome.IDEMPOTENT)

    def unwrap(self) -> Reservation:
        """Return the reservation, or raise the error carried by a failed outcome."""
        if self.error is not None:
            raise self.error
        return self.reservation


def _idempotent(reservation: Reservation) -> TransitionResult:
    return TransitionResult(TransitionOutcome.IDEMPOTENT, reservation)


def _conflict(reservation: Reservation, error: ReservationServiceError) -> TransitionResult:
    return TransitionResult(TransitionOutcome.CONFLICT, reservation, error)


def resolve_confirm(reservation: Reservation, now: datetime) -> Optional[TransitionResult]:
    """Result of confirming `reservation` as observed, or None if it is confirmable."""
    if reservation.status == CONFIRMED:
        return _idempotent(reservation)
    if reservation.status in (CANCELLED, EXPIRED):
        return _conflict(reservation, InvalidTransition("confirm", reservation.status))
    if reservation.expires_at <= now:
        # Past its deadline but not swept yet: never confirmable
        return _conflict(reservation, ReservationExpired(reservation.expires_at))
    return None


def resolve_cancel(reservation: Reservation) -> Optional[TransitionResult]:
    """Result of cancelling `reservation` as observed, or None if it is cancellable."""
    if reservation.status in (CANCELLED, EXPIRED):
        # The held quantity is already released
        return _idempotent(reservation)
    if reservation.status == CONFIRMED:
        return _conflict(reservation, InvalidTransition("cancel", reservation.status))
    return None


class LifecycleService:

    def __init__(self, db: Session, clock=utcnow):
        self.db = db
        self.clock = clock
        self.audit = LoggingService(db, clock)

    def _load(self, reservation_id: str) -> Optional[Reservation]:
        # populate_existing: a guarded update bypasses the identity map
        return (
            self.db.query(Reservation)
            .populate_existing()
            .filter(Reservation.id == reservation_id)
            .first()
        )

    def _guarded_update(self, reservation_id: str, guards: List[Any], values: Dict[str, Any]) -> bool:
        """Apply `values` only if every guard still holds; True if the row changed."""
        affected = self.db.query(Reservation).filter(
            Reservation.id == reservation_id, *guards
        ).update(values, synchronize_session=False)
        return affected == 1

    def confirm(self, reservation_id: str) -> TransitionResult:
        """PENDING -> CONFIRMED, only before the reservation expires."""
        now = self.clock()

        try:
            begin_write(self.db)
            reservation = self._load(reservation_id)
            if reservation is None:
                result = TransitionResult(TransitionOutcome.NOT_FOUND, error=ReservationNotFound(reservation_id))
            else:
                result = resolve_confirm(reservation, now)

            if result is None:
                won = self._guarded_update(
                    reservation_id,
                    [Reservation.status == PENDING, Reservation.expires_at > now],
                    {"status": CONFIRMED, "confirmed_at": now},
                )
                current = self._load(reservation_id)
                if won:
                    result = TransitionResult(TransitionOutcome.APPLIED, current)
                    self.audit.log_operation(
                        OperationType.RESERVATION_CONFIRMED,
                        item_id=current.item_id,
                        reservation_id=current.id,
                        customer_id=current.customer_id,
                        quantity=current.quantity
                    )
                else:
                    result = self._reconcile(current, resolve_confirm(current, now), "confirm")

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self._log_result("confirm", reservation_id, result)
        return result

    def cancel(self, reservation_id: str) -> TransitionResult:
        """PENDING -> CANCELLED. Cancelling a CANCELLED or EXPIRED reservation is a no-op."""
        now = self.clock()

        try:
            begin_write(self.db)
            reservation = self._load(reservation_id)
            if reservation is None:
                result = TransitionResult(TransitionOutcome.NOT_FOUND, error=ReservationNotFound(reservation_id))
            else:
                result = resolve_cancel(reservation)

            if result is None:
                won = self._guarded_update(
                    reservation_id,
                    [Reservation.status == PENDING],
                    {"status": CANCELLED, "cancelled_at": now},
                )
                current = self._load(reservation_id)
                if won:
                    result = TransitionResult(TransitionOutcome.APPLIED, current)
                    self.audit.log_operation(
                        OperationType.RESERVATION_CANCELLED,
                        item_id=current.item_id,
                        reservation_id=current.id,
                        customer_id=current.customer_id,
                        quantity=current.quantity
                    )
                else:
                    result = self._reconcile(current, resolve_cancel(current), "cancel")

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self._log_result("cancel", reservation_id, result)
        return result

    def _reconcile(self, current: Reservation, resolved: Optional[TransitionResult], action: str) -> TransitionResult:
        """
        Answer for a caller whose guarded update changed nothing.

        `resolved` is the outcome computed from the row as it is now. A row
        that still looks eligible cannot have made the guard fail, so it is
        reported as a conflict on its current status.
        """
        if resolved is not None:
            return resolved
        return _conflict(current, InvalidTransition(action, current.status))

    def expire_due(self) -> Dict[str, Any]:
        """
        Move every PENDING reservation whose deadline has passed to EXPIRED.

        One set-based update; concurrent sweeps split the due rows between
        them and each caller reports only the ids it changed.
        """
        now = self.clock()
        due = [Reservation.status == PENDING, Reservation.expires_at <= now]
        values = {"status": EXPIRED, "expired_at": now}

        try:
            begin_write(self.db)
            if self.db.get_bind().dialect.update_returning:
                stmt = (
                    update(Reservation)
                    .where(*due)
                    .values(**values)
                    .returning(Reservation.id)
                    .execution_options(synchronize_session=False)
                )
                expired_ids = list(self.db.execute(stmt).scalars().all())
            else:
                # No UPDATE ... RETURNING: claim the due rows first, skipping those another sweep holds
                expired_ids = [
                    row.id for row in
                    self.db.query(Reservation.id).filter(*due).with_for_update(skip_locked=True).all()
                ]
                if expired_ids:
                    self.db.query(Reservation).filter(
                        Reservation.id.in_(expired_ids), *due
                    ).update(values, synchronize_session=False)

            if expired_ids:
                self.audit.log_operation(
                    OperationType.RESERVATIONS_EXPIRED,
                    quantity=len(expired_ids),
                    details={"expired_ids": expired_ids}
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Expiry sweep complete: %s reservations expired", len(expired_ids))
        return {"expired_count": len(expired_ids), "expired_ids": expired_ids}

    def _log_result(self, action: str, reservation_id: str, result: TransitionResult):
        if result.outcome == TransitionOutcome.APPLIED:
            logger.info("Reservation %s: %s applied", reservation_id, action)
        elif result.outcome == TransitionOutcome.IDEMPOTENT:
            logger.debug("Reservation %s: %s already applied, status %s", reservation_id, action, result.reservation.status)
        else:
            logger.info("Reservation %s: %s refused (%s)", reservation_id, action, result.error.code)
