import uuid
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from inventory_app.database import get_db
from inventory_app.models.reservations import ReservationStatus
from inventory_app.schemas import reservations as reservation_schemas
from inventory_app.services.lifecycle_service import LifecycleService
from inventory_app.services.reservation_service import ReservationService
from inventory_app.utils.clock import get_clock

router = APIRouter(
    prefix="/v1/reservations",
    tags=["reservations"],
)


@router.post("", response_model=reservation_schemas.ReservationResponse, status_code=201)
def create_reservation(
    request: reservation_schemas.ReservationCreate,
    db: Session = Depends(get_db),
    clock=Depends(get_clock)
):
    """Hold `quantity` units of an item for a customer (status PENDING)."""
    expiry = None
    if request.expires_in_seconds is not None:
        expiry = timedelta(seconds=request.expires_in_seconds)

    reservation_service = ReservationService(db, clock)
    reservation = reservation_service.create_reservation(
        str(request.item_id),
        request.customer_id,
        request.quantity,
        expiry
    )
    return {"data": reservation}


@router.get("", response_model=reservation_schemas.ReservationListResponse)
def list_reservations(
    item_id: Optional[uuid.UUID] = Query(None),
    customer_id: Optional[str] = Query(None, max_length=255),
    status: Optional[ReservationStatus] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    reservation_service = ReservationService(db)
    reservations, total = reservation_service.list_reservations(
        item_id=str(item_id) if item_id else None,
        customer_id=customer_id,
        status=status.value if status else None,
        limit=limit,
        offset=offset
    )
    return {
        "data": reservations,
        "pagination": {"limit": limit, "offset": offset, "total": total}
    }


@router.get("/{reservation_id}", response_model=reservation_schemas.ReservationResponse)
def get_reservation(reservation_id: uuid.UUID, db: Session = Depends(get_db)):
    reservation_service = ReservationService(db)
    return {"data": reservation_service.get_reservation(str(reservation_id))}


@router.post("/{reservation_id}/confirm", response_model=reservation_schemas.ReservationResponse)
def confirm_reservation(reservation_id: uuid.UUID, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Confirm a PENDING reservation. Repeating the call returns the same result."""
    lifecycle_service = LifecycleService(db, clock)
    result = lifecycle_service.confirm(str(reservation_id))
    return {"data": result.unwrap()}


@router.post("/{reservation_id}/cancel", response_model=reservation_schemas.ReservationResponse)
def cancel_reservation(reservation_id: uuid.UUID, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Cancel a PENDING reservation, releasing its units. Repeating the call is a no-op."""
    lifecycle_service = LifecycleService(db, clock)
    result = lifecycle_service.cancel(str(reservation_id))
    return {"data": result.unwrap()}
