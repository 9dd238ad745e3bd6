from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inventory_app.database import get_db
from inventory_app.schemas import reservations as reservation_schemas
from inventory_app.services.lifecycle_service import LifecycleService
from inventory_app.utils.clock import get_clock

router = APIRouter(
    prefix="/v1/maintenance",
    tags=["maintenance"],
)


@router.post("/expire-reservations", response_model=reservation_schemas.ExpireResponse)
def expire_reservations(db: Session = Depends(get_db), clock=Depends(get_clock)):
    """
    Expire every PENDING reservation past its deadline.

    Safe to call concurrently; answers 200 even when nothing was due.
    """
    lifecycle_service = LifecycleService(db, clock)
    result = lifecycle_service.expire_due()

    return {
        "data": result,
        "message": f"Successfully expired {result['expired_count']} reservations"
    }
