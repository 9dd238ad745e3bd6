import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inventory_app.database import get_db
from inventory_app.schemas import items as item_schemas
from inventory_app.services.item_service import ItemService
from inventory_app.utils.clock import get_clock

router = APIRouter(
    prefix="/v1/items",
    tags=["items"],
)


@router.post("", response_model=item_schemas.ItemResponse, status_code=201)
def create_item(item: item_schemas.ItemCreate, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Create an item with a fixed total quantity."""
    item_service = ItemService(db, clock)
    new_item = item_service.create_item(item.name, item.initial_quantity)
    return {"data": new_item}


@router.get("/{item_id}", response_model=item_schemas.ItemAvailabilityResponse)
def get_item(item_id: uuid.UUID, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Item record with its current availability breakdown."""
    item_service = ItemService(db, clock)
    item = item_service.get_item(str(item_id))
    availability = item_service.get_availability(item.id)

    return {
        "data": {
            "id": item.id,
            "name": item.name,
            "total_quantity": availability["total"],
            "reserved_quantity": availability["reserved"],
            "confirmed_quantity": availability["confirmed"],
            "available_quantity": availability["available"],
            "created_at": item.created_at,
            "updated_at": item.updated_at,
        }
    }
