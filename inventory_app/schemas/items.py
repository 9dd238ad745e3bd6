from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


# Request body for POST /v1/items
class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    initial_quantity: int = Field(..., gt=0, strict=True)


class Item(BaseModel):
    id: str
    name: str
    total_quantity: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Item plus the availability breakdown at the time of the read
class ItemWithAvailability(Item):
    reserved_quantity: int
    confirmed_quantity: int
    available_quantity: int


class ItemResponse(BaseModel):
    data: Item
    message: Optional[str] = None


class ItemAvailabilityResponse(BaseModel):
    data: ItemWithAvailability
    message: Optional[str] = None
