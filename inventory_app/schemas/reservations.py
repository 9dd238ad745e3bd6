import uuid
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from inventory_app.models.reservations import ReservationStatus
from .common import Pagination


class ReservationCreate(BaseModel):
    item_id: uuid.UUID
    customer_id: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., gt=0, strict=True)
    # Hold duration; the configured default applies when omitted
    expires_in_seconds: Optional[int] = Field(None, ge=1, le=86400)


class Reservation(BaseModel):
    id: str
    item_id: str
    customer_id: str
    quantity: int
    status: ReservationStatus
    expires_at: datetime
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReservationResponse(BaseModel):
    data: Reservation
    message: Optional[str] = None


class ReservationListResponse(BaseModel):
    data: List[Reservation]
    pagination: Pagination


# --- Expiry sweep ---
class ExpireResult(BaseModel):
    expired_count: int
    expired_ids: List[str]


class ExpireResponse(BaseModel):
    data: ExpireResult
    message: Optional[str] = None
