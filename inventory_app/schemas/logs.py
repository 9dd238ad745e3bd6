from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime

from .common import Pagination


class OperationLogEntry(BaseModel):
    id: int
    operation_id: str
    timestamp: datetime
    operation_type: str
    status: str
    item_id: Optional[str] = None
    reservation_id: Optional[str] = None
    customer_id: Optional[str] = None
    quantity: Optional[int] = None
    error_message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    execution_time_ms: Optional[int] = None
    api_endpoint: Optional[str] = None

    class Config:
        from_attributes = True


class OperationLogListResponse(BaseModel):
    data: List[OperationLogEntry]
    pagination: Pagination
