from pydantic import BaseModel
from typing import Any, Dict, Optional


# Error envelope: {"error": {"code", "message", "details"}}
class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int


class HealthCheck(BaseModel):
    status: str  # 'healthy' | 'unhealthy'
    timestamp: str
    database: str  # 'connected' | 'disconnected'
    uptime: float
