"""
Domain errors raised by the services.

Each error carries the machine-readable code and the HTTP status the API
layer answers with, plus structured details for the caller.
"""
from datetime import datetime
from typing import Any, Dict, Optional


class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"

    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"

    INSUFFICIENT_QUANTITY = "INSUFFICIENT_QUANTITY"
    RESERVATION_EXPIRED = "RESERVATION_EXPIRED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ReservationServiceError(Exception):
    code = ErrorCode.INTERNAL_ERROR
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailed(ReservationServiceError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class ItemNotFound(ReservationServiceError):
    code = ErrorCode.ITEM_NOT_FOUND
    status_code = 404

    def __init__(self, item_id: str):
        super().__init__(f"Item with ID {item_id} not found")
        self.item_id = item_id


class ReservationNotFound(ReservationServiceError):
    code = ErrorCode.RESERVATION_NOT_FOUND
    status_code = 404

    def __init__(self, reservation_id: str):
        super().__init__(f"Reservation with ID {reservation_id} not found")
        self.reservation_id = reservation_id


class InsufficientQuantity(ReservationServiceError):
    code = ErrorCode.INSUFFICIENT_QUANTITY
    status_code = 409

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Cannot reserve {requested} units. Only {available} available.",
            {"requested": requested, "available": available},
        )
        self.requested = requested
        self.available = available


class ReservationExpired(ReservationServiceError):
    code = ErrorCode.RESERVATION_EXPIRED
    status_code = 409

    def __init__(self, expired_at: datetime):
        super().__init__(
            "Cannot confirm expired reservation",
            {"expired_at": expired_at.isoformat()},
        )
        self.expired_at = expired_at


class InvalidTransition(ReservationServiceError):
    code = ErrorCode.INVALID_STATUS_TRANSITION
    status_code = 409

    def __init__(self, action: str, current_status: str):
        super().__init__(
            f"Cannot {action} {current_status} reservation",
            {"current_status": current_status},
        )
        self.action = action
        self.current_status = current_status
