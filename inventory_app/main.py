import logging
import time

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory_app.config import settings
from inventory_app.database import database
from inventory_app.logging_config import configure_logging
from inventory_app.middleware.request_logging import RequestLoggingMiddleware
from inventory_app.models import items, reservations, logs
from inventory_app.schemas.common import HealthCheck
from inventory_app.services.exceptions import ErrorCode, ReservationServiceError
from inventory_app.utils.clock import utcnow

API_VERSION = "1.0.0"

configure_logging()
logger = logging.getLogger(__name__)

# Create the tables if they do not exist yet
database.Base.metadata.create_all(bind=database.engine)

app = FastAPI(title="Inventory Reservation API", version=API_VERSION)

started_at = time.monotonic()

request_logging = RequestLoggingMiddleware()
app.middleware("http")(request_logging)


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


# ==================== ERROR HANDLERS ====================

@app.exception_handler(ReservationServiceError)
async def handle_service_error(request: Request, exc: ReservationServiceError):
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return error_response(400, ErrorCode.VALIDATION_ERROR, "Validation failed", {"errors": errors})


@app.exception_handler(OperationalError)
async def handle_storage_unavailable(request: Request, exc: OperationalError):
    # Lock wait timeout, lost connection: the whole operation can be retried
    logger.warning("Transient storage failure on %s %s: %s", request.method, request.url.path, exc.orig)
    return error_response(
        503, ErrorCode.STORAGE_UNAVAILABLE,
        "Storage temporarily unavailable, retry the request",
        {"retryable": True}
    )


@app.exception_handler(SQLAlchemyError)
async def handle_storage_error(request: Request, exc: SQLAlchemyError):
    logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(500, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, "NOT_FOUND", f"Route {request.method} {request.url.path} not found")
    return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))


# ==================== SERVICE ENDPOINTS ====================

@app.get("/health", response_model=HealthCheck)
def health_check(db: Session = Depends(database.get_db)):
    try:
        db.execute(text("SELECT 1"))
        database_status = "connected"
    except SQLAlchemyError as e:
        logger.error("Health check database probe failed: %s", e)
        database_status = "disconnected"

    healthy = database_status == "connected"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utcnow().isoformat() + "Z",
        "database": database_status,
        "uptime": round(time.monotonic() - started_at, 3),
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)


@app.get("/v1")
def api_info():
    return {
        "version": API_VERSION,
        "api": "Inventory Reservation API",
        "environment": settings.environment,
    }


from inventory_app.routers import items, reservations, maintenance, logs
app.include_router(items.router)
app.include_router(reservations.router)
app.include_router(maintenance.router)
app.include_router(logs.router)
