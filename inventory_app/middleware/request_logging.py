"""
Request logging middleware.

Assigns every request an id (taken from X-Request-Id when the caller sends
one), logs method, path, status and duration, and echoes the id back.
"""
import logging
import time
import uuid
from typing import Any, Callable

from fastapi import Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"


class RequestLoggingMiddleware:

    def __init__(self, skip_paths=None):
        # Health probes are not logged
        self.skip_paths = set(skip_paths or {"/health"})

    async def __call__(self, request: Request, call_next: Callable) -> Any:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id

        if request.url.path not in self.skip_paths:
            logger.info(
                "%s %s -> %s (%.1f ms) [%s]",
                request.method, request.url.path, response.status_code, duration_ms, request_id
            )
        return response
