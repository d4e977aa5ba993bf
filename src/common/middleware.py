"""
FastAPI middleware for request tracking.

Every request gets a correlation ID (taken from X-Request-ID or generated)
and the forwarded X-User name, both held in the logging context for the
whole request. Conversion and analysis calls are logged with their body
size so large payloads can be traced back to a caller.
"""

import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.common.logging_config import (
    clear_request_context,
    get_structured_logger,
    set_request_id,
    set_username,
)

logger = get_structured_logger(__name__)

CONVERSION_PATHS = ("/api/v1/convert", "/api/v1/analyze")


def _forwarded_user(request: Request) -> Optional[str]:
    user = request.headers.get("X-User")
    if user is None or not user.strip():
        return None
    return user.strip()


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track requests with correlation IDs and caller names.

    Adds the X-Request-ID response header and logs request/response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        user = _forwarded_user(request)
        set_username(user)
        path = request.url.path

        fields = {"method": request.method, "path": path, "user": user}
        if path in CONVERSION_PATHS:
            fields["content_length"] = request.headers.get("content-length")
        logger.info("Incoming request", **fields)

        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "Request completed",
                path=path,
                user=user,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return response
        except Exception as e:
            logger.error(
                "Request failed",
                path=path,
                user=user,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        finally:
            clear_request_context()
