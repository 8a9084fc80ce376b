"""Request ID middleware — unique ID per request for log correlation.

Every request gets a UUID, either from the incoming X-Request-ID header
or auto-generated. The ID is bound to structlog's contextvars so it
appears in every log entry for that request (auth attempts, plant
changes), and it is returned in the response header. One access-log
line is written per request.

Exceptions nothing else handled are logged here with their traceback
and answered with the generic 500 body, so they still carry the
request ID.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from plant_tracker.errors import INTERNAL_ERROR_BODY

logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            logger.exception("request.unhandled_error", error_type=type(exc).__name__)
            response = JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

        logger.info(
            "http.request",
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )

        response.headers["X-Request-ID"] = request_id
        return response
