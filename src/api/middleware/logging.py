"""
Per-request access logging.

Each request gets an id (taken from ``X-Request-ID`` when the caller sends
a sane one) that is bound to every log line emitted while it runs and
echoed back in the response headers.
"""

import re
import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.config import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

_CALLER_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Polled by load balancers; logged at debug only
_QUIET_PATHS = frozenset({"/health", "/api/health"})


def resolve_request_id(header: str | None) -> str:
    if header and _CALLER_ID.fullmatch(header):
        return header
    return uuid.uuid4().hex[:12]


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = resolve_request_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id
        clear_request_context()
        bind_request_context(request_id=request_id)

        path = request.url.path
        log = logger.debug if path in _QUIET_PATHS else logger.info
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=path,
                error=type(e).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        else:
            duration_ms = (time.perf_counter() - started) * 1000
            log(
                "request_handled",
                method=request.method,
                path=path,
                status=response.status_code,
                client=request.client.host if request.client else None,
                duration_ms=round(duration_ms, 2),
            )
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
            return response
        finally:
            clear_request_context()
