"""
Request tracing middleware.

Every request gets a request id bound into the structlog context, one
completion log line with status and timing, and the X-Request-ID,
X-Response-Time and X-API-Version response headers. Health checks are
logged at DEBUG so they do not drown the request log.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.logging import bind_context, clear_context, get_logger


logger = get_logger(__name__)

HEALTH_PREFIX = "/api/health"


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Usage:
        app.add_middleware(RequestTracingMiddleware, api_version=settings.api_version)
    """

    def __init__(self, app: ASGIApp, api_version: str = "1.0.0"):
        super().__init__(app)
        self.api_version = api_version

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        path = request.url.path
        bind_context(request_id=request_id, method=request.method, path=path)
        log = logger.debug if path.startswith(HEALTH_PREFIX) else logger.info

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            clear_context()

        log(
            "Request completed",
            request_id=request_id,
            method=request.method,
            path=path,
            query=str(request.query_params) or None,
            status_code=response.status_code,
            duration_ms=round(elapsed_ms, 2),
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
        response.headers["X-API-Version"] = self.api_version
        return response
