"""
Response envelopes and exception handlers.

Success:
    {"success": true, "data": ..., "pagination": {...}, "message": "...", "timestamp": "..."}

Failure:
    {"success": false, "error": "...", "code": "...", "timestamp": "...",
     "path": "/api/...", "method": "GET", "details": ...}

``details`` is only included outside production.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.errors import AppError, StoreError
from core.logging import get_logger


logger = get_logger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Pagination(BaseModel):
    """Pagination block; serialized with camelCase keys (hasNext, hasPrev)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            pages=pages,
            has_next=page * limit < total,
            has_prev=page > 1,
        )


def format_response(
    data: Any,
    pagination: Optional[Pagination] = None,
    message: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build the success envelope. Extra keys (stats, query) are appended as-is."""
    body: Dict[str, Any] = {
        "success": True,
        "data": jsonable_encoder(data, by_alias=True),
        "timestamp": utc_now_iso(),
    }
    if pagination is not None:
        body["pagination"] = pagination.model_dump(by_alias=True)
    if message:
        body["message"] = message
    for key, value in extra.items():
        body[key] = jsonable_encoder(value, by_alias=True)
    return body


def format_error(
    error: Exception,
    request: Request,
    include_details: bool,
) -> Tuple[int, Dict[str, Any]]:
    """Build the failure envelope and the status code to send it with."""
    if isinstance(error, AppError):
        status_code = error.status_code
        message = error.message
        code = error.code
        details = error.details
    else:
        status_code = 500
        message = str(error) if include_details else "Internal server error"
        code = "INTERNAL_ERROR"
        details = repr(error)

    body: Dict[str, Any] = {
        "success": False,
        "error": message,
        "code": code,
        "timestamp": utc_now_iso(),
        "path": request.url.path,
        "method": request.method,
    }
    if include_details and details is not None:
        body["details"] = jsonable_encoder(details)
    return status_code, body


def register_exception_handlers(app: FastAPI, include_details: bool) -> None:
    """Render every error through the failure envelope."""

    def _render(error: Exception, request: Request) -> Response:
        status_code, body = format_error(error, request, include_details)
        if status_code == 204:
            return Response(status_code=204)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> Response:
        if isinstance(exc, StoreError):
            logger.error(
                "Store operation failed",
                error=exc.message,
                store_code=exc.store_code,
                hint=exc.hint,
            )
        else:
            logger.info("Request rejected", error=exc.message, code=exc.code)
        return _render(exc, request)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> Response:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        body = {
            "success": False,
            "error": message,
            "code": "VALIDATION_ERROR",
            "timestamp": utc_now_iso(),
            "path": request.url.path,
            "method": request.method,
        }
        if include_details:
            body["details"] = jsonable_encoder(errors)
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": message,
                "code": f"HTTP_{exc.status_code}",
                "timestamp": utc_now_iso(),
                "path": request.url.path,
                "method": request.method,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> Response:
        logger.exception("Unhandled error", error=str(exc), error_type=type(exc).__name__)
        return _render(exc, request)
