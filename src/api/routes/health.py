"""
Health check endpoints.

A store outage degrades the reported status but never turns the health
endpoints into a 5xx.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from api.context import AppContext, get_context
from config.constants import CLOTHING_TABLE, OUTFITS_TABLE
from core.errors import StoreError
from core.logging import get_logger
from core.responses import format_response, utc_now_iso


logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["Health"])


@router.get("")
def health_check(request: Request, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    """Basic health check with store connectivity and latency."""

    def build() -> Dict[str, Any]:
        try:
            latency_ms = ctx.store.ping(CLOTHING_TABLE)
            database = {"status": "connected", "responseTime": latency_ms}
        except StoreError as e:
            logger.warning("Health check store ping failed", error=e.message)
            database = {"status": "disconnected", "responseTime": None}

        return format_response({
            "status": "ok" if database["status"] == "connected" else "degraded",
            "timestamp": utc_now_iso(),
            "service": "wardrobe-api",
            "version": ctx.settings.api_version,
            "environment": ctx.settings.environment,
            "backend": ctx.settings.catalog_backend,
            "database": database,
            "cache": ctx.cache.stats(),
        })

    # degraded bodies are never cached
    return ctx.cached(request, build, keep=lambda body: body["data"]["status"] == "ok")


@router.get("/detailed")
def detailed_health_check(ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    """Store latency and per-table row counts. Never cached."""
    start = time.perf_counter()
    tables: Dict[str, Any] = {}
    try:
        latency_ms = ctx.store.ping(CLOTHING_TABLE)
        tables = {
            CLOTHING_TABLE: {"count": ctx.store.count(CLOTHING_TABLE)},
            OUTFITS_TABLE: {"count": ctx.store.count(OUTFITS_TABLE)},
        }
        database = {"status": "connected", "responseTime": latency_ms, "tables": tables}
    except StoreError as e:
        logger.warning("Detailed health check failed", error=e.message)
        database = {"status": "disconnected", "responseTime": None, "tables": tables}

    return format_response({
        "status": "ok" if database["status"] == "connected" else "degraded",
        "timestamp": utc_now_iso(),
        "performance": {
            "responseTime": round((time.perf_counter() - start) * 1000, 2),
            "database": database,
        },
    })
