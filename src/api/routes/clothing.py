"""
Clothing CRUD routes.

Writes invalidate cached clothing responses and every family derived from
clothing (outfits, recommendations, search).
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from api.context import AppContext, get_context
from catalog.models import ClothingBatchRequest, ClothingCreate, ClothingUpdate
from config.constants import DEFAULT_CATALOG_LIMITS as LIMITS
from core.responses import Pagination, format_response
from core.utils import parse_csv


FAMILY = "/api/clothing"

router = APIRouter(prefix=FAMILY, tags=["Clothing"])


@router.get("")
def list_clothing(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(LIMITS.DEFAULT_PAGE_SIZE, ge=1, le=LIMITS.MAX_PAGE_SIZE),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    category: Optional[str] = None,
    tags: Optional[str] = None,
    q: Optional[str] = None,
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    def build():
        items, total = ctx.clothing.list(
            page,
            limit,
            sort_by=sort_by,
            ascending=sort_order == "asc",
            category=category,
            tags=parse_csv(tags),
            q=q,
        )
        return format_response(items, Pagination.build(page, limit, total))

    return ctx.cached(request, build)


@router.get("/{item_id}")
def get_clothing(item_id: str, request: Request, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    return ctx.cached(request, lambda: format_response(ctx.clothing.get(item_id)))


@router.post("", status_code=201)
def create_clothing(payload: ClothingCreate, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    item = ctx.clothing.create(payload)
    ctx.invalidate(FAMILY)
    return format_response(item, message="Clothing item created")


@router.put("/{item_id}")
def update_clothing(
    item_id: str,
    payload: ClothingUpdate,
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    item = ctx.clothing.update(item_id, payload)
    ctx.invalidate(FAMILY)
    return format_response(item, message="Clothing item updated")


@router.delete("/{item_id}")
def delete_clothing(item_id: str, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    ctx.clothing.delete(item_id)
    ctx.invalidate(FAMILY)
    return format_response(None, message="Clothing item deleted")


@router.post("/batch")
def batch_clothing(payload: ClothingBatchRequest, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    """Bulk delete, tag replacement or category move."""
    items = ctx.clothing.batch(payload)
    ctx.invalidate(FAMILY)
    return format_response(
        items,
        message=f"Batch {payload.operation} applied",
        affected=len(items),
    )
