"""
Outfit CRUD routes.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from api.context import AppContext, get_context
from catalog.models import OutfitCreate, OutfitUpdate
from config.constants import DEFAULT_CATALOG_LIMITS as LIMITS
from core.responses import Pagination, format_response
from core.utils import parse_csv


FAMILY = "/api/outfits"

router = APIRouter(prefix=FAMILY, tags=["Outfits"])


@router.get("")
def list_outfits(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(LIMITS.DEFAULT_PAGE_SIZE, ge=1, le=LIMITS.MAX_PAGE_SIZE),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    season: Optional[str] = None,
    tags: Optional[str] = None,
    q: Optional[str] = None,
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    def build():
        outfits, total = ctx.outfits.list(
            page,
            limit,
            sort_by=sort_by,
            ascending=sort_order == "asc",
            season=season,
            tags=parse_csv(tags),
            q=q,
        )
        return format_response(outfits, Pagination.build(page, limit, total))

    return ctx.cached(request, build)


# Declared before /{outfit_id} so "stats" is not taken for an id
@router.get("/stats/overview")
def outfit_stats(request: Request, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    return ctx.cached(request, lambda: format_response(ctx.outfits.stats()))


@router.get("/{outfit_id}")
def get_outfit(outfit_id: str, request: Request, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    return ctx.cached(request, lambda: format_response(ctx.outfits.get(outfit_id)))


@router.post("", status_code=201)
def create_outfit(payload: OutfitCreate, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    outfit = ctx.outfits.create(payload)
    ctx.invalidate(FAMILY)
    return format_response(outfit, message="Outfit created")


@router.put("/{outfit_id}")
def update_outfit(
    outfit_id: str,
    payload: OutfitUpdate,
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    outfit = ctx.outfits.update(outfit_id, payload)
    ctx.invalidate(FAMILY)
    return format_response(outfit, message="Outfit updated")


@router.delete("/{outfit_id}")
def delete_outfit(outfit_id: str, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    ctx.outfits.delete(outfit_id)
    ctx.invalidate(FAMILY)
    return format_response(None, message="Outfit deleted")
