"""
Search API Routes.

Keyword search over clothing and outfits, name suggestions and popular
terms. Routes use `def` because the catalog store client is synchronous.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from api.context import AppContext, get_context
from config.constants import DEFAULT_CATALOG_LIMITS as LIMITS
from config.constants import DEFAULT_SEARCH_CONFIG as SEARCH
from core.responses import Pagination, format_response
from core.utils import parse_csv


router = APIRouter(prefix="/api/search", tags=["Search"])


@router.get("")
def search(
    request: Request,
    q: Optional[str] = None,
    search_type: str = Query("all", alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(LIMITS.DEFAULT_PAGE_SIZE, ge=1, le=LIMITS.MAX_PAGE_SIZE),
    category: Optional[str] = None,
    season: Optional[str] = None,
    tags: Optional[str] = None,
    sort_by: str = Query("relevance", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """
    Ranked search across clothing and outfits.

    Results are merged, sorted, then paginated over the ranked candidates;
    ``stats`` carries the exact match counts and a ``truncated`` flag.
    """

    def build():
        result = ctx.search.search(
            q,
            type=search_type,
            page=page,
            limit=limit,
            category=category,
            season=season,
            tags=parse_csv(tags),
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return format_response(
            result.results,
            Pagination.build(page, limit, result.total),
            stats=result.stats,
            query=result.query,
        )

    return ctx.cached(request, build)


@router.get("/suggestions")
def suggestions(
    request: Request,
    q: Optional[str] = None,
    limit: int = Query(SEARCH.SUGGESTION_DEFAULT_LIMIT, ge=1),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    return ctx.cached(request, lambda: format_response(ctx.search.suggestions(q, limit)))


@router.get("/popular")
def popular(
    request: Request,
    limit: int = Query(SEARCH.SUGGESTION_DEFAULT_LIMIT, ge=1),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    return ctx.cached(request, lambda: format_response(ctx.search.popular(limit)))
