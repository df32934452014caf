"""
Recommendation routes.

POST is never cached (random and smart modes draw fresh samples); the
stats endpoint is cached with the recommend family TTL.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request

from api.context import AppContext, get_context
from core.responses import format_response
from recs.models import RecommendRequest


router = APIRouter(prefix="/api/recommend", tags=["Recommendations"])


@router.post("")
def recommend(
    payload: Optional[RecommendRequest] = Body(None),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """
    Ranked suggestions for one mode: smart (default), seasonal, similar, random.

    Store failures degrade to the canned defaults; an unknown type or a bad
    clothingId is a 400 and a missing similar target is a 404.
    """
    payload = payload or RecommendRequest()
    results = ctx.recommender.recommend(
        type=payload.type,
        season=payload.season,
        user_id=payload.user_id,
        clothing_id=payload.clothing_id,
        limit=payload.limit,
    )
    return format_response(
        [r.model_dump(mode="json", exclude_none=True) for r in results],
        message="Recommendations generated",
    )


@router.get("/stats")
def recommendation_stats(request: Request, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    return ctx.cached(request, lambda: format_response(ctx.recommender.stats()))
