"""
Pydantic models for the recommendation endpoint.

Models cover:
- Recommendation modes and reasons
- The POST /api/recommend request body
- Recommendations as returned to clients (ephemeral, never persisted)
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config.constants import SEASONS


# =============================================================================
# Enums
# =============================================================================

class RecommendationType(str, Enum):
    """Recommendation mode requested by the client."""
    SMART = "smart"
    RANDOM = "random"
    SEASONAL = "seasonal"
    SIMILAR = "similar"


class RecommendationReason(str, Enum):
    """Why an entry was suggested."""
    SEASONAL = "seasonal"                  # seasonal mode
    SEASONAL_MATCH = "seasonal_match"      # smart mode, outfit
    SEASONAL_ITEM = "seasonal_item"        # smart mode, clothing
    SIMILAR_CATEGORY = "similar_category"
    OUTFIT_MATCH = "outfit_match"
    RANDOM = "random"
    DEFAULT = "default"                    # canned fallback


# =============================================================================
# Request / Response
# =============================================================================

class RecommendRequest(BaseModel):
    """
    Request body for POST /api/recommend.

    ``type`` is validated by the engine so unknown modes produce the
    documented message; ``limit`` is clamped rather than rejected.
    """
    model_config = ConfigDict(populate_by_name=True)

    type: str = RecommendationType.SMART.value
    season: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")
    clothing_id: Optional[str] = Field(None, alias="clothingId")
    limit: Optional[int] = None

    @field_validator("season", "user_id", "clothing_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("season")
    @classmethod
    def check_season(cls, v):
        if v is not None and v not in SEASONS:
            raise ValueError(f"season must be one of: {', '.join(SEASONS)}")
        return v


class Recommendation(BaseModel):
    id: str                         # "<mode>_<kind>_<row id>"
    title: str
    description: str = ""
    image: str = ""
    type: str                       # clothing | outfit
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    season: Optional[str] = None
    reason: RecommendationReason
    confidence: float = Field(..., ge=0.0, le=1.0)
