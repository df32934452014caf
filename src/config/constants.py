"""
Application constants and algorithm configuration.

These are values that don't change based on environment but may need
to be tuned or referenced across the codebase.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


# =============================================================================
# Catalog Vocabulary
# =============================================================================

CATEGORIES: Tuple[str, ...] = ("top", "bottom", "dress", "outerwear", "shoes", "accessory")
SEASONS: Tuple[str, ...] = ("spring", "summer", "autumn", "winter", "all")

CLOTHING_TABLE = "clothing"
OUTFITS_TABLE = "outfits"


@dataclass(frozen=True)
class CatalogLimits:
    """Field limits enforced on clothing and outfit writes."""

    NAME_MAX_LENGTH: int = 50
    DESCRIPTION_MAX_LENGTH: int = 200
    MAX_TAGS: int = 10
    TAG_MAX_LENGTH: int = 20
    MIN_OUTFIT_ITEMS: int = 1
    MAX_OUTFIT_ITEMS: int = 10

    # List endpoints
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100


DEFAULT_CATALOG_LIMITS = CatalogLimits()


# =============================================================================
# Recommendation Configuration
# =============================================================================

@dataclass(frozen=True)
class RecommendationConfig:
    """Weights and limits for the recommendation engine."""

    DEFAULT_LIMIT: int = 10
    MAX_LIMIT: int = 50

    # Candidate pool multipliers (relative to the requested limit)
    OUTFIT_POOL_FACTOR: int = 2
    CLOTHING_POOL_FACTOR: int = 3

    # Smart scoring
    BASE_SCORE: float = 0.5
    SEASON_BONUS: float = 0.3
    TAG_WEIGHT: float = 0.01
    TAG_BONUS_CAP: float = 0.2
    RECENT_BONUS: float = 0.1
    RECENT_DAYS: int = 7
    MAX_SCORE: float = 1.0

    # Fixed confidences per mode
    CONFIDENCE: Dict[str, float] = field(default_factory=lambda: {
        "seasonal_outfit": 0.8,
        "seasonal_clothing": 0.7,
        "similar_category": 0.8,
        "outfit_match": 0.9,
        "random": 0.5,
        "default": 0.6,
    })


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()


# =============================================================================
# Search Configuration
# =============================================================================

@dataclass(frozen=True)
class SearchScoringConfig:
    """Field weights for the relevance score."""

    NAME_EXACT: int = 100
    NAME_CONTAINS: int = 50
    DESCRIPTION_CONTAINS: int = 30
    TAG_EXACT: int = 40
    TAG_CONTAINS: int = 20
    CATEGORY_CONTAINS: int = 35
    SEASON_CONTAINS: int = 25

    HIGHLIGHT_OPEN: str = "<mark>"
    HIGHLIGHT_CLOSE: str = "</mark>"

    # Rows fetched per entity kind before merging and paginating
    MAX_CANDIDATES_PER_KIND: int = 500

    # Outfit results resolve a short preview of their items
    OUTFIT_PREVIEW_ITEMS: int = 3

    # Suggestions / popular terms
    SUGGESTION_MIN_LENGTH: int = 2
    SUGGESTION_DEFAULT_LIMIT: int = 10
    SUGGESTION_MAX_LIMIT: int = 20


DEFAULT_SEARCH_CONFIG = SearchScoringConfig()


# =============================================================================
# Response Cache TTLs (seconds)
# =============================================================================

CACHE_TTLS: Dict[str, int] = {
    "/api/recommend": 600,
    "/api/clothing": 300,
    "/api/outfits": 300,
    "/api/search": 180,
    "/api/health": 60,
}
DEFAULT_CACHE_TTL = 120

# Writes to a key family invalidate these cached families as well
CACHE_INVALIDATION: Dict[str, Tuple[str, ...]] = {
    "/api/clothing": ("/api/clothing", "/api/outfits", "/api/recommend", "/api/search"),
    "/api/outfits": ("/api/outfits", "/api/recommend", "/api/search"),
}


# =============================================================================
# Upload Configuration
# =============================================================================

# Maximum output height per quality level; images are never enlarged
UPLOAD_QUALITY_HEIGHTS: Dict[str, int] = {
    "high": 1200,
    "medium": 800,
    "low": 600,
}
MOBILE_MAX_HEIGHT = 600
BACKGROUND_BRIGHTNESS_THRESHOLD = 200
MAX_BATCH_FILES = 10
