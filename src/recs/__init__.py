"""
Recommendation module.

Provides:
- RecommendationEngine: seasonal / similar / random / smart modes with a
  canned fallback when the catalog store fails
- Scoring helpers for the smart mode
"""

from recs.engine import RecommendationEngine, default_recommendations
from recs.models import Recommendation, RecommendationReason, RecommendationType, RecommendRequest
from recs.scoring import calculate_score, tag_frequency

__all__ = [
    "RecommendationEngine",
    "default_recommendations",
    "Recommendation",
    "RecommendationReason",
    "RecommendationType",
    "RecommendRequest",
    "calculate_score",
    "tag_frequency",
]
