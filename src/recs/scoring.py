"""
Smart-mode scoring.

    score = BASE
          + SEASON_BONUS            if record season is the target or "all"
          + sum over tags of min(TAG_WEIGHT * freq(tag), TAG_BONUS_CAP)
          + RECENT_BONUS            if created less than RECENT_DAYS ago
    clamped to MAX_SCORE
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, Mapping, Optional

from config.constants import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from core.utils import parse_timestamp, utc_now


def tag_frequency(records: Iterable[Mapping]) -> Counter:
    """Histogram of tags across every record in the candidate pool."""
    return Counter(tag for record in records for tag in (record.get("tags") or []))


def calculate_score(
    record: Mapping,
    season: str,
    frequencies: Mapping[str, int],
    now: Optional[datetime] = None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> float:
    score = config.BASE_SCORE

    if record.get("season") in (season, "all"):
        score += config.SEASON_BONUS

    for tag in record.get("tags") or []:
        freq = frequencies.get(tag, 0)
        if freq > 0:
            score += min(freq * config.TAG_WEIGHT, config.TAG_BONUS_CAP)

    created = parse_timestamp(record.get("created_at"))
    if created is not None:
        age_days = ((now or utc_now()) - created).total_seconds() / 86400
        if age_days < config.RECENT_DAYS:
            score += config.RECENT_BONUS

    return min(score, config.MAX_SCORE)
