"""
Core Utility Functions.

Common helpers shared by the catalog, recommendation and search layers.
"""

import re
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Union


_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_valid_uuid(value: Any) -> bool:
    """
    Check that a value is a canonical RFC 4122 UUID string (versions 1-5).

    Examples:
        >>> is_valid_uuid("123e4567-e89b-12d3-a456-426614174000")
        True
        >>> is_valid_uuid("not-a-uuid")
        False
    """
    return isinstance(value, str) and bool(_UUID_RE.match(value))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a store timestamp into an aware datetime.

    Postgres returns ISO strings with a ``+00:00`` offset; a trailing ``Z`` and
    naive values are treated as UTC. Unparseable values return None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def season_for_month(month: int) -> str:
    """
    Map a calendar month to its (northern hemisphere) season.

    Examples:
        >>> season_for_month(4)
        'spring'
        >>> season_for_month(12)
        'winter'
    """
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "autumn"
    return "winter"


def parse_csv(value: Optional[str]) -> List[str]:
    """
    Split a comma-separated query param, dropping blanks.

    Examples:
        >>> parse_csv("casual, denim,,")
        ['casual', 'denim']
    """
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Strip tags and drop blanks, keeping order."""
    if not tags:
        return []
    return [tag.strip() for tag in tags if isinstance(tag, str) and tag.strip()]


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))
