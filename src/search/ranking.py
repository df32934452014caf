"""
Relevance scoring, highlighting and ordering for search results.

Score (keyword compared case-insensitively):

    name        100 exact / 50 contains
    description  30 contains
    each tag     40 exact / 20 contains
    category     35 contains
    season       25 contains
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Sequence

from config.constants import DEFAULT_SEARCH_CONFIG, SearchScoringConfig
from core.utils import parse_timestamp
from search.models import Highlight, SearchResult


_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def _contains(value: Any, needle: str) -> bool:
    return isinstance(value, str) and needle in value.lower()


def relevance_score(
    record: Mapping,
    keyword: str,
    config: SearchScoringConfig = DEFAULT_SEARCH_CONFIG,
) -> int:
    """
    Weighted field-match score for one record.

    Examples:
        >>> relevance_score({"name": "Denim Jacket", "tags": ["denim", "casual"]}, "denim")
        90
    """
    needle = keyword.lower()
    score = 0

    name = record.get("name")
    if isinstance(name, str):
        if name.lower() == needle:
            score += config.NAME_EXACT
        elif needle in name.lower():
            score += config.NAME_CONTAINS

    if _contains(record.get("description"), needle):
        score += config.DESCRIPTION_CONTAINS

    for tag in record.get("tags") or []:
        if not isinstance(tag, str):
            continue
        if tag.lower() == needle:
            score += config.TAG_EXACT
        elif needle in tag.lower():
            score += config.TAG_CONTAINS

    if _contains(record.get("category"), needle):
        score += config.CATEGORY_CONTAINS
    if _contains(record.get("season"), needle):
        score += config.SEASON_CONTAINS

    return score


def highlight_text(
    text: str,
    keyword: str,
    config: SearchScoringConfig = DEFAULT_SEARCH_CONFIG,
) -> str:
    """
    Wrap every case-insensitive occurrence of ``keyword`` in highlight marks.

    The keyword is matched literally, never as a pattern.

    Examples:
        >>> highlight_text("Denim jacket, DENIM cut", "denim")
        '<mark>Denim</mark> jacket, <mark>DENIM</mark> cut'
    """
    if not text or not keyword:
        return text
    pattern = re.compile(re.escape(keyword), re.IGNORECASE)
    return pattern.sub(
        lambda m: f"{config.HIGHLIGHT_OPEN}{m.group(0)}{config.HIGHLIGHT_CLOSE}",
        text,
    )


def generate_highlights(
    record: Mapping,
    keyword: str,
    config: SearchScoringConfig = DEFAULT_SEARCH_CONFIG,
) -> List[Highlight]:
    needle = keyword.lower()
    highlights = []

    for field in ("name", "description"):
        value = record.get(field)
        if _contains(value, needle):
            highlights.append(Highlight(field=field, value=highlight_text(value, keyword, config)))

    matched_tags = [t for t in (record.get("tags") or []) if _contains(t, needle)]
    if matched_tags:
        highlights.append(Highlight(
            field="tags",
            value=[highlight_text(t, keyword, config) for t in matched_tags],
        ))

    return highlights


def _created(result: SearchResult) -> datetime:
    return parse_timestamp(result.created_at) or _EPOCH


def sort_by_relevance(results: Sequence[SearchResult]) -> List[SearchResult]:
    """Descending score, clothing before outfits, then newest first."""
    return sorted(
        results,
        key=lambda r: (-r.score, 0 if r.type == "clothing" else 1, -_created(r).timestamp()),
    )


def sort_results(
    results: Sequence[SearchResult],
    sort_by: str,
    descending: bool = True,
) -> List[SearchResult]:
    if sort_by == "relevance":
        return sort_by_relevance(results)
    if sort_by == "name":
        return sorted(results, key=lambda r: r.name.lower(), reverse=descending)
    return sorted(results, key=_created, reverse=descending)


def suggestion_order(names: Sequence[str], keyword: str) -> List[str]:
    """
    Dedupe names, then put prefix matches first and shorter names first.

    Examples:
        >>> suggestion_order(["Blue Denim", "Denim Jacket", "Denim"], "denim")
        ['Denim', 'Denim Jacket', 'Blue Denim']
    """
    needle = keyword.lower()
    unique: Dict[str, None] = dict.fromkeys(n for n in names if n)
    return sorted(unique, key=lambda n: (not n.lower().startswith(needle), len(n)))
