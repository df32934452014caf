"""
Search Module: keyword search over the catalog with relevance ranking.

Provides:
- SearchService: merged clothing/outfit search, suggestions, popular terms
- Ranking helpers: relevance score, <mark> highlights, result ordering
"""

from search.models import SearchPage, SearchResult, SearchType
from search.ranking import generate_highlights, highlight_text, relevance_score, sort_by_relevance
from search.service import SearchService

__all__ = [
    "SearchService",
    "SearchPage",
    "SearchResult",
    "SearchType",
    "relevance_score",
    "highlight_text",
    "generate_highlights",
    "sort_by_relevance",
]
