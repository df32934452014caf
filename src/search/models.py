"""
Pydantic models for the search API.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from catalog.models import ClothingSummary


# ============================================================================
# Enums
# ============================================================================

class SearchType(str, Enum):
    """Which entity kinds a search covers."""
    CLOTHING = "clothing"
    OUTFITS = "outfits"
    ALL = "all"


class SearchSort(str, Enum):
    RELEVANCE = "relevance"
    NAME = "name"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ============================================================================
# Results
# ============================================================================

class Highlight(BaseModel):
    """A matched field with every keyword occurrence wrapped in <mark>."""
    field: str
    value: Union[str, List[str]]


class SearchResult(BaseModel):
    id: str
    name: str
    type: str                                   # clothing | outfit
    score: int = Field(0, ge=0)
    highlights: List[Highlight] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClothingSearchResult(SearchResult):
    type: str = "clothing"
    image: str = ""
    category: str = ""


class OutfitSearchResult(SearchResult):
    type: str = "outfit"
    description: str = ""
    items: List[ClothingSummary] = Field(default_factory=list)
    item_count: int = 0
    season: str = "all"
    thumbnail: str = ""


class SearchStats(BaseModel):
    """Exact match counts; ``truncated`` when only part of them was ranked."""
    total: int = 0
    clothing: int = 0
    outfits: int = 0
    truncated: bool = False


class PopularTerm(BaseModel):
    term: str
    type: str                                   # tag | item
    count: int


class SearchPage(BaseModel):
    """One page of merged results plus stats over the full merged set."""
    results: List[Union[ClothingSearchResult, OutfitSearchResult]]
    stats: SearchStats
    total: int
    query: Dict[str, Union[str, int]]
