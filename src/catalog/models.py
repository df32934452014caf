"""
Pydantic models for clothing items and outfits.

Covers:
- Catalog vocabulary (categories, seasons)
- Stored rows as returned to clients
- Create/update/batch request bodies with field limits
"""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from config.constants import DEFAULT_CATALOG_LIMITS as LIMITS
from core.utils import clean_tags


# =============================================================================
# Enums
# =============================================================================

class Category(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    DRESS = "dress"
    OUTERWEAR = "outerwear"
    SHOES = "shoes"
    ACCESSORY = "accessory"


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"
    ALL = "all"


# =============================================================================
# Shared validators
# =============================================================================

def _validate_name(value: str) -> str:
    name = value.strip() if isinstance(value, str) else ""
    if not name:
        raise ValueError("name must be a non-empty string")
    if len(name) > LIMITS.NAME_MAX_LENGTH:
        raise ValueError(f"name must be at most {LIMITS.NAME_MAX_LENGTH} characters")
    return name


def _validate_clothing_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    if len(tags) > LIMITS.MAX_TAGS:
        raise ValueError(f"at most {LIMITS.MAX_TAGS} tags are allowed")
    for tag in tags:
        if len(tag) > LIMITS.TAG_MAX_LENGTH:
            raise ValueError(f"tags must be at most {LIMITS.TAG_MAX_LENGTH} characters")
    return clean_tags(tags)


# =============================================================================
# Stored rows
# =============================================================================

class ClothingItem(BaseModel):
    id: str
    name: str
    category: str
    image: str = ""
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v):
        return v or []

    @field_validator("image", mode="before")
    @classmethod
    def default_image(cls, v):
        return v or ""


class ClothingSummary(BaseModel):
    """Item preview embedded in outfit responses."""
    id: str
    name: str
    image: str = ""
    category: str

    @field_validator("image", mode="before")
    @classmethod
    def default_image(cls, v):
        return v or ""


class Outfit(BaseModel):
    id: str
    name: str
    description: str = ""
    items: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    season: str = Season.ALL.value
    thumbnail: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("items", "tags", mode="before")
    @classmethod
    def default_lists(cls, v):
        return v or []

    @field_validator("description", "thumbnail", mode="before")
    @classmethod
    def default_text(cls, v):
        return v or ""

    @field_validator("season", mode="before")
    @classmethod
    def default_season(cls, v):
        return v or Season.ALL.value


class OutfitDetail(Outfit):
    """Outfit with its clothing items resolved (missing items are skipped)."""
    items: List[ClothingItem] = Field(default_factory=list)  # type: ignore[assignment]
    item_count: int = 0


# =============================================================================
# Requests
# =============================================================================

class NamedRequest(BaseModel):
    """Write bodies share the trimmed, length-checked name."""
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        return _validate_name(v)


class ClothingCreate(NamedRequest):
    category: Category
    image: str = ""
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v):
        return _validate_clothing_tags(v)


class ClothingUpdate(NamedRequest):
    """PUT body: name and category are required, image/tags only when sent."""
    category: Category
    image: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v):
        return _validate_clothing_tags(v)


class ClothingBatchRequest(BaseModel):
    operation: Literal["delete", "update-tags", "move-category"]
    ids: List[str] = Field(..., min_length=1)
    tags: Optional[List[str]] = None
    category: Optional[Category] = None

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v):
        return _validate_clothing_tags(v)

    @model_validator(mode="after")
    def check_operation_args(self):
        if self.operation == "update-tags" and self.tags is None:
            raise ValueError("tags must be a list for update-tags")
        if self.operation == "move-category" and self.category is None:
            raise ValueError("category is required for move-category")
        return self


class OutfitCreate(NamedRequest):
    description: Optional[str] = Field(None, max_length=LIMITS.DESCRIPTION_MAX_LENGTH)
    items: List[str] = Field(
        ...,
        min_length=LIMITS.MIN_OUTFIT_ITEMS,
        max_length=LIMITS.MAX_OUTFIT_ITEMS,
    )
    tags: List[str] = Field(default_factory=list)
    season: Season = Season.ALL

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v):
        return clean_tags(v)


class OutfitUpdate(NamedRequest):
    """PUT body: name and items are required, the rest only when sent."""
    description: Optional[str] = Field(None, max_length=LIMITS.DESCRIPTION_MAX_LENGTH)
    items: List[str] = Field(
        ...,
        min_length=LIMITS.MIN_OUTFIT_ITEMS,
        max_length=LIMITS.MAX_OUTFIT_ITEMS,
    )
    tags: Optional[List[str]] = None
    season: Optional[Season] = None

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v):
        return None if v is None else clean_tags(v)
