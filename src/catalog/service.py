"""
Clothing and outfit CRUD over the catalog store.

Handles the write-time rules the store does not enforce:
- ids in paths must be UUIDs
- outfit items are checked against the clothing table in one batched query;
  unknown or malformed ids are dropped, an outfit with none left is rejected
- outfit thumbnails come from the first surviving item's image
- created_at/updated_at are stamped on every write
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from catalog.models import (
    ClothingBatchRequest,
    ClothingCreate,
    ClothingItem,
    ClothingUpdate,
    Outfit,
    OutfitCreate,
    OutfitDetail,
    OutfitUpdate,
)
from catalog.store import CatalogStore, Row, TextMatch
from config.constants import CLOTHING_TABLE, OUTFITS_TABLE
from core.errors import NotFoundError, ValidationError
from core.logging import get_logger
from core.utils import is_valid_uuid, utc_now


logger = get_logger(__name__)

SORTABLE_COLUMNS = ("created_at", "updated_at", "name")


def _require_uuid(row_id: str) -> None:
    if not is_valid_uuid(row_id):
        raise ValidationError("Invalid id format", details={"id": row_id})


def _check_sort(sort_by: str, extra: Sequence[str] = ()) -> None:
    allowed = SORTABLE_COLUMNS + tuple(extra)
    if sort_by not in allowed:
        raise ValidationError(
            f"Unsupported sort field, supported: {', '.join(allowed)}",
            details={"sortBy": sort_by},
        )


def _list_filters(
    tags: Sequence[str],
    q: Optional[str],
    equals: Dict[str, Any],
) -> Dict[str, Any]:
    filters: Dict[str, Any] = {"equals": equals}
    if tags:
        filters["contains"] = {"tags": list(tags)}
    if q and q.strip():
        filters["text_match"] = TextMatch(q.strip(), ("name",), "tags")
    return filters


class ClothingService:

    def __init__(self, store: CatalogStore):
        self.store = store

    def list(
        self,
        page: int,
        limit: int,
        sort_by: str = "created_at",
        ascending: bool = False,
        category: Optional[str] = None,
        tags: Sequence[str] = (),
        q: Optional[str] = None,
    ) -> Tuple[List[ClothingItem], int]:
        _check_sort(sort_by, extra=("category",))
        equals = {"category": category} if category and category != "all" else {}
        result = self.store.query(
            CLOTHING_TABLE,
            order_by=sort_by,
            ascending=ascending,
            offset=(page - 1) * limit,
            limit=limit,
            count=True,
            **_list_filters(tags, q, equals),
        )
        items = [ClothingItem.model_validate(row) for row in result.rows]
        return items, result.count or 0

    def get(self, item_id: str) -> ClothingItem:
        _require_uuid(item_id)
        row = self.store.get(CLOTHING_TABLE, item_id)
        if row is None:
            raise NotFoundError("Clothing item not found")
        return ClothingItem.model_validate(row)

    def create(self, payload: ClothingCreate) -> ClothingItem:
        now = utc_now().isoformat()
        row = self.store.insert(CLOTHING_TABLE, {
            "name": payload.name,
            "category": payload.category.value,
            "image": payload.image or "",
            "tags": payload.tags,
            "created_at": now,
            "updated_at": now,
        })
        logger.info("Clothing item created", item_id=row.get("id"), category=row.get("category"))
        return ClothingItem.model_validate(row)

    def update(self, item_id: str, payload: ClothingUpdate) -> ClothingItem:
        _require_uuid(item_id)
        changes: Row = {
            "name": payload.name,
            "category": payload.category.value,
            "updated_at": utc_now().isoformat(),
        }
        if payload.image is not None:
            changes["image"] = payload.image
        if payload.tags is not None:
            changes["tags"] = payload.tags
        rows = self.store.update(CLOTHING_TABLE, changes, ids=[item_id])
        if not rows:
            raise NotFoundError("Clothing item not found")
        return ClothingItem.model_validate(rows[0])

    def delete(self, item_id: str) -> None:
        _require_uuid(item_id)
        if not self.store.delete(CLOTHING_TABLE, ids=[item_id]):
            raise NotFoundError("Clothing item not found")
        logger.info("Clothing item deleted", item_id=item_id)

    def batch(self, request: ClothingBatchRequest) -> List[ClothingItem]:
        invalid = [i for i in request.ids if not is_valid_uuid(i)]
        if invalid:
            raise ValidationError("Batch contains invalid id format", details={"ids": invalid})

        if request.operation == "delete":
            rows = self.store.delete(CLOTHING_TABLE, ids=request.ids)
        elif request.operation == "update-tags":
            rows = self.store.update(
                CLOTHING_TABLE,
                {"tags": request.tags, "updated_at": utc_now().isoformat()},
                ids=request.ids,
            )
        else:
            rows = self.store.update(
                CLOTHING_TABLE,
                {"category": request.category.value, "updated_at": utc_now().isoformat()},
                ids=request.ids,
            )

        logger.info("Clothing batch applied", operation=request.operation, affected=len(rows))
        return [ClothingItem.model_validate(row) for row in rows]


class OutfitService:

    def __init__(self, store: CatalogStore):
        self.store = store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _attach_items(self, outfits: List[Row]) -> List[OutfitDetail]:
        """Resolve every referenced item with one query for the whole page."""
        wanted = [item_id for o in outfits for item_id in (o.get("items") or [])]
        by_id = {
            str(row["id"]): ClothingItem.model_validate(row)
            for row in self.store.get_many(CLOTHING_TABLE, wanted)
        }
        details = []
        for outfit in outfits:
            items = [by_id[i] for i in (outfit.get("items") or []) if i in by_id]
            details.append(OutfitDetail.model_validate({
                **outfit,
                "items": items,
                "item_count": len(items),
            }))
        return details

    def list(
        self,
        page: int,
        limit: int,
        sort_by: str = "created_at",
        ascending: bool = False,
        season: Optional[str] = None,
        tags: Sequence[str] = (),
        q: Optional[str] = None,
    ) -> Tuple[List[OutfitDetail], int]:
        _check_sort(sort_by, extra=("season",))
        equals = {"season": season} if season and season != "all" else {}
        result = self.store.query(
            OUTFITS_TABLE,
            order_by=sort_by,
            ascending=ascending,
            offset=(page - 1) * limit,
            limit=limit,
            count=True,
            **_list_filters(tags, q, equals),
        )
        return self._attach_items(result.rows), result.count or 0

    def get(self, outfit_id: str) -> OutfitDetail:
        _require_uuid(outfit_id)
        row = self.store.get(OUTFITS_TABLE, outfit_id)
        if row is None:
            raise NotFoundError("Outfit not found")
        return self._attach_items([row])[0]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def resolve_items(self, item_ids: Sequence[str]) -> Tuple[List[str], str]:
        """
        Keep the well-formed ids that exist, in request order.

        Returns:
            (valid ids, thumbnail of the first valid item)

        Raises:
            ValidationError: if no id survives
        """
        candidates = [i for i in item_ids if is_valid_uuid(i)]
        rows = self.store.get_many(CLOTHING_TABLE, candidates, "id, image") if candidates else []
        images = {str(row["id"]): row.get("image") or "" for row in rows}
        valid = [i for i in candidates if i in images]

        dropped = len(item_ids) - len(valid)
        if dropped:
            logger.info("Dropped invalid outfit items", requested=len(item_ids), dropped=dropped)
        if not valid:
            raise ValidationError("No valid clothing items found")
        return valid, images[valid[0]]

    def create(self, payload: OutfitCreate) -> Outfit:
        items, thumbnail = self.resolve_items(payload.items)
        now = utc_now().isoformat()
        row = self.store.insert(OUTFITS_TABLE, {
            "name": payload.name,
            "description": (payload.description or "").strip(),
            "items": items,
            "tags": payload.tags,
            "season": payload.season.value,
            "thumbnail": thumbnail,
            "created_at": now,
            "updated_at": now,
        })
        logger.info("Outfit created", outfit_id=row.get("id"), items=len(items))
        return Outfit.model_validate(row)

    def update(self, outfit_id: str, payload: OutfitUpdate) -> Outfit:
        _require_uuid(outfit_id)
        items, thumbnail = self.resolve_items(payload.items)
        changes: Row = {
            "name": payload.name,
            "items": items,
            "thumbnail": thumbnail,
            "updated_at": utc_now().isoformat(),
        }
        if payload.description is not None:
            changes["description"] = payload.description.strip()
        if payload.season is not None:
            changes["season"] = payload.season.value
        if payload.tags is not None:
            changes["tags"] = payload.tags

        rows = self.store.update(OUTFITS_TABLE, changes, ids=[outfit_id])
        if not rows:
            raise NotFoundError("Outfit not found")
        return Outfit.model_validate(rows[0])

    def delete(self, outfit_id: str) -> None:
        _require_uuid(outfit_id)
        if not self.store.delete(OUTFITS_TABLE, ids=[outfit_id]):
            raise NotFoundError("Outfit not found")
        logger.info("Outfit deleted", outfit_id=outfit_id)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        total = self.store.count(OUTFITS_TABLE)
        by_season = {
            (row.get("season") or "unknown"): row.get("count", 0)
            for row in self.store.rpc("get_outfit_season_stats")
        }
        popular_tags = [
            {"tag": row.get("tag"), "count": row.get("count", 0)}
            for row in self.store.rpc("get_outfit_tag_stats")
        ]
        recent = self.store.query(
            OUTFITS_TABLE,
            "id, name, thumbnail, season, created_at",
            order_by="created_at",
            limit=5,
        ).rows
        return {
            "total": total,
            "bySeason": by_season,
            "popularTags": popular_tags,
            "recentOutfits": [
                {
                    "id": row.get("id"),
                    "name": row.get("name"),
                    "thumbnail": row.get("thumbnail") or "",
                    "season": row.get("season"),
                    "createTime": row.get("created_at"),
                }
                for row in recent
            ],
        }
