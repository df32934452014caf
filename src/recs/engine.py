"""
Recommendation engine.

Modes (``type``):
- seasonal: outfits for the target season (or "all"), then clothing items
- similar:  same-category items, then outfits that contain the target item
- random:   a random sample of items and outfits
- smart:    seasonal outfits and items scored by season, tag popularity and
            recency (see recs.scoring)

Store failures inside a mode never reach the caller: the engine logs them and
serves the canned default recommendations instead. Bad input
(ValidationError) and a missing similar-target (NotFoundError) propagate.
"""

import random
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from catalog.store import CatalogStore, Row
from config.constants import (
    CLOTHING_TABLE,
    DEFAULT_RECOMMENDATION_CONFIG,
    OUTFITS_TABLE,
    RecommendationConfig,
)
from core.errors import NotFoundError, StoreError, ValidationError
from core.logging import get_logger
from core.utils import clamp, is_valid_uuid, season_for_month, utc_now
from recs.models import Recommendation, RecommendationReason, RecommendationType
from recs.scoring import calculate_score, tag_frequency


logger = get_logger(__name__)

SEASON_NAMES = {
    "spring": "Spring",
    "summer": "Summer",
    "autumn": "Autumn",
    "winter": "Winter",
    "all": "All-season",
}

OUTFIT_COLUMNS = "id, name, description, thumbnail, season, tags, created_at"
CLOTHING_COLUMNS = "id, name, image, category, tags, created_at"

_DEFAULTS: List[Dict[str, Any]] = [
    {
        "id": "default_1",
        "title": "Classic Look",
        "description": "A simple, timeless combination",
        "image": "https://picsum.photos/300/400?random=1",
        "tags": ["classic", "versatile"],
    },
    {
        "id": "default_2",
        "title": "Casual Style",
        "description": "Comfortable everyday wear",
        "image": "https://picsum.photos/300/400?random=2",
        "tags": ["casual", "comfortable"],
    },
    {
        "id": "default_3",
        "title": "Formal Occasion",
        "description": "Elegant outfit for formal events",
        "image": "https://picsum.photos/300/400?random=3",
        "tags": ["formal", "elegant"],
    },
]


def default_recommendations(
    season: Optional[str] = None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> List[Recommendation]:
    """
    Canned fallback entries.

    When a specific season is given, only entries for that season or "all"
    are returned.
    """
    entries = [
        Recommendation(
            **entry,
            type="outfit",
            season="all",
            reason=RecommendationReason.DEFAULT,
            confidence=config.CONFIDENCE["default"],
        )
        for entry in _DEFAULTS
    ]
    if season and season != "all":
        entries = [e for e in entries if e.season in (season, "all")]
    return entries


class RecommendationEngine:
    """
    Produces ranked suggestions from the catalog store.

    Stateless apart from the injected store, clock and random source; safe
    to share across requests.
    """

    def __init__(
        self,
        store: CatalogStore,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.config = config
        self.clock = clock
        self.rng = rng or random.Random()

    def current_season(self) -> str:
        return season_for_month(self.clock().month)

    def recommend(
        self,
        type: Optional[str] = None,
        season: Optional[str] = None,
        user_id: Optional[str] = None,
        clothing_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Recommendation]:
        """
        Run one recommendation mode.

        Returns:
            At most ``limit`` recommendations (limit clamped to 1..MAX_LIMIT)

        Raises:
            ValidationError: unknown type, or similar without a valid clothing id
            NotFoundError: similar target does not exist
        """
        mode = type or RecommendationType.SMART.value
        valid_modes = [t.value for t in RecommendationType]
        if mode not in valid_modes:
            raise ValidationError(
                f"Unsupported recommendation type, supported: {', '.join(valid_modes)}",
                details={"type": mode},
            )
        limit = clamp(limit or self.config.DEFAULT_LIMIT, 1, self.config.MAX_LIMIT)

        if mode == RecommendationType.SIMILAR.value:
            if not clothing_id:
                raise ValidationError("Similar recommendations require a clothingId")
            if not is_valid_uuid(clothing_id):
                raise ValidationError("Invalid clothing id format", details={"clothingId": clothing_id})

        target_season = season or self.current_season()
        fallback_season = None if mode in ("similar", "random") else target_season

        try:
            if mode == RecommendationType.SEASONAL.value:
                results = self._seasonal(target_season, limit)
            elif mode == RecommendationType.SIMILAR.value:
                results = self._similar(clothing_id, limit)
            elif mode == RecommendationType.RANDOM.value:
                results = self._random(limit)
            else:
                results = self._smart(target_season, limit)
        except StoreError as e:
            logger.warning(
                "Recommendation store failure, serving defaults",
                mode=mode,
                store_code=e.store_code,
                error=e.message,
            )
            return default_recommendations(fallback_season, self.config)[:limit]

        logger.debug("Recommendations generated", mode=mode, user_id=user_id, count=len(results))
        return results[:limit]

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def _seasonal_outfits(self, season: str, limit: int) -> List[Row]:
        return self.store.query(
            OUTFITS_TABLE,
            OUTFIT_COLUMNS,
            one_of_values=("season", [season, "all"]),
            order_by="created_at",
            limit=limit * self.config.OUTFIT_POOL_FACTOR,
        ).rows

    def _seasonal(self, season: str, limit: int) -> List[Recommendation]:
        outfits = self._seasonal_outfits(season, limit)
        clothing = self.store.query(
            CLOTHING_TABLE,
            CLOTHING_COLUMNS,
            limit=limit * self.config.CLOTHING_POOL_FACTOR,
        ).rows
        season_name = SEASON_NAMES.get(season, "Unknown")

        results = [
            self._from_outfit(
                "seasonal", outfit,
                reason=RecommendationReason.SEASONAL,
                confidence=self.config.CONFIDENCE["seasonal_outfit"],
                description=outfit.get("description") or f"{season_name} outfit pick",
            )
            for outfit in outfits
        ]
        results += [
            self._from_clothing(
                "seasonal", item,
                reason=RecommendationReason.SEASONAL,
                confidence=self.config.CONFIDENCE["seasonal_clothing"],
                description=f"{season_name} item pick",
            )
            for item in clothing
        ]
        return results[:limit]

    def _similar(self, clothing_id: str, limit: int) -> List[Recommendation]:
        target = self.store.get(CLOTHING_TABLE, clothing_id)
        if target is None:
            raise NotFoundError("Clothing item not found", details={"clothingId": clothing_id})

        results: List[Recommendation] = []

        same_category = self.store.query(
            CLOTHING_TABLE,
            "id, name, image, category, tags",
            equals={"category": target.get("category")},
            not_equals={"id": clothing_id},
            limit=limit * 2,
        ).rows
        for item in same_category[: limit // 2]:
            results.append(Recommendation(
                id=f"similar_clothing_{item['id']}",
                title=f"Similar to {target.get('name')}",
                description=f"Same category: {item.get('name')}",
                image=item.get("image") or "",
                type="clothing",
                category=item.get("category"),
                tags=item.get("tags") or [],
                reason=RecommendationReason.SIMILAR_CATEGORY,
                confidence=self.config.CONFIDENCE["similar_category"],
            ))

        outfits = self.store.query(
            OUTFITS_TABLE,
            "id, name, thumbnail, season, tags, items",
            contains={"items": [clothing_id]},
            limit=limit,
        ).rows

        partners: Dict[str, str] = {}
        for outfit in outfits:
            others = [i for i in (outfit.get("items") or []) if i != clothing_id]
            if others:
                partners[outfit["id"]] = others[0]
        names = {
            str(row["id"]): row.get("name") or ""
            for row in self.store.get_many(CLOTHING_TABLE, partners.values(), "id, name")
        }

        for outfit in outfits:
            partner_id = partners.get(outfit["id"])
            if partner_id is None or partner_id not in names:
                continue
            results.append(Recommendation(
                id=f"outfit_match_{outfit['id']}",
                title=outfit.get("name") or "",
                description=f"Pairs {target.get('name')} with {names[partner_id]}",
                image=outfit.get("thumbnail") or "",
                type="outfit",
                season=outfit.get("season"),
                tags=outfit.get("tags") or [],
                reason=RecommendationReason.OUTFIT_MATCH,
                confidence=self.config.CONFIDENCE["outfit_match"],
            ))

        return results[:limit]

    def _random(self, limit: int) -> List[Recommendation]:
        confidence = self.config.CONFIDENCE["random"]
        clothing = self.store.sample(CLOTHING_TABLE, CLOTHING_COLUMNS, limit, self.rng)
        outfits = self.store.sample(OUTFITS_TABLE, OUTFIT_COLUMNS, limit, self.rng)

        results = [
            self._from_clothing(
                "random", item,
                reason=RecommendationReason.RANDOM,
                confidence=confidence,
                description="A random pick from your wardrobe",
            )
            for item in clothing
        ]
        results += [
            self._from_outfit(
                "random", outfit,
                reason=RecommendationReason.RANDOM,
                confidence=confidence,
                description=outfit.get("description") or "A random outfit pick",
            )
            for outfit in outfits
        ]
        return results[:limit]

    def _smart(self, season: str, limit: int) -> List[Recommendation]:
        outfits = self._seasonal_outfits(season, limit)
        clothing = self.store.sample(
            CLOTHING_TABLE,
            CLOTHING_COLUMNS,
            limit * self.config.CLOTHING_POOL_FACTOR,
            self.rng,
        )
        frequencies = tag_frequency(outfits + clothing)
        now = self.clock()
        season_name = SEASON_NAMES.get(season, "Unknown")

        results: List[Recommendation] = []
        used = set()

        for outfit in outfits:
            if len(results) >= limit:
                break
            if outfit["id"] in used:
                continue
            results.append(self._from_outfit(
                "smart", outfit,
                reason=RecommendationReason.SEASONAL_MATCH,
                confidence=calculate_score(outfit, season, frequencies, now, self.config),
                description=outfit.get("description") or f"{season_name} outfit for you",
            ))
            used.add(outfit["id"])

        for item in clothing:
            if len(results) >= limit:
                break
            if item["id"] in used:
                continue
            results.append(self._from_clothing(
                "smart", item,
                reason=RecommendationReason.SEASONAL_ITEM,
                confidence=calculate_score(item, season, frequencies, now, self.config),
                description=f"{season_name} item for you",
            ))
            used.add(item["id"])

        # sorted() is stable: equal scores keep outfits ahead of items
        return sorted(results, key=lambda r: r.confidence, reverse=True)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    @staticmethod
    def _from_outfit(prefix: str, outfit: Row, **fields) -> Recommendation:
        return Recommendation(
            id=f"{prefix}_outfit_{outfit['id']}",
            title=outfit.get("name") or "",
            image=outfit.get("thumbnail") or "",
            type="outfit",
            season=outfit.get("season"),
            tags=outfit.get("tags") or [],
            **fields,
        )

    @staticmethod
    def _from_clothing(prefix: str, item: Row, **fields) -> Recommendation:
        return Recommendation(
            id=f"{prefix}_clothing_{item['id']}",
            title=item.get("name") or "",
            image=item.get("image") or "",
            type="clothing",
            category=item.get("category"),
            tags=item.get("tags") or [],
            **fields,
        )

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        """Catalog totals and season distribution. Store errors propagate."""
        distribution = {
            (row.get("season") or "unknown"): row.get("count", 0)
            for row in self.store.rpc("get_outfit_season_stats")
        }
        return {
            "totalClothing": self.store.count(CLOTHING_TABLE),
            "totalOutfits": self.store.count(OUTFITS_TABLE),
            "currentSeason": self.current_season(),
            "seasonDistribution": distribution,
            "recommendationTypes": [t.value for t in RecommendationType],
            "lastUpdated": self.clock().isoformat(),
        }
