"""
Keyword search across clothing and outfits.

Each entity kind is queried separately (name/tag match for clothing,
name/description/tag match for outfits), scored, then merged. Sorting and
pagination happen after the merge so pages are stable across kinds.

A store failure in one kind's sub-search degrades to no results for that
kind; search never surfaces StoreError.

Only the newest MAX_CANDIDATES_PER_KIND rows of each kind are ranked and
paged. ``stats`` reports the exact match counts from the store and sets
``truncated`` when the ranked set is smaller than the full match set.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from catalog.models import ClothingSummary
from catalog.store import CatalogStore, Row, TextMatch
from config.constants import (
    CLOTHING_TABLE,
    DEFAULT_SEARCH_CONFIG,
    OUTFITS_TABLE,
    SearchScoringConfig,
)
from core.errors import StoreError, ValidationError
from core.logging import get_logger
from core.utils import clamp
from search.models import (
    ClothingSearchResult,
    OutfitSearchResult,
    PopularTerm,
    SearchPage,
    SearchResult,
    SearchSort,
    SearchStats,
    SearchType,
    SortOrder,
)
from search.ranking import generate_highlights, relevance_score, sort_results, suggestion_order


logger = get_logger(__name__)


def _check_choice(value: str, choices, label: str) -> None:
    allowed = [c.value for c in choices]
    if value not in allowed:
        raise ValidationError(
            f"Unsupported {label}, supported: {', '.join(allowed)}",
            details={label: value},
        )


class SearchService:

    def __init__(self, store: CatalogStore, config: SearchScoringConfig = DEFAULT_SEARCH_CONFIG):
        self.store = store
        self.config = config

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(
        self,
        q: Optional[str],
        type: str = SearchType.ALL.value,
        page: int = 1,
        limit: int = 20,
        category: Optional[str] = None,
        season: Optional[str] = None,
        tags: Sequence[str] = (),
        sort_by: str = SearchSort.RELEVANCE.value,
        sort_order: str = SortOrder.DESC.value,
    ) -> SearchPage:
        """
        Ranked, merged, paginated search.

        Raises:
            ValidationError: blank keyword or unsupported type/sort option
        """
        keyword = (q or "").strip()
        if not keyword:
            raise ValidationError("Search keyword must not be empty")
        _check_choice(type, SearchType, "type")
        _check_choice(sort_by, SearchSort, "sortBy")
        _check_choice(sort_order, SortOrder, "sortOrder")
        page = max(page, 1)
        limit = clamp(limit, 1, 100)

        results: List[SearchResult] = []
        matched = {"clothing": 0, "outfits": 0}
        if type in (SearchType.ALL.value, SearchType.CLOTHING.value):
            clothing, matched["clothing"] = self._search_clothing(keyword, category, tags)
            results.extend(clothing)
        if type in (SearchType.ALL.value, SearchType.OUTFITS.value):
            outfits, matched["outfits"] = self._search_outfits(keyword, season, tags)
            results.extend(outfits)

        ordered = sort_results(results, sort_by, descending=sort_order == SortOrder.DESC.value)
        start = (page - 1) * limit
        window = ordered[start:start + limit]

        stats = SearchStats(
            total=matched["clothing"] + matched["outfits"],
            clothing=matched["clothing"],
            outfits=matched["outfits"],
            truncated=len(ordered) < matched["clothing"] + matched["outfits"],
        )
        logger.info(
            "Search completed",
            keyword=keyword,
            type=type,
            total=stats.total,
            ranked=len(ordered),
            page=page,
        )
        return SearchPage(
            results=window,
            stats=stats,
            total=len(ordered),
            query={"keyword": keyword, "type": type, "page": page, "limit": limit},
        )

    def _fetch(self, kind: str, table: str, **filters) -> Tuple[List[Row], int]:
        """Newest candidates (at most MAX_CANDIDATES_PER_KIND) and the exact match count."""
        try:
            result = self.store.query(
                table,
                order_by="created_at",
                limit=self.config.MAX_CANDIDATES_PER_KIND,
                count=True,
                **filters,
            )
        except StoreError as e:
            logger.warning("Search sub-query failed", kind=kind, store_code=e.store_code, error=e.message)
            return [], 0
        return result.rows, max(result.count or 0, len(result.rows))

    def _search_clothing(
        self,
        keyword: str,
        category: Optional[str],
        tags: Sequence[str],
    ) -> Tuple[List[ClothingSearchResult], int]:
        rows, matched = self._fetch(
            "clothing",
            CLOTHING_TABLE,
            equals={"category": category} if category and category != "all" else None,
            contains={"tags": list(tags)} if tags else None,
            text_match=TextMatch(keyword, ("name",), "tags"),
        )
        return [
            ClothingSearchResult(
                id=str(row["id"]),
                name=row.get("name") or "",
                image=row.get("image") or "",
                category=row.get("category") or "",
                tags=row.get("tags") or [],
                score=relevance_score(row, keyword, self.config),
                highlights=generate_highlights(row, keyword, self.config),
                created_at=row.get("created_at"),
                updated_at=row.get("updated_at"),
            )
            for row in rows
        ], matched

    def _search_outfits(
        self,
        keyword: str,
        season: Optional[str],
        tags: Sequence[str],
    ) -> Tuple[List[OutfitSearchResult], int]:
        rows, matched = self._fetch(
            "outfits",
            OUTFITS_TABLE,
            equals={"season": season} if season and season != "all" else None,
            contains={"tags": list(tags)} if tags else None,
            text_match=TextMatch(keyword, ("name", "description"), "tags"),
        )
        previews = self._previews(rows)

        results = []
        for row in rows:
            item_ids = row.get("items") or []
            results.append(OutfitSearchResult(
                id=str(row["id"]),
                name=row.get("name") or "",
                description=row.get("description") or "",
                items=[
                    previews[i] for i in item_ids[: self.config.OUTFIT_PREVIEW_ITEMS]
                    if i in previews
                ],
                item_count=len(item_ids),
                tags=row.get("tags") or [],
                season=row.get("season") or "all",
                thumbnail=row.get("thumbnail") or "",
                score=relevance_score(row, keyword, self.config),
                highlights=generate_highlights(row, keyword, self.config),
                created_at=row.get("created_at"),
                updated_at=row.get("updated_at"),
            ))
        return results, matched

    def _previews(self, outfits: List[Row]) -> Dict[str, ClothingSummary]:
        """Resolve the first few items of every outfit in one query."""
        wanted = [
            item_id
            for outfit in outfits
            for item_id in (outfit.get("items") or [])[: self.config.OUTFIT_PREVIEW_ITEMS]
        ]
        if not wanted:
            return {}
        try:
            rows = self.store.get_many(CLOTHING_TABLE, wanted, "id, name, image, category")
        except StoreError as e:
            logger.warning("Outfit preview lookup failed", store_code=e.store_code, error=e.message)
            return {}
        return {str(row["id"]): ClothingSummary.model_validate(row) for row in rows}

    # ------------------------------------------------------------------
    # Suggestions / popular terms
    # ------------------------------------------------------------------

    def suggestions(self, q: Optional[str], limit: Optional[int] = None) -> List[str]:
        """
        Name completions for a partial keyword.

        Keywords shorter than SUGGESTION_MIN_LENGTH return an empty list.
        """
        keyword = (q or "").strip()
        if len(keyword) < self.config.SUGGESTION_MIN_LENGTH:
            return []
        limit = clamp(
            limit or self.config.SUGGESTION_DEFAULT_LIMIT, 1, self.config.SUGGESTION_MAX_LIMIT
        )

        names: List[str] = []
        for kind, table in (("clothing", CLOTHING_TABLE), ("outfits", OUTFITS_TABLE)):
            try:
                rows = self.store.query(
                    table,
                    "name",
                    text_match=TextMatch(keyword, ("name",), None),
                    limit=limit,
                ).rows
            except StoreError as e:
                logger.warning("Suggestion lookup failed", kind=kind, error=e.message)
                continue
            names.extend(row.get("name") or "" for row in rows)

        return suggestion_order(names, keyword)[:limit]

    def popular(self, limit: Optional[int] = None) -> List[PopularTerm]:
        """Most used clothing tags plus recently added item names. Store errors propagate."""
        limit = clamp(
            limit or self.config.SUGGESTION_DEFAULT_LIMIT, 1, self.config.SUGGESTION_MAX_LIMIT
        )
        terms = [
            PopularTerm(term=row["tag"], type="tag", count=row.get("count", 0))
            for row in self.store.rpc("get_clothing_tag_stats")
            if row.get("tag")
        ]
        recent = self.store.query(CLOTHING_TABLE, "name", order_by="created_at", limit=limit).rows
        terms += [PopularTerm(term=row["name"], type="item", count=1) for row in recent if row.get("name")]
        return sorted(terms, key=lambda t: t.count, reverse=True)[:limit]
