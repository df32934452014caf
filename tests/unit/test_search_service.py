"""
Tests for merged keyword search, suggestions and popular terms.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest


@pytest.fixture
def search_service(memory_store):
    from search.service import SearchService
    return SearchService(memory_store)


@pytest.fixture
def shirt_store(empty_store):
    """25 items that all match "shirt" with the same score."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(25):
        empty_store.insert("clothing", {
            "name": f"Shirt {i:02d}",
            "category": "top",
            "tags": [],
            "created_at": (base + timedelta(hours=i)).isoformat(),
        })
    return empty_store


class TestSearch:

    def test_merged_relevance_order(self, search_service, ids):
        page = search_service.search("denim")

        assert [r.id for r in page.results] == [ids.summer_outfit, ids.jacket, ids.jeans]
        assert [r.score for r in page.results] == [120, 90, 40]

    def test_stats_and_query(self, search_service):
        page = search_service.search("  denim ", page=1, limit=2)

        assert page.total == 3
        assert page.stats.clothing == 2
        assert page.stats.outfits == 1
        assert len(page.results) == 2
        assert page.query == {"keyword": "denim", "type": "all", "page": 1, "limit": 2}

    def test_type_filter(self, search_service):
        page = search_service.search("denim", type="outfits")

        assert [r.type for r in page.results] == ["outfit"]
        assert page.stats.clothing == 0

    def test_outfit_item_previews(self, search_service, ids):
        outfit = search_service.search("denim", type="outfits").results[0]

        assert [i.id for i in outfit.items] == [ids.tee, ids.jeans]
        assert outfit.item_count == 2
        assert outfit.highlights[0].value == "Summer <mark>Denim</mark>"

    def test_category_and_tag_filters(self, search_service, ids):
        by_category = search_service.search("denim", type="clothing", category="bottom")
        by_tag = search_service.search("denim", tags=["casual"])

        assert [r.id for r in by_category.results] == [ids.jeans]
        assert {r.id for r in by_tag.results} == {ids.summer_outfit, ids.jacket}

    def test_pages_are_disjoint_and_complete(self, shirt_store):
        from search.service import SearchService

        service = SearchService(shirt_store)
        pages = [service.search("shirt", type="clothing", page=n, limit=10) for n in (1, 2, 3)]

        assert [len(p.results) for p in pages] == [10, 10, 5]
        seen = [r.name for p in pages for r in p.results]
        assert len(set(seen)) == 25
        # equal scores fall back to newest first
        assert seen[0] == "Shirt 24"
        assert seen[-1] == "Shirt 00"
        assert all(p.total == 25 for p in pages)
        assert pages[0].stats.truncated is False

    def test_candidate_cap_reports_full_count(self, shirt_store):
        from config.constants import SearchScoringConfig
        from search.service import SearchService

        service = SearchService(shirt_store, SearchScoringConfig(MAX_CANDIDATES_PER_KIND=10))
        page = service.search("shirt", type="clothing", limit=20)

        assert len(page.results) == 10
        assert page.total == 10
        assert page.stats.clothing == 25
        assert page.stats.total == 25
        assert page.stats.truncated is True
        # the newest rows are the ones ranked
        assert page.results[0].name == "Shirt 24"

    def test_sort_by_name(self, search_service):
        page = search_service.search("denim", sort_by="name", sort_order="asc")

        assert [r.name for r in page.results] == ["Denim Jacket", "Slim Jeans", "Summer Denim"]

    @pytest.mark.parametrize("kwargs", [
        {"q": ""},
        {"q": "   "},
        {"q": None},
        {"q": "denim", "type": "shoes"},
        {"q": "denim", "sort_by": "price"},
        {"q": "denim", "sort_order": "sideways"},
    ])
    def test_invalid_input(self, search_service, kwargs):
        from core.errors import ValidationError

        with pytest.raises(ValidationError):
            search_service.search(**kwargs)

    def test_sub_search_failure_degrades(self, search_service, memory_store, ids):
        from core.errors import StoreError

        original = memory_store.query

        def flaky(table, *args, **kwargs):
            if table == "outfits":
                raise StoreError("statement timeout", store_code="57014")
            return original(table, *args, **kwargs)

        with patch.object(memory_store, "query", side_effect=flaky):
            page = search_service.search("denim")

        assert [r.id for r in page.results] == [ids.jacket, ids.jeans]
        assert page.stats.outfits == 0


class TestSuggestions:

    def test_short_keyword(self, search_service):
        assert search_service.suggestions("d") == []
        assert search_service.suggestions(" ") == []

    def test_prefix_first(self, search_service):
        assert search_service.suggestions("den") == ["Denim Jacket", "Summer Denim"]

    def test_limit(self, search_service):
        assert search_service.suggestions("e", limit=5) == []
        assert len(search_service.suggestions("de", limit=1)) == 1

    def test_store_failure_skipped(self, search_service, memory_store):
        from core.errors import StoreError

        with patch.object(memory_store, "query", side_effect=StoreError("down")):
            assert search_service.suggestions("denim") == []


class TestPopular:

    def test_tags_then_recent_names(self, search_service):
        terms = search_service.popular()

        assert [(t.term, t.count) for t in terms[:2]] == [("denim", 2), ("casual", 2)]
        assert {t.term for t in terms if t.type == "item"} == {
            "Denim Jacket", "White Tee", "Slim Jeans", "Canvas Sneakers",
        }

    def test_limit(self, search_service):
        assert len(search_service.popular(limit=2)) == 2

    def test_store_error_propagates(self, search_service, memory_store):
        from core.errors import StoreError

        with patch.object(memory_store, "rpc", side_effect=StoreError("down")):
            with pytest.raises(StoreError):
                search_service.popular()
