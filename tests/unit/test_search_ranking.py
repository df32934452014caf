"""
Tests for relevance scoring, highlighting and result ordering.
"""

from datetime import datetime, timezone

import pytest


def _clothing(id, name, score, created_at=None, tags=None):
    from search.models import ClothingSearchResult
    return ClothingSearchResult(
        id=id, name=name, image="", category="top", tags=tags or [],
        score=score, created_at=created_at,
    )


def _outfit(id, name, score, created_at=None):
    from search.models import OutfitSearchResult
    return OutfitSearchResult(id=id, name=name, score=score, created_at=created_at)


class TestRelevanceScore:

    def test_name_contains_plus_tag_exact(self):
        from search.ranking import relevance_score

        record = {"name": "Denim Jacket", "tags": ["denim", "casual"]}

        assert relevance_score(record, "denim") == 90

    def test_exact_name_is_case_insensitive(self):
        from search.ranking import relevance_score

        record = {"name": "White Tee", "tags": ["basic"], "category": "top"}

        assert relevance_score(record, "WHITE TEE") == 100

    def test_every_field(self):
        from search.ranking import relevance_score

        record = {
            "name": "Summer Breeze",
            "description": "For summer evenings",
            "tags": ["summer", "summery"],
            "season": "summer",
        }

        # name 50 + description 30 + tag exact 40 + tag contains 20 + season 25
        assert relevance_score(record, "summer") == 165

    def test_category_match(self):
        from search.ranking import relevance_score

        assert relevance_score({"name": "Parka", "category": "outerwear"}, "outer") == 35

    def test_no_match(self):
        from search.ranking import relevance_score

        assert relevance_score({"name": "Parka", "tags": None}, "denim") == 0


class TestHighlights:

    def test_wraps_every_occurrence(self):
        from search.ranking import highlight_text

        assert highlight_text("Denim on denim", "DENIM") == "<mark>Denim</mark> on <mark>denim</mark>"

    def test_keyword_is_literal(self):
        from search.ranking import highlight_text

        assert highlight_text("Size (M) tee", "(m)") == "Size <mark>(M)</mark> tee"
        assert highlight_text("a.b axb", "a.b") == "<mark>a.b</mark> axb"

    def test_fields_and_tags(self):
        from search.ranking import generate_highlights

        record = {
            "name": "Summer Denim",
            "description": "Light denim look",
            "tags": ["denim", "casual", "raw-denim"],
        }
        highlights = {h.field: h.value for h in generate_highlights(record, "denim")}

        assert highlights["name"] == "Summer <mark>Denim</mark>"
        assert highlights["description"] == "Light <mark>denim</mark> look"
        assert highlights["tags"] == ["<mark>denim</mark>", "raw-<mark>denim</mark>"]

    def test_unmatched_fields_omitted(self):
        from search.ranking import generate_highlights

        highlights = generate_highlights({"name": "Slim Jeans", "tags": ["denim"]}, "denim")

        assert [h.field for h in highlights] == ["tags"]


class TestOrdering:

    def test_relevance_tie_breaks(self):
        from search.ranking import sort_by_relevance

        older = datetime(2024, 1, 1, tzinfo=timezone.utc)
        newer = datetime(2024, 6, 1, tzinfo=timezone.utc)
        results = [
            _outfit("o1", "Outfit", 50, newer),
            _clothing("c-old", "Old", 50, older),
            _clothing("c-new", "New", 50, newer),
            _clothing("c-top", "Top", 90, older),
            _clothing("c-none", "Undated", 50),
        ]

        ordered = [r.id for r in sort_by_relevance(results)]

        assert ordered == ["c-top", "c-new", "c-old", "c-none", "o1"]

    def test_sort_by_name(self):
        from search.ranking import sort_results

        results = [_clothing("1", "beta", 0), _clothing("2", "Alpha", 0), _outfit("3", "gamma", 0)]

        assert [r.name for r in sort_results(results, "name", descending=False)] == ["Alpha", "beta", "gamma"]
        assert [r.name for r in sort_results(results, "name", descending=True)] == ["gamma", "beta", "Alpha"]

    def test_sort_by_created(self):
        from search.ranking import sort_results

        results = [
            _clothing("a", "A", 10, datetime(2024, 1, 1, tzinfo=timezone.utc)),
            _clothing("b", "B", 90, datetime(2024, 3, 1, tzinfo=timezone.utc)),
        ]

        assert [r.id for r in sort_results(results, "created_at", descending=True)] == ["b", "a"]
        assert [r.id for r in sort_results(results, "created_at", descending=False)] == ["a", "b"]

    @pytest.mark.parametrize("names,keyword,expected", [
        (["Blue Denim", "Denim Jacket", "Denim"], "denim", ["Denim", "Denim Jacket", "Blue Denim"]),
        (["Denim", "Denim", ""], "de", ["Denim"]),
        (["Long Blue Denim", "Raw Denim"], "denim", ["Raw Denim", "Long Blue Denim"]),
    ])
    def test_suggestion_order(self, names, keyword, expected):
        from search.ranking import suggestion_order

        assert suggestion_order(names, keyword) == expected
