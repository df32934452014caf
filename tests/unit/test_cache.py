"""
Tests for the in-process response cache.
"""

import pytest


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    from core.cache import ResponseCache
    return ResponseCache(clock=clock)


class TestCacheKey:

    def test_params_sorted(self):
        from core.cache import build_cache_key

        a = build_cache_key("/api/search", {"q": "denim", "page": 2})
        b = build_cache_key("/api/search", {"page": 2, "q": "denim"})

        assert a == b == "/api/search?page=2&q=denim"

    def test_no_params(self):
        from core.cache import build_cache_key

        assert build_cache_key("/api/health", {}) == "/api/health"


class TestResponseCache:

    def test_ttl_per_family(self, cache):
        assert cache.ttl_for("/api/recommend/stats") == 600
        assert cache.ttl_for("/api/clothing?page=1") == 300
        assert cache.ttl_for("/api/search?q=x") == 180
        assert cache.ttl_for("/api/health") == 60
        assert cache.ttl_for("/api/upload/stats") == 120

    def test_entry_expires_after_ttl(self, cache, clock):
        cache.set("/api/search?q=denim", {"hits": 1})

        clock.advance(179)
        assert cache.get("/api/search?q=denim") == {"hits": 1}

        clock.advance(1)
        assert cache.get("/api/search?q=denim") is None

    def test_get_or_set_computes_once(self, cache):
        calls = []

        def factory():
            calls.append(1)
            return {"value": len(calls)}

        first = cache.get_or_set("/api/clothing", factory)
        second = cache.get_or_set("/api/clothing", factory)

        assert first == second == {"value": 1}
        assert len(calls) == 1
        assert cache.stats()["hits"] == 1

    def test_factory_error_not_cached(self, cache):
        def failing():
            raise RuntimeError("store down")

        with pytest.raises(RuntimeError):
            cache.get_or_set("/api/outfits", failing)

        assert cache.get("/api/outfits") is None

    def test_rejected_value_not_cached(self, cache):
        value = cache.get_or_set("/api/health", lambda: {"status": "degraded"}, keep=lambda v: v["status"] == "ok")

        assert value == {"status": "degraded"}
        assert cache.get("/api/health") is None
        assert cache.get_or_set("/api/health", lambda: {"status": "ok"}, keep=lambda v: v["status"] == "ok") == {"status": "ok"}
        assert cache.get("/api/health") == {"status": "ok"}

    def test_invalidate_by_prefix(self, cache):
        cache.set("/api/clothing?page=1", 1)
        cache.set("/api/clothing/abc", 2)
        cache.set("/api/outfits?page=1", 3)

        removed = cache.invalidate("/api/clothing")

        assert removed == 2
        assert cache.get("/api/clothing?page=1") is None
        assert cache.get("/api/outfits?page=1") == 3

    def test_clothing_write_invalidates_derived_families(self, cache):
        for key in ("/api/clothing", "/api/outfits", "/api/recommend/stats",
                    "/api/search?q=x", "/api/health"):
            cache.set(key, key)

        cache.invalidate_family("/api/clothing")

        assert cache.get("/api/clothing") is None
        assert cache.get("/api/outfits") is None
        assert cache.get("/api/recommend/stats") is None
        assert cache.get("/api/search?q=x") is None
        assert cache.get("/api/health") == "/api/health"

    def test_outfit_write_keeps_clothing(self, cache):
        cache.set("/api/clothing", "c")
        cache.set("/api/outfits", "o")

        cache.invalidate_family("/api/outfits")

        assert cache.get("/api/clothing") == "c"
        assert cache.get("/api/outfits") is None

    def test_sweep_drops_expired_entries(self, clock):
        from core.cache import ResponseCache

        cache = ResponseCache(clock=clock, sweep_interval=10)
        cache.set("/api/health", "h")
        clock.advance(61)

        cache.get("/api/clothing")

        assert cache.stats()["size"] == 0

    def test_disabled_cache_stores_nothing(self, clock):
        from core.cache import ResponseCache

        cache = ResponseCache(enabled=False, clock=clock)
        cache.set("/api/clothing", "c")

        assert cache.get("/api/clothing") is None
