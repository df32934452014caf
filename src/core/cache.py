"""
In-process response cache.

Successful GET responses are kept for a TTL that depends on the endpoint
family (recommendations longest, health shortest). Entries are evicted
lazily when read after expiry, during periodic sweeps, or explicitly by
prefix after a write to the same resource family.
"""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from config.constants import CACHE_INVALIDATION, CACHE_TTLS, DEFAULT_CACHE_TTL
from core.logging import get_logger


logger = get_logger(__name__)


@dataclass
class CacheEntry:
    value: Any
    stored_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.stored_at >= self.ttl


def build_cache_key(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Key = path plus sorted query params, so param order does not matter."""
    if not params:
        return path
    query = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return f"{path}?{query}"


class ResponseCache:
    """
    Thread-safe TTL cache keyed by request path and params.

    Handlers run in FastAPI's threadpool, so every access takes the lock.
    """

    def __init__(
        self,
        ttls: Optional[Dict[str, int]] = None,
        default_ttl: int = DEFAULT_CACHE_TTL,
        invalidation: Optional[Dict[str, Tuple[str, ...]]] = None,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 60.0,
    ):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._ttls = dict(CACHE_TTLS if ttls is None else ttls)
        self._default_ttl = default_ttl
        self._invalidation = dict(CACHE_INVALIDATION if invalidation is None else invalidation)
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()
        self.enabled = enabled
        self.hits = 0
        self.misses = 0

    def ttl_for(self, key: str) -> int:
        """Longest matching family prefix wins."""
        best = None
        for prefix in self._ttls:
            if key.startswith(prefix) and (best is None or len(prefix) > len(best)):
                best = prefix
        return self._ttls[best] if best is not None else self._default_ttl

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        now = self._clock()
        with self._lock:
            self._maybe_sweep(now)
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.expired(now):
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = CacheEntry(
                value=value,
                stored_at=self._clock(),
                ttl=self.ttl_for(key) if ttl is None else ttl,
            )

    def get_or_set(
        self,
        key: str,
        factory: Callable[[], Any],
        keep: Optional[Callable[[Any], bool]] = None,
    ) -> Any:
        """
        Return the cached value or compute, store and return a fresh one.

        Exceptions from ``factory`` propagate and nothing is stored. A fresh
        value is only stored when ``keep`` (if given) accepts it.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        value = factory()
        if keep is None or keep(value):
            self.set(key, value)
        return value

    def invalidate(self, prefix: Optional[str] = None) -> int:
        """Drop entries whose key starts with ``prefix`` (all when None)."""
        with self._lock:
            if prefix is None:
                count = len(self._entries)
                self._entries.clear()
            else:
                doomed = [k for k in self._entries if k.startswith(prefix)]
                for k in doomed:
                    del self._entries[k]
                count = len(doomed)
        if count:
            logger.debug("Cache invalidated", prefix=prefix, entries=count)
        return count

    def invalidate_family(self, family: str) -> int:
        """Invalidate a written family and every family derived from it."""
        prefixes: Iterable[str] = self._invalidation.get(family, (family,))
        return sum(self.invalidate(prefix) for prefix in prefixes)

    def _maybe_sweep(self, now: float) -> None:
        # Caller holds the lock
        if now - self._last_sweep < self._sweep_interval:
            return
        expired = [k for k, e in self._entries.items() if e.expired(now)]
        for k in expired:
            del self._entries[k]
        self._last_sweep = now
        if expired:
            logger.debug("Cache sweep", removed=len(expired))

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            size = len(self._entries)
        return {
            "enabled": self.enabled,
            "size": size,
            "hits": self.hits,
            "misses": self.misses,
        }
