"""
Application context shared by every request.

The app factory builds one AppContext (settings, stores, cache, services)
and stores it on ``app.state.context``; handlers receive it through the
``get_context`` dependency instead of reaching for module-level globals.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import Request

from catalog.blob import BlobStore, InMemoryBlobStore, SupabaseBlobStore
from catalog.memory import InMemoryCatalogStore
from catalog.service import ClothingService, OutfitService
from catalog.store import CatalogStore, SupabaseCatalogStore
from config.settings import Settings
from core.cache import ResponseCache, build_cache_key
from core.logging import get_logger
from media.service import UploadService
from recs.engine import RecommendationEngine
from search.service import SearchService


logger = get_logger(__name__)


@dataclass
class AppContext:
    settings: Settings
    store: CatalogStore
    blob: BlobStore
    cache: ResponseCache
    clothing: ClothingService
    outfits: OutfitService
    recommender: RecommendationEngine
    search: SearchService
    uploads: UploadService

    def cached(
        self,
        request: Request,
        factory: Callable[[], Any],
        keep: Optional[Callable[[Any], bool]] = None,
    ) -> Any:
        """Serve a GET body from the response cache, computing it on a miss."""
        key = build_cache_key(request.url.path, dict(request.query_params))
        return self.cache.get_or_set(key, factory, keep)

    def invalidate(self, family: str) -> None:
        """Drop cached responses after a write to ``family``."""
        self.cache.invalidate_family(family)


def build_context(
    settings: Settings,
    store: Optional[CatalogStore] = None,
    blob: Optional[BlobStore] = None,
    cache: Optional[ResponseCache] = None,
) -> AppContext:
    """
    Wire stores and services for the configured backend.

    Explicit ``store``/``blob`` arguments take precedence over
    ``settings.catalog_backend``.
    """
    if store is None or blob is None:
        if settings.catalog_backend == "memory":
            logger.warning("Using in-memory catalog backend; data is not persisted")
            store = store or InMemoryCatalogStore()
            blob = blob or InMemoryBlobStore(settings.storage_bucket, settings.supabase_url)
        else:
            from config.database import build_supabase_client

            client = build_supabase_client(settings)
            store = store or SupabaseCatalogStore(client)
            blob = blob or SupabaseBlobStore(client, settings.storage_bucket)

    return AppContext(
        settings=settings,
        store=store,
        blob=blob,
        cache=cache or ResponseCache(enabled=settings.cache_enabled),
        clothing=ClothingService(store),
        outfits=OutfitService(store),
        recommender=RecommendationEngine(store),
        search=SearchService(store),
        uploads=UploadService(blob, settings),
    )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application's context."""
    return request.app.state.context
