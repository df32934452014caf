"""
Catalog module: clothing items and outfits.

Provides:
- CatalogStore contract with Supabase and in-memory backends
- BlobStore for clothing images
- ClothingService / OutfitService CRUD with write-time validation
"""

from catalog.blob import BlobStore, InMemoryBlobStore, StoredObject, SupabaseBlobStore
from catalog.memory import InMemoryCatalogStore
from catalog.service import ClothingService, OutfitService
from catalog.store import CatalogStore, QueryResult, SupabaseCatalogStore, TextMatch

__all__ = [
    "CatalogStore",
    "SupabaseCatalogStore",
    "InMemoryCatalogStore",
    "QueryResult",
    "TextMatch",
    "BlobStore",
    "SupabaseBlobStore",
    "InMemoryBlobStore",
    "StoredObject",
    "ClothingService",
    "OutfitService",
]
