"""
Blob store for clothing images (Supabase Storage bucket).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional, Tuple

import httpx
from storage3.exceptions import StorageApiError
from supabase import Client

from core.errors import StoreError
from core.logging import get_logger


logger = get_logger(__name__)


@dataclass
class StoredObject:
    """Result of a successful upload."""
    path: str
    url: str
    size: int


class BlobStore(ABC):

    def __init__(self, bucket: str):
        self.bucket = bucket

    @abstractmethod
    def upload(self, key: str, data: bytes, content_type: str) -> str:
        """Store bytes under ``key`` and return the stored path."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Public URL for a stored key."""

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        path = self.upload(key, data, content_type)
        return StoredObject(path=path, url=self.public_url(key), size=len(data))


class SupabaseBlobStore(BlobStore):

    def __init__(self, client: Client, bucket: str):
        super().__init__(bucket)
        self.client = client

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        try:
            response = self.client.storage.from_(self.bucket).upload(
                key,
                data,
                file_options={
                    "content-type": content_type,
                    "cache-control": "3600",
                    "upsert": "false",
                },
            )
        except StorageApiError as e:
            logger.error("Storage upload failed", bucket=self.bucket, key=key, error=str(e))
            raise StoreError(f"Storage upload failed: {e.message}", store_code=str(e.code)) from e
        except httpx.HTTPError as e:
            logger.error("Storage unavailable", bucket=self.bucket, key=key, error=str(e))
            raise StoreError(f"Storage unavailable: {e}") from e
        return getattr(response, "path", None) or key

    def public_url(self, key: str) -> str:
        return self.client.storage.from_(self.bucket).get_public_url(key)


class InMemoryBlobStore(BlobStore):
    """Dict-backed blob store for development and tests."""

    def __init__(self, bucket: str, base_url: str = "http://localhost"):
        super().__init__(bucket)
        self.base_url = base_url.rstrip("/")
        self._objects: Dict[str, Tuple[bytes, str]] = {}
        self._lock = Lock()

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        with self._lock:
            if key in self._objects:
                raise StoreError("The resource already exists", store_code="Duplicate")
            self._objects[key] = (data, content_type)
        return key

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{key}"

    def read(self, key: str) -> Optional[Tuple[bytes, str]]:
        with self._lock:
            return self._objects.get(key)
