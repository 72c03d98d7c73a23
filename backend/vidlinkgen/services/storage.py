"""
Storage service abstraction for uploaded video files.

Provides a unified interface for object storage that can be backed by either
the local filesystem or a hosted Supabase Storage bucket.
"""
import logging
import os
import re
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional
from urllib.parse import quote

import httpx

from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import StorageError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def build_object_key(owner_id: uuid.UUID, filename: str) -> str:
    """
    Object key for an upload: {owner_id}/{epoch_ms}-{sanitized filename}.
    """
    name = os.path.basename(filename or "").strip() or "video"
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._") or "video"
    return f"{owner_id}/{int(time.time() * 1000)}-{name}"


def _stream_size(file_stream: BinaryIO) -> Optional[int]:
    try:
        current = file_stream.tell()
        file_stream.seek(0, os.SEEK_END)
        size = file_stream.tell()
        file_stream.seek(current)
        return size - current
    except (AttributeError, OSError):
        return None


def _iter_chunks(
    file_stream: BinaryIO, chunk_size: int, on_progress: Optional[ProgressCallback]
) -> Iterator[bytes]:
    total = _stream_size(file_stream)
    sent = 0
    while True:
        chunk = file_stream.read(chunk_size)
        if not chunk:
            break
        sent += len(chunk)
        if on_progress and total:
            on_progress(min(100, round(sent * 100 / total)))
        yield chunk
    if on_progress:
        on_progress(100)


class StorageService(ABC):
    """Abstract base class for object storage operations."""

    def __init__(self, bucket: Optional[str] = None):
        self.bucket = bucket or settings.storage_bucket

    @abstractmethod
    def put_object(
        self, key: str, file_stream: BinaryIO, on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """
        Store bytes under a key.

        Args:
            key: Object key inside the bucket
            file_stream: Binary file stream
            on_progress: Optional callback receiving upload percentage (0-100)

        Returns:
            The stored key
        """

    @abstractmethod
    def get_public_url(self, key: str) -> str:
        """
        Get the public URL for a stored object.
        """

    @abstractmethod
    def delete_object(self, key: str) -> bool:
        """
        Delete an object.

        Returns:
            True if deleted, False if not found
        """

    @abstractmethod
    def object_exists(self, key: str) -> bool:
        """
        Check if an object exists.
        """


class LocalStorageService(StorageService):
    """
    Local filesystem storage implementation.

    Stores objects in a local directory structure served under the media prefix:
    storage/
      {bucket}/
        {user_id}/
          {timestamp}-{filename}
    """

    def __init__(self, base_path: str = None, bucket: Optional[str] = None, public_base_url: str = None):
        super().__init__(bucket)
        self.base_path = Path(base_path or settings.local_storage_path)
        self.bucket_path = self.base_path / self.bucket
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")

        self.bucket_path.mkdir(parents=True, exist_ok=True)

    def _object_path(self, key: str) -> Path:
        path = (self.bucket_path / key).resolve()
        if self.bucket_path.resolve() not in path.parents:
            raise StorageError(f"Invalid object key: {key}")
        return path

    def put_object(
        self, key: str, file_stream: BinaryIO, on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """Write an object to the local bucket directory."""
        file_path = self._object_path(key)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(file_path, "wb") as f:
                for chunk in _iter_chunks(file_stream, settings.storage_chunk_size, on_progress):
                    f.write(chunk)
        except OSError as exc:
            file_path.unlink(missing_ok=True)
            raise StorageError(f"Upload failed: {exc}") from exc

        return key

    def get_public_url(self, key: str) -> str:
        return f"{self.public_base_url}{settings.media_url_prefix}/{self.bucket}/{quote(key)}"

    def delete_object(self, key: str) -> bool:
        file_path = self._object_path(key)
        if file_path.exists():
            file_path.unlink()
            return True
        return False

    def object_exists(self, key: str) -> bool:
        return self._object_path(key).exists()


class SupabaseStorageService(StorageService):
    """
    Hosted Supabase Storage implementation (REST API).
    """

    def __init__(
        self,
        base_url: str = None,
        service_key: str = None,
        bucket: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        super().__init__(bucket)
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.supabase_service_key
        if not self.base_url:
            raise ValueError("SUPABASE_URL must be set for the supabase storage backend")
        self._client = http_client or httpx.Client(timeout=None)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.service_key}", "apikey": self.service_key}

    def _object_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(key)}"

    def put_object(
        self, key: str, file_stream: BinaryIO, on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """Upload an object; existing keys are never overwritten."""
        headers = {**self._headers(), "x-upsert": "false", "cache-control": "3600"}
        try:
            response = self._client.post(
                self._object_url(key),
                headers=headers,
                content=_iter_chunks(file_stream, settings.storage_chunk_size, on_progress),
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"Upload failed: {exc}") from exc

        if response.status_code >= 400:
            raise StorageError(f"Upload failed: {response.text or response.status_code}")
        return key

    def get_public_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(key)}"

    def delete_object(self, key: str) -> bool:
        try:
            response = self._client.delete(self._object_url(key), headers=self._headers())
        except httpx.HTTPError as exc:
            raise StorageError(f"Delete failed: {exc}") from exc

        if response.status_code in (400, 404):
            return False
        if response.status_code >= 400:
            raise StorageError(f"Delete failed: {response.text or response.status_code}")
        return True

    def object_exists(self, key: str) -> bool:
        try:
            response = self._client.head(self.get_public_url(key))
        except httpx.HTTPError as exc:
            raise StorageError(f"Lookup failed: {exc}") from exc
        return response.status_code == 200


def get_storage_service() -> StorageService:
    """
    Factory function to get the appropriate storage service based on configuration.

    Returns:
        StorageService instance (Local or Supabase)
    """
    if settings.storage_backend == "local":
        return LocalStorageService()
    elif settings.storage_backend == "supabase":
        return SupabaseStorageService()
    else:
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


_storage_service: Optional[StorageService] = None


def get_storage() -> StorageService:
    """FastAPI dependency returning the configured storage service."""
    global _storage_service
    if _storage_service is None:
        _storage_service = get_storage_service()
    return _storage_service
