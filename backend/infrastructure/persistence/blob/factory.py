from __future__ import annotations

from pathlib import Path
from typing import Optional

from application.ports.blob_store_port import BlobStorePort


def build_blob_store(
    backend: Optional[str] = None,
    *,
    path: Optional[Path] = None,
    redis_url: Optional[str] = None,
) -> BlobStorePort:
    from infrastructure.config import settings

    name = (backend or settings.CATALOG_STORE_BACKEND or "file").strip().lower()

    if name in {"file", "json", "json-file", "json_file"}:
        from infrastructure.persistence.blob.file_blob_store import JsonFileBlobStore

        return JsonFileBlobStore(path or settings.CATALOG_STORE_PATH)

    if name in {"memory", "in-memory", "in_memory"}:
        from infrastructure.persistence.blob.memory_blob_store import InMemoryBlobStore

        return InMemoryBlobStore()

    if name == "redis":
        from infrastructure.persistence.blob.redis_blob_store import RedisBlobStore

        return RedisBlobStore(
            redis_url=redis_url or settings.CATALOG_REDIS_URL,
            prefix=settings.CATALOG_REDIS_PREFIX,
            timeout_s=settings.CATALOG_REDIS_TIMEOUT_S,
        )

    raise ValueError(f"Unsupported CATALOG_STORE_BACKEND='{name}' (expected file|memory|redis)")
