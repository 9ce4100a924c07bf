from __future__ import annotations

from infrastructure.persistence.blob.factory import build_blob_store  # noqa: F401
from infrastructure.persistence.blob.file_blob_store import JsonFileBlobStore  # noqa: F401
from infrastructure.persistence.blob.memory_blob_store import InMemoryBlobStore  # noqa: F401

__all__ = ["InMemoryBlobStore", "JsonFileBlobStore", "build_blob_store"]
