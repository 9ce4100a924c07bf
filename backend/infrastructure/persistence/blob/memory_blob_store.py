from __future__ import annotations

import threading
from typing import Dict, Optional

from application.ports.blob_store_port import BlobStorePort


class InMemoryBlobStore(BlobStorePort):
    """Process-local blob store (tests/dev). Not durable across restarts."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = threading.Lock()
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = str(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._data)
