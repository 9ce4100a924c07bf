from __future__ import annotations

import logging
from typing import Any

from application.ports.blob_store_port import BlobStorePort
from application.ports.watchlist_store_port import WatchlistStorePort
from application.reactive.live_value import LiveValue
from infrastructure.persistence.local.entity_store import LocalEntityStore

logger = logging.getLogger(__name__)


def _as_id(movie_id: Any) -> str:
    return str(movie_id)


class LocalWatchlistStore(LocalEntityStore[frozenset], WatchlistStorePort):
    """Watchlist membership set, persisted as a JSON list of ids."""

    log_prefix = "[WatchlistStore]"

    def __init__(self, *, blob_store: BlobStorePort, storage_key: str = "watchlist") -> None:
        super().__init__(blob_store=blob_store, storage_key=storage_key, empty=frozenset())
        self._load()

    def _decode(self, data: Any) -> frozenset:
        if not isinstance(data, list):
            raise ValueError(f"expected a list of ids, got {type(data).__name__}")
        return frozenset(str(x) for x in data if isinstance(x, (str, int)) and not isinstance(x, bool))

    def _encode(self, snapshot: frozenset) -> list[str]:
        return sorted(snapshot)

    @property
    def watchlist(self) -> LiveValue[frozenset]:
        return self._stream

    def ids(self) -> frozenset:
        return self._snapshot

    def has(self, movie_id: Any) -> bool:
        return _as_id(movie_id) in self._snapshot

    def add(self, movie_id: Any) -> bool:
        sid = _as_id(movie_id)
        with self._lock:
            if sid in self._snapshot:
                return False
            self._commit(self._snapshot | {sid})
        return True

    def remove(self, movie_id: Any) -> bool:
        sid = _as_id(movie_id)
        with self._lock:
            if sid not in self._snapshot:
                return False
            self._commit(self._snapshot - {sid})
        return True

    def toggle(self, movie_id: Any) -> bool:
        with self._lock:
            if self.has(movie_id):
                self.remove(movie_id)
                return False
            self.add(movie_id)
            return True

    def clear(self) -> bool:
        with self._lock:
            if not self._snapshot:
                return False
            self._commit(frozenset())
        logger.info("%s cleared", self.log_prefix)
        return True
