from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, TypeVar

from application.ports.blob_store_port import BlobStorePort
from application.reactive.live_value import LiveValue, Subscription
from domain.catalog import BlobStoreError
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)

S = TypeVar("S")


class LocalEntityStore(ABC, Generic[S]):
    """In-memory snapshot, mirrored to one blob key, published as a LiveValue.

    Every mutation runs `compute -> replace in memory -> persist -> push` under
    the store lock, so subscribers only ever see a snapshot whose write has
    already been attempted. A failed write is logged and does not roll back
    the in-memory state.

    Subclasses implement `_decode` (stored JSON -> snapshot, may raise
    ValueError/TypeError for wrongly shaped data) and `_encode`.
    """

    log_prefix = "[LocalEntityStore]"

    def __init__(self, *, blob_store: BlobStorePort, storage_key: str, empty: S) -> None:
        self._blob = blob_store
        self._storage_key = storage_key
        self._empty = empty
        self._lock = threading.RLock()
        self._snapshot: S = empty
        self._stream: LiveValue[S] = LiveValue(empty)

    # ---- hooks ----

    @abstractmethod
    def _decode(self, data: Any) -> S:
        ...

    @abstractmethod
    def _encode(self, snapshot: S) -> Any:
        ...

    # ---- read ----

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def snapshot(self) -> S:
        return self._snapshot

    def subscribe(self, callback: Callable[[S], None]) -> Subscription:
        return self._stream.subscribe(callback)

    # ---- load / persist ----

    def _read_stored(self) -> Optional[Any]:
        """Parsed blob content, or None when absent/unreadable/unparseable."""
        try:
            raw = self._blob.get(self._storage_key)
        except BlobStoreError as exc:
            logger.warning(
                "%s %s",
                self.log_prefix,
                format_kv(event="load_failed", key=self._storage_key, error=str(exc)),
            )
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            logger.warning(
                "%s %s",
                self.log_prefix,
                format_kv(event="malformed_blob", key=self._storage_key, error=str(exc)),
            )
            return None

    def _load(self) -> S:
        data = self._read_stored()
        if data is None:
            snapshot = self._empty
        else:
            try:
                snapshot = self._decode(data)
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "%s %s",
                    self.log_prefix,
                    format_kv(event="unexpected_shape", key=self._storage_key, error=str(exc)),
                )
                snapshot = self._empty
        with self._lock:
            self._snapshot = snapshot
            self._stream.push(snapshot)
        return snapshot

    def _persist(self, snapshot: S) -> bool:
        try:
            payload = json.dumps(self._encode(snapshot), ensure_ascii=False)
            self._blob.set(self._storage_key, payload)
        except (BlobStoreError, TypeError, ValueError) as exc:
            logger.warning(
                "%s %s",
                self.log_prefix,
                format_kv(event="persist_failed", key=self._storage_key, error=str(exc)),
                exc_info=True,
            )
            return False
        return True

    def _commit(self, snapshot: S, *, persist: bool = True) -> S:
        with self._lock:
            self._snapshot = snapshot
            if persist:
                self._persist(snapshot)
            self._stream.push(snapshot)
        return snapshot
