from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from application.ports.blob_store_port import BlobStorePort
from domain.catalog import BlobStoreError
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)


class JsonFileBlobStore(BlobStorePort):
    """All keys in one JSON object on disk; every write atomically replaces the file.

    Limitation: single process only. Two processes writing the same file will
    lose each other's updates (last writer wins).
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._lock = threading.Lock()
        self._data: Optional[Dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            self._data = {}
            return self._data
        except OSError as exc:
            raise BlobStoreError(f"cannot read blob file {self._path}: {exc}") from exc

        try:
            text = raw.decode("utf-8")
            parsed = json.loads(text) if text.strip() else {}
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning(
                "[JsonFileBlobStore] %s",
                format_kv(event="malformed_file", path=str(self._path), error=str(exc)),
            )
            parsed = {}
        if not isinstance(parsed, dict):
            logger.warning(
                "[JsonFileBlobStore] %s",
                format_kv(event="unexpected_shape", path=str(self._path), type=type(parsed).__name__),
            )
            parsed = {}
        self._data = {str(k): v for k, v in parsed.items() if isinstance(v, str)}
        return self._data

    def _flush(self, data: Dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=str(self._path.parent)
            )
            try:
                handle = os.fdopen(fd, "w", encoding="utf-8")
            except BaseException:
                os.close(fd)
                Path(tmp_name).unlink(missing_ok=True)
                raise
            try:
                with handle:
                    json.dump(data, handle, ensure_ascii=False)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise BlobStoreError(f"cannot write blob file {self._path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            current = self._load()
            updated = {**current, key: str(value)}
            try:
                self._flush(updated)
            except BlobStoreError as exc:
                exc.key = key
                raise
            self._data = updated

    def remove(self, key: str) -> None:
        with self._lock:
            current = self._load()
            if key not in current:
                return
            updated = {k: v for k, v in current.items() if k != key}
            try:
                self._flush(updated)
            except BlobStoreError as exc:
                exc.key = key
                raise
            self._data = updated
