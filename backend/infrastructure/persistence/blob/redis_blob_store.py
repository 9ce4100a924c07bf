from __future__ import annotations

from typing import Any, Optional

from application.ports.blob_store_port import BlobStorePort
from domain.catalog import BlobStoreError


class RedisBlobStore(BlobStorePort):
    """Redis-backed blob store (keys are namespaced with `prefix`).

    Notes:
    - Values are stored without TTL; the catalog must survive restarts.
    - Connection/command failures surface as BlobStoreError.
    """

    def __init__(
        self,
        *,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "catalog:",
        timeout_s: int = 5,
        client: Any = None,
    ) -> None:
        try:
            import redis  # type: ignore[import-not-found]
        except ImportError as e:  # pragma: no cover
            if client is None:
                raise ImportError(
                    "Redis blob store requires the 'redis' package. "
                    "Install it via: pip install redis"
                ) from e
            redis = None

        self._errors: tuple[type[BaseException], ...] = (OSError,)
        if redis is not None:
            self._errors = (redis.RedisError, OSError)

        if client is None:
            client = redis.from_url(
                redis_url,
                decode_responses=True,  # return str, not bytes
                socket_connect_timeout=timeout_s,
                socket_timeout=timeout_s,
            )
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            raw = self._client.get(self._key(key))
        except self._errors as exc:
            raise BlobStoreError(f"redis get failed: {exc}", key=key) from exc
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except self._errors as exc:
            raise BlobStoreError(f"redis set failed: {exc}", key=key) from exc

    def remove(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except self._errors as exc:
            raise BlobStoreError(f"redis delete failed: {exc}", key=key) from exc
