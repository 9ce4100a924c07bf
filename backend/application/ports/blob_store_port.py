from __future__ import annotations

from typing import Optional, Protocol


class BlobStorePort(Protocol):
    """Durable named-string storage (survives process restarts).

    `get`/`set`/`remove` raise `domain.catalog.BlobStoreError` when the medium is
    unavailable or full; callers decide whether that is fatal.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...
