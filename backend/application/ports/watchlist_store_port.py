from __future__ import annotations

from typing import Any, Callable, Protocol

from application.reactive.live_value import LiveValue, Subscription


class WatchlistStorePort(Protocol):
    """Set of movie ids; mutations persist/notify only when membership changes."""

    @property
    def watchlist(self) -> LiveValue[frozenset[str]]:
        ...

    def subscribe(self, callback: Callable[[frozenset[str]], None]) -> Subscription:
        ...

    def ids(self) -> frozenset[str]:
        ...

    def has(self, movie_id: Any) -> bool:
        ...

    def add(self, movie_id: Any) -> bool:
        ...

    def remove(self, movie_id: Any) -> bool:
        ...

    def toggle(self, movie_id: Any) -> bool:
        """Returns the membership after the toggle."""
        ...

    def clear(self) -> bool:
        ...
