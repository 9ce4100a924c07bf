from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Generic, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Callback = Callable[[T], None]


class Subscription:
    """Handle returned by `LiveValue.subscribe`; idempotent `unsubscribe()`."""

    def __init__(self, detach: Callable[[], None]) -> None:
        self._detach = detach
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._detach()


class LiveValue(Generic[T]):
    """Current value plus push notifications.

    A new subscriber is called immediately with the current value and then with
    every value pushed afterwards, in push order. Only the latest value is kept;
    there is no replay of history.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._callbacks: List[Callback] = []
        self._lock = threading.RLock()
        self._pending: deque = deque()
        self._delivering = False

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callback) -> Subscription:
        with self._lock:
            self._callbacks.append(callback)
            current = self._value

        def _detach() -> None:
            with self._lock:
                try:
                    self._callbacks.remove(callback)
                except ValueError:
                    pass

        subscription = Subscription(_detach)
        self._deliver(callback, current)
        return subscription

    def push(self, value: T) -> None:
        """Set and deliver `value`.

        A push made from inside a subscriber callback is queued until the
        current value has reached every subscriber, so all subscribers see
        values in the same order and end on the latest one.
        """
        with self._lock:
            self._pending.append(value)
            if self._delivering:
                return
            self._delivering = True
            try:
                while self._pending:
                    current = self._pending.popleft()
                    self._value = current
                    for callback in list(self._callbacks):
                        self._deliver(callback, current)
            finally:
                self._delivering = False

    @staticmethod
    def _deliver(callback: Callback, value: Any) -> None:
        # A failing subscriber must not stop delivery to the others.
        try:
            callback(value)
        except Exception:
            logger.exception("live value subscriber failed: callback=%r", callback)


class CombinedValue(LiveValue[T]):
    """Recomputes `combine(*latest)` whenever any source pushes."""

    def __init__(self, sources: Sequence[LiveValue[Any]], combine: Callable[..., T]) -> None:
        self._sources = list(sources)
        self._combine = combine
        self._latest: List[Any] = [source.value for source in self._sources]
        self._ready = False
        super().__init__(combine(*self._latest))
        self._source_subscriptions = [
            source.subscribe(self._make_listener(idx)) for idx, source in enumerate(self._sources)
        ]
        self._ready = True

    def _make_listener(self, idx: int) -> Callback:
        def _on_source(value: Any) -> None:
            self._latest[idx] = value
            if self._ready:
                self.push(self._combine(*self._latest))

        return _on_source

    def close(self) -> None:
        for subscription in self._source_subscriptions:
            subscription.unsubscribe()
        self._source_subscriptions = []


def combine_latest(sources: Sequence[LiveValue[Any]], combine: Callable[..., T]) -> CombinedValue[T]:
    return CombinedValue(sources, combine)


__all__ = [
    "CombinedValue",
    "LiveValue",
    "Subscription",
    "combine_latest",
]
