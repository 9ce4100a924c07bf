from __future__ import annotations

from application.reactive.live_value import (  # noqa: F401
    CombinedValue,
    LiveValue,
    Subscription,
    combine_latest,
)

__all__ = ["CombinedValue", "LiveValue", "Subscription", "combine_latest"]
