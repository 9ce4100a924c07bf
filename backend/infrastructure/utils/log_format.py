from __future__ import annotations

import json
from typing import Any


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (str, list, tuple, dict)):
        # Quoted so ids/urls with spaces or symbols stay unambiguous.
        return json.dumps(value, ensure_ascii=False, default=str)
    return json.dumps(str(value), ensure_ascii=False)


def format_kv(**fields: Any) -> str:
    """
    Render a compact single-line key=value log string; None values are skipped.

    Example:
      event="persist_failed" key="movies" count=13
    """
    return " ".join(f"{key}={_format_value(value)}" for key, value in fields.items() if value is not None)
