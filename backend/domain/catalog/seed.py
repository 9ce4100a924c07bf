from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List

import yaml

_DEFAULT_SEED_PATH = Path(__file__).resolve().parent / "seed_movies.yaml"
CATALOG_SEED_PATH_ENV = "CATALOG_SEED_PATH"


def _load_seed_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return data if isinstance(data, dict) else {}


def _resolve_seed_path(path: Path | None) -> Path:
    if path is not None:
        return path
    env_path = os.getenv(CATALOG_SEED_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return _DEFAULT_SEED_PATH


def load_seed_movies(path: Path | None = None) -> List[Dict[str, Any]]:
    """Raw seed payloads; validation happens when the store creates them."""
    raw = _load_seed_file(_resolve_seed_path(path)).get("movies", [])
    if not isinstance(raw, list):
        return []
    return [dict(entry) for entry in raw if isinstance(entry, dict)]


__all__ = [
    "CATALOG_SEED_PATH_ENV",
    "load_seed_movies",
]
