import os
from pathlib import Path

from dotenv import load_dotenv

from domain.catalog.poster import DEFAULT_IMAGE_PROXY_BASE, NO_IMAGE_URL

# The project-root .env is the main dev config source and wins over the shell,
# otherwise edits to .env silently lose to stale exported values.
load_dotenv(override=True)


def _get_env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be an integer, got {raw!r}") from exc


def _get_env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_str(key: str, default: str) -> str:
    raw = os.getenv(key)
    return default if raw is None or raw.strip() == "" else raw.strip()


# ===== Paths =====
#
# All backend code lives under `<repo>/backend/`; runtime artifacts go to
# `<repo>/files/`, never under `backend/`.

INFRASTRUCTURE_DIR = Path(__file__).resolve().parent.parent  # backend/infrastructure/
_BACKEND_DIR = INFRASTRUCTURE_DIR.parent  # backend/

# Installed packages / containers have no monorepo layout: fall back to cwd.
if _BACKEND_DIR.name == "backend":
    PROJECT_ROOT = _BACKEND_DIR.parent
else:
    PROJECT_ROOT = Path.cwd()

RUNTIME_ROOT = Path(os.getenv("RUNTIME_ROOT", PROJECT_ROOT / "files")).expanduser()


# ===== Durable blob store =====

# file | memory | redis
CATALOG_STORE_BACKEND = _get_env_str("CATALOG_STORE_BACKEND", "file").lower()
CATALOG_STORE_PATH = Path(
    os.getenv("CATALOG_STORE_PATH", RUNTIME_ROOT / "catalog_store.json")
).expanduser()
CATALOG_REDIS_URL = _get_env_str("CATALOG_REDIS_URL", "redis://localhost:6379/0")
CATALOG_REDIS_PREFIX = _get_env_str("CATALOG_REDIS_PREFIX", "catalog:")
CATALOG_REDIS_TIMEOUT_S = _get_env_int("CATALOG_REDIS_TIMEOUT_S", 5) or 5

# Logical keys inside the blob store.
MOVIES_STORAGE_KEY = _get_env_str("CATALOG_MOVIES_KEY", "movies")
WATCHLIST_STORAGE_KEY = _get_env_str("CATALOG_WATCHLIST_KEY", "watchlist")
POSTER_MIGRATION_FLAG_KEY = _get_env_str("CATALOG_MIGRATION_FLAG_KEY", "movies_proxy_migrated_v1")


# ===== Posters =====

IMAGE_PROXY_BASE = _get_env_str("IMAGE_PROXY_BASE", DEFAULT_IMAGE_PROXY_BASE)
POSTER_FALLBACK_URL = _get_env_str("POSTER_FALLBACK_URL", NO_IMAGE_URL)


# ===== Seeding / logging =====

CATALOG_SEED_ON_EMPTY = _get_env_bool("CATALOG_SEED_ON_EMPTY", True)
CATALOG_LOG_LEVEL = _get_env_str("CATALOG_LOG_LEVEL", "INFO").upper()
