from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from application.ports.blob_store_port import BlobStorePort
from domain.catalog.seed import load_seed_movies
from infrastructure.config import settings
from infrastructure.persistence.blob import build_blob_store
from infrastructure.persistence.local import LocalMovieStore, LocalWatchlistStore


@dataclass(frozen=True)
class CatalogServices:
    blob_store: BlobStorePort
    movies: LocalMovieStore
    watchlist: LocalWatchlistStore


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.CATALOG_LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_catalog(
    blob_store: Optional[BlobStorePort] = None,
    *,
    seed_on_empty: Optional[bool] = None,
) -> CatalogServices:
    """Wire the blob store and both local stores from infrastructure settings."""
    blob = blob_store if blob_store is not None else build_blob_store()
    seed = settings.CATALOG_SEED_ON_EMPTY if seed_on_empty is None else seed_on_empty

    movies = LocalMovieStore(
        blob_store=blob,
        storage_key=settings.MOVIES_STORAGE_KEY,
        migration_flag_key=settings.POSTER_MIGRATION_FLAG_KEY,
        proxy_base=settings.IMAGE_PROXY_BASE,
        fallback_poster_url=settings.POSTER_FALLBACK_URL,
        seed_movies=load_seed_movies() if seed else None,
    )
    watchlist = LocalWatchlistStore(blob_store=blob, storage_key=settings.WATCHLIST_STORAGE_KEY)
    return CatalogServices(blob_store=blob, movies=movies, watchlist=watchlist)


@lru_cache(maxsize=1)
def get_catalog() -> CatalogServices:
    """Process-wide stores (one writer per store for the process lifetime)."""
    return build_catalog()
