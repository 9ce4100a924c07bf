from __future__ import annotations

from infrastructure.persistence.local.entity_store import LocalEntityStore  # noqa: F401
from infrastructure.persistence.local.movie_store import LocalMovieStore, generate_movie_id  # noqa: F401
from infrastructure.persistence.local.watchlist_store import LocalWatchlistStore  # noqa: F401

__all__ = ["LocalEntityStore", "LocalMovieStore", "LocalWatchlistStore", "generate_movie_id"]
