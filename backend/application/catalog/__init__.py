from __future__ import annotations

from application.catalog.schemas import (  # noqa: F401
    MovieCreate,
    MovieUpdate,
    parse_movie_create,
    parse_movie_update,
    parse_stored_movie,
)
from application.catalog.view_service import CatalogView, catalog_view, watchlist_view  # noqa: F401

__all__ = [
    "CatalogView",
    "MovieCreate",
    "MovieUpdate",
    "catalog_view",
    "parse_movie_create",
    "parse_movie_update",
    "parse_stored_movie",
    "watchlist_view",
]
