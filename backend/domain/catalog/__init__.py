from __future__ import annotations

from domain.catalog.errors import (  # noqa: F401
    BlobStoreError,
    CatalogError,
    InvalidMoviePayload,
    MovieNotFoundError,
)
from domain.catalog.movie import MIN_RELEASE_YEAR, Category, Movie, Rating  # noqa: F401
from domain.catalog.poster import (  # noqa: F401
    DEFAULT_IMAGE_PROXY_BASE,
    NO_IMAGE_URL,
    display_poster_url,
    normalize_poster_url,
    with_poster_fallback,
)
from domain.catalog.views import (  # noqa: F401
    ALL_CATEGORIES,
    category_filter_options,
    compose_view,
    filter_by_category,
    movies_in_watchlist,
)

__all__ = [
    "ALL_CATEGORIES",
    "BlobStoreError",
    "CatalogError",
    "Category",
    "DEFAULT_IMAGE_PROXY_BASE",
    "InvalidMoviePayload",
    "MIN_RELEASE_YEAR",
    "Movie",
    "MovieNotFoundError",
    "NO_IMAGE_URL",
    "Rating",
    "category_filter_options",
    "compose_view",
    "display_poster_url",
    "filter_by_category",
    "movies_in_watchlist",
    "normalize_poster_url",
    "with_poster_fallback",
]
