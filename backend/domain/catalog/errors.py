from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog/watchlist errors."""


class MovieNotFoundError(CatalogError, LookupError):
    def __init__(self, movie_id: str) -> None:
        self.movie_id = str(movie_id)
        super().__init__(f"Movie with ID {self.movie_id} not found")


class InvalidMoviePayload(CatalogError, ValueError):
    """Create/update input failed validation; no state was changed."""

    def __init__(self, message: str, *, errors: list | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class BlobStoreError(CatalogError):
    """A durable blob read/write failed (capacity, permissions, connectivity)."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
