from __future__ import annotations

from typing import AbstractSet, Callable, Optional, Sequence

from application.ports.movie_store_port import MovieStorePort
from application.ports.watchlist_store_port import WatchlistStorePort
from application.reactive.live_value import LiveValue, Subscription, combine_latest
from domain.catalog import ALL_CATEGORIES, Movie, compose_view
from domain.catalog.views import CategoryFilter


class CatalogView:
    """Live, filtered projection of the catalog.

    Recomputed on every push from the catalog stream, the watchlist stream, or
    a change of the selected category. With `watchlist_only=True` only movies
    whose id is in the watchlist are kept before the category filter runs.
    """

    def __init__(
        self,
        movies: LiveValue[Sequence[Movie]],
        watchlist: LiveValue[AbstractSet[str]],
        *,
        category: Optional[CategoryFilter] = ALL_CATEGORIES,
        watchlist_only: bool = False,
    ) -> None:
        self._watchlist_only = watchlist_only
        self._category = LiveValue(category)
        self._view = combine_latest([movies, watchlist, self._category], self._compose)

    def _compose(
        self,
        movies: Sequence[Movie],
        watchlist_ids: AbstractSet[str],
        category: Optional[CategoryFilter],
    ) -> list[Movie]:
        return compose_view(
            movies or (),
            watchlist_ids or frozenset(),
            category=category,
            watchlist_only=self._watchlist_only,
        )

    @property
    def watchlist_only(self) -> bool:
        return self._watchlist_only

    @property
    def category(self) -> Optional[CategoryFilter]:
        return self._category.value

    @category.setter
    def category(self, value: Optional[CategoryFilter]) -> None:
        self._category.push(value)

    @property
    def movies(self) -> list[Movie]:
        return list(self._view.value)

    def subscribe(self, callback: Callable[[list[Movie]], None]) -> Subscription:
        return self._view.subscribe(callback)

    def close(self) -> None:
        self._view.close()


def catalog_view(
    movie_store: MovieStorePort,
    watchlist_store: WatchlistStorePort,
    *,
    category: Optional[CategoryFilter] = ALL_CATEGORIES,
) -> CatalogView:
    """Full catalog, filtered by category."""
    return CatalogView(movie_store.movies, watchlist_store.watchlist, category=category)


def watchlist_view(
    movie_store: MovieStorePort,
    watchlist_store: WatchlistStorePort,
    *,
    category: Optional[CategoryFilter] = ALL_CATEGORIES,
) -> CatalogView:
    """Watchlisted movies only, filtered by category."""
    return CatalogView(
        movie_store.movies,
        watchlist_store.watchlist,
        category=category,
        watchlist_only=True,
    )


__all__ = ["CatalogView", "catalog_view", "watchlist_view"]
