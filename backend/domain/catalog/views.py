from __future__ import annotations

from typing import AbstractSet, Iterable, Optional, Union

from domain.catalog.movie import Category, Movie

ALL_CATEGORIES = "All"

CategoryFilter = Union[Category, str]


def category_filter_options() -> list[str]:
    """Values offered by a category picker: "All" first, then every category."""
    return [ALL_CATEGORIES, *(c.value for c in Category)]


def _resolve_filter(selected: Optional[CategoryFilter]) -> Union[Category, str, None]:
    if selected is None:
        return ALL_CATEGORIES
    if isinstance(selected, Category):
        return selected
    text = str(selected).strip()
    if not text or text.casefold() == ALL_CATEGORIES.casefold():
        return ALL_CATEGORIES
    try:
        return Category.parse(text)
    except ValueError:
        # Unknown category: matches nothing.
        return None


def filter_by_category(movies: Iterable[Movie], selected: Optional[CategoryFilter]) -> list[Movie]:
    wanted = _resolve_filter(selected)
    if wanted == ALL_CATEGORIES:
        return list(movies)
    if wanted is None:
        return []
    return [m for m in movies if m.category == wanted]


def movies_in_watchlist(movies: Iterable[Movie], watchlist_ids: AbstractSet[str]) -> list[Movie]:
    return [m for m in movies if str(m.id) in watchlist_ids]


def compose_view(
    movies: Iterable[Movie],
    watchlist_ids: AbstractSet[str],
    *,
    category: Optional[CategoryFilter] = ALL_CATEGORIES,
    watchlist_only: bool = False,
) -> list[Movie]:
    """Project a catalog snapshot for display.

    Total over its inputs: an empty list is a valid result, never an error.
    Catalog order is preserved.
    """
    source = movies_in_watchlist(movies, watchlist_ids) if watchlist_only else list(movies)
    return filter_by_category(source, category)
