from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Protocol, Sequence, Union

from application.reactive.live_value import LiveValue, Subscription
from domain.catalog import Movie

if TYPE_CHECKING:
    from application.catalog.schemas import MovieCreate, MovieUpdate


class MovieStorePort(Protocol):
    @property
    def movies(self) -> LiveValue[tuple[Movie, ...]]:
        ...

    def subscribe(self, callback: Callable[[tuple[Movie, ...]], None]) -> Subscription:
        ...

    def list_movies(self) -> list[Movie]:
        ...

    def get_movie(self, movie_id: Any) -> Optional[Movie]:
        ...

    def create_movie(self, payload: Union[MovieCreate, Mapping[str, Any]]) -> Movie:
        ...

    def update_movie(
        self,
        movie_id: Any,
        patch: Union[MovieUpdate, Mapping[str, Any], None] = None,
    ) -> Movie:
        """Raises MovieNotFoundError when `movie_id` is unknown."""
        ...

    def delete_movie(self, movie_id: Any) -> bool:
        """Raises MovieNotFoundError when `movie_id` is unknown."""
        ...

    def seed_if_empty(self, seed: Optional[Sequence[Mapping[str, Any]]] = None) -> int:
        ...

    def migrate_posters_once(self) -> bool:
        ...

    def clear_and_reseed(self) -> None:
        ...
