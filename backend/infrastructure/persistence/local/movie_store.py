from __future__ import annotations

import logging
import secrets
import time
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from application.catalog.schemas import (
    MovieCreate,
    MovieUpdate,
    parse_movie_create,
    parse_movie_update,
    parse_stored_movie,
)
from application.ports.blob_store_port import BlobStorePort
from application.ports.movie_store_port import MovieStorePort
from application.reactive.live_value import LiveValue
from domain.catalog import (
    DEFAULT_IMAGE_PROXY_BASE,
    NO_IMAGE_URL,
    BlobStoreError,
    InvalidMoviePayload,
    Movie,
    MovieNotFoundError,
    with_poster_fallback,
)
from infrastructure.persistence.local.entity_store import LocalEntityStore
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)

Snapshot = tuple[Movie, ...]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_MIGRATED = "1"


def _to_base36(value: int) -> str:
    if value <= 0:
        return "0"
    out: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_BASE36[rem])
    return "".join(reversed(out))


def generate_movie_id() -> str:
    """High-resolution timestamp plus 64 random bits, base36-encoded."""
    return _to_base36(time.time_ns()) + _to_base36(secrets.randbits(64))


def _parse_timestamp(raw: Any, *, default: datetime) -> datetime:
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        # JS `toISOString()` emits a trailing Z.
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return default
    else:
        return default
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def movie_to_record(movie: Movie) -> Dict[str, Any]:
    """Stored (camelCase) representation of a movie."""
    record: Dict[str, Any] = {
        "id": movie.id,
        "title": movie.title,
        "description": movie.description,
        "releaseYear": movie.release_year,
        "category": movie.category.value,
        "rating": movie.rating.value,
        "posterUrl": movie.poster_url,
        "dateAdded": movie.date_added.isoformat(),
        "isWatched": movie.is_watched,
    }
    if movie.duration is not None:
        record["duration"] = movie.duration
    if movie.director is not None:
        record["director"] = movie.director
    if movie.cast:
        record["cast"] = list(movie.cast)
    if movie.imdb_rating is not None:
        record["imdbRating"] = movie.imdb_rating
    return record


class LocalMovieStore(LocalEntityStore[Snapshot], MovieStorePort):
    """Movie catalog backed by a blob key, seeded and migrated on startup.

    Startup order: load stored records, seed if the catalog is empty, then run
    the one-time poster migration (guarded by a flag in its own key).
    Stored entries that cannot be read are kept aside and written back as-is,
    so a bad record never costs the rest of the catalog.
    """

    log_prefix = "[MovieStore]"

    def __init__(
        self,
        *,
        blob_store: BlobStorePort,
        storage_key: str = "movies",
        migration_flag_key: str = "movies_proxy_migrated_v1",
        proxy_base: str = DEFAULT_IMAGE_PROXY_BASE,
        fallback_poster_url: str = NO_IMAGE_URL,
        seed_movies: Optional[Sequence[Mapping[str, Any]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Callable[[], str] = generate_movie_id,
    ) -> None:
        super().__init__(blob_store=blob_store, storage_key=storage_key, empty=())
        self._migration_flag_key = migration_flag_key
        self._proxy_base = proxy_base
        self._fallback_poster_url = fallback_poster_url
        self._seed_movies: List[Mapping[str, Any]] = list(seed_movies or [])
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._id_factory = id_factory
        self._unreadable: tuple[Any, ...] = ()

        self._load()
        self.seed_if_empty()
        self.migrate_posters_once()

    # ---- helpers ----

    def _poster(self, url: Optional[str]) -> str:
        return with_poster_fallback(
            url,
            proxy_base=self._proxy_base,
            fallback=self._fallback_poster_url,
        )

    def _new_id(self, taken: set[str]) -> str:
        while True:
            candidate = str(self._id_factory())
            if candidate and candidate not in taken:
                return candidate

    def _materialize(self, dto: MovieCreate, *, movie_id: str, date_added: datetime) -> Movie:
        return Movie(
            id=movie_id,
            title=dto.title,
            description=dto.description,
            release_year=dto.release_year,
            category=dto.category,
            rating=dto.rating,
            duration=dto.duration,
            director=dto.director,
            cast=tuple(dto.cast),
            imdb_rating=dto.imdb_rating,
            poster_url=self._poster(dto.poster_url),
            date_added=date_added,
            is_watched=False,
        )

    def _decode(self, data: Any) -> Snapshot:
        if not isinstance(data, list):
            raise ValueError(f"expected a list of movies, got {type(data).__name__}")
        movies: list[Movie] = []
        unreadable: list[Any] = []
        seen: set[str] = set()
        for idx, record in enumerate(data):
            try:
                movie = self._record_to_movie(record)
            except (InvalidMoviePayload, TypeError, ValueError) as exc:
                logger.warning(
                    "%s %s",
                    self.log_prefix,
                    format_kv(event="keep_unreadable_record", index=idx, error=str(exc)),
                )
                unreadable.append(record)
                continue
            if movie.id in seen:
                logger.warning(
                    "%s %s",
                    self.log_prefix,
                    format_kv(event="skip_duplicate_id", index=idx, movie_id=movie.id),
                )
                continue
            seen.add(movie.id)
            movies.append(movie)
        self._unreadable = tuple(unreadable)
        return tuple(movies)

    def _record_to_movie(self, record: Any) -> Movie:
        if not isinstance(record, dict):
            raise TypeError(f"record must be an object, got {type(record).__name__}")
        raw_id = record.get("id")
        movie_id = str(raw_id).strip() if raw_id is not None else ""
        if not movie_id:
            raise ValueError("record has no id")
        dto = parse_stored_movie(record)
        date_added = _parse_timestamp(record.get("dateAdded", record.get("date_added")), default=self._clock())
        watched = record.get("isWatched", record.get("is_watched", False))
        movie = self._materialize(dto, movie_id=movie_id, date_added=date_added)
        return replace(movie, is_watched=bool(watched))

    def _encode(self, snapshot: Snapshot) -> list[Any]:
        return [movie_to_record(m) for m in snapshot] + list(self._unreadable)

    def _reserved_ids(self) -> set[str]:
        ids = {m.id for m in self._snapshot}
        ids.update(str(r["id"]) for r in self._unreadable if isinstance(r, dict) and r.get("id") is not None)
        return ids

    def _index_of(self, movie_id: str) -> int:
        for idx, movie in enumerate(self._snapshot):
            if movie.id == movie_id:
                return idx
        return -1

    # ---- read ----

    @property
    def movies(self) -> LiveValue[Snapshot]:
        return self._stream

    def list_movies(self) -> list[Movie]:
        return list(self._snapshot)

    def get_movie(self, movie_id: Any) -> Optional[Movie]:
        sid = str(movie_id)
        for movie in self._snapshot:
            if movie.id == sid:
                return movie
        return None

    # ---- write ----

    def create_movie(self, payload: Union[MovieCreate, Mapping[str, Any]]) -> Movie:
        dto = parse_movie_create(payload)
        with self._lock:
            current = self._snapshot
            movie = self._materialize(
                dto,
                movie_id=self._new_id(self._reserved_ids()),
                date_added=self._clock(),
            )
            self._commit(current + (movie,))
        logger.info("%s %s", self.log_prefix, format_kv(event="created", movie_id=movie.id, title=movie.title))
        return movie

    def update_movie(
        self,
        movie_id: Any,
        patch: Union[MovieUpdate, Mapping[str, Any], None] = None,
    ) -> Movie:
        sid = str(movie_id)
        changes = parse_movie_update(patch).changes()
        with self._lock:
            current = self._snapshot
            idx = self._index_of(sid)
            if idx == -1:
                raise MovieNotFoundError(sid)
            if "cast" in changes:
                changes["cast"] = tuple(changes["cast"] or ())
            merged = replace(current[idx], **changes)
            merged = replace(merged, poster_url=self._poster(merged.poster_url))
            self._commit(current[:idx] + (merged,) + current[idx + 1 :])
        return merged

    def delete_movie(self, movie_id: Any) -> bool:
        sid = str(movie_id)
        with self._lock:
            current = self._snapshot
            if self._index_of(sid) == -1:
                raise MovieNotFoundError(sid)
            self._commit(tuple(m for m in current if m.id != sid))
        logger.info("%s %s", self.log_prefix, format_kv(event="deleted", movie_id=sid))
        return True

    # ---- lifecycle ----

    def seed_if_empty(self, seed: Optional[Sequence[Mapping[str, Any]]] = None) -> int:
        """Create the seed catalog in one batch when (and only when) empty.

        Returns how many movies were seeded.
        """
        entries = list(seed) if seed is not None else self._seed_movies
        with self._lock:
            # Unreadable stored records still count: never seed over existing data.
            if self._snapshot or self._unreadable or not entries:
                return 0
            now = self._clock()
            taken: set[str] = set()
            seeded: list[Movie] = []
            for idx, entry in enumerate(entries):
                try:
                    dto = parse_movie_create(entry)
                except InvalidMoviePayload as exc:
                    logger.warning(
                        "%s %s",
                        self.log_prefix,
                        format_kv(event="skip_invalid_seed", index=idx, error=str(exc)),
                    )
                    continue
                movie_id = self._new_id(taken)
                taken.add(movie_id)
                # Strictly increasing timestamps keep the seed order stable.
                seeded.append(
                    self._materialize(dto, movie_id=movie_id, date_added=now + timedelta(milliseconds=idx))
                )
            if not seeded:
                return 0
            self._commit(tuple(seeded))
        logger.info("%s %s", self.log_prefix, format_kv(event="seeded", count=len(seeded)))
        return len(seeded)

    def _migration_done(self) -> bool:
        try:
            return bool(self._blob.get(self._migration_flag_key))
        except BlobStoreError as exc:
            # Re-running the rewrite is harmless, so an unreadable flag counts as unset.
            logger.warning(
                "%s %s",
                self.log_prefix,
                format_kv(event="flag_read_failed", key=self._migration_flag_key, error=str(exc)),
            )
            return False

    def migrate_posters_once(self) -> bool:
        """Rewrite every stored poster through the proxy normalizer, once.

        Returns True when the rewrite ran, False when the flag was already set.
        """
        with self._lock:
            if self._migration_done():
                return False
            current = self._snapshot
            migrated = tuple(replace(m, poster_url=self._poster(m.poster_url)) for m in current)
            self._commit(migrated)
            try:
                self._blob.set(self._migration_flag_key, _MIGRATED)
            except BlobStoreError as exc:
                logger.warning(
                    "%s %s",
                    self.log_prefix,
                    format_kv(event="flag_write_failed", key=self._migration_flag_key, error=str(exc)),
                )
        logger.info("%s %s", self.log_prefix, format_kv(event="posters_migrated", count=len(migrated)))
        return True

    def clear_and_reseed(self) -> None:
        """Development reset: drop stored movies and the migration flag, then seed + migrate."""
        with self._lock:
            for key in (self._storage_key, self._migration_flag_key):
                try:
                    self._blob.remove(key)
                except BlobStoreError as exc:
                    logger.warning(
                        "%s %s",
                        self.log_prefix,
                        format_kv(event="remove_failed", key=key, error=str(exc)),
                    )
            self._unreadable = ()
            self._commit((), persist=False)
            self.seed_if_empty()
            self.migrate_posters_once()
