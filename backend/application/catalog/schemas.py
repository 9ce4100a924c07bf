from __future__ import annotations

from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from domain.catalog import MIN_RELEASE_YEAR, Category, InvalidMoviePayload, Rating


_REQUIRED_ON_RECORD = frozenset(
    {"title", "description", "release_year", "category", "rating", "is_watched"}
)


def _split_cast(value: Any) -> Any:
    # The add form sends a single comma-separated string.
    if value is None:
        return []
    if isinstance(value, str):
        return [name.strip() for name in value.split(",") if name.strip()]
    if isinstance(value, (list, tuple)):
        return [str(name).strip() for name in value if str(name or "").strip()]
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class _MovieFields(BaseModel):
    # Accept both camelCase (stored/JS-style) and snake_case keys.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    @field_validator("category", mode="before", check_fields=False)
    @classmethod
    def _parse_category(cls, value: Any) -> Any:
        return value if value is None else Category.parse(value)

    @field_validator("rating", mode="before", check_fields=False)
    @classmethod
    def _parse_rating(cls, value: Any) -> Any:
        return value if value is None else Rating.parse(value)

    @field_validator("cast", mode="before", check_fields=False)
    @classmethod
    def _parse_cast(cls, value: Any) -> Any:
        return _split_cast(value)

    @field_validator(
        "duration", "director", "imdb_rating", "poster_url", mode="before", check_fields=False
    )
    @classmethod
    def _optional_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class MovieCreate(_MovieFields):
    """Payload for creating a movie (store assigns id/date_added/is_watched)."""

    title: str = Field(min_length=1)
    description: str = ""
    release_year: int = Field(ge=MIN_RELEASE_YEAR)
    category: Category
    rating: Rating
    duration: Optional[int] = Field(default=None, gt=0)
    director: Optional[str] = None
    cast: List[str] = Field(default_factory=list)
    imdb_rating: Optional[float] = None
    poster_url: Optional[str] = None

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, value: Any) -> Any:
        return "" if value is None else value


class MovieUpdate(_MovieFields):
    """Partial update; only fields explicitly present are applied.

    `id` and `date_added` are not part of the model, so they can never be
    overwritten through an update.
    """

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    release_year: Optional[int] = Field(default=None, ge=MIN_RELEASE_YEAR)
    category: Optional[Category] = None
    rating: Optional[Rating] = None
    duration: Optional[int] = Field(default=None, gt=0)
    director: Optional[str] = None
    cast: Optional[List[str]] = None
    imdb_rating: Optional[float] = None
    poster_url: Optional[str] = None
    is_watched: Optional[bool] = None

    def changes(self) -> dict[str, Any]:
        """Explicitly provided fields; an explicit null only clears optional ones."""
        out: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name in _REQUIRED_ON_RECORD:
                continue
            out[name] = value
        return out


def _invalid(kind: str, exc: ValidationError) -> InvalidMoviePayload:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ())) or '<root>'}: {err.get('msg')}"
        for err in exc.errors()
    )
    return InvalidMoviePayload(f"invalid {kind} payload: {details}", errors=exc.errors())


def parse_movie_create(payload: Union[MovieCreate, Mapping[str, Any]]) -> MovieCreate:
    if isinstance(payload, MovieCreate):
        return payload
    try:
        return MovieCreate.model_validate(dict(payload or {}))
    except ValidationError as exc:
        raise _invalid("create", exc) from exc


def _positive_int_or_none(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None


def _score_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if score != score:  # NaN
        return None
    return min(max(score, 0.0), 10.0)


def parse_stored_movie(record: Mapping[str, Any]) -> MovieCreate:
    """Validate a persisted record, repairing optional fields older data got wrong.

    The old add form never checked `duration` or `imdbRating`, so out-of-range
    or non-numeric values there are cleared (or clamped to 0-10) instead of
    rejecting the whole record. Required fields stay strict.
    """
    data = dict(record)
    for key in ("duration", "imdbRating", "imdb_rating"):
        if key in data:
            fix = _positive_int_or_none if key == "duration" else _score_or_none
            data[key] = fix(data[key])
    if data.get("description") is not None and not isinstance(data["description"], str):
        data["description"] = str(data["description"])
    try:
        return MovieCreate.model_validate(data)
    except ValidationError as exc:
        raise _invalid("stored", exc) from exc


def parse_movie_update(patch: Union[MovieUpdate, Mapping[str, Any], None]) -> MovieUpdate:
    if isinstance(patch, MovieUpdate):
        return patch
    try:
        return MovieUpdate.model_validate(dict(patch or {}))
    except ValidationError as exc:
        raise _invalid("update", exc) from exc


__all__ = [
    "MovieCreate",
    "MovieUpdate",
    "parse_movie_create",
    "parse_movie_update",
    "parse_stored_movie",
]
