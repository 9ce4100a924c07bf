from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

# Cinema's first surviving film; earlier years are rejected on input.
MIN_RELEASE_YEAR = 1888


class _LenientEnum(str, Enum):
    @classmethod
    def parse(cls, raw: Any):
        """Accept a member, its display value or its name (case-insensitive).

        Older stored data used member names (`SCI_FI`, `PG13`) rather than
        display values, so both spellings resolve to the same member.
        """
        if isinstance(raw, cls):
            return raw
        text = str(raw or "").strip()
        if not text:
            raise ValueError(f"{cls.__name__} is required")
        folded = text.casefold()
        squashed = folded.replace("-", "").replace("_", "").replace(" ", "")
        for member in cls:
            if folded in (member.value.casefold(), member.name.casefold()):
                return member
            if squashed == member.name.casefold().replace("_", ""):
                return member
        raise ValueError(f"unknown {cls.__name__.lower()}: {text!r}")


class Category(_LenientEnum):
    ACTION = "Action"
    ADVENTURE = "Adventure"
    ANIMATION = "Animation"
    BIOGRAPHY = "Biography"
    COMEDY = "Comedy"
    DOCUMENTARY = "Documentary"
    DRAMA = "Drama"
    HORROR = "Horror"
    ROMANCE = "Romance"
    SCI_FI = "Sci-Fi"
    THRILLER = "Thriller"


class Rating(_LenientEnum):
    G = "G"
    PG = "PG"
    PG13 = "PG-13"
    R = "R"
    NR = "NR"


@dataclass(frozen=True)
class Movie:
    """A catalog entry as held by the movie store.

    `id`, `date_added` and `is_watched` are assigned by the store at creation;
    `poster_url` is always an absolute URL once the record has passed through it.
    """

    id: str
    title: str
    description: str
    release_year: int
    category: Category
    rating: Rating
    poster_url: str
    date_added: datetime
    is_watched: bool = False
    duration: Optional[int] = None
    director: Optional[str] = None
    cast: tuple[str, ...] = field(default_factory=tuple)
    imdb_rating: Optional[float] = None
