from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Optional, Sequence

from application.catalog.view_service import catalog_view, watchlist_view
from domain.catalog import (
    ALL_CATEGORIES,
    InvalidMoviePayload,
    Movie,
    MovieNotFoundError,
    category_filter_options,
    display_poster_url,
)
from infrastructure.bootstrap import CatalogServices, build_catalog, configure_logging
from infrastructure.config import settings
from infrastructure.persistence.local.movie_store import movie_to_record

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Inspect and edit the local movie catalog and watchlist.")
    p.add_argument("--backend", default=None, help="Blob store backend override (file|memory|redis).")
    sub = p.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="List movies.")
    ls.add_argument("--category", default=ALL_CATEGORIES, help=f"One of: {', '.join(category_filter_options())}")
    ls.add_argument("--watchlist", action="store_true", help="Only movies on the watchlist.")
    ls.add_argument("--posters", action="store_true", help="Append each poster URL.")

    show = sub.add_parser("show", help="Print one movie as JSON.")
    show.add_argument("movie_id")

    add = sub.add_parser("add", help="Create a movie.")
    add.add_argument("--title", required=True)
    add.add_argument("--description", default="")
    add.add_argument("--release-year", type=int, required=True)
    add.add_argument("--category", required=True)
    add.add_argument("--rating", required=True)
    add.add_argument("--duration", type=int, default=None)
    add.add_argument("--director", default=None)
    add.add_argument("--cast", default="", help="Comma-separated names.")
    add.add_argument("--imdb-rating", type=float, default=None)
    add.add_argument("--poster-url", default=None)

    upd = sub.add_parser("update", help="Patch fields of a movie.")
    upd.add_argument("movie_id")
    upd.add_argument("--title", default=None)
    upd.add_argument("--category", default=None)
    upd.add_argument("--rating", default=None)
    upd.add_argument("--poster-url", default=None)
    watched = upd.add_mutually_exclusive_group()
    watched.add_argument("--watched", dest="is_watched", action="store_true", default=None)
    watched.add_argument("--unwatched", dest="is_watched", action="store_false")

    rm = sub.add_parser("delete", help="Delete a movie.")
    rm.add_argument("movie_id")

    for name, help_text in (
        ("watchlist-add", "Add a movie id to the watchlist."),
        ("watchlist-remove", "Remove a movie id from the watchlist."),
        ("watchlist-toggle", "Toggle watchlist membership."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("movie_id")
    sub.add_parser("watchlist-clear", help="Empty the watchlist.")
    sub.add_parser("reset", help="Drop stored movies + migration flag, then reseed (dev only).")
    return p


def _print_movies(movies: Sequence[Movie], watchlist_ids: frozenset, *, posters: bool = False) -> None:
    for m in movies:
        mark = "*" if m.id in watchlist_ids else " "
        seen = "watched" if m.is_watched else ""
        line = f"{mark} {m.id}  {m.title} ({m.release_year})  [{m.category.value}]  {seen}".rstrip()
        if posters:
            line = f"{line}  {display_poster_url(m.poster_url, fallback=settings.POSTER_FALLBACK_URL)}"
        print(line)


def _payload(args: argparse.Namespace, fields: Sequence[str]) -> dict[str, Any]:
    return {f: getattr(args, f) for f in fields if getattr(args, f, None) is not None}


def run(argv: Optional[Sequence[str]] = None, *, services: Optional[CatalogServices] = None) -> int:
    args = _build_parser().parse_args(argv)
    if services is None:
        from infrastructure.persistence.blob import build_blob_store

        services = build_catalog(build_blob_store(args.backend) if args.backend else None)
    movies, watchlist = services.movies, services.watchlist

    try:
        if args.command == "list":
            factory = watchlist_view if args.watchlist else catalog_view
            view = factory(movies, watchlist, category=args.category)
            _print_movies(view.movies, watchlist.ids(), posters=args.posters)
            view.close()
        elif args.command == "show":
            movie = movies.get_movie(args.movie_id)
            if movie is None:
                raise MovieNotFoundError(args.movie_id)
            print(json.dumps(movie_to_record(movie), ensure_ascii=False, indent=2))
        elif args.command == "add":
            created = movies.create_movie(
                _payload(
                    args,
                    (
                        "title",
                        "description",
                        "release_year",
                        "category",
                        "rating",
                        "duration",
                        "director",
                        "cast",
                        "imdb_rating",
                        "poster_url",
                    ),
                )
            )
            print(created.id)
        elif args.command == "update":
            updated = movies.update_movie(
                args.movie_id,
                _payload(args, ("title", "category", "rating", "poster_url", "is_watched")),
            )
            print(json.dumps(movie_to_record(updated), ensure_ascii=False, indent=2))
        elif args.command == "delete":
            movies.delete_movie(args.movie_id)
            watchlist.remove(args.movie_id)
        elif args.command == "watchlist-add":
            watchlist.add(args.movie_id)
        elif args.command == "watchlist-remove":
            watchlist.remove(args.movie_id)
        elif args.command == "watchlist-toggle":
            print("added" if watchlist.toggle(args.movie_id) else "removed")
        elif args.command == "watchlist-clear":
            watchlist.clear()
        elif args.command == "reset":
            movies.clear_and_reseed()
            print(f"reseeded: {len(movies.list_movies())} movies")
    except MovieNotFoundError as exc:
        logger.error("movie not found: id=%s", exc.movie_id)
        return 1
    except InvalidMoviePayload as exc:
        logger.error("%s", exc)
        return 2
    return 0


def main() -> None:
    configure_logging()
    raise SystemExit(run())


if __name__ == "__main__":
    main()
