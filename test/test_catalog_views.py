import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from application.catalog import catalog_view, watchlist_view
from domain.catalog import Category, Movie, Rating
from domain.catalog.views import category_filter_options, compose_view, filter_by_category
from infrastructure.persistence.blob.memory_blob_store import InMemoryBlobStore
from infrastructure.persistence.local.movie_store import LocalMovieStore
from infrastructure.persistence.local.watchlist_store import LocalWatchlistStore


def _movie(movie_id: str, category: Category) -> Movie:
    return Movie(
        id=movie_id,
        title=f"Movie {movie_id}",
        description="",
        release_year=2000,
        category=category,
        rating=Rating.PG,
        poster_url="https://placehold.co/400x600?text=No+Image",
        date_added=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestComposeView(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = [_movie("1", Category.ACTION), _movie("2", Category.DRAMA)]

    def test_watchlist_projection_with_category(self) -> None:
        watchlist = frozenset({"1"})
        all_view = compose_view(self.catalog, watchlist, category="All", watchlist_only=True)
        self.assertEqual([m.id for m in all_view], ["1"])
        drama = compose_view(self.catalog, watchlist, category="Drama", watchlist_only=True)
        self.assertEqual(drama, [])

    def test_catalog_projection_ignores_watchlist(self) -> None:
        view = compose_view(self.catalog, frozenset(), category="All")
        self.assertEqual([m.id for m in view], ["1", "2"])

    def test_category_filter_accepts_members_and_loose_text(self) -> None:
        self.assertEqual([m.id for m in filter_by_category(self.catalog, Category.DRAMA)], ["2"])
        self.assertEqual([m.id for m in filter_by_category(self.catalog, "action")], ["1"])
        self.assertEqual(len(filter_by_category(self.catalog, None)), 2)
        self.assertEqual(len(filter_by_category(self.catalog, " all ")), 2)

    def test_unknown_category_yields_empty_list(self) -> None:
        self.assertEqual(filter_by_category(self.catalog, "Western"), [])

    def test_filter_options_start_with_all(self) -> None:
        options = category_filter_options()
        self.assertEqual(options[0], "All")
        self.assertIn("Sci-Fi", options)
        self.assertEqual(len(options), len(Category) + 1)


class TestLiveViews(unittest.TestCase):
    def setUp(self) -> None:
        blob = InMemoryBlobStore()
        self.movies = LocalMovieStore(blob_store=blob)
        self.watchlist = LocalWatchlistStore(blob_store=blob)
        self.action = self.movies.create_movie(
            {"title": "Speed", "releaseYear": 1994, "category": "Action", "rating": "R"}
        )
        self.animated = self.movies.create_movie(
            {"title": "Up", "releaseYear": 2009, "category": "Animation", "rating": "PG"}
        )

    def test_watchlist_view_recomputes_on_toggle(self) -> None:
        view = watchlist_view(self.movies, self.watchlist)
        seen: list[list[str]] = []
        view.subscribe(lambda movies: seen.append([m.id for m in movies]))

        self.watchlist.toggle(self.action.id)
        self.watchlist.toggle(self.action.id)

        self.assertEqual(seen, [[], [self.action.id], []])
        view.close()

    def test_catalog_view_follows_store_and_category(self) -> None:
        view = catalog_view(self.movies, self.watchlist, category="Action")
        self.assertEqual([m.id for m in view.movies], [self.action.id])

        extra = self.movies.create_movie(
            {"title": "Ronin", "releaseYear": 1998, "category": "Action", "rating": "R"}
        )
        self.assertEqual([m.id for m in view.movies], [self.action.id, extra.id])

        view.category = "All"
        self.assertEqual(len(view.movies), 3)
        self.assertEqual(view.category, "All")

        self.movies.delete_movie(self.action.id)
        self.assertEqual([m.id for m in view.movies], [self.animated.id, extra.id])
        view.close()

    def test_watchlisted_id_without_movie_is_ignored(self) -> None:
        self.watchlist.add("ghost")
        view = watchlist_view(self.movies, self.watchlist)
        self.assertEqual(view.movies, [])
        view.close()

    def test_closed_view_stops_updating(self) -> None:
        view = watchlist_view(self.movies, self.watchlist)
        view.close()
        self.watchlist.add(self.action.id)
        self.assertEqual(view.movies, [])


if __name__ == "__main__":
    unittest.main()
