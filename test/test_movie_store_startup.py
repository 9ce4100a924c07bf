import json
import sys
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from domain.catalog import Category, Rating
from domain.catalog.poster import is_proxied
from domain.catalog.seed import load_seed_movies
from infrastructure.persistence.blob.file_blob_store import JsonFileBlobStore
from infrastructure.persistence.blob.memory_blob_store import InMemoryBlobStore
from infrastructure.persistence.local.movie_store import LocalMovieStore

FLAG = "movies_proxy_migrated_v1"


class _RecordingBlobStore(InMemoryBlobStore):
    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.writes: list[str] = []

    def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        super().set(key, value)


def _record(movie_id: str, **overrides):
    data = {
        "id": movie_id,
        "title": f"Movie {movie_id}",
        "description": "",
        "releaseYear": 2001,
        "category": "Drama",
        "rating": "PG",
        "posterUrl": "//img.example.com/%s.jpg" % movie_id,
        "dateAdded": "2024-01-02T03:04:05.000Z",
        "isWatched": False,
    }
    data.update(overrides)
    return data


class TestLoad(unittest.TestCase):
    def test_malformed_json_loads_as_empty(self) -> None:
        blob = InMemoryBlobStore({"movies": "{not json"})
        with self.assertLogs("infrastructure.persistence.local.entity_store", level="WARNING"):
            store = LocalMovieStore(blob_store=blob)
        self.assertEqual(store.list_movies(), [])

    def test_wrong_shape_loads_as_empty(self) -> None:
        blob = InMemoryBlobStore({"movies": json.dumps({"id": "1"})})
        with self.assertLogs("infrastructure.persistence.local.entity_store", level="WARNING"):
            store = LocalMovieStore(blob_store=blob)
        self.assertEqual(store.list_movies(), [])

    def test_malformed_blob_then_seeds(self) -> None:
        blob = InMemoryBlobStore({"movies": "[[["})
        with self.assertLogs("infrastructure.persistence.local.entity_store", level="WARNING"):
            store = LocalMovieStore(blob_store=blob, seed_movies=load_seed_movies())
        self.assertEqual(len(store.list_movies()), len(load_seed_movies()))

    def test_timestamps_and_legacy_enum_names_are_rehydrated(self) -> None:
        blob = InMemoryBlobStore(
            {"movies": json.dumps([_record("a", category="SCI_FI", rating="PG13", isWatched=True)])}
        )
        movie = LocalMovieStore(blob_store=blob).get_movie("a")
        self.assertEqual(movie.date_added, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        self.assertEqual(movie.category, Category.SCI_FI)
        self.assertEqual(movie.rating, Rating.PG13)
        self.assertTrue(movie.is_watched)

    def test_missing_timestamp_defaults_to_now(self) -> None:
        fixed = datetime(2030, 1, 1, tzinfo=timezone.utc)
        record = _record("a")
        del record["dateAdded"]
        blob = InMemoryBlobStore({"movies": json.dumps([record])})
        store = LocalMovieStore(blob_store=blob, clock=lambda: fixed)
        self.assertEqual(store.get_movie("a").date_added, fixed)

    def test_invalid_and_duplicate_records_are_skipped(self) -> None:
        records = [
            _record("a"),
            {"id": "b", "title": ""},
            "not-a-record",
            _record("a", title="Second A"),
            _record("c"),
        ]
        blob = InMemoryBlobStore({"movies": json.dumps(records)})
        with self.assertLogs("infrastructure.persistence.local.movie_store", level="WARNING"):
            store = LocalMovieStore(blob_store=blob)
        self.assertEqual([m.id for m in store.list_movies()], ["a", "c"])
        self.assertEqual(store.get_movie("a").title, "Movie a")

    def test_unreadable_records_survive_later_writes(self) -> None:
        broken = {"id": "b", "title": ""}
        blob = InMemoryBlobStore({"movies": json.dumps([_record("a"), broken, "not-a-record"]), FLAG: "1"})
        with self.assertLogs("infrastructure.persistence.local.movie_store", level="WARNING"):
            store = LocalMovieStore(blob_store=blob)
        store.create_movie({"title": "New", "releaseYear": 2020, "category": "Comedy", "rating": "PG"})

        stored = json.loads(blob.get("movies"))
        self.assertEqual(len(stored), 4)
        self.assertIn(broken, stored)
        self.assertIn("not-a-record", stored)

    def test_legacy_optional_fields_are_repaired_not_dropped(self) -> None:
        raw = json.dumps([_record("legacy1", duration=0, imdbRating="n/a"), _record("legacy2", imdbRating=12)])
        blob = InMemoryBlobStore({"movies": raw, FLAG: "1"})
        store = LocalMovieStore(blob_store=blob, seed_movies=load_seed_movies())

        self.assertEqual([m.id for m in store.list_movies()], ["legacy1", "legacy2"])
        self.assertIsNone(store.get_movie("legacy1").duration)
        self.assertIsNone(store.get_movie("legacy1").imdb_rating)
        self.assertEqual(store.get_movie("legacy2").imdb_rating, 10.0)
        self.assertEqual(blob.get("movies"), raw)

        reopened = LocalMovieStore(blob_store=blob, seed_movies=load_seed_movies())
        self.assertEqual([m.id for m in reopened.list_movies()], ["legacy1", "legacy2"])

    def test_non_utf8_store_file_starts_empty_and_seeds(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "catalog.json"
            path.write_bytes(b'{"movies": "\xff\xfe garbage"}')
            with self.assertLogs("infrastructure.persistence.blob.file_blob_store", level="WARNING"):
                store = LocalMovieStore(blob_store=JsonFileBlobStore(path), seed_movies=load_seed_movies()[:2])
            self.assertEqual(len(store.list_movies()), 2)
            self.assertEqual(len(json.loads(JsonFileBlobStore(path).get("movies"))), 2)


class TestSeeding(unittest.TestCase):
    def test_bundled_seed_is_valid(self) -> None:
        seed = load_seed_movies()
        self.assertEqual(len(seed), 13)
        store = LocalMovieStore(blob_store=InMemoryBlobStore(), seed_movies=seed)
        movies = store.list_movies()
        self.assertEqual(len(movies), 13)
        self.assertEqual(movies[0].title, "The Matrix")
        self.assertEqual(len({m.id for m in movies}), 13)
        self.assertTrue(all(m.poster_url.startswith("https://") for m in movies))
        dates = [m.date_added for m in movies]
        self.assertEqual(dates, sorted(dates))
        self.assertEqual(len(set(dates)), len(dates))

    def test_seed_batch_is_persisted_once(self) -> None:
        blob = _RecordingBlobStore()
        store = LocalMovieStore(blob_store=blob)
        blob.writes.clear()
        seeded = store.seed_if_empty(load_seed_movies()[:3])
        self.assertEqual(seeded, 3)
        self.assertEqual(blob.writes, ["movies"])

    def test_seeding_never_runs_on_non_empty_catalog(self) -> None:
        blob = InMemoryBlobStore({"movies": json.dumps([_record("only")]), FLAG: "1"})
        store = LocalMovieStore(blob_store=blob, seed_movies=load_seed_movies())
        self.assertEqual([m.id for m in store.list_movies()], ["only"])
        self.assertEqual(store.seed_if_empty(), 0)

    def test_seeding_never_runs_when_only_unreadable_records_are_stored(self) -> None:
        old = _record("x1", releaseYear=1700)
        blob = _RecordingBlobStore({"movies": json.dumps([old]), FLAG: "1"})
        ids = iter(["x1", "fresh"])
        with self.assertLogs("infrastructure.persistence.local.movie_store", level="WARNING"):
            store = LocalMovieStore(blob_store=blob, seed_movies=load_seed_movies(), id_factory=lambda: next(ids))

        self.assertEqual(store.list_movies(), [])
        self.assertEqual(store.seed_if_empty(), 0)
        self.assertEqual(blob.writes, [])

        created = store.create_movie({"title": "Mine", "releaseYear": 2001, "category": "Drama", "rating": "G"})
        self.assertEqual(created.id, "fresh")
        stored = json.loads(blob.get("movies"))
        self.assertEqual([r["id"] for r in stored], ["fresh", "x1"])

    def test_invalid_seed_entries_are_skipped(self) -> None:
        seed = [{"title": "No year", "category": "Drama", "rating": "G"}, load_seed_movies()[0]]
        with self.assertLogs("infrastructure.persistence.local.movie_store", level="WARNING"):
            store = LocalMovieStore(blob_store=InMemoryBlobStore(), seed_movies=seed)
        self.assertEqual([m.title for m in store.list_movies()], ["The Matrix"])


class TestPosterMigration(unittest.TestCase):
    def test_first_start_rewrites_stored_posters_and_sets_flag(self) -> None:
        blob = InMemoryBlobStore({"movies": json.dumps([_record("a"), _record("b", posterUrl="")])})
        LocalMovieStore(blob_store=blob)

        stored = json.loads(blob.get("movies"))
        self.assertEqual(stored[0]["posterUrl"], "https://images.weserv.nl/?url=img.example.com%2Fa.jpg")
        self.assertEqual(stored[1]["posterUrl"], "https://placehold.co/400x600?text=No+Image")
        self.assertEqual(blob.get(FLAG), "1")

    def test_migration_is_idempotent(self) -> None:
        blob = _RecordingBlobStore({"movies": json.dumps([_record("a")])})
        store = LocalMovieStore(blob_store=blob)
        after_first = blob.get("movies")
        blob.writes.clear()

        self.assertFalse(store.migrate_posters_once())
        LocalMovieStore(blob_store=blob)
        self.assertEqual(blob.get("movies"), after_first)
        self.assertEqual(blob.writes, [])

    def test_flag_set_skips_migration_even_for_unmigrated_data(self) -> None:
        raw = json.dumps([_record("a")])
        blob = _RecordingBlobStore({"movies": raw, FLAG: "1"})
        LocalMovieStore(blob_store=blob)
        self.assertEqual(blob.get("movies"), raw)
        self.assertEqual(blob.writes, [])

    def test_rerunning_the_rewrite_does_not_double_wrap(self) -> None:
        blob = InMemoryBlobStore({"movies": json.dumps([_record("a")])})
        store = LocalMovieStore(blob_store=blob)
        first = store.get_movie("a").poster_url
        blob.remove(FLAG)
        self.assertTrue(store.migrate_posters_once())
        self.assertEqual(store.get_movie("a").poster_url, first)
        self.assertTrue(is_proxied(first))
        self.assertEqual(first.count("weserv"), 1)


class TestClearAndReseed(unittest.TestCase):
    def test_reset_restores_seed_catalog(self) -> None:
        blob = InMemoryBlobStore()
        seed = load_seed_movies()[:2]
        store = LocalMovieStore(blob_store=blob, seed_movies=seed)
        extra = store.create_movie(
            {"title": "Extra", "releaseYear": 2020, "category": "Comedy", "rating": "PG"}
        )
        seen: list[tuple] = []
        store.subscribe(seen.append)

        store.clear_and_reseed()

        titles = [m.title for m in store.list_movies()]
        self.assertEqual(titles, [s["title"] for s in seed])
        self.assertIsNone(store.get_movie(extra.id))
        self.assertEqual(blob.get(FLAG), "1")
        self.assertEqual(len(json.loads(blob.get("movies"))), 2)
        self.assertEqual([m.title for m in seen[-1]], titles)


if __name__ == "__main__":
    unittest.main()
