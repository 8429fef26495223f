"""
Integration tests for generated models against a real PostgreSQL instance.

These tests verify that:
1. Inserted records are fetched back with their generated keys
2. Updates and deletes reach the table through the primary key
3. Soft-delete models flag rows instead of removing them

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os

import psycopg
import pytest

from modeller import connect
from modeller.config import Settings

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)

MOVIE_SCHEMA = {
    "movie_id": {"type": "positive", "autoIncrement": True},
    "title": {"type": "string", "default": "Untitled"},
    "year": {"type": "integer", "nullable": True},
}

NOTE_SCHEMA = {
    "id": {"type": "positive", "autoIncrement": True},
    "body": {"type": "string"},
    "deleted": {"type": "integer", "default": 0},
}


class TestMovieLifecycle:
    """Insert, read, update and delete through a model with a serial key."""

    @pytest.mark.asyncio
    async def test_insert_returns_row_with_generated_key(self, clean_tables, test_settings: Settings):
        async with connect(test_settings) as db:
            Movie = db.define("movies", MOVIE_SCHEMA)

            movie = Movie({"year": 1999})
            fetched = await movie.insert()

            assert fetched.movie_id >= 1
            assert fetched.title == "Untitled"
            assert movie.movie_id == fetched.movie_id

    @pytest.mark.asyncio
    async def test_get_applies_filter_order_and_limit(self, clean_tables, test_settings: Settings):
        async with connect(test_settings) as db:
            Movie = db.define("movies", MOVIE_SCHEMA)
            for title, year in [("Heat", 1995), ("Ronin", 1998), ("Alien", 1979)]:
                await Movie({"title": title, "year": year}).insert()

            newest_first = await Movie.get({}, {"orderBy": "year", "asc": False, "limit": 2})
            missing_year = await Movie.get({"year": None})

            assert [m.title for m in newest_first] == ["Ronin", "Heat"]
            assert missing_year == []

    @pytest.mark.asyncio
    async def test_update_and_delete_by_primary_key(
        self, clean_tables, test_settings: Settings, db_connection: psycopg.Connection
    ):
        async with connect(test_settings) as db:
            Movie = db.define("movies", MOVIE_SCHEMA)
            movie = await Movie({"title": "Heat", "year": 1995}).insert()

            assert await movie.update({"title": "Heat (1995)"}) == 1
            reloaded = await Movie.get_one({"movie_id": movie.movie_id})
            assert reloaded.title == "Heat (1995)"

            assert await movie.delete() == 1
            assert await Movie.get_one({"movie_id": movie.movie_id}) is None

        with db_connection.cursor() as cur:
            cur.execute("SELECT count(*) FROM movies")
            assert cur.fetchone()[0] == 0


class TestSoftDelete:
    """Models with a `deleted` field keep rows and hide them from reads."""

    @pytest.mark.asyncio
    async def test_deleted_rows_are_hidden_but_kept(
        self, clean_tables, test_settings: Settings, db_connection: psycopg.Connection
    ):
        async with connect(test_settings) as db:
            Note = db.define("notes", NOTE_SCHEMA)
            draft = await Note({"body": "draft"}).insert()
            await Note({"body": "final"}).insert()

            await draft.delete()
            assert [n.body for n in await Note.get()] == ["final"]

            assert await Note.delete_where({"body": "final"}) == 1
            assert await Note.get() == []
            assert len(await Note.get({"deleted": 1})) == 2

        with db_connection.cursor() as cur:
            cur.execute("SELECT count(*) FROM notes")
            assert cur.fetchone()[0] == 2


class TestTablesWithoutPrimaryKey:
    @pytest.mark.asyncio
    async def test_insert_and_delete_where(self, clean_tables, test_settings: Settings):
        async with connect(test_settings) as db:
            Tag = db.define("tags", {"label": {"type": "string"}})

            assert await Tag({"label": "noir"}).insert() == 1
            assert [t.label for t in await Tag.get()] == ["noir"]
            assert await Tag.delete_where({"label": "noir"}) == 1

    @pytest.mark.asyncio
    async def test_raw_queries_return_rows(self, clean_tables, test_settings: Settings):
        async with connect(test_settings) as db:
            Tag = db.define("tags", {"label": {"type": "string"}})

            rows = await Tag.raw("SELECT %s::int AS answer", [42])

            assert rows == [{"answer": 42}]
