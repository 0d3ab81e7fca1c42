"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from bookmark_lists.config import NavigationConfig
from bookmark_lists.core.database.schema import create_schema
from bookmark_lists.core.repository.sqlite_repo import SqliteRepository
from bookmark_lists.core.service import BookmarkService
from tests.unit.fakes import FakeCursor, RecordingNotifier


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """Return an in-memory DB with the schema and root list."""
    connection = sqlite3.connect(":memory:")
    create_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def repo(conn: sqlite3.Connection) -> SqliteRepository:
    return SqliteRepository(conn)


@pytest.fixture
def cursor() -> FakeCursor:
    return FakeCursor()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(
    repo: SqliteRepository, cursor: FakeCursor, notifier: RecordingNotifier
) -> BookmarkService:
    return BookmarkService(
        repo,
        locations=cursor,
        notifier=notifier,
        config=NavigationConfig(next_prev_wraparound_same_file=True),
    )
