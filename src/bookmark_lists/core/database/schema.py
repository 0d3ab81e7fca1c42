"""SQLite schema creation and migration for the bookmark store."""

import sqlite3
import time

from bookmark_lists.config import ROOT_LIST_ID, ROOT_LIST_NAME

SCHEMA_VERSION = 1

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS nodes (
    id INTEGER PRIMARY KEY,
    type TEXT NOT NULL CHECK (type IN ('bookmark', 'list')),
    name TEXT NOT NULL,
    description TEXT,
    content TEXT,
    githash TEXT,
    created_at INTEGER NOT NULL,
    visited_at INTEGER,
    is_expanded INTEGER NOT NULL DEFAULT 0,
    sort_order INTEGER NOT NULL DEFAULT 0,
    location_path TEXT,
    location_line INTEGER,
    location_col INTEGER
);

CREATE TABLE IF NOT EXISTS node_relationships (
    parent_id INTEGER NOT NULL,
    child_id INTEGER NOT NULL,
    created_at INTEGER NOT NULL,
    PRIMARY KEY (parent_id, child_id),
    FOREIGN KEY (parent_id) REFERENCES nodes(id),
    FOREIGN KEY (child_id) REFERENCES nodes(id)
);

CREATE INDEX IF NOT EXISTS idx_relationships_child ON node_relationships(child_id);
CREATE INDEX IF NOT EXISTS idx_nodes_location ON nodes(location_path, location_line);

CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes, and the root list."""
    conn.executescript(_SCHEMA_SQL)
    conn.execute(
        "INSERT OR IGNORE INTO nodes (id, type, name, created_at, is_expanded, sort_order) "
        "VALUES (?, 'list', ?, ?, 1, 0)",
        (ROOT_LIST_ID, ROOT_LIST_NAME, int(time.time())),
    )
    conn.execute(
        "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
        ("schema_version", str(SCHEMA_VERSION)),
    )
    conn.commit()


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """Return the current schema version, or None if metadata table doesn't exist."""
    try:
        row = conn.execute(
            "SELECT value FROM metadata WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        return None
    return int(row[0]) if row else None


def migrate_schema(conn: sqlite3.Connection) -> None:
    """Create or migrate the database schema to the latest version."""
    version = get_schema_version(conn)
    if version is None:
        create_schema(conn)


def get_metadata(conn: sqlite3.Connection, key: str) -> str | None:
    row = conn.execute("SELECT value FROM metadata WHERE key = ?", (key,)).fetchone()
    return row[0] if row else None


def set_metadata(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Write a metadata value. The caller owns the commit."""
    conn.execute("INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)", (key, value))


def delete_metadata(conn: sqlite3.Connection, key: str) -> None:
    conn.execute("DELETE FROM metadata WHERE key = ?", (key,))
