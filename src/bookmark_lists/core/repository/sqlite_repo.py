"""SQLite-backed repository for bookmark nodes."""

import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from bookmark_lists.config import ROOT_LIST_ID
from bookmark_lists.core.database.schema import (
    delete_metadata,
    get_metadata,
    migrate_schema,
    set_metadata,
)
from bookmark_lists.errors import InvalidNodeTypeError, NodeNotFoundError
from bookmark_lists.models.node import Bookmark, BookmarkList, Location, Node

_ACTIVE_LIST_KEY = "active_list_id"

_NODE_COLUMNS = (
    "n.id, n.type, n.name, n.description, n.content, n.githash, n.created_at, "
    "n.visited_at, n.is_expanded, n.sort_order, n.location_path, n.location_line, "
    "n.location_col"
)


class SqliteRepository:
    """Node storage on a single SQLite connection.

    Each public write commits on return unless it runs inside ``transaction()``,
    in which case the outermost block commits or rolls back everything.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._depth = 0

    @classmethod
    def open(cls, db_path: Path) -> "SqliteRepository":
        """Open (creating if needed) the database at ``db_path``."""
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path))
        migrate_schema(conn)
        logger.debug("Opened bookmark database {}", db_path)
        return cls(conn)

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self._conn.rollback()
                logger.debug("Rolled back bookmark transaction")
            raise
        self._depth -= 1
        if self._depth == 0:
            self._conn.commit()

    def _commit(self) -> None:
        if self._depth == 0:
            self._conn.commit()

    # --- Reads ---

    def find_node(self, node_id: int) -> Node | None:
        row = self._conn.execute(
            f"SELECT {_NODE_COLUMNS} FROM nodes n WHERE n.id = ?", (node_id,)
        ).fetchone()
        if row is None:
            return None
        return self._to_node(row, frozenset())

    def get_children(self, list_id: int) -> list[Node]:
        """Direct children of a list, ordered by (order, id)."""
        return self._load_children(list_id, frozenset({list_id}))

    def find_bookmark_by_location(self, location: Location) -> Bookmark | None:
        """Match on path and line; the column is ignored."""
        row = self._conn.execute(
            f"SELECT {_NODE_COLUMNS} FROM nodes n "
            "WHERE n.type = 'bookmark' AND n.location_path = ? AND n.location_line = ? "
            "ORDER BY n.id LIMIT 1",
            (location.path, location.line),
        ).fetchone()
        if row is None:
            return None
        node = self._to_node(row, frozenset())
        assert isinstance(node, Bookmark)
        return node

    def get_parent_id(self, node_id: int) -> int | None:
        row = self._conn.execute(
            "SELECT parent_id FROM node_relationships WHERE child_id = ? "
            "ORDER BY created_at, parent_id LIMIT 1",
            (node_id,),
        ).fetchone()
        return row[0] if row else None

    def get_active_list_id(self) -> int | None:
        raw = get_metadata(self._conn, _ACTIVE_LIST_KEY)
        return int(raw) if raw is not None else None

    def ensure_and_get_active_list(self) -> BookmarkList:
        active_id = self.get_active_list_id()
        if active_id is not None:
            node = self.find_node(active_id)
            if isinstance(node, BookmarkList):
                return node
            logger.warning("Active list {} no longer exists, falling back to root", active_id)

        self.set_active_list(ROOT_LIST_ID)
        return self._require_list(ROOT_LIST_ID)

    # --- Writes ---

    def insert_node(self, node: Node, parent_list_id: int) -> int:
        self._require_list(parent_list_id)
        row = self._conn.execute(
            "SELECT COALESCE(MAX(n.sort_order) + 1, 0) FROM nodes n "
            "JOIN node_relationships r ON r.child_id = n.id WHERE r.parent_id = ?",
            (parent_list_id,),
        ).fetchone()
        return self._insert(node, parent_list_id, row[0])

    def insert_node_at_position(self, node: Node, parent_list_id: int, position: int) -> int:
        """Insert with ``order = position``; existing siblings are not renumbered."""
        self._require_list(parent_list_id)
        return self._insert(node, parent_list_id, position)

    def update_node(self, node: Node) -> Node:
        if node.id is None:
            msg = f"Cannot update unsaved node {node.name!r}"
            raise NodeNotFoundError(msg)

        path, line, col = _location_columns(node)
        cursor = self._conn.execute(
            "UPDATE nodes SET name = ?, description = ?, content = ?, githash = ?, "
            "created_at = ?, visited_at = ?, is_expanded = ?, sort_order = ?, "
            "location_path = ?, location_line = ?, location_col = ? WHERE id = ?",
            (
                node.name, node.description, node.content,
                getattr(node, "githash", None), node.created_at,
                getattr(node, "visited_at", None), int(node.is_expanded),
                node.order or 0, path, line, col, node.id,
            ),
        )
        if cursor.rowcount == 0:
            msg = f"Node {node.id} not found"
            raise NodeNotFoundError(msg, {"node_id": node.id})
        self._commit()

        stored = self.find_node(node.id)
        assert stored is not None
        return stored

    def delete_node(self, node_id: int) -> None:
        """Delete the node and its whole subtree."""
        rows = self._conn.execute(
            "WITH RECURSIVE subtree(id) AS ("
            "  SELECT ? UNION"
            "  SELECT r.child_id FROM node_relationships r JOIN subtree s ON r.parent_id = s.id"
            ") SELECT id FROM subtree",
            (node_id,),
        ).fetchall()
        ids = [r[0] for r in rows]
        placeholders = ",".join("?" * len(ids))

        self._conn.execute(
            f"DELETE FROM node_relationships "
            f"WHERE parent_id IN ({placeholders}) OR child_id IN ({placeholders})",
            [*ids, *ids],
        )
        self._conn.execute(f"DELETE FROM nodes WHERE id IN ({placeholders})", ids)

        if self.get_active_list_id() in ids:
            delete_metadata(self._conn, _ACTIVE_LIST_KEY)
        self._commit()
        logger.debug("Deleted node {} ({} nodes in subtree)", node_id, len(ids))

    def add_to_list(self, node_id: int, parent_list_id: int) -> None:
        self._conn.execute(
            "INSERT OR IGNORE INTO node_relationships (parent_id, child_id, created_at) "
            "VALUES (?, ?, ?)",
            (parent_list_id, node_id, int(time.time())),
        )
        self._commit()

    def remove_from_list(self, node_id: int, parent_list_id: int) -> None:
        self._conn.execute(
            "DELETE FROM node_relationships WHERE parent_id = ? AND child_id = ?",
            (parent_list_id, node_id),
        )
        self._commit()

    def set_active_list(self, list_id: int) -> None:
        self._require_list(list_id)
        set_metadata(self._conn, _ACTIVE_LIST_KEY, str(list_id))
        self._commit()

    # --- Internals ---

    def _require_list(self, list_id: int) -> BookmarkList:
        node = self.find_node(list_id)
        if node is None:
            msg = f"List {list_id} not found"
            raise NodeNotFoundError(msg, {"node_id": list_id})
        if not isinstance(node, BookmarkList):
            msg = f"Node {list_id} is not a list"
            raise InvalidNodeTypeError(msg, {"node_id": list_id})
        return node

    def _insert(self, node: Node, parent_list_id: int, order: int) -> int:
        path, line, col = _location_columns(node)
        cursor = self._conn.execute(
            "INSERT INTO nodes (type, name, description, content, githash, created_at, "
            "visited_at, is_expanded, sort_order, location_path, location_line, location_col) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                node.type, node.name, node.description, node.content,
                getattr(node, "githash", None), node.created_at or int(time.time()),
                getattr(node, "visited_at", None), int(node.is_expanded), order,
                path, line, col,
            ),
        )
        node_id = cursor.lastrowid
        assert node_id is not None
        self._conn.execute(
            "INSERT INTO node_relationships (parent_id, child_id, created_at) VALUES (?, ?, ?)",
            (parent_list_id, node_id, int(time.time())),
        )
        self._commit()
        return node_id

    def _load_children(self, list_id: int, ancestors: frozenset[int]) -> list[Node]:
        rows = self._conn.execute(
            f"SELECT {_NODE_COLUMNS} FROM nodes n "
            "JOIN node_relationships r ON r.child_id = n.id "
            "WHERE r.parent_id = ? ORDER BY n.sort_order, n.id",
            (list_id,),
        ).fetchall()
        # A corrupted edge could point back up the tree; never follow it.
        return [self._to_node(row, ancestors) for row in rows if row[0] not in ancestors]

    def _to_node(self, row: tuple, ancestors: frozenset[int]) -> Node:
        (
            node_id, node_type, name, description, content, githash, created_at,
            visited_at, is_expanded, sort_order, path, line, col,
        ) = row
        if node_type == "list":
            return BookmarkList(
                id=node_id, name=name, description=description, content=content,
                created_at=created_at, is_expanded=bool(is_expanded), order=sort_order,
                children=tuple(self._load_children(node_id, ancestors | {node_id})),
            )
        return Bookmark(
            id=node_id, name=name, description=description, content=content,
            githash=githash, created_at=created_at, visited_at=visited_at or 0,
            is_expanded=bool(is_expanded), order=sort_order,
            location=Location(path=path, line=line, col=col or 0) if path is not None else None,
        )


def _location_columns(node: Node) -> tuple[str | None, int | None, int | None]:
    if isinstance(node, Bookmark) and node.location is not None:
        return node.location.path, node.location.line, node.location.col
    return None, None, None
