"""Bookmark service: tree mutations and navigation over the active list."""

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Literal

from loguru import logger

from bookmark_lists.config import ROOT_LIST_ID, NavigationConfig
from bookmark_lists.core.tree.markdown import render_list_as_markdown
from bookmark_lists.core.tree.navigation import (
    Direction,
    bookmarks_in_file,
    select_in_id_order,
    select_in_line_order,
)
from bookmark_lists.errors import (
    CrossListMismatchError,
    InvalidNodeTypeError,
    NavigationMiss,
    NodeNotFoundError,
    RootDeletionForbiddenError,
    SelfParentingError,
)
from bookmark_lists.models.node import (
    Bookmark,
    BookmarkList,
    Location,
    Node,
    get_all_bookmarks,
    iter_descendants,
    new_bookmark,
    new_list,
)
from bookmark_lists.protocols import LocationProvider, Notifier, RepositoryProtocol

BookmarkCallback = Callable[[Bookmark], None]
PasteOperation = Literal["cut", "copy"]


@dataclass
class Session:
    """Navigation state of one caller. Lives for the process only.

    ``last_visited_id`` is the cursor for id-order navigation; it is shared by
    both directions and cleared whenever the active list changes.
    """

    active_list_id: int | None = None
    last_visited_id: int | None = None


class LoguruNotifier:
    """Report navigation misses as warnings."""

    def notify(self, miss: NavigationMiss, message: str) -> None:
        logger.warning(message)


class BookmarkService:
    """CRUD and navigation over a tree of bookmarks and lists.

    Every structural check runs before the first write, and multi-node writes
    go through a single repository transaction.
    """

    def __init__(
        self,
        repo: RepositoryProtocol,
        *,
        locations: LocationProvider,
        notifier: Notifier | None = None,
        config: NavigationConfig | None = None,
        session: Session | None = None,
    ) -> None:
        self._repo = repo
        self._locations = locations
        self._notifier = notifier or LoguruNotifier()
        self.config = config or NavigationConfig()
        self.session = session or Session()

    # --- Lookups ---

    def find_node(self, node_id: int) -> Node | None:
        return self._repo.find_node(node_id)

    def find_bookmark_by_location(self, location: Location | None = None) -> Bookmark | None:
        """Find the bookmark under ``location`` (default: the caller's cursor)."""
        return self._repo.find_bookmark_by_location(location or self._locations.current_location())

    def get_active_list(self) -> BookmarkList:
        """Return the session's active list, defaulting lazily through the repository."""
        if self.session.active_list_id is not None:
            node = self._repo.find_node(self.session.active_list_id)
            if isinstance(node, BookmarkList):
                return node

        active = self._repo.ensure_and_get_active_list()
        if self.session.active_list_id != active.id:
            if self.session.active_list_id is not None:
                self.session.last_visited_id = None
            self.session.active_list_id = active.id
        return active

    def get_all_bookmarks_of_active_list(self) -> list[Bookmark]:
        return get_all_bookmarks(self.get_active_list())

    def export_list_as_markdown(
        self, list_id: int | None = None, *, max_depth: int | None = None
    ) -> str:
        """Render a list (default: the active one) as a markdown bullet tree."""
        target = self.get_active_list() if list_id is None else self._require_list(list_id)
        return render_list_as_markdown(target, max_depth=max_depth)

    # --- Bookmarks ---

    def new_bookmark(self, bookmark: Node, parent_list_id: int | None = None) -> Bookmark:
        """Persist a new bookmark and return it as stored.

        A bookmark without a location is placed at the caller's cursor.
        """
        if not isinstance(bookmark, Bookmark):
            msg = "Node is not a bookmark"
            raise InvalidNodeTypeError(msg, {"type": bookmark.type})
        if bookmark.location is None:
            bookmark = replace(bookmark, location=self._locations.current_location())

        parent_id = self._resolve_parent(parent_list_id)
        node_id = self._repo.insert_node(bookmark, parent_id)
        logger.debug("Created bookmark {} in list {}", node_id, parent_id)
        return self._read_back(node_id)

    def toggle_mark(
        self,
        name: str,
        location: Location | None = None,
        parent_list_id: int | None = None,
    ) -> Bookmark:
        """Create, rename or remove the bookmark at a location.

        An existing bookmark is removed when ``name`` is empty (the removed
        bookmark is returned) and renamed otherwise. Without one, a new
        bookmark named ``name`` is created in the parent list (default: the
        active list).
        """
        location = location or self._locations.current_location()

        with self._repo.transaction():
            existing = self._repo.find_bookmark_by_location(location)
            if existing is not None:
                if name == "":
                    self._repo.delete_node(existing.id)
                    logger.debug(
                        "Removed bookmark {} at {}:{}", existing.id, location.path, location.line
                    )
                    return existing
                renamed = self._repo.update_node(replace(existing, name=name))
                logger.debug("Renamed bookmark {} to {!r}", existing.id, name)
                return renamed

            parent_id = self._resolve_parent(parent_list_id)
            node_id = self._repo.insert_node(new_bookmark(name, location), parent_id)
            logger.debug("Marked {}:{} as bookmark {}", location.path, location.line, node_id)
            return self._read_back(node_id)

    def remove_bookmark(self, bookmark_id: int) -> None:
        """Delete a bookmark; unknown ids are ignored."""
        if bookmark_id == ROOT_LIST_ID:
            msg = "Cannot delete root node"
            raise RootDeletionForbiddenError(msg)
        self._repo.delete_node(bookmark_id)

    def mark_visited(self, bookmark_id: int) -> Bookmark:
        """Stamp ``visited_at`` after the caller jumped to the bookmark."""
        node = self._require_node(bookmark_id)
        if not isinstance(node, Bookmark):
            msg = f"Node {bookmark_id} is not a bookmark"
            raise InvalidNodeTypeError(msg, {"node_id": bookmark_id})
        return self._repo.update_node(replace(node, visited_at=int(time.time())))

    # --- Lists and nodes ---

    def create_list(self, name: str, parent_list_id: int | None = None) -> BookmarkList:
        """Create a list (default parent: root) and make it the active list."""
        parent_id = ROOT_LIST_ID if parent_list_id is None else parent_list_id
        self._require_list(parent_id)

        with self._repo.transaction():
            list_id = self._repo.insert_node(new_list(name), parent_id)
            self.set_active_list(list_id)
        logger.info("Created list {!r} ({})", name, list_id)
        return self._require_list(list_id)

    def rename_node(self, node_id: int, new_name: str) -> Node:
        node = self._require_node(node_id)
        return self._repo.update_node(replace(node, name=new_name))

    def delete_node(self, node_id: int) -> None:
        """Delete a node and, for a list, its whole subtree."""
        if node_id == ROOT_LIST_ID:
            msg = "Cannot delete root node"
            raise RootDeletionForbiddenError(msg)
        self._require_node(node_id)

        self._repo.delete_node(node_id)
        if (
            self.session.active_list_id is not None
            and self._repo.find_node(self.session.active_list_id) is None
        ):
            self.session.active_list_id = None
            self.session.last_visited_id = None
        logger.debug("Deleted node {}", node_id)

    def remove_from_list(self, node_id: int, parent_id: int) -> None:
        """Detach a node from a list without deleting it."""
        self._repo.remove_from_list(node_id, parent_id)

    def set_active_list(self, list_id: int) -> None:
        """Make ``list_id`` the active list and reset the navigation cursor."""
        self._require_list(list_id)
        self._repo.set_active_list(list_id)
        self.session.active_list_id = list_id
        self.session.last_visited_id = None
        logger.debug("Active list is now {}", list_id)

    def switch_position(self, a: Node, b: Node) -> tuple[Node, Node]:
        """Swap the order of two siblings and return both as stored."""
        first = self._require_node(a.id)
        second = self._require_node(b.id)

        parent_a = self._repo.get_parent_id(first.id)
        parent_b = self._repo.get_parent_id(second.id)
        if parent_a != parent_b:
            msg = "Cannot switch positions of nodes from different lists"
            raise CrossListMismatchError(msg, {"parents": (parent_a, parent_b)})

        with self._repo.transaction():
            updated_a = self._repo.update_node(replace(first, order=second.order))
            updated_b = self._repo.update_node(replace(second, order=first.order))
        return updated_a, updated_b

    def paste_node(
        self,
        node: Node,
        parent_id: int,
        position: int,
        operation: PasteOperation,
    ) -> Node:
        """Place ``node`` in ``parent_id`` with ``order = position``.

        ``cut`` moves the node, shifting siblings at or after ``position`` down
        by one. ``copy`` inserts a fresh copy (lists are copied with their
        subtree) without renumbering siblings.
        """
        if isinstance(node, BookmarkList) and node.id == parent_id:
            msg = "Cannot paste a list into itself"
            raise SelfParentingError(msg, {"node_id": node.id})
        target = self._require_list(parent_id)

        if operation == "cut":
            return self._cut(node, target, position)
        if operation == "copy":
            return self._copy(node, parent_id, position)
        msg = f"Unknown paste operation {operation!r}"
        raise ValueError(msg)

    def move_node_to_list(self, node_id: int, list_id: int) -> Node:
        """Cut a node and paste it at the end of a list."""
        node = self._require_node(node_id)
        target = self._require_list(list_id)
        return self.paste_node(node, list_id, _next_position(target, exclude=node_id), "cut")

    def copy_node_to_list(self, node_id: int, list_id: int) -> Node:
        """Copy a node to the end of a list."""
        node = self._require_node(node_id)
        target = self._require_list(list_id)
        return self.paste_node(node, list_id, _next_position(target), "copy")

    # --- Navigation ---

    def find_next_bookmark_id_order(self, callback: BookmarkCallback) -> None:
        self._navigate_id_order(callback, Direction.FORWARD)

    def find_prev_bookmark_id_order(self, callback: BookmarkCallback) -> None:
        self._navigate_id_order(callback, Direction.BACKWARD)

    def find_next_bookmark_line_order(self, callback: BookmarkCallback) -> None:
        self._navigate_line_order(
            callback,
            Direction.FORWARD,
            "No next bookmark found within the active list in this file",
        )

    def find_prev_bookmark_line_order(self, callback: BookmarkCallback) -> None:
        self._navigate_line_order(
            callback,
            Direction.BACKWARD,
            "No previous bookmark found within the active list in this file",
        )

    def _navigate_id_order(self, callback: BookmarkCallback, direction: Direction) -> None:
        bookmarks = get_all_bookmarks(self.get_active_list())
        selected = select_in_id_order(
            bookmarks, last_visited_id=self.session.last_visited_id, direction=direction
        )
        if selected is None:
            self._notifier.notify(
                NavigationMiss.NO_BOOKMARKS_AVAILABLE, "No bookmarks available in the active list"
            )
            return

        self.session.last_visited_id = selected.id
        callback(selected)

    def _navigate_line_order(
        self, callback: BookmarkCallback, direction: Direction, fail_msg: str
    ) -> None:
        cursor = self._locations.current_location()
        file_bookmarks = bookmarks_in_file(get_all_bookmarks(self.get_active_list()), cursor.path)
        if not file_bookmarks:
            self._notifier.notify(
                NavigationMiss.NO_BOOKMARKS_AVAILABLE, "No bookmarks available in this file"
            )
            return

        selected = select_in_line_order(
            file_bookmarks,
            line=cursor.line,
            direction=direction,
            wraparound=self.config.next_prev_wraparound_same_file,
        )
        if selected is None:
            self._notifier.notify(NavigationMiss.NO_MATCH_IN_DIRECTION, fail_msg)
            return
        callback(selected)

    # --- Internals ---

    def _resolve_parent(self, parent_list_id: int | None) -> int:
        if parent_list_id is None:
            return self.get_active_list().id
        return self._require_list(parent_list_id).id

    def _require_node(self, node_id: int) -> Node:
        node = self._repo.find_node(node_id)
        if node is None:
            msg = f"Node {node_id} not found"
            raise NodeNotFoundError(msg, {"node_id": node_id})
        return node

    def _require_list(self, list_id: int) -> BookmarkList:
        node = self._require_node(list_id)
        if not isinstance(node, BookmarkList):
            msg = f"Node {list_id} is not a list"
            raise InvalidNodeTypeError(msg, {"node_id": list_id})
        return node

    def _read_back(self, node_id: int) -> Node:
        node = self._repo.find_node(node_id)
        if node is None:
            msg = f"Failed to read back node {node_id}"
            raise NodeNotFoundError(msg, {"node_id": node_id})
        return node

    def _cut(self, node: Node, target: BookmarkList, position: int) -> Node:
        current = self._require_node(node.id)
        if isinstance(current, BookmarkList) and any(
            d.id == target.id for d in iter_descendants(current)
        ):
            msg = "Cannot paste a list into its own descendant"
            raise SelfParentingError(msg, {"node_id": current.id, "parent_id": target.id})

        old_parent = self._repo.get_parent_id(current.id)
        shifted = [
            replace(child, order=(child.order or 0) + 1)
            for child in target.children
            if child.id != current.id and (child.order or 0) >= position
        ]

        with self._repo.transaction():
            for child in shifted:
                self._repo.update_node(child)
            if old_parent is not None and old_parent != target.id:
                self._repo.remove_from_list(current.id, old_parent)
            self._repo.add_to_list(current.id, target.id)
            moved = self._repo.update_node(replace(current, order=position))
        logger.debug("Moved node {} to list {} at {}", current.id, target.id, position)
        return moved

    def _copy(self, node: Node, parent_id: int, position: int) -> Node:
        with self._repo.transaction():
            node_id = self._repo.insert_node_at_position(_fresh_copy(node), parent_id, position)
            if isinstance(node, BookmarkList):
                self._copy_children(node, node_id)
        logger.debug("Copied node {} to list {} as {}", node.id, parent_id, node_id)
        return self._read_back(node_id)

    def _copy_children(self, source: BookmarkList, new_parent_id: int) -> None:
        for child in source.children:
            child_id = self._repo.insert_node_at_position(
                _fresh_copy(child), new_parent_id, child.order or 0
            )
            if isinstance(child, BookmarkList):
                self._copy_children(child, child_id)


def _fresh_copy(node: Node) -> Node:
    now = int(time.time())
    if isinstance(node, BookmarkList):
        return replace(node, id=None, created_at=now, children=())
    return replace(node, id=None, created_at=now, visited_at=now)


def _next_position(target: BookmarkList, *, exclude: int | None = None) -> int:
    orders = [c.order or 0 for c in target.children if c.id != exclude]
    return max(orders) + 1 if orders else 0
