"""Protocols for dependency injection in the bookmark service."""

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from bookmark_lists.errors import NavigationMiss
from bookmark_lists.models.node import Bookmark, BookmarkList, Location, Node


@runtime_checkable
class RepositoryProtocol(Protocol):
    """Storage for nodes, parent-child edges and the active list pointer.

    Writes are visible to subsequent reads as soon as they return.
    """

    def transaction(self) -> AbstractContextManager[None]:
        """Group writes so they are applied together or not at all."""
        ...

    def find_node(self, node_id: int) -> Node | None:
        """Return the node, with lists hydrated down to their leaves."""
        ...

    def get_children(self, list_id: int) -> list[Node]:
        """Return the direct children of a list, ordered by (order, id)."""
        ...

    def insert_node(self, node: Node, parent_list_id: int) -> int:
        """Append a node to a list and return its new identifier."""
        ...

    def insert_node_at_position(self, node: Node, parent_list_id: int, position: int) -> int:
        """Insert a node with ``order = position`` and return its new identifier."""
        ...

    def update_node(self, node: Node) -> Node:
        """Persist the node's fields and return the stored form."""
        ...

    def delete_node(self, node_id: int) -> None:
        """Delete a node, its subtree and every edge touching them."""
        ...

    def find_bookmark_by_location(self, location: Location) -> Bookmark | None:
        """Return the bookmark at ``location``, if any."""
        ...

    def get_parent_id(self, node_id: int) -> int | None:
        """Return the id of the list holding ``node_id``."""
        ...

    def add_to_list(self, node_id: int, parent_list_id: int) -> None:
        """Add a parent-child edge."""
        ...

    def remove_from_list(self, node_id: int, parent_list_id: int) -> None:
        """Remove a parent-child edge without deleting either node."""
        ...

    def ensure_and_get_active_list(self) -> BookmarkList:
        """Return the active list, selecting a default when none is set."""
        ...

    def set_active_list(self, list_id: int) -> None:
        """Record ``list_id`` as the active list."""
        ...


@runtime_checkable
class LocationProvider(Protocol):
    """Where the caller's cursor currently is."""

    def current_location(self) -> Location:
        ...


@runtime_checkable
class Notifier(Protocol):
    """Channel for non-fatal navigation outcomes."""

    def notify(self, miss: NavigationMiss, message: str) -> None:
        ...
