"""Exception hierarchy for bookmark list operations.

Structural errors abort the operation before anything is written.
Navigation misses are not errors; see ``NavigationMiss``.
"""

from enum import Enum
from typing import Any


class BookmarksError(Exception):
    """Base exception for all bookmark list errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class InvalidNodeTypeError(BookmarksError):
    """A bookmark was expected and a list was given, or vice versa."""


class NodeNotFoundError(BookmarksError):
    """An identifier does not resolve to a node."""


class RootDeletionForbiddenError(BookmarksError):
    """The root list cannot be deleted."""


class CrossListMismatchError(BookmarksError):
    """Two nodes were expected to share a parent list and do not."""


class SelfParentingError(BookmarksError):
    """A list was pasted into itself or into one of its descendants."""


class NavigationMiss(str, Enum):
    """Why a navigation call selected nothing."""

    NO_BOOKMARKS_AVAILABLE = "no_bookmarks_available"
    NO_MATCH_IN_DIRECTION = "no_match_in_direction"
