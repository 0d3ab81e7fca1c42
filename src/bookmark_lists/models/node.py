"""Domain models for bookmark lists."""

import time
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class Location:
    """A place in a file. Lines are 1-based, columns 0-based."""

    path: str
    line: int
    col: int = 0


@dataclass(frozen=True)
class Bookmark:
    """A leaf node bound to a location."""

    name: str
    location: Location | None = None
    id: int | None = None
    order: int | None = None
    created_at: int = 0
    visited_at: int = 0
    is_expanded: bool = False
    description: str | None = None
    content: str | None = None
    githash: str | None = None

    @property
    def type(self) -> Literal["bookmark"]:
        return "bookmark"


@dataclass(frozen=True)
class BookmarkList:
    """A container node. ``children`` is the hydrated subtree, sorted by order."""

    name: str
    id: int | None = None
    order: int | None = None
    created_at: int = 0
    is_expanded: bool = True
    description: str | None = None
    content: str | None = None
    children: tuple["Node", ...] = ()

    @property
    def type(self) -> Literal["list"]:
        return "list"

    @property
    def child_ids(self) -> tuple[int, ...]:
        return tuple(c.id for c in self.children if c.id is not None)


Node = Bookmark | BookmarkList


def new_bookmark(name: str, location: Location | None = None) -> Bookmark:
    """Build an unsaved bookmark stamped with the current time."""
    now = int(time.time())
    return Bookmark(name=name, location=location, created_at=now, visited_at=now)


def new_list(name: str) -> BookmarkList:
    """Build an unsaved, empty list stamped with the current time."""
    return BookmarkList(name=name, created_at=int(time.time()))


def iter_descendants(bookmark_list: BookmarkList) -> Iterator[Node]:
    """Yield every node below ``bookmark_list``, each persisted node once."""
    seen: set[int] = set()
    stack: list[Node] = list(bookmark_list.children)
    while stack:
        node = stack.pop()
        if node.id is not None:
            if node.id in seen:
                continue
            seen.add(node.id)
        if isinstance(node, BookmarkList):
            stack.extend(node.children)
        yield node


def get_all_bookmarks(bookmark_list: BookmarkList) -> list[Bookmark]:
    """Collect every bookmark in the subtree of ``bookmark_list``, unordered."""
    return [n for n in iter_descendants(bookmark_list) if isinstance(n, Bookmark)]
