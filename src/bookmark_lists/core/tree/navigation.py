"""Bookmark selection for next/previous navigation.

Two orderings are supported:

- id order: every bookmark of a list sorted by ``order``, walked circularly
  from the last visited bookmark.
- line order: bookmarks of a single file sorted by line, picking the nearest
  one strictly before or after the cursor line.
"""

from collections.abc import Iterable
from enum import Enum

from bookmark_lists.models.node import Bookmark


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


def sort_by_order(bookmarks: Iterable[Bookmark]) -> list[Bookmark]:
    """Sort by ``order``, breaking ties by id."""
    return sorted(bookmarks, key=lambda b: (b.order or 0, b.id or 0))


def select_in_id_order(
    bookmarks: Iterable[Bookmark],
    *,
    last_visited_id: int | None,
    direction: Direction,
) -> Bookmark | None:
    """Pick the bookmark one step away from the last visited one.

    When the last visited bookmark is unknown or no longer present, the first
    bookmark is returned whatever the direction. Returns None only for an
    empty input.
    """
    ordered = sort_by_order(bookmarks)
    if not ordered:
        return None

    index = next((i for i, b in enumerate(ordered) if b.id == last_visited_id), None)
    if last_visited_id is None or index is None:
        return ordered[0]

    step = 1 if direction is Direction.FORWARD else -1
    return ordered[(index + step) % len(ordered)]


def bookmarks_in_file(bookmarks: Iterable[Bookmark], path: str) -> list[Bookmark]:
    """Bookmarks located in ``path``, sorted by line then id."""
    in_file = [b for b in bookmarks if b.location is not None and b.location.path == path]
    return sorted(in_file, key=lambda b: (b.location.line, b.id or 0))


def select_in_line_order(
    file_bookmarks: list[Bookmark],
    *,
    line: int,
    direction: Direction,
    wraparound: bool,
) -> Bookmark | None:
    """Pick the nearest bookmark strictly after (or before) ``line``.

    ``file_bookmarks`` must come from ``bookmarks_in_file``. With wraparound,
    running off one end selects the bookmark at the other end.
    """
    if not file_bookmarks:
        return None

    if direction is Direction.FORWARD:
        candidate = next((b for b in file_bookmarks if b.location.line > line), None)
        if candidate is None and wraparound:
            candidate = file_bookmarks[0]
        return candidate

    candidate = next(
        (b for b in reversed(file_bookmarks) if b.location.line < line),
        None,
    )
    if candidate is None and wraparound:
        candidate = file_bookmarks[-1]
    return candidate
