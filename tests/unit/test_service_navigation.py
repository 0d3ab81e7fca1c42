"""Tests for next/previous navigation through the bookmark service."""

import pytest

from bookmark_lists.config import NavigationConfig
from bookmark_lists.core.service import BookmarkService
from bookmark_lists.errors import NavigationMiss
from bookmark_lists.models.node import Bookmark, Location, new_bookmark
from tests.unit.fakes import FakeCursor, RecordingNotifier


class _Recorder:
    def __init__(self) -> None:
        self.selected: list[Bookmark] = []

    def __call__(self, bookmark: Bookmark) -> None:
        self.selected.append(bookmark)

    @property
    def names(self) -> list[str]:
        return [b.name for b in self.selected]


def _populate(service: BookmarkService, lines: dict[str, int], path: str = "/src/app.py") -> None:
    for name, line in lines.items():
        service.new_bookmark(new_bookmark(name, Location(path, line)))


# --- id order ---


def test_id_order_forward_is_circular(service: BookmarkService) -> None:
    _populate(service, {"one": 30, "two": 10, "three": 20})
    jump = _Recorder()

    for _ in range(4):
        service.find_next_bookmark_id_order(jump)

    assert jump.names == ["one", "two", "three", "one"]


def test_id_order_backward_from_unset_cursor_selects_first(service: BookmarkService) -> None:
    _populate(service, {"one": 1, "two": 2, "three": 3})
    jump = _Recorder()

    service.find_prev_bookmark_id_order(jump)
    service.find_prev_bookmark_id_order(jump)

    assert jump.names == ["one", "three"]


def test_id_order_cursor_is_shared_by_both_directions(service: BookmarkService) -> None:
    _populate(service, {"one": 1, "two": 2, "three": 3})
    jump = _Recorder()

    service.find_next_bookmark_id_order(jump)
    service.find_next_bookmark_id_order(jump)
    service.find_prev_bookmark_id_order(jump)

    assert jump.names == ["one", "two", "one"]
    assert service.session.last_visited_id == jump.selected[-1].id


def test_id_order_includes_nested_lists(service: BookmarkService) -> None:
    work = service.create_list("work")
    service.new_bookmark(new_bookmark("top", Location("/a.py", 1)))
    service.create_list("sub", work.id)
    service.new_bookmark(new_bookmark("nested", Location("/b.py", 1)))
    service.set_active_list(work.id)
    jump = _Recorder()

    service.find_next_bookmark_id_order(jump)
    service.find_next_bookmark_id_order(jump)

    assert sorted(jump.names) == ["nested", "top"]


def test_id_order_restarts_when_last_visited_was_removed(service: BookmarkService) -> None:
    _populate(service, {"one": 1, "two": 2, "three": 3})
    jump = _Recorder()
    service.find_next_bookmark_id_order(jump)
    service.find_next_bookmark_id_order(jump)

    service.remove_bookmark(jump.selected[-1].id)
    service.find_next_bookmark_id_order(jump)

    assert jump.names == ["one", "two", "one"]


def test_id_order_uses_order_field_after_swap(service: BookmarkService) -> None:
    _populate(service, {"one": 1, "two": 2})
    one, two = service.get_active_list().children
    service.switch_position(one, two)
    jump = _Recorder()

    service.find_next_bookmark_id_order(jump)

    assert jump.names == ["two"]


def test_switching_active_list_resets_id_order_cursor(service: BookmarkService) -> None:
    _populate(service, {"one": 1, "two": 2})
    jump = _Recorder()
    service.find_next_bookmark_id_order(jump)
    service.find_next_bookmark_id_order(jump)

    service.set_active_list(0)
    service.find_next_bookmark_id_order(jump)

    assert jump.names == ["one", "two", "one"]


def test_id_order_with_no_bookmarks_notifies_and_skips_callback(
    service: BookmarkService, notifier: RecordingNotifier
) -> None:
    jump = _Recorder()

    service.find_next_bookmark_id_order(jump)

    assert jump.selected == []
    assert notifier.misses == [NavigationMiss.NO_BOOKMARKS_AVAILABLE]
    assert service.session.last_visited_id is None


# --- line order ---


def test_line_order_forward_and_backward(service: BookmarkService, cursor: FakeCursor) -> None:
    _populate(service, {"a": 10, "b": 20, "c": 30})
    jump = _Recorder()

    cursor.move_to(15)
    service.find_next_bookmark_line_order(jump)
    service.find_prev_bookmark_line_order(jump)

    assert jump.names == ["b", "a"]


def test_line_order_ignores_other_files(service: BookmarkService, cursor: FakeCursor) -> None:
    _populate(service, {"here": 10})
    _populate(service, {"there": 50}, path="/src/other.py")
    jump = _Recorder()

    cursor.move_to(20)
    service.find_next_bookmark_line_order(jump)

    assert jump.names == ["here"]


def test_line_order_without_wraparound_reports_no_match(
    service: BookmarkService, cursor: FakeCursor, notifier: RecordingNotifier
) -> None:
    service.config = NavigationConfig(next_prev_wraparound_same_file=False)
    _populate(service, {"a": 10, "b": 20})
    jump = _Recorder()

    cursor.move_to(25)
    service.find_next_bookmark_line_order(jump)

    assert jump.selected == []
    assert notifier.misses == [NavigationMiss.NO_MATCH_IN_DIRECTION]


def test_line_order_with_wraparound_selects_minimum_line(
    service: BookmarkService, cursor: FakeCursor
) -> None:
    _populate(service, {"b": 20, "a": 10})
    jump = _Recorder()

    cursor.move_to(25)
    service.find_next_bookmark_line_order(jump)
    cursor.move_to(5)
    service.find_prev_bookmark_line_order(jump)

    assert jump.names == ["a", "b"]


def test_line_order_with_no_bookmarks_in_file_notifies(
    service: BookmarkService, cursor: FakeCursor, notifier: RecordingNotifier
) -> None:
    _populate(service, {"elsewhere": 3}, path="/src/other.py")
    jump = _Recorder()

    cursor.move_to(1, path="/src/app.py")
    service.find_prev_bookmark_line_order(jump)

    assert jump.selected == []
    assert notifier.misses == [NavigationMiss.NO_BOOKMARKS_AVAILABLE]


def test_line_order_does_not_touch_session_or_store(
    service: BookmarkService, cursor: FakeCursor
) -> None:
    _populate(service, {"a": 10})
    before = service.get_active_list()
    jump = _Recorder()

    cursor.move_to(1)
    service.find_next_bookmark_line_order(jump)

    assert service.session.last_visited_id is None
    assert service.get_active_list() == before


def test_callback_can_mark_the_bookmark_visited(
    service: BookmarkService, cursor: FakeCursor, monkeypatch: pytest.MonkeyPatch
) -> None:
    _populate(service, {"a": 10})
    monkeypatch.setattr("bookmark_lists.core.service.time.time", lambda: 2_000_000_000)
    cursor.move_to(1)

    service.find_next_bookmark_line_order(lambda bm: service.mark_visited(bm.id))

    (refreshed,) = service.get_all_bookmarks_of_active_list()
    assert refreshed.visited_at == 2_000_000_000
