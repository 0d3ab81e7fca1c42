"""Tests for domain models."""

import pytest

from bookmark_lists.models.node import (
    Bookmark,
    BookmarkList,
    Location,
    get_all_bookmarks,
    new_bookmark,
    new_list,
)


def test_location_is_frozen() -> None:
    loc = Location(path="/a.py", line=3)
    with pytest.raises(AttributeError):
        loc.line = 4  # type: ignore[misc]


def test_new_bookmark_has_no_location_and_matching_timestamps() -> None:
    bm = new_bookmark("todo")
    assert bm.type == "bookmark"
    assert bm.location is None
    assert bm.id is None
    assert bm.order is None
    assert bm.created_at == bm.visited_at > 0


def test_new_list_is_empty_and_allows_blank_name() -> None:
    lst = new_list("   ")
    assert lst.type == "list"
    assert lst.children == ()
    assert lst.name == "   "
    assert lst.created_at > 0


def test_get_all_bookmarks_walks_the_whole_subtree() -> None:
    a = Bookmark(id=2, name="a", location=Location("/x.py", 1))
    b = Bookmark(id=4, name="b", location=Location("/x.py", 2))
    c = Bookmark(id=5, name="c", location=Location("/y.py", 9))
    deep = BookmarkList(id=6, name="deep", children=(c,))
    inner = BookmarkList(id=3, name="inner", children=(b, deep))
    outer = BookmarkList(id=1, name="outer", children=(a, inner))

    found = get_all_bookmarks(outer)

    assert sorted(bm.id for bm in found) == [2, 4, 5]


def test_get_all_bookmarks_excludes_nodes_outside_the_subtree() -> None:
    inside = Bookmark(id=2, name="in")
    sibling_list = BookmarkList(id=3, name="other", children=(Bookmark(id=4, name="out"),))
    target = BookmarkList(id=1, name="target", children=(inside,))
    BookmarkList(id=0, name="root", children=(target, sibling_list))

    assert [bm.id for bm in get_all_bookmarks(target)] == [2]


def test_get_all_bookmarks_returns_shared_node_once() -> None:
    shared = Bookmark(id=7, name="shared")
    lst = BookmarkList(
        id=1,
        name="l",
        children=(shared, BookmarkList(id=2, name="sub", children=(shared,))),
    )
    assert [bm.id for bm in get_all_bookmarks(lst)] == [7]


def test_child_ids_follow_children_order() -> None:
    lst = BookmarkList(
        id=1, name="l", children=(Bookmark(id=9, name="x"), BookmarkList(id=4, name="y"))
    )
    assert lst.child_ids == (9, 4)
