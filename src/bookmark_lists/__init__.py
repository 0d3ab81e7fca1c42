"""Named code bookmarks organized into nested lists."""

from bookmark_lists.core.repository.sqlite_repo import SqliteRepository
from bookmark_lists.core.service import BookmarkService, Session
from bookmark_lists.models.node import Bookmark, BookmarkList, Location
from bookmark_lists.protocols import LocationProvider, Notifier, RepositoryProtocol

__all__ = [
    "Bookmark",
    "BookmarkList",
    "BookmarkService",
    "Location",
    "LocationProvider",
    "Notifier",
    "RepositoryProtocol",
    "Session",
    "SqliteRepository",
]
