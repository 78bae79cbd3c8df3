"""Bookmark folder endpoints."""

from __future__ import annotations

from typing import List

from ..models import Bookmark
from .pagination import split_page
from .resources import ResourceAPI


class BookmarkAPI:
    def __init__(self, resources: ResourceAPI | None = None) -> None:
        self._resources = resources or ResourceAPI()

    def get_bookmarks(self) -> List[Bookmark]:
        payload = self._resources.get(
            "/users/bookmarks",
            context="Bookmarks",
            fallback="Failed to load bookmarks.",
        )
        items, _ = split_page(payload, "bookmarks")
        return [Bookmark.from_payload(item) for item in items]

    def rename_bookmark(self, bookmark_id: int, name: str) -> None:
        cleaned = name.strip() if name else ""
        if not cleaned:
            raise ValueError("bookmark name must not be empty")
        self._resources.put(
            f"/bookmarks/{bookmark_id}",
            json_body={"name": cleaned},
            context=f"Bookmark {bookmark_id} rename",
            fallback="Failed to rename the bookmark.",
            expect_json=False,
        )

    def delete_bookmark(self, bookmark_id: int) -> None:
        self._resources.delete(
            f"/bookmarks/{bookmark_id}",
            context=f"Bookmark {bookmark_id} delete",
            fallback="Failed to delete the bookmark.",
            expect_json=False,
        )
