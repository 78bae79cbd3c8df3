"""Walkway backend facade: one client object over the resource APIs.

Public surface:
- WalkwayClient(session=None, limiter=None, token=None, base_url=None)
- get_default_client()
- search_walkways / get_walkway_detail / toggle_like / create_walkway_history
- submit_tracking_session(walkway_id, session)
- set_rate_limiter(max_concurrent=None)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple

import requests

from .api_client import BookmarkAPI, RateLimiter, ResourceAPI, ReviewAPI, WalkwayAPI
from .config import RATE_LIMIT_MAX_CONCURRENT
from .models import (
    Bookmark,
    ReviewContent,
    ReviewRating,
    UserReview,
    WalkwayDetail,
    WalkwayHistoryRecord,
    WalkwayHistoryResult,
    WalkwayPage,
    WalkwaySearchParams,
    WalkwaySummary,
)
from .tracking import TrackingSession


class WalkwayClient:
    """Shares one session, limiter and token across all endpoint groups."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        limiter: RateLimiter | None = None,
        token: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self._resources = ResourceAPI(
            session=session,
            limiter=limiter,
            token=token,
            base_url=base_url,
            timeout=timeout,
        )
        self.walkways = WalkwayAPI(self._resources)
        self.reviews = ReviewAPI(self._resources)
        self.bookmarks = BookmarkAPI(self._resources)

    # --- Limiter control ------------------------------------------------
    def set_rate_limiter(self, max_concurrent: Optional[int] = None) -> None:
        """Resize the shared limiter (``None`` restores the configured cap)."""

        self._resources.limiter.resize(max_concurrent or RATE_LIMIT_MAX_CONCURRENT)

    # --- Walkways -------------------------------------------------------
    def search_walkways(self, params: WalkwaySearchParams) -> WalkwayPage:
        return self.walkways.search_walkways(params)

    def iter_walkways(
        self, params: WalkwaySearchParams, *, max_pages: int | None = None
    ) -> Iterator[WalkwaySummary]:
        return self.walkways.iter_walkways(params, max_pages=max_pages)

    def get_all_walkways(self, **kwargs: Any) -> WalkwayPage:
        return self.walkways.get_all_walkways(**kwargs)

    def get_walkway_detail(self, walkway_id: int, *, use_cache: bool = True) -> WalkwayDetail:
        return self.walkways.get_walkway_detail(walkway_id, use_cache=use_cache)

    def upload_course_image(
        self, image: str | Path | bytes | BinaryIO, **kwargs: Any
    ) -> int:
        return self.walkways.upload_course_image(image, **kwargs)

    def create_walkway(self, walkway: Dict[str, Any]) -> int:
        return self.walkways.create_walkway(walkway)

    def update_walkway(self, walkway_id: int, walkway: Dict[str, Any]) -> int:
        return self.walkways.update_walkway(walkway_id, walkway)

    def delete_walkway(self, walkway_id: int) -> None:
        self.walkways.delete_walkway(walkway_id)

    def get_my_walkways(self, **kwargs: Any) -> WalkwayPage:
        return self.walkways.get_my_walkways(**kwargs)

    def get_liked_walkways(self, **kwargs: Any) -> WalkwayPage:
        return self.walkways.get_liked_walkways(**kwargs)

    def toggle_like(self, walkway_id: int, is_liked: bool) -> bool:
        return self.walkways.toggle_like(walkway_id, is_liked)

    # --- History --------------------------------------------------------
    def create_walkway_history(
        self, walkway_id: int, *, time: int, distance: float
    ) -> WalkwayHistoryResult:
        return self.walkways.create_walkway_history(
            walkway_id, time=time, distance=distance
        )

    def get_walkway_histories(
        self, **kwargs: Any
    ) -> Tuple[List[WalkwayHistoryRecord], Optional[bool]]:
        return self.walkways.get_walkway_histories(**kwargs)

    def submit_tracking_session(
        self, walkway_id: int, session: TrackingSession
    ) -> WalkwayHistoryResult:
        """Finish ``session`` (if still open) and record it as a history entry."""

        payload = session.finish()
        return self.create_walkway_history(
            walkway_id, time=int(payload["time"]), distance=payload["distance"]
        )

    # --- Reviews --------------------------------------------------------
    def get_user_reviews(self, **kwargs: Any) -> Tuple[List[UserReview], Optional[bool]]:
        return self.reviews.get_user_reviews(**kwargs)

    def get_review_rating(self, walkway_id: int) -> ReviewRating:
        return self.reviews.get_review_rating(walkway_id)

    def get_review_contents(
        self, walkway_id: int, **kwargs: Any
    ) -> Tuple[List[ReviewContent], Optional[bool]]:
        return self.reviews.get_review_contents(walkway_id, **kwargs)

    def create_review(
        self, walkway_id: int, history_id: int, *, rating: int, content: str
    ) -> Optional[int]:
        return self.reviews.create_review(
            walkway_id, history_id, rating=rating, content=content
        )

    # --- Bookmarks ------------------------------------------------------
    def get_bookmarks(self) -> List[Bookmark]:
        return self.bookmarks.get_bookmarks()

    def rename_bookmark(self, bookmark_id: int, name: str) -> None:
        self.bookmarks.rename_bookmark(bookmark_id, name)

    def delete_bookmark(self, bookmark_id: int) -> None:
        self.bookmarks.delete_bookmark(bookmark_id)


DEFAULT_WALKWAY_CLIENT = WalkwayClient()


def get_default_client() -> WalkwayClient:
    """Return the shared client used by the module-level wrappers."""

    return DEFAULT_WALKWAY_CLIENT


def set_rate_limiter(max_concurrent: Optional[int] = None) -> None:
    get_default_client().set_rate_limiter(max_concurrent)


def search_walkways(params: WalkwaySearchParams) -> WalkwayPage:
    return get_default_client().search_walkways(params)


def get_walkway_detail(walkway_id: int) -> WalkwayDetail:
    return get_default_client().get_walkway_detail(walkway_id)


def toggle_like(walkway_id: int, is_liked: bool) -> bool:
    return get_default_client().toggle_like(walkway_id, is_liked)


def create_walkway_history(
    walkway_id: int, *, time: int, distance: float
) -> WalkwayHistoryResult:
    return get_default_client().create_walkway_history(
        walkway_id, time=time, distance=distance
    )


def submit_tracking_session(
    walkway_id: int, session: TrackingSession
) -> WalkwayHistoryResult:
    return get_default_client().submit_tracking_session(walkway_id, session)
