"""Walkway endpoints: search, detail, registration, likes and usage history."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from threading import RLock
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple

from cachetools import TTLCache

from .. import config
from ..errors import WalkwayAPIError
from ..models import (
    WalkwayDetail,
    WalkwayHistoryRecord,
    WalkwayHistoryResult,
    WalkwayPage,
    WalkwaySearchParams,
    WalkwaySummary,
)
from ..utils import as_int, drop_none
from .pagination import iter_cursor_pages, split_page
from .resources import ResourceAPI

LOGGER = logging.getLogger(__name__)


def _require_id(payload: Any, key: str, context: str) -> int:
    value = as_int(payload.get(key)) if isinstance(payload, dict) else as_int(payload)
    if value is None:
        raise WalkwayAPIError(f"{context}: response did not contain '{key}'")
    return value


class WalkwayAPI:
    """Typed wrappers around the ``/walkways`` and ``/users/walkways`` endpoints."""

    def __init__(self, resources: ResourceAPI | None = None) -> None:
        self._resources = resources or ResourceAPI()
        self._detail_cache: TTLCache[int, WalkwayDetail] = TTLCache(
            maxsize=max(1, config.WALKWAY_DETAIL_CACHE_SIZE),
            ttl=max(1, config.WALKWAY_DETAIL_CACHE_TTL_SECONDS),
        )
        self._detail_cache_lock = RLock()

    # --- Search / listing ----------------------------------------------
    def search_walkways(self, params: WalkwaySearchParams) -> WalkwayPage:
        """Walkways around a location, ``size`` defaulting to ``DEFAULT_PAGE_SIZE``."""

        payload = self._resources.get(
            "/walkways",
            params=drop_none(params.to_query(config.DEFAULT_PAGE_SIZE)),
            context="Walkway search",
            fallback="Failed to search walkways.",
        )
        return WalkwayPage.from_payload(payload)

    def iter_walkways(
        self, params: WalkwaySearchParams, *, max_pages: int | None = None
    ) -> Iterator[WalkwaySummary]:
        """Iterate every search result, following the ``lastId`` cursor."""

        size = params.size or config.DEFAULT_PAGE_SIZE

        def fetch(last_id: Optional[int]) -> Tuple[List[WalkwaySummary], Optional[bool]]:
            page = self.search_walkways(
                WalkwaySearchParams(
                    latitude=params.latitude,
                    longitude=params.longitude,
                    distance=params.distance,
                    sort=params.sort,
                    last_id=last_id if last_id is not None else params.last_id,
                    size=size,
                )
            )
            return page.walkways, page.has_next

        for page in iter_cursor_pages(
            fetch, lambda w: w.walkway_id, page_size=size, max_pages=max_pages
        ):
            yield from page

    def get_all_walkways(
        self,
        *,
        sort: str | None = None,
        last_id: int | None = None,
        size: int | None = None,
    ) -> WalkwayPage:
        """Every walkway regardless of location."""

        payload = self._resources.get(
            "/walkways/all",
            params=drop_none(
                {
                    "sort": sort,
                    "lastId": last_id,
                    "size": size or config.DEFAULT_PAGE_SIZE,
                }
            ),
            context="Walkway listing",
            fallback="Failed to list all walkways.",
        )
        return WalkwayPage.from_payload(payload)

    def get_my_walkways(
        self,
        *,
        size: int | None = None,
        last_id: int | None = None,
        preview: bool = False,
    ) -> WalkwayPage:
        """Walkways registered by the current user.

        ``preview`` limits the page to ``PREVIEW_PAGE_SIZE`` entries.
        """

        page_size = config.PREVIEW_PAGE_SIZE if preview else (size or config.DEFAULT_PAGE_SIZE)
        payload = self._resources.get(
            "/users/walkways/upload",
            params=drop_none({"size": page_size, "lastId": last_id}),
            context="My walkways",
            fallback="Failed to load registered walkways.",
        )
        return WalkwayPage.from_payload(payload)

    def get_liked_walkways(
        self, *, size: int | None = None, last_id: int | None = None
    ) -> WalkwayPage:
        payload = self._resources.get(
            "/users/walkways/like",
            params=drop_none(
                {"size": size or config.DEFAULT_PAGE_SIZE, "lastId": last_id}
            ),
            context="Liked walkways",
            fallback="Failed to load liked walkways.",
        )
        return WalkwayPage.from_payload(payload)

    # --- Detail ---------------------------------------------------------
    def get_walkway_detail(self, walkway_id: int, *, use_cache: bool = True) -> WalkwayDetail:
        if use_cache:
            with self._detail_cache_lock:
                cached = self._detail_cache.get(walkway_id)
            if cached is not None:
                LOGGER.debug("Walkway detail cache hit walkway=%s", walkway_id)
                return cached
        payload = self._resources.get(
            f"/walkways/{walkway_id}",
            context=f"Walkway {walkway_id} detail",
            fallback="Failed to load walkway detail.",
        )
        if not isinstance(payload, dict):
            raise WalkwayAPIError(
                f"Walkway {walkway_id} detail: unexpected payload type {type(payload).__name__}"
            )
        detail = WalkwayDetail.from_payload(payload)
        if detail.walkway_id is None:
            detail.walkway_id = walkway_id
        with self._detail_cache_lock:
            self._detail_cache[walkway_id] = detail
        return detail

    def invalidate_detail(self, walkway_id: int) -> None:
        with self._detail_cache_lock:
            self._detail_cache.pop(walkway_id, None)

    # --- Registration ---------------------------------------------------
    def upload_course_image(
        self,
        image: str | Path | bytes | BinaryIO,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> int:
        """Upload a course image (multipart ``courseImage``) and return its id."""

        if isinstance(image, (str, Path)):
            image_path = Path(image)
            name = filename or image_path.name
            with image_path.open("rb") as handle:
                return self._post_course_image(handle.read(), name, content_type)
        data = image if isinstance(image, bytes) else image.read()
        return self._post_course_image(data, filename or "course.png", content_type)

    def _post_course_image(
        self, data: bytes, filename: str, content_type: str | None
    ) -> int:
        mime = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        payload = self._resources.post(
            "/walkways/image",
            files={"courseImage": (filename, data, mime)},
            context="Course image upload",
            fallback="Failed to upload the course image.",
        )
        return _require_id(payload, "courseImageId", "Course image upload")

    def create_walkway(self, walkway: Dict[str, Any]) -> int:
        """Register a walkway and return the new ``walkwayId``."""

        payload = self._resources.post(
            "/walkways",
            json_body=walkway,
            context="Walkway registration",
            fallback="Failed to register the walkway.",
        )
        walkway_id = _require_id(payload, "walkwayId", "Walkway registration")
        LOGGER.info("Registered walkway id=%s", walkway_id)
        return walkway_id

    def update_walkway(self, walkway_id: int, walkway: Dict[str, Any]) -> int:
        payload = self._resources.put(
            f"/walkways/{walkway_id}",
            json_body=walkway,
            context=f"Walkway {walkway_id} update",
            fallback="Failed to update the registered walkway.",
        )
        self.invalidate_detail(walkway_id)
        updated = as_int(payload)
        return updated if updated is not None else walkway_id

    def delete_walkway(self, walkway_id: int) -> None:
        self._resources.delete(
            f"/walkways/{walkway_id}",
            context=f"Walkway {walkway_id} delete",
            fallback="Failed to delete the walkway.",
            expect_json=False,
        )
        self.invalidate_detail(walkway_id)
        LOGGER.info("Deleted walkway id=%s", walkway_id)

    # --- Likes ----------------------------------------------------------
    def toggle_like(self, walkway_id: int, is_liked: bool) -> bool:
        """Flip the like state and return the new state.

        ``is_liked`` is the current state: a liked walkway is un-liked (DELETE),
        otherwise it is liked (POST).
        """

        path = f"/walkways/{walkway_id}/likes"
        kwargs: Dict[str, Any] = {
            "context": f"Walkway {walkway_id} like",
            "fallback": "Failed to change the like state.",
            "expect_json": False,
        }
        if is_liked:
            self._resources.delete(path, **kwargs)
        else:
            self._resources.post(path, **kwargs)
        self.invalidate_detail(walkway_id)
        return not is_liked

    # --- History --------------------------------------------------------
    def create_walkway_history(
        self, walkway_id: int, *, time: int, distance: float
    ) -> WalkwayHistoryResult:
        """Record a finished walk (``time`` seconds, ``distance`` meters)."""

        if time < 0 or distance < 0:
            raise ValueError("time and distance must be non-negative")
        payload = self._resources.post(
            f"/walkways/{walkway_id}/history",
            json_body={"time": int(time), "distance": distance},
            context=f"Walkway {walkway_id} history",
            fallback="Failed to record the walkway history.",
        )
        if not isinstance(payload, dict):
            raise WalkwayAPIError(f"Walkway {walkway_id} history: empty response")
        result = WalkwayHistoryResult.from_payload(payload)
        LOGGER.info(
            "Recorded history walkway=%s history=%s can_review=%s",
            walkway_id,
            result.walkway_history_id,
            result.can_review,
        )
        return result

    def get_walkway_histories(
        self, *, size: int | None = None, last_id: int | None = None
    ) -> Tuple[List[WalkwayHistoryRecord], Optional[bool]]:
        payload = self._resources.get(
            "/users/walkways/history",
            params=drop_none(
                {"size": size or config.DEFAULT_PAGE_SIZE, "lastId": last_id}
            ),
            context="Walkway histories",
            fallback="Failed to load walkway histories.",
        )
        items, has_next = split_page(payload, "walkwayHistories")
        return [WalkwayHistoryRecord.from_payload(item) for item in items], has_next
