"""Cursor (``lastId``) pagination helpers for list endpoints."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# fetch_page(last_id) -> (items, has_next); has_next is None when the
# endpoint does not report it.
PageFetcher = Callable[[Optional[int]], Tuple[List[T], Optional[bool]]]


def iter_cursor_pages(
    fetch_page: PageFetcher[T],
    cursor_of: Callable[[T], Optional[int]],
    *,
    page_size: int,
    max_pages: int | None = None,
) -> Iterator[List[T]]:
    """Yield pages until the backend reports no more data.

    Iteration stops on an empty page, ``has_next`` false, a short page when
    ``has_next`` is unknown, a missing or repeated cursor, or ``max_pages``.
    """

    last_id: Optional[int] = None
    seen: set[int] = set()
    pages = 0
    while True:
        items, has_next = fetch_page(last_id)
        pages += 1
        if not items:
            return
        yield items
        if max_pages is not None and pages >= max_pages:
            LOGGER.debug("Stopping pagination at max_pages=%s", max_pages)
            return
        if has_next is False:
            return
        if has_next is None and len(items) < page_size:
            return
        next_id = None
        for item in reversed(items):
            next_id = cursor_of(item)
            if next_id is not None:
                break
        if next_id is None or next_id in seen:
            LOGGER.warning(
                "Pagination cursor stalled at lastId=%s after %d pages", next_id, pages
            )
            return
        seen.add(next_id)
        last_id = next_id


def split_page(payload: Any, key: str) -> Tuple[List[Dict[str, Any]], Optional[bool]]:
    """Split a list payload (bare list or ``{key|content: [...], hasNext}``)."""

    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)], None
    if isinstance(payload, dict):
        items = payload.get(key)
        if items is None:
            items = payload.get("content", [])
        has_next = payload.get("hasNext")
        return (
            [item for item in items or [] if isinstance(item, dict)],
            None if has_next is None else bool(has_next),
        )
    return [], False
