"""Review endpoints: rating summary, review list, user reviews, review creation."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .. import config
from ..errors import WalkwayAPIError
from ..models import ReviewContent, ReviewRating, UserReview
from ..utils import as_int, drop_none
from .pagination import split_page
from .resources import ResourceAPI

LOGGER = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class ReviewAPI:
    def __init__(self, resources: ResourceAPI | None = None) -> None:
        self._resources = resources or ResourceAPI()

    def get_user_reviews(
        self, *, size: int | None = None, last_id: int | None = None
    ) -> Tuple[List[UserReview], Optional[bool]]:
        """Reviews written by the current user."""

        payload = self._resources.get(
            "/users/reviews",
            params=drop_none(
                {"size": size or config.DEFAULT_PAGE_SIZE, "lastId": last_id}
            ),
            context="User reviews",
            fallback="Failed to load your reviews.",
        )
        items, has_next = split_page(payload, "reviews")
        return [UserReview.from_payload(item) for item in items], has_next

    def get_review_rating(self, walkway_id: int) -> ReviewRating:
        """Average rating and the per-star distribution of a walkway."""

        payload = self._resources.get(
            f"/walkways/{walkway_id}/review/rating",
            context=f"Walkway {walkway_id} rating",
            fallback="Failed to load the review rating.",
        )
        if not isinstance(payload, dict):
            raise WalkwayAPIError(f"Walkway {walkway_id} rating: unexpected payload")
        return ReviewRating.from_payload(payload)

    def get_review_contents(
        self,
        walkway_id: int,
        *,
        sort: str | None = None,
        size: int | None = None,
        last_id: int | None = None,
    ) -> Tuple[List[ReviewContent], Optional[bool]]:
        payload = self._resources.get(
            f"/walkways/{walkway_id}/review/content",
            params=drop_none(
                {
                    "sort": sort,
                    "size": size or config.DEFAULT_PAGE_SIZE,
                    "lastId": last_id,
                }
            ),
            context=f"Walkway {walkway_id} reviews",
            fallback="Failed to load reviews.",
        )
        items, has_next = split_page(payload, "reviews")
        return [ReviewContent.from_payload(item) for item in items], has_next

    def create_review(
        self, walkway_id: int, history_id: int, *, rating: int, content: str
    ) -> Optional[int]:
        """Write a review for a recorded walk; returns the review id when sent back."""

        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
        if not content or not content.strip():
            raise ValueError("review content must not be empty")
        payload = self._resources.post(
            f"/walkways/{walkway_id}/histories/{history_id}/review",
            json_body={"rating": rating, "content": content.strip()},
            context=f"Walkway {walkway_id} review",
            fallback="Failed to write the review.",
        )
        review_id = as_int(payload.get("reviewId")) if isinstance(payload, dict) else as_int(payload)
        LOGGER.info(
            "Created review walkway=%s history=%s review=%s",
            walkway_id,
            history_id,
            review_id,
        )
        return review_id
