"""Data models for GPS fixes and walkway backend payloads.

Backend payloads use camelCase keys. The ``from_payload`` constructors are
lenient: unknown keys are ignored, missing keys become ``None`` and the raw
mapping is kept for callers that need fields not modelled here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .utils import as_float, as_int, as_str

JSONObj = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A single recorded location fix in decimal degrees."""

    lat: float
    lng: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


class NoiseGate(str, Enum):
    """How the per-axis threshold check combines latitude and longitude."""

    ANY_AXIS = "or"
    BOTH_AXES = "and"


class RoundingPolicy(str, Enum):
    """Precision applied to each step distance."""

    METERS = "meters"
    CENTIMETERS = "centimeters"


@dataclass
class WalkwaySearchParams:
    latitude: float
    longitude: float
    distance: float | None = None
    sort: str | None = None
    last_id: int | None = None
    size: int | None = None

    def to_query(self, default_size: int) -> JSONObj:
        return {
            "sort": self.sort,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "distance": self.distance,
            "lastId": self.last_id,
            "size": self.size or default_size,
        }


@dataclass
class WalkwaySummary:
    walkway_id: int | None
    name: str | None
    distance: float | None = None
    time: int | None = None
    rating: float | None = None
    like_count: int | None = None
    course_image_url: str | None = None
    raw: JSONObj = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: JSONObj) -> "WalkwaySummary":
        return cls(
            walkway_id=as_int(payload.get("walkwayId")),
            name=as_str(payload.get("name") or payload.get("walkwayName")),
            distance=as_float(payload.get("distance")),
            time=as_int(payload.get("time")),
            rating=as_float(payload.get("rating")),
            like_count=as_int(payload.get("likeCount") or payload.get("likes")),
            course_image_url=as_str(payload.get("courseImageUrl")),
            raw=dict(payload),
        )


@dataclass
class WalkwayPage:
    """One cursor page of walkways."""

    walkways: List[WalkwaySummary]
    has_next: Optional[bool] = None

    @property
    def last_id(self) -> Optional[int]:
        for walkway in reversed(self.walkways):
            if walkway.walkway_id is not None:
                return walkway.walkway_id
        return None

    @classmethod
    def from_payload(cls, payload: Any) -> "WalkwayPage":
        if isinstance(payload, list):
            items, has_next = payload, None
        elif isinstance(payload, dict):
            items = payload.get("walkways")
            if items is None:
                items = payload.get("content", [])
            has_next = payload.get("hasNext")
        else:
            items, has_next = [], False
        walkways = [
            WalkwaySummary.from_payload(item)
            for item in items or []
            if isinstance(item, dict)
        ]
        return cls(
            walkways=walkways,
            has_next=None if has_next is None else bool(has_next),
        )


@dataclass
class WalkwayDetail:
    walkway_id: int | None
    name: str | None
    memo: str | None = None
    distance: float | None = None
    time: int | None = None
    rating: float | None = None
    review_count: int | None = None
    like_count: int | None = None
    liked: bool = False
    hashtags: List[str] = field(default_factory=list)
    course_image_url: str | None = None
    raw: JSONObj = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: JSONObj) -> "WalkwayDetail":
        hashtags = payload.get("hashtags") or []
        return cls(
            walkway_id=as_int(payload.get("walkwayId")),
            name=as_str(payload.get("name")),
            memo=as_str(payload.get("memo")),
            distance=as_float(payload.get("distance")),
            time=as_int(payload.get("time")),
            rating=as_float(payload.get("rating")),
            review_count=as_int(payload.get("reviewCount")),
            like_count=as_int(payload.get("likeCount") or payload.get("likes")),
            liked=bool(payload.get("isLike") or payload.get("liked")),
            hashtags=[str(tag).lstrip("#") for tag in hashtags if tag],
            course_image_url=as_str(payload.get("courseImageUrl")),
            raw=dict(payload),
        )


@dataclass
class WalkwayHistoryResult:
    """Response of a history submission.

    The history id is always returned; ``can_review`` tells whether the user
    may write a review for this walk.
    """

    walkway_history_id: int | None
    can_review: bool = False

    @classmethod
    def from_payload(cls, payload: JSONObj) -> "WalkwayHistoryResult":
        return cls(
            walkway_history_id=as_int(payload.get("walkwayHistoryId")),
            can_review=bool(payload.get("canReview")),
        )


@dataclass
class WalkwayHistoryRecord:
    walkway_id: int | None
    date: str | None
    distance: float | None
    time: int | None = None
    walkway_history_id: int | None = None
    course_image_url: str | None = None

    @classmethod
    def from_payload(cls, payload: JSONObj) -> "WalkwayHistoryRecord":
        return cls(
            walkway_id=as_int(payload.get("walkwayId")),
            date=as_str(payload.get("date")),
            distance=as_float(payload.get("distance")),
            time=as_int(payload.get("time")),
            walkway_history_id=as_int(payload.get("walkwayHistoryId")),
            course_image_url=as_str(payload.get("courseImageUrl")),
        )


@dataclass
class UserReview:
    review_id: int | None
    walkway_id: int | None
    walkway_name: str | None
    date: str | None
    rating: float | None
    content: str | None

    @classmethod
    def from_payload(cls, payload: JSONObj) -> "UserReview":
        return cls(
            review_id=as_int(payload.get("reviewId")),
            walkway_id=as_int(payload.get("walkwayId")),
            walkway_name=as_str(payload.get("walkwayName")),
            date=as_str(payload.get("date")),
            rating=as_float(payload.get("rating")),
            content=as_str(payload.get("content")),
        )


@dataclass
class ReviewRating:
    rating: float
    review_count: int
    five: int = 0
    four: int = 0
    three: int = 0
    two: int = 0
    one: int = 0

    @classmethod
    def from_payload(cls, payload: JSONObj) -> "ReviewRating":
        return cls(
            rating=as_float(payload.get("rating")) or 0.0,
            review_count=as_int(payload.get("reviewCount")) or 0,
            five=as_int(payload.get("five")) or 0,
            four=as_int(payload.get("four")) or 0,
            three=as_int(payload.get("three")) or 0,
            two=as_int(payload.get("two")) or 0,
            one=as_int(payload.get("one")) or 0,
        )


@dataclass
class ReviewContent:
    review_id: int | None
    nickname: str | None
    date: str | None
    period: str | None
    rating: float | None
    content: str | None

    @classmethod
    def from_payload(cls, payload: JSONObj) -> "ReviewContent":
        return cls(
            review_id=as_int(payload.get("reviewId")),
            nickname=as_str(payload.get("nickname")),
            date=as_str(payload.get("date")),
            period=as_str(payload.get("period")),
            rating=as_float(payload.get("rating")),
            content=as_str(payload.get("content")),
        )


@dataclass
class Bookmark:
    bookmark_id: int | None
    name: str | None
    walkway_count: int | None = None

    @classmethod
    def from_payload(cls, payload: JSONObj) -> "Bookmark":
        return cls(
            bookmark_id=as_int(payload.get("bookmarkId")),
            name=as_str(payload.get("name")),
            walkway_count=as_int(payload.get("walkwayCount")),
        )
