"""Central error types used across the application."""

from __future__ import annotations


class FixFormatError(RuntimeError):
    """Raised when a recorded fix file is missing columns or cannot be parsed."""


class TrackingSessionClosedError(RuntimeError):
    """Raised when a fix is added to a session that has already finished."""


class WalkwayAPIError(RuntimeError):
    """Base error for walkway backend failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WalkwayValidationError(WalkwayAPIError):
    """Raised when the backend rejects the request payload (HTTP 400/422)."""


class WalkwayPermissionError(WalkwayAPIError):
    """Raised when the access token is missing, expired, or lacks rights."""


class WalkwayNotFoundError(WalkwayAPIError):
    """Raised when a walkway, review, or bookmark does not exist."""


__all__ = [
    "FixFormatError",
    "TrackingSessionClosedError",
    "WalkwayAPIError",
    "WalkwayValidationError",
    "WalkwayPermissionError",
    "WalkwayNotFoundError",
]
