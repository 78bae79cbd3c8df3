"""Shared HTTP response helpers for walkway backend interactions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..errors import (
    WalkwayAPIError,
    WalkwayNotFoundError,
    WalkwayPermissionError,
    WalkwayValidationError,
)

__all__ = [
    "classify_response_status",
    "extract_error",
    "is_html_response",
]


def classify_response_status(
    response: requests.Response,
    context: str,
    *,
    fallback: str,
    attempt: int,
    backoff: float,
    can_retry: bool,
) -> Tuple[str, Optional[Exception]]:
    """Return action for a response status: ok, retry, or raise.

    The error message is the backend's ``message`` (plus field error codes)
    when present, otherwise ``fallback``.
    """

    status = response.status_code
    if status < 400:
        return "ok", None

    detail = extract_error(response)
    message = f"{context}: {detail or fallback} (status {status})"

    if 500 <= status < 600 and can_retry:
        logging.warning(
            "%s server error %s attempt=%s; retrying in %.1fs",
            context,
            status,
            attempt,
            backoff,
        )
        return "retry", None

    if status in (400, 422):
        logging.warning(message)
        return "raise", WalkwayValidationError(message, status)

    if status in (401, 403):
        logging.warning(message)
        return "raise", WalkwayPermissionError(message, status)

    if status == 404:
        logging.info(message)
        return "raise", WalkwayNotFoundError(message, status)

    logging.error(message)
    return "raise", WalkwayAPIError(message, status)


def is_html_response(response: requests.Response) -> bool:
    """True for proxy / maintenance pages served instead of JSON."""

    content_type = response.headers.get("Content-Type", "") if response.headers else ""
    return "text/html" in str(content_type).lower()


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return compact string with backend error info (message + codes) if present."""

    if resp is None:
        return None
    data = _safe_json(resp)
    if data is None:
        if is_html_response(resp):
            return None
        return _extract_error_text(resp)
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def _safe_json(resp: requests.Response) -> Optional[Any]:
    """Safely parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except ValueError as exc:
        logging.debug(
            "Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc
        )
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    """Build error snippets from the backend error response body."""

    parts: List[str] = []
    message = data.get("message")
    if message:
        parts.append(str(message))
    errors = data.get("errors")
    if isinstance(errors, list):
        for err in errors:
            if not isinstance(err, dict):
                continue
            field = err.get("field")
            code = err.get("code") or err.get("reason")
            if code and field:
                parts.append(f"{field}:{code}")
            elif code:
                parts.append(str(code))
    return parts
