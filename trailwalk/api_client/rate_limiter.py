"""Client-side request pacing for the walkway backend.

The backend answers bursts with 429 and an optional ``Retry-After``; the
limiter caps in-flight requests and pauses every caller until the throttle
window has passed.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Mapping

from ..config import (
    RATE_LIMIT_JITTER_RANGE,
    RATE_LIMIT_MAX_CONCURRENT,
    RATE_LIMIT_MAX_THROTTLE_SECONDS,
    RATE_LIMIT_THROTTLE_SECONDS,
)

LOGGER = logging.getLogger(__name__)

__all__ = ["RateLimiter", "retry_after_seconds"]


def retry_after_seconds(
    headers: Mapping[str, object] | None,
    default: float = RATE_LIMIT_THROTTLE_SECONDS,
) -> float:
    """Seconds to wait from a ``Retry-After`` header (delta-seconds form)."""

    if not headers:
        return default
    raw = headers.get("Retry-After")
    if raw is None:
        return default
    try:
        seconds = float(str(raw).strip())
    except ValueError:
        LOGGER.debug("Unparseable Retry-After header %r; using %ss", raw, default)
        return default
    return min(max(0.0, seconds), RATE_LIMIT_MAX_THROTTLE_SECONDS)


class RateLimiter:
    """Caps concurrent backend calls and honours server throttling."""

    def __init__(
        self,
        max_concurrent: int = RATE_LIMIT_MAX_CONCURRENT,
        jitter_range: tuple[float, float] = RATE_LIMIT_JITTER_RANGE,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._lock = threading.Lock()
        self._slots_free = threading.Condition(self._lock)
        self._limit = max_concurrent
        self._active = 0
        self._paused_until = 0.0
        self._jitter_range = jitter_range

    def resize(self, new_max: int) -> None:
        """Change the concurrency cap; waiting callers re-check immediately."""

        if new_max < 1:
            raise ValueError("new_max must be >= 1")
        with self._slots_free:
            previous, self._limit = self._limit, new_max
            self._slots_free.notify_all()
        LOGGER.info("RateLimiter resized from %s to %s", previous, new_max)

    def throttle(self, seconds: float) -> None:
        """Hold back new requests for ``seconds`` (never shortens a pause)."""

        with self._lock:
            self._paused_until = max(self._paused_until, time.time() + seconds)

    def _acquire(self) -> float:
        with self._slots_free:
            while self._active >= self._limit:
                self._slots_free.wait()
            self._active += 1
            return max(0.0, self._paused_until - time.time())

    def _release(self) -> None:
        with self._slots_free:
            self._active = max(0, self._active - 1)
            if self._active < self._limit:
                self._slots_free.notify()

    def before_request(self) -> None:
        pause = self._acquire()
        if pause > 0:
            LOGGER.debug("Throttled; sleeping %.2fs before request", pause)
            time.sleep(pause)
        low, high = self._jitter_range
        if high > 0:
            time.sleep(random.uniform(low, high))  # nosec B311

    def after_response(
        self, headers: Mapping[str, object] | None, status_code: int | None
    ) -> None:
        if status_code == 429:
            seconds = retry_after_seconds(headers)
            LOGGER.warning("Rate limit: 429. Throttling %ss.", seconds)
            self.throttle(seconds)
        self._release()

    def snapshot(self) -> dict[str, float | int]:
        """Return current limiter stats (used by tests and diagnostics)."""

        with self._lock:
            return {
                "max_allowed": self._limit,
                "in_flight": self._active,
                "throttle_until": self._paused_until,
            }
