"""Live walking-session tracking.

A ``TrackingSession`` owns the append-only path of one walk and the running
distance total. Each new fix is measured with
:func:`trailwalk.distance.compute_incremental_distance` and added to the
total; when the walk ends the session yields the ``{time, distance}`` payload
submitted as a walkway history record.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from .distance import (
    PointLike,
    compute_incremental_distance,
    resolve_gate,
    resolve_rounding,
    to_geo_point,
)
from .errors import TrackingSessionClosedError
from .models import GeoPoint, NoiseGate, RoundingPolicy

LOGGER = logging.getLogger(__name__)


class TrackingSession:
    """Accumulates walked distance from periodically sampled fixes."""

    def __init__(
        self,
        walkway_id: int | None = None,
        *,
        gate: NoiseGate | str | None = None,
        rounding: RoundingPolicy | str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.walkway_id = walkway_id
        self.gate = resolve_gate(gate)
        self.rounding = resolve_rounding(rounding)
        self._clock = clock
        self._lock = threading.Lock()
        self._path: List[GeoPoint] = []
        self._total_m = 0.0
        self._dropped_fixes = 0
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None

    # --- Lifecycle ------------------------------------------------------
    def start(self) -> None:
        """Start the clock explicitly (otherwise the first fix starts it)."""

        with self._lock:
            if self._finished_at is not None:
                raise TrackingSessionClosedError("Session already finished")
            if self._started_at is None:
                self._started_at = self._clock()

    def add_fix(self, point: PointLike) -> float:
        """Record a fix and return the distance (meters) it added to the total.

        Malformed fixes are not appended and add nothing.
        """

        with self._lock:
            if self._finished_at is not None:
                raise TrackingSessionClosedError(
                    f"Cannot add fix to finished session walkway={self.walkway_id}"
                )
            if self._started_at is None:
                self._started_at = self._clock()
            try:
                fix = to_geo_point(point)
            except (TypeError, ValueError, KeyError, IndexError) as exc:
                self._dropped_fixes += 1
                LOGGER.warning("Dropping malformed fix %r: %s", point, exc)
                return 0.0
            self._path.append(fix)
            increment = compute_incremental_distance(
                self._path, gate=self.gate, rounding=self.rounding
            )
            self._total_m += increment
            return increment

    def finish(self) -> Dict[str, float | int]:
        """Close the session and return its history payload."""

        with self._lock:
            if self._finished_at is None:
                self._finished_at = self._clock()
                if self._started_at is None:
                    self._started_at = self._finished_at
            fix_count = len(self._path)
        payload = self.history_payload()
        LOGGER.info(
            "Tracking session finished walkway=%s fixes=%d distance=%sm time=%ss",
            self.walkway_id,
            fix_count,
            payload["distance"],
            payload["time"],
        )
        return payload

    # --- Read access ----------------------------------------------------
    @property
    def started(self) -> bool:
        return self._started_at is not None

    @property
    def finished(self) -> bool:
        return self._finished_at is not None

    @property
    def total_distance_m(self) -> float:
        with self._lock:
            return self._total_m

    @property
    def points(self) -> Tuple[GeoPoint, ...]:
        with self._lock:
            return tuple(self._path)

    @property
    def dropped_fixes(self) -> int:
        with self._lock:
            return self._dropped_fixes

    @property
    def elapsed_seconds(self) -> float:
        with self._lock:
            if self._started_at is None:
                return 0.0
            end = self._finished_at if self._finished_at is not None else self._clock()
            return max(0.0, end - self._started_at)

    def history_payload(self) -> Dict[str, float | int]:
        """``{"time": seconds, "distance": meters}`` for the history endpoint."""

        total = self.total_distance_m
        if self.rounding is RoundingPolicy.CENTIMETERS:
            distance: float | int = round(total, 2)
        else:
            distance = int(total)
        return {"time": int(self.elapsed_seconds), "distance": distance}
