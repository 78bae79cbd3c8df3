"""Walked-distance helpers for live trail tracking.

``compute_incremental_distance`` is called once per new GPS fix with the whole
path recorded so far and returns the haversine distance of the newest step
(second-to-last fix to last fix). Steps that look like GPS jumps are dropped
by a per-axis noise gate and malformed input degrades to ``0`` so a single bad
fix never interrupts a session.

Gate semantics: the latitude and longitude deltas are compared *signed*
against the threshold. With ``NoiseGate.ANY_AXIS`` (the default) a step is
kept when either delta is below the threshold, so large moves along a single
axis still count while large diagonal jumps are dropped. ``NoiseGate.BOTH_AXES``
keeps a step only when both deltas are below the threshold.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from . import config
from .models import GeoPoint, NoiseGate, RoundingPolicy

LOGGER = logging.getLogger(__name__)

PointLike = Union[GeoPoint, Mapping[str, Any], Sequence[float]]
FloatArray = NDArray[np.float64]

_INPUT_ERRORS = (TypeError, ValueError, KeyError, IndexError, AttributeError)

__all__ = [
    "PointLike",
    "compute_incremental_distance",
    "haversine_m",
    "passes_noise_gate",
    "path_distance",
    "resolve_gate",
    "resolve_rounding",
    "round_distance",
    "step_distances",
    "to_geo_point",
]


def resolve_gate(gate: NoiseGate | str | None) -> NoiseGate:
    """Return the gate to use, falling back to ``NOISE_GATE_MODE``."""

    if gate is None:
        return NoiseGate(config.NOISE_GATE_MODE)
    return NoiseGate(gate)


def resolve_rounding(rounding: RoundingPolicy | str | None) -> RoundingPolicy:
    if rounding is None:
        return RoundingPolicy(config.DISTANCE_ROUNDING)
    return RoundingPolicy(rounding)


def _coords(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, GeoPoint):
        lat, lng = point.lat, point.lng
    elif isinstance(point, Mapping):
        lat, lng = point["lat"], point["lng"]
    else:
        lat, lng = point[0], point[1]
    lat_f = float(lat)
    lng_f = float(lng)
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        raise ValueError(f"non-finite coordinate lat={lat!r} lng={lng!r}")
    return lat_f, lng_f


def to_geo_point(point: PointLike) -> GeoPoint:
    """Normalise a point-like value to ``GeoPoint`` (raises on bad input)."""

    if isinstance(point, GeoPoint):
        return point
    lat, lng = _coords(point)
    return GeoPoint(lat=lat, lng=lng)


def passes_noise_gate(
    d_lat: float,
    d_lng: float,
    gate: NoiseGate = NoiseGate.ANY_AXIS,
    threshold_rad: float | None = None,
) -> bool:
    """Return True when a step with these radian deltas should be measured."""

    threshold = config.NOISE_GATE_THRESHOLD_RAD if threshold_rad is None else threshold_rad
    if gate is NoiseGate.BOTH_AXES:
        return d_lat < threshold and d_lng < threshold
    return d_lat < threshold or d_lng < threshold


def haversine_m(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
    radius_km: float | None = None,
) -> float:
    """Great-circle distance in meters between two points given in degrees."""

    radius = config.EARTH_RADIUS_KM if radius_km is None else radius_km
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2.0) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2.0) ** 2
    )
    # Float error can push `a` just outside [0, 1] near antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return radius * c * 1000.0


def round_distance(meters: float, rounding: RoundingPolicy | str | None = None) -> float:
    """Apply the step rounding policy (half-up to whole meters by default)."""

    policy = resolve_rounding(rounding)
    if policy is RoundingPolicy.CENTIMETERS:
        return round(meters, 2)
    return float(math.floor(meters + 0.5))


def compute_incremental_distance(
    path: Sequence[PointLike] | None,
    *,
    gate: NoiseGate | str | None = None,
    rounding: RoundingPolicy | str | None = None,
    threshold_rad: float | None = None,
    radius_km: float | None = None,
) -> float:
    """Distance in meters of the most recent step of ``path``.

    Args:
        path: Fixes recorded so far, oldest first. Only the last two are used.
        gate: Noise gate mode; defaults to ``config.NOISE_GATE_MODE``.
        rounding: Step rounding policy; defaults to ``config.DISTANCE_ROUNDING``.
        threshold_rad: Per-axis gate threshold in radians.
        radius_km: Sphere radius for the haversine formula.

    Returns:
        The rounded step distance, or ``0.0`` when the path has fewer than two
        fixes, the step is rejected by the noise gate, or the fixes are
        malformed. Never raises for bad path contents.
    """

    gate_mode = resolve_gate(gate)
    policy = resolve_rounding(rounding)
    try:
        if path is None or len(path) < 2:
            return 0.0
        lat1, lng1 = _coords(path[-2])
        lat2, lng2 = _coords(path[-1])
    except _INPUT_ERRORS as exc:
        LOGGER.debug("Ignoring malformed fix in path: %s", exc)
        return 0.0

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    if not passes_noise_gate(d_lat, d_lng, gate_mode, threshold_rad):
        LOGGER.debug(
            "Noise gate (%s) dropped step d_lat=%.5f d_lng=%.5f rad",
            gate_mode.value,
            d_lat,
            d_lng,
        )
        return 0.0

    meters = haversine_m(lat1, lng1, lat2, lng2, radius_km)
    if not math.isfinite(meters):
        return 0.0
    return round_distance(meters, policy)


def _coords_array(path: Iterable[PointLike]) -> FloatArray:
    rows = []
    for point in path:
        try:
            rows.append(_coords(point))
        except _INPUT_ERRORS:
            rows.append((math.nan, math.nan))
    if not rows:
        return np.empty((0, 2), dtype=np.float64)
    return np.asarray(rows, dtype=np.float64)


def _round_steps(meters: FloatArray, policy: RoundingPolicy) -> FloatArray:
    if policy is RoundingPolicy.CENTIMETERS:
        # np.round scales by 100 first and can land a cent away from round()
        return np.fromiter(
            (round(float(m), 2) for m in meters), dtype=np.float64, count=meters.size
        )
    return np.floor(meters + 0.5)


def step_distances(
    path: Iterable[PointLike],
    *,
    gate: NoiseGate | str | None = None,
    rounding: RoundingPolicy | str | None = None,
    threshold_rad: float | None = None,
    radius_km: float | None = None,
) -> FloatArray:
    """Vectorised per-step distances for a whole path.

    Element ``i`` equals ``compute_incremental_distance(path[: i + 2])``, with the
    same per-step rounding; a malformed fix zeroes both steps that touch it.
    """

    gate_mode = resolve_gate(gate)
    policy = resolve_rounding(rounding)
    threshold = config.NOISE_GATE_THRESHOLD_RAD if threshold_rad is None else threshold_rad
    radius = config.EARTH_RADIUS_KM if radius_km is None else radius_km

    coords = _coords_array(path)
    if coords.shape[0] < 2:
        return np.zeros(0, dtype=np.float64)

    lat = np.radians(coords[:, 0])
    d_lat = np.radians(np.diff(coords[:, 0]))
    d_lng = np.radians(np.diff(coords[:, 1]))
    with np.errstate(invalid="ignore"):
        if gate_mode is NoiseGate.BOTH_AXES:
            keep = (d_lat < threshold) & (d_lng < threshold)
        else:
            keep = (d_lat < threshold) | (d_lng < threshold)
        a = (
            np.sin(d_lat / 2.0) ** 2
            + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(d_lng / 2.0) ** 2
        )
        a = np.clip(a, 0.0, 1.0)
        meters = radius * 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a)) * 1000.0
        meters = _round_steps(meters, policy)
    keep &= np.isfinite(meters)
    return np.where(keep, meters, 0.0)


def path_distance(
    path: Iterable[PointLike],
    *,
    gate: NoiseGate | str | None = None,
    rounding: RoundingPolicy | str | None = None,
    threshold_rad: float | None = None,
    radius_km: float | None = None,
) -> float:
    """Total walked distance in meters of a recorded path."""

    steps = step_distances(
        path,
        gate=gate,
        rounding=rounding,
        threshold_rad=threshold_rad,
        radius_km=radius_km,
    )
    return float(steps.sum())
