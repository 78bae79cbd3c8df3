"""General utility helpers shared across modules."""

from __future__ import annotations

import math
from typing import Any


def format_duration(seconds: float) -> str:
    """Format seconds into a ``H:MM:SS`` (or ``MM:SS``) string."""

    total = max(0, int(seconds))
    hours, rem = divmod(total, 3600)
    mins, sec = divmod(rem, 60)
    if hours:
        return f"{hours}:{mins:02d}:{sec:02d}"
    return f"{mins:02d}:{sec:02d}"


def mask_tail(value: str | None, visible: int = 4) -> str:
    if not value:
        return ""
    tail = value[-visible:]
    return f"****{tail}" if len(value) > visible else "****" + tail


def as_int(value: Any) -> int | None:
    """Coerce JSON scalars to ``int``; ``None`` when absent or invalid."""

    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def drop_none(params: dict[str, Any]) -> dict[str, Any]:
    """Return query params without ``None`` values."""

    return {key: value for key, value in params.items() if value is not None}
