"""Loading recorded GPS fixes from CSV or JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

import pandas as pd

from .errors import FixFormatError
from .models import GeoPoint

LOGGER = logging.getLogger(__name__)

_LAT_ALIASES = ("lat", "latitude")
_LNG_ALIASES = ("lng", "lon", "longitude")


def _pick_column(columns: List[str], aliases: tuple[str, ...]) -> str | None:
    lowered = {str(col).strip().lower(): col for col in columns}
    for alias in aliases:
        if alias in lowered:
            return lowered[alias]
    return None


def _frame_to_points(df: pd.DataFrame, source: str) -> List[GeoPoint]:
    lat_col = _pick_column(list(df.columns), _LAT_ALIASES)
    lng_col = _pick_column(list(df.columns), _LNG_ALIASES)
    if lat_col is None or lng_col is None:
        raise FixFormatError(
            f"{source}: expected latitude/longitude columns "
            f"(one of {_LAT_ALIASES} and one of {_LNG_ALIASES}), got {list(df.columns)}"
        )
    lat = pd.to_numeric(df[lat_col], errors="coerce")
    lng = pd.to_numeric(df[lng_col], errors="coerce")
    valid = lat.notna() & lng.notna()
    skipped = int((~valid).sum())
    if skipped:
        LOGGER.warning("%s: skipped %d rows with blank or invalid coordinates", source, skipped)
    return [
        GeoPoint(lat=float(la), lng=float(ln))
        for la, ln in zip(lat[valid], lng[valid])
    ]


def _load_json(path: Path) -> pd.DataFrame:
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise FixFormatError(f"{path}: invalid JSON ({exc})") from exc
    if isinstance(payload, dict):
        payload = payload.get("path", payload.get("points"))
    if not isinstance(payload, list):
        raise FixFormatError(f"{path}: expected a list of {{lat, lng}} objects")
    rows = [item for item in payload if isinstance(item, dict)]
    if not rows:
        return pd.DataFrame(columns=["lat", "lng"])
    return pd.DataFrame(rows)


def load_fixes(path: str | Path) -> List[GeoPoint]:
    """Read fixes in recording order from a ``.csv`` or ``.json`` file.

    Raises:
        FixFormatError: Unsupported extension, unreadable file, or missing
            coordinate columns.
        FileNotFoundError: The file does not exist.
    """

    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(str(file_path))
    suffix = file_path.suffix.lower()
    if suffix == ".csv":
        try:
            df = pd.read_csv(file_path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            raise FixFormatError(f"{file_path}: unreadable CSV ({exc})") from exc
    elif suffix == ".json":
        df = _load_json(file_path)
    else:
        raise FixFormatError(
            f"{file_path}: unsupported fix file type '{suffix}' (use .csv or .json)"
        )
    points = _frame_to_points(df, str(file_path))
    LOGGER.info("Loaded %d fixes from %s", len(points), file_path)
    return points
