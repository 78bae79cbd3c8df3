"""Central configuration for the trailwalk client.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_choice(key: str, default: str, choices: set[str]) -> str:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in choices:
        return normalized
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Backend settings
# ---------------------------------------------------------------------------
# Base URL of the walkway REST backend (no trailing slash).
WALKWAY_API_BASE_URL = os.getenv(
    "WALKWAY_API_BASE_URL", "http://localhost:8080/api"
).rstrip("/")

# Bearer token for the signed-in user. Do not hardcode secrets.
WALKWAY_ACCESS_TOKEN = os.getenv("WALKWAY_ACCESS_TOKEN", "")


# ---------------------------------------------------------------------------
# HTTP tuning
# ---------------------------------------------------------------------------
# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = _env_int("HTTP_POOL_CONNECTIONS", 10)
HTTP_POOL_MAXSIZE = _env_int("HTTP_POOL_MAXSIZE", 10)

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)

# Rate limiter settings.
# RATE_LIMIT_MAX_CONCURRENT caps total in-flight requests.
RATE_LIMIT_MAX_CONCURRENT = _env_int("RATE_LIMIT_MAX_CONCURRENT", 4)
# RATE_LIMIT_JITTER_RANGE adds random delay (seconds) to smooth bursts.
RATE_LIMIT_JITTER_RANGE = (0.0, 0.05)
# RATE_LIMIT_THROTTLE_SECONDS is the pause applied on 429s without Retry-After.
RATE_LIMIT_THROTTLE_SECONDS = _env_float("RATE_LIMIT_THROTTLE_SECONDS", 5.0)
# Upper bound for a server supplied Retry-After value.
RATE_LIMIT_MAX_THROTTLE_SECONDS = _env_float("RATE_LIMIT_MAX_THROTTLE_SECONDS", 60.0)

# Retry/backoff behaviour for request loops.
# WALKWAY_MAX_RETRIES covers network failures, 5xx, or bad payloads.
WALKWAY_MAX_RETRIES = _env_int("WALKWAY_MAX_RETRIES", 3)
# WALKWAY_BACKOFF_MAX_SECONDS caps the exponential backoff per attempt.
WALKWAY_BACKOFF_MAX_SECONDS = _env_float("WALKWAY_BACKOFF_MAX_SECONDS", 4.0)
# Maximum 429 retries before a request is abandoned.
WALKWAY_MAX_RATE_LIMIT_RETRIES = _env_int("WALKWAY_MAX_RATE_LIMIT_RETRIES", 5)


# ---------------------------------------------------------------------------
# Listing / caching
# ---------------------------------------------------------------------------
# Page size used by list endpoints when the caller does not pass one.
DEFAULT_PAGE_SIZE = _env_int("DEFAULT_PAGE_SIZE", 10)

# Page size of the "my walkways" preview shown on the profile page.
PREVIEW_PAGE_SIZE = 3

# Walkway detail responses kept in memory (TTL + LRU).
WALKWAY_DETAIL_CACHE_SIZE = _env_int("WALKWAY_DETAIL_CACHE_SIZE", 128)
WALKWAY_DETAIL_CACHE_TTL_SECONDS = _env_int("WALKWAY_DETAIL_CACHE_TTL_SECONDS", 300)


# ---------------------------------------------------------------------------
# Distance tracking
# ---------------------------------------------------------------------------
# Mean Earth radius used by the haversine formula.
EARTH_RADIUS_KM = 6371.0

# Steps whose latitude/longitude delta (radians) is not below this threshold
# are treated as GPS jumps by the noise gate.
NOISE_GATE_THRESHOLD_RAD = _env_float("NOISE_GATE_THRESHOLD_RAD", 0.01)

# "or": a step passes when either axis delta is under the threshold.
# "and": a step passes only when both axis deltas are under the threshold.
NOISE_GATE_MODE = _env_choice("NOISE_GATE_MODE", "or", {"or", "and"})

# "meters": round each step to whole meters.
# "centimeters": keep each step as a float with two decimals.
DISTANCE_ROUNDING = _env_choice(
    "DISTANCE_ROUNDING", "meters", {"meters", "centimeters"}
)
