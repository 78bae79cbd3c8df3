"""Walking-trail tracking and walkway backend client."""

from .main import main
from .models import GeoPoint, NoiseGate, RoundingPolicy
from .distance import compute_incremental_distance, path_distance
from .tracking import TrackingSession
from .errors import WalkwayAPIError, FixFormatError

__all__ = [
    "main",
    "GeoPoint",
    "NoiseGate",
    "RoundingPolicy",
    "compute_incremental_distance",
    "path_distance",
    "TrackingSession",
    "WalkwayAPIError",
    "FixFormatError",
]
