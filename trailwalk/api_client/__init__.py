"""Modular walkway backend client components (session, rate limiter, resource APIs)."""

from .bookmarks import BookmarkAPI  # noqa: F401
from .rate_limiter import RateLimiter  # noqa: F401
from .resources import ResourceAPI  # noqa: F401
from .reviews import ReviewAPI  # noqa: F401
from .session import create_default_session, get_default_session  # noqa: F401
from .walkways import WalkwayAPI  # noqa: F401
