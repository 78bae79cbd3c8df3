"""Pooled HTTP session used by every walkway backend call."""

from __future__ import annotations

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import HTTP_POOL_CONNECTIONS, HTTP_POOL_MAXSIZE

__all__ = ["create_default_session", "get_default_session"]

USER_AGENT = "trailwalk/0.1"


def _build_retry() -> Retry:
    # Connect failures only; status codes go through ResourceAPI so that
    # 429 handling stays in step with the RateLimiter.
    return Retry(
        total=3,
        connect=3,
        read=0,
        status=0,
        backoff_factor=0.5,
        allowed_methods=["GET", "PUT", "DELETE"],
    )


def create_default_session(
    pool_connections: int = HTTP_POOL_CONNECTIONS,
    pool_maxsize: int = HTTP_POOL_MAXSIZE,
) -> Session:
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=_build_retry(),
    )
    for scheme in ("https://", "http://"):
        session.mount(scheme, adapter)
    session.headers.update(
        {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "User-Agent": USER_AGENT,
        }
    )
    return session


_DEFAULT_SESSION = create_default_session()


def get_default_session() -> Session:
    """Return the shared walkway backend session."""

    return _DEFAULT_SESSION
