"""Shared client helpers (auth headers, URL building)."""

from __future__ import annotations

from typing import Dict

from .. import config
from ..utils import mask_tail


def resolve_token(token: str | None) -> str:
    """Return the explicit token or the configured ``WALKWAY_ACCESS_TOKEN``."""

    return token if token is not None else config.WALKWAY_ACCESS_TOKEN


def auth_headers(token: str | None) -> Dict[str, str]:
    """Return bearer auth headers; empty when no token is configured."""

    resolved = resolve_token(token)
    if not resolved:
        return {}
    return {"Authorization": f"Bearer {resolved}"}


def describe_token(token: str | None) -> str:
    """Safe token description for log lines."""

    resolved = resolve_token(token)
    return mask_tail(resolved) if resolved else "<anonymous>"


def build_url(path: str, base_url: str | None = None) -> str:
    base = (base_url if base_url is not None else config.WALKWAY_API_BASE_URL).rstrip("/")
    return f"{base}/{path.lstrip('/')}"
