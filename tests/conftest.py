"""Global pytest fixtures & helpers.

Adds project root to path and provides a fake HTTP session so client tests
never touch the network.
"""
from __future__ import annotations

import os
import sys
from typing import Any, Dict, List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from trailwalk.api_client import ResourceAPI
from trailwalk.models import GeoPoint


class FakeResp:
    def __init__(
        self,
        status_code: int = 200,
        json_data: Any = None,
        headers: Optional[Dict[str, str]] = None,
        text: str = "",
    ) -> None:
        self.status_code = status_code
        self._json = json_data
        self.headers = headers if headers is not None else {"Content-Type": "application/json"}
        self.text = text
        if json_data is not None:
            self.content = b"{}"
        else:
            self.content = text.encode("utf-8")
        self.url = "http://test/api"

    def json(self):
        if self._json is None:
            raise ValueError("No JSON")
        return self._json


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, responses: List[Any]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self._responses:
            raise AssertionError(f"Unexpected request {method} {url}")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class NoopLimiter:
    def __init__(self) -> None:
        self.statuses: List[Optional[int]] = []
        self.resized_to: Optional[int] = None

    def before_request(self) -> None:
        return None

    def after_response(self, headers, status_code) -> None:
        self.statuses.append(status_code)

    def resize(self, new_max: int) -> None:
        self.resized_to = new_max


def make_resources(responses: List[Any], token: str = "tok-1234"):
    session = FakeSession(responses)
    limiter = NoopLimiter()
    resources = ResourceAPI(
        session=session,
        limiter=limiter,
        token=token,
        base_url="http://test/api",
        timeout=5,
    )
    return resources, session, limiter


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff sleeps instead of waiting."""
    sleeps: List[float] = []
    monkeypatch.setattr(
        "trailwalk.api_client.resources.time.sleep", lambda s: sleeps.append(s)
    )
    return sleeps


@pytest.fixture
def straight_path():
    """Three fixes ~1 km apart heading north."""
    return [
        GeoPoint(37.0, 127.0),
        GeoPoint(37.008993, 127.0),
        GeoPoint(37.017986, 127.0),
    ]
