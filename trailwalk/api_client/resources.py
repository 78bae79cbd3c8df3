"""Generic JSON request loop with retries, throttling and error mapping."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Mapping, Optional

import requests

from .. import config
from ..errors import WalkwayAPIError
from .base import auth_headers, build_url, describe_token
from .rate_limiter import RateLimiter
from .response_handling import classify_response_status, is_html_response
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

# A POST that reached the server may have been applied; only these verbs are
# retried after network errors or 5xx responses.
_IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})


class ResourceAPI:
    """Encapsulates backend JSON requests with retries and rate limiting."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        limiter: RateLimiter | None = None,
        token: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self._session = session or get_default_session()
        self._limiter = limiter or RateLimiter()
        self._token = token
        self._base_url = base_url
        self._timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    def set_limiter(self, limiter: RateLimiter) -> None:
        self._limiter = limiter

    def url(self, path: str) -> str:
        return build_url(path, self._base_url)

    def request(
        self,
        method: str,
        path: str,
        *,
        context: str,
        fallback: str,
        params: Optional[Mapping[str, Any]] = None,
        json_body: Any = None,
        files: Optional[Dict[str, Any]] = None,
        expect_json: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns ``None`` when ``expect_json`` is False or the body is empty.

        Raises:
            WalkwayAPIError: (or a subclass) once retries are exhausted or the
                backend reports a client error.
        """

        method = method.upper()
        url = self.url(path)
        retryable = method in _IDEMPOTENT_METHODS
        backoff = 1.0
        attempt = 0
        rate_limit_retries = 0
        while True:
            attempt += 1
            can_retry = retryable and attempt < config.WALKWAY_MAX_RETRIES
            self._limiter.before_request()
            try:
                response = self._session.request(
                    method,
                    url,
                    headers=auth_headers(self._token),
                    params=params,
                    json=json_body,
                    files=files,
                    timeout=self._timeout,
                )
            except requests.RequestException as exc:
                self._limiter.after_response(None, None)
                if can_retry:
                    LOGGER.warning(
                        "%s network error attempt=%s err=%s; retrying in %.1fs",
                        context,
                        attempt,
                        exc.__class__.__name__,
                        backoff,
                    )
                    time.sleep(backoff)
                    backoff = min(backoff * 2, config.WALKWAY_BACKOFF_MAX_SECONDS)
                    continue
                message = f"{context}: {fallback} (network error {exc.__class__.__name__})"
                LOGGER.error(message)
                raise WalkwayAPIError(message) from exc
            else:
                self._limiter.after_response(response.headers, response.status_code)

            LOGGER.debug(
                "%s %s status=%s token=%s",
                method,
                url,
                response.status_code,
                describe_token(self._token),
            )

            # 429 means the request was refused, so every verb may retry.
            if response.status_code == 429:
                rate_limit_retries += 1
                if rate_limit_retries > config.WALKWAY_MAX_RATE_LIMIT_RETRIES:
                    message = f"{context}: {fallback} (rate limited)"
                    LOGGER.error(
                        "%s exceeded max 429 retries (%s); giving up",
                        context,
                        config.WALKWAY_MAX_RATE_LIMIT_RETRIES,
                    )
                    raise WalkwayAPIError(message, 429)
                continue

            action, error = classify_response_status(
                response,
                context,
                fallback=fallback,
                attempt=attempt,
                backoff=backoff,
                can_retry=can_retry,
            )
            if action == "retry":
                time.sleep(backoff)
                backoff = min(backoff * 2, config.WALKWAY_BACKOFF_MAX_SECONDS)
                continue
            if action == "raise" and error is not None:
                raise error

            if is_html_response(response):
                if can_retry:
                    LOGGER.warning(
                        "HTML downtime page for %s attempt=%s; retrying in %.1fs",
                        context,
                        attempt,
                        backoff,
                    )
                    time.sleep(backoff)
                    backoff = min(backoff * 2, config.WALKWAY_BACKOFF_MAX_SECONDS)
                    continue
                message = f"{context}: {fallback} (HTML response)"
                LOGGER.error(message)
                raise WalkwayAPIError(message, response.status_code)

            if not expect_json or response.status_code == 204 or not response.content:
                return None

            try:
                return response.json()
            except ValueError as exc:
                if can_retry:
                    LOGGER.warning(
                        "Non-JSON response for %s attempt=%s; retrying in %.1fs",
                        context,
                        attempt,
                        backoff,
                    )
                    time.sleep(backoff)
                    backoff = min(backoff * 2, config.WALKWAY_BACKOFF_MAX_SECONDS)
                    continue
                message = f"{context}: {fallback} (non-JSON payload)"
                LOGGER.error(message)
                raise WalkwayAPIError(message, response.status_code) from exc

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)
