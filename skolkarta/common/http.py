"""HTTP client with bounded retries and linear backoff."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt

from skolkarta.common.constants import ACCEPT_HEADER, USER_AGENT
from skolkarta.common.errors import StageError
from skolkarta.common.logging import get_logger, log_event

DEFAULT_POOL_MAXSIZE = 10
NOT_FOUND_STATUS = 404
RATE_LIMIT_STATUS = 429


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 10.0
    read: float = 30.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    # Seconds per attempt number: attempt 1 waits 1x, attempt 2 waits 2x.
    rate_limit_wait: float = 2.0
    error_wait: float = 1.0


class HttpRequestError(StageError):
    error_code = "HTTP_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryableHttpError(HttpRequestError):
    pass


class RateLimitedError(RetryableHttpError):
    error_code = "HTTP_RATE_LIMITED"


class NotFoundError(HttpRequestError):
    """The resource is legitimately absent; never retried."""

    error_code = "HTTP_NOT_FOUND"


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        accept_header: str = ACCEPT_HEADER,
        logger: logging.Logger | None = None,
        pool_maxsize: int = DEFAULT_POOL_MAXSIZE,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.accept_header = accept_header
        self.logger = logger or get_logger()
        self.session = requests.Session()
        # One host; the pool must hold a connection per concurrent worker.
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_maxsize)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": self.accept_header}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status(self, url: str, response: requests.Response) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return
        if status == NOT_FOUND_STATUS:
            raise NotFoundError(f"Not found: {url}", status_code=status)
        if status == RATE_LIMIT_STATUS:
            raise RateLimitedError(f"Rate limited: {url}", status_code=status)
        raise RetryableHttpError(f"HTTP status {status} for {url}", status_code=status)

    def _backoff(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        attempt = retry_state.attempt_number
        if isinstance(exc, RateLimitedError):
            return self.retry.rate_limit_wait * attempt
        return self.retry.error_wait * attempt

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        log_event(
            self.logger,
            f"retrying after {exc}",
            level=logging.WARNING,
            event="RETRY",
            status="retry",
            attempt=retry_state.attempt_number,
            error_code=getattr(exc, "error_code", None),
        )

    def _request_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> dict[str, Any]:
        req_timeout = timeout or self.timeout
        try:
            response = self.session.request(
                method="GET",
                url=url,
                params=params,
                headers=self._headers(headers),
                timeout=(req_timeout.connect, req_timeout.read),
            )
        except requests.RequestException as exc:
            raise RetryableHttpError(f"Transport error for {url}: {exc}") from exc

        self._raise_for_status(url, response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise HttpRequestError(f"Invalid JSON payload from {url}") from exc

        if not isinstance(payload, dict):
            raise HttpRequestError(f"Unexpected JSON payload type from {url}")
        return payload

    def get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> dict[str, Any]:
        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=self._backoff,
            retry=retry_if_exception_type(RetryableHttpError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        def _wrapped() -> dict[str, Any]:
            return self._request_json(url, params=params, headers=headers, timeout=timeout)

        return _wrapped()
