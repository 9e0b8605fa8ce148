"""HTTP GET with response caching, linear retry backoff and failure classification."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Type, Union

import requests
from pydantic import BaseModel, ValidationError

from weathercli.data_sources.response_cache import ResponseCache
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="data_sources/fetcher")

DEFAULT_TIMEOUT_SECONDS = 15
DEFAULT_USER_AGENT = "WeatherCLI-Pro/2.0"


class FailureKind(str, Enum):
    """Why a fetch did not produce a payload."""
    NETWORK_ERROR = "network_error"
    PARSE_ERROR = "parse_error"
    API_ERROR = "api_error"


@dataclass(frozen=True)
class Success:
    """Decoded payload (dict, or a validated model when a schema was given)."""
    payload: Any
    from_cache: bool = False


@dataclass(frozen=True)
class Failure:
    """Classified failure with a human-readable detail message."""
    kind: FailureKind
    detail: str


FetchResult = Union[Success, Failure]


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt limit and linear backoff: attempt n is followed by n * base_backoff seconds."""
    max_attempts: int = 3
    base_backoff: float = 2.0

    def __post_init__(self) -> None:
        if self.base_backoff < 0:
            raise ValueError("base_backoff must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt` (1-based)."""
        return self.base_backoff * attempt


class Fetcher:
    """Issue GET requests for JSON payloads; failures are returned, not raised."""

    def __init__(
        self,
        cache: ResponseCache,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        retry_policy: RetryPolicy | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        log_sink: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.cache = cache
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.retry_policy = retry_policy or RetryPolicy()
        self.session = session or requests.Session()
        self._sleep = sleep
        self._log = log_sink if log_sink is not None else logger

    def fetch(
        self,
        url: str,
        use_cache: bool = True,
        max_retries: Optional[int] = None,
        schema: Optional[Type[BaseModel]] = None,
    ) -> FetchResult:
        """Return the decoded payload for `url`, from cache when fresh."""
        safe_url = mask_url(url)

        if use_cache:
            cached = self.cache.get(url)
            if cached is not None:
                self._log.debug("Using cached data for %s", safe_url)
                return self._finish(cached, schema, safe_url, from_cache=True)

        response = self._get_with_retries(url, safe_url, max_retries)
        if isinstance(response, Failure):
            return response

        try:
            data = response.json()
        except ValueError as exc:
            self._log.error("JSON parsing error for %s: %s", safe_url, exc)
            return Failure(FailureKind.PARSE_ERROR, f"Response is not valid JSON: {exc}")

        if not isinstance(data, dict):
            self._log.error("Unexpected JSON type %s for %s", type(data).__name__, safe_url)
            return Failure(FailureKind.PARSE_ERROR, f"Expected a JSON object, got {type(data).__name__}")

        if "error" in data:
            message = _error_message(data["error"])
            self._log.error("API error for %s: %s", safe_url, message)
            return Failure(FailureKind.API_ERROR, message)

        result = self._finish(data, schema, safe_url, from_cache=False)
        if use_cache and isinstance(result, Success):
            self.cache.put(url, data)
        return result

    def _get_with_retries(self, url: str, safe_url: str, max_retries: Optional[int]):
        """Return a response, or a NETWORK_ERROR Failure once attempts run out."""
        attempts = self.retry_policy.max_attempts if max_retries is None else max_retries
        attempts = max(1, attempts)
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}

        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                self._log.debug("GET %s (attempt %d/%d)", safe_url, attempt, attempts)
                return self.session.get(
                    url,
                    headers=headers,
                    timeout=self.timeout_seconds,
                    allow_redirects=True,
                    verify=True,
                )
            except requests.exceptions.RequestException as exc:
                last_error = exc
                self._log.warning("Request attempt %d failed for %s: %s", attempt, safe_url, exc)
                if attempt < attempts:
                    self._sleep(self.retry_policy.delay_for(attempt))

        self._log.error("Request failed after %d attempts for %s: %s", attempts, safe_url, last_error)
        return Failure(FailureKind.NETWORK_ERROR, str(last_error))

    def _finish(self, data: dict, schema: Optional[Type[BaseModel]], safe_url: str,
                *, from_cache: bool) -> FetchResult:
        if schema is None:
            return Success(data, from_cache=from_cache)
        try:
            return Success(schema.model_validate(data), from_cache=from_cache)
        except ValidationError as exc:
            self._log.error("Response for %s does not match %s: %s", safe_url, schema.__name__, exc)
            return Failure(FailureKind.PARSE_ERROR, f"Unexpected response shape: {exc.error_count()} field error(s)")


def _error_message(error: Any) -> str:
    """Pull `message` out of an API error object, falling back to its text."""
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return str(error)
