"""
HTTP transport for the Max bot API.

Executes one logical API call: authentication headers, rate limiting,
retries with exponential backoff, and classification of failed
responses into APIError.
"""

import asyncio
import json
from typing import Any, Optional

import httpx

from .errors import APIError, ConfigurationError, TransportError, classify, should_retry_status
from .logging_config import NOP_LOGGER, BotLogger
from .ratelimit import RateLimiter

DEFAULT_TIMEOUT = 30.0
DEFAULT_INITIAL_BACKOFF = 0.25
DEFAULT_MAX_BACKOFF = 3.0
DEFAULT_RATE_LIMIT_RPS = 30

CONTENT_TYPE_JSON = "application/json"


class Transport:
    """
    Authenticated, retrying HTTP executor.

    A call gets max_retries + 1 physical attempts. Connection failures
    and 408/429/5xx responses are retried; anything else fails at once.
    The limiter is consulted before every attempt, retries included.
    Cancelling the calling task stops the call at the next await,
    whether that is the limiter, the request or the backoff sleep.
    """

    def __init__(
        self,
        token: str,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 0,
        initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
        max_backoff: float = DEFAULT_MAX_BACKOFF,
        rate_limit_rps: float = DEFAULT_RATE_LIMIT_RPS,
        logger: Optional[BotLogger] = None,
    ):
        token = (token or "").strip()
        base_url = (base_url or "").strip()
        if not token:
            raise ConfigurationError("token is required")
        if not base_url:
            raise ConfigurationError("base_url is required")

        self.token = token
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(max_retries, 0)
        self.initial_backoff = initial_backoff if initial_backoff > 0 else DEFAULT_INITIAL_BACKOFF
        self.max_backoff = max_backoff if max_backoff > 0 else DEFAULT_MAX_BACKOFF
        self.logger = logger or NOP_LOGGER

        if rate_limit_rps == 0:
            rate_limit_rps = DEFAULT_RATE_LIMIT_RPS
        self.limiter = RateLimiter(rate_limit_rps)

        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close HTTP client if we created it."""
        if self._owns_client and not self.client.is_closed:
            await self.client.aclose()

    def backoff(self, attempt: int) -> float:
        """Delay after 0-indexed attempt, before the next one."""
        return min(self.initial_backoff * (2 ** attempt), self.max_backoff)

    def _headers(self, content_type: Optional[str]) -> dict:
        headers = {
            "Authorization": self.token,
            "Accept": CONTENT_TYPE_JSON,
        }
        if content_type and content_type.strip():
            headers["Content-Type"] = content_type
        return headers

    async def execute(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> bytes:
        """
        Execute an API call with retries.

        Args:
            method: HTTP method
            path: Path relative to base URL, query string included
            body: Optional request body
            content_type: Content-Type of body

        Returns:
            Raw response body of the first successful attempt

        Raises:
            APIError: Non-retryable status, or retries exhausted on one
            TransportError: Network failure on the last attempt
            asyncio.CancelledError: Calling task was cancelled
        """
        url = self.base_url + path
        headers = self._headers(content_type)

        for attempt in range(self.max_retries + 1):
            last_attempt = attempt == self.max_retries

            await self.limiter.acquire()

            try:
                response = await self.client.request(
                    method, url, content=body or None, headers=headers
                )
            except httpx.RequestError as e:
                error = TransportError(f"request failed: {e}")
                if last_attempt:
                    self.logger.error("%s %s failed after %d attempts: %s",
                                      method, path, attempt + 1, e)
                    raise error from e
                delay = self.backoff(attempt)
                self.logger.debug("%s %s attempt %d failed (%s), retrying in %.3fs",
                                  method, path, attempt + 1, e, delay)
                await asyncio.sleep(delay)
                continue

            if response.status_code < 400:
                return response.content

            api_error = classify(
                response.status_code,
                response.headers.get("Retry-After"),
                response.content,
            )
            if not should_retry_status(response.status_code) or last_attempt:
                self.logger.error("%s %s failed: %s", method, path, api_error)
                raise api_error

            delay = api_error.retry_after or self.backoff(attempt)
            self.logger.debug("%s %s attempt %d got status %d, retrying in %.3fs",
                              method, path, attempt + 1, response.status_code, delay)
            await asyncio.sleep(delay)

        # range() above always runs at least once and every branch
        # returns, raises or continues to a further attempt
        raise APIError(0, message="request failed")

    async def json_request(self, method: str, path: str, payload: Any = None) -> bytes:
        """Serialize payload as JSON and execute."""
        if payload is None:
            return await self.execute(method, path)
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        return await self.execute(method, path, body, CONTENT_TYPE_JSON)
