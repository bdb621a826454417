"""
Error types raised by the Max bot client and runtime.

Every failed API call ends in one of these. HTTP responses with
status >= 400 are turned into an APIError by classify(), which never
raises itself: a body that is not JSON still yields a usable error.
"""

import json
from typing import Any, Dict, Optional


class MaxBotError(Exception):
    """Base class for all library errors."""


class ConfigurationError(MaxBotError):
    """Missing or invalid client/bot configuration (token, base URL, client)."""


class TransportError(MaxBotError):
    """Network-level failure: connection refused, timeout, broken stream."""


class DecodeError(MaxBotError):
    """Malformed response body or webhook payload."""


class APIError(MaxBotError):
    """
    Structured error for a non-2xx API response.

    Attributes are read-only once the error is built.
    """

    __slots__ = ("_status_code", "_code", "_message", "_description",
                 "_details", "_body", "_retry_after")

    def __init__(
        self,
        status_code: int,
        code: str = "",
        message: str = "",
        description: str = "",
        details: Optional[Dict[str, Any]] = None,
        body: str = "",
        retry_after: float = 0.0,
    ):
        self._status_code = status_code
        self._code = code
        self._message = message
        self._description = description
        self._details = dict(details) if details else {}
        self._body = body
        self._retry_after = retry_after
        super().__init__(self._render())

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def code(self) -> str:
        return self._code

    @property
    def message(self) -> str:
        return self._message

    @property
    def description(self) -> str:
        return self._description

    @property
    def details(self) -> Dict[str, Any]:
        return dict(self._details)

    @property
    def body(self) -> str:
        return self._body

    @property
    def retry_after(self) -> float:
        """Server-requested delay in seconds before retrying, 0 if none."""
        return self._retry_after

    @property
    def is_retryable(self) -> bool:
        return should_retry_status(self._status_code)

    def _render(self) -> str:
        msg = (
            self._message.strip()
            or self._description.strip()
            or self._body.strip()
            or "request failed"
        )
        if self._code:
            return f"max api error: status={self._status_code} code={self._code} message={msg}"
        return f"max api error: status={self._status_code} message={msg}"

    def __repr__(self) -> str:
        return f"APIError(status_code={self._status_code!r}, code={self._code!r})"

    def __reduce__(self):
        # BaseException would rebuild from args, which only holds the rendered text
        return (
            self.__class__,
            (self._status_code, self._code, self._message, self._description,
             self._details, self._body, self._retry_after),
        )


def should_retry_status(status_code: int) -> bool:
    """Only 408, 429 and 5xx are worth another attempt."""
    if status_code in (408, 429):
        return True
    return status_code >= 500


def parse_retry_after(value: Optional[str]) -> float:
    """
    Parse a Retry-After header as whole seconds.

    Args:
        value: Raw header value, may be None

    Returns:
        Delay in seconds, or 0 when the header is absent, non-numeric or <= 0
    """
    if not value:
        return 0.0
    value = value.strip()
    try:
        seconds = int(value)
    except ValueError:
        return 0.0
    if seconds <= 0:
        return 0.0
    return float(seconds)


def classify(status_code: int, retry_after_header: Optional[str], body: bytes) -> APIError:
    """
    Turn a failed HTTP response into an APIError.

    Fields are picked up best-effort from a JSON object body:
    code, message, description, error (fallback for message), details.

    Args:
        status_code: HTTP status of the response
        retry_after_header: Raw Retry-After header value
        body: Raw response body

    Returns:
        APIError describing the failure
    """
    raw = body.decode("utf-8", errors="replace").strip()
    fields: Dict[str, Any] = {
        "status_code": status_code,
        "body": raw,
        "retry_after": parse_retry_after(retry_after_header),
    }

    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return APIError(**fields)
    if not isinstance(payload, dict):
        return APIError(**fields)

    for key in ("code", "message", "description"):
        value = payload.get(key)
        if isinstance(value, str):
            fields[key] = value

    fallback = payload.get("error")
    if isinstance(fallback, str) and not fields.get("message"):
        fields["message"] = fallback

    details = payload.get("details")
    if isinstance(details, dict):
        fields["details"] = details

    return APIError(**fields)
