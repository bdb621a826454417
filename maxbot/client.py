"""
Max bot API client.

Thin typed operations on top of Transport. Retries and rate limiting
happen in Transport only; nothing here retries again.
"""

from typing import List, Optional
from urllib.parse import urlencode

import httpx

from .config import Settings
from .logging_config import BotLogger
from .transport import (
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_RATE_LIMIT_RPS,
    DEFAULT_TIMEOUT,
    Transport,
)
from .types import (
    SendMediaRequest,
    SendMessageRequest,
    Update,
    UploadMediaResponse,
    decode_updates,
    decode_upload,
)

DEFAULT_UPLOAD_FILENAME = "upload.bin"
DEFAULT_UPLOAD_CONTENT_TYPE = "application/octet-stream"


class Client:
    """
    Client for the Max bot HTTP API.

    Example:
        >>> async with Client("token", "https://platform-api.max.ru") as client:
        ...     await client.send_message("42", "hello")
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
        """
        Args:
            token: Bot access token, sent as-is in the Authorization header
            base_url: API base URL
            http_client: Optional preconfigured httpx.AsyncClient
            timeout: Per-request timeout in seconds
            max_retries: Extra attempts after the first one
            initial_backoff: First retry delay in seconds
            max_backoff: Upper bound for retry delay in seconds
            rate_limit_rps: Max call starts per second (0 = default, <0 = off)
            logger: BotLogger, no-op when omitted

        Raises:
            ConfigurationError: If token or base_url is blank
        """
        self.transport = Transport(
            token,
            base_url,
            http_client=http_client,
            timeout=timeout,
            max_retries=max_retries,
            initial_backoff=initial_backoff,
            max_backoff=max_backoff,
            rate_limit_rps=rate_limit_rps,
            logger=logger,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "Client":
        """Build a client from Settings; kwargs override (e.g. http_client, logger)."""
        options = dict(
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            initial_backoff=settings.initial_backoff,
            max_backoff=settings.max_backoff,
            rate_limit_rps=settings.rate_limit_rps,
        )
        options.update(kwargs)
        return cls(settings.token, settings.base_url, **options)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def get_updates(self, offset: int = 0, limit: int = 0, timeout: int = 0) -> List[Update]:
        """
        Call GET /updates.

        Each query parameter is sent only when positive.

        Args:
            offset: Exclusive lower bound on update_id
            limit: Max updates per page
            timeout: Long-poll window in seconds

        Returns:
            Updates in the order the server returned them
        """
        params = {}
        if offset > 0:
            params["offset"] = offset
        if limit > 0:
            params["limit"] = limit
        if timeout > 0:
            params["timeout"] = timeout

        path = "/updates"
        if params:
            path += "?" + urlencode(params)

        body = await self.transport.execute("GET", path)
        return decode_updates(body)

    async def send_message(self, chat_id: str, text: str) -> None:
        """Call POST /messages."""
        req = SendMessageRequest(chat_id=chat_id, text=text)
        await self.transport.json_request("POST", "/messages", req.model_dump())

    async def upload_media(
        self,
        data: bytes,
        filename: str = "",
        content_type: str = "",
    ) -> UploadMediaResponse:
        """
        Upload a file via POST /media/upload as a single multipart part "file".

        Args:
            data: File contents, must be non-empty
            filename: Defaults to upload.bin
            content_type: Defaults to application/octet-stream

        Returns:
            UploadMediaResponse with media_id/file_id/url

        Raises:
            ValueError: If data is empty (no request is made)
        """
        if not data:
            raise ValueError("upload media: data is required")

        filename = (filename or "").strip() or DEFAULT_UPLOAD_FILENAME
        content_type = (content_type or "").strip() or DEFAULT_UPLOAD_CONTENT_TYPE

        # Let httpx build the multipart body, then send it through Transport
        request = httpx.Request(
            "POST",
            "http://multipart.invalid/",
            files={"file": (filename, data, content_type)},
        )
        body = request.read()

        resp = await self.transport.execute(
            "POST", "/media/upload", body, request.headers["Content-Type"]
        )
        return decode_upload(resp)

    async def send_media(
        self,
        chat_id: str,
        media_id: str,
        caption: Optional[str] = None,
        type: Optional[str] = None,
    ) -> None:
        """Call POST /messages/media; caption and type are omitted when unset."""
        req = SendMediaRequest(chat_id=chat_id, media_id=media_id, caption=caption, type=type)
        await self.transport.json_request(
            "POST", "/messages/media", req.model_dump(exclude_none=True)
        )
