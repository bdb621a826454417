"""
Webhook ingestion.

One POST request carries one update. The update is dispatched inside
the request, so the response tells the platform whether handling
succeeded:

- 200 {"ok": true}  dispatched (or nobody handles it)
- 400               body too large, not JSON, or not an update
- 401               shared secret configured and header does not match
- 405               method other than POST
- 500               handler or middleware raised

Updates are not deduplicated by update_id.
"""

import hmac
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI, Header, HTTPException, Request

from .errors import DecodeError
from .types import decode_update

if TYPE_CHECKING:
    from .bot import Bot

DEFAULT_PATH = "/webhook"
DEFAULT_MAX_BODY_BYTES = 1 << 20
SECRET_HEADER = "X-Max-Bot-Secret-Token"


def normalize_path(path: Optional[str]) -> str:
    path = (path or "").strip()
    if not path:
        return DEFAULT_PATH
    if not path.startswith("/"):
        path = "/" + path
    return path


class PayloadTooLarge(DecodeError):
    pass


async def read_body(request: Request, max_bytes: int) -> bytes:
    """Read the request body, refusing to buffer more than max_bytes."""
    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            raise PayloadTooLarge(f"request body exceeds {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


def _secret_ok(expected: str, received: Optional[str]) -> bool:
    if not expected:
        return True
    if received is None:
        return False
    return hmac.compare_digest(expected.encode(), received.encode())


def create_webhook_app(
    bot: "Bot",
    path: str = DEFAULT_PATH,
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
    secret_token: str = "",
) -> FastAPI:
    """
    Build the FastAPI app serving bot's webhook endpoint.

    Args:
        bot: Bot whose router handles updates
        path: Endpoint path, "/" prepended if missing
        max_body_bytes: Largest accepted request body
        secret_token: If set, required value of the X-Max-Bot-Secret-Token header

    Returns:
        FastAPI application
    """
    path = normalize_path(path)
    if max_body_bytes <= 0:
        max_body_bytes = DEFAULT_MAX_BODY_BYTES
    secret_token = (secret_token or "").strip()
    logger = bot.logger

    app = FastAPI(title="maxbot webhook", docs_url=None, redoc_url=None, openapi_url=None)

    @app.post(path)
    async def webhook(
        request: Request,
        x_max_bot_secret_token: Optional[str] = Header(None, alias=SECRET_HEADER),
    ):
        """Receive one update and dispatch it."""
        if not _secret_ok(secret_token, x_max_bot_secret_token):
            logger.error("webhook rejected: bad secret token")
            raise HTTPException(status_code=401, detail="Invalid secret token")

        try:
            body = await read_body(request, max_body_bytes)
            update = decode_update(body)
        except DecodeError as e:
            logger.error("webhook invalid payload: %s", e)
            raise HTTPException(status_code=400, detail="Invalid update payload")

        try:
            await bot.handle_update(update)
        except Exception as e:
            logger.error("webhook dispatch failed: %s", e)
            raise HTTPException(status_code=500, detail="Failed to dispatch update")

        return {"ok": True}

    return app
