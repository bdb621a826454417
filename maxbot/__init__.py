"""
Max bot client and runtime.

- Client: typed API operations over a retrying, rate-limited Transport
- Bot: handler registration, long polling and webhook serving
- Router / Context: update routing with middleware
"""

from .bot import Bot, PollingOptions, WebhookOptions
from .client import Client
from .config import Settings, get_settings
from .context import Context
from .errors import (
    APIError,
    ConfigurationError,
    DecodeError,
    MaxBotError,
    TransportError,
    classify,
)
from .logging_config import BotLogger, NopLogger, setup_logging
from .ratelimit import RateLimiter
from .router import Handler, Middleware, Router
from .transport import Transport
from .types import (
    ID,
    CallbackQuery,
    Chat,
    Message,
    Update,
    UploadMediaResponse,
    User,
    id_as_int,
)
from .webhook import create_webhook_app

__all__ = [
    "Bot",
    "PollingOptions",
    "WebhookOptions",
    "Client",
    "Settings",
    "get_settings",
    "Context",
    "APIError",
    "ConfigurationError",
    "DecodeError",
    "MaxBotError",
    "TransportError",
    "classify",
    "BotLogger",
    "NopLogger",
    "setup_logging",
    "RateLimiter",
    "Handler",
    "Middleware",
    "Router",
    "Transport",
    "ID",
    "CallbackQuery",
    "Chat",
    "Message",
    "Update",
    "UploadMediaResponse",
    "User",
    "id_as_int",
    "create_webhook_app",
]
