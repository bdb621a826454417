"""
Bot runtime: handler registration and the two ways of getting updates.

Long polling runs as one sequential loop owning its offset cursor.
Webhook mode serves a FastAPI app with uvicorn. Both end in
Router.dispatch.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import uvicorn

from .client import Client
from .config import Settings
from .errors import ConfigurationError, TransportError
from .logging_config import NOP_LOGGER, BotLogger
from .router import Handler, Middleware, Router
from .types import Update
from .webhook import DEFAULT_MAX_BODY_BYTES, DEFAULT_PATH, create_webhook_app, normalize_path


@dataclass
class PollingOptions:
    offset: int = 0
    limit: int = 100
    timeout: int = 25  # seconds, passed to GET /updates
    idle_delay: float = 0.4  # seconds to wait after an empty page


@dataclass
class WebhookOptions:
    host: str = "0.0.0.0"
    port: int = 8080
    path: str = DEFAULT_PATH
    secret_token: str = ""
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    shutdown_timeout: float = 5.0  # grace period for in-flight requests

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebhookOptions":
        return cls(
            host=settings.webhook_host,
            port=settings.webhook_port,
            path=settings.webhook_path,
            secret_token=settings.webhook_secret,
            max_body_bytes=settings.webhook_max_body_bytes,
            shutdown_timeout=settings.webhook_shutdown_timeout,
        )


def merge_polling_options(base: PollingOptions, override: Optional[PollingOptions]) -> PollingOptions:
    """Apply override on top of base; only positive values (offset: >= 0) count."""
    merged = PollingOptions(base.offset, base.limit, base.timeout, base.idle_delay)
    if override is None:
        return merged
    if override.offset >= 0:
        merged.offset = override.offset
    if override.limit > 0:
        merged.limit = override.limit
    if override.timeout > 0:
        merged.timeout = override.timeout
    if override.idle_delay > 0:
        merged.idle_delay = override.idle_delay
    return merged


class Bot:
    """
    Entry point for bot applications.

    Example:
        >>> bot = Bot(Client(token, base_url))
        >>> bot.handle_command("start", on_start)
        >>> bot.handle_text(on_text)
        >>> await bot.start_long_polling()
    """

    def __init__(
        self,
        client: Optional[Client],
        logger: Optional[BotLogger] = None,
        polling: Optional[PollingOptions] = None,
    ):
        self.client = client
        self.router = Router()
        self.logger = logger or NOP_LOGGER
        self.polling = merge_polling_options(PollingOptions(), polling)
        self._stop_requested = False

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[Client] = None,
                      logger: Optional[BotLogger] = None) -> "Bot":
        client = client or Client.from_settings(settings, logger=logger)
        polling = PollingOptions(
            limit=settings.polling_limit,
            timeout=settings.polling_timeout,
            idle_delay=settings.polling_idle_delay,
        )
        return cls(client, logger=logger, polling=polling)

    # Registration (before starting a loop)

    def use(self, middleware: Middleware) -> None:
        self.router.use(middleware)

    def handle_command(self, command: str, handler: Handler) -> None:
        self.router.handle_command(command, handler)

    def handle_text(self, handler: Handler) -> None:
        self.router.handle_text(handler)

    def handle_callback(self, handler: Handler) -> None:
        self.router.handle_callback(handler)

    async def handle_update(self, update: Update) -> None:
        await self.router.dispatch(update, self.client)

    # Long polling

    def stop_polling(self) -> None:
        """Ask the polling loop to return before its next fetch."""
        self._stop_requested = True

    async def start_long_polling(self) -> None:
        """
        Fetch and dispatch updates until stopped.

        The first fetch or dispatch error ends the loop and is re-raised;
        remaining updates of that batch are not dispatched. Cancelling the
        task ends the loop with asyncio.CancelledError.

        Raises:
            ConfigurationError: Bot has no client
        """
        if self.client is None:
            raise ConfigurationError("bot client is not set")

        self._stop_requested = False
        offset = self.polling.offset
        self.logger.info("long polling started")

        try:
            while True:
                if self._stop_requested:
                    self.logger.info("long polling stopped: stop requested")
                    return

                try:
                    updates = await self.client.get_updates(
                        offset=offset,
                        limit=self.polling.limit,
                        timeout=self.polling.timeout,
                    )
                except Exception as e:
                    self.logger.error("long polling get updates failed: %s", e)
                    raise

                if not updates:
                    await asyncio.sleep(self.polling.idle_delay)
                    continue

                for update in updates:
                    if update.update_id >= offset:
                        offset = update.update_id + 1
                    try:
                        await self.handle_update(update)
                    except Exception as e:
                        self.logger.error("long polling dispatch failed: %s", e)
                        raise
        except asyncio.CancelledError:
            self.logger.info("long polling stopped: cancelled")
            raise

    # Webhook

    def webhook_app(self, options: Optional[WebhookOptions] = None):
        options = options or WebhookOptions()
        return create_webhook_app(
            self,
            path=options.path,
            max_body_bytes=options.max_body_bytes,
            secret_token=options.secret_token,
        )

    async def start_webhook(self, options: Optional[WebhookOptions] = None) -> None:
        """
        Serve the webhook endpoint until the server stops or the task is cancelled.

        On cancellation the server stops accepting connections and gets
        options.shutdown_timeout seconds to finish in-flight requests;
        the cancellation is then re-raised.

        Raises:
            ConfigurationError: Bot has no client
            TransportError: Server could not start, e.g. the port is taken
        """
        if self.client is None:
            raise ConfigurationError("bot client is not set")

        options = options or WebhookOptions()
        shutdown_timeout = options.shutdown_timeout if options.shutdown_timeout > 0 else 5.0
        config = uvicorn.Config(
            self.webhook_app(options),
            host=options.host or "0.0.0.0",
            port=options.port or 8080,
            timeout_graceful_shutdown=shutdown_timeout,
            log_config=None,
        )
        server = uvicorn.Server(config)

        self.logger.info("webhook server listening on %s:%s%s",
                         config.host, config.port, normalize_path(options.path))
        async def serve() -> None:
            # uvicorn exits the process when it cannot bind; keep that inside the task
            try:
                await server.serve()
            except SystemExit as e:
                raise TransportError(f"webhook server failed: exit code {e.code}") from e
            if not server.started:
                raise TransportError("webhook server failed: server did not start")

        serve_task = asyncio.create_task(serve())
        try:
            await asyncio.shield(serve_task)
        except asyncio.CancelledError:
            self.logger.info("webhook shutdown started")
            server.should_exit = True
            done, _ = await asyncio.wait({serve_task}, timeout=shutdown_timeout + 1)
            if not done:
                server.force_exit = True
                await serve_task
            self.logger.info("webhook server stopped")
            raise
        except Exception as e:
            self.logger.error("webhook server failed: %s", e)
            raise
        self.logger.info("webhook server stopped")
