"""
Update routing.

One update selects at most one handler:
- a registered command handler when the message is a command,
- otherwise the text handler, for any message,
- the callback handler for callback updates.
An update nobody handles is dropped without error.
"""

from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List, Optional

from .context import Context
from .types import Update, normalize_command

if TYPE_CHECKING:
    from .client import Client

Handler = Callable[[Context], Awaitable[None]]
Middleware = Callable[[Handler], Handler]


async def _noop(ctx: Context) -> None:
    return None


def chain(middlewares: List[Middleware], final: Optional[Handler]) -> Handler:
    """
    Wrap final in middlewares, first one outermost.

    chain([m0, m1], h) == m0(m1(h))
    """
    if final is None:
        return _noop
    handler = final
    for mw in reversed(middlewares):
        handler = mw(handler)
    return handler


class Router:
    """Handler registry. Register everything before starting a loop."""

    def __init__(self):
        self.commands: Dict[str, Handler] = {}
        self.on_text: Optional[Handler] = None
        self.on_callback: Optional[Handler] = None
        self.middlewares: List[Middleware] = []

    def use(self, middleware: Middleware) -> None:
        self.middlewares.append(middleware)

    def handle_command(self, command: str, handler: Handler) -> None:
        """Register handler for /command. Blank names and None handlers are ignored."""
        command = normalize_command(command)
        if not command or handler is None:
            return
        self.commands[command] = handler

    def handle_text(self, handler: Optional[Handler]) -> None:
        self.on_text = handler

    def handle_callback(self, handler: Optional[Handler]) -> None:
        self.on_callback = handler

    def resolve(self, update: Update) -> Optional[Handler]:
        """Pick the terminal handler for update, or None."""
        if update.message is not None:
            cmd = update.message.command()
            if cmd and cmd in self.commands:
                return self.commands[cmd]
            return self.on_text
        if update.callback_query is not None:
            return self.on_callback
        return None

    async def dispatch(self, update: Update, client: "Optional[Client]" = None) -> None:
        """
        Route update to its handler through the middleware chain.

        Raises:
            Exception: Whatever the handler or a middleware raised
        """
        handler = self.resolve(update)
        if handler is None:
            return
        ctx = Context(update, client)
        await chain(self.middlewares, handler)(ctx)
