"""
Logging for the bot runtime.

Library code only talks to a BotLogger. Nothing is logged unless the
caller hands one in; NopLogger is the default picked at construction.
"""

import logging
import sys
from typing import Any, Protocol, Union


class BotLogger(Protocol):
    """Leveled logger with %-style formatting. logging.Logger satisfies it."""

    def debug(self, msg: str, *args: Any) -> None: ...

    def info(self, msg: str, *args: Any) -> None: ...

    def error(self, msg: str, *args: Any) -> None: ...


class NopLogger:
    """Discards everything."""

    def debug(self, msg: str, *args: Any) -> None:
        pass

    def info(self, msg: str, *args: Any) -> None:
        pass

    def error(self, msg: str, *args: Any) -> None:
        pass


NOP_LOGGER = NopLogger()


def setup_logging(name: str = "maxbot", level: Union[int, str] = logging.DEBUG) -> logging.Logger:
    """Setup logging with proper format and handlers."""

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger
