from __future__ import annotations

"""
Per-update handler context.

A Context is built for every dispatched update and handed to the
middleware chain and the handler.
"""

from typing import TYPE_CHECKING

from .types import CallbackQuery, Message, Update, normalize_command

if TYPE_CHECKING:
    from .client import Client


class Context:
    """Update being handled plus the client to answer through."""

    def __init__(self, update: Update, client: Client | None = None):
        self.update = update
        self.client = client

    @property
    def message(self) -> Message | None:
        return self.update.message

    @property
    def callback(self) -> CallbackQuery | None:
        return self.update.callback_query

    @property
    def has_message(self) -> bool:
        return self.update.message is not None

    @property
    def has_callback(self) -> bool:
        return self.update.callback_query is not None

    @property
    def message_text(self) -> str:
        if self.update.message is None:
            return ""
        return self.update.message.text.strip()

    @property
    def callback_data(self) -> str:
        if self.update.callback_query is None:
            return ""
        return self.update.callback_query.data.strip()

    @property
    def command(self) -> str:
        if self.update.message is None:
            return ""
        return self.update.message.command()

    def is_command(self, name: str) -> bool:
        name = normalize_command(name)
        if not name:
            return False
        return self.command == name

    @property
    def chat_id(self) -> str:
        """Chat the update came from, "" if it cannot be determined."""
        if self.update.message is not None:
            return self.update.message.chat.chat_id
        cb = self.update.callback_query
        if cb is not None:
            if cb.chat is not None:
                return cb.chat.chat_id
            if cb.message is not None:
                return cb.message.chat.chat_id
        return ""

    async def reply(self, text: str) -> None:
        """Send text back to the originating chat. No-op without a chat id."""
        chat_id = self.chat_id
        if not chat_id:
            return
        if self.client is None:
            raise RuntimeError("context has no client to reply through")
        await self.client.send_message(chat_id, text)
