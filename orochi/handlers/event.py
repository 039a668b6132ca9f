"""
orochi/handlers/event.py
Per-update view handed to every command / callback handler.

BotContext holds the long-lived collaborators built once in the app lifespan
(catalog with its caches, database, i18n, Bot API client). Event wraps one
incoming message or callback query together with the chat's locale and the
reply/edit/answer operations the handlers need.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from orochi.core.catalog import CatalogAccessor
from orochi.core.database import Database
from orochi.core.i18n import I18n
from orochi.core.telegram import TelegramBot


@dataclass
class BotContext:
    bot:     TelegramBot
    catalog: CatalogAccessor
    db:      Database
    i18n:    I18n


@dataclass
class Event:
    ctx:        BotContext
    locale:     str
    text:       str
    chat_id:    Optional[int] = None
    chat_type:  str = "private"
    sender_id:  Optional[int] = None
    message_id: Optional[int] = None
    callback_query_id: Optional[str] = None
    inline_message_id: Optional[str] = None
    answered:   bool = field(default=False, init=False)

    @classmethod
    def from_message(cls, ctx: BotContext, message: dict, locale: str) -> "Event":
        chat = message.get("chat", {})
        return cls(
            ctx=ctx,
            locale=locale,
            text=message.get("text", ""),
            chat_id=chat.get("id"),
            chat_type=chat.get("type", "private"),
            sender_id=(message.get("from") or {}).get("id"),
            message_id=message.get("message_id"),
        )

    @classmethod
    def from_callback(cls, ctx: BotContext, query: dict, locale: str) -> "Event":
        message = query.get("message") or {}
        chat    = message.get("chat", {})
        return cls(
            ctx=ctx,
            locale=locale,
            text=query.get("data", ""),
            chat_id=chat.get("id"),
            chat_type=chat.get("type", "private"),
            sender_id=(query.get("from") or {}).get("id"),
            message_id=message.get("message_id"),
            callback_query_id=query.get("id"),
            inline_message_id=query.get("inline_message_id"),
        )

    @property
    def is_callback(self) -> bool:
        return self.callback_query_id is not None

    @property
    def is_private(self) -> bool:
        return self.chat_type == "private"

    @property
    def args(self) -> list[str]:
        """Whitespace-separated words after the command / callback verb."""
        return self.text.split()[1:]

    def t(self, key: str, **args: Any) -> str:
        return self.ctx.i18n.translate(key, self.locale, **args)

    async def reply(self, text: str, reply_markup: Optional[dict] = None, preview_url: Optional[str] = None) -> dict:
        return await self.ctx.bot.send_message(
            self.chat_id, text, reply_to=self.message_id if not self.is_callback else None,
            reply_markup=reply_markup, preview_url=preview_url,
        )

    async def reply_photo(self, photo: str, caption: str, reply_markup: Optional[dict] = None) -> dict:
        return await self.ctx.bot.send_photo(
            self.chat_id, photo, caption, reply_to=self.message_id, reply_markup=reply_markup,
        )

    async def edit(self, text: str, reply_markup: Optional[dict] = None, preview_url: Optional[str] = None) -> Any:
        if self.inline_message_id:
            return await self.ctx.bot.edit_message_text(
                text, inline_message_id=self.inline_message_id,
                reply_markup=reply_markup, preview_url=preview_url,
            )
        return await self.ctx.bot.edit_message_text(
            text, chat_id=self.chat_id, message_id=self.message_id,
            reply_markup=reply_markup, preview_url=preview_url,
        )

    async def edit_or_reply(self, text: str, reply_markup: Optional[dict] = None) -> Any:
        if self.is_callback:
            return await self.edit(text, reply_markup=reply_markup)
        return await self.reply(text, reply_markup=reply_markup)

    async def answer(self, text: Optional[str] = None, alert: bool = False, cache_time: Optional[int] = None) -> None:
        """Acknowledge the callback query. No-op for plain messages or if already answered."""
        if not self.is_callback or self.answered:
            return
        self.answered = True
        await self.ctx.bot.answer_callback_query(
            self.callback_query_id, text=text, show_alert=alert, cache_time=cache_time,
        )
