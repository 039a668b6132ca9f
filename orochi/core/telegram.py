"""
orochi/core/telegram.py
Minimal Telegram Bot API client over the shared httpx client.
Only the methods the handlers use are wrapped; every call returns the
decoded `result` or raises TelegramError when the API answers ok=false.
"""

import logging
from typing import Any, Callable, Optional

import httpx

from orochi.core.config import BOT_TOKEN, TELEGRAM_API
from orochi.core.http_client import telegram_client

log = logging.getLogger("telegram")

# Bot API limit for photo captions
CAPTION_LIMIT = 1024


class TelegramError(Exception):
    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        self.method      = method
        self.description = description
        self.error_code  = error_code
        super().__init__(f"{method}: {description}")


# ── Reply markup helpers ──────────────────────────────────────────────────────

def inline_button(text: str, data: str) -> dict:
    return {"text": text, "callback_data": data}


def switch_inline_button(text: str, query: str) -> dict:
    return {"text": text, "switch_inline_query_current_chat": query}


def keyboard(rows: list[list[dict]]) -> dict:
    return {"inline_keyboard": rows}


def split_into_columns(buttons: list[dict], columns: int) -> list[list[dict]]:
    return [buttons[i:i + columns] for i in range(0, len(buttons), columns)]


def _preview(url: Optional[str]) -> dict:
    if not url:
        return {"is_disabled": True}
    return {"url": url, "prefer_large_media": True, "show_above_text": True}


# ── Client ────────────────────────────────────────────────────────────────────

class TelegramBot:
    def __init__(
        self,
        token: str = BOT_TOKEN,
        client: Callable[[], httpx.AsyncClient] = telegram_client,
        base_url: str = TELEGRAM_API,
    ) -> None:
        self._client = client
        self._base   = f"{base_url}/bot{token}"

    async def call(self, method: str, **params: Any) -> Any:
        payload = {k: v for k, v in params.items() if v is not None}
        resp = await self._client().post(f"{self._base}/{method}", json=payload)
        try:
            body = resp.json()
        except ValueError as ex:
            raise TelegramError(method, f"HTTP {resp.status_code}", resp.status_code) from ex
        if not body.get("ok"):
            raise TelegramError(method, body.get("description", "unknown error"), body.get("error_code"))
        return body.get("result")

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_to: Optional[int] = None,
        reply_markup: Optional[dict] = None,
        preview_url: Optional[str] = None,
    ) -> dict:
        return await self.call(
            "sendMessage",
            chat_id=chat_id,
            text=text,
            parse_mode="HTML",
            reply_parameters={"message_id": reply_to, "allow_sending_without_reply": True} if reply_to else None,
            reply_markup=reply_markup,
            link_preview_options=_preview(preview_url),
        )

    async def send_photo(
        self,
        chat_id: int,
        photo: str,
        caption: str,
        reply_to: Optional[int] = None,
        reply_markup: Optional[dict] = None,
    ) -> dict:
        return await self.call(
            "sendPhoto",
            chat_id=chat_id,
            photo=photo,
            caption=caption,
            parse_mode="HTML",
            reply_parameters={"message_id": reply_to, "allow_sending_without_reply": True} if reply_to else None,
            reply_markup=reply_markup,
        )

    async def edit_message_text(
        self,
        text: str,
        chat_id: Optional[int] = None,
        message_id: Optional[int] = None,
        inline_message_id: Optional[str] = None,
        reply_markup: Optional[dict] = None,
        preview_url: Optional[str] = None,
    ) -> Any:
        return await self.call(
            "editMessageText",
            chat_id=chat_id,
            message_id=message_id,
            inline_message_id=inline_message_id,
            text=text,
            parse_mode="HTML",
            reply_markup=reply_markup,
            link_preview_options=_preview(preview_url),
        )

    async def answer_callback_query(
        self,
        callback_query_id: str,
        text: Optional[str] = None,
        show_alert: bool = False,
        cache_time: Optional[int] = None,
    ) -> bool:
        return await self.call(
            "answerCallbackQuery",
            callback_query_id=callback_query_id,
            text=text,
            show_alert=show_alert or None,
            cache_time=cache_time,
        )

    async def answer_inline_query(
        self,
        inline_query_id: str,
        results: list[dict],
        cache_time: Optional[int] = None,
        next_offset: Optional[str] = None,
        is_personal: bool = False,
    ) -> bool:
        return await self.call(
            "answerInlineQuery",
            inline_query_id=inline_query_id,
            results=results,
            cache_time=cache_time,
            is_personal=is_personal or None,
            next_offset=next_offset,
        )

    async def get_chat_member(self, chat_id: int, user_id: int) -> dict:
        return await self.call("getChatMember", chat_id=chat_id, user_id=user_id)


def inline_article(
    result_id: str,
    title: str,
    text: str,
    description: str = "",
    reply_markup: Optional[dict] = None,
    thumb: str = "",
    preview_url: Optional[str] = None,
) -> dict:
    article = {
        "type": "article",
        "id":   result_id,
        "title": title,
        "input_message_content": {
            "message_text":         text,
            "parse_mode":           "HTML",
            "link_preview_options": _preview(preview_url),
        },
    }
    if description:
        article["description"] = description
    if reply_markup:
        article["reply_markup"] = reply_markup
    if thumb:
        article["thumbnail_url"] = thumb
    return article
