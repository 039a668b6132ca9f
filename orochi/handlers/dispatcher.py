"""
orochi/handlers/dispatcher.py
═══════════════════════════════════════════════════════════════════════════════
Routes one Telegram update to its handler.

  message         → "/cmd[@bot] args"  (also "!cmd")   → COMMANDS
  callback_query  → data matched against CALLBACK_ROUTES
  inline_query    → query matched against INLINE_ROUTES

Before routing, the chat's locale is resolved from the database, creating
the user / group row on first contact (a database failure only costs the
locale; the update is still handled in the default language).

Any exception escaping a handler is logged and reported back to the user in
the form that fits the update (reply, callback alert or inline article).
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import re
import sqlite3
from functools import partial
from typing import Awaitable, Callable, Optional

from orochi.core.config import BOT_USERNAME
from orochi.core.formatting import escape_html, shorten_text
from orochi.core.models import EntityKind
from orochi.core.telegram import inline_article
from orochi.handlers.event import BotContext, Event
from orochi.handlers.language import language, language_set
from orochi.handlers.lookup import PREFIX_KIND, inline_lookup, lookup, show
from orochi.handlers.start import ping, start

log = logging.getLogger("dispatcher")

Handler = Callable[[Event], Awaitable[None]]

COMMAND_PREFIXES = ("/", "!")

INLINE_HELP_CACHE_TIME = 60

COMMANDS: dict[str, Handler] = {
    "start":     start,
    "ping":      ping,
    "lang":      language,
    "language":  language,
    "a":         partial(lookup, kind=EntityKind.ANIME),
    "anime":     partial(lookup, kind=EntityKind.ANIME),
    "m":         partial(lookup, kind=EntityKind.MANGA),
    "manga":     partial(lookup, kind=EntityKind.MANGA),
    "c":         partial(lookup, kind=EntityKind.CHARACTER),
    "char":      partial(lookup, kind=EntityKind.CHARACTER),
    "p":         partial(lookup, kind=EntityKind.CHARACTER),
    "perso":     partial(lookup, kind=EntityKind.CHARACTER),
    "u":         partial(lookup, kind=EntityKind.USER),
    "user":      partial(lookup, kind=EntityKind.USER),
}

_SHOW_RE         = re.compile(r"^(anime|manga|char|user) (\d+)(?: (\d+))?$")
_LANGUAGE_RE     = re.compile(r"^language$")
_LANGUAGE_SET_RE = re.compile(r"^language set (\w+)$")

INLINE_ROUTES: list[tuple[re.Pattern, EntityKind]] = [
    (re.compile(r"^[.!]?a(n(i(m(e)?)?)?)? (?P<arg>.+)", re.S), EntityKind.ANIME),
    (re.compile(r"^[.!]?m(a(n(g(a)?)?)?)? (?P<arg>.+)", re.S), EntityKind.MANGA),
    (re.compile(r"^[.!]?(c|p) (?P<arg>.+)", re.S),             EntityKind.CHARACTER),
    (re.compile(r"^[.!]?u (?P<arg>.+)", re.S),                 EntityKind.USER),
]


def parse_command(text: str) -> Optional[str]:
    """'/anime@OrochiBot naruto' → 'anime'; None if not a command for us."""
    if not text or not text.startswith(COMMAND_PREFIXES):
        return None
    word = text.split(maxsplit=1)[0][1:]
    name, _, target = word.partition("@")
    if target and BOT_USERNAME and target.lower() != BOT_USERNAME.lower():
        return None
    return name.lower() or None


async def _locale(ctx: BotContext, chat_id: Optional[int], is_private: bool) -> str:
    if chat_id is None:
        return ctx.i18n.default_locale
    try:
        code = await ctx.db.ensure_chat(chat_id, is_private)
    except sqlite3.Error:
        log.exception(f"failed to load chat {chat_id}")
        return ctx.i18n.default_locale
    return code if ctx.i18n.has_locale(code) else ctx.i18n.default_locale


# ── Update kinds ──────────────────────────────────────────────────────────────

async def _on_message(ctx: BotContext, message: dict) -> None:
    handler = COMMANDS.get(parse_command(message.get("text", "")) or "")
    if handler is None:
        return

    chat   = message.get("chat", {})
    locale = await _locale(ctx, chat.get("id"), chat.get("type") == "private")
    event  = Event.from_message(ctx, message, locale)
    try:
        await handler(event)
    except Exception as ex:
        log.exception(f"command {event.text!r} failed")
        await event.reply(event.t("error", error=escape_html(ex)))


async def _on_callback(ctx: BotContext, query: dict) -> None:
    message = query.get("message")
    if message:
        chat   = message.get("chat", {})
        locale = await _locale(ctx, chat.get("id"), chat.get("type") == "private")
    else:
        # Callback on a message sent via inline mode → use the clicker's own row
        locale = await _locale(ctx, (query.get("from") or {}).get("id"), True)

    event = Event.from_callback(ctx, query, locale)
    try:
        await _route_callback(event)
    except Exception as ex:
        log.exception(f"callback {event.text!r} failed")
        # Alerts are capped at 200 characters by Telegram
        await event.answer(shorten_text(event.t("error_alert", error=ex), 200), alert=True)
    else:
        await event.answer()


async def _route_callback(event: Event) -> None:
    data = event.text
    if m := _SHOW_RE.match(data):
        owner = int(m.group(3)) if m.group(3) else None
        await show(event, PREFIX_KIND[m.group(1)], int(m.group(2)), owner)
    elif _LANGUAGE_RE.match(data):
        await language(event)
    elif m := _LANGUAGE_SET_RE.match(data):
        await language_set(event, m.group(1))
    else:
        log.debug(f"unhandled callback data: {data!r}")


async def _inline_help(ctx: BotContext, query: dict) -> None:
    """Any inline query no lookup route matches, the empty one included."""
    locale = await _locale(ctx, (query.get("from") or {}).get("id"), True)
    t = ctx.i18n.translator(locale)
    await ctx.bot.answer_inline_query(
        query["id"],
        [inline_article(
            "how-to-use",
            t("how_to_use_inline"),
            t("how_to_use_inline_text"),
            description=t("click_for_more_info"),
        )],
        cache_time=INLINE_HELP_CACHE_TIME,
        is_personal=True,
    )


async def _on_inline(ctx: BotContext, query: dict) -> None:
    text = query.get("query", "")
    for pattern, kind in INLINE_ROUTES:
        if m := pattern.match(text):
            arg = m.group("arg").strip()
            if arg:
                break
    else:
        await _inline_help(ctx, query)
        return

    locale = await _locale(ctx, (query.get("from") or {}).get("id"), True)
    try:
        await inline_lookup(ctx, query, locale, kind, arg)
    except Exception as ex:
        log.exception(f"inline query {text!r} failed")
        t = ctx.i18n.translator(locale)
        await ctx.bot.answer_inline_query(
            query["id"],
            [inline_article(
                "error",
                t("error_inline_title"),
                t("error", error=escape_html(ex)),
                description=t("error_inline_description"),
            )],
            cache_time=0,
        )


async def dispatch(update: dict, ctx: BotContext) -> None:
    if "message" in update:
        await _on_message(ctx, update["message"])
    elif "callback_query" in update:
        await _on_callback(ctx, update["callback_query"])
    elif "inline_query" in update:
        await _on_inline(ctx, update["inline_query"])
    else:
        log.debug(f"update {update.get('update_id')} not handled: {sorted(update)}")
