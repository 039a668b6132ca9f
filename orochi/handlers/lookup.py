"""
orochi/handlers/lookup.py
═══════════════════════════════════════════════════════════════════════════════
/anime  /manga  /char  /user   — plus their callbacks and inline modes.

Command flow (same for every kind):
  • no argument        → usage text + "search" switch-inline button
  • numeric argument   → catalog.get(kind, id)     (cached per kind)
  • anything else      → catalog.search(kind, ...) (never cached)
        0 results → "no results" + "search again"
        1 result  → details straight away
        n results → one button per result, owned by the requester

Callback data:   "<prefix> <id> [owner_id]"   e.g. "char 1 123456"
Inline queries:  "!a title", "!m 30002", "!c name", "!u name"
                 offset = page number (1-based), next_offset = page + 1
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import random
from typing import Optional

from orochi.core.config import COMMAND_SEARCH_LIMIT, INLINE_CACHE_TIME, INLINE_SEARCH_LIMIT
from orochi.core.errors import NotFoundError, RemoteUnavailableError, SearchUnavailableError
from orochi.core.formatting import image_url, render, short_description, thumb_url, title_of
from orochi.core.models import Entity, EntityKind
from orochi.core.telegram import (
    CAPTION_LIMIT, inline_article, inline_button, keyboard, switch_inline_button,
)
from orochi.handlers.event import BotContext, Event

log = logging.getLogger("lookup")

# kind → callback-data prefix / inline trigger
CALLBACK_PREFIX: dict[EntityKind, str] = {
    EntityKind.ANIME:     "anime",
    EntityKind.MANGA:     "manga",
    EntityKind.CHARACTER: "char",
    EntityKind.USER:      "user",
}
PREFIX_KIND = {v: k for k, v in CALLBACK_PREFIX.items()}

INLINE_TRIGGER: dict[EntityKind, str] = {
    EntityKind.ANIME:     "!a",
    EntityKind.MANGA:     "!m",
    EntityKind.CHARACTER: "!c",
    EntityKind.USER:      "!u",
}


def _parse_id(arg: str) -> Optional[int]:
    return int(arg) if arg.isdigit() else None


def _not_found_key(kind: EntityKind, ex: NotFoundError) -> str:
    if isinstance(ex, RemoteUnavailableError):
        return "service_unavailable"
    return f"{kind.value}_not_found"


def _search_again(event: Event, kind: EntityKind, query: str) -> dict:
    return keyboard([[switch_inline_button(event.t("search_again_btn"), f"{INLINE_TRIGGER[kind]} {query}")]])


# ── Details ───────────────────────────────────────────────────────────────────

async def send_details(event: Event, entity: Entity) -> None:
    text  = render(entity, event.t)
    image = image_url(entity)

    if event.is_callback:
        await event.edit(text, preview_url=image or None)
    elif image and len(text) <= CAPTION_LIMIT:
        if entity.kind is EntityKind.USER:
            # Telegram caches photos by URL; user banners change over time
            image += f"?u={random.randint(0, 2**32 - 1)}"
        await event.reply_photo(image, text)
    else:
        await event.reply(text, preview_url=image or None)


# ── Commands ──────────────────────────────────────────────────────────────────

async def lookup(event: Event, kind: EntityKind) -> None:
    query = " ".join(event.args)
    if not query:
        await event.reply(
            event.t(f"{kind.value}_usage"),
            reply_markup=keyboard([[switch_inline_button(event.t("search_btn"), f"{INLINE_TRIGGER[kind]} ")]]),
        )
        return

    entity_id = _parse_id(query)
    if entity_id is not None:
        try:
            entity = await event.ctx.catalog.get(kind, entity_id)
        except NotFoundError as ex:
            log.info(f"{ex}")
            await event.reply(event.t(_not_found_key(kind, ex)))
            return
        await send_details(event, entity)
        return

    try:
        results = await event.ctx.catalog.search(kind, query, 1, COMMAND_SEARCH_LIMIT)
    except SearchUnavailableError as ex:
        log.warning(f"{ex}")
        await event.reply(event.t("search_unavailable"))
        return

    if not results:
        await event.reply(event.t("no_results"), reply_markup=_search_again(event, kind, query))
        return
    if len(results) == 1:
        await send_details(event, results[0])
        return

    prefix = CALLBACK_PREFIX[kind]
    # Channel posts have no sender; their buttons are open to anyone
    owner  = f" {event.sender_id}" if event.sender_id is not None else ""
    buttons = [
        [inline_button(title_of(e), f"{prefix} {e.id}{owner}")]
        for e in results
    ]
    await event.reply(
        event.t("search_results", search=query),
        reply_markup=keyboard(buttons),
    )


# ── Callbacks ─────────────────────────────────────────────────────────────────

async def show(event: Event, kind: EntityKind, entity_id: int, owner_id: Optional[int]) -> None:
    """Callback "<prefix> <id> [owner]" → replace the message with the details."""
    if owner_id is not None and owner_id != event.sender_id:
        await event.answer(event.t("not_allowed"), alert=True, cache_time=INLINE_CACHE_TIME)
        return

    try:
        entity = await event.ctx.catalog.get(kind, entity_id)
    except NotFoundError as ex:
        log.info(f"{ex}")
        await event.answer(event.t(_not_found_key(kind, ex)), alert=True)
        return

    await send_details(event, entity)
    await event.answer()


# ── Inline mode ───────────────────────────────────────────────────────────────

def _article(entity: Entity, t) -> dict:
    image = image_url(entity)
    return inline_article(
        result_id=f"{entity.kind.value}-{entity.id}",
        title=title_of(entity),
        text=render(entity, t),
        description=short_description(entity),
        thumb=thumb_url(entity),
        preview_url=image or None,
    )


def _notice(result_id: str, title: str, text: str, reply_markup: Optional[dict] = None) -> dict:
    return inline_article(result_id=result_id, title=title, text=text, reply_markup=reply_markup)


async def inline_lookup(ctx: BotContext, query: dict, locale: str, kind: EntityKind, arg: str) -> None:
    t = ctx.i18n.translator(locale)
    try:
        page = max(int(query.get("offset") or 1), 1)
    except ValueError:
        page = 1

    results: list[dict] = []
    next_offset = ""

    entity_id = _parse_id(arg)
    if entity_id is not None:
        if page == 1:
            try:
                results.append(_article(await ctx.catalog.get(kind, entity_id), t))
            except RemoteUnavailableError as ex:
                log.warning(f"inline: {ex}")
                await ctx.bot.answer_inline_query(
                    query["id"],
                    [_notice("service-unavailable", t("service_unavailable"), t("service_unavailable"))],
                    cache_time=0,
                )
                return
            except NotFoundError as ex:
                log.info(f"inline: {ex}")
    else:
        try:
            found = await ctx.catalog.search(kind, arg, page, INLINE_SEARCH_LIMIT)
        except SearchUnavailableError as ex:
            log.warning(f"inline: {ex}")
            await ctx.bot.answer_inline_query(
                query["id"],
                [_notice("search-unavailable", t("search_unavailable"), t("search_unavailable"))],
                cache_time=0,
            )
            return
        results.extend(_article(e, t) for e in found)
        if found:
            next_offset = str(page + 1)

    if not results:
        again = keyboard([[switch_inline_button(t("search_again_btn"), f"{INLINE_TRIGGER[kind]} {arg}")]])
        if page == 1:
            results.append(_notice("no-results", t("no_results"), t("no_results"), again))
        else:
            results.append(_notice("no-more-results", t("no_more_results"), t("no_more_results"), again))

    await ctx.bot.answer_inline_query(
        query["id"], results, cache_time=INLINE_CACHE_TIME, next_offset=next_offset,
    )
