"""
orochi/handlers/start.py
/start and /ping.
"""

import time

from orochi.handlers.event import Event


async def start(event: Event) -> None:
    await event.reply(event.t("start"))


async def ping(event: Event) -> None:
    t0   = time.monotonic()
    sent = await event.reply("🏓")
    ms   = round((time.monotonic() - t0) * 1000)
    await event.ctx.bot.edit_message_text(
        event.t("pong", ms=ms), chat_id=event.chat_id, message_id=sent["message_id"],
    )
