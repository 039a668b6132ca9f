"""
orochi/handlers/language.py
/lang, callback "language" (picker) and callback "language set <code>".
In groups only administrators may change the language.
"""

import logging

from orochi.core.telegram import inline_button, keyboard, split_into_columns
from orochi.handlers.event import Event

log = logging.getLogger("language")

ADMIN_STATUSES = {"creator", "administrator"}


async def _can_change(event: Event) -> bool:
    if event.is_private:
        return True
    member = await event.ctx.bot.get_chat_member(event.chat_id, event.sender_id)
    if member.get("status") in ADMIN_STATUSES:
        return True
    if event.is_callback:
        await event.answer(event.t("admins_only"), alert=True)
    else:
        await event.reply(event.t("admins_only"))
    return False


def _name(event: Event, code: str) -> str:
    return event.ctx.i18n.translate("_NAME", code)


async def language(event: Event) -> None:
    if not await _can_change(event):
        return

    i18n = event.ctx.i18n
    buttons = [
        inline_button(
            f"{i18n.translate('_FLAG', code)} {i18n.translate('_NAME', code)}"
            + (" ✔" if code == event.locale else ""),
            f"language set {code}",
        )
        for code in i18n.locales()
    ]
    await event.edit_or_reply(event.t("language"), reply_markup=keyboard(split_into_columns(buttons, 2)))
    await event.answer()


async def language_set(event: Event, code: str) -> None:
    if not await _can_change(event):
        return

    if not event.ctx.i18n.has_locale(code):
        log.warning(f"unknown locale requested: {code}")
        await event.answer()
        return

    if code == event.locale:
        await event.answer(event.t("already_language", language=_name(event, code)), alert=True)
        return

    if not await event.ctx.db.set_language(event.chat_id, event.is_private, code):
        await event.answer()
        return

    event.locale = code
    await event.edit(
        event.t("new_language", new_language=_name(event, code)),
        reply_markup=keyboard([[inline_button(event.t("back_btn"), "language")]]),
    )
    await event.answer()
