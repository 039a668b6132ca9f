"""
orochi/routers/webhook.py
═══════════════════════════════════════════════════════════════════════════════
POST /webhook

Telegram delivers every update here (setWebhook with secret_token).
  • Wrong / missing X-Telegram-Bot-Api-Secret-Token → 403
  • Body that is not valid JSON or not a JSON object → 400
  • Anything else → 200 {"ok": true}, even when the handler failed:
    a non-2xx answer makes Telegram redeliver the same update forever
═══════════════════════════════════════════════════════════════════════════════
"""

import hmac
import logging

from fastapi import APIRouter, Header, HTTPException, Request

from orochi.core import config
from orochi.handlers.dispatcher import dispatch

log    = logging.getLogger("webhook_router")
router = APIRouter(tags=["telegram"])


def _secret_ok(received: str | None) -> bool:
    if not config.WEBHOOK_SECRET:
        return True
    return hmac.compare_digest(received or "", config.WEBHOOK_SECRET)


@router.post("/webhook")
async def webhook(
    request: Request,
    x_telegram_bot_api_secret_token: str | None = Header(default=None),
):
    if not _secret_ok(x_telegram_bot_api_secret_token):
        raise HTTPException(403, detail="Invalid secret token")

    try:
        update = await request.json()
    except ValueError:
        raise HTTPException(400, detail="Body must be a JSON object")
    if not isinstance(update, dict):
        raise HTTPException(400, detail="Body must be a JSON object")

    try:
        await dispatch(update, request.app.state.bot)
    except Exception as ex:
        log.error(f"Update {update.get('update_id')} failed: {ex!r}")

    return {"ok": True}
