"""
orochi/core/config.py  ── Orochi Bot
═══════════════════════════════════════════════════════════════════════════════
SOURCE ASSIGNMENT:

  AniList GraphQL   →  anime, manga, characters, users (by id + search)
                        public API, no key needed for read-only lookups,
                        rate limited (~90 req/min) → cached per kind

  Telegram Bot API  →  outgoing messages / inline answers
                        incoming updates arrive on POST /webhook

All secrets come from environment variables, NEVER hardcoded.
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import os

import pytz

log = logging.getLogger("config")

# ── Telegram ──────────────────────────────────────────────────────────────────
BOT_TOKEN = os.environ.get("BOT_TOKEN", "")
if not BOT_TOKEN:
    log.warning("BOT_TOKEN env var not set — Telegram API calls will fail with 404")
WEBHOOK_SECRET = os.environ.get("WEBHOOK_SECRET", "")
# Without a username, "/cmd@AnyBot" is accepted as addressed to us
BOT_USERNAME   = os.environ.get("BOT_USERNAME", "")
TELEGRAM_API   = "https://api.telegram.org"

# Seconds Telegram may cache an inline answer on its side
INLINE_CACHE_TIME = 120

# ── AniList ───────────────────────────────────────────────────────────────────
ANILIST_GRAPHQL         = "https://graphql.anilist.co"
ANILIST_SITE            = "https://anilist.co"
ANILIST_BANNER_URL      = "https://img.anili.st/media/"
ANILIST_USER_BANNER_URL = "https://img.anili.st/user/"
MAL_SITE                = "https://myanimelist.net"

# Entries per entity kind; when full the whole kind cache is flushed
CACHE_CAPACITY = int(os.environ.get("CACHE_CAPACITY", "50"))

# Page sizes used by commands (buttons) and inline mode (articles)
COMMAND_SEARCH_LIMIT = 6
INLINE_SEARCH_LIMIT  = 10

# ── Storage / locale ──────────────────────────────────────────────────────────
DATABASE_PATH  = os.environ.get("DATABASE_PATH", "orochi.db")
DEFAULT_LOCALE = os.environ.get("DEFAULT_LOCALE", "pt")
LOCALES_DIR    = os.path.join(os.path.dirname(os.path.dirname(__file__)), "locales")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Dates shown to users (join dates, etc.) are rendered in this zone
BOT_TZ = pytz.timezone(os.environ.get("BOT_TZ", "America/Sao_Paulo"))
