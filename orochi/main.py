"""
orochi/main.py  — Orochi Bot
Startup: loads locales, migrates the database, builds the cache-first AniList
catalog and the Bot API client, and keeps them on app.state for the webhook.
Run with:  uvicorn orochi.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from orochi.core.catalog import CatalogAccessor
from orochi.core.config import CACHE_CAPACITY, DATABASE_PATH, DEFAULT_LOCALE, LOG_LEVEL
from orochi.core.database import Database
from orochi.core.http_client import close_all
from orochi.core.i18n import I18n
from orochi.core.telegram import TelegramBot
from orochi.handlers.dispatcher import COMMANDS
from orochi.handlers.event import BotContext
from orochi.routers.webhook import router as webhook_router
from orochi.sources.anilist import AniListSource

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("main")

VERSION = "1.0.0"


async def build_context() -> BotContext:
    i18n = I18n(DEFAULT_LOCALE)
    i18n.load()

    db = Database(DATABASE_PATH, DEFAULT_LOCALE)
    await db.migrate()

    return BotContext(
        bot=TelegramBot(),
        catalog=CatalogAccessor(AniListSource(), capacity=CACHE_CAPACITY),
        db=db,
        i18n=i18n,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(f"🚀 Orochi Bot v{VERSION} starting...")
    app.state.bot = await build_context()
    log.info(f"Locales: {app.state.bot.i18n.locales()} · cache capacity {CACHE_CAPACITY}/kind")
    yield
    log.info("🛑 Shutting down...")
    await close_all()


app = FastAPI(
    title="Orochi Bot",
    description=(
        "Telegram bot for AniList lookups (anime, manga, characters, users). "
        "Updates arrive on POST /webhook; lookups by id are served from a "
        "bounded per-kind cache in front of the AniList GraphQL API."
    ),
    version=VERSION,
    lifespan=lifespan,
)

app.include_router(webhook_router)


@app.get("/", tags=["meta"])
async def root():
    return {
        "status":   "online",
        "version":  VERSION,
        "source":   "AniList GraphQL (graphql.anilist.co)",
        "commands": sorted(COMMANDS),
        "inline":   ["!a <title|id>", "!m <title|id>", "!c <name>", "!u <name>"],
        "endpoints": {
            "webhook": "/webhook",
            "health":  "/health",
            "docs":    "/docs",
        },
    }


@app.get("/health", tags=["meta"])
async def health():
    """Lightweight health check with per-kind cache metadata."""
    ctx: BotContext | None = getattr(app.state, "bot", None)
    if ctx is None:
        return {"status": "warming_up"}

    return {
        "status":  "healthy",
        "locales": ctx.i18n.locales(),
        "cache":   ctx.catalog.summary(),
    }
