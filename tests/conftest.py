"""Shared fixtures: sample AniList payloads, a scripted remote source, and a
BotContext wired to a mocked Bot API client.

No network: AniList and Telegram are replaced by fakes / AsyncMock.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from orochi.core.catalog import CatalogAccessor
from orochi.core.database import Database
from orochi.core.errors import NotFoundError
from orochi.core.i18n import I18n
from orochi.core.models import Entity, EntityKind
from orochi.core.telegram import TelegramBot
from orochi.handlers.event import BotContext


# === Sample payloads ===

ANIME_PAYLOAD = {
    "id": 42,
    "idMal": 1,
    "type": "ANIME",
    "format": "TV",
    "status": "FINISHED",
    "title": {"romaji": "Cowboy Bebop", "english": "Cowboy Bebop", "native": "カウボーイビバップ"},
    "description": "In the year 2071<br><br>~!Spike dies!~ bounty hunters & <i>friends</i>",
    "startDate": {"year": 1998, "month": 4, "day": 3},
    "endDate": {"year": 1999, "month": 4, "day": 24},
    "episodes": 26,
    "duration": 24,
    "genres": ["Action", "Sci-Fi"],
    "averageScore": 86,
    "siteUrl": "https://anilist.co/anime/42",
    "bannerImage": "https://img.example/banner.jpg",
    "coverImage": {"extraLarge": None, "large": "https://img.example/cover.jpg", "medium": None},
    "studios": {"nodes": [{"name": "Sunrise"}]},
}

CHARACTER_PAYLOAD = {
    "id": 1,
    "name": {"full": "Spike Spiegel", "native": "スパイク・スピーゲル"},
    "image": {"large": "https://img.example/spike.jpg", "medium": None},
    "description": "A bounty hunter.",
    "gender": "Male",
    "age": "27",
    "favourites": 30000,
    "siteUrl": "https://anilist.co/character/1",
    "media": {"nodes": [{"id": 42, "type": "ANIME", "title": {"romaji": "Cowboy Bebop"}}]},
}

USER_PAYLOAD = {
    "id": 7,
    "name": "faye",
    "about": "<b>Hi</b> there",
    "avatar": {"large": "https://img.example/avatar.png"},
    "bannerImage": None,
    "siteUrl": "https://anilist.co/user/faye",
    "createdAt": 1577836800,
    "statistics": {
        "anime": {"count": 120, "meanScore": 78.5, "episodesWatched": 2400},
        "manga": {"count": 0, "meanScore": 0, "chaptersRead": 0},
    },
}


def make_entity(kind: EntityKind, entity_id: int, **data) -> Entity:
    payload = {"id": entity_id, **data}
    return Entity.from_payload(kind, payload)


def make_anime(entity_id: int = 42, title: str = "Cowboy Bebop") -> Entity:
    payload = {**ANIME_PAYLOAD, "id": entity_id, "title": {"romaji": title}}
    return Entity.from_payload(EntityKind.ANIME, payload)


# === Scripted remote source ===

class FakeSource:
    """Remote source double: records calls, serves `entities`, raises on demand."""

    def __init__(self) -> None:
        self.entities: dict[tuple[EntityKind, int], Entity] = {}
        self.search_results: dict[EntityKind, list[Entity]] = {}
        self.fetch_error: Exception | None = None
        self.search_error: Exception | None = None
        self.fetch_calls: list[tuple[EntityKind, int]] = []
        self.search_calls: list[tuple[EntityKind, str, int, int]] = []

    def add(self, entity: Entity) -> Entity:
        self.entities[(entity.kind, entity.id)] = entity
        return entity

    async def fetch_by_id(self, kind: EntityKind, entity_id: int) -> Entity:
        self.fetch_calls.append((kind, entity_id))
        if self.fetch_error is not None:
            raise self.fetch_error
        try:
            return self.entities[(kind, entity_id)]
        except KeyError:
            raise NotFoundError(kind.value, entity_id) from None

    async def search(self, kind: EntityKind, query: str, page: int, limit: int) -> list[Entity]:
        self.search_calls.append((kind, query, page, limit))
        if self.search_error is not None:
            raise self.search_error
        return list(self.search_results.get(kind, []))[:limit]


# === Fixtures ===

@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def catalog(source: FakeSource) -> CatalogAccessor:
    return CatalogAccessor(source, capacity=50)


@pytest.fixture
def i18n() -> I18n:
    loaded = I18n("pt")
    loaded.load()
    return loaded


@pytest_asyncio.fixture
async def db(tmp_path) -> Database:
    database = Database(str(tmp_path / "orochi.db"), "pt")
    await database.migrate()
    return database


@pytest.fixture
def bot() -> AsyncMock:
    mock = AsyncMock(spec=TelegramBot)
    mock.send_message.return_value = {"message_id": 99}
    mock.send_photo.return_value = {"message_id": 99}
    mock.get_chat_member.return_value = {"status": "member"}
    return mock


@pytest.fixture
def ctx(bot, catalog, db, i18n) -> BotContext:
    return BotContext(bot=bot, catalog=catalog, db=db, i18n=i18n)


# === Update builders ===

def message_update(text: str, chat_id: int = 777, chat_type: str = "private", user_id: int = 777) -> dict:
    return {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "text": text,
            "chat": {"id": chat_id, "type": chat_type},
            "from": {"id": user_id},
        },
    }


def callback_update(data: str, chat_id: int = 777, chat_type: str = "private", user_id: int = 777) -> dict:
    return {
        "update_id": 2,
        "callback_query": {
            "id": "cb1",
            "data": data,
            "from": {"id": user_id},
            "message": {"message_id": 11, "chat": {"id": chat_id, "type": chat_type}},
        },
    }


def inline_update(query: str, offset: str = "", user_id: int = 777) -> dict:
    return {
        "update_id": 3,
        "inline_query": {"id": "iq1", "query": query, "offset": offset, "from": {"id": user_id}},
    }
