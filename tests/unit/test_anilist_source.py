"""Tests for sources/anilist.py — GraphQL wire + failure mapping (httpx.MockTransport)."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import ANIME_PAYLOAD, CHARACTER_PAYLOAD, USER_PAYLOAD
from orochi.core.errors import NotFoundError, RemoteUnavailableError, SearchUnavailableError
from orochi.core.models import EntityKind
from orochi.sources.anilist import AniListSource

URL = "https://graphql.test"


def make_source(handler) -> AniListSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AniListSource(client=lambda: client, url=URL)


def reply(status: int, body: dict) -> callable:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(status, json=body)

    handler.seen = seen
    return handler


class TestFetchById:
    @pytest.mark.asyncio
    async def test_anime_success(self):
        handler = reply(200, {"data": {"Media": ANIME_PAYLOAD}})
        entity = await make_source(handler).fetch_by_id(EntityKind.ANIME, 42)

        assert entity.kind is EntityKind.ANIME
        assert entity.id == 42
        assert entity["title"]["romaji"] == "Cowboy Bebop"
        sent = handler.seen[0]
        assert sent["variables"] == {"id": 42}
        assert "type: ANIME" in sent["query"]

    @pytest.mark.asyncio
    async def test_manga_query_filters_type(self):
        handler = reply(200, {"data": {"Media": {**ANIME_PAYLOAD, "type": "MANGA"}}})
        entity = await make_source(handler).fetch_by_id(EntityKind.MANGA, 42)
        assert entity.kind is EntityKind.MANGA
        assert "type: MANGA" in handler.seen[0]["query"]

    @pytest.mark.asyncio
    async def test_character_and_user_roots(self):
        char = await make_source(reply(200, {"data": {"Character": CHARACTER_PAYLOAD}})).fetch_by_id(
            EntityKind.CHARACTER, 1
        )
        user = await make_source(reply(200, {"data": {"User": USER_PAYLOAD}})).fetch_by_id(EntityKind.USER, 7)
        assert char["name"]["full"] == "Spike Spiegel"
        assert user["name"] == "faye"

    @pytest.mark.asyncio
    async def test_payload_is_read_only(self):
        entity = await make_source(reply(200, {"data": {"Media": ANIME_PAYLOAD}})).fetch_by_id(EntityKind.ANIME, 42)
        with pytest.raises(TypeError):
            entity.data["title"]["romaji"] = "changed"
        assert entity["genres"] == ("Action", "Sci-Fi")

    @pytest.mark.asyncio
    async def test_404_is_not_found(self):
        body = {"errors": [{"message": "Not Found.", "status": 404}], "data": {"Media": None}}
        with pytest.raises(NotFoundError) as exc:
            await make_source(reply(404, body)).fetch_by_id(EntityKind.ANIME, 999999)
        assert not isinstance(exc.value, RemoteUnavailableError)
        assert exc.value.entity_id == 999999

    @pytest.mark.asyncio
    async def test_null_node_is_not_found(self):
        with pytest.raises(NotFoundError):
            await make_source(reply(200, {"data": {"User": None}})).fetch_by_id(EntityKind.USER, 1)

    @pytest.mark.asyncio
    async def test_bad_request_is_not_found(self):
        body = {"errors": [{"message": "Validation error", "status": 400}]}
        with pytest.raises(NotFoundError) as exc:
            await make_source(reply(400, body)).fetch_by_id(EntityKind.ANIME, 1)
        assert exc.value.reason == "HTTP 400"

    @pytest.mark.parametrize("status", [429, 500, 503])
    @pytest.mark.asyncio
    async def test_transient_status_is_remote_unavailable(self, status):
        with pytest.raises(RemoteUnavailableError):
            await make_source(reply(status, {})).fetch_by_id(EntityKind.ANIME, 1)

    @pytest.mark.asyncio
    async def test_transport_error_is_remote_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteUnavailableError) as exc:
            await make_source(handler).fetch_by_id(EntityKind.CHARACTER, 1)
        assert exc.value.reason == "ConnectError"
        # Still a NotFoundError for callers that only branch on that
        assert isinstance(exc.value, NotFoundError)


class TestSearch:
    @pytest.mark.asyncio
    async def test_results_are_entities(self):
        second = {**ANIME_PAYLOAD, "id": 43}
        handler = reply(200, {"data": {"Page": {"media": [ANIME_PAYLOAD, second]}}})
        results = await make_source(handler).search(EntityKind.ANIME, "bebop", 2, 6)

        assert [e.id for e in results] == [42, 43]
        assert handler.seen[0]["variables"] == {"search": "bebop", "page": 2, "perPage": 6}

    @pytest.mark.asyncio
    async def test_empty_page_is_empty_list(self):
        handler = reply(200, {"data": {"Page": {"characters": []}}})
        assert await make_source(handler).search(EntityKind.CHARACTER, "zzz", 1, 10) == []

    @pytest.mark.asyncio
    async def test_http_error_is_search_unavailable(self):
        with pytest.raises(SearchUnavailableError) as exc:
            await make_source(reply(500, {})).search(EntityKind.USER, "faye", 1, 10)
        assert exc.value.reason == "HTTP 500"

    @pytest.mark.asyncio
    async def test_malformed_body_is_search_unavailable(self):
        with pytest.raises(SearchUnavailableError):
            await make_source(reply(200, {"data": None})).search(EntityKind.MANGA, "x", 1, 10)

    @pytest.mark.asyncio
    async def test_timeout_is_search_unavailable(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(SearchUnavailableError):
            await make_source(handler).search(EntityKind.ANIME, "bebop", 1, 10)
