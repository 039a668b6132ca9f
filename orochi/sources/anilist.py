"""
orochi/sources/anilist.py
═══════════════════════════════════════════════════════════════════════════════
AniList GraphQL API — the only remote catalog source.

Provides, for anime / manga / characters / users:
  • fetch_by_id(kind, id)                → one Entity, or a typed error
  • search(kind, query, page, limit)     → list of Entities (may be empty)

Failure mapping:
  • HTTP 404 / GraphQL "Not Found."      → NotFoundError
  • other 4xx (bad id, validation)       → NotFoundError (reason = HTTP code)
  • transport error, timeout, 429, 5xx   → RemoteUnavailableError
  • any search failure                   → SearchUnavailableError
    (an empty page is a normal, successful result)

Nothing here caches or retries. CatalogAccessor sits in front of this.
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from typing import Any, Callable

import httpx

from orochi.core.config import ANILIST_GRAPHQL
from orochi.core.errors import NotFoundError, RemoteUnavailableError, SearchUnavailableError
from orochi.core.http_client import anilist_client
from orochi.core.models import Entity, EntityKind

log = logging.getLogger("anilist")


# ── GraphQL fragments ─────────────────────────────────────────────────────────

_MEDIA_FIELDS = """
    id
    idMal
    type
    format
    status
    title { romaji english native }
    description(asHtml: false)
    startDate { year month day }
    endDate { year month day }
    season
    seasonYear
    episodes
    duration
    chapters
    volumes
    genres
    averageScore
    siteUrl
    bannerImage
    coverImage { extraLarge large medium }
    studios(isMain: true) { nodes { name } }
"""

_CHARACTER_FIELDS = """
    id
    name { full native }
    image { large medium }
    description(asHtml: false)
    gender
    age
    favourites
    siteUrl
    media(perPage: 5, sort: POPULARITY_DESC) {
        nodes { id type title { romaji } }
    }
"""

_USER_FIELDS = """
    id
    name
    about(asHtml: false)
    avatar { large medium }
    bannerImage
    siteUrl
    createdAt
    statistics {
        anime { count meanScore episodesWatched }
        manga { count meanScore chaptersRead }
    }
"""

# kind → by-id root field, Page list field, selection set, media type filter
_QUERIES: dict[EntityKind, dict[str, str]] = {
    EntityKind.ANIME: {
        "root": "Media", "list": "media", "fields": _MEDIA_FIELDS, "media_type": "ANIME",
    },
    EntityKind.MANGA: {
        "root": "Media", "list": "media", "fields": _MEDIA_FIELDS, "media_type": "MANGA",
    },
    EntityKind.CHARACTER: {
        "root": "Character", "list": "characters", "fields": _CHARACTER_FIELDS,
    },
    EntityKind.USER: {
        "root": "User", "list": "users", "fields": _USER_FIELDS,
    },
}


def _by_id_query(kind: EntityKind) -> str:
    q = _QUERIES[kind]
    if "media_type" in q:
        return (
            "query ($id: Int) { "
            f"Media(id: $id, type: {q['media_type']}) {{ {q['fields']} }} }}"
        )
    return f"query ($id: Int) {{ {q['root']}(id: $id) {{ {q['fields']} }} }}"


def _search_query(kind: EntityKind) -> str:
    q = _QUERIES[kind]
    if "media_type" in q:
        inner = f"media(search: $search, type: {q['media_type']}, sort: SEARCH_MATCH)"
    elif kind is EntityKind.CHARACTER:
        inner = "characters(search: $search, sort: SEARCH_MATCH)"
    else:
        inner = "users(search: $search, sort: SEARCH_MATCH)"
    return (
        "query ($search: String, $page: Int, $perPage: Int) { "
        "Page(page: $page, perPage: $perPage) { "
        f"{inner} {{ {q['fields']} }} }} }}"
    )


def _is_not_found(body: dict) -> bool:
    for err in body.get("errors") or []:
        if err.get("status") == 404 or str(err.get("message", "")).startswith("Not Found"):
            return True
    return False


def _is_transient(status: int) -> bool:
    return status == 429 or status >= 500


# ── Source ────────────────────────────────────────────────────────────────────

class AniListSource:
    """Remote source contract consumed by CatalogAccessor."""

    def __init__(
        self,
        client: Callable[[], httpx.AsyncClient] = anilist_client,
        url: str = ANILIST_GRAPHQL,
    ) -> None:
        self._client = client
        self._url    = url

    async def _post(self, query: str, variables: dict[str, Any]) -> tuple[int, dict]:
        resp = await self._client().post(self._url, json={"query": query, "variables": variables})
        try:
            body = resp.json()
        except ValueError:
            body = {}
        return resp.status_code, body if isinstance(body, dict) else {}

    async def fetch_by_id(self, kind: EntityKind, entity_id: int) -> Entity:
        try:
            status, body = await self._post(_by_id_query(kind), {"id": entity_id})
        except httpx.HTTPError as ex:
            log.warning(f"{kind.value} {entity_id}: transport error {ex!r}")
            raise RemoteUnavailableError(kind.value, entity_id, type(ex).__name__) from ex

        if status == 404 or _is_not_found(body):
            raise NotFoundError(kind.value, entity_id)
        if _is_transient(status):
            log.warning(f"{kind.value} {entity_id}: AniList returned HTTP {status}")
            raise RemoteUnavailableError(kind.value, entity_id, f"HTTP {status}")
        if status != 200:
            raise NotFoundError(kind.value, entity_id, f"HTTP {status}")

        node = (body.get("data") or {}).get(_QUERIES[kind]["root"])
        if not node:
            raise NotFoundError(kind.value, entity_id)
        return Entity.from_payload(kind, node)

    async def search(self, kind: EntityKind, query: str, page: int = 1, limit: int = 10) -> list[Entity]:
        variables = {"search": query, "page": page, "perPage": limit}
        try:
            status, body = await self._post(_search_query(kind), variables)
        except httpx.HTTPError as ex:
            log.warning(f"{kind.value} search {query!r}: transport error {ex!r}")
            raise SearchUnavailableError(kind.value, query, type(ex).__name__) from ex

        if status != 200:
            log.warning(f"{kind.value} search {query!r}: AniList returned HTTP {status}")
            raise SearchUnavailableError(kind.value, query, f"HTTP {status}")

        items = ((body.get("data") or {}).get("Page") or {}).get(_QUERIES[kind]["list"])
        if items is None:
            raise SearchUnavailableError(kind.value, query, "malformed response")
        return [Entity.from_payload(kind, item) for item in items if item]
