"""
orochi/core/catalog.py
═══════════════════════════════════════════════════════════════════════════
Cache-first access to the AniList catalog.
  • One BoundedCache per entity kind → ids never collide across kinds
  • get_<kind>(id): hit → no remote call; miss → fetch, store, return
  • Failed fetches raise and are NEVER stored → no negative caching
  • search_<kind>(...) always goes to the remote source, never cached
  • Built once in the app lifespan and handed to handlers via BotContext
═══════════════════════════════════════════════════════════════════════════
"""

import logging
from typing import Any, Protocol

from orochi.core.cache import BoundedCache
from orochi.core.config import CACHE_CAPACITY
from orochi.core.models import Entity, EntityKind

log = logging.getLogger("catalog")


class RemoteSource(Protocol):
    async def fetch_by_id(self, kind: EntityKind, entity_id: int) -> Entity: ...

    async def search(self, kind: EntityKind, query: str, page: int, limit: int) -> list[Entity]: ...


class CatalogAccessor:
    def __init__(self, source: RemoteSource, capacity: int = CACHE_CAPACITY) -> None:
        self._source = source
        self._caches: dict[EntityKind, BoundedCache[int, Entity]] = {
            kind: BoundedCache(capacity, name=f"{kind.value}_cache") for kind in EntityKind
        }

    def cache(self, kind: EntityKind) -> BoundedCache[int, Entity]:
        return self._caches[kind]

    async def get(self, kind: EntityKind, entity_id: int) -> Entity:
        """
        Entity `entity_id` of `kind`, from cache when possible.
        Raises NotFoundError / RemoteUnavailableError from the source.
        """
        async def fetch() -> Entity:
            log.debug(f"{kind.value} {entity_id}: cache miss, fetching")
            return await self._source.fetch_by_id(kind, entity_id)

        return await self._caches[kind].get_or_insert_with(entity_id, fetch)

    async def search(self, kind: EntityKind, query: str, page: int = 1, limit: int = 10) -> list[Entity]:
        """Pass-through search. Raises SearchUnavailableError; [] means no matches."""
        results = await self._source.search(kind, query, max(page, 1), limit)
        log.debug(f"{kind.value} search {query!r} p{page}: {len(results)} results")
        return results

    # ── Per-kind surface used by the handlers ─────────────────────────────────

    async def get_anime(self, entity_id: int) -> Entity:
        return await self.get(EntityKind.ANIME, entity_id)

    async def get_manga(self, entity_id: int) -> Entity:
        return await self.get(EntityKind.MANGA, entity_id)

    async def get_character(self, entity_id: int) -> Entity:
        return await self.get(EntityKind.CHARACTER, entity_id)

    async def get_user(self, entity_id: int) -> Entity:
        return await self.get(EntityKind.USER, entity_id)

    async def search_anime(self, query: str, page: int = 1, limit: int = 10) -> list[Entity]:
        return await self.search(EntityKind.ANIME, query, page, limit)

    async def search_manga(self, query: str, page: int = 1, limit: int = 10) -> list[Entity]:
        return await self.search(EntityKind.MANGA, query, page, limit)

    async def search_character(self, query: str, page: int = 1, limit: int = 10) -> list[Entity]:
        return await self.search(EntityKind.CHARACTER, query, page, limit)

    async def search_user(self, query: str, page: int = 1, limit: int = 10) -> list[Entity]:
        return await self.search(EntityKind.USER, query, page, limit)

    def summary(self) -> dict[str, Any]:
        """Per-kind cache metadata for /health."""
        return {kind.value: cache.summary() for kind, cache in self._caches.items()}
