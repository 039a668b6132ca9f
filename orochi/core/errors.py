"""
orochi/core/errors.py
Typed failures of the catalog layer. Handlers branch on these to pick the
message shown to the user; nothing here is retried.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for everything the catalog layer raises."""


class NotFoundError(CatalogError):
    """AniList could not resolve the requested id."""

    def __init__(self, kind: str, entity_id: int, reason: Optional[str] = None):
        self.kind      = kind
        self.entity_id = entity_id
        self.reason    = reason
        msg = f"{kind} {entity_id} not found"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class RemoteUnavailableError(NotFoundError):
    """
    Transport error, timeout, rate limit or 5xx while fetching by id.
    Subclasses NotFoundError so callers that only care about "no entity"
    keep working; the cause stays inspectable.
    """


class SearchUnavailableError(CatalogError):
    """A search call failed. An empty result list is NOT this."""

    def __init__(self, kind: str, query: str, reason: Optional[str] = None):
        self.kind   = kind
        self.query  = query
        self.reason = reason
        super().__init__(f"{kind} search for {query!r} failed" + (f" ({reason})" if reason else ""))
