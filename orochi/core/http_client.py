"""
orochi/core/http_client.py
Shared async httpx clients.
  • anilist_client()  → JSON client for the AniList GraphQL endpoint
  • telegram_client() → client for the Telegram Bot API
Timeouts live here: the cache in front of AniList enforces none.
"""

import httpx

_anilist_client:  httpx.AsyncClient | None = None
_telegram_client: httpx.AsyncClient | None = None

_LIMITS  = httpx.Limits(max_connections=10, max_keepalive_connections=5)
_TIMEOUT = httpx.Timeout(15.0, connect=10.0)

ANILIST_HEADERS = {
    "Content-Type": "application/json",
    "Accept":       "application/json",
}


def anilist_client() -> httpx.AsyncClient:
    global _anilist_client
    if _anilist_client is None or _anilist_client.is_closed:
        _anilist_client = httpx.AsyncClient(
            headers=ANILIST_HEADERS,
            timeout=_TIMEOUT,
            follow_redirects=True,
            limits=_LIMITS,
        )
    return _anilist_client


def telegram_client() -> httpx.AsyncClient:
    global _telegram_client
    if _telegram_client is None or _telegram_client.is_closed:
        _telegram_client = httpx.AsyncClient(
            timeout=_TIMEOUT,
            limits=_LIMITS,
        )
    return _telegram_client


async def close_all() -> None:
    for c in [_anilist_client, _telegram_client]:
        if c and not c.is_closed:
            await c.aclose()
