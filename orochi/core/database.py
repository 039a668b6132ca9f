"""
orochi/core/database.py
═══════════════════════════════════════════════════════════════════════════
Per-chat preferences in SQLite.
  • users  → private chats (language + linked AniList account columns)
  • groups → group chats (language only)
  • Tables are created on startup with CREATE TABLE IF NOT EXISTS
  • Every public method is async; the blocking sqlite3 work runs in a
    worker thread, one short-lived connection per call
═══════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from orochi.core.config import DATABASE_PATH, DEFAULT_LOCALE

log = logging.getLogger("database")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id            INTEGER PRIMARY KEY,
    anilist_id    INTEGER UNIQUE,
    anilist_token TEXT,
    language_code TEXT    NOT NULL DEFAULT 'pt',
    created_at    TEXT    NOT NULL,
    updated_at    TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS users_timestamps ON users(created_at DESC, updated_at DESC);

CREATE TABLE IF NOT EXISTS groups (
    id            INTEGER PRIMARY KEY,
    language_code TEXT    NOT NULL DEFAULT 'pt',
    created_at    TEXT    NOT NULL,
    updated_at    TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS groups_timestamps ON groups(created_at DESC, updated_at DESC);
"""


@dataclass(frozen=True)
class User:
    id:            int
    anilist_id:    Optional[int]
    anilist_token: Optional[str]
    language_code: str
    created_at:    str
    updated_at:    str


@dataclass(frozen=True)
class Group:
    id:            int
    language_code: str
    created_at:    str
    updated_at:    str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _table(is_private: bool) -> str:
    return "users" if is_private else "groups"


class Database:
    def __init__(self, path: str = DATABASE_PATH, default_locale: str = DEFAULT_LOCALE) -> None:
        self._path = path
        self._default_locale = default_locale

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        return conn

    # ── blocking helpers (run via asyncio.to_thread) ──────────────────────────

    def _migrate(self) -> None:
        conn = self._connect()
        try:
            conn.executescript(_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def _fetch(self, table: str, chat_id: int) -> Optional[sqlite3.Row]:
        conn = self._connect()
        try:
            return conn.execute(f"SELECT * FROM {table} WHERE id = ?", (chat_id,)).fetchone()
        finally:
            conn.close()

    def _ensure(self, table: str, chat_id: int) -> str:
        now = _now()
        conn = self._connect()
        try:
            cur = conn.execute(
                f"INSERT OR IGNORE INTO {table} (id, language_code, created_at, updated_at) "
                "VALUES (?, ?, ?, ?)",
                (chat_id, self._default_locale, now, now),
            )
            conn.commit()
            if cur.rowcount:
                log.debug(f"created {table[:-1]} {chat_id}")
            row = conn.execute(f"SELECT language_code FROM {table} WHERE id = ?", (chat_id,)).fetchone()
            return row["language_code"]
        finally:
            conn.close()

    def _set_language(self, table: str, chat_id: int, code: str) -> bool:
        conn = self._connect()
        try:
            cur = conn.execute(
                f"UPDATE {table} SET language_code = ?, updated_at = ? WHERE id = ?",
                (code, _now(), chat_id),
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    # ── async API ─────────────────────────────────────────────────────────────

    async def migrate(self) -> None:
        log.debug("migrating the database...")
        await asyncio.to_thread(self._migrate)
        log.debug("database migrated")

    async def get_user(self, user_id: int) -> Optional[User]:
        row = await asyncio.to_thread(self._fetch, "users", user_id)
        return User(**dict(row)) if row else None

    async def get_group(self, group_id: int) -> Optional[Group]:
        row = await asyncio.to_thread(self._fetch, "groups", group_id)
        return Group(**dict(row)) if row else None

    async def ensure_chat(self, chat_id: int, is_private: bool) -> str:
        """Create the chat row on first contact; return its language code."""
        return await asyncio.to_thread(self._ensure, _table(is_private), chat_id)

    async def set_language(self, chat_id: int, is_private: bool, code: str) -> bool:
        """False when the chat has no row yet."""
        updated = await asyncio.to_thread(self._set_language, _table(is_private), chat_id, code)
        if not updated:
            log.warning(f"{_table(is_private)[:-1]} not found: {chat_id}")
        return updated
