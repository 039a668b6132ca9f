"""Tests for core/database.py — full functional tests (stdlib sqlite3)."""

from __future__ import annotations

import pytest


class TestDatabase:
    @pytest.mark.asyncio
    async def test_migrate_is_idempotent(self, db):
        await db.migrate()
        assert await db.get_user(1) is None
        assert await db.get_group(-100) is None

    @pytest.mark.asyncio
    async def test_ensure_chat_creates_user_with_default_language(self, db):
        assert await db.ensure_chat(777, is_private=True) == "pt"
        user = await db.get_user(777)
        assert user is not None
        assert user.language_code == "pt"
        assert user.anilist_token is None
        assert await db.get_group(777) is None

    @pytest.mark.asyncio
    async def test_ensure_chat_keeps_existing_row(self, db):
        await db.ensure_chat(-100, is_private=False)
        await db.set_language(-100, False, "en")
        assert await db.ensure_chat(-100, is_private=False) == "en"

    @pytest.mark.asyncio
    async def test_set_language(self, db):
        await db.ensure_chat(777, is_private=True)
        assert await db.set_language(777, True, "en") is True
        assert (await db.get_user(777)).language_code == "en"

    @pytest.mark.asyncio
    async def test_set_language_unknown_chat(self, db):
        assert await db.set_language(123, True, "en") is False
