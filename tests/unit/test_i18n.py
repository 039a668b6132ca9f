"""Tests for core/i18n.py."""

from __future__ import annotations

import json

import pytest

from orochi.core.i18n import KEY_NOT_FOUND, I18n


@pytest.fixture
def locales_dir(tmp_path):
    (tmp_path / "pt.json").write_text(json.dumps({"_NAME": "Português", "hello": "Olá ${name}", "only_pt": "sim"}))
    (tmp_path / "en.json").write_text(json.dumps({"_NAME": "English", "hello": "Hello ${name}"}))
    (tmp_path / "notes.txt").write_text("ignored")
    return tmp_path


class TestI18n:
    def test_loads_json_files_only(self, locales_dir):
        i18n = I18n("pt", str(locales_dir))
        i18n.load()
        assert i18n.locales() == ["en", "pt"]
        assert i18n.has_locale("en")
        assert not i18n.has_locale("notes")

    def test_translate_with_args(self, locales_dir):
        i18n = I18n("pt", str(locales_dir))
        i18n.load()
        assert i18n.translate("hello", "en", name="Spike") == "Hello Spike"
        assert i18n.translate("hello", "pt", name="Spike") == "Olá Spike"

    def test_unknown_locale_uses_default(self, locales_dir):
        i18n = I18n("pt", str(locales_dir))
        i18n.load()
        assert i18n.translate("hello", "ja", name="x") == "Olá x"

    def test_missing_key(self, locales_dir):
        i18n = I18n("pt", str(locales_dir))
        i18n.load()
        assert i18n.translate("only_pt", "en") == "sim"
        assert i18n.translate("nope", "en") == KEY_NOT_FOUND

    def test_translator_is_bound_to_locale(self, locales_dir):
        i18n = I18n("pt", str(locales_dir))
        i18n.load()
        t = i18n.translator("en")
        assert t("_NAME") == "English"

    def test_missing_default_locale_fails_loudly(self, locales_dir):
        i18n = I18n("es", str(locales_dir))
        with pytest.raises(RuntimeError):
            i18n.load()

    def test_bundled_locales_share_keys(self, i18n):
        en = {k for k in i18n._locales["en"]}
        pt = {k for k in i18n._locales["pt"]}
        assert en == pt
