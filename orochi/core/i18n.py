"""
orochi/core/i18n.py
Locale strings loaded from orochi/locales/<code>.json.

Placeholders use ${name} and are filled from keyword arguments.
The locale is passed per call: the loaded tables are read-only after load(),
so one I18n instance is shared by every concurrent update.
"""

import json
import logging
import os
from typing import Any, Callable

from orochi.core.config import DEFAULT_LOCALE, LOCALES_DIR

log = logging.getLogger("i18n")

KEY_NOT_FOUND = "KEY_NOT_FOUND"


class I18n:
    def __init__(self, default_locale: str = DEFAULT_LOCALE, path: str = LOCALES_DIR) -> None:
        self.default_locale = default_locale
        self._path    = path
        self._locales: dict[str, dict[str, str]] = {}

    def load(self) -> None:
        """Read every *.json file in the locales directory."""
        locales: dict[str, dict[str, str]] = {}
        for name in sorted(os.listdir(self._path)):
            stem, ext = os.path.splitext(name)
            if ext != ".json":
                continue
            with open(os.path.join(self._path, name), encoding="utf-8") as fh:
                locales[stem] = json.load(fh)
        if self.default_locale not in locales:
            raise RuntimeError(f"default locale {self.default_locale!r} not found in {self._path}")
        self._locales = locales
        log.debug(f"locales loaded: {list(locales)}")

    def locales(self) -> list[str]:
        return sorted(self._locales)

    def has_locale(self, locale: str) -> bool:
        return locale in self._locales

    def translate(self, key: str, locale: str | None = None, **args: Any) -> str:
        table = self._locales.get(locale or self.default_locale) or self._locales[self.default_locale]
        text = table.get(key)
        if text is None:
            # Fall back to the default locale before giving up
            text = self._locales[self.default_locale].get(key, KEY_NOT_FOUND)
        for name, value in args.items():
            text = text.replace(f"${{{name}}}", str(value))
        return text

    def translator(self, locale: str) -> Callable[..., str]:
        """t(key, **args) bound to one locale, as used by handlers and formatters."""
        def t(key: str, **args: Any) -> str:
            return self.translate(key, locale, **args)
        return t
