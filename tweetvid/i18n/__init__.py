import json
import logging
import os
from typing import Dict, Iterator, Optional

logger = logging.getLogger(__name__)

LOCALES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "locales")


def _flatten(tree: dict, prefix: str = "") -> Iterator[tuple]:
    for name, value in tree.items():
        key = f"{prefix}{name}"
        if isinstance(value, dict):
            yield from _flatten(value, f"{key}.")
        else:
            yield key, str(value)


class I18n:
    """
    User-facing messages keyed by dotted names, e.g. ``error.rate_limit``.

    Each ``locales/<code>.json`` file is flattened once at load time. A key
    missing from the requested locale falls back to the default locale, then
    to English, then to the key itself.
    """

    def __init__(self, default_locale: str = "en", locales_dir: str = LOCALES_DIR):
        self.default_locale = default_locale
        self.catalogs: Dict[str, Dict[str, str]] = {}
        self.load_locales(locales_dir)

    def load_locales(self, locales_dir: str) -> None:
        if not os.path.isdir(locales_dir):
            logger.warning(f"Locales directory not found at {locales_dir}")
            return

        for filename in sorted(os.listdir(locales_dir)):
            code, ext = os.path.splitext(filename)
            if ext != ".json":
                continue
            try:
                with open(os.path.join(locales_dir, filename), "r", encoding="utf-8") as f:
                    self.catalogs[code] = dict(_flatten(json.load(f)))
            except (OSError, ValueError) as e:
                logger.error(f"Error loading locale {code}: {e}")

    def _lookup(self, key: str, locale: Optional[str]) -> str:
        for code in (locale, self.default_locale, "en"):
            if code and key in self.catalogs.get(code, {}):
                return self.catalogs[code][key]
        return key

    def get(self, key: str, locale: Optional[str] = None, **kwargs) -> str:
        """Message for ``key`` in ``locale``, formatted with ``kwargs``"""
        template = self._lookup(key, locale)
        if not kwargs:
            return template
        try:
            return template.format(**kwargs)
        except (KeyError, IndexError, ValueError):
            return template


i18n = I18n()
