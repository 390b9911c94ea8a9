"""Narrative locales: display zones, UTC offsets and localized text tables."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from balance_log_analyzer.aggregation import humanize_type
from balance_log_analyzer.config import UNKNOWN_TYPE

DEFAULT_LANG = "en"
COIN_SWAP_MIX = "COIN_SWAP_MIX"
AUTO_EXCHANGE_MIX = "AUTO_EXCHANGE_MIX"
_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True, slots=True)
class LangConfig:
    """Display zone label and UTC offset in hours for one language."""

    label: str
    offset: float


class Locales:
    """Singleton class holding locale tables loaded from package data."""

    _path = Path(__file__).with_name("locales.yaml")
    _tables: dict[str, dict[str, Any]] | None = None

    @classmethod
    def tables(cls) -> dict[str, dict[str, Any]]:
        """Return raw locale tables, loading them on first use."""
        if cls._tables is None:
            with cls._path.open(encoding="utf-8") as stream:
                cls._tables = yaml.safe_load(stream)
        return cls._tables

    @classmethod
    def languages(cls) -> list[str]:
        """Return supported language codes in declaration order."""
        return list(cls.tables())

    @classmethod
    def resolve(cls, lang: str) -> str:
        """Return lang when supported, else the default language."""
        return lang if lang in cls.tables() else DEFAULT_LANG

    @classmethod
    def config(cls, lang: str) -> LangConfig:
        """Return zone label and offset for language."""
        entry = cls.tables()[cls.resolve(lang)]
        return LangConfig(label=str(entry["label"]), offset=float(entry["offset"]))

    @classmethod
    def texts(cls, lang: str) -> dict[str, str]:
        """Return text table for language, filled key-by-key from English."""
        tables = cls.tables()
        merged = dict(tables[DEFAULT_LANG]["texts"])
        merged.update(tables[cls.resolve(lang)].get("texts") or {})
        return merged


def text(lang: str, key: str) -> str:
    """Return one localized text, or the key itself when no language defines it."""
    return Locales.texts(lang).get(key, key)


def render(template: str, **values: str) -> str:
    """Fill '{NAME}' placeholders; unknown names render as empty text."""
    return _PLACEHOLDER_RE.sub(lambda match: values.get(match.group(1), ""), template)


def friendly_label(type_name: str, lang: str) -> str:
    """Return localized display label for a balance-log type."""
    if not type_name:
        return UNKNOWN_TYPE
    texts = Locales.texts(lang)
    if "COIN_SWAP" in type_name:
        return texts[COIN_SWAP_MIX]
    if type_name == "AUTO_EXCHANGE":
        return texts[AUTO_EXCHANGE_MIX]
    if type_name in texts and type_name.isupper():
        return texts[type_name]
    return humanize_type(type_name)
