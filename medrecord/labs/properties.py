from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from medrecord.utils.strings import search_optimize

_PROPERTIES_PATH = Path(__file__).resolve().parent / "data" / "lab_properties.json"


@dataclass(frozen=True)
class Property:
    key: str
    term: str
    loinc_code: str | None = None
    units: str | None = None
    type: str | None = None
    description: str | None = None
    category: str | None = None
    system: str | None = None
    high: str | None = None
    low: str | None = None


@lru_cache(maxsize=1)
def load_properties() -> tuple[Property, ...]:
    raw = json.loads(_PROPERTIES_PATH.read_text(encoding="utf-8"))
    items = [Property(**item) for item in raw]
    items.sort(key=lambda item: item.term.lower())
    return tuple(items)


@lru_cache(maxsize=1)
def _by_key() -> dict[str, Property]:
    return {item.key: item for item in load_properties()}


@lru_cache(maxsize=1)
def _by_loinc() -> dict[str, Property]:
    index: dict[str, Property] = {}
    for item in load_properties():
        if item.loinc_code and item.loinc_code != "unknown":
            index[item.loinc_code] = item
        else:
            index[item.key] = item
    return index


def property_by_key(key: str | None) -> Property | None:
    if not key:
        return None
    return _by_key().get(key.strip().lower())


def property_by_loinc(code: str | None) -> Property | None:
    """Look up by LOINC code; properties without one are indexed by key."""
    if not code:
        return None
    return _by_loinc().get(code.strip())


def search_properties(query: str, limit: int = 10) -> list[Property]:
    needle = search_optimize(query).strip()
    if not needle:
        return []
    hits = [
        item
        for item in load_properties()
        if needle in search_optimize(item.term) or needle in search_optimize(item.key)
    ]
    return hits[:limit]
