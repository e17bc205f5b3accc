from __future__ import annotations

"""
Sort-key builders for enum-ordered and numeric-property lists.

Items may be plain values or mappings; `prop` selects the mapping field.
"""

from typing import Any, Callable, Iterable


def _pick(item: Any, prop: str | None) -> Any:
    if prop is None:
        return item
    if isinstance(item, dict):
        return item.get(prop)
    return getattr(item, prop, None)


def sort_key_for_enum(values: Iterable[Any], prop: str | None = None) -> Callable[[Any], int]:
    ranks: dict[Any, int] = {}
    for index, value in enumerate(values):
        key = getattr(value, "value", value)
        ranks.setdefault(key, index)
    unknown_rank = len(ranks)

    def _key(item: Any) -> int:
        return ranks.get(_pick(item, prop), unknown_rank)

    return _key


def sort_key_by_property(prop: str) -> Callable[[Any], Any]:
    def _key(item: Any) -> Any:
        return _pick(item, prop)

    return _key
