from __future__ import annotations

"""
Merge successive session analyses without reshuffling existing items.

Design intent:
- Give each item a stable id derived from its key text.
- Treat near-identical items (edit-distance ratio >= 0.8) as the same item.
- Keep previously seen items in their original order; append new ones.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

SIMILARITY_THRESHOLD = 0.8

MERGE_CATEGORIES: tuple[str, ...] = (
    "diagnosis",
    "treatment",
    "medication",
    "followUp",
    "clarifyingQuestions",
    "doctorRecommendations",
)


@dataclass
class MergedItem:
    id: str
    data: dict[str, Any]
    confidence: float | None = None
    is_new: bool = True
    is_updated: bool = False
    update_count: int = 0
    first_seen: float = field(default_factory=time.time)
    last_updated: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "data": self.data,
            "confidence": self.confidence,
            "isNew": self.is_new,
            "isUpdated": self.is_updated,
            "updateCount": self.update_count,
            "firstSeen": self.first_seen,
            "lastUpdated": self.last_updated,
        }


@dataclass
class MergeResult:
    items: list[MergedItem]
    has_new_items: bool
    has_updated_items: bool
    added: int
    updated: int

    def summary(self) -> dict[str, int]:
        return {"added": self.added, "updated": self.updated, "total": len(self.items)}


def key_text(item: Mapping[str, Any], category: str) -> str:
    def _field(name: str) -> str:
        return str(item.get(name, "") or "").lower()

    if category == "diagnosis":
        return _field("name")
    if category == "treatment":
        return _field("description")
    if category == "medication":
        return f"{item.get('name', '')} {item.get('dosage', '')}".lower()
    if category == "followUp":
        return _field("name")
    if category == "clarifyingQuestions":
        return _field("question")
    if category == "doctorRecommendations":
        return _field("recommendation")
    return json.dumps(item, sort_keys=True, ensure_ascii=False).lower()


def stable_id(item: Mapping[str, Any], category: str) -> str:
    content = key_text(item, category)
    # 32-bit string hash, so ids survive process restarts.
    value = 0
    for ch in content:
        value = ((value << 5) - value + ord(ch)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return f"{category}_{_base36(abs(value))}"


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def items_similar(first: Mapping[str, Any], second: Mapping[str, Any], category: str) -> bool:
    text1 = key_text(first, category)
    text2 = key_text(second, category)
    if not text1 or not text2:
        return False
    longer, shorter = (text1, text2) if len(text1) >= len(text2) else (text2, text1)
    distance = levenshtein_distance(longer, shorter)
    return (len(longer) - distance) / len(longer) >= SIMILARITY_THRESHOLD


def _confidence(item: Mapping[str, Any]) -> float | None:
    for name in ("probability", "confidence"):
        raw = item.get(name)
        if raw is None:
            continue
        try:
            return float(raw)
        except (TypeError, ValueError):
            continue
    return None


def merge_items(
    existing: Sequence[MergedItem],
    incoming: Sequence[Mapping[str, Any]],
    category: str,
) -> MergeResult:
    now = time.time()
    merged = [
        MergedItem(
            id=item.id,
            data=item.data,
            confidence=item.confidence,
            is_new=False,
            is_updated=False,
            update_count=item.update_count,
            first_seen=item.first_seen,
            last_updated=item.last_updated,
        )
        for item in existing
    ]
    added = 0
    updated = 0

    for raw in incoming:
        data = dict(raw)
        item_id = stable_id(data, category)
        match = next((item for item in merged if item.id == item_id), None)
        if match is None:
            match = next((item for item in merged if items_similar(item.data, data, category)), None)
        if match is None:
            merged.append(
                MergedItem(
                    id=item_id,
                    data=data,
                    confidence=_confidence(data),
                    first_seen=now,
                    last_updated=now,
                )
            )
            added += 1
            continue
        combined = {**match.data, **data}
        if match.data != combined:
            match.data = combined
            confidence = _confidence(data)
            if confidence is not None:
                match.confidence = confidence
            match.is_updated = True
            match.update_count += 1
            match.last_updated = now
            updated += 1

    return MergeResult(
        items=merged,
        has_new_items=added > 0,
        has_updated_items=updated > 0,
        added=added,
        updated=updated,
    )


def merge_analysis(
    previous: Mapping[str, Sequence[MergedItem]] | None,
    incoming: Mapping[str, Any],
) -> tuple[dict[str, list[MergedItem]], dict[str, dict[str, int]]]:
    """Merge every known category of `incoming` into `previous`; returns items and per-category summary."""
    previous = previous or {}
    merged: dict[str, list[MergedItem]] = {}
    summary: dict[str, dict[str, int]] = {}
    for category in MERGE_CATEGORIES:
        raw_items = incoming.get(category)
        existing = list(previous.get(category, []))
        if not isinstance(raw_items, list):
            merged[category] = existing
            continue
        result = merge_items(existing, [item for item in raw_items if isinstance(item, Mapping)], category)
        merged[category] = result.items
        summary[category] = result.summary()
    return merged, summary
