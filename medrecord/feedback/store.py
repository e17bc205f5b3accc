from __future__ import annotations

import logging
import math
import random
import string
import time
from collections import OrderedDict
from threading import Lock
from typing import Any

from medrecord.internal_core.contracts import FeedbackData

logger = logging.getLogger(__name__)

FEEDBACK_VALUES: tuple[str, ...] = ("approved", "rejected", "neutral")
_ID_ALPHABET = string.digits + string.ascii_lowercase


def _new_feedback_id(now_ms: int) -> str:
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"feedback_{now_ms}_{suffix}"


def _describe(content: Any) -> str:
    if isinstance(content, dict):
        for key in ("description", "diagnosis", "question"):
            value = content.get(key)
            if value:
                return str(value)
    return "suggestion"


class FeedbackStore:
    """In-memory feedback keyed by item type. Unbounded; a process restart clears it."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._entries: OrderedDict[str, list[FeedbackData]] = OrderedDict()

    def add(self, data: FeedbackData) -> str:
        now_ms = int(time.time() * 1000)
        stored = data.model_copy(update={"timestamp": now_ms})
        with self._lock:
            self._entries.setdefault(stored.item_type, []).append(stored)
        logger.info(
            "feedback recorded item_type=%s feedback=%s",
            stored.item_type,
            stored.feedback,
        )
        return _new_feedback_id(now_ms)

    def entries(self, item_type: str) -> list[FeedbackData]:
        with self._lock:
            return list(self._entries.get(item_type, []))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def analytics(self) -> dict[str, Any]:
        with self._lock:
            snapshot = {key: list(values) for key, values in self._entries.items()}

        by_feedback = {value: 0 for value in FEEDBACK_VALUES}
        by_type: dict[str, dict[str, int]] = {}
        approval_rates: dict[str, int] = {}
        total_feedback = 0

        for item_type, entries in snapshot.items():
            counts = {value: sum(1 for e in entries if e.feedback == value) for value in FEEDBACK_VALUES}
            by_type[item_type] = {"total": len(entries), **counts}
            total_feedback += len(entries)
            for value, count in counts.items():
                by_feedback[value] += count
            approval_rates[item_type] = (
                math.floor(counts["approved"] / len(entries) * 100 + 0.5) if entries else 0
            )

        return {
            "totalFeedback": total_feedback,
            "byType": by_type,
            "byFeedback": by_feedback,
            "approvalRates": approval_rates,
        }

    def feedback_for_ai(self, item_type: str | None = None) -> str:
        """Prompt-ready summary of past verdicts, per type when history exists."""
        if item_type:
            entries = self.entries(item_type)
            approved = [e for e in entries if e.feedback == "approved"]
            rejected = [e for e in entries if e.feedback == "rejected"]
            if approved or rejected:
                approved_patterns = ", ".join(_describe(e.item_content) for e in approved[-3:])
                rejected_patterns = ", ".join(_describe(e.item_content) for e in rejected[-3:])
                return (
                    f"Doctor feedback history for {item_type}:\n"
                    f"- Approved suggestions: {len(approved)}\n"
                    f"- Rejected suggestions: {len(rejected)}\n"
                    f"Recent approved patterns: {approved_patterns}\n"
                    f"Recent rejected patterns: {rejected_patterns}"
                )

        analytics = self.analytics()
        rates = ", ".join(f"{key}: {rate}%" for key, rate in analytics["approvalRates"].items())
        return (
            "Overall doctor feedback patterns:\n"
            f"- Total feedback entries: {analytics['totalFeedback']}\n"
            f"- Overall approval rates: {rates}\n"
            "- Doctor prefers suggestions that align with previous approved patterns"
        )
