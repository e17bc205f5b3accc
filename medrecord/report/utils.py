from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

import numpy as np

from medrecord.labs.properties import property_by_key, property_by_loinc

TrendStatus = Literal["increasing", "decreasing", "stable"]

TREND_WINDOW = 5
STABLE_RELATIVE_SLOPE = 0.01

_RANGE_RE = re.compile(r"(-?\d+(?:[.,]\d+)?)\s*[-–]\s*(-?\d+(?:[.,]\d+)?)")


@dataclass
class LabItem:
    time: str
    value: float
    test: Optional[str] = None
    unit: Optional[str] = None
    reference: Optional[str] = None
    reference_low: Optional[float] = None
    reference_high: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "time": self.time,
            "value": self.value,
            "test": self.test,
            "unit": self.unit,
            "reference": self.reference,
        }
        if self.reference_low is not None and self.reference_high is not None:
            out["referenceRange"] = {
                "low": {"value": self.reference_low},
                "high": {"value": self.reference_high},
            }
        return out


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().replace(",", "."))
        except ValueError:
            return None
    return None


def parse_reference(reference: Optional[str]) -> tuple[Optional[float], Optional[float]]:
    """'3.5 - 5.1' -> (3.5, 5.1). Anything else yields (None, None)."""
    if not reference:
        return None, None
    match = _RANGE_RE.search(reference)
    if not match:
        return None, None
    return _to_float(match.group(1)), _to_float(match.group(2))


def _catalogue_range(code: str) -> tuple[Optional[float], Optional[float]]:
    prop = property_by_key(code) or property_by_loinc(code)
    if prop is None:
        return None, None
    return _to_float(prop.low), _to_float(prop.high)


def get_lab_value_for(
    signals: Mapping[str, Any],
    code: str,
    unit: Optional[str] = None,
) -> List[LabItem]:
    """Numeric history of one signal, oldest first.

    `signals` is the `content.signals` mapping of a health document:
    `{code: {"values": [{"value", "unit", "date", "reference", ...}]}}`.
    """
    entry = signals.get(code) or {}
    values = entry.get("values") or []
    fallback_low, fallback_high = _catalogue_range(code)

    items: List[LabItem] = []
    for raw in values:
        number = _to_float(raw.get("value"))
        if number is None:
            continue
        item_unit = raw.get("unit")
        if unit and (item_unit or "").strip().lower() != unit.strip().lower():
            continue
        low, high = parse_reference(raw.get("reference"))
        if low is None or high is None:
            low, high = fallback_low, fallback_high
        items.append(
            LabItem(
                time=str(raw.get("date") or ""),
                value=number,
                test=raw.get("test") or raw.get("signal") or code,
                unit=item_unit,
                reference=raw.get("reference"),
                reference_low=low,
                reference_high=high,
            )
        )
    items.sort(key=lambda item: item.time)
    return items


def get_percentage_from_last_values(series: Optional[Sequence[LabItem]] = None) -> str:
    if not series or len(series) < 2:
        return "0"
    previous, last = series[-2].value, series[-1].value
    if previous == 0:
        return "0"
    return f"{(last - previous) / abs(previous) * 100:.1f}"


def get_trend_status_from_last_values(series: Optional[Sequence[LabItem]] = None) -> TrendStatus:
    if not series or len(series) < 2:
        return "stable"
    y = np.array([item.value for item in series[-TREND_WINDOW:]], dtype=float)
    x = np.arange(len(y), dtype=float)
    slope = float(np.polyfit(x, y, 1)[0])
    scale = float(np.mean(np.abs(y)))
    if abs(slope) <= STABLE_RELATIVE_SLOPE * scale:
        return "stable"
    return "increasing" if slope > 0 else "decreasing"
