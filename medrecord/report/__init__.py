"""Lab series helpers used by report views."""

from .utils import (
    LabItem,
    get_lab_value_for,
    get_percentage_from_last_values,
    get_trend_status_from_last_values,
)

__all__ = [
    "LabItem",
    "get_lab_value_for",
    "get_percentage_from_last_values",
    "get_trend_status_from_last_values",
]
