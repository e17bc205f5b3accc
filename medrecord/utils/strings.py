from __future__ import annotations

import re
import unicodedata


def search_optimize(value: str) -> str:
    """Strip diacritics and lower-case, for accent-insensitive matching."""
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def remove_non_alphanumeric(value: str) -> str:
    return re.sub(r"[^0-9A-Za-z]+", "", value or "")
