from __future__ import annotations

"""
Normalize local lab test names to canonical English terms.

Design intent:
- Keep lookup deterministic: exact group membership wins over substring hits.
- Preserve table order so earlier groups take precedence on ambiguous input.
"""

import json
import re
from pathlib import Path
from typing import Sequence

_DEFAULT_TABLE_PATH = Path(__file__).resolve().parent / "data" / "lab_synonyms.json"
_WHITESPACE_RE = re.compile(r"\s+")

_table: list[list[str]] | None = None


def load_synonym_table(path: str | Path | None = None) -> list[list[str]]:
    """Load (or reload) the synonym table; each group starts with its canonical name."""
    global _table
    source = Path(path) if path is not None else _DEFAULT_TABLE_PATH
    raw = json.loads(source.read_text(encoding="utf-8"))
    groups: list[list[str]] = []
    for group in raw:
        entries = [str(item) for item in group if str(item)]
        if entries:
            groups.append(entries)
    _table = groups
    return groups


def _get_table() -> list[list[str]]:
    if _table is None:
        return load_synonym_table()
    return _table


def synonyms(term: str | None, table: Sequence[Sequence[str]] | None = None) -> str | None:
    """
    Return the canonical name for a local lab term, or None.

    Exact membership of the raw term is checked first. Otherwise the term is
    whitespace-collapsed and lower-cased, and the first group with an entry
    contained in it wins.
    """
    if not term:
        return None
    groups = table if table is not None else _get_table()

    for group in groups:
        if term in group:
            return group[0]

    lower = _WHITESPACE_RE.sub(" ", str(term)).lower()
    for group in groups:
        if any(entry.lower() in lower for entry in group):
            return group[0]
    return None
