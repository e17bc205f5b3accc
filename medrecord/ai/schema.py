from __future__ import annotations

import copy
import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"


def _placeholder_pattern(placeholder: str) -> re.Pattern[str]:
    name = placeholder.strip().strip("[]")
    return re.compile(r"\[" + re.escape(name) + r"\]", re.IGNORECASE)


def _replace(node: Any, pattern: re.Pattern[str], value: str) -> Any:
    if isinstance(node, dict):
        out: dict[str, Any] = {}
        for key, item in node.items():
            if key == "description" and isinstance(item, str):
                out[key] = pattern.sub(value, item)
            else:
                out[key] = _replace(item, pattern, value)
        return out
    if isinstance(node, list):
        return [_replace(item, pattern, value) for item in node]
    return node


def update_string(schema: dict[str, Any], placeholder: str, value: str) -> dict[str, Any]:
    """Return a copy of `schema` with `[PLACEHOLDER]` replaced in every description.

    `placeholder` may be given with or without brackets; matching ignores case.
    """
    return _replace(schema, _placeholder_pattern(placeholder), value)


def update_language(schema: dict[str, Any], language: str = "English") -> dict[str, Any]:
    return update_string(schema, "LANGUAGE", language)


@lru_cache(maxsize=None)
def _read_schema(name: str) -> dict[str, Any]:
    path = _SCHEMA_DIR / f"{name}.json"
    if not path.is_file():
        raise KeyError(f"Unknown schema: {name}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_schema(name: str) -> dict[str, Any]:
    return copy.deepcopy(_read_schema(name))
