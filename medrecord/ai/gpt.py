from __future__ import annotations

"""
OpenAI function-calling extraction.

Design intent:
- One completion per call, tool choice forced to the schema's function.
- The model's tool arguments are the result; nothing is post-processed here.
- Token usage is accumulated into the caller's mapping.
"""

import json
import logging
from typing import Any, MutableMapping, Sequence

from openai import OpenAI

logger = logging.getLogger(__name__)

Content = dict[str, Any]


class LLMExtractionError(RuntimeError):
    pass


def text_content(text: str) -> Content:
    return {"type": "text", "text": text}


def image_content(url: str) -> Content:
    return {"type": "image_url", "image_url": {"url": url}}


def _tool_from_schema(schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": schema.get("name") or "extractor",
            "description": schema.get("description", ""),
            "parameters": schema.get("parameters") or {"type": "object", "properties": {}},
        },
    }


def fetch_gpt(
    content: Sequence[Content],
    schema: dict[str, Any],
    token_usage: MutableMapping[str, int],
    *,
    client: Any,
    model: str,
) -> dict[str, Any]:
    tool = _tool_from_schema(schema)
    tool_name = tool["function"]["name"]
    try:
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": list(content)}],
            tools=[tool],
            tool_choice={"type": "function", "function": {"name": tool_name}},
        )
    except Exception as exc:
        raise LLMExtractionError(f"LLM request failed: {exc}") from exc

    usage = getattr(response, "usage", None)
    total_tokens = int(getattr(usage, "total_tokens", 0) or 0)
    token_usage["total"] = int(token_usage.get("total", 0)) + total_tokens
    token_usage[schema.get("description", tool_name)] = total_tokens
    logger.info("llm extraction schema=%s tokens=%d", schema.get("title", tool_name), total_tokens)

    try:
        message = response.choices[0].message
        arguments = message.tool_calls[0].function.arguments
    except (AttributeError, IndexError, TypeError) as exc:
        raise LLMExtractionError("LLM response did not contain a tool call") from exc

    try:
        parsed = json.loads(arguments)
    except (TypeError, ValueError) as exc:
        raise LLMExtractionError("LLM tool arguments are not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise LLMExtractionError("LLM tool arguments must be a JSON object")
    return parsed


def create_openai_client(api_key: str) -> OpenAI:
    return OpenAI(api_key=api_key)
