"""LLM extraction helpers: schema localization, function-calling, provider selection."""

from .gpt import LLMExtractionError, fetch_gpt
from .schema import load_schema, update_language, update_string

__all__ = ["LLMExtractionError", "fetch_gpt", "load_schema", "update_language", "update_string"]
