"""Registry of LLM providers and the document-driven selection heuristic."""

from .registry import AIProvider, ProviderCapabilities, ProviderRegistry
from .selection import SelectionCriteria, SelectionResult, criteria_from_document, explain_selection, select_provider

__all__ = [
    "AIProvider",
    "ProviderCapabilities",
    "ProviderRegistry",
    "SelectionCriteria",
    "SelectionResult",
    "criteria_from_document",
    "explain_selection",
    "select_provider",
]
