"""Audio transcription providers with a primary/fallback controller."""

from .base import ConversationTurn, TranscriptionError, TranscriptionProvider, TranscriptionResult
from .controller import build_provider, transcribe_with_fallback

__all__ = [
    "ConversationTurn",
    "TranscriptionError",
    "TranscriptionProvider",
    "TranscriptionResult",
    "build_provider",
    "transcribe_with_fallback",
]
