"""
Doctor feedback boundary.

Design intent:
- Record approve/reject/neutral verdicts on AI suggestions.
- Summarize them for analytics and as context for later model calls.
"""
from .store import FeedbackStore

__all__ = ["FeedbackStore"]
