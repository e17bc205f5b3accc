"""
Conversation session boundary.

Design intent:
- Hold live session state (transcripts, merged analysis) in memory with TTL.
- Keep question scoring and analysis merging deterministic and testable.
- Delegate model calls to the ai package.
"""
from .analysis import analyze_conversation, finalize_report
from .merger import merge_analysis
from .scoring import prioritize_questions, score_question
from .store import SessionStore

__all__ = [
    "SessionStore",
    "analyze_conversation",
    "finalize_report",
    "merge_analysis",
    "prioritize_questions",
    "score_question",
]
