from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from medrecord.ai.gpt import fetch_gpt, text_content
from medrecord.ai.schema import load_schema, update_language
from medrecord.feedback.store import FeedbackStore

from .scoring import DEFAULT_QUESTION_LIMIT, prioritize_questions

logger = logging.getLogger(__name__)


def analyze_conversation(
    text: str,
    client: Any,
    *,
    model: str,
    language: str = "English",
    feedback: Optional[FeedbackStore] = None,
    question_limit: int = DEFAULT_QUESTION_LIMIT,
) -> Dict[str, Any]:
    """Diagnosis-oriented analysis of a conversation transcript.

    Past doctor feedback, when available, is appended to the prompt so the model
    leans toward previously approved suggestions.
    """
    prompt = text
    if feedback is not None:
        prompt = f"{text}\n\n{feedback.feedback_for_ai()}"

    token_usage: Dict[str, int] = {"total": 0}
    schema = update_language(load_schema("session_diagnosis"), language)
    data = fetch_gpt([text_content(prompt)], schema, token_usage, client=client, model=model)

    questions = data.get("clarifyingQuestions")
    if isinstance(questions, list):
        data["clarifyingQuestions"] = prioritize_questions(
            [q for q in questions if isinstance(q, dict)],
            data.get("diagnosis") or [],
            question_limit,
        )
    data["tokenUsage"] = token_usage
    logger.info(
        "conversation analyzed diagnoses=%d questions=%d tokens=%d",
        len(data.get("diagnosis") or []),
        len(data.get("clarifyingQuestions") or []),
        token_usage["total"],
    )
    return data


def finalize_report(text: str, client: Any, *, model: str, language: str = "English") -> Dict[str, Any]:
    token_usage: Dict[str, int] = {"total": 0}
    schema = update_language(load_schema("session_report"), language)
    data = fetch_gpt([text_content(text)], schema, token_usage, client=client, model=model)
    data["tokenUsage"] = token_usage
    return data
