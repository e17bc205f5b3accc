from __future__ import annotations

"""
Clarifying-question priority scoring.

Design intent:
- Keep the weighting table static and explicit (weights sum to 1.0).
- Score = urgency of the category, relevance to probable diagnoses, and the
  inverted explicit priority, each on a 0-10 scale.
"""

from typing import Any, Literal, Mapping, Sequence

from medrecord.utils.arrays import sort_key_for_enum

QuestionCategory = Literal[
    "red_flag",
    "risk_assessment",
    "drug_interaction",
    "contraindication",
    "allergy",
    "warning",
    "diagnostic_clarification",
    "symptom_exploration",
    "treatment_selection",
]

URGENCY_SCORES: dict[str, int] = {
    "red_flag": 10,
    "risk_assessment": 8,
    "drug_interaction": 7,
    "contraindication": 7,
    "allergy": 7,
    "warning": 6,
    "diagnostic_clarification": 6,
    "symptom_exploration": 4,
    "treatment_selection": 3,
}

WEIGHTS: dict[str, float] = {
    "URGENCY": 0.4,
    "RELEVANCE": 0.4,
    "PRIORITY": 0.2,
}

SCALING: dict[str, int] = {
    "PROBABILITY_MULTIPLIER": 10,
    "PRIORITY_INVERSION": 11,
}

QUESTION_SCORING: dict[str, Any] = {
    "URGENCY_SCORES": URGENCY_SCORES,
    "WEIGHTS": WEIGHTS,
    "SCALING": SCALING,
}

QUESTION_CATEGORIES: tuple[str, ...] = (
    "red_flag",
    "risk_assessment",
    "drug_interaction",
    "contraindication",
    "allergy",
    "warning",
    "diagnostic_clarification",
    "symptom_exploration",
    "treatment_selection",
)

ALERT_CATEGORIES: tuple[str, ...] = (
    "drug_interaction",
    "contraindication",
    "allergy",
    "warning",
    "red_flag",
)

MIN_DIAGNOSIS_PROBABILITY = 0.05
HIGH_CONFIDENCE_THRESHOLD = 0.8
CRITICAL_PRIORITY_THRESHOLD = 8
DEFAULT_QUESTION_LIMIT = 10
DEFAULT_QUESTION_PRIORITY = 5


def is_alert_category(category: str | None) -> bool:
    return (category or "") in ALERT_CATEGORIES


def _normalize_probability(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    # Some model outputs use 0-100 instead of 0-1.
    if value > 1.0:
        value = value / 100.0
    return max(0.0, min(1.0, value))


def _relevance(question: Mapping[str, Any], diagnoses: Sequence[Mapping[str, Any]]) -> float:
    related = {
        str(item).strip().lower()
        for item in (question.get("relatedDiagnosis") or question.get("related_diagnoses") or [])
        if str(item).strip()
    }
    best = 0.0
    for diagnosis in diagnoses:
        name = str(diagnosis.get("name", "") or "").strip().lower()
        if related and name not in related:
            continue
        probability = _normalize_probability(diagnosis.get("probability"))
        if probability < MIN_DIAGNOSIS_PROBABILITY:
            continue
        best = max(best, probability)
    return best * SCALING["PROBABILITY_MULTIPLIER"]


def _inverted_priority(raw: Any) -> float:
    try:
        priority = int(raw)
    except (TypeError, ValueError):
        priority = DEFAULT_QUESTION_PRIORITY
    priority = max(1, min(10, priority))
    return float(SCALING["PRIORITY_INVERSION"] - priority)


def score_question(
    question: Mapping[str, Any],
    diagnoses: Sequence[Mapping[str, Any]] = (),
) -> float:
    """
    Weighted priority score for one clarifying question (0-10).

    Questions without `relatedDiagnosis` are scored against the most probable
    diagnosis overall.
    """
    urgency = float(URGENCY_SCORES.get(str(question.get("category", "") or ""), 0))
    relevance = _relevance(question, diagnoses)
    priority = _inverted_priority(question.get("priority"))
    score = (
        WEIGHTS["URGENCY"] * urgency
        + WEIGHTS["RELEVANCE"] * relevance
        + WEIGHTS["PRIORITY"] * priority
    )
    return round(score, 4)


def prioritize_questions(
    questions: Sequence[Mapping[str, Any]],
    diagnoses: Sequence[Mapping[str, Any]] = (),
    limit: int = DEFAULT_QUESTION_LIMIT,
) -> list[dict[str, Any]]:
    category_rank = sort_key_for_enum(QUESTION_CATEGORIES, "category")
    scored: list[dict[str, Any]] = []
    for question in questions:
        item = dict(question)
        item["score"] = score_question(question, diagnoses)
        item["critical"] = item["score"] >= CRITICAL_PRIORITY_THRESHOLD
        scored.append(item)
    scored.sort(key=lambda item: (-item["score"], category_rank(item)))
    if limit <= 0:
        return scored
    return scored[:limit]
