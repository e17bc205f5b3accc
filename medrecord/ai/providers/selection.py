from __future__ import annotations

"""
Heuristic LLM provider selection for document processing.

Design intent:
- Score every registered provider against the document's needs.
- Keep the reasoning lines so the choice can be shown to a reviewer.
- A valid explicit preference wins without scoring.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .registry import AIProvider, ProviderCapabilities, ProviderRegistry

logger = logging.getLogger(__name__)

HIGH_STAKE_TYPES = ("pathology", "surgical", "oncology", "critical_care")
COST_SENSITIVE_TOKENS = 10000
IMAGE_TOKEN_ESTIMATE = 1000
HIGH_RELIABILITY_THRESHOLD = 0.93


@dataclass
class SelectionCriteria:
    has_images: bool = False
    estimated_tokens: int = 0
    requires_high_reliability: bool = False
    cost_sensitive: bool = False
    document_type: Optional[str] = None
    preferred_provider: Optional[str] = None
    language: Optional[str] = None


@dataclass
class ProviderScore:
    provider: AIProvider
    score: float
    reasoning: List[str]
    capabilities: ProviderCapabilities


@dataclass
class SelectionResult:
    selected_provider: AIProvider
    fallback_providers: List[AIProvider]
    reasoning: List[str]
    estimated_cost: float
    confidence: float
    scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selectedProvider": self.selected_provider.value,
            "fallbackProviders": [p.value for p in self.fallback_providers],
            "reasoning": list(self.reasoning),
            "estimatedCost": self.estimated_cost,
            "confidence": self.confidence,
        }


def is_high_stake(document_type: Optional[str]) -> bool:
    return document_type in HIGH_STAKE_TYPES


def criteria_from_document(
    document_type: Optional[str],
    text: Optional[str] = None,
    images: Optional[Sequence[Any]] = None,
    preferred: Optional[str] = None,
    language: Optional[str] = None,
) -> SelectionCriteria:
    doc_type = document_type or "general"
    has_images = bool(images)
    estimated = math.ceil(len(text or "") / 4) + (IMAGE_TOKEN_ESTIMATE if has_images else 0)
    return SelectionCriteria(
        has_images=has_images,
        estimated_tokens=estimated,
        requires_high_reliability=is_high_stake(doc_type),
        cost_sensitive=estimated > COST_SENSITIVE_TOKENS,
        document_type=doc_type,
        preferred_provider=preferred,
        language=language,
    )


def estimate_cost(provider: AIProvider, estimated_tokens: int) -> float:
    return (estimated_tokens / 1000) * ProviderRegistry.capabilities(provider).cost


def score_provider(provider: AIProvider, criteria: SelectionCriteria) -> ProviderScore:
    caps = ProviderRegistry.capabilities(provider)
    score = caps.reliability * 40
    reasoning = [f"Reliability: {caps.reliability}"]

    if criteria.document_type:
        preferred = ProviderRegistry.preferred_providers(criteria.document_type)
        if provider in preferred:
            bonus = max(20 - preferred.index(provider) * 5, 5)
            score += bonus
            reasoning.append(f"Preferred for {criteria.document_type} (+{bonus})")

    if criteria.has_images:
        if not caps.supports_images:
            score -= 20
            reasoning.append("No image support (-20)")
        elif ProviderRegistry.has_strength(provider, "image_analysis"):
            score += 15
            reasoning.append("Strong image analysis (+15)")
        else:
            score += 5
            reasoning.append("Supports images (+5)")

    if criteria.estimated_tokens > caps.max_tokens:
        score -= 30
        reasoning.append("Exceeds token limit (-30)")
    elif criteria.estimated_tokens > caps.max_tokens * 0.8:
        score -= 10
        reasoning.append("Near token limit (-10)")

    if criteria.cost_sensitive:
        penalty = caps.cost * 10
        score -= penalty
        reasoning.append(f"Cost penalty (-{penalty:.1f})")

    if criteria.requires_high_reliability:
        if caps.reliability >= HIGH_RELIABILITY_THRESHOLD:
            score += 10
            reasoning.append("High reliability (+10)")
        else:
            score -= 15
            reasoning.append("Below reliability threshold (-15)")

    if ProviderRegistry.has_strength(provider, "medical_terminology"):
        score += 8
        reasoning.append("Medical terminology strength (+8)")

    return ProviderScore(provider=provider, score=max(0.0, score), reasoning=reasoning, capabilities=caps)


def _fallbacks_for(selected: AIProvider, criteria: SelectionCriteria) -> List[AIProvider]:
    compatible = [
        p
        for p in ProviderRegistry.all_providers()
        if p != selected
        and (not criteria.has_images or ProviderRegistry.capabilities(p).supports_images)
        and criteria.estimated_tokens <= ProviderRegistry.capabilities(p).max_tokens
    ]
    compatible.sort(key=lambda p: ProviderRegistry.capabilities(p).reliability, reverse=True)
    return compatible[:2]


def _confidence(ranked: List[ProviderScore]) -> float:
    if len(ranked) < 2:
        return 1.0
    best = ranked[0].score
    gap = best - ranked[1].score
    return min(gap / 20, 1.0) * 0.6 + min(best / 80, 1.0) * 0.4


def select_provider(criteria: SelectionCriteria) -> SelectionResult:
    preferred = ProviderRegistry.parse(criteria.preferred_provider)
    if preferred is not None:
        return SelectionResult(
            selected_provider=preferred,
            fallback_providers=_fallbacks_for(preferred, criteria),
            reasoning=[f"User specified preferred provider: {preferred.value}"],
            estimated_cost=estimate_cost(preferred, criteria.estimated_tokens),
            confidence=0.9,
        )

    ranked = sorted(
        (score_provider(p, criteria) for p in ProviderRegistry.all_providers()),
        key=lambda s: s.score,
        reverse=True,
    )
    best = ranked[0]
    result = SelectionResult(
        selected_provider=best.provider,
        fallback_providers=[s.provider for s in ranked[1:3]],
        reasoning=best.reasoning,
        estimated_cost=estimate_cost(best.provider, criteria.estimated_tokens),
        confidence=_confidence(ranked),
        scores={s.provider.value: s.score for s in ranked},
    )
    logger.debug("provider selection %s", explain_selection(result).replace("\n", " | "))
    return result


def explain_selection(result: SelectionResult) -> str:
    return "\n".join(
        [
            f"Selected: {result.selected_provider.value}",
            f"Confidence: {result.confidence * 100:.1f}%",
            f"Estimated Cost: ${result.estimated_cost:.4f}",
            f"Reasoning: {', '.join(result.reasoning)}",
            f"Fallbacks: {', '.join(p.value for p in result.fallback_providers)}",
        ]
    )
