from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class AIProvider(str, Enum):
    OPENAI_GPT4 = "openai-gpt4"
    OPENAI_GPT4_TURBO = "openai-gpt4-turbo"
    ANTHROPIC_CLAUDE = "anthropic-claude"
    GOOGLE_GEMINI = "google-gemini"


@dataclass(frozen=True)
class ProviderCapabilities:
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    cost: float  # per 1K tokens
    reliability: float
    max_tokens: int
    supports_images: bool = True
    supports_streaming: bool = True


@dataclass(frozen=True)
class DocumentTypeMapping:
    document_type: str
    preferred_providers: tuple[AIProvider, ...]
    requirements: Dict[str, object] = field(default_factory=dict)


PROVIDER_CAPABILITIES: Dict[AIProvider, ProviderCapabilities] = {
    AIProvider.OPENAI_GPT4: ProviderCapabilities(
        strengths=("general_medical", "prescription_extraction", "medical_terminology"),
        weaknesses=("image_analysis", "cost_efficiency"),
        cost=0.03,
        reliability=0.95,
        max_tokens=8192,
    ),
    AIProvider.OPENAI_GPT4_TURBO: ProviderCapabilities(
        strengths=("general_medical", "large_documents", "complex_analysis"),
        weaknesses=("image_analysis", "cost_efficiency"),
        cost=0.01,
        reliability=0.93,
        max_tokens=128000,
    ),
    AIProvider.ANTHROPIC_CLAUDE: ProviderCapabilities(
        strengths=("medical_reasoning", "safety", "detailed_analysis"),
        weaknesses=("image_analysis", "structured_output"),
        cost=0.015,
        reliability=0.94,
        max_tokens=100000,
    ),
    AIProvider.GOOGLE_GEMINI: ProviderCapabilities(
        strengths=("image_analysis", "multimodal", "cost_efficiency"),
        weaknesses=("medical_terminology", "clinical_reasoning"),
        cost=0.005,
        reliability=0.88,
        max_tokens=32000,
    ),
}

DOCUMENT_TYPE_MAPPINGS: tuple[DocumentTypeMapping, ...] = (
    DocumentTypeMapping(
        "imaging",
        (AIProvider.GOOGLE_GEMINI, AIProvider.OPENAI_GPT4),
        {"has_images": True, "requires_detailed_analysis": False},
    ),
    DocumentTypeMapping(
        "laboratory",
        (AIProvider.OPENAI_GPT4_TURBO, AIProvider.OPENAI_GPT4),
        {"requires_specialized_terminology": True, "requires_detailed_analysis": True},
    ),
    DocumentTypeMapping(
        "pathology",
        (AIProvider.ANTHROPIC_CLAUDE, AIProvider.OPENAI_GPT4),
        {"requires_detailed_analysis": True, "requires_specialized_terminology": True, "has_images": True},
    ),
    DocumentTypeMapping(
        "surgical",
        (AIProvider.ANTHROPIC_CLAUDE, AIProvider.OPENAI_GPT4_TURBO),
        {"requires_detailed_analysis": True, "max_token_length": 50000},
    ),
    DocumentTypeMapping(
        "cardiology",
        (AIProvider.OPENAI_GPT4, AIProvider.ANTHROPIC_CLAUDE),
        {"requires_specialized_terminology": True, "has_images": True},
    ),
    DocumentTypeMapping(
        "radiology",
        (AIProvider.GOOGLE_GEMINI, AIProvider.OPENAI_GPT4),
        {"has_images": True, "requires_detailed_analysis": True},
    ),
)


class ProviderRegistry:
    @staticmethod
    def capabilities(provider: AIProvider) -> ProviderCapabilities:
        return PROVIDER_CAPABILITIES[provider]

    @staticmethod
    def all_providers() -> List[AIProvider]:
        return list(AIProvider)

    @classmethod
    def image_capable(cls) -> List[AIProvider]:
        return [p for p in cls.all_providers() if cls.capabilities(p).supports_images]

    @classmethod
    def by_cost(cls, ascending: bool = True) -> List[AIProvider]:
        return sorted(cls.all_providers(), key=lambda p: cls.capabilities(p).cost, reverse=not ascending)

    @classmethod
    def by_reliability(cls, descending: bool = True) -> List[AIProvider]:
        return sorted(cls.all_providers(), key=lambda p: cls.capabilities(p).reliability, reverse=descending)

    @classmethod
    def has_strength(cls, provider: AIProvider, strength: str) -> bool:
        return strength in cls.capabilities(provider).strengths

    @classmethod
    def has_weakness(cls, provider: AIProvider, weakness: str) -> bool:
        return weakness in cls.capabilities(provider).weaknesses

    @staticmethod
    def document_type_mapping(document_type: str) -> Optional[DocumentTypeMapping]:
        for mapping in DOCUMENT_TYPE_MAPPINGS:
            if mapping.document_type == document_type:
                return mapping
        return None

    @classmethod
    def preferred_providers(cls, document_type: str) -> List[AIProvider]:
        mapping = cls.document_type_mapping(document_type)
        if mapping is None:
            return [AIProvider.OPENAI_GPT4]
        return list(mapping.preferred_providers)

    @staticmethod
    def parse(value: Optional[str]) -> Optional[AIProvider]:
        if not value:
            return None
        try:
            return AIProvider(value)
        except ValueError:
            return None
