from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SessionStatus = Literal["active", "paused", "completed"]


class PartialTranscript(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    text: str
    confidence: float = 0.0
    timestamp: float
    is_final: bool = True
    speaker: Optional[str] = None
    sequence_number: int
    session_id: str


SessionUpdateType = Literal[
    "partial_transcript",
    "analysis_update",
    "session_status",
    "ai_thinking",
    "error",
]


class SessionUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: SessionUpdateType
    code: str
    detail: str
    timestamp: float


FeedbackItemType = Literal[
    "diagnosis",
    "treatment",
    "clarifyingQuestion",
    "doctorRecommendation",
    "followUp",
    "medication",
    "unknown",
]

FeedbackValue = Literal["approved", "rejected", "neutral"]


class FeedbackData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_type: FeedbackItemType = Field(alias="itemType")
    item_content: Any = Field(default=None, alias="itemContent")
    feedback: FeedbackValue
    timestamp: float

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


DocumentType = Literal["document", "profile", "health"]


class DocumentKey(BaseModel):
    model_config = ConfigDict(extra="allow")

    user_id: str
    owner_id: Optional[str] = None
    key: str


class Attachment(BaseModel):
    url: str
    path: str


class SubscriptionStats(BaseModel):
    profiles: int = 0
    scans: int = 0
    default_scans: int
    default_profiles: int


TranscriptionStatus = Literal[
    "OK_PRIMARY",
    "WARN_PRIMARY_FAILED_FALLBACK_OK",
    "FAIL_BOTH_FAILED",
]


class TranscriptionConversationTurn(BaseModel):
    speaker: Optional[str] = None
    text: str


class TranscriptionPayload(BaseModel):
    text: str
    confidence: Optional[float] = None
    conversation: List[TranscriptionConversationTurn] = Field(default_factory=list)
    provider: str
    status: TranscriptionStatus = "OK_PRIMARY"
