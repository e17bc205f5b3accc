from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


class TranscriptionError(RuntimeError):
    def __init__(self, code: str, message: str, provider_name: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.provider_name = provider_name


@dataclass
class ConversationTurn:
    speaker: Optional[str]
    text: str


@dataclass
class TranscriptionResult:
    text: str
    confidence: Optional[float] = None
    conversation: List[ConversationTurn] = field(default_factory=list)
    provider: str = ""


class TranscriptionProvider(ABC):
    @abstractmethod
    def transcribe(
        self,
        audio: bytes,
        *,
        filename: str = "audio.mp3",
        content_type: str = "audio/mpeg",
        language: str = "en",
    ) -> TranscriptionResult: ...

    @abstractmethod
    def name(self) -> str: ...
