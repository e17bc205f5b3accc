from __future__ import annotations

from .base import TranscriptionProvider, TranscriptionResult


class MockTranscriptionProvider(TranscriptionProvider):
    def __init__(self) -> None:
        self._counter = 0

    def transcribe(
        self,
        audio: bytes,
        *,
        filename: str = "audio.mp3",
        content_type: str = "audio/mpeg",
        language: str = "en",
    ) -> TranscriptionResult:
        self._counter += 1
        return TranscriptionResult(
            text=f"(mock) simulated transcript for chunk {self._counter}.",
            confidence=1.0,
            provider=self.name(),
        )

    def name(self) -> str:
        return "mock"
