from __future__ import annotations

from typing import Any

from .base import TranscriptionError, TranscriptionProvider, TranscriptionResult

SESSION_PROMPT = (
    "The transcript is a part of a doctor patient session conversation. "
    "The doctor is asking the patient about their symptoms and the patient is responding. "
    "A nurse or multiple doctors may be part of the conversation."
)


class WhisperTranscriptionProvider(TranscriptionProvider):
    """OpenAI speech-to-text. Returns plain text; no speaker turns or confidence."""

    def __init__(self, client: Any, model: str = "whisper-1", prompt: str = SESSION_PROMPT) -> None:
        self._client = client
        self._model = model
        self._prompt = prompt

    def transcribe(
        self,
        audio: bytes,
        *,
        filename: str = "audio.mp3",
        content_type: str = "audio/mpeg",
        language: str = "en",
    ) -> TranscriptionResult:
        try:
            text = self._client.audio.transcriptions.create(
                file=(filename, audio, content_type),
                model=self._model,
                language=language,
                response_format="text",
                prompt=self._prompt,
            )
        except Exception as exc:
            raise TranscriptionError("WHISPER_FAILED", f"Whisper transcription failed: {exc}", self.name()) from exc
        if not isinstance(text, str):
            text = str(getattr(text, "text", "") or "")
        return TranscriptionResult(text=text.strip(), provider=self.name())

    def name(self) -> str:
        return "whisper"
