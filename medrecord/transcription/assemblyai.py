from __future__ import annotations

"""
AssemblyAI REST transcription.

Design intent:
- Upload raw bytes, create a transcript job, poll until it settles.
- Fold the word list into speaker utterances so callers get a conversation.
- The httpx client is injectable so tests can use a mock transport.
"""

import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx

from .base import ConversationTurn, TranscriptionError, TranscriptionProvider, TranscriptionResult

logger = logging.getLogger(__name__)


def fold_words(words: Iterable[Dict[str, Any]]) -> List[ConversationTurn]:
    turns: List[ConversationTurn] = []
    for word in words:
        text = str(word.get("text") or "")
        speaker = word.get("speaker")
        if turns and turns[-1].speaker == speaker:
            turns[-1].text += f" {text}"
        else:
            turns.append(ConversationTurn(speaker=speaker, text=text))
    return turns


class AssemblyAITranscriptionProvider(TranscriptionProvider):
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.assemblyai.com/v2",
        speech_model: str = "nano",
        poll_seconds: float = 3.0,
        timeout_seconds: float = 300.0,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._speech_model = speech_model
        self._poll_seconds = poll_seconds
        self._timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._http = http_client or httpx.Client(timeout=60.0)
        self._base_url = base_url.rstrip("/")
        self._headers = {"authorization": api_key}

    def _fail(self, code: str, message: str) -> TranscriptionError:
        return TranscriptionError(code, message, self.name())

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._http.request(method, f"{self._base_url}{path}", headers=self._headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise self._fail("ASSEMBLYAI_HTTP_ERROR", f"AssemblyAI request {path} failed: {exc}") from exc
        except ValueError as exc:
            raise self._fail("ASSEMBLYAI_BAD_RESPONSE", f"AssemblyAI returned invalid JSON for {path}") from exc

    def upload(self, audio: bytes) -> str:
        data = self._request("POST", "/upload", content=audio)
        upload_url = data.get("upload_url")
        if not upload_url:
            raise self._fail("ASSEMBLYAI_BAD_RESPONSE", "AssemblyAI upload did not return upload_url")
        return str(upload_url)

    def transcribe(
        self,
        audio: bytes,
        *,
        filename: str = "audio.mp3",
        content_type: str = "audio/mpeg",
        language: str = "en",
    ) -> TranscriptionResult:
        audio_url = self.upload(audio)
        job = self._request(
            "POST",
            "/transcript",
            json={"audio_url": audio_url, "speech_model": self._speech_model, "language_code": language},
        )
        transcript_id = job.get("id")
        if not transcript_id:
            raise self._fail("ASSEMBLYAI_BAD_RESPONSE", "AssemblyAI did not return a transcript id")

        deadline = time.monotonic() + self._timeout_seconds
        while job.get("status") not in ("completed", "error"):
            if time.monotonic() >= deadline:
                raise self._fail("ASSEMBLYAI_TIMEOUT", f"AssemblyAI transcript {transcript_id} timed out")
            self._sleep(self._poll_seconds)
            job = self._request("GET", f"/transcript/{transcript_id}")

        if job.get("status") == "error":
            logger.warning("assemblyai transcript failed id=%s", transcript_id)
            raise self._fail("ASSEMBLYAI_TRANSCRIPT_ERROR", str(job.get("error") or "AssemblyAI transcript error"))

        return TranscriptionResult(
            text=str(job.get("text") or ""),
            confidence=job.get("confidence"),
            conversation=fold_words(job.get("words") or []),
            provider=self.name(),
        )

    def name(self) -> str:
        return "assemblyai"
