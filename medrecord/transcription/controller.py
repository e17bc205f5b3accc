from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from medrecord.ai.gpt import create_openai_client
from medrecord.internal_core.config import AppConfig
from medrecord.internal_core.contracts import TranscriptionStatus

from .assemblyai import AssemblyAITranscriptionProvider
from .base import TranscriptionError, TranscriptionProvider, TranscriptionResult
from .mock import MockTranscriptionProvider
from .whisper import WhisperTranscriptionProvider

logger = logging.getLogger(__name__)


def build_provider(name: str, cfg: AppConfig, openai_client: Any = None) -> Optional[TranscriptionProvider]:
    """Instantiate a provider by config name. Empty name or 'none' means no provider."""
    key = (name or "").strip().lower()
    if key in ("", "none"):
        return None
    if key == "mock":
        return MockTranscriptionProvider()
    if key == "whisper":
        if openai_client is None:
            if not cfg.OPENAI_API_KEY:
                raise TranscriptionError("WHISPER_NOT_CONFIGURED", "OPENAI_API_KEY is not set", "whisper")
            openai_client = create_openai_client(cfg.OPENAI_API_KEY)
        return WhisperTranscriptionProvider(openai_client, model=cfg.WHISPER_MODEL_ID)
    if key == "assemblyai":
        if not cfg.ASSEMBLYAI_API_KEY:
            raise TranscriptionError("ASSEMBLYAI_NOT_CONFIGURED", "ASSEMBLYAI_API_KEY is not set", "assemblyai")
        return AssemblyAITranscriptionProvider(
            cfg.ASSEMBLYAI_API_KEY,
            base_url=cfg.ASSEMBLYAI_BASE_URL,
            speech_model=cfg.ASSEMBLYAI_SPEECH_MODEL,
            poll_seconds=cfg.ASSEMBLYAI_POLL_SECONDS,
            timeout_seconds=cfg.ASSEMBLYAI_TIMEOUT_SECONDS,
        )
    raise TranscriptionError("UNKNOWN_PROVIDER", f"Unknown transcription provider: {name}", key)


def transcribe_with_fallback(
    primary: TranscriptionProvider,
    fallback: Optional[TranscriptionProvider],
    audio: bytes,
    *,
    filename: str = "audio.mp3",
    content_type: str = "audio/mpeg",
    language: str = "en",
) -> Tuple[TranscriptionResult, TranscriptionStatus]:
    kwargs = {"filename": filename, "content_type": content_type, "language": language}
    try:
        return primary.transcribe(audio, **kwargs), "OK_PRIMARY"
    except TranscriptionError as e:
        logger.warning("transcription primary failed provider=%s code=%s", e.provider_name, e.code)
        primary_error = e

    if fallback is None:
        raise TranscriptionError("FAIL_BOTH_FAILED", primary_error.message, primary_error.provider_name) from primary_error

    try:
        result = fallback.transcribe(audio, **kwargs)
    except TranscriptionError as fe:
        logger.warning("transcription fallback failed provider=%s code=%s", fe.provider_name, fe.code)
        raise TranscriptionError(
            "FAIL_BOTH_FAILED",
            f"primary {primary_error.code}; fallback {fe.code}",
            fe.provider_name,
        ) from fe
    return result, "WARN_PRIMARY_FAILED_FALLBACK_OK"
