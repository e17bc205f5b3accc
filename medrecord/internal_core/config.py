from __future__ import annotations

import os
from dataclasses import dataclass


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_str_any(names: list[str], default: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value is not None and value != "":
            return value
    return default


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


@dataclass(frozen=True)
class AppConfig:
    OPENAI_API_KEY: str
    LLM_MODEL_ID: str
    WHISPER_MODEL_ID: str
    ASSEMBLYAI_API_KEY: str
    ASSEMBLYAI_BASE_URL: str
    ASSEMBLYAI_SPEECH_MODEL: str
    ASSEMBLYAI_POLL_SECONDS: float
    ASSEMBLYAI_TIMEOUT_SECONDS: int
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str
    MEDRECORD_AUTH_COOKIE: str
    MEDRECORD_TRANSCRIPTION_PROVIDER: str
    MEDRECORD_TRANSCRIPTION_FALLBACK: str
    MEDRECORD_SESSION_TTL_SECONDS: int
    MEDRECORD_MAX_AUDIO_BYTES: int
    MEDRECORD_DEFAULT_SCANS: int
    MEDRECORD_DEFAULT_PROFILES: int
    MEDRECORD_LOG_LEVEL: str

    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)


def load_config() -> AppConfig:
    return AppConfig(
        OPENAI_API_KEY=_getenv_str("OPENAI_API_KEY", ""),
        LLM_MODEL_ID=_getenv_str("LLM_MODEL_ID", "gpt-4o-mini"),
        WHISPER_MODEL_ID=_getenv_str("WHISPER_MODEL_ID", "whisper-1"),
        ASSEMBLYAI_API_KEY=_getenv_str("ASSEMBLYAI_API_KEY", ""),
        ASSEMBLYAI_BASE_URL=_getenv_str("ASSEMBLYAI_BASE_URL", "https://api.assemblyai.com/v2"),
        ASSEMBLYAI_SPEECH_MODEL=_getenv_str("ASSEMBLYAI_SPEECH_MODEL", "nano"),
        ASSEMBLYAI_POLL_SECONDS=_getenv_float("ASSEMBLYAI_POLL_SECONDS", 3.0),
        ASSEMBLYAI_TIMEOUT_SECONDS=_getenv_int("ASSEMBLYAI_TIMEOUT_SECONDS", 300),
        SUPABASE_URL=_getenv_str_any(["SUPABASE_URL", "PUBLIC_SUPABASE_URL"], ""),
        SUPABASE_ANON_KEY=_getenv_str_any(["SUPABASE_ANON_KEY", "PUBLIC_SUPABASE_ANON_KEY"], ""),
        MEDRECORD_AUTH_COOKIE=_getenv_str("MEDRECORD_AUTH_COOKIE", "sb-access-token"),
        MEDRECORD_TRANSCRIPTION_PROVIDER=_getenv_str("MEDRECORD_TRANSCRIPTION_PROVIDER", "whisper"),
        MEDRECORD_TRANSCRIPTION_FALLBACK=_getenv_str("MEDRECORD_TRANSCRIPTION_FALLBACK", "assemblyai"),
        MEDRECORD_SESSION_TTL_SECONDS=_getenv_int("MEDRECORD_SESSION_TTL_SECONDS", 14400),
        MEDRECORD_MAX_AUDIO_BYTES=_getenv_int("MEDRECORD_MAX_AUDIO_BYTES", 25 * 1024 * 1024),
        MEDRECORD_DEFAULT_SCANS=_getenv_int("MEDRECORD_DEFAULT_SCANS", 10),
        MEDRECORD_DEFAULT_PROFILES=_getenv_int("MEDRECORD_DEFAULT_PROFILES", 5),
        MEDRECORD_LOG_LEVEL=_getenv_str("MEDRECORD_LOG_LEVEL", "INFO"),
    )
