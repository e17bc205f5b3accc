from __future__ import annotations

import time
import uuid
from threading import RLock
from typing import Any, Dict, List, Optional

from medrecord.internal_core.contracts import PartialTranscript, SessionStatus, SessionUpdate

from .merger import MergedItem, merge_analysis


class SessionStore:
    def __init__(self, ttl_seconds: int):
        self._ttl_seconds = ttl_seconds
        self._lock = RLock()
        self._sessions: Dict[str, Dict[str, Any]] = {}

    def create_session(
        self,
        user_id: str,
        language: str = "en",
        models: Optional[List[str]] = None,
        profile_id: Optional[str] = None,
        translate: bool = False,
    ) -> str:
        session_id = uuid.uuid4().hex
        now = time.time()
        with self._lock:
            self._sessions[session_id] = {
                "session_id": session_id,
                "user_id": user_id,
                "profile_id": profile_id,
                "language": language,
                "models": list(models or []),
                "translate": translate,
                "status": "active",
                "created_at": now,
                "updated_at": now,
                "expires_at": now + self._ttl_seconds,
                "transcripts": [],
                "analysis": {},
                "analysis_summary": {},
                "updates": [],
            }
        return session_id

    def _touch(self, session_id: str) -> None:
        now = time.time()
        session = self._sessions[session_id]
        session["updated_at"] = now
        session["expires_at"] = now + self._ttl_seconds

    def _require(self, session_id: str) -> Dict[str, Any]:
        session = self._sessions.get(session_id)
        if session is not None and session["expires_at"] <= time.time():
            self._sessions.pop(session_id, None)
            session = None
        if session is None:
            raise KeyError(f"Unknown session_id: {session_id}")
        return session

    def has_session(self, session_id: str) -> bool:
        with self._lock:
            try:
                self._require(session_id)
            except KeyError:
                return False
            return True

    def set_status(self, session_id: str, status: SessionStatus) -> None:
        with self._lock:
            self._require(session_id)["status"] = status
            self._touch(session_id)

    def add_transcript(
        self,
        session_id: str,
        text: str,
        confidence: float = 0.0,
        speaker: Optional[str] = None,
        is_final: bool = True,
    ) -> PartialTranscript:
        with self._lock:
            session = self._require(session_id)
            transcript = PartialTranscript(
                id=uuid.uuid4().hex,
                text=text,
                confidence=confidence,
                timestamp=time.time(),
                is_final=is_final,
                speaker=speaker,
                sequence_number=len(session["transcripts"]),
                session_id=session_id,
            )
            session["transcripts"].append(transcript)
            self._touch(session_id)
        return transcript

    def transcript_text(self, session_id: str) -> str:
        with self._lock:
            session = self._require(session_id)
            return " ".join(t.text.strip() for t in session["transcripts"] if t.text.strip())

    def update_analysis(self, session_id: str, analysis: Dict[str, Any]) -> Dict[str, Dict[str, int]]:
        with self._lock:
            session = self._require(session_id)
            merged, summary = merge_analysis(session["analysis"], analysis)
            session["analysis"] = merged
            session["analysis_summary"] = summary
            self._touch(session_id)
        return summary

    def append_update(self, session_id: str, update: SessionUpdate) -> None:
        with self._lock:
            self._require(session_id)["updates"].append(update)
            self._touch(session_id)

    def get_session(self, session_id: str) -> Dict[str, Any]:
        with self._lock:
            session = self._require(session_id)
            analysis: Dict[str, List[MergedItem]] = session["analysis"]
            return {
                "session_id": session["session_id"],
                "user_id": session["user_id"],
                "profile_id": session["profile_id"],
                "language": session["language"],
                "models": list(session["models"]),
                "translate": session["translate"],
                "status": session["status"],
                "created_at": session["created_at"],
                "updated_at": session["updated_at"],
                "expires_at": session["expires_at"],
                "transcripts": list(session["transcripts"]),
                "analysis": {category: list(items) for category, items in analysis.items()},
                "analysis_summary": dict(session["analysis_summary"]),
                "updates": list(session["updates"]),
            }

    def destroy_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def cleanup_expired_sessions(self) -> int:
        now = time.time()
        with self._lock:
            expired = [sid for sid, session in self._sessions.items() if session["expires_at"] <= now]
            for session_id in expired:
                self._sessions.pop(session_id, None)
        return len(expired)
