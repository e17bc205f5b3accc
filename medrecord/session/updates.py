from __future__ import annotations

import time

from medrecord.internal_core.contracts import SessionUpdate, SessionUpdateType

from .store import SessionStore


def _sanitize_detail(detail: str) -> str:
    # IMPORTANT: Never include transcript text, analysis content or audio bytes in detail.
    detail = (detail or "").replace("\n", " ").strip()
    if len(detail) > 200:
        detail = detail[:200] + "…"
    return detail


def log_update(
    store: SessionStore,
    session_id: str,
    update_type: SessionUpdateType,
    code: str,
    detail: str = "",
) -> None:
    update = SessionUpdate(
        type=update_type,
        code=code,
        detail=_sanitize_detail(detail),
        timestamp=time.time(),
    )
    store.append_update(session_id, update)
