from __future__ import annotations

import logging
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from medrecord.internal_core.config import AppConfig

logger = logging.getLogger(__name__)

NOT_FOUND_CODE = "PGRST116"


class RecordsError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int = 500):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


def create_user_client(cfg: AppConfig, access_token: str) -> Client:
    """Supabase client whose database and storage calls run as the token's user (row level security applies)."""
    if not cfg.supabase_configured():
        raise RecordsError("SUPABASE_NOT_CONFIGURED", "Supabase is not configured", 503)
    options = ClientOptions(headers={"Authorization": f"Bearer {access_token}"})
    return create_client(cfg.SUPABASE_URL, cfg.SUPABASE_ANON_KEY, options=options)


def execute(query: Any, action: str) -> Any:
    """Run a PostgREST query and return its data, mapping APIError to RecordsError."""
    try:
        return query.execute().data
    except APIError as exc:
        code = exc.code or "DB_ERROR"
        logger.error("records query failed action=%s code=%s", action, code)
        status = 404 if code == NOT_FOUND_CODE else 500
        raise RecordsError(code, f"Error {action}", status) from exc
