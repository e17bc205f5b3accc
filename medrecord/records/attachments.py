from __future__ import annotations

import logging
import secrets
import string
from typing import Any

from medrecord.internal_core.contracts import Attachment

from .client import RecordsError

logger = logging.getLogger(__name__)

BUCKET = "attachments"
_NAME_ALPHABET = string.digits + string.ascii_lowercase
_NAME_LENGTH = 26


def _random_name() -> str:
    return "".join(secrets.choice(_NAME_ALPHABET) for _ in range(_NAME_LENGTH))


def _require_path(path: str | None) -> str:
    if not path:
        raise RecordsError("INVALID_PATH", "Invalid path", 400)
    return path


def download_attachment(client: Any, path: str | None) -> bytes:
    path = _require_path(path)
    try:
        return client.storage.from_(BUCKET).download(path)
    except Exception as exc:
        raise RecordsError("STORAGE_ERROR", "Error downloading attachment", 500) from exc


def upload_attachment(client: Any, user_id: str, file_data: str) -> Attachment:
    """Store an (already encrypted) text payload under `<user_id>/<random name>`."""
    path = f"{user_id}/{_random_name()}"
    storage = client.storage.from_(BUCKET)
    try:
        storage.upload(path, file_data.encode("utf-8"), {"content-type": "text/plain"})
    except Exception as exc:
        raise RecordsError("STORAGE_ERROR", "Error uploading attachment", 500) from exc
    logger.info("attachment uploaded path=%s", path)
    return Attachment(url=storage.get_public_url(path), path=path)


def remove_attachment(client: Any, path: str | None) -> dict[str, bool]:
    path = _require_path(path)
    try:
        client.storage.from_(BUCKET).remove([path])
    except Exception as exc:
        raise RecordsError("STORAGE_ERROR", "Error deleting attachment", 500) from exc
    return {"deleted": True}
