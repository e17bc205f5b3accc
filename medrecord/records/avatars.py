from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any, Optional

from .client import RecordsError, execute

logger = logging.getLogger(__name__)

BUCKET = "avatars"
_DATA_URL_PREFIX_RE = re.compile(r"^data:image/\w+;base64,")


def avatar_path(profile_id: str, filename: str) -> str:
    return f"{profile_id}_{filename}"


def download_avatar(client: Any, profile_id: str, path: Optional[str]) -> bytes:
    if not path:
        raise RecordsError("INVALID_PATH", "Invalid path", 400)
    try:
        return client.storage.from_(BUCKET).download(avatar_path(profile_id, path))
    except Exception as exc:
        raise RecordsError("STORAGE_ERROR", "Error downloading avatar", 500) from exc


def upload_avatar(
    client: Any,
    profile_id: str,
    data: Optional[str],
    filename: Optional[str],
    content_type: Optional[str] = None,
) -> dict[str, str]:
    """Store a base64 (or data URL) image and point the profile's avatarUrl at it."""
    if not data or not filename:
        raise RecordsError("INVALID_REQUEST", "Invalid request", 400)
    try:
        image = base64.b64decode(_DATA_URL_PREFIX_RE.sub("", data), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise RecordsError("INVALID_REQUEST", "Invalid image data", 400) from exc

    path = avatar_path(profile_id, filename)
    storage = client.storage.from_(BUCKET)
    try:
        storage.upload(path, image, {"content-type": content_type or "application/octet-stream"})
    except Exception as exc:
        raise RecordsError("STORAGE_ERROR", "Error uploading avatar", 500) from exc

    try:
        execute(
            client.table("profiles").update({"avatarUrl": filename}).eq("id", profile_id),
            "updating profile avatar",
        )
    except RecordsError:
        logger.error("avatar profile update failed, removing path=%s", path)
        try:
            storage.remove([path])
        except Exception as remove_exc:
            logger.error("avatar cleanup failed path=%s error=%s", path, type(remove_exc).__name__)
        raise
    logger.info("avatar uploaded profile_id=%s", profile_id)
    return {"filename": filename}
