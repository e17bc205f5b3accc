"""Supabase-backed user, profile, document, attachment and avatar access."""

from .client import RecordsError, create_user_client
from .documents import (
    DOCUMENT_TYPES,
    UNIQUE_TYPES,
    create_document,
    delete_document,
    get_document,
    list_documents,
    update_document,
)
from .attachments import download_attachment, remove_attachment, upload_attachment
from .avatars import download_avatar, upload_avatar
from .users import list_profiles, load_user

__all__ = [
    "DOCUMENT_TYPES",
    "RecordsError",
    "UNIQUE_TYPES",
    "create_document",
    "create_user_client",
    "delete_document",
    "download_attachment",
    "download_avatar",
    "get_document",
    "list_documents",
    "list_profiles",
    "load_user",
    "remove_attachment",
    "update_document",
    "upload_attachment",
    "upload_avatar",
]
