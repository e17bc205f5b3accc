from __future__ import annotations

"""
Encrypted document records.

Design intent:
- Document content arrives already encrypted; this layer only stores it.
- Every document is readable through per-user rows in `keys`.
- `profile` and `health` documents are singletons per profile.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, get_args

from postgrest.exceptions import APIError

from medrecord.internal_core.contracts import DocumentType

from .client import RecordsError, execute

logger = logging.getLogger(__name__)

DOCUMENT_TYPES: tuple[str, ...] = get_args(DocumentType)
UNIQUE_TYPES = ("profile", "health")

_LIST_COLUMNS = "id, metadata, type, user_id, author_id, keys!inner(key, owner_id)"
_LIST_COLUMNS_FULL = "id, metadata, type, user_id, content, attachments, author_id, keys!inner(key, owner_id)"
_GET_COLUMNS = "id, metadata, content, type, attachments, user_id, keys!inner(key, owner_id)"


def parse_types(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DOCUMENT_TYPES)
    return [t.strip() for t in raw.split(",") if t.strip()]


def list_documents(
    client: Any,
    profile_id: str,
    user_id: str,
    types: Optional[Iterable[str]] = None,
    full: bool = False,
) -> List[Dict[str, Any]]:
    query = (
        client.table("documents")
        .select(_LIST_COLUMNS_FULL if full else _LIST_COLUMNS)
        .eq("user_id", profile_id)
        .eq("keys.user_id", user_id)
        .in_("type", list(types or DOCUMENT_TYPES))
    )
    return execute(query, "loading documents") or []


def get_document(client: Any, profile_id: str, document_id: str, user_id: str) -> Dict[str, Any]:
    query = (
        client.table("documents")
        .select(_GET_COLUMNS)
        .eq("user_id", profile_id)
        .eq("id", document_id)
        .eq("keys.user_id", user_id)
        .single()
    )
    return execute(query, "loading document")


def create_document(
    client: Any,
    profile_id: str,
    user_id: str,
    *,
    doc_type: Optional[str],
    metadata: Any,
    content: Any = None,
    attachments: Any = None,
    keys: Optional[List[Dict[str, Any]]] = None,
) -> str:
    if not doc_type or not metadata:
        raise RecordsError("INVALID_REQUEST", "Invalid request", 400)
    if doc_type not in DOCUMENT_TYPES:
        raise RecordsError("INVALID_DOCUMENT_TYPE", "Invalid document type", 400)

    if doc_type in UNIQUE_TYPES:
        existing = execute(
            client.table("documents").select("id").eq("user_id", profile_id).eq("type", doc_type),
            "checking for existing document",
        )
        if existing:
            raise RecordsError("DOCUMENT_EXISTS", "Document already exists", 400)

    inserted = execute(
        client.table("documents").insert(
            [
                {
                    "user_id": profile_id,
                    "type": doc_type,
                    "metadata": metadata,
                    "content": content,
                    "author_id": user_id,
                    "attachments": attachments,
                }
            ]
        ),
        "inserting document",
    )
    if not inserted:
        raise RecordsError("DB_ERROR", "Error inserting document", 500)
    document_id = str(inserted[0]["id"])

    key_rows = [{**key, "document_id": document_id, "author_id": user_id} for key in (keys or [])]
    if key_rows:
        try:
            client.table("keys").insert(key_rows).execute()
        except APIError as exc:
            logger.error("key insert failed, rolling back document_id=%s code=%s", document_id, exc.code)
            try:
                client.table("documents").delete().eq("id", document_id).execute()
            except APIError as rollback_exc:
                logger.error("rollback failed, orphan document_id=%s code=%s", document_id, rollback_exc.code)
            raise RecordsError(exc.code or "DB_ERROR", "Error inserting keys", 500) from exc
    return document_id


def update_document(
    client: Any,
    profile_id: str,
    document_id: str,
    *,
    metadata: Any,
    content: Any,
    attachments: Any = None,
) -> List[Dict[str, Any]]:
    if not metadata or not content:
        raise RecordsError("INVALID_REQUEST", "Invalid request", 400)
    query = (
        client.table("documents")
        .update({"metadata": metadata, "content": content, "attachments": attachments})
        .eq("user_id", profile_id)
        .eq("id", document_id)
    )
    return execute(query, "updating document") or []


def delete_document(client: Any, profile_id: str, document_id: str) -> List[Dict[str, Any]]:
    query = client.table("documents").delete().eq("user_id", profile_id).eq("id", document_id)
    return execute(query, "deleting document") or []
