from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

_BASE64_PREFIX = "base64-"


class AuthError(RuntimeError):
    pass


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    access_token: str
    email: Optional[str] = None


def _decode_base64(value: str) -> str:
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")


def token_from_cookie(raw: Optional[str]) -> Optional[str]:
    """Access token from a Supabase auth cookie.

    Accepts a bare JWT, a JSON session object or array, or the `base64-` prefixed
    JSON written by the Supabase SSR helpers.
    """
    value = (raw or "").strip()
    if not value:
        return None
    if value.startswith(_BASE64_PREFIX):
        try:
            value = _decode_base64(value[len(_BASE64_PREFIX):])
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return None
    if value[:1] not in ("{", "["):
        return value
    try:
        parsed = json.loads(value)
    except ValueError:
        return None
    if isinstance(parsed, dict):
        token = parsed.get("access_token")
    elif isinstance(parsed, list) and parsed:
        token = parsed[0]
    else:
        token = None
    return token if isinstance(token, str) and token else None


def extract_access_token(authorization: Optional[str], cookie_value: Optional[str]) -> Optional[str]:
    header = (authorization or "").strip()
    if header:
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return token_from_cookie(cookie_value)


def verify_session(client: Any, access_token: str) -> AuthSession:
    try:
        res = client.auth.get_user(access_token)
    except Exception as exc:
        raise AuthError("Invalid or expired token") from exc
    user = getattr(res, "user", None)
    user_id = getattr(user, "id", None)
    if not user_id:
        raise AuthError("Invalid or expired token")
    return AuthSession(user_id=str(user_id), access_token=access_token, email=getattr(user, "email", None))
