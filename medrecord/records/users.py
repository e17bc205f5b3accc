from __future__ import annotations

from typing import Any, Dict, List

from medrecord.internal_core.contracts import SubscriptionStats

from .client import RecordsError, execute

PROFILE_COLUMNS = (
    "fullName, subscription, publicKey, avatarUrl, auth_id, id, language, "
    "private_keys(privateKey, key_hash, key_pass)"
)
LINKED_PROFILE_COLUMNS = (
    "profiles!profiles_links_profile_id_fkey(id, auth_id, owner_id, fullName, language, avatarUrl, publicKey), status"
)


def load_user(client: Any, user_id: str, default_scans: int, default_profiles: int) -> Dict[str, Any]:
    try:
        profile = execute(
            client.table("profiles").select(PROFILE_COLUMNS).eq("auth_id", user_id).single(),
            "loading profile",
        )
    except RecordsError as exc:
        if exc.status_code == 404:
            raise RecordsError(exc.code, "Profile not found", 404) from exc
        raise
    subscription = execute(
        client.table("subscriptions").select("profiles, scans").eq("id", user_id).single(),
        "loading subscription",
    )
    profile = dict(profile or {})
    stats = SubscriptionStats(
        **{k: v for k, v in (subscription or {}).items() if v is not None},
        default_scans=default_scans,
        default_profiles=default_profiles,
    )
    profile["subscriptionStats"] = stats.model_dump()
    return profile


def list_profiles(client: Any, parent_id: str) -> List[Dict[str, Any]]:
    return execute(
        client.table("profiles_links").select(LINKED_PROFILE_COLUMNS).eq("parent_id", parent_id),
        "loading profiles",
    ) or []
