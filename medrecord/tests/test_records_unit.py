import base64
import dataclasses

import pytest
from postgrest.exceptions import APIError

from medrecord.internal_core.config import load_config
from medrecord.records import (
    RecordsError,
    create_document,
    create_user_client,
    delete_document,
    download_attachment,
    download_avatar,
    get_document,
    list_documents,
    list_profiles,
    load_user,
    remove_attachment,
    update_document,
    upload_attachment,
    upload_avatar,
)
from medrecord.records.documents import parse_types


def _not_found() -> APIError:
    return APIError({"message": "JSON object requested, multiple (or no) rows returned", "code": "PGRST116"})


def test_load_user_adds_subscription_stats(fake_supabase) -> None:
    db = fake_supabase(
        {
            ("profiles", "select"): {"id": "user-1", "fullName": "Jane"},
            ("subscriptions", "select"): {"profiles": 2, "scans": 7},
        }
    )
    user = load_user(db, "user-1", default_scans=10, default_profiles=5)
    assert user["subscriptionStats"] == {"profiles": 2, "scans": 7, "default_scans": 10, "default_profiles": 5}
    assert db.executed[0].filters() == {"auth_id": "user-1"}
    assert db.executed[1].filters() == {"id": "user-1"}


def test_load_user_missing_profile_is_404(fake_supabase) -> None:
    db = fake_supabase({("profiles", "select"): _not_found()})
    with pytest.raises(RecordsError) as excinfo:
        load_user(db, "user-1", 10, 5)
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Profile not found"


def test_subscription_failure_is_500(fake_supabase) -> None:
    db = fake_supabase(
        {
            ("profiles", "select"): {"id": "user-1"},
            ("subscriptions", "select"): APIError({"message": "boom", "code": "XX000"}),
        }
    )
    with pytest.raises(RecordsError) as excinfo:
        load_user(db, "user-1", 10, 5)
    assert excinfo.value.status_code == 500
    assert excinfo.value.code == "XX000"


def test_list_profiles_filters_by_parent(fake_supabase) -> None:
    db = fake_supabase({("profiles_links", "select"): [{"status": "approved"}]})
    assert list_profiles(db, "user-1") == [{"status": "approved"}]
    assert db.executed[0].filters() == {"parent_id": "user-1"}


def test_list_documents_types_and_full(fake_supabase) -> None:
    db = fake_supabase({("documents", "select"): [{"id": "d1"}]})
    assert list_documents(db, "p1", "user-1", types=parse_types("profile,health"), full=True) == [{"id": "d1"}]
    query = db.executed[0]
    assert query.filters() == {"user_id": "p1", "keys.user_id": "user-1", "type": ["profile", "health"]}
    assert "content" in query.ops[0][1][0]
    assert parse_types(None) == ["document", "profile", "health"]


def test_get_document_not_found_maps_to_404(fake_supabase) -> None:
    db = fake_supabase({("documents", "select"): _not_found()})
    with pytest.raises(RecordsError) as excinfo:
        get_document(db, "p1", "d1", "user-1")
    assert excinfo.value.status_code == 404


def test_create_document_validates_input(fake_supabase) -> None:
    db = fake_supabase()
    for kwargs in ({"doc_type": None, "metadata": {"a": 1}}, {"doc_type": "document", "metadata": None}):
        with pytest.raises(RecordsError) as excinfo:
            create_document(db, "p1", "user-1", **kwargs)
        assert excinfo.value.status_code == 400
    with pytest.raises(RecordsError) as excinfo:
        create_document(db, "p1", "user-1", doc_type="memo", metadata={"a": 1})
    assert excinfo.value.message == "Invalid document type"


def test_create_unique_document_rejects_duplicate(fake_supabase) -> None:
    db = fake_supabase({("documents", "select"): [{"id": "existing"}]})
    with pytest.raises(RecordsError) as excinfo:
        create_document(db, "p1", "user-1", doc_type="health", metadata={"a": 1})
    assert excinfo.value.message == "Document already exists"


def test_create_document_inserts_keys_with_document_id(fake_supabase) -> None:
    db = fake_supabase(
        {
            ("documents", "select"): [],
            ("documents", "insert"): [{"id": "d9"}],
            ("keys", "insert"): [],
        }
    )
    document_id = create_document(
        db,
        "p1",
        "user-1",
        doc_type="profile",
        metadata={"title": "x"},
        content="cipher",
        keys=[{"user_id": "user-1", "key": "k"}],
    )
    assert document_id == "d9"
    key_insert = next(q for q in db.executed if q.table == "keys")
    assert key_insert.ops[0][1][0] == [{"user_id": "user-1", "key": "k", "document_id": "d9", "author_id": "user-1"}]


def test_create_document_rolls_back_when_keys_fail(fake_supabase) -> None:
    db = fake_supabase(
        {
            ("documents", "insert"): [{"id": "d9"}],
            ("keys", "insert"): APIError({"message": "rls", "code": "42501"}),
            ("documents", "delete"): [],
        }
    )
    with pytest.raises(RecordsError) as excinfo:
        create_document(db, "p1", "user-1", doc_type="document", metadata={"a": 1}, keys=[{"key": "k"}])
    assert excinfo.value.message == "Error inserting keys"
    rollback = db.executed[-1]
    assert (rollback.table, rollback.action) == ("documents", "delete")
    assert rollback.filters() == {"id": "d9"}


def test_update_and_delete_document(fake_supabase) -> None:
    db = fake_supabase({("documents", "update"): [{"id": "d1"}], ("documents", "delete"): [{"id": "d1"}]})
    with pytest.raises(RecordsError):
        update_document(db, "p1", "d1", metadata={"a": 1}, content=None)
    assert update_document(db, "p1", "d1", metadata={"a": 1}, content="c") == [{"id": "d1"}]
    assert delete_document(db, "p1", "d1") == [{"id": "d1"}]
    assert db.executed[-1].filters() == {"user_id": "p1", "id": "d1"}


def test_attachment_roundtrip(fake_supabase) -> None:
    db = fake_supabase()
    attachment = upload_attachment(db, "user-1", "encrypted-payload")
    prefix, name = attachment.path.split("/")
    assert prefix == "user-1"
    assert len(name) == 26
    assert attachment.url.endswith(attachment.path)
    assert download_attachment(db, attachment.path) == b"encrypted-payload"
    assert remove_attachment(db, attachment.path) == {"deleted": True}
    with pytest.raises(RecordsError) as excinfo:
        download_attachment(db, attachment.path)
    assert excinfo.value.status_code == 500
    with pytest.raises(RecordsError) as excinfo:
        remove_attachment(db, "")
    assert excinfo.value.status_code == 400


def _supabase_config():
    return dataclasses.replace(
        load_config(),
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_ANON_KEY="anon.header.signature",
    )


def test_user_client_sends_user_token_to_every_service(monkeypatch) -> None:
    captured = {}

    def fake_create_client(url, key, options=None):
        captured.update(url=url, key=key, options=options)
        return "client"

    monkeypatch.setattr("medrecord.records.client.create_client", fake_create_client)
    assert create_user_client(_supabase_config(), "user-jwt") == "client"
    assert captured["key"] == "anon.header.signature"
    assert captured["options"].headers["Authorization"] == "Bearer user-jwt"


def test_real_user_client_carries_user_token() -> None:
    client = create_user_client(_supabase_config(), "user-jwt")
    assert client.options.headers["Authorization"] == "Bearer user-jwt"


def test_user_client_requires_configuration() -> None:
    cfg = dataclasses.replace(load_config(), SUPABASE_URL="", SUPABASE_ANON_KEY="")
    with pytest.raises(RecordsError) as excinfo:
        create_user_client(cfg, "user-jwt")
    assert excinfo.value.status_code == 503


def test_failed_rollback_keeps_key_error(fake_supabase) -> None:
    db = fake_supabase(
        {
            ("documents", "insert"): [{"id": "d9"}],
            ("keys", "insert"): APIError({"message": "rls", "code": "42501"}),
            ("documents", "delete"): APIError({"message": "gone", "code": "XX000"}),
        }
    )
    with pytest.raises(RecordsError) as excinfo:
        create_document(db, "p1", "user-1", doc_type="document", metadata={"a": 1}, keys=[{"key": "k"}])
    assert excinfo.value.message == "Error inserting keys"
    assert excinfo.value.code == "42501"
    assert db.executed[-1].action == "delete"


def test_missing_subscription_counts_default_to_zero(fake_supabase) -> None:
    db = fake_supabase(
        {
            ("profiles", "select"): {"id": "user-1"},
            ("subscriptions", "select"): {"profiles": None, "scans": 3},
        }
    )
    user = load_user(db, "user-1", default_scans=10, default_profiles=5)
    assert user["subscriptionStats"] == {"profiles": 0, "scans": 3, "default_scans": 10, "default_profiles": 5}


def test_avatar_upload_strips_data_url_and_updates_profile(fake_supabase) -> None:
    db = fake_supabase({("profiles", "update"): [{"id": "p1"}]})
    encoded = base64.b64encode(b"\x89PNG-bytes").decode("ascii")

    result = upload_avatar(db, "p1", f"data:image/png;base64,{encoded}", "face.png", "image/png")

    assert result == {"filename": "face.png"}
    assert db.storage.files["p1_face.png"] == b"\x89PNG-bytes"
    update = db.executed[-1]
    assert update.ops[0] == ("update", ({"avatarUrl": "face.png"},))
    assert update.filters() == {"id": "p1"}
    assert download_avatar(db, "p1", "face.png") == b"\x89PNG-bytes"


def test_avatar_upload_removes_file_when_profile_update_fails(fake_supabase) -> None:
    db = fake_supabase({("profiles", "update"): APIError({"message": "rls", "code": "42501"})})
    encoded = base64.b64encode(b"img").decode("ascii")

    with pytest.raises(RecordsError) as excinfo:
        upload_avatar(db, "p1", encoded, "face.png")
    assert excinfo.value.status_code == 500
    assert "p1_face.png" not in db.storage.files


def test_avatar_rejects_bad_input(fake_supabase) -> None:
    db = fake_supabase()
    for args in (("p1", "not base64!!", "face.png"), ("p1", "", "face.png"), ("p1", "aW1n", "")):
        with pytest.raises(RecordsError) as excinfo:
            upload_avatar(db, *args)
        assert excinfo.value.status_code == 400
    with pytest.raises(RecordsError) as excinfo:
        download_avatar(db, "p1", None)
    assert excinfo.value.status_code == 400
    with pytest.raises(RecordsError) as excinfo:
        download_avatar(db, "p1", "missing.png")
    assert excinfo.value.status_code == 500
