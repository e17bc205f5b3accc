import asyncio
import threading
import time

import httpx
from fastapi.testclient import TestClient

from medrecord.api.main import app
from medrecord.feedback.store import FeedbackStore
from medrecord.session import SessionStore
from medrecord.transcription.mock import MockTranscriptionProvider

AUTH = {"Authorization": "Bearer good-token"}


def _clear_injected() -> None:
    for name in (
        "supabase_client_factory",
        "openai_client",
        "transcription_provider",
        "transcription_fallback_provider",
        "session_store",
        "feedback_store",
    ):
        if hasattr(app.state, name):
            delattr(app.state, name)


def test_healthz() -> None:
    client = TestClient(app)
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_labs_normalize_maps_synonym_to_property() -> None:
    client = TestClient(app)
    response = client.get("/v1/labs/normalize", params={"term": "Hgb"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["canonical"] == "Hemoglobin"
    assert payload["property"]["loinc_code"] == "718-7"

    unknown = client.get("/v1/labs/normalize", params={"term": "qqqq"}).json()
    assert unknown["canonical"] is None
    assert unknown["property"] is None


def test_labs_series_summary() -> None:
    client = TestClient(app)
    response = client.post(
        "/v1/labs/series/summary",
        json={
            "code": "hemoglobin",
            "signals": {
                "hemoglobin": {
                    "values": [
                        {"date": "2024-01-01", "value": "100", "unit": "g/L"},
                        {"date": "2024-02-01", "value": "110", "unit": "g/L"},
                    ]
                }
            },
        },
    )
    assert response.status_code == 200
    payload = response.json()
    assert [item["value"] for item in payload["items"]] == [100.0, 110.0]
    assert payload["percentage"] == "10.0"


def test_labdata_returns_number_within_bounds() -> None:
    client = TestClient(app)
    response = client.get("/v1/labdata", params={"min": "2", "max": "3"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert 2.0 <= float(response.text) <= 3.0


def test_import_report_flow(fake_supabase, fake_openai) -> None:
    app.state.supabase_client_factory = lambda token: fake_supabase()
    app.state.openai_client = fake_openai(
        [
            {"isMedical": True, "type": "report", "hasLabOrVitals": True, "tags": []},
            {"diagnosis": [{"code": "J10", "description": "Influenza"}]},
            {"signals": [{"signal": "Leukocytes", "value": "7.1", "valueType": "number", "unit": "10^9/l"}]},
        ]
    )
    client = TestClient(app)
    try:
        response = client.post(
            "/v1/import/report",
            json={"text": "Discharge report, WBC 7.1", "language": "English", "preferredProvider": "openai-gpt4"},
            headers=AUTH,
        )
    finally:
        _clear_injected()
    assert response.status_code == 200
    payload = response.json()
    assert payload["report"]["signals"][0]["signal"] == "leukocytes"
    assert payload["report"]["signals"][0]["value"] == 7.1
    assert payload["provider"]["selectedProvider"] == "openai-gpt4"
    assert payload["tokenUsage"]["total"] == 30


def test_feedback_roundtrip(fake_supabase) -> None:
    app.state.supabase_client_factory = lambda token: fake_supabase()
    app.state.feedback_store = FeedbackStore()
    client = TestClient(app)
    try:
        created = client.post(
            "/v1/session/feedback",
            json={"itemType": "diagnosis", "itemContent": {"name": "Flu"}, "feedback": "approved", "timestamp": 1},
            headers=AUTH,
        )
        by_type = client.get("/v1/session/feedback", params={"type": "diagnosis"}, headers=AUTH)
        analytics = client.get("/v1/session/feedback", headers=AUTH)
    finally:
        _clear_injected()
    assert created.status_code == 200
    assert created.json()["success"] is True
    assert created.json()["feedbackId"].startswith("feedback_")
    assert by_type.json()["count"] == 1
    assert by_type.json()["feedback"][0]["itemType"] == "diagnosis"
    assert analytics.json()["approvalRates"] == {"diagnosis": 100}


def test_session_lifecycle_with_transcription_and_analysis(fake_supabase, fake_openai) -> None:
    app.state.supabase_client_factory = lambda token: fake_supabase()
    app.state.session_store = SessionStore(ttl_seconds=60)
    app.state.feedback_store = FeedbackStore()
    app.state.transcription_provider = MockTranscriptionProvider()
    app.state.openai_client = fake_openai(
        [{"diagnosis": [{"name": "Influenza", "probability": 0.7}], "clarifyingQuestions": []}]
    )
    client = TestClient(app)
    try:
        started = client.post("/v1/session/start", json={"language": "en", "profileId": "p1"}, headers=AUTH)
        assert started.status_code == 200
        session_id = started.json()["session_id"]
        assert started.json()["status"] == "active"

        chunk = client.post(
            f"/v1/session/{session_id}/transcribe",
            data={"chunkId": "c-1", "analyze": "true"},
            files={"audio": ("chunk.webm", b"\x00\x01\x02", "audio/webm")},
            headers=AUTH,
        )
        assert chunk.status_code == 200
        body = chunk.json()
        assert body["sequenceNumber"] == 0
        assert body["processing"] == {"provider": "mock", "status": "OK_PRIMARY"}
        assert body["analysisSummary"]["diagnosis"]["added"] == 1

        paused = client.post(f"/v1/session/{session_id}/status", json={"status": "paused"}, headers=AUTH)
        assert paused.json() == {"sessionId": session_id, "status": "paused"}

        status = client.get(f"/v1/session/{session_id}/status", headers=AUTH).json()
        assert status["status"] == "paused"
        assert len(status["transcripts"]) == 1
        assert status["analysis"]["diagnosis"][0]["data"]["name"] == "Influenza"
        codes = [u["code"] for u in status["updates"]]
        assert codes == ["SESSION_STARTED", "TRANSCRIPT_ADDED", "ANALYSIS_MERGED", "SESSION_STATUS"]
        assert all("simulated transcript" not in u["detail"] for u in status["updates"])

        deleted = client.delete(f"/v1/session/{session_id}", headers=AUTH)
        assert deleted.json()["deleted"] is True
        assert client.get(f"/v1/session/{session_id}/status", headers=AUTH).status_code == 404
    finally:
        _clear_injected()


def test_plain_transcribe_uses_instructions_language(fake_supabase) -> None:
    seen = {}

    class RecordingProvider(MockTranscriptionProvider):
        def transcribe(self, audio, **kwargs):
            seen.update(kwargs)
            return super().transcribe(audio, **kwargs)

    app.state.supabase_client_factory = lambda token: fake_supabase()
    app.state.transcription_provider = RecordingProvider()
    client = TestClient(app)
    try:
        response = client.post(
            "/v1/transcribe",
            data={"instructions": '{"lang": "cs"}'},
            files={"file": ("a.mp3", b"\x00\x01", "audio/mpeg")},
            headers=AUTH,
        )
    finally:
        _clear_injected()
    assert response.status_code == 200
    assert response.json()["provider"] == "mock"
    assert seen["language"] == "cs"


def test_documents_and_attachments(fake_supabase) -> None:
    db = fake_supabase(
        {
            ("documents", "select"): [{"id": "d1", "type": "document"}],
            ("documents", "insert"): [{"id": "d2"}],
            ("keys", "insert"): [],
            ("documents", "update"): [{"id": "d1"}],
            ("documents", "delete"): [{"id": "d1"}],
            ("profiles", "select"): {"id": "user-1"},
            ("subscriptions", "select"): {"profiles": 1, "scans": 2},
        }
    )
    app.state.supabase_client_factory = lambda token: db
    client = TestClient(app)
    try:
        user = client.get("/v1/med/user", headers=AUTH).json()
        listed = client.get("/v1/med/profiles/p1/documents", params={"types": "document"}, headers=AUTH)
        created = client.post(
            "/v1/med/profiles/p1/documents",
            json={"type": "document", "metadata": {"title": "t"}, "content": "c", "keys": [{"user_id": "user-1", "key": "k"}]},
            headers=AUTH,
        )
        updated = client.put(
            "/v1/med/profiles/p1/documents/d1",
            json={"metadata": {"title": "t2"}, "content": "c2"},
            headers=AUTH,
        )
        removed = client.delete("/v1/med/profiles/p1/documents/d1", headers=AUTH)

        uploaded = client.post("/v1/med/profiles/p1/attachments", json={"file": "ciphertext"}, headers=AUTH).json()
        downloaded = client.get("/v1/med/profiles/p1/attachments", params={"path": uploaded["path"]}, headers=AUTH)
        dropped = client.delete("/v1/med/profiles/p1/attachments", params={"path": uploaded["path"]}, headers=AUTH)
    finally:
        _clear_injected()

    assert user["subscriptionStats"]["scans"] == 2
    assert listed.json() == [{"id": "d1", "type": "document"}]
    assert created.json() == {"id": "d2"}
    key_insert = next(q for q in db.executed if q.table == "keys")
    assert key_insert.ops[0][1][0] == [{"user_id": "user-1", "key": "k", "document_id": "d2", "author_id": "user-1"}]
    assert updated.json() == [{"id": "d1"}]
    assert removed.json() == [{"id": "d1"}]
    assert uploaded["path"].startswith("user-1/")
    assert downloaded.content == b"ciphertext"
    assert dropped.json() == {"deleted": True}


def test_slow_transcription_does_not_block_other_requests(fake_supabase) -> None:
    entered = threading.Event()

    class SlowProvider(MockTranscriptionProvider):
        def transcribe(self, audio, **kwargs):
            entered.set()
            time.sleep(0.8)
            return super().transcribe(audio, **kwargs)

    app.state.supabase_client_factory = lambda token: fake_supabase()
    app.state.transcription_provider = SlowProvider()

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            started = time.perf_counter()
            slow = asyncio.create_task(
                client.post(
                    "/v1/transcribe",
                    files={"file": ("a.mp3", b"\x00\x01", "audio/mpeg")},
                    headers=AUTH,
                )
            )
            while not entered.is_set():
                await asyncio.sleep(0.01)
            health = await client.get("/healthz")
            health_elapsed = time.perf_counter() - started
            still_running = not slow.done()
            slow_response = await slow
        return health, health_elapsed, still_running, slow_response

    try:
        health, health_elapsed, still_running, slow_response = asyncio.run(scenario())
    finally:
        _clear_injected()
    assert health.status_code == 200
    assert still_running
    assert health_elapsed < 0.6
    assert slow_response.status_code == 200


def test_avatar_upload_and_download(fake_supabase) -> None:
    db = fake_supabase({("profiles", "update"): [{"id": "p1"}]})
    app.state.supabase_client_factory = lambda token: db
    client = TestClient(app)
    try:
        uploaded = client.post(
            "/v1/med/profiles/p1/avatar",
            json={"file": "data:image/jpeg;base64,aW1hZ2U=", "filename": "me.jpg", "type": "image/jpeg"},
            headers=AUTH,
        )
        downloaded = client.get("/v1/med/profiles/p1/avatar", params={"path": "me.jpg"}, headers=AUTH)
        missing = client.get("/v1/med/profiles/p1/avatar", headers=AUTH)
    finally:
        _clear_injected()
    assert uploaded.json() == {"filename": "me.jpg"}
    assert downloaded.content == b"image"
    assert missing.status_code == 400
