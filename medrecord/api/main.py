from __future__ import annotations

"""
HTTP surface for the medrecord backend.

Design intent:
- Keep handlers thin: authenticate, validate, delegate, map errors.
- Resolve hosted-API collaborators from app.state so tests can inject fakes.
- Never log document content, transcript text or audio bytes.
"""

import json
import logging
import random
from dataclasses import asdict
from typing import Any, Callable, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from medrecord.ai.gpt import LLMExtractionError, create_openai_client
from medrecord.api.auth import AuthError, AuthSession, extract_access_token, verify_session
from medrecord.feedback.store import FeedbackStore
from medrecord.imports import NotMedicalInputError, analyze_report, assess
from medrecord.internal_core.config import AppConfig, load_config
from medrecord.internal_core.contracts import (
    DocumentKey,
    FeedbackData,
    SessionStatus,
    TranscriptionConversationTurn,
    TranscriptionPayload,
)
from medrecord.labs.properties import property_by_key
from medrecord.labs.synonyms import synonyms
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
from medrecord.report.utils import (
    get_lab_value_for,
    get_percentage_from_last_values,
    get_trend_status_from_last_values,
)
from medrecord.session import SessionStore, analyze_conversation, finalize_report
from medrecord.session.updates import log_update
from medrecord.transcription import (
    TranscriptionError,
    TranscriptionProvider,
    TranscriptionResult,
    build_provider,
    transcribe_with_fallback,
)


class ImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    images: Optional[list[str]] = None
    text: Optional[str] = None
    language: str = "English"
    preferred_provider: Optional[str] = Field(default=None, alias="preferredProvider")


class ConversationRequest(BaseModel):
    text: str
    language: str = "English"


class SessionStartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    language: str = Field(default="en", min_length=2, max_length=16)
    models: list[str] = Field(default_factory=list)
    profile_id: Optional[str] = Field(default=None, alias="profileId")
    translate: bool = False


class SessionStartResponse(BaseModel):
    session_id: str
    status: SessionStatus


class SessionStatusUpdateRequest(BaseModel):
    status: SessionStatus


class DocumentCreateRequest(BaseModel):
    type: Optional[str] = None
    metadata: Any = None
    content: Any = None
    attachments: Any = None
    keys: list[DocumentKey] = Field(default_factory=list)


class DocumentUpdateRequest(BaseModel):
    metadata: Any = None
    content: Any = None
    attachments: Any = None


class AttachmentUploadRequest(BaseModel):
    file: str


class AvatarUploadRequest(BaseModel):
    file: str
    filename: str = Field(min_length=1)
    type: Optional[str] = None


class SeriesSummaryRequest(BaseModel):
    signals: dict[str, Any] = Field(default_factory=dict)
    code: str = Field(min_length=1)
    unit: Optional[str] = None


class SeriesSummaryResponse(BaseModel):
    code: str
    unit: Optional[str] = None
    items: list[dict[str, Any]] = Field(default_factory=list)
    percentage: str
    trend: str


app = FastAPI(title="medrecord backend service")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_config() -> AppConfig:
    existing = getattr(app.state, "config", None)
    if isinstance(existing, AppConfig):
        return existing
    created = load_config()
    setattr(app.state, "config", created)
    return created


def _configure_logging(cfg: AppConfig) -> None:
    level = logging.getLevelName(cfg.MEDRECORD_LOG_LEVEL.strip().upper())
    if isinstance(level, int):
        logging.getLogger("medrecord").setLevel(level)


_configure_logging(_get_config())


def _get_session_store() -> SessionStore:
    existing = getattr(app.state, "session_store", None)
    if isinstance(existing, SessionStore):
        return existing
    created = SessionStore(ttl_seconds=_get_config().MEDRECORD_SESSION_TTL_SECONDS)
    setattr(app.state, "session_store", created)
    return created


def _get_feedback_store() -> FeedbackStore:
    existing = getattr(app.state, "feedback_store", None)
    if isinstance(existing, FeedbackStore):
        return existing
    created = FeedbackStore()
    setattr(app.state, "feedback_store", created)
    return created


def _get_openai_client() -> Any:
    existing = getattr(app.state, "openai_client", None)
    if existing is not None:
        return existing
    cfg = _get_config()
    if not cfg.OPENAI_API_KEY:
        raise HTTPException(status_code=503, detail="OpenAI is not configured.")
    created = create_openai_client(cfg.OPENAI_API_KEY)
    setattr(app.state, "openai_client", created)
    return created


def _get_supabase_client_factory() -> Callable[[str], Any]:
    factory = getattr(app.state, "supabase_client_factory", None)
    if callable(factory):
        return factory
    cfg = _get_config()
    return lambda token: create_user_client(cfg, token)


def _get_transcription_providers() -> tuple[TranscriptionProvider, Optional[TranscriptionProvider]]:
    primary = getattr(app.state, "transcription_provider", None)
    if isinstance(primary, TranscriptionProvider):
        fallback = getattr(app.state, "transcription_fallback_provider", None)
        return primary, (fallback if isinstance(fallback, TranscriptionProvider) else None)

    cfg = _get_config()
    openai_client = getattr(app.state, "openai_client", None)
    try:
        primary = build_provider(cfg.MEDRECORD_TRANSCRIPTION_PROVIDER, cfg, openai_client)
    except TranscriptionError as exc:
        raise HTTPException(status_code=503, detail=f"Transcription unavailable: {exc.code}") from exc
    if primary is None:
        raise HTTPException(status_code=503, detail="No transcription provider configured.")

    fallback: Optional[TranscriptionProvider] = None
    try:
        fallback = build_provider(cfg.MEDRECORD_TRANSCRIPTION_FALLBACK, cfg, openai_client)
    except TranscriptionError as exc:
        logger.warning("transcription fallback unavailable code=%s", exc.code)

    setattr(app.state, "transcription_provider", primary)
    setattr(app.state, "transcription_fallback_provider", fallback)
    return primary, fallback


def _records_http_error(exc: RecordsError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def _authorize(request: Request) -> tuple[AuthSession, Any]:
    cfg = _get_config()
    token = extract_access_token(
        request.headers.get("authorization"),
        request.cookies.get(cfg.MEDRECORD_AUTH_COOKIE),
    )
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        client = _get_supabase_client_factory()(token)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc
    try:
        session = verify_session(client, token)
    except AuthError as exc:
        raise HTTPException(status_code=401, detail="Unauthorized") from exc
    return session, client


async def _json_object(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid JSON body.") from exc
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="JSON body must be an object.")
    return body


def _parse_instructions(raw: Any) -> dict[str, Any]:
    instructions: dict[str, Any] = {"lang": "en"}
    if isinstance(raw, str) and raw.strip():
        try:
            extra = json.loads(raw)
        except ValueError:
            logger.warning("ignoring unparsable transcription instructions")
        else:
            if isinstance(extra, dict):
                instructions.update(extra)
    return instructions


async def _read_audio_upload(form: Any, field: str) -> tuple[bytes, str, str]:
    upload = form.get(field)
    if upload is None:
        raise HTTPException(status_code=400, detail="No file provided")
    if isinstance(upload, str) or not hasattr(upload, "read"):
        raise HTTPException(status_code=400, detail="Invalid file")
    content_type = str(getattr(upload, "content_type", "") or "")
    if "audio" not in content_type:
        raise HTTPException(status_code=400, detail="Invalid file type - must be audio")
    audio = await upload.read()
    if not audio:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    if len(audio) > _get_config().MEDRECORD_MAX_AUDIO_BYTES:
        raise HTTPException(status_code=413, detail="Uploaded file exceeds the audio size limit.")
    return audio, str(getattr(upload, "filename", "") or "audio.mp3"), content_type


def _transcribe(audio: bytes, filename: str, content_type: str, language: str) -> TranscriptionPayload:
    primary, fallback = _get_transcription_providers()
    try:
        result, status = transcribe_with_fallback(
            primary,
            fallback,
            audio,
            filename=filename,
            content_type=content_type,
            language=language,
        )
    except TranscriptionError as exc:
        logger.error("transcription failed code=%s provider=%s", exc.code, exc.provider_name)
        raise HTTPException(status_code=503, detail=f"Transcription failed: {exc.code}") from exc
    return _transcription_payload(result, status)


def _transcription_payload(result: TranscriptionResult, status: str) -> TranscriptionPayload:
    return TranscriptionPayload(
        text=result.text,
        confidence=result.confidence,
        conversation=[TranscriptionConversationTurn(**asdict(turn)) for turn in result.conversation],
        provider=result.provider,
        status=status,
    )


def _require_session(store: SessionStore, session_id: str, user: AuthSession) -> dict[str, Any]:
    try:
        session = store.get_session(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc
    if session["user_id"] != user.user_id:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/v1/import/extract")
async def import_extract(request: Request) -> dict[str, Any]:
    await run_in_threadpool(_authorize, request)
    body = await _json_object(request)
    if body.get("images") is None and body.get("text") is None:
        raise HTTPException(status_code=400, detail="No image or text provided")
    try:
        payload = ImportRequest.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        return await run_in_threadpool(
            assess,
            payload.images,
            _get_openai_client(),
            model=_get_config().LLM_MODEL_ID,
            text=payload.text,
        )
    except LLMExtractionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/v1/import/report")
async def import_report(request: Request) -> dict[str, Any]:
    await run_in_threadpool(_authorize, request)
    body = await _json_object(request)
    if body.get("images") is None and body.get("text") is None:
        raise HTTPException(status_code=400, detail="No image or text provided")
    try:
        payload = ImportRequest.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        return await run_in_threadpool(
            analyze_report,
            payload.text,
            payload.images,
            _get_openai_client(),
            model=_get_config().LLM_MODEL_ID,
            language=payload.language,
            preferred_provider=payload.preferred_provider,
        )
    except NotMedicalInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except LLMExtractionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/v1/transcribe", response_model=TranscriptionPayload)
async def transcribe(request: Request) -> TranscriptionPayload:
    await run_in_threadpool(_authorize, request)
    form = await request.form()
    instructions = _parse_instructions(form.get("instructions"))
    audio, filename, content_type = await _read_audio_upload(form, "file")
    return await run_in_threadpool(_transcribe, audio, filename, content_type, str(instructions.get("lang") or "en"))


@app.post("/v1/med/session")
async def med_session(request: Request) -> dict[str, Any]:
    await run_in_threadpool(_authorize, request)
    body = await _json_object(request)
    if body.get("text") is None:
        raise HTTPException(status_code=400, detail="No text provided")
    try:
        payload = ConversationRequest.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        return await run_in_threadpool(
            analyze_conversation,
            payload.text,
            _get_openai_client(),
            model=_get_config().LLM_MODEL_ID,
            language=payload.language,
            feedback=_get_feedback_store(),
        )
    except LLMExtractionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/v1/med/session/finalize")
async def med_session_finalize(request: Request) -> dict[str, Any]:
    await run_in_threadpool(_authorize, request)
    body = await _json_object(request)
    if body.get("text") is None:
        raise HTTPException(status_code=400, detail="No text provided")
    try:
        payload = ConversationRequest.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        return await run_in_threadpool(
            finalize_report,
            payload.text,
            _get_openai_client(),
            model=_get_config().LLM_MODEL_ID,
            language=payload.language,
        )
    except LLMExtractionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/v1/session/feedback")
async def session_feedback(request: Request) -> dict[str, Any]:
    await run_in_threadpool(_authorize, request)
    body = await _json_object(request)
    if not body.get("itemType") or not body.get("feedback") or not body.get("timestamp"):
        raise HTTPException(status_code=400, detail="Missing required feedback fields")
    try:
        data = FeedbackData.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    feedback_id = _get_feedback_store().add(data)
    return {"success": True, "feedbackId": feedback_id, "message": "Feedback recorded successfully"}


@app.get("/v1/session/feedback")
def session_feedback_summary(
    request: Request,
    item_type: Optional[str] = Query(default=None, alias="type"),
) -> dict[str, Any]:
    _authorize(request)
    store = _get_feedback_store()
    if item_type:
        entries = store.entries(item_type)
        return {
            "itemType": item_type,
            "feedback": [entry.to_payload() for entry in entries],
            "count": len(entries),
        }
    return store.analytics()


@app.post("/v1/session/start", response_model=SessionStartResponse)
async def session_start(request: Request) -> SessionStartResponse:
    user, _ = await run_in_threadpool(_authorize, request)
    body = await _json_object(request)
    try:
        payload = SessionStartRequest.model_validate(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    store = _get_session_store()
    store.cleanup_expired_sessions()
    session_id = store.create_session(
        user.user_id,
        language=payload.language,
        models=payload.models,
        profile_id=payload.profile_id,
        translate=payload.translate,
    )
    log_update(store, session_id, "session_status", "SESSION_STARTED", f"language={payload.language}")
    return SessionStartResponse(session_id=session_id, status="active")


@app.get("/v1/session/{session_id}/status")
def session_status(session_id: str, request: Request) -> dict[str, Any]:
    user, _ = _authorize(request)
    session = _require_session(_get_session_store(), session_id, user)
    return {
        "sessionId": session_id,
        "status": session["status"],
        "transcripts": [t.model_dump() for t in session["transcripts"]],
        "analysis": {
            category: [item.to_dict() for item in items] for category, items in session["analysis"].items()
        },
        "analysisSummary": session["analysis_summary"],
        "updates": [u.model_dump() for u in session["updates"]],
        "lastUpdated": session["updated_at"],
    }


@app.post("/v1/session/{session_id}/status")
def session_status_update(session_id: str, payload: SessionStatusUpdateRequest, request: Request) -> dict[str, Any]:
    user, _ = _authorize(request)
    store = _get_session_store()
    _require_session(store, session_id, user)
    store.set_status(session_id, payload.status)
    log_update(store, session_id, "session_status", "SESSION_STATUS", f"status={payload.status}")
    return {"sessionId": session_id, "status": payload.status}


@app.delete("/v1/session/{session_id}")
def session_delete(session_id: str, request: Request) -> dict[str, Any]:
    user, _ = _authorize(request)
    store = _get_session_store()
    _require_session(store, session_id, user)
    return {"sessionId": session_id, "deleted": store.destroy_session(session_id)}


@app.post("/v1/session/{session_id}/transcribe")
async def session_transcribe(session_id: str, request: Request) -> dict[str, Any]:
    user, _ = await run_in_threadpool(_authorize, request)
    store = _get_session_store()
    session = _require_session(store, session_id, user)

    form = await request.form()
    instructions = _parse_instructions(form.get("instructions"))
    chunk_id = str(form.get("chunkId") or "")
    audio, filename, content_type = await _read_audio_upload(form, "audio")
    if not chunk_id:
        raise HTTPException(status_code=400, detail="Missing chunkId")
    language = str(instructions.get("lang") or session["language"] or "en")

    payload = await run_in_threadpool(_transcribe, audio, filename, content_type, language)
    transcript = store.add_transcript(session_id, payload.text, confidence=payload.confidence or 0.0)
    log_update(
        store,
        session_id,
        "partial_transcript",
        "TRANSCRIPT_ADDED",
        f"chunk_id={chunk_id} sequence={transcript.sequence_number} provider={payload.provider} status={payload.status}",
    )

    response: dict[str, Any] = {
        "success": True,
        "sessionId": session_id,
        "chunkId": chunk_id,
        "sequenceNumber": transcript.sequence_number,
        "transcription": {
            "text": payload.text,
            "confidence": payload.confidence,
            "language": language,
        },
        "processing": {"provider": payload.provider, "status": payload.status},
    }

    if str(form.get("analyze") or "").lower() in {"1", "true", "yes"}:
        try:
            analysis = await run_in_threadpool(
                analyze_conversation,
                store.transcript_text(session_id),
                _get_openai_client(),
                model=_get_config().LLM_MODEL_ID,
                language=language,
                feedback=_get_feedback_store(),
            )
        except LLMExtractionError as exc:
            log_update(store, session_id, "error", "ANALYSIS_FAILED", type(exc).__name__)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        summary = store.update_analysis(session_id, analysis)
        log_update(
            store,
            session_id,
            "analysis_update",
            "ANALYSIS_MERGED",
            " ".join(f"{k}=+{v['added']}/~{v['updated']}" for k, v in summary.items()),
        )
        response["analysisSummary"] = summary
    return response


@app.get("/v1/med/user")
def med_user(request: Request) -> dict[str, Any]:
    user, client = _authorize(request)
    cfg = _get_config()
    try:
        return load_user(client, user.user_id, cfg.MEDRECORD_DEFAULT_SCANS, cfg.MEDRECORD_DEFAULT_PROFILES)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc


@app.get("/v1/med/profiles")
def med_profiles(request: Request) -> list[dict[str, Any]]:
    user, client = _authorize(request)
    try:
        return list_profiles(client, user.user_id)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc


@app.get("/v1/med/profiles/{pid}/documents")
def med_documents(
    pid: str,
    request: Request,
    types: Optional[str] = Query(default=None),
    full: bool = Query(default=False),
) -> list[dict[str, Any]]:
    user, client = _authorize(request)
    try:
        return list_documents(client, pid, user.user_id, types=parse_types(types), full=full)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc


@app.post("/v1/med/profiles/{pid}/documents")
async def med_document_create(pid: str, request: Request) -> dict[str, str]:
    user, client = await run_in_threadpool(_authorize, request)
    try:
        payload = DocumentCreateRequest.model_validate(await _json_object(request))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid request") from exc
    try:
        document_id = await run_in_threadpool(
            create_document,
            client,
            pid,
            user.user_id,
            doc_type=payload.type,
            metadata=payload.metadata,
            content=payload.content,
            attachments=payload.attachments,
            keys=[key.model_dump(exclude_none=True) for key in payload.keys],
        )
    except RecordsError as exc:
        raise _records_http_error(exc) from exc
    return {"id": document_id}


@app.get("/v1/med/profiles/{pid}/documents/{did}")
def med_document(pid: str, did: str, request: Request) -> dict[str, Any]:
    user, client = _authorize(request)
    try:
        return get_document(client, pid, did, user.user_id)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc


@app.put("/v1/med/profiles/{pid}/documents/{did}")
async def med_document_update(pid: str, did: str, request: Request) -> list[dict[str, Any]]:
    _, client = await run_in_threadpool(_authorize, request)
    try:
        payload = DocumentUpdateRequest.model_validate(await _json_object(request))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid request") from exc
    try:
        return await run_in_threadpool(
            update_document,
            client,
            pid,
            did,
            metadata=payload.metadata,
            content=payload.content,
            attachments=payload.attachments,
        )
    except RecordsError as exc:
        raise _records_http_error(exc) from exc


@app.delete("/v1/med/profiles/{pid}/documents/{did}")
def med_document_delete(pid: str, did: str, request: Request) -> list[dict[str, Any]]:
    _, client = _authorize(request)
    try:
        return delete_document(client, pid, did)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc


@app.get("/v1/med/profiles/{pid}/attachments")
def med_attachment(pid: str, request: Request, path: Optional[str] = Query(default=None)) -> Response:
    _, client = _authorize(request)
    try:
        data = download_attachment(client, path)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc
    return Response(content=data, media_type="application/octet-stream")


@app.post("/v1/med/profiles/{pid}/attachments")
def med_attachment_upload(pid: str, payload: AttachmentUploadRequest, request: Request) -> dict[str, str]:
    user, client = _authorize(request)
    try:
        attachment = upload_attachment(client, user.user_id, payload.file)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc
    return attachment.model_dump()


@app.delete("/v1/med/profiles/{pid}/attachments")
def med_attachment_delete(pid: str, request: Request, path: Optional[str] = Query(default=None)) -> dict[str, bool]:
    _, client = _authorize(request)
    try:
        return remove_attachment(client, path)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc


@app.get("/v1/med/profiles/{pid}/avatar")
def med_avatar(pid: str, request: Request, path: Optional[str] = Query(default=None)) -> Response:
    _, client = _authorize(request)
    try:
        data = download_avatar(client, pid, path)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc
    return Response(content=data, media_type="application/octet-stream")


@app.post("/v1/med/profiles/{pid}/avatar")
def med_avatar_upload(pid: str, payload: AvatarUploadRequest, request: Request) -> dict[str, str]:
    _, client = _authorize(request)
    try:
        return upload_avatar(client, pid, payload.file, payload.filename, payload.type)
    except RecordsError as exc:
        raise _records_http_error(exc) from exc


@app.get("/v1/labs/normalize")
async def labs_normalize(term: str = Query(default="")) -> dict[str, Any]:
    canonical = synonyms(term)
    prop = property_by_key(canonical) if canonical else None
    return {
        "term": term,
        "canonical": canonical,
        "property": asdict(prop) if prop else None,
    }


@app.post("/v1/labs/series/summary", response_model=SeriesSummaryResponse)
async def labs_series_summary(payload: SeriesSummaryRequest) -> SeriesSummaryResponse:
    series = get_lab_value_for(payload.signals, payload.code, payload.unit)
    return SeriesSummaryResponse(
        code=payload.code,
        unit=payload.unit,
        items=[item.to_dict() for item in series],
        percentage=get_percentage_from_last_values(series),
        trend=get_trend_status_from_last_values(series),
    )


@app.get("/v1/labdata", response_class=PlainTextResponse)
async def labdata(min_value: str = Query(default="0", alias="min"), max_value: str = Query(default="1", alias="max")) -> str:
    try:
        low = float(min_value)
        high = float(max_value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="min and max must be numbers, and min must be less than max") from exc
    spread = high - low
    if spread != spread or spread < 0:
        raise HTTPException(status_code=400, detail="min and max must be numbers, and min must be less than max")
    return str(low + random.random() * spread)
