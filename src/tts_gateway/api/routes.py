"""
Gateway API Routes.

Endpoints:
    GET  /                 - HTML form (text or .txt upload, voice, gender, engine)
    POST /convert          - Text -> MP3 artifact, returns its public URL
    POST /stt/transcript   - Save a speech-to-text transcript under /uploads
    POST /stt/upload       - Save an uploaded recording under /uploads
    GET  /voices           - Edge neural voice catalog
    GET  /health           - Liveness plus configured engines and directories
    GET  /metrics          - Prometheus metrics

Request Flow (/convert):
    1. Tag the request with a short request id for log correlation
    2. Text comes from the .txt upload when one is sent, else from textInput
    3. ConversionService.convert() picks the engine, synthesizes, stores
    4. Respond {ok, url, fileName, engine, voice}

Error Handling:
    Every ConversionError maps onto its own status code and body:
    {
        "ok": false,
        "error": "<ERROR_CODE>",
        "message": "<human readable message>"
    }
        - INVALID_INPUT    -> 400
        - SYNTHESIS_FAILED -> 500
        - STORAGE_FAILED   -> 500

Example Usage:
    curl -X POST http://localhost:3000/convert \\
        -F textInput="Hello world" -F voice=en -F gender=male -F engine=gtts
"""
from __future__ import annotations

import uuid
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from tts_gateway.api.dependencies import get_conversion_service, get_media_service
from tts_gateway.api.schemas import (
    ConvertResponse,
    ErrorResponse,
    HealthResponse,
    SavedFileResponse,
    TranscriptRequest,
    VoiceInfo,
)
from tts_gateway.core.errors import ConversionError
from tts_gateway.core.logging import get_logger, info, set_request_id
from tts_gateway.core.metrics import metrics
from tts_gateway.services.conversion_service import ConversionRequest, ConversionService
from tts_gateway.services.media_service import MediaService
from tts_gateway.tts.voices import DEFAULT_GENDER, DEFAULT_VOICE, known_voices

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    500: {"model": ErrorResponse, "description": "Synthesis or storage failure"},
}

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

_LOG = get_logger("tts-gateway.api")


def _new_request_id() -> str:
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)
    return rid


def _error_response(error: ConversionError) -> JSONResponse:
    """Serialize a ConversionError with its own HTTP status."""
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@router.get("/", response_class=HTMLResponse)
def index(request: Request, service: ConversionService = Depends(get_conversion_service)):
    """Render the conversion form."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "voices": known_voices(),
            "default_voice": DEFAULT_VOICE,
            "edge_default_voice": service.config.engines.edge.default_voice,
            "default_gender": DEFAULT_GENDER,
            "engines": service.engine_names,
            "default_engine": service.config.engines.default,
        },
    )


@router.post("/convert", response_model=ConvertResponse, responses=_ERROR_RESPONSES)
async def convert(
    text_input: Optional[str] = Form(default=None, alias="textInput"),
    voice: Optional[str] = Form(default=None),
    gender: Optional[str] = Form(default=None),
    engine: Optional[str] = Form(default=None),
    file: Optional[UploadFile] = File(default=None),
    service: ConversionService = Depends(get_conversion_service),
    media: MediaService = Depends(get_media_service),
):
    """
    Convert text to an MP3 artifact.

    Multipart form fields:
        file: Optional .txt upload; wins over textInput when present
        textInput: Text typed by the caller
        voice: gtts language key, or an Edge voice short name
        gender: male/female (gtts only)
        engine: "gtts" or "edge"; anything else means gtts
    """
    rid = _new_request_id()

    try:
        if file is not None and file.filename:
            text = await media.read_text_upload(file.filename, await file.read())
        else:
            text = text_input

        result = await service.convert(
            ConversionRequest(text=text, engine=engine, voice_hint=voice, gender=gender)
        )
    except ConversionError as e:
        return _error_response(e)

    info(_LOG, "convert_response", request_id=rid, url=result.url)
    return result.to_response()


@router.post("/stt/transcript", response_model=SavedFileResponse, responses=_ERROR_RESPONSES)
async def save_transcript(
    req: TranscriptRequest,
    media: MediaService = Depends(get_media_service),
):
    """Persist a browser speech-recognition transcript as a .txt file."""
    _new_request_id()
    try:
        saved = await media.save_transcript(req.text)
    except ConversionError as e:
        return _error_response(e)
    return saved.to_response()


@router.post("/stt/upload", response_model=SavedFileResponse, responses=_ERROR_RESPONSES)
async def upload_audio(
    audio: Optional[UploadFile] = File(default=None),
    media: MediaService = Depends(get_media_service),
):
    """Store an uploaded recording (extension whitelist applies)."""
    _new_request_id()
    try:
        if audio is None:
            saved = await media.save_audio(None, None)
        else:
            saved = await media.save_audio(audio.filename, await audio.read())
    except ConversionError as e:
        return _error_response(e)
    return saved.to_response()


@router.get("/voices", response_model=List[VoiceInfo], responses={500: _ERROR_RESPONSES[500]})
async def voices(service: ConversionService = Depends(get_conversion_service)):
    """Edge voice catalog: [{id, name, locale, gender}, ...]."""
    _new_request_id()
    try:
        return await service.list_voices()
    except ConversionError as e:
        return _error_response(e)


@router.get("/health", response_model=HealthResponse)
def health(
    service: ConversionService = Depends(get_conversion_service),
    media: MediaService = Depends(get_media_service),
):
    """Liveness probe; reports engines and storage locations."""
    return {
        "ok": True,
        "engines": service.engine_names,
        "audio_dir": str(service.artifacts.directory),
        "uploads_dir": str(media.uploads.directory),
    }


@router.get("/metrics")
def prometheus_metrics():
    """Prometheus text exposition of the gateway collectors."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
