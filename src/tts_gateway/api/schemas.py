"""
API Request/Response Schemas.

Pydantic models for the JSON endpoints. ``/convert`` and ``/stt/upload``
take multipart forms and are declared with ``Form``/``File`` parameters in
routes.py; their responses are described here.

Example /convert Response:
    {
        "ok": true,
        "url": "/audio/speech-1718000000000.mp3",
        "fileName": "speech-1718000000000.mp3",
        "engine": "gtts",
        "voice": "en-us"
    }
"""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class TranscriptRequest(BaseModel):
    """
    Body of POST /stt/transcript.

    ``text`` is optional at the schema level so an empty or missing
    transcript reaches the service and fails with the gateway's own 400
    error body instead of a 422.
    """
    text: str | None = Field(
        default=None,
        description="Transcript produced by client-side speech recognition",
    )


class SavedFileResponse(BaseModel):
    ok: bool = True
    url: str = Field(..., description="Public path under /uploads")
    fileName: str


class ConvertResponse(BaseModel):
    ok: bool = True
    url: str = Field(..., description="Public path under /audio")
    fileName: str
    engine: str
    voice: str


class VoiceInfo(BaseModel):
    id: str = Field(..., description="Edge short name, e.g. en-US-AriaNeural")
    name: str
    locale: str
    gender: str


class HealthResponse(BaseModel):
    ok: bool
    engines: List[str]
    audio_dir: str
    uploads_dir: str


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str
