"""
Media Adjuncts: transcripts, audio uploads and text uploads.

These sit beside the conversion path and share only the uploads
directory with it:

    save_transcript(text)         -> uploads/transcript-<ms>.txt
    save_audio(name, data)        -> uploads/<ms>-<name>  (whitelisted extension)
    read_text_upload(name, data)  -> text of a .txt upload (file deleted after)

Each returns or raises within the same ConversionError taxonomy as the
orchestrator, so the API layer maps them identically.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tts_gateway.core.config import GatewayConfig
from tts_gateway.core.errors import ConversionError
from tts_gateway.core.logging import fail, get_logger, info, verbose
from tts_gateway.core.metrics import metrics
from tts_gateway.services.validators import (
    validate_audio_upload,
    validate_text,
    validate_text_filename,
)
from tts_gateway.tts.storage import Clock, StoredUpload, UploadStore

_LOG = get_logger("tts-gateway.media")


@dataclass
class SavedFile:
    """A file the caller can fetch back from the uploads mount."""
    url: str
    file_name: str

    @classmethod
    def from_stored(cls, stored: StoredUpload) -> "SavedFile":
        return cls(url=stored.public_url, file_name=stored.file_name)

    def to_response(self) -> Dict[str, Any]:
        return {"ok": True, "url": self.url, "fileName": self.file_name}


class MediaService:
    """Upload-side operations over one UploadStore."""

    def __init__(self, config: GatewayConfig, uploads: UploadStore):
        self._uploads = uploads
        self._allowed_audio: List[str] = list(config.uploads.allowed_audio_extensions)

    @property
    def uploads(self) -> UploadStore:
        return self._uploads

    @property
    def allowed_audio_extensions(self) -> List[str]:
        return list(self._allowed_audio)

    async def save_transcript(self, text: Optional[str]) -> SavedFile:
        """
        Persist a speech-to-text transcript as a UTF-8 ``.txt`` file.

        Raises:
            ValidationError: Transcript empty.
            StorageFailure: Write failed.
        """
        try:
            text = validate_text(text)
            stored = await self._uploads.save_text(text)
        except ConversionError as e:
            metrics.record_upload("transcript", "error")
            fail(_LOG, "transcript_failed", code=e.code, error=e.message)
            raise

        metrics.record_upload("transcript", "success")
        info(_LOG, "transcript_saved", file=stored.file_name, chars=len(text))
        return SavedFile.from_stored(stored)

    async def save_audio(self, filename: Optional[str], data: Optional[bytes]) -> SavedFile:
        """
        Store an uploaded recording under ``<ms>-<basename>``.

        Raises:
            ValidationError: Missing file, extension not allowed, or empty.
            StorageFailure: Write failed.
        """
        try:
            name = validate_audio_upload(filename, data, self._allowed_audio)
            stored = await self._uploads.save(name, data or b"")
        except ConversionError as e:
            metrics.record_upload("audio", "error")
            fail(_LOG, "audio_upload_failed", file=filename, code=e.code, error=e.message)
            raise

        metrics.record_upload("audio", "success")
        info(_LOG, "audio_uploaded", file=stored.file_name, bytes=len(data or b""))
        return SavedFile.from_stored(stored)

    async def read_text_upload(self, filename: Optional[str], data: bytes) -> str:
        """
        Decode a ``.txt`` upload that supplies conversion text.

        The upload is written to the uploads directory, read back as
        UTF-8 and deleted; nothing of it remains afterwards.

        Raises:
            ValidationError: Not a ``.txt`` file, or not valid UTF-8.
        """
        try:
            name = validate_text_filename(filename)
            stored = await self._uploads.save(name, data)
            text = await self._uploads.consume_text(stored)
        except ConversionError:
            metrics.record_upload("text", "error")
            raise

        metrics.record_upload("text", "success")
        verbose(_LOG, "text_upload_read", file=name, chars=len(text))
        return text


def build_media_service(config: GatewayConfig, clock: Optional[Clock] = None) -> MediaService:
    return MediaService(config, UploadStore.from_config(config.storage, clock=clock))
