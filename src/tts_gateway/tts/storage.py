"""
Filesystem Stores for Artifacts and Uploads.

Two flat directories make up all persistence:

    {audio_dir}/                     generated speech, served at /audio/
        speech-1718000000000.mp3
    {uploads_dir}/                   caller uploads, served at /uploads/
        1718000000123-notes.txt      (transient, deleted after reading)
        1718000000456-clip.wav
        transcript-1718000000789.txt

Names carry a millisecond wall-clock timestamp. No collision detection is
done: two artifacts created in the same millisecond get the same name and
the later write wins. There is no index, retention policy or cleanup; the
gateway never deletes a finished artifact.

Blocking file I/O runs through ``asyncio.to_thread`` so a write is one
suspension point of the calling request.

Usage:
    store = ArtifactStore("public/audio")
    store.ensure_dirs()
    artifact = store.new_artifact()          # speech-<ms>.mp3
    await store.write(artifact, mp3_bytes)
    artifact.public_url                      # "/audio/speech-<ms>.mp3"
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from tts_gateway.core.config import StorageConfig
from tts_gateway.core.errors import StorageFailure, ValidationError
from tts_gateway.core.logging import debug, get_logger, verbose
from tts_gateway.utils.timeit import timeit

_LOG = get_logger("tts-gateway.storage")

Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in whole milliseconds."""
    return time.time_ns() // 1_000_000


def _join_url(prefix: str, file_name: str) -> str:
    return f"{prefix.rstrip('/')}/{file_name}"


@dataclass(frozen=True)
class Artifact:
    """
    A speech file reserved in (or committed to) the audio directory.

    Attributes:
        file_name: ``speech-<ms>.mp3``
        storage_path: Absolute path on disk.
        public_url: Path-relative URL, e.g. ``/audio/speech-<ms>.mp3``.
    """
    file_name: str
    storage_path: Path
    public_url: str


@dataclass(frozen=True)
class StoredUpload:
    """A file placed in the uploads directory."""
    file_name: str
    storage_path: Path
    public_url: str


class ArtifactStore:
    """Names, writes and locates speech artifacts."""

    def __init__(self, audio_dir: str | Path, url_prefix: str = "/audio", clock: Optional[Clock] = None):
        self._dir = Path(audio_dir).resolve()
        self._url_prefix = url_prefix
        self._clock = clock or now_ms

    @classmethod
    def from_config(cls, cfg: StorageConfig, clock: Optional[Clock] = None) -> "ArtifactStore":
        return cls(cfg.audio_dir, url_prefix=cfg.audio_url_prefix, clock=clock)

    @property
    def directory(self) -> Path:
        return self._dir

    def ensure_dirs(self) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)

    def new_artifact(self) -> Artifact:
        """Reserve the next ``speech-<ms>.mp3`` name. Nothing is written."""
        file_name = f"speech-{self._clock()}.mp3"
        return Artifact(
            file_name=file_name,
            storage_path=self._dir / file_name,
            public_url=_join_url(self._url_prefix, file_name),
        )

    async def write(self, artifact: Artifact, data: bytes) -> int:
        """
        Write ``data`` to the artifact path.

        Returns:
            Number of bytes written.

        Raises:
            StorageFailure: Directory missing/unwritable, disk full, ...
        """
        with timeit("artifact_write") as t:
            try:
                await asyncio.to_thread(artifact.storage_path.write_bytes, data)
            except OSError as exc:
                raise StorageFailure(
                    f"Could not write {artifact.file_name}: {exc}",
                    {"file": artifact.file_name, "error_type": type(exc).__name__},
                ) from exc

        verbose(_LOG, "stage", event="artifact_write", file=artifact.file_name,
                bytes=len(data), seconds=round(t.seconds, 4))
        return len(data)


class UploadStore:
    """
    Uploads directory: caller files, transient text uploads and transcripts.
    """

    def __init__(self, uploads_dir: str | Path, url_prefix: str = "/uploads", clock: Optional[Clock] = None):
        self._dir = Path(uploads_dir).resolve()
        self._url_prefix = url_prefix
        self._clock = clock or now_ms

    @classmethod
    def from_config(cls, cfg: StorageConfig, clock: Optional[Clock] = None) -> "UploadStore":
        return cls(cfg.uploads_dir, url_prefix=cfg.uploads_url_prefix, clock=clock)

    @property
    def directory(self) -> Path:
        return self._dir

    def ensure_dirs(self) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)

    def _stored(self, file_name: str) -> StoredUpload:
        return StoredUpload(
            file_name=file_name,
            storage_path=self._dir / file_name,
            public_url=_join_url(self._url_prefix, file_name),
        )

    async def _write(self, stored: StoredUpload, data: bytes) -> StoredUpload:
        try:
            await asyncio.to_thread(stored.storage_path.write_bytes, data)
        except OSError as exc:
            raise StorageFailure(
                f"Could not store {stored.file_name}: {exc}",
                {"file": stored.file_name, "error_type": type(exc).__name__},
            ) from exc
        debug(_LOG, "upload_stored", file=stored.file_name, bytes=len(data))
        return stored

    async def save(self, original_name: str, data: bytes) -> StoredUpload:
        """Store ``data`` as ``<ms>-<basename of original_name>``."""
        base = Path(original_name or "").name or "upload"
        return await self._write(self._stored(f"{self._clock()}-{base}"), data)

    async def save_text(self, text: str) -> StoredUpload:
        """Store a transcript as ``transcript-<ms>.txt`` (UTF-8)."""
        return await self._write(
            self._stored(f"transcript-{self._clock()}.txt"),
            text.encode("utf-8"),
        )

    async def consume_text(self, stored: StoredUpload) -> str:
        """
        Read a stored text upload as UTF-8 and delete it.

        The file is removed whether or not it decodes.

        Raises:
            ValidationError: Content is not valid UTF-8.
            StorageFailure: The file could not be read.
        """
        path = stored.storage_path

        def _read_and_unlink() -> bytes:
            try:
                return path.read_bytes()
            finally:
                path.unlink(missing_ok=True)

        try:
            raw = await asyncio.to_thread(_read_and_unlink)
        except OSError as exc:
            raise StorageFailure(
                f"Could not read {stored.file_name}: {exc}",
                {"file": stored.file_name, "error_type": type(exc).__name__},
            ) from exc

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValidationError("Uploaded file is not valid UTF-8 text") from exc
