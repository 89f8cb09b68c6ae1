"""
ConversionService - Text-to-Speech Conversion Orchestrator.

Coordinates one conversion per call:

    validate text -> pick engine -> reserve artifact name
        gtts: resolve voice (gender/locale tables) -> engine writes to artifact path
        edge: raw voice hint (or default)          -> engine buffer -> artifact write
    -> ConversionResult(url="/audio/speech-<ms>.mp3", ...)

Engines are constructed once by ``create_engines`` and passed in; the
service holds no global state beyond the shared metrics collector.

Error Handling:
    Every failure leaves ``convert`` as a ConversionError subclass:
        - ValidationError: empty text (nothing is written)
        - EngineFailure: backend error, or any unexpected exception (wrapped)
        - StorageFailure: the artifact write failed
    A file that was partially written before the failure stays on disk.

Example:
    >>> from tts_gateway.core.config import Settings
    >>> from tts_gateway.services import ConversionRequest, build_service
    >>>
    >>> service = build_service(Settings(raw={}))
    >>> result = await service.convert(ConversionRequest(text="Hello world", voice_hint="en"))
    >>> result.url
    '/audio/speech-1718000000000.mp3'
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from tts_gateway.core.config import GatewayConfig, Settings
from tts_gateway.core.errors import (
    ConversionError,
    EngineFailure,
    StorageFailure,
    ValidationError,
)
from tts_gateway.core.logging import fail, get_logger, info, success, verbose
from tts_gateway.core.metrics import metrics
from tts_gateway.services.validators import validate_text
from tts_gateway.tts.engine import EDGE, BaseSpeechEngine, create_engines, resolve_engine_name
from tts_gateway.tts.storage import ArtifactStore, Clock
from tts_gateway.tts.voices import resolve_voice

_LOG = get_logger("tts-gateway.service")


@dataclass
class ConversionRequest:
    """
    One conversion request.

    Attributes:
        text: Text to speak; typed by the caller or read from a .txt upload.
        engine: "gtts" or "edge". Missing uses the configured default;
            anything other than "edge" means gtts.
        voice_hint: gtts: language key ("en", "hi", ...). edge: neural voice
            short name ("en-US-AriaNeural").
        gender: "male" / "female"; only consulted for gtts.
    """
    text: Optional[str]
    engine: Optional[str] = None
    voice_hint: Optional[str] = None
    gender: Optional[str] = None


@dataclass
class ConversionResult:
    """
    A committed artifact.

    Attributes:
        url: Public path, ``/audio/<file_name>``.
        file_name: ``speech-<ms>.mp3``.
        engine: Engine that produced the audio.
        voice: Voice code actually sent to the engine.
        bytes: Artifact size.
        seconds: Wall time of the conversion.
    """
    url: str
    file_name: str
    engine: str
    voice: str
    bytes: int
    seconds: float

    def to_response(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "url": self.url,
            "fileName": self.file_name,
            "engine": self.engine,
            "voice": self.voice,
        }


def _metric_status(exc: ConversionError) -> str:
    if isinstance(exc, ValidationError):
        return "invalid"
    if isinstance(exc, StorageFailure):
        return "storage_error"
    return "engine_error"


class ConversionService:
    """
    Orchestrates text -> MP3 artifact conversions.

    Usage:
        engines = create_engines(settings)
        artifacts = ArtifactStore.from_config(settings.get_gateway_config().storage)
        service = ConversionService(settings, engines, artifacts)
        result = await service.convert(ConversionRequest(text="Hi", engine="edge"))
    """

    def __init__(
        self,
        settings: Settings,
        engines: Mapping[str, BaseSpeechEngine],
        artifacts: ArtifactStore,
    ):
        self._settings = settings
        self._config: GatewayConfig = settings.get_gateway_config()
        self._engines: Dict[str, BaseSpeechEngine] = dict(engines)
        self._artifacts = artifacts
        self._text_preview_chars = self._config.logging.text_preview_chars

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def config(self) -> GatewayConfig:
        return self._config

    @property
    def artifacts(self) -> ArtifactStore:
        return self._artifacts

    @property
    def engine_names(self) -> List[str]:
        """Registered engine names, sorted."""
        return sorted(self._engines)

    # =========================================================================
    # Conversion
    # =========================================================================

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        """
        Convert ``request.text`` into one MP3 artifact.

        Returns:
            ConversionResult describing the committed artifact.

        Raises:
            ValidationError: Text missing or whitespace-only.
            EngineFailure: Synthesis failed (backend cause chained).
            StorageFailure: The artifact could not be written.
        """
        t0 = time.perf_counter()
        engine_name = resolve_engine_name(request.engine, self._config.engines.default)

        try:
            text = validate_text(request.text)
            info(_LOG, "convert_start", engine=engine_name, chars=len(text),
                 voice_hint=request.voice_hint, gender=request.gender,
                 text_preview=text[:self._text_preview_chars])

            engine = self._engines[engine_name]
            artifact = self._artifacts.new_artifact()

            if engine.capabilities.resolved_voice:
                voice = resolve_voice(request.voice_hint, request.gender)
            else:
                hint = request.voice_hint
                voice = hint if hint and hint.strip() else engine.default_voice()
            verbose(_LOG, "voice_selected", engine=engine_name, voice=voice,
                    file=artifact.file_name)

            if engine.capabilities.writes_to_path:
                written = await engine.synthesize_to_path(text, voice, artifact.storage_path)
            else:
                result = await engine.synthesize(text, voice)
                written = await self._artifacts.write(artifact, result.audio_bytes)

        except ConversionError as e:
            seconds = time.perf_counter() - t0
            metrics.record_conversion(engine_name, _metric_status(e), duration=seconds)
            fail(_LOG, "convert_failed", engine=engine_name, code=e.code,
                 error=e.message, seconds=round(seconds, 4))
            raise
        except Exception as e:
            seconds = time.perf_counter() - t0
            metrics.record_conversion(engine_name, "engine_error", duration=seconds)
            fail(_LOG, "convert_failed", engine=engine_name, error=str(e),
                 error_type=type(e).__name__, seconds=round(seconds, 4))
            raise EngineFailure.wrap(engine_name, e) from e

        seconds = time.perf_counter() - t0
        metrics.record_conversion(engine_name, "success", duration=seconds, audio_bytes=written)
        success(_LOG, "convert_done", engine=engine_name, voice=voice,
                file=artifact.file_name, bytes=written, seconds=round(seconds, 4))

        return ConversionResult(
            url=artifact.public_url,
            file_name=artifact.file_name,
            engine=engine_name,
            voice=voice,
            bytes=written,
            seconds=seconds,
        )

    # =========================================================================
    # Voice catalog
    # =========================================================================

    async def list_voices(self) -> List[Dict[str, Any]]:
        """
        Edge voice catalog passthrough.

        Raises:
            EngineFailure: Catalog unavailable.
        """
        engine = self._engines.get(EDGE)
        if engine is None or not engine.capabilities.voice_catalog:
            raise EngineFailure("Voice listing is not available", {"engine": EDGE})
        return await engine.list_voices()


def build_service(
    settings: Settings,
    engines: Optional[Mapping[str, BaseSpeechEngine]] = None,
    clock: Optional[Clock] = None,
) -> ConversionService:
    """
    Wire a ConversionService from settings.

    Args:
        settings: Loaded settings.
        engines: Engine mapping; built with ``create_engines`` when omitted.
        clock: Millisecond clock for artifact names (tests).
    """
    config = settings.get_gateway_config()
    artifacts = ArtifactStore.from_config(config.storage, clock=clock)
    if engines is None:
        engines = create_engines(settings)
    return ConversionService(settings, engines, artifacts)
