"""
Speech Engine Base Class and Factory.

This module provides:
    - BaseSpeechEngine: Contract shared by all synthesis adapters
    - EngineCapabilities: What an engine accepts as its voice parameter
    - SynthesisResult: Audio bytes plus a suggested file name
    - resolve_engine_name(): Caller engine string -> registered engine name
    - create_engines(): Builds every adapter once, at process start

Engines:
    - gtts: Google Translate TTS. Native contract is "save to path";
      takes a language/locale code resolved by tts.voices.
    - edge: Microsoft Edge neural TTS. Native contract is an async
      stream drained into one buffer; takes a raw voice short name.

Both adapters present the same two coroutines:

    await engine.synthesize(text, voice)               -> SynthesisResult
    await engine.synthesize_to_path(text, voice, path) -> bytes written

The orchestrator calls the one matching the engine's native contract so
gTTS can write straight to the artifact path while Edge output is
buffered and committed afterwards.

Adding an Engine:
    1. Create engines/<name>_engine.py inheriting BaseSpeechEngine
    2. Implement synthesize() (and synthesize_to_path() if it can write directly)
    3. Register it in create_engines()
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from tts_gateway.core.config import GatewayConfig, Settings
from tts_gateway.core.errors import EngineFailure
from tts_gateway.core.logging import get_logger

GTTS = "gtts"
EDGE = "edge"


@dataclass(frozen=True)
class EngineCapabilities:
    """
    Attributes:
        resolved_voice: Voice goes through the gender/locale resolver.
        voice_catalog: Engine can list its voices.
        writes_to_path: Engine writes output files natively.
    """
    resolved_voice: bool
    voice_catalog: bool
    writes_to_path: bool


@dataclass
class SynthesisResult:
    """
    Audio produced by an engine.

    Attributes:
        audio_bytes: Complete MP3 payload.
        suggested_name: File name hint; the artifact store may ignore it.
    """
    audio_bytes: bytes
    suggested_name: str = "speech.mp3"


class BaseSpeechEngine:
    """
    Base class for synthesis adapters.

    Subclasses implement ``synthesize``; the default ``synthesize_to_path``
    buffers through it. Implementations raise EngineFailure (cause chained)
    for any backend, network or decoding error.
    """
    name: str = "base"
    capabilities: EngineCapabilities = EngineCapabilities(
        resolved_voice=False,
        voice_catalog=False,
        writes_to_path=False,
    )

    def __init__(self, config: GatewayConfig):
        self.config = config
        self.logger = get_logger(f"tts-gateway.engine.{self.name}")

    def default_voice(self) -> str:
        raise NotImplementedError

    async def synthesize(self, text: str, voice: str) -> SynthesisResult:
        raise NotImplementedError

    async def list_voices(self) -> List[Dict[str, Any]]:
        """Only meaningful when ``capabilities.voice_catalog`` is set."""
        raise NotImplementedError

    async def synthesize_to_path(self, text: str, voice: str, path: Path) -> int:
        """
        Synthesize and write to ``path``.

        Returns:
            Number of bytes written.

        Raises:
            EngineFailure: Synthesis or the write failed.
        """
        result = await self.synthesize(text, voice)
        try:
            await asyncio.to_thread(Path(path).write_bytes, result.audio_bytes)
        except OSError as exc:
            raise EngineFailure.wrap(self.name, exc) from exc
        return len(result.audio_bytes)


def resolve_engine_name(value: Optional[str], default: str = GTTS) -> str:
    """
    Map a caller-supplied engine name to a registered engine.

    Only ``edge`` selects the Edge engine. Absent values use ``default``;
    any other string silently falls back to gtts (no "unknown engine"
    error is raised).
    """
    if value is None or not str(value).strip():
        value = default
    return EDGE if str(value).strip().lower() == EDGE else GTTS


def create_engines(settings: Settings) -> Dict[str, BaseSpeechEngine]:
    """
    Construct both engine adapters.

    Called once at application start; the resulting mapping is passed
    into the ConversionService explicitly.
    """
    from tts_gateway.tts.engines.edge_engine import EdgeEngine
    from tts_gateway.tts.engines.gtts_engine import GttsEngine

    config = settings.get_gateway_config()
    return {
        GTTS: GttsEngine(config),
        EDGE: EdgeEngine(config),
    }
