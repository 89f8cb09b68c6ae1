"""
Edge TTS Engine (Microsoft neural voices).

Uses the edge-tts library, which streams MP3 frames over a websocket. The
adapter drains the whole stream before returning; callers never see
partial audio.

The voice is a raw Edge short name (``en-US-AriaNeural``,
``en-GB-RyanNeural``, ...) taken verbatim from the caller. It does not go
through the gender/locale resolver; the configured default applies only
when the caller sends none.

settings.yaml:
    engines:
      edge:
        default_voice: en-US-AriaNeural

See Also:
    - https://github.com/rany2/edge-tts
"""
from __future__ import annotations

import io
from typing import Any, Dict, List, Optional

import edge_tts

from tts_gateway.core.config import GatewayConfig
from tts_gateway.core.errors import EngineFailure
from tts_gateway.core.logging import info, verbose
from tts_gateway.tts.engine import EDGE, BaseSpeechEngine, EngineCapabilities, SynthesisResult
from tts_gateway.utils.timeit import timeit


class EdgeEngine(BaseSpeechEngine):
    """Edge neural TTS adapter returning an in-memory MP3 buffer."""

    name = EDGE
    capabilities = EngineCapabilities(
        resolved_voice=False,
        voice_catalog=True,
        writes_to_path=False,
    )

    def __init__(self, config: GatewayConfig):
        super().__init__(config)
        self._default_voice = config.engines.edge.default_voice

    def default_voice(self) -> str:
        return self._default_voice

    def pick_voice(self, voice: Optional[str]) -> str:
        """Caller voice verbatim, or the configured default when blank."""
        return voice if voice and voice.strip() else self._default_voice

    async def synthesize(self, text: str, voice: str) -> SynthesisResult:
        voice = self.pick_voice(voice)
        buf = io.BytesIO()
        chunks = 0

        with timeit("edge_stream") as t:
            try:
                communicate = edge_tts.Communicate(text, voice)
                async for chunk in communicate.stream():
                    if chunk.get("type") == "audio":
                        buf.write(chunk["data"])
                        chunks += 1
            except Exception as exc:
                raise EngineFailure.wrap(self.name, exc) from exc

        audio = buf.getvalue()
        if not audio:
            raise EngineFailure(
                f"{self.name} synthesis failed: no audio received for voice {voice}",
                {"engine": self.name, "voice": voice},
            )

        verbose(self.logger, "stage", event="edge_stream", voice=voice, chunks=chunks,
                bytes=len(audio), seconds=round(t.seconds, 4))
        return SynthesisResult(audio_bytes=audio, suggested_name=f"edge-{voice}.mp3")

    async def list_voices(self) -> List[Dict[str, Any]]:
        """
        Edge voice catalog, one dict per voice.

        Keys: id (short name), name, locale, gender.

        Raises:
            EngineFailure: The catalog could not be fetched.
        """
        try:
            raw = await edge_tts.list_voices()
        except Exception as exc:
            raise EngineFailure.wrap(self.name, exc) from exc

        voices = [
            {
                "id": v.get("ShortName", ""),
                "name": v.get("FriendlyName") or v.get("Name", ""),
                "locale": v.get("Locale", ""),
                "gender": v.get("Gender", "unknown"),
            }
            for v in raw
        ]
        info(self.logger, "voices_listed", count=len(voices))
        return voices
