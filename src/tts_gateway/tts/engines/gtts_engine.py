"""
gTTS Engine (Google Translate text-to-speech).

gTTS is a blocking HTTP client whose native output contract is
``gTTS.save(path)``. The adapter runs each job in the default thread pool
via ``asyncio.to_thread`` so the awaiting request resumes exactly once:
on success, or with the raised error.

Voice Codes:
    The code comes from tts.voices.resolve_voice(). Accent-bearing locale
    codes are split into a gTTS ``lang`` and a Google host ``tld``, which is
    what actually selects the accent:

        en-us -> lang=en tld=com
        en-uk -> lang=en tld=co.uk
        en-au -> lang=en tld=com.au

    Any other code is sent as ``lang`` with the configured default tld;
    gTTS rejects unsupported languages with ValueError.

settings.yaml:
    engines:
      gtts:
        tld: com
        slow: false
"""
from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import Tuple

from gtts import gTTS

from tts_gateway.core.config import GatewayConfig
from tts_gateway.core.errors import EngineFailure
from tts_gateway.core.logging import debug, verbose
from tts_gateway.tts.engine import GTTS, BaseSpeechEngine, EngineCapabilities, SynthesisResult
from tts_gateway.utils.timeit import timeit

# locale code -> (gTTS lang, Google host tld)
LOCALE_HOSTS = {
    "en-us": ("en", "com"),
    "en-uk": ("en", "co.uk"),
    "en-gb": ("en", "co.uk"),
    "en-au": ("en", "com.au"),
    "en-ca": ("en", "ca"),
    "en-in": ("en", "co.in"),
    "fr-ca": ("fr", "ca"),
    "fr-fr": ("fr", "fr"),
    "es-es": ("es", "es"),
    "es-mx": ("es", "com.mx"),
    "pt-br": ("pt", "com.br"),
    "pt-pt": ("pt", "pt"),
}


class GttsEngine(BaseSpeechEngine):
    """gTTS adapter writing MP3 straight to the artifact path."""

    name = GTTS
    capabilities = EngineCapabilities(
        resolved_voice=True,
        voice_catalog=False,
        writes_to_path=True,
    )

    def __init__(self, config: GatewayConfig):
        super().__init__(config)
        self._tld = config.engines.gtts.tld
        self._slow = config.engines.gtts.slow

    def default_voice(self) -> str:
        return "en"

    def split_voice(self, voice: str) -> Tuple[str, str]:
        """Return the (lang, tld) pair for a resolved voice code."""
        code = (voice or self.default_voice()).strip()
        return LOCALE_HOSTS.get(code.lower(), (code, self._tld))

    def _job(self, text: str, voice: str) -> gTTS:
        lang, tld = self.split_voice(voice)
        debug(self.logger, "gtts_job", lang=lang, tld=tld, slow=self._slow)
        return gTTS(text=text, lang=lang, tld=tld, slow=self._slow)

    async def synthesize_to_path(self, text: str, voice: str, path: Path) -> int:
        def _save() -> int:
            self._job(text, voice).save(str(path))
            return Path(path).stat().st_size

        with timeit("gtts_save") as t:
            try:
                written = await asyncio.to_thread(_save)
            except Exception as exc:
                raise EngineFailure.wrap(self.name, exc) from exc

        verbose(self.logger, "stage", event="gtts_save", voice=voice, bytes=written,
                seconds=round(t.seconds, 4))
        return written

    async def synthesize(self, text: str, voice: str) -> SynthesisResult:
        def _render() -> bytes:
            buf = io.BytesIO()
            self._job(text, voice).write_to_fp(buf)
            return buf.getvalue()

        try:
            audio = await asyncio.to_thread(_render)
        except Exception as exc:
            raise EngineFailure.wrap(self.name, exc) from exc

        return SynthesisResult(audio_bytes=audio, suggested_name=f"gtts-{voice}.mp3")
