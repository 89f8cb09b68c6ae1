"""
tts-gateway: Text-to-Speech Conversion Gateway.

Accepts text (typed or uploaded as a .txt file) together with a voice hint,
a gender and an engine selection, runs one of two synthesis engines and
publishes the resulting MP3 under a stable URL.

Supported Engines:
    - gtts: Google Translate TTS, language/locale codes (en, en-uk, hi, ...)
    - edge: Microsoft Edge neural voices (en-US-AriaNeural, ...)

Adjuncts:
    - Transcript save (/stt/transcript)
    - Audio upload (/stt/upload)
    - Edge voice catalog passthrough (/voices)

Example Usage:
    >>> import asyncio
    >>> from tts_gateway.core.config import Settings
    >>> from tts_gateway.services import ConversionRequest, build_service
    >>>
    >>> service = build_service(Settings(raw={}))
    >>> result = asyncio.run(service.convert(
    ...     ConversionRequest(text="Hello world", engine="gtts", voice_hint="en")
    ... ))
    >>> result.url
    '/audio/speech-1718000000000.mp3'
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
