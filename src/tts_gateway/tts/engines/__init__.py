"""
Speech Engine Implementations.

    - GttsEngine: Google Translate TTS, writes MP3 to a path
    - EdgeEngine: Microsoft Edge neural voices, returns an MP3 buffer

Engine classes are imported lazily so that importing the package does not
pull in both client libraries.

Usage:
    from tts_gateway.tts.engine import create_engines
    engines = create_engines(settings)   # {"gtts": GttsEngine, "edge": EdgeEngine}
"""
from __future__ import annotations

from typing import TYPE_CHECKING

__all__ = [
    "EdgeEngine",
    "GttsEngine",
]


def __getattr__(name: str):
    if name == "GttsEngine":
        from tts_gateway.tts.engines.gtts_engine import GttsEngine
        return GttsEngine
    if name == "EdgeEngine":
        from tts_gateway.tts.engines.edge_engine import EdgeEngine
        return EdgeEngine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


if TYPE_CHECKING:
    from tts_gateway.tts.engines.edge_engine import EdgeEngine
    from tts_gateway.tts.engines.gtts_engine import GttsEngine
