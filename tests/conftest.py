"""
Shared fixtures: fake engines, temp storage, services and a TestClient.

No test reaches Google or Microsoft; both engines are replaced by
in-process fakes that honour the BaseSpeechEngine contract.
"""
from __future__ import annotations

import asyncio
import itertools
import os
import tempfile

import pytest

# tts_gateway.main builds a module-level app on import; keep its
# directories out of the working tree.
_SESSION_DIR = tempfile.mkdtemp(prefix="tts-gateway-tests-")
os.environ.setdefault("TTS_GW_AUDIO_DIR", os.path.join(_SESSION_DIR, "audio"))
os.environ.setdefault("TTS_GW_UPLOADS_DIR", os.path.join(_SESSION_DIR, "uploads"))
os.environ.setdefault("TTS_GW_LOG_LEVEL", "1")

from tts_gateway.core.config import Settings  # noqa: E402
from tts_gateway.tts.engine import (  # noqa: E402
    EDGE,
    GTTS,
    BaseSpeechEngine,
    EngineCapabilities,
    SynthesisResult,
)

FAKE_MP3 = b"ID3\x04\x00\x00\x00\x00\x00\x00" + b"\xff\xfb" * 64

FAKE_VOICES = [
    {"id": "en-US-AriaNeural", "name": "Aria", "locale": "en-US", "gender": "Female"},
    {"id": "en-GB-RyanNeural", "name": "Ryan", "locale": "en-GB", "gender": "Male"},
]


class FakeGttsEngine(BaseSpeechEngine):
    """Path-writing engine that goes through the voice resolver."""

    name = GTTS
    capabilities = EngineCapabilities(
        resolved_voice=True,
        voice_catalog=False,
        writes_to_path=True,
    )

    def __init__(self, config, fail_with: Exception | None = None):
        super().__init__(config)
        self.fail_with = fail_with
        self.calls = []

    def default_voice(self) -> str:
        return "en"

    async def synthesize(self, text, voice):
        self.calls.append((text, voice))
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        return SynthesisResult(audio_bytes=FAKE_MP3)


class FakeEdgeEngine(BaseSpeechEngine):
    """Buffer-returning engine taking raw voice names."""

    name = EDGE
    capabilities = EngineCapabilities(
        resolved_voice=False,
        voice_catalog=True,
        writes_to_path=False,
    )

    def __init__(self, config, fail_with: Exception | None = None):
        super().__init__(config)
        self.fail_with = fail_with
        self.calls = []
        self.voices_error: Exception | None = None

    def default_voice(self) -> str:
        return self.config.engines.edge.default_voice

    async def synthesize(self, text, voice):
        self.calls.append((text, voice))
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        return SynthesisResult(audio_bytes=FAKE_MP3)

    async def list_voices(self):
        if self.voices_error is not None:
            raise self.voices_error
        return list(FAKE_VOICES)


def counting_clock(start: int = 1718000000000):
    """Millisecond clock that advances by one on every call."""
    counter = itertools.count(start)
    return lambda: next(counter)


@pytest.fixture
def audio_dir(tmp_path):
    return tmp_path / "public" / "audio"


@pytest.fixture
def uploads_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def settings(audio_dir, uploads_dir, monkeypatch):
    """Settings pointing both directories at tmp_path."""
    monkeypatch.setenv("TTS_GW_AUDIO_DIR", str(audio_dir))
    monkeypatch.setenv("TTS_GW_UPLOADS_DIR", str(uploads_dir))
    monkeypatch.delenv("TTS_GW_EDGE_VOICE", raising=False)
    return Settings(raw={
        "engines": {"default": "gtts", "edge": {"default_voice": "en-US-AriaNeural"}},
        "logging": {"level": 1, "text_preview_chars": 20},
    })


@pytest.fixture
def config(settings):
    return settings.get_gateway_config()


@pytest.fixture
def engines(config):
    return {
        GTTS: FakeGttsEngine(config),
        EDGE: FakeEdgeEngine(config),
    }


@pytest.fixture
def service(settings, engines):
    from tts_gateway.services import build_service

    svc = build_service(settings, engines=engines, clock=counting_clock())
    svc.artifacts.ensure_dirs()
    return svc


@pytest.fixture
def media(config):
    from tts_gateway.services import build_media_service

    svc = build_media_service(config, clock=counting_clock(1718000000500))
    svc.uploads.ensure_dirs()
    return svc


@pytest.fixture
def app(settings, service, media):
    from tts_gateway.main import create_app

    return create_app(settings, conversion_service=service, media_service=media)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c
