"""
Tests for the engine adapters and factory.

The gTTS and edge-tts clients are patched; nothing goes over the network.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from tts_gateway.core.config import Settings
from tts_gateway.core.errors import EngineFailure
from tts_gateway.tts.engine import EDGE, GTTS, create_engines, resolve_engine_name
from tts_gateway.tts.engines import edge_engine
from tts_gateway.tts.engines.edge_engine import EdgeEngine
from tts_gateway.tts.engines.gtts_engine import GttsEngine

MP3 = b"ID3" + b"\x00" * 32


class TestResolveEngineName:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("edge", EDGE),
            ("EDGE", EDGE),
            (" edge ", EDGE),
            ("gtts", GTTS),
            ("polly", GTTS),
            ("", GTTS),
            (None, GTTS),
        ],
    )
    def test_only_edge_selects_edge(self, value, expected):
        assert resolve_engine_name(value) == expected

    def test_default_used_when_absent(self):
        assert resolve_engine_name(None, default="edge") == EDGE
        assert resolve_engine_name("gtts", default="edge") == GTTS


def test_create_engines_builds_both(settings):
    engines = create_engines(settings)
    assert set(engines) == {GTTS, EDGE}
    assert isinstance(engines[GTTS], GttsEngine)
    assert isinstance(engines[EDGE], EdgeEngine)
    assert engines[GTTS].capabilities.resolved_voice is True
    assert engines[EDGE].capabilities.resolved_voice is False


class TestGttsEngine:

    @pytest.fixture
    def engine(self, config):
        return GttsEngine(config)

    @pytest.mark.parametrize(
        "voice, expected",
        [
            ("en-us", ("en", "com")),
            ("en-uk", ("en", "co.uk")),
            ("en-au", ("en", "com.au")),
            ("hi", ("hi", "com")),
            ("en", ("en", "com")),
        ],
    )
    def test_split_voice(self, engine, voice, expected):
        assert engine.split_voice(voice) == expected

    def test_configured_tld_for_plain_codes(self):
        cfg = Settings(raw={"engines": {"gtts": {"tld": "co.in"}}}).get_gateway_config()
        assert GttsEngine(cfg).split_voice("hi") == ("hi", "co.in")

    def test_synthesize_to_path(self, engine, tmp_path):
        out = tmp_path / "speech.mp3"
        with patch("tts_gateway.tts.engines.gtts_engine.gTTS") as gtts_cls:
            gtts_cls.return_value.save.side_effect = lambda p: Path(p).write_bytes(MP3)
            written = asyncio.run(engine.synthesize_to_path("Hello", "en-uk", out))

        assert written == len(MP3)
        assert out.read_bytes() == MP3
        gtts_cls.assert_called_once_with(text="Hello", lang="en", tld="co.uk", slow=False)

    def test_backend_error_wrapped(self, engine, tmp_path):
        with patch("tts_gateway.tts.engines.gtts_engine.gTTS") as gtts_cls:
            gtts_cls.return_value.save.side_effect = RuntimeError("429 Too Many Requests")
            with pytest.raises(EngineFailure) as exc_info:
                asyncio.run(engine.synthesize_to_path("Hello", "en", tmp_path / "x.mp3"))

        assert "gtts synthesis failed" in exc_info.value.message
        assert "429" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_unsupported_language_wrapped(self, engine, tmp_path):
        with patch("tts_gateway.tts.engines.gtts_engine.gTTS", side_effect=ValueError("Language not supported: xx")):
            with pytest.raises(EngineFailure):
                asyncio.run(engine.synthesize_to_path("Hello", "xx", tmp_path / "x.mp3"))

    def test_synthesize_buffer(self, engine):
        with patch("tts_gateway.tts.engines.gtts_engine.gTTS") as gtts_cls:
            gtts_cls.return_value.write_to_fp.side_effect = lambda fp: fp.write(MP3)
            result = asyncio.run(engine.synthesize("Hello", "fr"))
        assert result.audio_bytes == MP3


class _FakeCommunicate:
    chunks = [
        {"type": "WordBoundary", "offset": 0},
        {"type": "audio", "data": MP3[:10]},
        {"type": "audio", "data": MP3[10:]},
    ]
    error = None
    seen = []

    def __init__(self, text, voice):
        type(self).seen.append((text, voice))

    async def stream(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class TestEdgeEngine:

    @pytest.fixture
    def engine(self, config):
        return EdgeEngine(config)

    @pytest.fixture
    def communicate(self, monkeypatch):
        class Communicate(_FakeCommunicate):
            seen = []
        monkeypatch.setattr(edge_engine.edge_tts, "Communicate", Communicate)
        return Communicate

    def test_pick_voice(self, engine):
        assert engine.pick_voice("en-GB-RyanNeural") == "en-GB-RyanNeural"
        assert engine.pick_voice("") == "en-US-AriaNeural"
        assert engine.pick_voice(None) == "en-US-AriaNeural"
        assert engine.pick_voice("   ") == "en-US-AriaNeural"

    def test_pick_voice_not_trimmed(self, engine):
        assert engine.pick_voice(" en-GB-RyanNeural ") == " en-GB-RyanNeural "

    def test_stream_drained(self, engine, communicate):
        result = asyncio.run(engine.synthesize("Test", "en-US-AriaNeural"))
        assert result.audio_bytes == MP3
        assert communicate.seen == [("Test", "en-US-AriaNeural")]

    def test_voice_passed_verbatim(self, engine, communicate):
        asyncio.run(engine.synthesize("Test", "xx-Unknown"))
        assert communicate.seen[-1][1] == "xx-Unknown"

    def test_stream_error_wrapped(self, engine, communicate):
        communicate.error = ConnectionError("websocket closed")
        with pytest.raises(EngineFailure) as exc_info:
            asyncio.run(engine.synthesize("Test", "en-US-AriaNeural"))
        assert exc_info.value.message == "edge synthesis failed: websocket closed"

    def test_no_audio(self, engine, communicate):
        communicate.chunks = [{"type": "WordBoundary"}]
        with pytest.raises(EngineFailure) as exc_info:
            asyncio.run(engine.synthesize("Test", "en-US-AriaNeural"))
        assert "no audio received" in exc_info.value.message

    def test_list_voices(self, engine, monkeypatch):
        async def fake_list_voices():
            return [{"ShortName": "en-US-AriaNeural", "FriendlyName": "Aria", "Locale": "en-US", "Gender": "Female"}]

        monkeypatch.setattr(edge_engine.edge_tts, "list_voices", fake_list_voices)
        voices = asyncio.run(engine.list_voices())
        assert voices == [{"id": "en-US-AriaNeural", "name": "Aria", "locale": "en-US", "gender": "Female"}]

    def test_list_voices_failure(self, engine, monkeypatch):
        async def broken():
            raise OSError("offline")

        monkeypatch.setattr(edge_engine.edge_tts, "list_voices", broken)
        with pytest.raises(EngineFailure):
            asyncio.run(engine.list_voices())
