import json
from unittest.mock import patch

import pytest

from tts_gateway import cli


def _payloads(out):
    """JSON lines printed by the CLI, ignoring any log lines."""
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


@pytest.fixture
def fake_build(service):
    """Route the CLI through the fake-engine service."""
    with patch("tts_gateway.cli.build_service", return_value=service) as build:
        yield build


def test_cli_resolve_gtts(capsys):
    code = cli.main(["--voice", "en", "--gender", "male", "--resolve", "--json"])
    assert code == 0
    out = capsys.readouterr().out
    lines = out.strip().splitlines()
    assert lines[-1] == "RESOLVE_OK"
    assert _payloads(out)[-1] == {"ok": True, "engine": "gtts", "voice": "en-us"}


def test_cli_resolve_edge_uses_raw_voice(capsys):
    code = cli.main(["--engine", "edge", "--voice", "en-GB-RyanNeural", "--gender", "female", "--resolve", "--json"])
    assert code == 0
    payload = _payloads(capsys.readouterr().out)[-1]
    assert payload["voice"] == "en-GB-RyanNeural"


def test_cli_convert(capsys, fake_build, engines):
    code = cli.main(["Hello world", "--voice", "en", "--json"])
    assert code == 0
    out = capsys.readouterr().out
    lines = out.strip().splitlines()
    assert lines[-1] == "CLI_OK"
    payload = _payloads(out)[-1]
    assert payload["ok"] is True
    assert payload["url"].startswith("/audio/speech-")
    assert payload["path"].endswith(payload["fileName"])
    assert engines["gtts"].calls == [("Hello world", "en-us")]


def test_cli_convert_from_file(tmp_path, capsys, fake_build, engines):
    src = tmp_path / "input.txt"
    src.write_text("From a file", encoding="utf-8")
    assert cli.main(["--file", str(src), "--engine", "edge"]) == 0
    assert engines["edge"].calls == [("From a file", "en-US-AriaNeural")]


def test_cli_file_must_be_txt(tmp_path):
    src = tmp_path / "input.md"
    src.write_text("x", encoding="utf-8")
    with pytest.raises(SystemExit):
        cli.main(["--file", str(src)])


def test_cli_missing_file_exits_1(tmp_path, capsys, fake_build):
    code = cli.main(["--file", str(tmp_path / "absent.txt"), "--json"])
    assert code == 1
    payload = _payloads(capsys.readouterr().out)[-1]
    assert payload["ok"] is False
    assert payload["error"] == "INVALID_INPUT"


def test_cli_non_utf8_file_exits_1(tmp_path, capsys, fake_build, engines):
    src = tmp_path / "latin.txt"
    src.write_bytes(b"caf\xe9 \xff\xfe")
    assert cli.main(["--file", str(src), "--json"]) == 1
    payload = _payloads(capsys.readouterr().out)[-1]
    assert payload["error"] == "INVALID_INPUT"
    assert engines["gtts"].calls == []


def test_cli_empty_text_exits_1(capsys, fake_build):
    code = cli.main(["--text", "   ", "--json"])
    assert code == 1
    payload = _payloads(capsys.readouterr().out)[-1]
    assert payload["error"] == "INVALID_INPUT"


def test_cli_engine_failure_exits_1(capsys, fake_build, engines):
    engines["edge"].fail_with = ConnectionError("offline")
    assert cli.main(["Test", "--engine", "edge", "--json"]) == 1


def test_cli_voices(capsys, fake_build):
    assert cli.main(["--voices", "--json"]) == 0
    payload = _payloads(capsys.readouterr().out)[-1]
    assert payload["count"] == 2


@pytest.mark.slow
def test_cli_real_gtts(tmp_path, monkeypatch, capsys):
    """Reaches translate.google.com."""
    monkeypatch.setenv("TTS_GW_AUDIO_DIR", str(tmp_path))
    assert cli.main(["Hello.", "--json"]) == 0
    payload = _payloads(capsys.readouterr().out)[-1]
    data = (tmp_path / payload["fileName"]).read_bytes()
    assert len(data) > 100
