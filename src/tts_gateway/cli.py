"""
Command-Line Interface for tts-gateway.

Runs a conversion through the same orchestrator as the HTTP server,
without starting the server. The artifact lands in the configured audio
directory exactly as a /convert request would leave it.

Usage Examples:
    # Single conversion with gTTS (male English resolves to en-us)
    tts-gateway "Hello world" --voice en --gender male

    # Edge neural voice
    tts-gateway --text "Hello" --engine edge --voice en-GB-RyanNeural

    # Text from a .txt file
    tts-gateway --file notes.txt --json

    # Show what voice would be used, without synthesis
    tts-gateway --voice en --gender female --resolve

    # List Edge voices
    tts-gateway --voices --json

Environment Variables:
    TTS_GW_SETTINGS: Settings file (default config/settings.yaml)
    TTS_GW_AUDIO_DIR: Artifact directory override
    TTS_GW_EDGE_VOICE: Default Edge voice
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from tts_gateway.core.config import GatewayConfig, load_settings_or_defaults
from tts_gateway.core.errors import ConversionError, ValidationError
from tts_gateway.core.logging import configure_logging, get_logger, info, set_request_id
from tts_gateway.services.conversion_service import ConversionRequest, build_service
from tts_gateway.services.validators import TEXT_ONLY_MESSAGE, file_extension
from tts_gateway.tts.engine import GTTS, resolve_engine_name
from tts_gateway.tts.voices import resolve_voice


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="tts-gateway CLI (serverless conversion)")

    # Input options
    parser.add_argument("text_pos", nargs="?", help="Text to convert (positional)")
    parser.add_argument("--text", help="Text to convert")
    parser.add_argument("--file", help="UTF-8 .txt file whose content is converted")

    # Voice selection
    parser.add_argument("--engine", help="gtts (default) or edge")
    parser.add_argument("--voice", help="gtts language key or Edge voice short name")
    parser.add_argument("--gender", help="male (default) or female; gtts only")

    # Execution modes
    parser.add_argument("--resolve", action="store_true",
                        help="Print the engine/voice that would be used, without synthesis")
    parser.add_argument("--voices", action="store_true",
                        help="List Edge neural voices")
    parser.add_argument("--json", action="store_true",
                        help="Print JSON output")

    return parser.parse_args(argv)


def _load_text(args: argparse.Namespace) -> Optional[str]:
    """
    Input text from --file, --text or the positional argument.

    Raises:
        SystemExit: --file combined with text, or not a .txt file.
        ValidationError: --file missing, unreadable or not UTF-8.
    """
    text = args.text or args.text_pos
    if args.file:
        if text:
            raise SystemExit("Use --file without --text or positional text.")
        if file_extension(args.file) != ".txt":
            raise SystemExit(TEXT_ONLY_MESSAGE)
        try:
            return Path(args.file).read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ValidationError(f"{args.file} is not valid UTF-8 text", {"file": args.file}) from exc
        except OSError as exc:
            raise ValidationError(f"Cannot read {args.file}: {exc.strerror or exc}", {"file": args.file}) from exc
    return text


def _resolve(args: argparse.Namespace, config: GatewayConfig) -> dict:
    engine = resolve_engine_name(args.engine, config.engines.default)
    if engine == GTTS:
        voice = resolve_voice(args.voice, args.gender)
    else:
        voice = args.voice if args.voice and args.voice.strip() else config.engines.edge.default_voice
    return {"ok": True, "engine": engine, "voice": voice}


def _print(payload, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        0 on success, 1 when the conversion (or voice listing) fails.
    """
    args = _parse_args(argv)

    configure_logging()
    log = get_logger("tts-gateway.cli")
    set_request_id(str(uuid4())[:12])

    settings = load_settings_or_defaults()
    config = settings.get_gateway_config()

    if args.resolve:
        _print(_resolve(args, config), args.json)
        print("RESOLVE_OK")
        return 0

    service = build_service(settings)

    if args.voices:
        try:
            voices = asyncio.run(service.list_voices())
        except ConversionError as e:
            _print(e.to_dict(), args.json)
            return 1
        _print({"ok": True, "count": len(voices), "voices": voices}, args.json)
        return 0

    try:
        text = _load_text(args)
    except ConversionError as e:
        _print(e.to_dict(), args.json)
        return 1
    service.artifacts.ensure_dirs()
    info(log, "cli_convert", engine=args.engine, voice=args.voice, chars=len(text or ""))

    try:
        result = asyncio.run(service.convert(
            ConversionRequest(text=text, engine=args.engine, voice_hint=args.voice, gender=args.gender)
        ))
    except ConversionError as e:
        _print(e.to_dict(), args.json)
        return 1

    payload = result.to_response()
    payload["path"] = str(service.artifacts.directory / result.file_name)
    _print(payload, args.json)
    print("CLI_OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
