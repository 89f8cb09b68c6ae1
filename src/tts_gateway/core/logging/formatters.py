"""
Console and JSONL Formatters.

    ColoredConsoleFormatter  ->  14:30:05 [SUCCESS] (abc123) converted engine=gtts 0.812s
    JsonlFormatter           ->  {"ts": "...", "level": 2, "tag": "SUCCESS", "message": "converted", ...}

Colors are dropped when stdout is not a TTY, or when NO_COLOR or
TTS_GW_NO_COLOR=1 is set.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict


class Colors:
    RESET = "\033[0m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    GRAY = "\033[90m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


_TAG_COLORS = {
    "SUCCESS": Colors.BRIGHT_GREEN,
    "FAIL": Colors.BRIGHT_RED,
    "ERROR": Colors.BRIGHT_RED,
    "WARN": Colors.BRIGHT_YELLOW,
    "INFO": Colors.BRIGHT_CYAN,
    "DEBUG": Colors.GRAY,
}


def supports_color() -> bool:
    """True when ANSI colors should be written to stdout."""
    if os.getenv("TTS_GW_NO_COLOR", "0") == "1" or os.getenv("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def get_tag_color(tag: str) -> str:
    return _TAG_COLORS.get(tag.upper(), Colors.WHITE)


class JsonlFormatter(logging.Formatter):
    """
    One JSON object per line, for files and log shippers.

    Keys: ts, level (1-4), tag, message, request_id and, when present,
    event, seconds and extra (the keyword fields passed to info()/warn()/...).
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": getattr(record, "numeric_level", 2),
            "tag": getattr(record, "tag", record.levelname),
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        event = getattr(record, "event", None)
        if event:
            payload["event"] = event

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            payload["seconds"] = seconds

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            payload["extra"] = extra_data

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Human-readable single-line output.

    Format: ``HH:MM:SS [ TAG ] (rid) message event=... 0.123s key=value``.
    Durations are green under 1s, yellow under 5s and red beyond; remote
    synthesis is slow enough that the usual 100ms threshold is useless.
    """

    def __init__(self, use_colors: bool | None = None):
        super().__init__()
        self.use_colors = supports_color() if use_colors is None else use_colors

    def _c(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tag = getattr(record, "tag", record.levelname)
        rid = getattr(record, "request_id", "-")

        parts = [self._c(ts, Colors.DIM), self._c(f"[{tag:^7}]", get_tag_color(tag))]
        if rid != "-":
            parts.append(self._c(f"({rid})", Colors.DIM + Colors.CYAN))
        parts.append(record.getMessage())

        event = getattr(record, "event", None)
        if event:
            parts.append(self._c(f"event={event}", Colors.BLUE))

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            if seconds < 1.0:
                color = Colors.GREEN
            elif seconds < 5.0:
                color = Colors.YELLOW
            else:
                color = Colors.RED
            parts.append(self._c(f"{seconds:.3f}s", color))

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            for k, v in extra_data.items():
                parts.append(self._c(f"{k}={v}", Colors.DIM))

        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line
