"""
Request Context and Logging State.

The request id lives in a ContextVar so that every log line emitted while
an asyncio task handles one HTTP request carries the same id, even when
other requests interleave on the event loop. Worker threads started with
``asyncio.to_thread`` inherit a copy of the context, so engine logs stay
correlated too.

Environment Variables:
    - TTS_GW_LOG_LEVEL: Log level (1-4 or name)
    - TTS_GW_LOG_DIR: Directory for the JSONL log file (file output off if unset)
    - TTS_GW_JSONL_FILE: JSONL filename (default tts-gateway.jsonl)
    - TTS_GW_LOG_ROTATE_BYTES: Max file size before rotation
    - TTS_GW_LOG_ROTATE_BACKUP: Number of rotated files kept
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

import yaml

from .levels import LEVEL_NAMES, LogLevel

# "-" marks log lines emitted outside any request
_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Bind ``rid`` to the current context for log correlation."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(_current_level, "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def get_log_config() -> Dict[str, Any]:
    return _log_config


def set_log_config(config: Dict[str, Any]) -> None:
    global _log_config
    _log_config = config


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve logging options from settings.yaml and the environment.

    Environment variables win over the ``logging`` section of the
    settings file; a missing or unreadable settings file is ignored.
    """
    cfg: Dict[str, Any] = {}

    try:
        from tts_gateway.core.config import load_settings, settings_path
        settings = load_settings(settings_path())
        cfg.update(settings.raw.get("logging", {}) or {})
    except (OSError, yaml.YAMLError):
        # No settings file (or unparsable YAML): logging uses defaults
        pass

    if os.getenv("TTS_GW_LOG_LEVEL"):
        cfg["level"] = os.environ["TTS_GW_LOG_LEVEL"]
    if os.getenv("TTS_GW_LOG_DIR"):
        cfg["log_dir"] = os.environ["TTS_GW_LOG_DIR"]
    if os.getenv("TTS_GW_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["TTS_GW_JSONL_FILE"]

    rotate_bytes = _env_int("TTS_GW_LOG_ROTATE_BYTES")
    if rotate_bytes is not None:
        cfg["rotate_max_bytes"] = rotate_bytes
    rotate_backup = _env_int("TTS_GW_LOG_ROTATE_BACKUP")
    if rotate_backup is not None:
        cfg["rotate_backup_count"] = rotate_backup

    return cfg
