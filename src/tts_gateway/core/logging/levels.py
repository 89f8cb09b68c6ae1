"""
Numeric Log Levels.

tts-gateway logs on a four-step verbosity scale instead of Python's
named levels:

    1 = MINIMAL  -> logging.WARNING   startup, shutdown, failures
    2 = NORMAL   -> logging.INFO      one line per conversion (default)
    3 = VERBOSE  -> logging.DEBUG     engine/storage stages with timings
    4 = DEBUG    -> logging.DEBUG - 5 full text, resolved paths

Usage:
    from tts_gateway.core.logging.levels import LogLevel, coerce_level

    coerce_level("verbose")   # LogLevel.VERBOSE
    coerce_level(logging.INFO)  # LogLevel.NORMAL
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3
    DEBUG = 4


# Numeric level -> Python logging level used by handlers
LEVEL_MAP = {
    LogLevel.MINIMAL: logging.WARNING,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG - 5,
}

LEVEL_NAMES = {
    1: "MINIMAL",
    2: "NORMAL",
    3: "VERBOSE",
    4: "DEBUG",
}

_NAME_TO_LEVEL = {
    "MINIMAL": LogLevel.MINIMAL,
    "NORMAL": LogLevel.NORMAL,
    "VERBOSE": LogLevel.VERBOSE,
    "DEBUG": LogLevel.DEBUG,
    "TRACE": LogLevel.DEBUG,
    "CRITICAL": LogLevel.MINIMAL,
    "ERROR": LogLevel.MINIMAL,
    "WARNING": LogLevel.MINIMAL,
    "WARN": LogLevel.MINIMAL,
    "INFO": LogLevel.NORMAL,
    "1": LogLevel.MINIMAL,
    "2": LogLevel.NORMAL,
    "3": LogLevel.VERBOSE,
    "4": LogLevel.DEBUG,
}


def coerce_level(value: Any) -> LogLevel:
    """
    Convert an int, name or LogLevel to LogLevel.

    Integers 1-4 are taken literally; larger integers are read as Python
    logging levels. Anything unparseable yields NORMAL.

    Examples:
        >>> coerce_level(3)
        <LogLevel.VERBOSE: 3>
        >>> coerce_level("WARNING")
        <LogLevel.MINIMAL: 1>
    """
    if isinstance(value, LogLevel):
        return value

    if isinstance(value, int) and not isinstance(value, bool):
        if 1 <= value <= 4:
            return LogLevel(value)
        if value >= logging.WARNING:
            return LogLevel.MINIMAL
        if value >= logging.INFO:
            return LogLevel.NORMAL
        return LogLevel.DEBUG

    if isinstance(value, str):
        return _NAME_TO_LEVEL.get(value.upper().strip(), LogLevel.NORMAL)

    return LogLevel.NORMAL
