"""
Input Validation for the Conversion Gateway.

Validation runs before any engine call or file write so that a rejected
request leaves nothing behind on disk.

Validation Rules:
    - Text: required, non-empty after trimming surrounding whitespace
    - Text upload: ``.txt`` only
    - Audio upload: extension on the configured whitelist, non-empty payload

All functions raise ``tts_gateway.core.errors.ValidationError`` (HTTP 400,
code INVALID_INPUT).

Usage:
    from tts_gateway.services.validators import validate_text

    text = validate_text(form_text)   # "  hi " -> "hi"
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from tts_gateway.core.errors import ValidationError
from tts_gateway.core.logging import get_logger, warn

_LOG = get_logger("tts-gateway.validators")

MISSING_TEXT_MESSAGE = "no text or file provided"
TEXT_ONLY_MESSAGE = "Only .txt files are allowed"


def validate_text(text: Optional[str]) -> str:
    """
    Validate conversion or transcript text.

    Returns:
        The text with surrounding whitespace trimmed.

    Raises:
        ValidationError: Text is missing, empty or whitespace-only.
    """
    if text is None or not str(text).strip():
        raise ValidationError(MISSING_TEXT_MESSAGE)
    return str(text).strip()


def file_extension(filename: Optional[str]) -> str:
    """Lowercased extension of the basename, including the dot ('' if none)."""
    return Path(filename or "").suffix.lower()


def validate_text_filename(filename: Optional[str]) -> str:
    """
    Accept only ``.txt`` uploads.

    Returns:
        The basename of ``filename``.
    """
    if file_extension(filename) != ".txt":
        warn(_LOG, "upload_rejected", kind="text", file=filename)
        raise ValidationError(TEXT_ONLY_MESSAGE)
    return Path(filename or "").name


def validate_audio_upload(
    filename: Optional[str],
    data: Optional[bytes],
    allowed_extensions: Iterable[str],
) -> str:
    """
    Validate an audio upload against the extension whitelist.

    Returns:
        The basename of ``filename``.

    Raises:
        ValidationError: Missing file, disallowed extension or empty payload.
    """
    if not filename:
        raise ValidationError("No audio file provided")

    allowed = sorted(set(allowed_extensions))
    ext = file_extension(filename)
    if ext not in allowed:
        warn(_LOG, "upload_rejected", kind="audio", file=filename, ext=ext)
        raise ValidationError(
            f"Unsupported audio type {ext or '(none)'}; allowed: {', '.join(allowed)}",
            {"allowed": allowed},
        )

    if not data:
        raise ValidationError("Uploaded audio file is empty")

    return Path(filename).name
