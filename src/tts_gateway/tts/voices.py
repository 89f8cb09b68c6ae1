"""
Voice Resolver for the gTTS engine.

Maps a caller's ``(voice, gender)`` pair onto the code handed to gTTS.
Two fixed tables exist, one per gender. Today only plain ``en`` differs
between them (male -> ``en-us``, female -> ``en``); every other listed
language maps to itself in both. The tables are kept separate so a
language can gain a gender-specific code without touching the lookup.

Unknown voices are passed through unchanged and left for the engine to
accept or reject. The resolver never raises.

    >>> resolve_voice("en", "male")
    'en-us'
    >>> resolve_voice("en", "female")
    'en'
    >>> resolve_voice("xx", "male")
    'xx'
"""
from __future__ import annotations

from typing import List, Optional

DEFAULT_VOICE = "en"
DEFAULT_GENDER = "male"

MALE_VOICES = {
    "en": "en-us",     # English (US)
    "en-uk": "en-uk",  # English (UK)
    "en-au": "en-au",  # English (Australia)
    "hi": "hi",        # Hindi
    "fr": "fr",        # French
    "es": "es",        # Spanish
}

FEMALE_VOICES = {
    "en": "en",
    "en-uk": "en-uk",
    "en-au": "en-au",
    "hi": "hi",
    "fr": "fr",
    "es": "es",
}

_TABLES = {
    "male": MALE_VOICES,
    "female": FEMALE_VOICES,
}


def normalize_gender(gender: Optional[str]) -> str:
    """``female`` (any case) stays female; anything else is male."""
    g = (gender or "").strip().lower()
    return g if g in _TABLES else DEFAULT_GENDER


def resolve_voice(requested_voice: Optional[str], gender: Optional[str] = None) -> str:
    """
    Resolve the concrete gTTS voice code.

    Args:
        requested_voice: Language key from the caller (``en``, ``hi``, ...).
            Empty or missing means ``en``.
        gender: ``male`` or ``female``; missing/unrecognized means male.

    Returns:
        The table entry for the voice, or the voice itself when unlisted.
    """
    voice = requested_voice or DEFAULT_VOICE
    table = _TABLES[normalize_gender(gender)]
    return table.get(voice, voice)


def known_voices() -> List[str]:
    """Language keys with a table entry, in display order."""
    return list(MALE_VOICES)
