"""Tests for transcript saving, audio uploads and .txt text uploads."""
from __future__ import annotations

import asyncio

import pytest

from tts_gateway.core.errors import ValidationError


def _files(media):
    return sorted(p.name for p in media.uploads.directory.iterdir())


class TestTranscript:

    def test_saved_as_txt(self, media):
        saved = asyncio.run(media.save_transcript("  spoken words "))
        assert saved.file_name == "transcript-1718000000500.txt"
        assert saved.url == "/uploads/transcript-1718000000500.txt"
        assert (media.uploads.directory / saved.file_name).read_text(encoding="utf-8") == "spoken words"

    @pytest.mark.parametrize("text", ["", "  ", None])
    def test_empty_rejected(self, media, text):
        with pytest.raises(ValidationError):
            asyncio.run(media.save_transcript(text))
        assert _files(media) == []

    def test_to_response(self, media):
        saved = asyncio.run(media.save_transcript("x"))
        assert saved.to_response() == {"ok": True, "url": saved.url, "fileName": saved.file_name}


class TestAudioUpload:

    def test_stored_with_timestamp_prefix(self, media):
        saved = asyncio.run(media.save_audio("clip.webm", b"\x1aE\xdf\xa3"))
        assert saved.file_name == "1718000000500-clip.webm"
        assert _files(media) == [saved.file_name]

    @pytest.mark.parametrize("ext", [".mp3", ".wav", ".ogg", ".m4a", ".webm", ".flac"])
    def test_default_whitelist(self, media, ext):
        asyncio.run(media.save_audio(f"clip{ext}", b"data"))

    def test_disallowed_extension(self, media):
        with pytest.raises(ValidationError):
            asyncio.run(media.save_audio("clip.exe", b"MZ"))
        assert _files(media) == []

    def test_empty_payload(self, media):
        with pytest.raises(ValidationError):
            asyncio.run(media.save_audio("clip.mp3", b""))

    def test_allowed_extensions_from_config(self, media):
        assert ".flac" in media.allowed_audio_extensions


class TestTextUpload:

    def test_read_and_deleted(self, media):
        text = asyncio.run(media.read_text_upload("notes.txt", "Hello from a file".encode("utf-8")))
        assert text == "Hello from a file"
        assert _files(media) == []

    def test_only_txt(self, media):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(media.read_text_upload("notes.docx", b"PK"))
        assert exc_info.value.message == "Only .txt files are allowed"
        assert _files(media) == []

    def test_undecodable(self, media):
        with pytest.raises(ValidationError):
            asyncio.run(media.read_text_upload("notes.txt", b"\xff\xfe\x00\xd8"))
        assert _files(media) == []
