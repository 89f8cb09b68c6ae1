"""Tests for the artifact and upload stores."""
from __future__ import annotations

import asyncio
import re

import pytest

from tts_gateway.core.errors import StorageFailure, ValidationError
from tts_gateway.tts.storage import ArtifactStore, UploadStore, now_ms

from conftest import counting_clock


class TestArtifactStore:

    def test_name_and_url(self, tmp_path):
        store = ArtifactStore(tmp_path / "audio", clock=lambda: 1718000000000)
        artifact = store.new_artifact()
        assert artifact.file_name == "speech-1718000000000.mp3"
        assert artifact.public_url == "/audio/speech-1718000000000.mp3"
        assert artifact.storage_path == (tmp_path / "audio").resolve() / artifact.file_name
        assert artifact.storage_path.is_absolute()

    def test_new_artifact_writes_nothing(self, tmp_path):
        store = ArtifactStore(tmp_path / "audio")
        store.ensure_dirs()
        store.new_artifact()
        assert list(store.directory.iterdir()) == []

    def test_default_clock_format(self, tmp_path):
        name = ArtifactStore(tmp_path).new_artifact().file_name
        assert re.fullmatch(r"speech-\d{13}\.mp3", name)

    def test_custom_url_prefix(self, tmp_path):
        store = ArtifactStore(tmp_path, url_prefix="/media/", clock=lambda: 1)
        assert store.new_artifact().public_url == "/media/speech-1.mp3"

    def test_write(self, tmp_path):
        store = ArtifactStore(tmp_path / "audio", clock=counting_clock())
        store.ensure_dirs()
        artifact = store.new_artifact()
        assert asyncio.run(store.write(artifact, b"abc")) == 3
        assert artifact.storage_path.read_bytes() == b"abc"

    def test_write_into_missing_dir_fails(self, tmp_path):
        store = ArtifactStore(tmp_path / "missing")
        with pytest.raises(StorageFailure) as exc_info:
            asyncio.run(store.write(store.new_artifact(), b"abc"))
        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_same_millisecond_names_collide(self, tmp_path):
        """Known race: equal timestamps produce the same name."""
        store = ArtifactStore(tmp_path, clock=lambda: 42)
        assert store.new_artifact().file_name == store.new_artifact().file_name

    def test_from_config(self, config):
        store = ArtifactStore.from_config(config.storage)
        assert str(store.directory).endswith("audio")


class TestUploadStore:

    @pytest.fixture
    def store(self, tmp_path):
        s = UploadStore(tmp_path / "uploads", clock=counting_clock(1000))
        s.ensure_dirs()
        return s

    def test_save_prefixes_timestamp(self, store):
        stored = asyncio.run(store.save("clip.wav", b"RIFF"))
        assert stored.file_name == "1000-clip.wav"
        assert stored.public_url == "/uploads/1000-clip.wav"
        assert stored.storage_path.read_bytes() == b"RIFF"

    def test_save_strips_directories(self, store):
        stored = asyncio.run(store.save("../../etc/passwd", b"x"))
        assert stored.file_name == "1000-passwd"
        assert stored.storage_path.parent == store.directory

    def test_save_text(self, store):
        stored = asyncio.run(store.save_text("héllo"))
        assert stored.file_name == "transcript-1000.txt"
        assert stored.storage_path.read_text(encoding="utf-8") == "héllo"

    def test_consume_text_deletes(self, store):
        stored = asyncio.run(store.save("notes.txt", "merhaba".encode("utf-8")))
        assert asyncio.run(store.consume_text(stored)) == "merhaba"
        assert not stored.storage_path.exists()

    def test_consume_invalid_utf8(self, store):
        stored = asyncio.run(store.save("notes.txt", b"\xff\xfe\xfa"))
        with pytest.raises(ValidationError):
            asyncio.run(store.consume_text(stored))
        assert not stored.storage_path.exists()

    def test_save_into_missing_dir_fails(self, tmp_path):
        store = UploadStore(tmp_path / "missing")
        with pytest.raises(StorageFailure):
            asyncio.run(store.save_text("x"))


def test_now_ms_is_milliseconds():
    assert len(str(now_ms())) == 13
