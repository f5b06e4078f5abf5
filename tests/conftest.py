"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from speakerscribe.config import ScribeConfig
from speakerscribe.models import AudioFile, TranscriptSegment


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials out of config resolution."""
    for name in (
        "API_KEY",
        "GEMINI_API_KEY",
        "SPEAKERSCRIBE_STORAGE_SECRET",
        "SPEAKERSCRIBE_SERVER_URL",
        "SPEAKERSCRIBE_PUBLIC_URL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_segments() -> list[TranscriptSegment]:
    """Return a three-segment, two-speaker transcript."""
    return [
        TranscriptSegment(speaker="Speaker 1", timestamp="00:02", transcript="Hello there."),
        TranscriptSegment(speaker="Speaker 2", timestamp="00:06", transcript="Hi! How are you?"),
        TranscriptSegment(speaker="Speaker 1", timestamp="00:12", transcript="Doing well."),
    ]


@pytest.fixture
def m4a_file(tmp_path: Path) -> Path:
    """Create a small fake M4A file."""
    path = tmp_path / "interview.m4a"
    path.write_bytes(b"\x00\x00\x00\x20ftypM4A fake audio payload")
    return path


@pytest.fixture
def audio_file(m4a_file: Path) -> AudioFile:
    return AudioFile.from_path(m4a_file, content_type="audio/x-m4a")


@pytest.fixture
def test_config(tmp_path: Path) -> ScribeConfig:
    """Return a config with isolated storage and a dummy API key."""
    return ScribeConfig(
        api_key="test-key",
        storage_dir=tmp_path / "blobs",
        storage_secret="test-secret",
        max_file_size_mb=1,
        host="testserver",
        port=80,
        public_url="http://testserver",
    )
