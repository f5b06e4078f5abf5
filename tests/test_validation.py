"""Tests for speakerscribe.validation module."""

from __future__ import annotations

import pytest

from speakerscribe.config import ScribeConfig
from speakerscribe.exceptions import DependencyError, InvalidFileError
from speakerscribe.models import AudioFile
from speakerscribe.validation import check_api_key, is_accepted_audio, validate_audio_file


class TestIsAcceptedAudio:
    @pytest.mark.parametrize("content_type", ["audio/mp4", "audio/m4a", "audio/x-m4a"])
    def test_accepted_types(self, content_type: str) -> None:
        assert is_accepted_audio(content_type, "recording")

    def test_type_case_insensitive(self) -> None:
        assert is_accepted_audio("Audio/MP4", None)

    def test_extension_fallback(self) -> None:
        assert is_accepted_audio("", "memo.m4a")
        assert is_accepted_audio("application/octet-stream", "memo.M4A")

    def test_rejected(self) -> None:
        assert not is_accepted_audio("audio/mpeg", "song.mp3")
        assert not is_accepted_audio(None, "m4a")
        assert not is_accepted_audio(None, None)


class TestValidateAudioFile:
    def test_valid_file_returned(self) -> None:
        audio = AudioFile(name="a.m4a", size=100, content_type="audio/x-m4a")
        assert validate_audio_file(audio, 1) is audio

    def test_exact_limit_allowed(self) -> None:
        audio = AudioFile(name="a.m4a", size=1024 * 1024)
        validate_audio_file(audio, 1)

    def test_one_byte_over_limit(self) -> None:
        audio = AudioFile(name="a.m4a", size=1024 * 1024 + 1)
        with pytest.raises(InvalidFileError, match="maximum allowed size is 1MB"):
            validate_audio_file(audio, 1)

    def test_size_checked_before_type(self) -> None:
        audio = AudioFile(name="a.txt", size=5 * 1024 * 1024, content_type="text/plain")
        with pytest.raises(InvalidFileError, match="too large"):
            validate_audio_file(audio, 1)

    def test_wrong_type(self) -> None:
        audio = AudioFile(name="a.txt", size=10, content_type="text/plain")
        with pytest.raises(InvalidFileError, match="Invalid file type"):
            validate_audio_file(audio, 1)


class TestCheckApiKey:
    def test_returns_key(self) -> None:
        assert check_api_key(ScribeConfig(api_key="abc")) == "abc"

    def test_missing_key(self) -> None:
        with pytest.raises(DependencyError) as exc_info:
            check_api_key(ScribeConfig())
        assert exc_info.value.dependency == "API_KEY"

    def test_mock_mode_needs_no_key(self) -> None:
        assert check_api_key(ScribeConfig(mock_mode=True)) == ""
