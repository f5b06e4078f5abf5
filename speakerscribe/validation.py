"""
speakerscribe.validation - File and environment checks.

Validates selected audio files and the live-transcription environment
before any bytes leave the machine.
"""

from __future__ import annotations

from speakerscribe.config import ACCEPTED_EXTENSION, ACCEPTED_MIME_TYPES, ScribeConfig
from speakerscribe.exceptions import DependencyError, InvalidFileError
from speakerscribe.models import AudioFile


def is_accepted_audio(content_type: str | None, filename: str | None) -> bool:
    """Check whether the declared type or the extension marks an M4A file."""
    if content_type and content_type.lower() in ACCEPTED_MIME_TYPES:
        return True
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower() == ACCEPTED_EXTENSION
    return False


def validate_audio_file(audio: AudioFile, max_size_mb: int) -> AudioFile:
    """Validate a selected file against the size limit and accepted format.

    The size limit is checked first, so an oversized file is rejected
    whatever its type.

    Args:
        audio: File handle to check
        max_size_mb: Maximum accepted size in megabytes

    Returns:
        The same handle, when valid

    Raises:
        InvalidFileError: If the file is too large or not M4A
    """
    if audio.size > max_size_mb * 1024 * 1024:
        raise InvalidFileError(
            f"File is too large. The maximum allowed size is {max_size_mb}MB."
        )

    if not is_accepted_audio(audio.content_type, audio.name):
        raise InvalidFileError("Invalid file type. Please select an M4A audio file.")

    return audio


def check_api_key(config: ScribeConfig) -> str:
    """Return the transcription API key, unless running in mock mode.

    Raises:
        DependencyError: If no key is configured
    """
    if config.mock_mode:
        return ""
    if not config.api_key:
        raise DependencyError(
            "API_KEY",
            "No transcription API key configured",
            "Set API_KEY (or GEMINI_API_KEY) in the environment, or enable mock_mode",
        )
    return config.api_key
