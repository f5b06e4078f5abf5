"""
speakerscribe.exceptions - Custom exception classes.

All Speakerscribe-specific exceptions inherit from ScribeError.
"""

from __future__ import annotations


class ScribeError(Exception):
    """Base exception for all Speakerscribe errors."""

    pass


class ConfigError(ScribeError):
    """Configuration loading or validation error."""

    pass


class InvalidFileError(ScribeError):
    """Selected file has the wrong type or exceeds the size limit."""

    pass


class UploadTransportError(ScribeError):
    """Network or storage failure while transferring audio bytes."""

    pass


class TranscriptionServiceError(ScribeError):
    """Transcription proxy returned a non-success status or an error body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class EmptyResultError(ScribeError):
    """Transcription succeeded but produced no segments."""

    default_message = (
        "Transcription failed or returned no content. The audio might be silent or unclear."
    )

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class SessionStateError(ScribeError):
    """Requested transition is not allowed from the current session state."""

    pass


class StorageError(ScribeError):
    """Blob storage error."""

    pass


class TranscriptionError(ScribeError):
    """Model call or reply parsing failed inside the transcription engine."""

    pass


class DependencyError(ScribeError):
    """Required dependency or credential missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
