"""
speakerscribe.models - Transcript and file-handle data models.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class TranscriptSegment(BaseModel):
    """One speaker-attributed line of transcript with its start timestamp."""

    speaker: str
    timestamp: str = Field(description="Segment start, MM:SS or HH:MM:SS")
    transcript: str


class AudioFile(BaseModel):
    """Handle to a user-selected audio file.

    Holds metadata and a path only; bytes are read when the client
    transfers the file.
    """

    name: str
    size: int = Field(ge=0)
    content_type: str = ""
    path: Path | None = None

    @classmethod
    def from_path(cls, path: Path, content_type: str | None = None) -> AudioFile:
        """Build a handle from a file on disk, guessing the declared type."""
        if content_type is None:
            content_type = mimetypes.guess_type(path.name)[0] or ""
        return cls(
            name=path.name,
            size=path.stat().st_size,
            content_type=content_type,
            path=path,
        )

    def read_bytes(self) -> bytes:
        if self.path is None:
            raise FileNotFoundError(f"No path recorded for {self.name}")
        return self.path.read_bytes()


class BlobInfo(BaseModel):
    """Metadata for an object held in blob storage."""

    pathname: str
    url: str
    size: int
    content_type: str


def segments_from_json(data: Any) -> list[TranscriptSegment]:
    """Validate a decoded JSON array into ordered segments."""
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array of segments, got {type(data).__name__}")
    return [TranscriptSegment.model_validate(item) for item in data]


def segments_to_json(segments: list[TranscriptSegment]) -> list[dict[str, Any]]:
    return [segment.model_dump() for segment in segments]


# Returned in mock mode, when no transcription service is reachable.
MOCK_TRANSCRIPT = [
    TranscriptSegment(
        speaker="Speaker 1",
        timestamp="00:02",
        transcript="Hello, this is a simulated transcript for testing purposes. "
        "Is this thing working?",
    ),
    TranscriptSegment(
        speaker="Speaker 2",
        timestamp="00:06",
        transcript="Loud and clear! The mock service is functioning correctly. "
        "This allows us to test the UI flow without making a real API call.",
    ),
    TranscriptSegment(
        speaker="Speaker 1",
        timestamp="00:12",
        transcript="Excellent. So the user can upload a file, see the loading state, "
        "and then this transcript will appear.",
    ),
]
