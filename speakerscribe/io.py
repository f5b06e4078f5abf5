"""
speakerscribe.io - Atomic file writes for exports and blobs.

Saved transcripts, SRT files, blob bytes and their metadata sidecars all go
through ``atomic_write``, so a reader never sees a half-written file.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from speakerscribe.models import TranscriptSegment, segments_from_json, segments_to_json


def atomic_write(path: Path, content: str | bytes) -> Path:
    """Write text (UTF-8) or bytes to ``path`` via a sibling temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8") if isinstance(content, str) else content

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data: Any) -> Path:
    return atomic_write(path, json.dumps(data, indent=2, ensure_ascii=False))


def read_transcript(path: Path) -> list[TranscriptSegment]:
    """Load a transcript saved as a JSON array of segments.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file is not JSON or not a segment array
    """
    return segments_from_json(read_json(path))


def write_transcript(path: Path, segments: list[TranscriptSegment]) -> Path:
    return write_json(path, segments_to_json(segments))
