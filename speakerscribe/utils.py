"""
speakerscribe.utils - Shared utility functions.

Contains common functions used across multiple modules to avoid duplication.
"""

from __future__ import annotations

from collections import Counter

from speakerscribe.models import TranscriptSegment


def format_size(size: float) -> str:
    """Format a byte count in human-readable form."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def format_segment_line(segment: TranscriptSegment) -> str:
    """Format a segment the way it is copied to the clipboard.

    Returns:
        String like ``Speaker 1 (00:02): Hello there``
    """
    return f"{segment.speaker} ({segment.timestamp}): {segment.transcript}"


def speaker_counts(segments: list[TranscriptSegment]) -> dict[str, int]:
    """Count segments per speaker, in order of first appearance."""
    return dict(Counter(segment.speaker for segment in segments))
