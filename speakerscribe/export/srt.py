"""
speakerscribe.export.srt - SRT subtitle generation.

Segment end times are inferred from the next segment's start. When the next
start is not after the current one the cue gets a 3 second default, and the
final cue always runs 5 seconds.
"""

from __future__ import annotations

from collections.abc import Sequence

from speakerscribe.export.timecode import format_srt_time, parse_timestamp
from speakerscribe.models import TranscriptSegment

OVERLAP_FALLBACK_SECONDS = 3
FINAL_CUE_SECONDS = 5


def compute_cue_times(segments: Sequence[TranscriptSegment]) -> list[tuple[float, float]]:
    """Compute (start, end) seconds for each segment, in order."""
    starts = [parse_timestamp(segment.timestamp) for segment in segments]
    times = []

    for i, start in enumerate(starts):
        if i < len(starts) - 1:
            end = starts[i + 1]
            if end <= start:
                end = start + OVERLAP_FALLBACK_SECONDS
        else:
            end = start + FINAL_CUE_SECONDS
        times.append((start, end))

    return times


def format_cue(index: int, start: float, end: float, segment: TranscriptSegment) -> str:
    """Render one numbered SRT entry, terminated by a newline."""
    text = f"{segment.speaker}: {segment.transcript}"
    return f"{index}\n{format_srt_time(start)} --> {format_srt_time(end)}\n{text}\n"


def generate_srt(segments: Sequence[TranscriptSegment] | None) -> str:
    """Convert an ordered transcript to an SRT document.

    Args:
        segments: Transcript segments in chronological order

    Returns:
        SRT text, or an empty string when there are no segments
    """
    if not segments:
        return ""

    cues = [
        format_cue(i + 1, start, end, segment)
        for i, (segment, (start, end)) in enumerate(zip(segments, compute_cue_times(segments)))
    ]
    return "\n".join(cues)


def export_filename(audio_name: str, extension: str) -> str:
    """Name an export after the audio file's base name.

    Names without a usable stem (no dot, or a leading-dot name like
    ".m4a") keep the full name.
    """
    stem = audio_name[: audio_name.rfind(".")] if "." in audio_name else ""
    return f"{stem or audio_name}.{extension}"


def srt_filename(audio_name: str) -> str:
    return export_filename(audio_name, "srt")
