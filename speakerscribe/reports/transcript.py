"""
speakerscribe.reports.transcript - Transcript report.

Generates a self-contained HTML page listing each segment with its speaker
badge and timestamp, per-segment copy buttons, and an SRT download.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from speakerscribe.export.srt import compute_cue_times, generate_srt, srt_filename
from speakerscribe.export.timecode import format_srt_time
from speakerscribe.models import TranscriptSegment
from speakerscribe.reports.generator import write_report
from speakerscribe.utils import format_segment_line, speaker_counts

SPEAKER_COLORS = [
    "#38bdf8",
    "#a78bfa",
    "#34d399",
    "#fbbf24",
    "#f472b6",
    "#fb923c",
    "#2dd4bf",
    "#f87171",
]


def get_speaker_color(index: int) -> str:
    """Get a consistent color for a speaker by order of appearance."""
    return SPEAKER_COLORS[index % len(SPEAKER_COLORS)]


def build_report_data(
    segments: list[TranscriptSegment],
    source_file: str,
) -> dict[str, Any]:
    """Assemble template data for a transcript."""
    counts = speaker_counts(segments)
    colors = {name: get_speaker_color(i) for i, name in enumerate(counts)}

    rows = []
    for i, (segment, (start, end)) in enumerate(zip(segments, compute_cue_times(segments))):
        rows.append(
            {
                "index": i + 1,
                "speaker": segment.speaker,
                "speaker_color": colors[segment.speaker],
                "timestamp": segment.timestamp,
                "transcript": segment.transcript,
                "cue": f"{format_srt_time(start)} → {format_srt_time(end)}",
                "copy_text": format_segment_line(segment),
            }
        )

    return {
        "source_file": source_file,
        "segment_count": len(rows),
        "speakers": [
            {"name": name, "count": count, "color": colors[name]} for name, count in counts.items()
        ],
        "segments": rows,
        "srt_content": generate_srt(segments),
        "srt_filename": srt_filename(source_file),
    }


def generate_transcript_report(
    segments: list[TranscriptSegment],
    source_file: str,
    output_path: Path,
    open_browser: bool = False,
) -> Path:
    """Render the transcript report to ``output_path``.

    Args:
        segments: Transcript in chronological order
        source_file: Name of the transcribed audio file
        output_path: Destination HTML path
        open_browser: Whether to open the report afterwards

    Returns:
        Path to generated report
    """
    return write_report(
        "transcript.html",
        build_report_data(segments, source_file),
        output_path,
        open_browser=open_browser,
    )
