"""
speakerscribe.export.timecode - Timestamp parsing and SRT time formatting.

Transcript timestamps arrive as MM:SS or HH:MM:SS strings from the
transcription service; SRT needs HH:MM:SS,mmm.
"""

from __future__ import annotations

import re

# Plain decimals; exponents and digit separators do not count as numeric
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_timestamp(timestamp: str) -> float:
    """Convert a segment timestamp to seconds.

    Two numeric parts are read as MM:SS, three as HH:MM:SS. Any other shape
    or a non-numeric part yields 0.

    Args:
        timestamp: Timestamp string from a transcript segment

    Returns:
        Time in seconds
    """
    parts = [part.strip() for part in str(timestamp).split(":")]
    if len(parts) not in (2, 3) or not all(_NUMBER.fullmatch(part) for part in parts):
        return 0

    values = [float(part) for part in parts]
    if len(values) == 3:
        hours, minutes, seconds = values
        total = hours * 3600 + minutes * 60 + seconds
    else:
        minutes, seconds = values
        total = minutes * 60 + seconds

    if total == int(total):
        return int(total)
    return total


def format_srt_time(total_seconds: float) -> str:
    """Format seconds as an SRT timestamp.

    Args:
        total_seconds: Time in seconds (non-negative)

    Returns:
        Timestamp string in HH:MM:SS,mmm format
    """
    total_ms = round(max(total_seconds, 0) * 1000)
    ms = total_ms % 1000
    total_whole = total_ms // 1000
    ss = total_whole % 60
    mm = (total_whole // 60) % 60
    hh = total_whole // 3600

    return f"{hh:02d}:{mm:02d}:{ss:02d},{ms:03d}"
