"""
speakerscribe.transcribe.parsing - Model reply parsing with validation.

Handles parsing model replies into transcript segments with error recovery.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from speakerscribe.exceptions import TranscriptionError
from speakerscribe.models import TranscriptSegment


def extract_json_from_response(response: str) -> str:
    """Extract the JSON array (or object) from a model reply.

    Raises:
        TranscriptionError: If no JSON found
    """
    text = response.strip()

    # Remove markdown code blocks
    if "```" in text:
        text = re.sub(r"```json\s*", "", text)
        text = re.sub(r"```\s*", "", text)
        text = text.strip()

    array_match = re.search(r"\[[\s\S]*\]", text)
    object_match = re.search(r"\{[\s\S]*\}", text)

    if array_match and (not object_match or array_match.start() < object_match.start()):
        return array_match.group(0)
    if object_match:
        return object_match.group(0)

    raise TranscriptionError("No JSON found in transcription response")


def repair_json(text: str) -> str:
    """Remove trailing commas before } or ]."""
    return re.sub(r",(\s*[}\]])", r"\1", text)


def parse_reply_json(response: str) -> Any:
    """Parse JSON from a model reply with error recovery.

    Handles markdown code fences, trailing commas and text before/after
    the JSON.

    Raises:
        TranscriptionError: If parsing fails
    """
    text = extract_json_from_response(response)

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    try:
        return json.loads(repair_json(text))
    except json.JSONDecodeError as e:
        raise TranscriptionError(f"Failed to parse transcription JSON: {e}") from e


def parse_segments(response: str) -> list[TranscriptSegment]:
    """Parse a model reply into ordered transcript segments.

    An object wrapping the array under ``segments`` or ``transcript`` is
    unwrapped. Items missing required fields are rejected.

    Raises:
        TranscriptionError: If the reply is not a valid segment array
    """
    data = parse_reply_json(response)

    if isinstance(data, dict):
        for key in ("segments", "transcript"):
            if isinstance(data.get(key), list):
                data = data[key]
                break

    if not isinstance(data, list):
        raise TranscriptionError("Transcription response is not a JSON array")

    try:
        return [TranscriptSegment.model_validate(item) for item in data]
    except ValidationError as e:
        raise TranscriptionError(f"Transcription response has invalid segments: {e}") from e
