"""
speakerscribe.transcribe.prompts - Instructions and response schema for the model.
"""

from __future__ import annotations

from typing import Any

SYSTEM_INSTRUCTION = (
    "You are an expert audio transcription service. For each distinct speaker, "
    "assign a label like 'Speaker 1', 'Speaker 2', etc. Provide a precise timestamp "
    "in the format MM:SS for the beginning of each speech segment. Ensure the final "
    "output strictly adheres to the provided JSON schema. If the audio is silent or "
    "contains no discernible speech, return an empty array."
)

USER_PROMPT = "Transcribe the following audio file."

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "speaker": {"type": "string"},
            "timestamp": {"type": "string"},
            "transcript": {"type": "string"},
        },
        "required": ["speaker", "timestamp", "transcript"],
    },
}


def build_messages(audio_data_uri: str) -> list[dict[str, Any]]:
    """Build the chat messages carrying the instruction and the audio."""
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {
            "role": "user",
            "content": [
                {"type": "file", "file": {"file_data": audio_data_uri}},
                {"type": "text", "text": USER_PROMPT},
            ],
        },
    ]
