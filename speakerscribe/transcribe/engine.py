"""
speakerscribe.transcribe.engine - Transcription through litellm.

Wraps a single multimodal completion call: the audio travels inline as a
base64 data URI and the model answers with a JSON array of segments.
"""

from __future__ import annotations

import base64
import logging
import time
from typing import Any

from speakerscribe.exceptions import TranscriptionError
from speakerscribe.models import MOCK_TRANSCRIPT, TranscriptSegment
from speakerscribe.transcribe.parsing import parse_segments
from speakerscribe.transcribe.prompts import RESPONSE_SCHEMA, build_messages

logger = logging.getLogger(__name__)


def audio_data_uri(audio: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(audio).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class TranscriptionEngine:
    """Speaker-labeled transcription via a hosted model."""

    def __init__(
        self,
        model: str = "gemini/gemini-2.5-flash",
        api_key: str | None = None,
        timeout: float = 300.0,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def complete(self, messages: list[dict[str, Any]]) -> str:
        """Send messages to the model and return the reply text.

        One attempt only; any failure is reported as TranscriptionError.
        """
        try:
            import litellm
        except ImportError as e:
            raise TranscriptionError(
                "litellm not installed. Install with: pip install litellm"
            ) from e

        litellm.telemetry = False

        try:
            response = litellm.completion(
                model=self.model,
                messages=messages,
                api_key=self.api_key,
                timeout=self.timeout,
                response_format={"type": "json_object", "response_schema": RESPONSE_SCHEMA},
            )
        except Exception as e:
            raise TranscriptionError(f"Transcription request failed: {e}") from e

        usage = getattr(response, "usage", None)
        if usage:
            self._token_usage["prompt_tokens"] += getattr(usage, "prompt_tokens", 0) or 0
            self._token_usage["completion_tokens"] += getattr(usage, "completion_tokens", 0) or 0
            self._token_usage["total_tokens"] += getattr(usage, "total_tokens", 0) or 0

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise TranscriptionError("Received an empty response from the transcription service.")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None) if message is not None else None
        if not content or not content.strip():
            raise TranscriptionError("Received an empty response from the transcription service.")

        return content

    def transcribe(self, audio: bytes, mime_type: str) -> list[TranscriptSegment]:
        """Transcribe audio bytes into speaker-labeled segments.

        Args:
            audio: Raw audio bytes
            mime_type: Declared media type sent alongside the bytes

        Returns:
            Segments in the order the model produced them (possibly empty
            when the audio has no speech)

        Raises:
            TranscriptionError: If the call fails or the reply is unusable
        """
        logger.info(
            "Sending %d bytes (%s) to %s for transcription", len(audio), mime_type, self.model
        )
        started = time.monotonic()

        reply = self.complete(build_messages(audio_data_uri(audio, mime_type)))
        segments = parse_segments(reply)

        usage = self.get_token_usage()
        logger.info(
            "Transcription successful. Found %d segments in %.1fs (tokens so far: %d in, %d out)",
            len(segments),
            time.monotonic() - started,
            usage["prompt_tokens"],
            usage["completion_tokens"],
        )
        return segments

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage."""
        return self._token_usage.copy()


class MockTranscriptionEngine:
    """Engine returning a fixed transcript, for mock mode."""

    def __init__(self, segments: list[TranscriptSegment] | None = None) -> None:
        self.segments = MOCK_TRANSCRIPT if segments is None else segments

    def transcribe(self, audio: bytes, mime_type: str) -> list[TranscriptSegment]:
        logger.warning("Mock mode: returning a simulated transcript (%d bytes ignored)", len(audio))
        return list(self.segments)


def create_engine_from_config(config: Any) -> TranscriptionEngine | MockTranscriptionEngine:
    """Create the transcription engine for a ScribeConfig."""
    if config.mock_mode:
        return MockTranscriptionEngine()
    return TranscriptionEngine(
        model=config.llm_model,
        api_key=config.api_key,
        timeout=config.request_timeout,
    )
