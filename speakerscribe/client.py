"""
speakerscribe.client - Upload/transcribe client for the transcription proxy.

Sends an audio file to the proxy, either inline as multipart form data or
staged through blob storage (signed PUT, then a locator), and turns the
proxy's reply into segments or a typed error. One attempt per call.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import requests

from speakerscribe.config import ACCEPTED_MIME_TYPES, ScribeConfig
from speakerscribe.exceptions import (
    EmptyResultError,
    TranscriptionServiceError,
    UploadTransportError,
)
from speakerscribe.models import (
    MOCK_TRANSCRIPT,
    AudioFile,
    TranscriptSegment,
    segments_from_json,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

UPLOADING_MESSAGE = "Uploading audio file securely..."
PROCESSING_MESSAGE = "Processing transcription..."


def extract_error_message(response: requests.Response) -> str:
    """Pick the most specific failure message from a proxy response.

    Prefers a ``details`` field, then ``error``, then the HTTP status.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("details", "error"):
            value = body.get(key)
            if value:
                return str(value)

    return f"Request failed with status {response.status_code}"


def parse_transcription_response(response: requests.Response) -> list[TranscriptSegment]:
    """Validate a proxy response into segments.

    Raises:
        TranscriptionServiceError: On non-success status, an error body, or
            a body that is not a segment array
        EmptyResultError: On a successful but empty segment array
    """
    if not response.ok:
        raise TranscriptionServiceError(
            extract_error_message(response), status_code=response.status_code
        )

    try:
        body = response.json()
    except ValueError as e:
        raise TranscriptionServiceError(
            "Transcription service returned invalid JSON", status_code=response.status_code
        ) from e

    if isinstance(body, dict) and (body.get("error") or body.get("details")):
        raise TranscriptionServiceError(
            extract_error_message(response), status_code=response.status_code
        )

    try:
        segments = segments_from_json(body)
    except ValueError as e:
        raise TranscriptionServiceError(
            f"Unexpected transcription response: {e}", status_code=response.status_code
        ) from e

    if not segments:
        raise EmptyResultError()

    return segments


class HttpTranscribeClient:
    """Client for the transcription proxy's HTTP API."""

    def __init__(
        self,
        server_url: str,
        transport: str = "inline",
        timeout: float = 300.0,
        session: requests.Session | None = None,
    ) -> None:
        if transport not in ("inline", "staged"):
            raise ValueError(f"Unknown transport: {transport}")
        self.server_url = server_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout
        self.http = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.server_url}{path}"

    def transcribe(
        self,
        audio: AudioFile,
        on_progress: ProgressCallback | None = None,
    ) -> list[TranscriptSegment]:
        """Upload and transcribe an audio file.

        Args:
            audio: File handle; bytes are read here for transfer
            on_progress: Callback receiving progress messages in order

        Returns:
            Segments in the order the service returned them

        Raises:
            UploadTransportError: If the bytes could not be transferred
            TranscriptionServiceError: If the proxy reported a failure
            EmptyResultError: If no speech was found
        """
        report = on_progress or (lambda message: None)

        report(UPLOADING_MESSAGE)
        if self.transport == "staged":
            blob_url = self._stage_upload(audio)
            logger.debug("Staged %s at %s", audio.name, blob_url)
            response = self._post_transcribe(json={"blobUrl": blob_url})
        else:
            response = self._send_inline(audio)

        report(PROCESSING_MESSAGE)
        segments = parse_transcription_response(response)
        logger.info("Received %d segments for %s", len(segments), audio.name)
        return segments

    def _read(self, audio: AudioFile) -> bytes:
        try:
            return audio.read_bytes()
        except OSError as e:
            raise UploadTransportError(f"Could not read {audio.name}: {e}") from e

    def _send_inline(self, audio: AudioFile) -> requests.Response:
        content_type = audio.content_type or "application/octet-stream"
        files = {"file": (audio.name, self._read(audio), content_type)}
        try:
            return self.http.post(
                self._url("/api/transcribe"), files=files, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise UploadTransportError(f"Failed to upload {audio.name}: {e}") from e

    def _post_transcribe(self, json: dict[str, Any]) -> requests.Response:
        try:
            return self.http.post(self._url("/api/transcribe"), json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise TranscriptionServiceError(f"Transcription request failed: {e}") from e

    def _stage_upload(self, audio: AudioFile) -> str:
        """Obtain a signed locator, PUT the bytes, return the read URL."""
        content_type = audio.content_type
        if content_type not in ACCEPTED_MIME_TYPES:
            content_type = "audio/mp4"
        try:
            ticket = self.http.post(
                self._url("/api/upload-url"),
                json={"pathname": audio.name, "contentType": content_type},
                timeout=self.timeout,
            )
            if not ticket.ok:
                raise UploadTransportError(
                    f"Could not obtain an upload URL: {extract_error_message(ticket)}"
                )
            target = ticket.json()

            put = self.http.put(
                target["uploadUrl"],
                data=self._read(audio),
                headers={"Content-Type": content_type},
                timeout=self.timeout,
            )
            if not put.ok:
                raise UploadTransportError(f"Upload failed: {extract_error_message(put)}")
            blob_url = target["blobUrl"]
        except requests.RequestException as e:
            raise UploadTransportError(f"Failed to upload {audio.name}: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise UploadTransportError(f"Malformed upload URL response: {e!r}") from e

        if not isinstance(blob_url, str) or not blob_url:
            raise UploadTransportError("Malformed upload URL response: no blob URL")
        return blob_url


class MockTranscribeClient:
    """Offline stand-in returning a fixed transcript.

    Emits the same progress sequence as the HTTP client so the session flow
    can be previewed without a server or API key.
    """

    def __init__(
        self,
        segments: list[TranscriptSegment] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.segments = MOCK_TRANSCRIPT if segments is None else segments
        self.delay = delay

    def transcribe(
        self,
        audio: AudioFile,
        on_progress: ProgressCallback | None = None,
    ) -> list[TranscriptSegment]:
        report = on_progress or (lambda message: None)
        logger.warning("Mock mode: returning a simulated transcript for %s", audio.name)

        report(f"{UPLOADING_MESSAGE} (Mock Mode)")
        time.sleep(self.delay)
        report(f"{PROCESSING_MESSAGE} (Mock Mode)")
        time.sleep(self.delay)

        if not self.segments:
            raise EmptyResultError()
        return list(self.segments)


def create_client_from_config(config: ScribeConfig) -> HttpTranscribeClient | MockTranscribeClient:
    """Create the transcribe client a configuration asks for."""
    if config.mock_mode:
        return MockTranscribeClient()
    return HttpTranscribeClient(
        server_url=config.server_url,
        transport=config.transport,
        timeout=config.request_timeout,
    )
