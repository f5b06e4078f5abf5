"""Tests for speakerscribe.session module."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from pydantic import TypeAdapter, ValidationError

from speakerscribe.client import HttpTranscribeClient
from speakerscribe.exceptions import (
    EmptyResultError,
    SessionStateError,
    TranscriptionServiceError,
    UploadTransportError,
)
from speakerscribe.models import AudioFile, TranscriptSegment
from speakerscribe.session import (
    NO_FILE_MESSAGE,
    PREPARING_MESSAGE,
    ErrorState,
    Session,
    SessionState,
    SessionStatus,
    SuccessState,
)


def _loading_session(audio_file: AudioFile) -> Session:
    session = Session(max_file_size_mb=1)
    session.select_file(audio_file)
    session.begin()
    return session


class StubClient:
    """Client replaying fixed progress messages, then a result or error."""

    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[AudioFile] = []

    def transcribe(self, audio, on_progress):
        self.calls.append(audio)
        on_progress("Uploading audio file securely...")
        on_progress("Processing transcription...")
        if self.error is not None:
            raise self.error
        return self.result


class TestSelectFile:
    def test_starts_initial(self) -> None:
        session = Session(max_file_size_mb=1)
        assert session.status is SessionStatus.INITIAL
        assert session.selected_file is None

    def test_valid_file_is_selected(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        assert session.select_file(audio_file) is SessionStatus.FILE_SELECTED
        assert session.selected_file == audio_file
        assert session.error_message is None

    def test_wrong_type_goes_to_error(self) -> None:
        session = Session(max_file_size_mb=1)
        wav = AudioFile(name="notes.wav", size=10, content_type="audio/wav")

        assert session.select_file(wav) is SessionStatus.ERROR
        assert session.error_message == "Invalid file type. Please select an M4A audio file."
        assert session.selected_file is None

    def test_oversized_file_goes_to_error(self) -> None:
        session = Session(max_file_size_mb=1)
        big = AudioFile(name="long.m4a", size=2 * 1024 * 1024, content_type="audio/mp4")

        session.select_file(big)

        assert session.error_message == "File is too large. The maximum allowed size is 1MB."

    def test_oversized_wrong_type_reports_size(self) -> None:
        session = Session(max_file_size_mb=1)
        big = AudioFile(name="long.wav", size=2 * 1024 * 1024, content_type="audio/wav")

        session.select_file(big)

        assert "too large" in session.error_message

    def test_extension_accepted_without_declared_type(self) -> None:
        session = Session(max_file_size_mb=1)
        audio = AudioFile(name="memo.M4A", size=10)
        assert session.select_file(audio) is SessionStatus.FILE_SELECTED

    def test_none_returns_to_initial(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)

        assert session.select_file(None) is SessionStatus.INITIAL

    def test_selection_replaces_previous_result(
        self, audio_file: AudioFile, sample_segments: list[TranscriptSegment]
    ) -> None:
        session = _loading_session(audio_file)
        session.complete(sample_segments)

        session.select_file(audio_file)

        assert session.status is SessionStatus.FILE_SELECTED
        assert session.transcript is None

    def test_selection_from_error(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        session.begin()
        assert session.status is SessionStatus.ERROR

        assert session.select_file(audio_file) is SessionStatus.FILE_SELECTED

    def test_rejected_while_loading(self, audio_file: AudioFile) -> None:
        session = _loading_session(audio_file)

        with pytest.raises(SessionStateError):
            session.select_file(audio_file)
        assert session.status is SessionStatus.LOADING


class TestBegin:
    def test_without_file_goes_to_error(self) -> None:
        session = Session(max_file_size_mb=1)

        assert session.begin() is None
        assert session.status is SessionStatus.ERROR
        assert session.error_message == NO_FILE_MESSAGE

    def test_enters_loading_with_preparing_message(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)

        assert session.begin() == audio_file
        assert session.status is SessionStatus.LOADING
        assert session.progress_message == PREPARING_MESSAGE
        assert session.is_busy

    def test_second_begin_rejected(self, audio_file: AudioFile) -> None:
        session = _loading_session(audio_file)

        with pytest.raises(SessionStateError):
            session.begin()

    def test_retry_from_error_requires_new_selection(self, audio_file: AudioFile) -> None:
        session = _loading_session(audio_file)
        session.fail("boom")

        with pytest.raises(SessionStateError):
            session.begin()


class TestSettle:
    def test_progress_updates_while_loading(self, audio_file: AudioFile) -> None:
        session = _loading_session(audio_file)
        session.update_progress("Processing transcription...")
        assert session.progress_message == "Processing transcription..."

    def test_progress_ignored_when_idle(self) -> None:
        session = Session(max_file_size_mb=1)
        session.update_progress("Processing transcription...")
        assert session.status is SessionStatus.INITIAL
        assert session.progress_message == ""

    def test_complete_with_segments(
        self, audio_file: AudioFile, sample_segments: list[TranscriptSegment]
    ) -> None:
        session = _loading_session(audio_file)

        assert session.complete(sample_segments) is SessionStatus.SUCCESS
        assert session.transcript == sample_segments
        assert session.selected_file == audio_file

    def test_complete_empty_is_error(self, audio_file: AudioFile) -> None:
        session = _loading_session(audio_file)

        assert session.complete([]) is SessionStatus.ERROR
        assert session.error_message == EmptyResultError.default_message

    def test_fail_records_message(self, audio_file: AudioFile) -> None:
        session = _loading_session(audio_file)
        session.fail(TranscriptionServiceError("quota exceeded", status_code=500))
        assert session.error_message == "quota exceeded"

    def test_fail_without_message(self, audio_file: AudioFile) -> None:
        session = _loading_session(audio_file)
        session.fail("")
        assert session.error_message == "An unknown error occurred during transcription."

    def test_complete_outside_loading_rejected(
        self, sample_segments: list[TranscriptSegment]
    ) -> None:
        session = Session(max_file_size_mb=1)
        with pytest.raises(SessionStateError):
            session.complete(sample_segments)

    def test_fail_outside_loading_rejected(self) -> None:
        session = Session(max_file_size_mb=1)
        with pytest.raises(SessionStateError):
            session.fail("boom")


class TestReset:
    def test_reset_from_every_state(
        self, audio_file: AudioFile, sample_segments: list[TranscriptSegment]
    ) -> None:
        sessions = [Session(max_file_size_mb=1) for _ in range(5)]
        sessions[1].select_file(audio_file)
        sessions[2] = _loading_session(audio_file)
        sessions[3] = _loading_session(audio_file)
        sessions[3].complete(sample_segments)
        sessions[4].begin()

        for session in sessions:
            session.reset()
            assert session.status is SessionStatus.INITIAL
            assert session.selected_file is None
            assert session.transcript is None
            assert session.error_message is None


class TestTranscribe:
    def test_success_flow(
        self, audio_file: AudioFile, sample_segments: list[TranscriptSegment]
    ) -> None:
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)
        client = StubClient(result=sample_segments)
        on_progress = MagicMock()

        status = session.transcribe(client, on_progress=on_progress)

        assert status is SessionStatus.SUCCESS
        assert client.calls == [audio_file]
        assert [c.args[0] for c in on_progress.call_args_list] == [
            "Preparing audio file...",
            "Uploading audio file securely...",
            "Processing transcription...",
        ]

    def test_empty_result_is_silent_audio_error(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)

        session.transcribe(StubClient(error=EmptyResultError()))

        assert session.status is SessionStatus.ERROR
        assert "silent or unclear" in session.error_message

    def test_service_error_message_surfaces(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)

        session.transcribe(StubClient(error=TranscriptionServiceError("y", status_code=500)))

        assert session.error_message == "y"

    def test_transport_error(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)

        session.transcribe(StubClient(error=UploadTransportError("connection refused")))

        assert session.status is SessionStatus.ERROR
        assert session.error_message == "connection refused"

    def test_unexpected_error_settles_in_error(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)

        session.transcribe(StubClient(error=RuntimeError("socket closed")))

        assert session.status is SessionStatus.ERROR
        assert session.error_message == "socket closed"
        assert session.select_file(audio_file) is SessionStatus.FILE_SELECTED

    def test_unexpected_error_without_message(self, audio_file: AudioFile) -> None:
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)

        session.transcribe(StubClient(error=KeyError()))

        assert session.error_message == "An unknown error occurred during transcription."

    def test_malformed_staged_ticket_settles_in_error(self, audio_file: AudioFile) -> None:
        http = MagicMock()
        http.post.return_value = MagicMock(ok=True, status_code=200)
        http.post.return_value.json.return_value = {"uploadUrl": "http://proxy/api/blobs/a"}
        http.put.return_value = MagicMock(ok=True, status_code=200)
        client = HttpTranscribeClient("http://proxy", transport="staged", session=http)
        session = Session(max_file_size_mb=1)
        session.select_file(audio_file)

        assert session.transcribe(client) is SessionStatus.ERROR
        assert "Malformed upload URL response" in session.error_message

    def test_without_file_skips_client(self) -> None:
        session = Session(max_file_size_mb=1)
        client = StubClient(result=[])

        assert session.transcribe(client) is SessionStatus.ERROR
        assert client.calls == []


class TestSrtViews:
    def test_srt_empty_without_transcript(self) -> None:
        session = Session(max_file_size_mb=1)
        assert session.srt_content() == ""
        assert session.srt_filename() is None

    def test_srt_after_success(
        self, audio_file: AudioFile, sample_segments: list[TranscriptSegment]
    ) -> None:
        session = _loading_session(audio_file)
        session.complete(sample_segments)

        assert session.srt_content().startswith("1\n00:00:02,000 --> 00:00:06,000\n")
        assert session.srt_filename() == "interview.srt"


class TestStateModels:
    def test_success_requires_transcript(self, audio_file: AudioFile) -> None:
        with pytest.raises(ValidationError):
            SuccessState(file=audio_file, transcript=[])

    def test_discriminated_by_status(self) -> None:
        adapter = TypeAdapter(SessionState)
        state = adapter.validate_python({"status": "error", "error_message": "x"})
        assert isinstance(state, ErrorState)
        assert state.file is None
