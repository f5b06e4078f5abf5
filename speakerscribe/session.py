"""
speakerscribe.session - Upload/transcribe session controller.

Tracks one user's progress through file selection, transcription and result
display. Each status carries only the data valid for it, so a session can
never be "success" without a transcript or "loading" without a file.

The controller performs no I/O itself. ``Session.transcribe`` runs a single
client call and feeds the outcome back through ``complete``/``fail``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Literal, Protocol, Union

from pydantic import BaseModel, Field

from speakerscribe.exceptions import EmptyResultError, ScribeError, SessionStateError
from speakerscribe.export.srt import generate_srt, srt_filename
from speakerscribe.models import AudioFile, TranscriptSegment
from speakerscribe.validation import validate_audio_file

logger = logging.getLogger(__name__)

PREPARING_MESSAGE = "Preparing audio file..."
NO_FILE_MESSAGE = "Please select an M4A file first."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred during transcription."


class SessionStatus(str, Enum):
    INITIAL = "initial"
    FILE_SELECTED = "fileSelected"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class InitialState(BaseModel):
    status: Literal[SessionStatus.INITIAL] = SessionStatus.INITIAL


class FileSelectedState(BaseModel):
    status: Literal[SessionStatus.FILE_SELECTED] = SessionStatus.FILE_SELECTED
    file: AudioFile


class LoadingState(BaseModel):
    status: Literal[SessionStatus.LOADING] = SessionStatus.LOADING
    file: AudioFile
    progress_message: str = PREPARING_MESSAGE


class SuccessState(BaseModel):
    status: Literal[SessionStatus.SUCCESS] = SessionStatus.SUCCESS
    file: AudioFile
    transcript: list[TranscriptSegment] = Field(min_length=1)


class ErrorState(BaseModel):
    status: Literal[SessionStatus.ERROR] = SessionStatus.ERROR
    error_message: str
    file: AudioFile | None = None


SessionState = Annotated[
    Union[InitialState, FileSelectedState, LoadingState, SuccessState, ErrorState],
    Field(discriminator="status"),
]


class TranscribeClient(Protocol):
    def transcribe(self, audio: AudioFile, on_progress) -> list[TranscriptSegment]: ...


class Session:
    """State machine for one upload/transcribe session."""

    def __init__(self, max_file_size_mb: int) -> None:
        self.max_file_size_mb = max_file_size_mb
        self.state: SessionState = InitialState()

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def selected_file(self) -> AudioFile | None:
        if isinstance(self.state, (FileSelectedState, LoadingState, SuccessState)):
            return self.state.file
        return None

    @property
    def progress_message(self) -> str:
        if isinstance(self.state, LoadingState):
            return self.state.progress_message
        return ""

    @property
    def transcript(self) -> list[TranscriptSegment] | None:
        if isinstance(self.state, SuccessState):
            return self.state.transcript
        return None

    @property
    def error_message(self) -> str | None:
        if isinstance(self.state, ErrorState):
            return self.state.error_message
        return None

    @property
    def is_busy(self) -> bool:
        return self.status is SessionStatus.LOADING

    def _require_idle(self, action: str) -> None:
        if self.is_busy:
            raise SessionStateError(f"Cannot {action} while a transcription is in progress")

    def select_file(self, audio: AudioFile | None) -> SessionStatus:
        """Select a new file, replacing any previous selection and result.

        ``None`` clears the selection. Invalid or oversized files move the
        session to error with no file held.
        """
        self._require_idle("select a file")

        if audio is None:
            self.state = InitialState()
            return self.status

        try:
            validate_audio_file(audio, self.max_file_size_mb)
        except ScribeError as e:
            logger.debug("Rejected %s: %s", audio.name, e)
            self.state = ErrorState(error_message=str(e))
            return self.status

        self.state = FileSelectedState(file=audio)
        return self.status

    def begin(self) -> AudioFile | None:
        """Enter loading for the selected file.

        Returns:
            The file to transcribe, or None when no file was selected (the
            session moves to error instead)

        Raises:
            SessionStateError: If already loading, or a result or error is
                showing (reset or select a new file first)
        """
        self._require_idle("start a transcription")

        if isinstance(self.state, InitialState):
            self.state = ErrorState(error_message=NO_FILE_MESSAGE)
            return None

        if not isinstance(self.state, FileSelectedState):
            raise SessionStateError(
                f"Cannot start a transcription from '{self.status.value}'; "
                "reset or select a file first"
            )

        self.state = LoadingState(file=self.state.file)
        return self.state.file

    def update_progress(self, message: str) -> None:
        """Record a progress message from the in-flight request."""
        if isinstance(self.state, LoadingState):
            self.state = self.state.model_copy(update={"progress_message": message})

    def complete(self, segments: list[TranscriptSegment] | None) -> SessionStatus:
        """Settle the in-flight request with its result."""
        state = self._loading_state("complete")

        if not segments:
            self.state = ErrorState(
                error_message=EmptyResultError.default_message, file=state.file
            )
        else:
            self.state = SuccessState(file=state.file, transcript=list(segments))
        return self.status

    def fail(self, error: BaseException | str) -> SessionStatus:
        """Settle the in-flight request with a failure."""
        state = self._loading_state("fail")
        message = str(error) or UNKNOWN_ERROR_MESSAGE
        self.state = ErrorState(error_message=message, file=state.file)
        return self.status

    def _loading_state(self, action: str) -> LoadingState:
        if not isinstance(self.state, LoadingState):
            raise SessionStateError(f"Cannot {action} a session in '{self.status.value}'")
        return self.state

    def reset(self) -> None:
        """Return to the initial state, discarding everything."""
        self.state = InitialState()

    def transcribe(self, client: TranscribeClient, on_progress=None) -> SessionStatus:
        """Run one transcription for the selected file.

        Args:
            client: Object with ``transcribe(audio, on_progress)``
            on_progress: Optional callback also receiving each progress message

        Returns:
            The status the session settled in
        """
        audio = self.begin()
        if audio is None:
            return self.status

        if on_progress:
            on_progress(self.progress_message)

        def report(message: str) -> None:
            self.update_progress(message)
            if on_progress:
                on_progress(message)

        try:
            segments = client.transcribe(audio, report)
        except EmptyResultError:
            return self.complete([])
        except ScribeError as e:
            logger.warning("Transcription of %s failed: %s", audio.name, e)
            return self.fail(e)
        except Exception as e:
            logger.exception("Unexpected error while transcribing %s", audio.name)
            return self.fail(e)

        return self.complete(segments)

    def srt_content(self) -> str:
        """SRT export of the current transcript (empty when there is none)."""
        return generate_srt(self.transcript)

    def srt_filename(self) -> str | None:
        audio = self.selected_file
        if audio is None:
            return None
        return srt_filename(audio.name)
