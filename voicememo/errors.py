"""Error types raised by the recorder, the transcription client and the server."""

from typing import Optional


class VoiceMemoError(Exception):
    """Base class for all recoverable voicememo errors."""

    default_message = "Something went wrong, please try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class EnvironmentUnsupported(VoiceMemoError):
    """No audio capture API is available on this machine."""

    default_message = "Audio recording is not supported in this environment (no input device)."


class PermissionDenied(VoiceMemoError):
    """The microphone could not be opened because access was refused."""

    default_message = "Microphone access was denied, please check your system settings."


class DeviceError(VoiceMemoError):
    """The microphone failed to open or broke while recording."""

    default_message = "Failed to access the microphone or recording failed, please check your device."


class EmptyRecording(VoiceMemoError):
    default_message = "No audio captured, please try again."


class NoRecording(VoiceMemoError):
    default_message = "Please record something first, then transcribe it."


class TranscriptionRequestFailed(VoiceMemoError):
    """The transcription endpoint could not be reached or answered non-2xx."""

    default_message = "Transcription failed, please try again later."


class TranscriptionExecutableError(VoiceMemoError):
    """The external speech-to-text executable exited with an error."""

    default_message = "Transcription failed, please try again later."

    def __init__(self, message: Optional[str] = None, returncode: Optional[int] = None,
                 stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
