"""Error taxonomy for the voice command pipeline."""

from typing import Optional

CAPTURE_EMPTY = "CAPTURE_EMPTY"
WAV_ASSEMBLY_FAILED = "WAV_ASSEMBLY_FAILED"
TRANSCRIPTION_FAILED = "TRANSCRIPTION_FAILED"
EMBEDDING_NOT_READY = "EMBEDDING_NOT_READY"
PERMISSION_DENIED = "PERMISSION_DENIED"
PROCESSING_FAILED = "PROCESSING_FAILED"

ERROR_MESSAGES = {
    CAPTURE_EMPTY: "No audio captured.",
    WAV_ASSEMBLY_FAILED: "Processing failed.",
    TRANSCRIPTION_FAILED: "Transcription failed.",
    EMBEDDING_NOT_READY: "Command model is still warming up.",
    PERMISSION_DENIED: "Microphone access needed.",
    PROCESSING_FAILED: "Processing failed.",
}


class FieldVoiceError(Exception):
    """Base class for all pipeline errors."""

    code: str = ""

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(detail or self.message)

    @property
    def message(self) -> str:
        """User-facing message for this error."""
        return ERROR_MESSAGES.get(self.code, "Unexpected error.")


class CaptureEmpty(FieldVoiceError):
    """A finalized capture round held zero chunks."""
    code = CAPTURE_EMPTY


class WavAssemblyFailed(FieldVoiceError):
    """WAV assembly got empty input or could not be written."""
    code = WAV_ASSEMBLY_FAILED


class TranscriptionFailed(FieldVoiceError):
    """The transcription collaborator rejected the request."""
    code = TRANSCRIPTION_FAILED


class EmbeddingNotReady(FieldVoiceError):
    """The embedding collaborator is not warmed up yet."""
    code = EMBEDDING_NOT_READY


class PermissionDenied(FieldVoiceError):
    """Microphone access was refused. Fatal to the listening loop."""
    code = PERMISSION_DENIED
