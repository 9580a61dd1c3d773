"""Abstract base class for transcription backends."""

from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Turns a WAV file into text."""

    def __init__(self, language: str = "en-US"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    async def transcribe(self, file_path: str) -> str:
        """Transcribe a WAV file.

        Args:
            file_path: Path to a 16-bit PCM WAV file

        Returns:
            The transcript, possibly empty when no speech was recognised

        Raises:
            TranscriptionFailed: If the backend call fails
        """

    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration.

        Returns:
            True if initialization successful, False otherwise
        """
        return True

    def cleanup(self) -> None:
        """Clean up backend resources."""
