"""Google Speech-to-Text transcription backend."""

import asyncio
import time
import logging
from pathlib import Path
from typing import Optional

from google.api_core import exceptions as gax_exceptions
from google.cloud import speech
from google.oauth2 import service_account

from ..errors import TranscriptionFailed
from .base import AbstractTranscriptionBackend

logger = logging.getLogger(__name__)


class GoogleSpeechBackend(AbstractTranscriptionBackend):
    """Google Speech-to-Text API backend for short command utterances."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 language: str = "en-US",
                 timeout_seconds: float = 5.0):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            sample_rate: Sample rate of the WAV files to transcribe
            language: Language code (e.g., 'en-US', 'en-IN')
            timeout_seconds: Per-request timeout
        """
        super().__init__(language)
        if not credentials_path:
            raise ValueError("Google credentials path is required - cannot initialize without credentials")
        self.credentials_path = credentials_path
        self.timeout_seconds = timeout_seconds
        self.client: Optional[speech.SpeechClient] = None
        self.service_name = "Google Speech-to-Text"
        self.config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=sample_rate,
            language_code=self.language,
            enable_automatic_punctuation=False,
            model="latest_short",
        )

    def initialize(self) -> bool:
        """Initialize Google Speech client from the service account file."""
        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
        self.client = speech.SpeechClient(credentials=credentials)
        logger.info(f"Google Speech-to-Text ready (project: {credentials.project_id})")
        return True

    async def transcribe(self, file_path: str) -> str:
        if self.client is None:
            raise TranscriptionFailed("Google Speech backend is not initialized")

        try:
            content = Path(file_path).read_bytes()
        except OSError as e:
            raise TranscriptionFailed(f"Cannot read {file_path}: {e}") from e

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._recognize, file_path, content)

    def _recognize(self, file_path: str, content: bytes) -> str:
        start_time = time.time()
        audio = speech.RecognitionAudio(content=content)
        try:
            response = self.client.recognize(config=self.config, audio=audio,
                                             timeout=self.timeout_seconds)
        except gax_exceptions.DeadlineExceeded as e:
            logger.error(f"Google STT recognize deadline exceeded for {file_path}")
            raise TranscriptionFailed(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Google STT API call error for {file_path}: {e}")
            raise TranscriptionFailed(f"Google Speech API error: {e}") from e

        processing_time = time.time() - start_time
        if not response.results:
            logger.debug(f"No speech detected in {file_path} ({processing_time:.3f}s)")
            return ""

        alternative = response.results[0].alternatives[0]
        logger.debug(f"Transcript={alternative.transcript!r} "
                     f"(confidence: {alternative.confidence:.2f}, "
                     f"processing_time: {processing_time:.3f}s)")
        return alternative.transcript
