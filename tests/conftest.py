"""Pytest configuration and fixtures for fieldvoice tests."""

import pytest
import tempfile
import logging
import string
from typing import Dict, List, Optional
from unittest.mock import Mock, patch

import numpy as np
from pubsub import pub

from fieldvoice.errors import EmbeddingNotReady
from fieldvoice.matching.embedding import AbstractEmbeddingBackend
from fieldvoice.models.audio import AudioChunk
from fieldvoice.transcription.base import AbstractTranscriptionBackend


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000
CHUNK_SAMPLES = 1600  # 100 ms at 16 kHz


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O beyond temp files")
    config.addinivalue_line("markers", "integration: tests that wire several components together")


class FakeEmbeddingBackend(AbstractEmbeddingBackend):
    """Deterministic bag-of-words embeddings.

    Each distinct lower-cased word gets its own dimension the first time it is
    seen, so texts sharing no words are orthogonal. ``vectors`` overrides the
    embedding for exact texts.
    """

    def __init__(self, dimensions: int = 1024, ready: bool = True,
                 vectors: Optional[Dict[str, List[float]]] = None):
        self.dimensions = dimensions
        self.ready = ready
        self.vectors = vectors or {}
        self.words: Dict[str, int] = {}
        self.calls: List[str] = []

    @property
    def is_ready(self) -> bool:
        return self.ready

    async def embed(self, text: str) -> np.ndarray:
        if not self.ready:
            raise EmbeddingNotReady("fake backend not ready")
        self.calls.append(text)
        if text in self.vectors:
            return np.asarray(self.vectors[text], dtype=np.float32)

        vector = np.zeros(self.dimensions, dtype=np.float32)
        for token in text.lower().split():
            token = token.strip(string.punctuation)
            if not token:
                continue
            if token not in self.words:
                self.words[token] = len(self.words)
            vector[self.words[token]] += 1.0
        return vector


class FakeTranscriber(AbstractTranscriptionBackend):
    """Returns queued transcripts in order, then the last one again."""

    def __init__(self, *transcripts: str, error: Optional[Exception] = None):
        super().__init__()
        self.transcripts = list(transcripts) or [""]
        self.error = error
        self.files: List[str] = []

    async def transcribe(self, file_path: str) -> str:
        self.files.append(file_path)
        if self.error is not None:
            raise self.error
        if len(self.transcripts) > 1:
            return self.transcripts.pop(0)
        return self.transcripts[0]


class FakeAudioSource:
    """Audio source that only records how it was driven."""

    def __init__(self, permission_error: Optional[Exception] = None,
                 start_error: Optional[Exception] = None):
        self.permission_error = permission_error
        self.start_error = start_error
        self.is_recording = False
        self.starts = 0
        self.stops = 0

    def check_permission(self) -> None:
        if self.permission_error is not None:
            raise self.permission_error

    def start_recording(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.is_recording = True
        self.starts += 1

    def stop_recording(self) -> None:
        if self.is_recording:
            self.stops += 1
        self.is_recording = False


def _pcm(pattern: str, samples: int = CHUNK_SAMPLES, amplitude: float = 0.5) -> bytes:
    if pattern == "sine":
        t = np.linspace(0, samples / SAMPLE_RATE, samples, False)
        wave_data = amplitude * np.sin(2 * np.pi * 440 * t)
    elif pattern == "silence":
        wave_data = np.zeros(samples)
    else:
        raise ValueError(f"Unknown pattern: {pattern}")
    return (wave_data * 32767).astype(np.int16).tobytes()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """100 ms of a 440 Hz sine wave as 16-bit PCM."""
    return _pcm("sine")


@pytest.fixture
def silent_audio_chunk():
    return _pcm("silence")


@pytest.fixture
def make_chunk():
    """Factory for AudioChunk objects with increasing sequence numbers."""
    counter = {"n": 0}

    def factory(pattern: str = "silence", data: Optional[bytes] = None) -> AudioChunk:
        counter["n"] += 1
        return AudioChunk(
            data=data if data is not None else _pcm(pattern),
            timestamp=counter["n"] * 0.1,
            sequence_number=counter["n"],
        )

    return factory


@pytest.fixture
def fake_backend():
    return FakeEmbeddingBackend()


@pytest.fixture
def fake_audio_source():
    return FakeAudioSource()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.read.return_value = b'\x00' * (CHUNK_SAMPLES * 2)  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {"name": "Mock Mic"}

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop pub/sub listeners left behind by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def backend_cls():
    """The fake embedding backend class, for tests that need variants."""
    return FakeEmbeddingBackend


@pytest.fixture
def transcriber_cls():
    return FakeTranscriber
