"""Audio-related data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class CaptureState(Enum):
    """State of the capture session."""
    IDLE = "idle"
    BUFFERING = "buffering"    # Not capturing, filling pre-roll
    CAPTURING = "capturing"    # Voice detected
    DRAINING = "draining"      # Silence timer fired, finalizing


@dataclass
class AudioChunk:
    """A block of raw PCM samples (mono, 16-bit, 16 kHz by default)."""
    data: bytes
    timestamp: float  # Unix timestamp when chunk was captured
    sequence_number: int
    sample_rate: int = 16000
    channels: int = 1
    chunk_duration_ms: Optional[int] = None

    def __post_init__(self):
        """Calculate chunk duration if not provided."""
        if self.chunk_duration_ms is None and self.data:
            bytes_per_second = self.sample_rate * self.channels * 2
            duration_seconds = len(self.data) / bytes_per_second
            self.chunk_duration_ms = int(duration_seconds * 1000)


@dataclass
class CaptureResult:
    """Chunks of one finished capture round, in arrival order."""
    round_id: int
    chunks: List[AudioChunk] = field(default_factory=list)


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
