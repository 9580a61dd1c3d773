"""Pre-roll ring buffer that keeps the audio heard just before speech starts."""

import math
import logging
import threading
from collections import deque
from typing import List

from ..models.audio import AudioChunk

logger = logging.getLogger(__name__)


def pre_roll_capacity(pre_roll_seconds: float, chunk_duration_ms: int) -> int:
    """Number of chunks needed to hold ``pre_roll_seconds`` of audio."""
    if chunk_duration_ms <= 0:
        raise ValueError("chunk_duration_ms must be positive")
    if pre_roll_seconds < 0:
        raise ValueError("pre_roll_seconds must not be negative")
    return math.ceil(pre_roll_seconds * 1000 / chunk_duration_ms)


class PreRollRingBuffer:
    """Fixed-capacity FIFO of audio chunks; the oldest chunk is evicted on overflow."""

    def __init__(self, pre_roll_seconds: float = 5.0, chunk_duration_ms: int = 100):
        """Initialize the pre-roll buffer.

        Args:
            pre_roll_seconds: How many seconds of audio to keep before speech
            chunk_duration_ms: Nominal duration of one incoming chunk
        """
        self.pre_roll_seconds = pre_roll_seconds
        self.chunk_duration_ms = chunk_duration_ms
        self.capacity = pre_roll_capacity(pre_roll_seconds, chunk_duration_ms)

        self._chunks: deque = deque()
        self._lock = threading.Lock()
        self.evicted_chunks = 0

        logger.info(f"PreRollRingBuffer initialized: {pre_roll_seconds}s, "
                    f"{self.capacity} chunks of {chunk_duration_ms}ms")

    def push(self, chunk: AudioChunk) -> None:
        """Append a chunk, evicting the oldest one when over capacity."""
        with self._lock:
            self._chunks.append(chunk)
            while len(self._chunks) > self.capacity:
                self._chunks.popleft()
                self.evicted_chunks += 1

    def drain(self) -> List[AudioChunk]:
        """Atomically take all chunks in arrival order and leave the buffer empty."""
        with self._lock:
            chunks = list(self._chunks)
            self._chunks.clear()
        logger.debug(f"Pre-roll drained: {len(chunks)} chunks")
        return chunks

    def snapshot(self) -> List[AudioChunk]:
        """Copy of the current contents, oldest first."""
        with self._lock:
            return list(self._chunks)

    def clear(self) -> None:
        with self._lock:
            self._chunks.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._chunks)
