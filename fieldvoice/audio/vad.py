"""Energy-based voice activity detection that reports state changes."""

import logging
from typing import Optional

import numpy as np

from ..models.audio import AudioChunk
from ..models.events import VoiceActivityEvent

logger = logging.getLogger(__name__)


def chunk_level(data: bytes, energy_floor: float) -> float:
    """Normalised RMS level of 16-bit PCM, clipped to [0, 1]."""
    if not data:
        return 0.0
    samples = np.frombuffer(data[:len(data) - len(data) % 2], dtype=np.int16)
    if samples.size == 0:
        return 0.0
    rms = float(np.sqrt(np.mean(samples.astype(np.float64) ** 2)))
    return min(rms / energy_floor, 1.0)


class EnergyVAD:
    """Thresholds chunk energy and emits an event only when the state flips.

    ``threshold`` is compared against the chunk RMS divided by
    ``energy_floor``; a chunk whose RMS reaches ``threshold * energy_floor``
    counts as voice.
    """

    def __init__(self, threshold: float = 0.5, energy_floor: float = 500.0):
        if energy_floor <= 0:
            raise ValueError("energy_floor must be positive")
        self.threshold = threshold
        self.energy_floor = energy_floor
        self._is_voice = False

    @property
    def is_voice(self) -> bool:
        return self._is_voice

    def process(self, chunk: AudioChunk) -> Optional[VoiceActivityEvent]:
        """Return an event if this chunk changes the voice state, else None."""
        level = chunk_level(chunk.data, self.energy_floor)
        is_voice = level >= self.threshold
        if is_voice == self._is_voice:
            return None

        self._is_voice = is_voice
        logger.debug(f"VAD change: voice={is_voice} level={level:.2f} "
                     f"(chunk {chunk.sequence_number})")
        return VoiceActivityEvent(is_voice_detected=is_voice,
                                  timestamp=chunk.timestamp,
                                  level=level)

    def reset(self) -> None:
        self._is_voice = False
