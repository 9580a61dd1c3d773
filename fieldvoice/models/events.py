"""Event models published on the pipeline's pub/sub topics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .commands import Command


@dataclass
class VoiceActivityEvent:
    """Voice activity changed for the audio stream."""
    is_voice_detected: bool
    timestamp: float
    level: float = 0.0  # Normalised activity level that produced the change


@dataclass
class PipelineResult:
    """Outcome of one transcribed utterance."""
    round_id: int
    raw_text: str
    corrected_text: str
    command: Optional[Command]
    consumed: bool = False
    recording_path: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def ignored(self) -> bool:
        return self.command is None


@dataclass
class RoundFailed:
    """A capture round was aborted."""
    round_id: int
    code: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
