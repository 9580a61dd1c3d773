"""Storage for assembled utterance recordings."""

import time
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..audio.wav import WavAssembler

logger = logging.getLogger(__name__)


class RecordingStore:
    """Writes one WAV file per capture round and keeps only the newest few."""

    def __init__(self, recordings_dir: str = "./data/recordings",
                 assembler: Optional[WavAssembler] = None,
                 keep_recordings: int = 5):
        """Initialize the recording store.

        Args:
            recordings_dir: Directory for ``voice_<ms>.wav`` files
            assembler: WAV assembler; a 16 kHz mono 16-bit one by default
            keep_recordings: How many recordings to keep; 0 keeps all
        """
        self.recordings_dir = Path(recordings_dir)
        self.assembler = assembler or WavAssembler()
        self.keep_recordings = keep_recordings
        self.last_recording_path: Optional[str] = None

        self.recordings_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"RecordingStore initialized with directory: {self.recordings_dir}")

    def new_recording_path(self) -> Path:
        path = self.recordings_dir / f"voice_{int(time.time() * 1000)}.wav"
        suffix = 1
        while path.exists():
            path = self.recordings_dir / f"voice_{int(time.time() * 1000)}_{suffix}.wav"
            suffix += 1
        return path

    def save(self, chunks: Sequence[bytes]) -> str:
        """Assemble ``chunks`` into a new WAV file and return its path.

        Raises:
            WavAssemblyFailed: If there are no chunks or the file cannot be written
        """
        path = self.assembler.write(chunks, self.new_recording_path())
        self.last_recording_path = path
        self.prune()
        return path

    def list_recordings(self) -> List[Path]:
        """Recordings sorted oldest first."""
        return sorted(self.recordings_dir.glob("voice_*.wav"), key=lambda p: p.stat().st_mtime)

    def prune(self) -> int:
        """Delete all but the newest ``keep_recordings`` files. Returns the number removed."""
        if self.keep_recordings <= 0:
            return 0
        recordings = self.list_recordings()
        stale = recordings[:-self.keep_recordings]
        removed = 0
        for path in stale:
            if str(path) == self.last_recording_path:
                continue
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Could not remove old recording {path}: {e}")
        if removed:
            logger.debug(f"Pruned {removed} old recordings")
        return removed
