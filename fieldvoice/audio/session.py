"""Voice-activity-triggered capture session with a pre-roll buffer."""

import asyncio
import logging
from typing import Callable, List, Optional

from ..models.audio import AudioChunk, CaptureResult, CaptureState
from .buffer import PreRollRingBuffer
from .timers import CancellableTimer

logger = logging.getLogger(__name__)


class CaptureSession:
    """Segments a continuous chunk stream into utterances.

    While not capturing, chunks feed the pre-roll ring buffer. Voice activity
    moves the pre-roll into the capture sequence and starts capturing; a
    silence timer finalizes the round. Only one round may be in flight: after
    a round is emitted, new voice activity is ignored until the driver calls
    ``complete_round(round_id)``.

    All methods must be called from the event loop thread.
    """

    def __init__(
        self,
        on_capture: Callable[[CaptureResult], None],
        on_empty: Optional[Callable[[int], None]] = None,
        on_rearm: Optional[Callable[[], None]] = None,
        pre_roll_seconds: float = 5.0,
        chunk_duration_ms: int = 100,
        silence_ms: int = 800,
        restart_delay_ms: int = 200,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """Initialize the capture session.

        Args:
            on_capture: Receives each finished, non-empty capture round
            on_empty: Receives the round id when a round finalized with zero chunks
            on_rearm: Called when the restart delay after a round has elapsed
            pre_roll_seconds: Seconds of audio kept before voice activity
            chunk_duration_ms: Nominal chunk duration, sizes the pre-roll buffer
            silence_ms: Silence needed before a capture is finalized
            restart_delay_ms: Delay between completing a round and re-arming
            loop: Event loop for the timers; defaults to the running loop
        """
        self._on_capture = on_capture
        self._on_empty = on_empty
        self._on_rearm = on_rearm

        self.pre_roll = PreRollRingBuffer(pre_roll_seconds, chunk_duration_ms)
        self._capture: List[AudioChunk] = []
        self._state = CaptureState.IDLE
        self._in_flight_round: Optional[int] = None
        self._round_id = 0

        self.silence_timer = CancellableTimer("silence-finalize", silence_ms,
                                              self.on_silence_timeout, loop)
        self.restart_timer = CancellableTimer("restart-delay", restart_delay_ms,
                                              self._rearm, loop)

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_capturing(self) -> bool:
        return self._state == CaptureState.CAPTURING

    @property
    def in_flight(self) -> bool:
        """True while a finalized round is still awaiting completion."""
        return self._in_flight_round is not None

    @property
    def round_id(self) -> int:
        """Id of the most recently started round; 0 before the first."""
        return self._round_id

    @property
    def in_flight_round(self) -> Optional[int]:
        return self._in_flight_round

    @property
    def capture_length(self) -> int:
        return len(self._capture)

    def arm(self) -> None:
        """Start buffering with empty buffers. Idle -> Buffering."""
        if self._state == CaptureState.CAPTURING:
            logger.warning("arm() called while capturing; ignoring")
            return
        self.silence_timer.cancel()
        self.pre_roll.clear()
        self._capture = []
        self._state = CaptureState.BUFFERING
        logger.info("Capture session armed")

    def on_audio_chunk(self, chunk: AudioChunk) -> None:
        """Route a chunk to the capture sequence or the pre-roll buffer."""
        if self._state == CaptureState.CAPTURING:
            self._capture.append(chunk)
        elif self._state == CaptureState.BUFFERING:
            self.pre_roll.push(chunk)
        else:
            logger.debug(f"Dropping chunk {chunk.sequence_number} in state {self._state.value}")

    def on_voice_activity(self, is_voice_detected: bool) -> None:
        """Handle a voice-activity change from the VAD."""
        if is_voice_detected:
            self.silence_timer.cancel()
            if self._state == CaptureState.BUFFERING:
                self._start_capturing()
            return

        if self._state == CaptureState.CAPTURING:
            self.silence_timer.start()
        else:
            self.silence_timer.cancel()

    def _start_capturing(self) -> None:
        if self.in_flight:
            logger.info(f"Voice detected while round {self._in_flight_round} is in flight; "
                        f"not starting a new round")
            return

        self._round_id += 1
        self._capture = self.pre_roll.drain()
        self._state = CaptureState.CAPTURING
        logger.info(f"[Round {self._round_id}] Voice detected - capturing with "
                    f"{len(self._capture)} pre-roll chunks")

    def on_silence_timeout(self) -> None:
        """Finalize the current capture. Capturing -> Draining -> Buffering."""
        if self._state != CaptureState.CAPTURING:
            return

        self._state = CaptureState.DRAINING
        chunks, self._capture = self._capture, []
        self.pre_roll.clear()
        round_id = self._round_id
        self._in_flight_round = round_id
        self._state = CaptureState.BUFFERING

        if not chunks:
            logger.info(f"[Round {round_id}] Silence detected - no chunks captured")
            if self._on_empty:
                self._on_empty(round_id)
            return

        logger.info(f"[Round {round_id}] Silence detected - emitting {len(chunks)} chunks")
        self._on_capture(CaptureResult(round_id=round_id, chunks=chunks))

    def complete_round(self, round_id: int, rearm: bool = True) -> bool:
        """Mark round ``round_id`` as done and optionally schedule re-arming.

        Completions for any other round (one discarded by ``stop()``) are
        ignored. Returns True if the in-flight round was completed.
        """
        if round_id != self._in_flight_round:
            logger.debug(f"[Round {round_id}] Stale completion ignored "
                         f"(in flight: {self._in_flight_round})")
            return False

        self._in_flight_round = None
        if rearm and self._state != CaptureState.IDLE:
            self.restart_timer.start()
        return True

    def _rearm(self) -> None:
        if self._state == CaptureState.IDLE:
            return
        self.arm()
        if self._on_rearm:
            self._on_rearm()

    def stop(self) -> None:
        """Cancel timers, discard buffers without emitting and go Idle."""
        self.silence_timer.cancel()
        self.restart_timer.cancel()
        discarded = len(self._capture) + len(self.pre_roll)
        self._capture = []
        self.pre_roll.clear()
        self._in_flight_round = None
        self._state = CaptureState.IDLE
        logger.info(f"Capture session stopped ({discarded} chunks discarded)")
