"""Listening loop: capture, transcribe, match and dispatch voice commands."""

import asyncio
import logging
from typing import Optional, Protocol, Set

from pubsub import pub

from ..audio.audio_pub import AudioPublisher
from ..audio.vad import EnergyVAD
from ..audio.wav import WavAssembler
from ..audio.session import CaptureSession
from ..dispatch.registry import DispatchRegistry
from ..config import FieldVoiceConfig
from ..errors import (
    PROCESSING_FAILED,
    CaptureEmpty,
    FieldVoiceError,
    PermissionDenied,
    TranscriptionFailed,
)
from ..matching.matcher import SemanticMatcher
from ..models.audio import AudioChunk, CaptureResult, CaptureState
from ..models.events import PipelineResult, RoundFailed, VoiceActivityEvent
from ..storage.recording_store import RecordingStore
from ..transcription.base import AbstractTranscriptionBackend
from .publisher import PipelinePublisher

logger = logging.getLogger(__name__)

STATUS_IDLE = "Idle"
STATUS_WAITING = "Waiting"
STATUS_SPEAKING = "Speaking"
STATUS_PROCESSING = "Processing"
STATUS_TRANSCRIBING = "Transcribing"
STATUS_RESTARTING = "Restarting"


class AudioSource(Protocol):
    """A microphone-like source that publishes chunks while recording."""

    def check_permission(self) -> None: ...

    def start_recording(self) -> None: ...

    def stop_recording(self) -> None: ...


class VoiceCommandPipeline:
    """Owns the capture session, the matcher's trigger state and the dispatch registry.

    Audio and VAD events arrive on pub/sub topics from the capture thread and
    are handed to the event loop; every piece of mutable state is touched only
    on that loop. One round is processed at a time: the audio source is paused
    while a round is transcribed and re-armed after the restart delay.
    """

    def __init__(
        self,
        audio_source: AudioSource,
        audio_publisher: AudioPublisher,
        transcriber: AbstractTranscriptionBackend,
        matcher: SemanticMatcher,
        recording_store: RecordingStore,
        registry: Optional[DispatchRegistry] = None,
        publisher: Optional[PipelinePublisher] = None,
        page: str = "global",
        pre_roll_seconds: float = 5.0,
        chunk_duration_ms: int = 100,
        silence_ms: int = 800,
        restart_delay_ms: int = 200,
    ):
        """Initialize the pipeline.

        Args:
            audio_source: Source started and stopped around each round
            audio_publisher: Publisher whose topics carry the source's chunks and VAD events
            transcriber: Turns a WAV file into text
            matcher: Semantic matcher holding the trigger state
            recording_store: Writes each round's WAV file
            registry: Dispatch registry; a new one is created if omitted
            publisher: Publisher for results and failures
            page: Page scope of the screen that currently has focus
            pre_roll_seconds: Seconds of audio kept before voice activity
            chunk_duration_ms: Nominal chunk duration
            silence_ms: Silence that ends an utterance
            restart_delay_ms: Delay before re-arming the source after a round
        """
        self.audio_source = audio_source
        self.audio_publisher = audio_publisher
        self.transcriber = transcriber
        self.matcher = matcher
        self.recording_store = recording_store
        self.registry = registry or DispatchRegistry()
        self.publisher = publisher or PipelinePublisher()
        self.page = page

        self._session_args = dict(
            pre_roll_seconds=pre_roll_seconds,
            chunk_duration_ms=chunk_duration_ms,
            silence_ms=silence_ms,
            restart_delay_ms=restart_delay_ms,
        )
        self.session: Optional[CaptureSession] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: Set[asyncio.Task] = set()
        self._subscribed = False

        self.is_listening = False
        self.status = STATUS_IDLE
        self.last_result: Optional[PipelineResult] = None

    @classmethod
    def from_config(cls,
                    config: FieldVoiceConfig,
                    transcriber: AbstractTranscriptionBackend,
                    matcher: SemanticMatcher,
                    registry: Optional[DispatchRegistry] = None,
                    page: str = "global") -> "VoiceCommandPipeline":
        """Build a pipeline reading from the default microphone.

        Args:
            config: Loaded configuration
            transcriber: Initialized transcription backend
            matcher: Matcher whose index has been built
            registry: Dispatch registry shared with the UI
            page: Initial page scope
        """
        from ..audio.capture import AudioCapture

        audio_publisher = AudioPublisher(vad=EnergyVAD(
            threshold=config.get('vad.threshold'),
            energy_floor=config.get('vad.energy_floor'),
        ))
        audio_source = AudioCapture(
            callback=audio_publisher.publish_audio_chunk,
            sample_rate=config.get('audio.sample_rate'),
            chunk_size=config.get('audio.chunk_size'),
            channels=config.get('audio.channels'),
        )
        recording_store = RecordingStore(
            recordings_dir=config.get_recordings_directory(),
            assembler=WavAssembler(
                sample_rate=config.get('audio.sample_rate'),
                channels=config.get('audio.channels'),
                bits_per_sample=config.get('audio.bits_per_sample'),
            ),
            keep_recordings=config.get('storage.keep_recordings'),
        )
        pipeline = cls(
            audio_source=audio_source,
            audio_publisher=audio_publisher,
            transcriber=transcriber,
            matcher=matcher,
            recording_store=recording_store,
            registry=registry,
            page=page,
            pre_roll_seconds=config.get('capture.pre_roll_seconds'),
            chunk_duration_ms=config.get('capture.chunk_duration_ms'),
            silence_ms=config.get('capture.silence_ms'),
            restart_delay_ms=config.get('capture.restart_delay_ms'),
        )
        audio_source.error_callback = pipeline.handle_source_error
        return pipeline

    @property
    def last_recording_path(self) -> Optional[str]:
        return self.recording_store.last_recording_path

    @property
    def active_trigger(self) -> Optional[str]:
        return self.matcher.active_trigger

    @property
    def capture_state(self) -> CaptureState:
        return self.session.state if self.session else CaptureState.IDLE

    def set_page(self, page: str) -> None:
        """Change the page scope used for matching; called on focus change."""
        logger.info(f"Current page: {page}")
        self.page = page

    # ------------------------------------------------------------------
    # Loop control
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start listening.

        Raises:
            PermissionDenied: If the microphone cannot be used; the loop is stopped
        """
        if self.is_listening:
            logger.warning("Listening loop already running")
            return

        # A round left over from a previous run must finish before a new one can start.
        await self.wait_idle()
        self._loop = asyncio.get_running_loop()
        if self.session is None:
            self.session = CaptureSession(
                on_capture=self._on_capture,
                on_empty=self._on_empty_capture,
                on_rearm=self._on_rearm,
                loop=self._loop,
                **self._session_args,
            )
        self._subscribe()
        self.is_listening = True
        logger.info(f"Listening loop started on page {self.page}")

        try:
            self.audio_source.check_permission()
            self._arm()
        except PermissionDenied:
            logger.error("Microphone permission denied; stopping listening loop")
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop listening, discard buffered audio and clear the trigger."""
        was_listening = self.is_listening
        self.is_listening = False
        if self.session is not None:
            self.session.stop()
        if self.audio_publisher.vad is not None:
            self.audio_publisher.vad.reset()
        if was_listening:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self.audio_source.stop_recording)
        self.matcher.clear_trigger()
        self.status = STATUS_IDLE
        logger.info("Listening loop stopped")

    async def wait_idle(self) -> None:
        """Wait until rounds already being processed have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.stop()
        await self.wait_idle()
        self._unsubscribe()

    def _arm(self) -> None:
        self.session.arm()
        self.audio_source.start_recording()
        self.status = STATUS_WAITING

    def _on_rearm(self) -> None:
        if not self.is_listening:
            return
        if self.audio_publisher.vad is not None:
            self.audio_publisher.vad.reset()
        try:
            self.audio_source.start_recording()
        except PermissionDenied as e:
            logger.error(f"Could not re-arm audio source: {e}")
            self._source_failed(e)
            return
        self.status = STATUS_WAITING
        logger.debug("Audio source re-armed")

    def handle_source_error(self, error: Exception) -> None:
        """Report that the audio source died; may be called from the capture thread."""
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._source_failed, error)

    def _source_failed(self, error: Exception) -> None:
        if not self.is_listening:
            return
        if not isinstance(error, PermissionDenied):
            error = PermissionDenied(str(error))
        round_id = self.session.round_id if self.session else 0
        logger.error(f"Audio source failed; stopping listening loop: {error}")
        self.publisher.publish_error(RoundFailed(round_id, error.code, error.message))
        self._spawn(self.stop())

    # ------------------------------------------------------------------
    # Event intake (capture thread -> event loop)
    # ------------------------------------------------------------------

    def _subscribe(self) -> None:
        if self._subscribed:
            return
        pub.subscribe(self._on_chunk_message, self.audio_publisher.chunk_topic)
        pub.subscribe(self._on_vad_message, self.audio_publisher.vad_topic)
        self._subscribed = True

    def _unsubscribe(self) -> None:
        if not self._subscribed:
            return
        pub.unsubscribe(self._on_chunk_message, self.audio_publisher.chunk_topic)
        pub.unsubscribe(self._on_vad_message, self.audio_publisher.vad_topic)
        self._subscribed = False

    def _on_chunk_message(self, chunk: AudioChunk) -> None:
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self.handle_chunk, chunk)

    def _on_vad_message(self, event: VoiceActivityEvent) -> None:
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self.handle_voice_activity, event)

    def handle_chunk(self, chunk: AudioChunk) -> None:
        if self.is_listening and self.session is not None:
            self.session.on_audio_chunk(chunk)

    def handle_voice_activity(self, event: VoiceActivityEvent) -> None:
        if not self.is_listening or self.session is None:
            return
        self.session.on_voice_activity(event.is_voice_detected)
        if self.session.is_capturing:
            self.status = STATUS_SPEAKING if event.is_voice_detected else STATUS_WAITING

    # ------------------------------------------------------------------
    # Round processing
    # ------------------------------------------------------------------

    def _on_capture(self, capture: CaptureResult) -> None:
        self.status = STATUS_PROCESSING
        self.publisher.publish_capture(capture)
        self._spawn(self._process_round(capture))

    def _on_empty_capture(self, round_id: int) -> None:
        error = CaptureEmpty()
        logger.info(f"[Round {round_id}] {error.message}")
        self.publisher.publish_error(RoundFailed(round_id, error.code, error.message))
        self._spawn(self._empty_round(round_id))

    async def _empty_round(self, round_id: int) -> None:
        await self._pause_source()
        await self._finish_round(round_id)

    def _spawn(self, coro) -> None:
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _process_round(self, capture: CaptureResult) -> None:
        round_id = capture.round_id
        await self._pause_source()
        try:
            result = await self.process_capture(capture)
        except FieldVoiceError as e:
            logger.error(f"[Round {round_id}] {e.code}: {e}")
            self.publisher.publish_error(RoundFailed(round_id, e.code, e.message))
        except Exception as e:
            logger.error(f"[Round {round_id}] Processing failed: {e}", exc_info=True)
            self.publisher.publish_error(RoundFailed(round_id, PROCESSING_FAILED, str(e)))
        else:
            self.last_result = result
            self.publisher.publish_result(result)
        finally:
            await self._finish_round(round_id)

    async def _pause_source(self) -> None:
        # Audio is not needed while a round is processed; it is restarted on re-arm.
        if self.is_listening:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self.audio_source.stop_recording)

    async def _finish_round(self, round_id: int) -> None:
        if self.session is None:
            return
        if not self.session.complete_round(round_id, rearm=self.is_listening):
            return
        if self.is_listening:
            self.status = STATUS_RESTARTING
        logger.debug(f"[Round {round_id}] complete")

    async def process_capture(self, capture: CaptureResult) -> PipelineResult:
        """Assemble, transcribe, match and dispatch one capture round.

        Raises:
            WavAssemblyFailed: If the WAV file cannot be produced
            TranscriptionFailed: If the transcriber fails
        """
        loop = asyncio.get_running_loop()
        path = await loop.run_in_executor(
            None, self.recording_store.save, [chunk.data for chunk in capture.chunks])

        self.status = STATUS_TRANSCRIBING
        try:
            text = await self.transcriber.transcribe(path)
        except TranscriptionFailed:
            raise
        except Exception as e:
            raise TranscriptionFailed(str(e)) from e
        text = (text or "").strip()

        match = await self.matcher.match(text, self.page)
        command = match.to_command()
        logger.info(f"[Round {capture.round_id}] Raw: {text!r} | Corrected: "
                    f"{match.corrected_text!r} | Command: {match.command}")

        consumed = False
        if command is not None:
            consumed = self.registry.dispatch(command)
        else:
            logger.info(f"[Round {capture.round_id}] Ignored")

        return PipelineResult(
            round_id=capture.round_id,
            raw_text=text,
            corrected_text=match.corrected_text,
            command=command,
            consumed=consumed,
            recording_path=path,
        )
