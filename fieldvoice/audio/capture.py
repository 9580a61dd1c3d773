"""Microphone capture that delivers fixed-size PCM chunks to a callback."""

import time
import logging
from datetime import datetime
from threading import Event, Thread
from typing import Callable, Optional

import pyaudio

from ..errors import PermissionDenied
from ..models.audio import AudioChunk, AudioStats

logger = logging.getLogger(__name__)


class AudioCapture:
    """Reads 16-bit PCM from the default input device on a background thread."""

    def __init__(
        self,
        callback: Callable[[AudioChunk], None],
        sample_rate: int = 16000,
        chunk_size: int = 1600,
        channels: int = 1,
        format: int = pyaudio.paInt16,
        error_callback: Optional[Callable[[Exception], None]] = None,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Receives every chunk, called on the capture thread
            sample_rate: Audio sample rate (16kHz for speech models)
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
            error_callback: Called on the capture thread if the stream fails while recording
        """
        self.chunk_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format
        self.error_callback = error_callback

        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        self.start_time: Optional[datetime] = None
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self._stream = None

    def check_permission(self) -> None:
        """Verify that an input device can be used.

        Raises:
            PermissionDenied: If no input device is available or access is refused
        """
        instance = pyaudio.PyAudio()
        try:
            info = instance.get_default_input_device_info()
            logger.debug(f"Default input device: {info.get('name')}")
        except (IOError, OSError) as e:
            raise PermissionDenied(f"No usable input device: {e}") from e
        finally:
            instance.terminate()

    def start_recording(self) -> None:
        """Open the input stream and start reading on a background thread.

        Raises:
            PermissionDenied: If the stream cannot be opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        self.stop_event.clear()
        self._stream = self._open_audio_stream()
        self.start_time = datetime.now()

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.is_recording = True
        self.recording_thread.start()

    def stop_recording(self) -> None:
        """Stop recording and clean up resources."""
        if not self.is_recording:
            logger.debug("No recording in progress")
            return

        logger.info("Stopping audio recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")

    def _open_audio_stream(self):
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except (IOError, OSError) as e:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            raise PermissionDenied(f"Could not open microphone: {e}") from e

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        stream = self._stream
        try:
            while not self.stop_event.is_set():
                data = stream.read(self.chunk_size, exception_on_overflow=False)
                self.total_chunks += 1
                self.chunk_callback(AudioChunk(
                    data=data,
                    timestamp=time.time(),
                    sequence_number=self.total_chunks,
                    sample_rate=self.sample_rate,
                    channels=self.channels,
                ))
        except (IOError, OSError) as e:
            logger.error(f"Audio stream read failed: {e}")
            failure = PermissionDenied(f"Audio stream failed: {e}")
        else:
            failure = None
        finally:
            stream.stop_stream()
            stream.close()
            self._stream = None
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
            self.is_recording = False

        if failure is not None and self.error_callback:
            self.error_callback(failure)

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
        )
