"""Unit tests for AudioCapture class."""

import time

import pytest
from unittest.mock import Mock, patch

from fieldvoice.audio.capture import AudioCapture
from fieldvoice.errors import PermissionDenied
from fieldvoice.models.audio import AudioChunk


@pytest.mark.unit
class TestAudioCapture:
    """Test cases for AudioCapture class."""

    def test_initialization(self):
        """Test AudioCapture initialization with default parameters."""
        capture = AudioCapture(callback=Mock())

        assert capture.sample_rate == 16000
        assert capture.chunk_size == 1600
        assert capture.channels == 1
        assert capture.is_recording is False
        assert capture.total_chunks == 0

    def test_check_permission(self, mock_pyaudio):
        capture = AudioCapture(callback=Mock())
        capture.check_permission()
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_check_permission_denied(self, mock_pyaudio):
        mock_pyaudio['instance'].get_default_input_device_info.side_effect = IOError("no device")
        capture = AudioCapture(callback=Mock())

        with pytest.raises(PermissionDenied):
            capture.check_permission()
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_start_recording(self, mock_pyaudio):
        """Test starting audio recording."""
        capture = AudioCapture(callback=Mock())

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()

            assert capture.is_recording is True
            assert capture.start_time is not None
            assert capture.recording_thread is not None
            assert capture.recording_thread.daemon is True
            capture.recording_thread.join(timeout=1.0)
            mock_record.assert_called_once()

    def test_start_recording_open_failure(self, mock_pyaudio):
        mock_pyaudio['instance'].open.side_effect = OSError("busy")
        capture = AudioCapture(callback=Mock())

        with pytest.raises(PermissionDenied):
            capture.start_recording()
        assert capture.is_recording is False
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_start_recording_already_recording(self, mock_pyaudio):
        """Test starting recording when already recording."""
        capture = AudioCapture(callback=Mock())
        capture.is_recording = True

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()
            mock_record.assert_not_called()

    def test_chunks_delivered_to_callback(self, mock_pyaudio):
        received = []
        capture = AudioCapture(callback=received.append)

        capture.start_recording()
        time.sleep(0.05)
        capture.stop_recording()

        assert capture.is_recording is False
        assert capture.stop_event.is_set()
        assert len(received) > 0
        assert all(isinstance(chunk, AudioChunk) for chunk in received)
        assert [c.sequence_number for c in received[:3]] == list(range(1, min(3, len(received)) + 1))
        mock_pyaudio['stream'].stop_stream.assert_called_once()
        mock_pyaudio['stream'].close.assert_called_once()

    def test_restart_after_stop(self, mock_pyaudio):
        capture = AudioCapture(callback=Mock())

        capture.start_recording()
        capture.stop_recording()
        capture.start_recording()
        assert capture.is_recording is True
        capture.stop_recording()

        assert mock_pyaudio['instance'].open.call_count == 2

    def test_stop_when_not_recording(self):
        capture = AudioCapture(callback=Mock())
        capture.stop_recording()
        assert capture.is_recording is False

    def test_recording_stats(self, mock_pyaudio):
        capture = AudioCapture(callback=Mock())
        capture.start_recording()
        time.sleep(0.02)
        capture.stop_recording()

        stats = capture.get_recording_stats()

        assert stats.is_recording is False
        assert stats.sample_rate == 16000
        assert stats.chunk_size == 1600
        assert stats.total_chunks == capture.total_chunks
        assert stats.duration_seconds > 0

    def test_stream_failure_resets_recording_and_reports(self, mock_pyaudio):
        errors = []
        mock_pyaudio['stream'].read.side_effect = OSError("Input overflowed")
        capture = AudioCapture(callback=Mock(), error_callback=errors.append)

        capture.start_recording()
        capture.recording_thread.join(timeout=1.0)

        assert capture.is_recording is False
        assert len(errors) == 1
        assert isinstance(errors[0], PermissionDenied)
        mock_pyaudio['stream'].close.assert_called_once()

        mock_pyaudio['stream'].read.side_effect = None
        capture.start_recording()
        assert capture.is_recording is True
        capture.stop_recording()
        assert mock_pyaudio['instance'].open.call_count == 2
