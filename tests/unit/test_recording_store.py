"""Unit tests for RecordingStore."""

import os
import wave
from pathlib import Path

import pytest

from fieldvoice.errors import WavAssemblyFailed
from fieldvoice.storage import RecordingStore


@pytest.mark.unit
class TestRecordingStore:
    """Test cases for RecordingStore."""

    def test_creates_directory(self, temp_data_dir):
        directory = Path(temp_data_dir) / "recordings"
        RecordingStore(str(directory))
        assert directory.is_dir()

    def test_save_writes_wav(self, temp_data_dir, sample_audio_chunk):
        store = RecordingStore(temp_data_dir)

        path = store.save([sample_audio_chunk, sample_audio_chunk])

        assert store.last_recording_path == path
        assert Path(path).name.startswith("voice_")
        with wave.open(path, "rb") as wf:
            assert wf.getnframes() == len(sample_audio_chunk)

    def test_unique_paths(self, temp_data_dir, sample_audio_chunk):
        store = RecordingStore(temp_data_dir, keep_recordings=0)
        paths = {store.save([sample_audio_chunk]) for _ in range(3)}
        assert len(paths) == 3

    def test_save_empty_fails(self, temp_data_dir):
        store = RecordingStore(temp_data_dir)
        with pytest.raises(WavAssemblyFailed):
            store.save([])
        assert store.list_recordings() == []
        assert store.last_recording_path is None

    def test_prune_keeps_newest(self, temp_data_dir, sample_audio_chunk):
        store = RecordingStore(temp_data_dir, keep_recordings=2)
        for i in range(3):
            old = Path(temp_data_dir) / f"voice_{i}.wav"
            old.write_bytes(b"RIFF")
            os.utime(old, (1000 + i, 1000 + i))

        latest = store.save([sample_audio_chunk])

        remaining = [str(p) for p in store.list_recordings()]
        assert len(remaining) == 2
        assert remaining[-1] == latest
        assert str(Path(temp_data_dir) / "voice_2.wav") in remaining

    def test_keep_zero_keeps_all(self, temp_data_dir, sample_audio_chunk):
        store = RecordingStore(temp_data_dir, keep_recordings=0)
        for _ in range(4):
            store.save([sample_audio_chunk])
        assert len(store.list_recordings()) == 4
