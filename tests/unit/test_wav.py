"""Unit tests for WAV assembly."""

import struct
import wave
from pathlib import Path

import pytest

from fieldvoice.audio.wav import WAV_HEADER_SIZE, WavAssembler, build_wav_header
from fieldvoice.errors import WAV_ASSEMBLY_FAILED, WavAssemblyFailed


@pytest.mark.unit
class TestWavHeader:
    """Test cases for the 44-byte PCM header."""

    def test_header_fields(self):
        header = build_wav_header(3200)

        assert len(header) == WAV_HEADER_SIZE
        assert header[0:4] == b"RIFF"
        assert struct.unpack("<I", header[4:8])[0] == 36 + 3200
        assert header[8:16] == b"WAVEfmt "
        assert struct.unpack("<IHHIIHH", header[16:36]) == (16, 1, 1, 16000, 32000, 2, 16)
        assert header[36:40] == b"data"
        assert struct.unpack("<I", header[40:44])[0] == 3200

    def test_stereo_byte_rate(self):
        header = build_wav_header(0, sample_rate=44100, channels=2, bits_per_sample=16)
        byte_rate, block_align = struct.unpack("<IH", header[28:34])
        assert byte_rate == 44100 * 4
        assert block_align == 4

    def test_negative_length_rejected(self):
        with pytest.raises(ValueError):
            build_wav_header(-1)


@pytest.mark.unit
class TestWavAssembler:
    """Test cases for WavAssembler."""

    def test_assemble_lengths(self, sample_audio_chunk):
        chunks = [sample_audio_chunk, sample_audio_chunk, b"\x01\x00"]
        payload_length = sum(len(c) for c in chunks)

        data = WavAssembler().assemble(chunks)

        assert len(data) == WAV_HEADER_SIZE + payload_length
        assert struct.unpack("<I", data[4:8])[0] == 36 + payload_length
        assert struct.unpack("<I", data[40:44])[0] == payload_length
        assert data[WAV_HEADER_SIZE:] == b"".join(chunks)

    def test_empty_input_fails(self):
        assembler = WavAssembler()
        with pytest.raises(WavAssemblyFailed) as exc_info:
            assembler.assemble([])
        assert exc_info.value.code == WAV_ASSEMBLY_FAILED
        assert "No audio chunks to process" in str(exc_info.value)

        with pytest.raises(WavAssemblyFailed):
            list(assembler.iter_bytes([]))

    def test_iter_bytes_matches_assemble(self, sample_audio_chunk):
        assembler = WavAssembler(piece_size=1000)
        chunks = [sample_audio_chunk] * 3

        pieces = list(assembler.iter_bytes(chunks))

        assert b"".join(pieces) == assembler.assemble(chunks)
        assert all(len(piece) <= 1000 for piece in pieces)
        assert len(pieces) > 1

    def test_invalid_piece_size(self):
        with pytest.raises(ValueError):
            WavAssembler(piece_size=0)

    def test_write_produces_readable_file(self, temp_data_dir, sample_audio_chunk):
        path = Path(temp_data_dir) / "out.wav"

        result = WavAssembler().write([sample_audio_chunk] * 4, path)

        assert result == str(path)
        with wave.open(result, "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 16000
            assert wf.getnframes() == 4 * len(sample_audio_chunk) // 2

    def test_write_to_missing_directory_fails(self, temp_data_dir, sample_audio_chunk):
        path = Path(temp_data_dir) / "missing" / "out.wav"
        with pytest.raises(WavAssemblyFailed):
            WavAssembler().write([sample_audio_chunk], path)

    def test_write_empty_creates_no_file(self, temp_data_dir):
        path = Path(temp_data_dir) / "empty.wav"
        with pytest.raises(WavAssemblyFailed):
            WavAssembler().write([], path)
        assert not path.exists()

    def test_failed_write_removes_partial_file(self, temp_data_dir, sample_audio_chunk):
        path = Path(temp_data_dir) / "partial.wav"
        assembler = WavAssembler()

        def failing_pieces(chunks):
            yield assembler.header_for(len(sample_audio_chunk))
            raise OSError("No space left on device")

        assembler.iter_bytes = failing_pieces

        with pytest.raises(WavAssemblyFailed):
            assembler.write([sample_audio_chunk], path)
        assert not path.exists()
