"""Canonical PCM WAV assembly from streamed PCM chunks."""

import struct
import logging
from pathlib import Path
from typing import Iterator, Sequence, Union

from ..errors import WavAssemblyFailed

logger = logging.getLogger(__name__)

WAV_HEADER_SIZE = 44
PCM_FORMAT_TAG = 1
DEFAULT_PIECE_SIZE = 1024 * 1024

# RIFF chunk, WAVE form, 16-byte fmt sub-chunk, data sub-chunk header.
_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")


def build_wav_header(data_length: int,
                     sample_rate: int = 16000,
                     channels: int = 1,
                     bits_per_sample: int = 16) -> bytes:
    """Build the 44-byte header for ``data_length`` bytes of linear PCM."""
    if data_length < 0:
        raise ValueError("data_length must be non-negative")
    byte_rate = sample_rate * channels * bits_per_sample // 8
    block_align = channels * bits_per_sample // 8
    return _HEADER_STRUCT.pack(
        b"RIFF", 36 + data_length, b"WAVE",
        b"fmt ", 16, PCM_FORMAT_TAG, channels, sample_rate,
        byte_rate, block_align, bits_per_sample,
        b"data", data_length,
    )


class WavAssembler:
    """Turns an ordered sequence of raw PCM chunks into a WAV byte stream."""

    def __init__(self,
                 sample_rate: int = 16000,
                 channels: int = 1,
                 bits_per_sample: int = 16,
                 piece_size: int = DEFAULT_PIECE_SIZE):
        """Initialize the assembler.

        Args:
            sample_rate: Sample rate written to the header
            channels: Channel count written to the header
            bits_per_sample: Bit depth written to the header
            piece_size: Upper bound on the size of pieces yielded by iter_bytes
        """
        if piece_size <= 0:
            raise ValueError("piece_size must be positive")
        self.sample_rate = sample_rate
        self.channels = channels
        self.bits_per_sample = bits_per_sample
        self.piece_size = piece_size

    def header_for(self, data_length: int) -> bytes:
        return build_wav_header(data_length, self.sample_rate, self.channels, self.bits_per_sample)

    def assemble(self, chunks: Sequence[bytes]) -> bytes:
        """Return header + concatenated payload as one buffer.

        Raises:
            WavAssemblyFailed: If ``chunks`` is empty
        """
        self._check_not_empty(chunks)
        payload = b"".join(chunks)
        return self.header_for(len(payload)) + payload

    def iter_bytes(self, chunks: Sequence[bytes]) -> Iterator[bytes]:
        """Yield the WAV file in pieces of at most ``piece_size`` bytes.

        The concatenation of the pieces equals ``assemble(chunks)``.
        """
        self._check_not_empty(chunks)
        total = sum(len(chunk) for chunk in chunks)

        pending = bytearray(self.header_for(total))
        for chunk in chunks:
            pending.extend(chunk)
            while len(pending) >= self.piece_size:
                yield bytes(pending[:self.piece_size])
                del pending[:self.piece_size]
        if pending:
            yield bytes(pending)

    def write(self, chunks: Sequence[bytes], path: Union[str, Path]) -> str:
        """Write the WAV file incrementally and return its path.

        Raises:
            WavAssemblyFailed: If ``chunks`` is empty or the file cannot be written
        """
        self._check_not_empty(chunks)
        path = Path(path)
        written = 0
        try:
            with open(path, "wb") as f:
                for piece in self.iter_bytes(chunks):
                    f.write(piece)
                    written += len(piece)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise WavAssemblyFailed(f"Could not write WAV file {path}: {e}") from e

        logger.info(f"WAV file written: {path} ({written} bytes, {len(chunks)} chunks)")
        return str(path)

    @staticmethod
    def _check_not_empty(chunks: Sequence[bytes]) -> None:
        if not chunks:
            raise WavAssemblyFailed("No audio chunks to process")
