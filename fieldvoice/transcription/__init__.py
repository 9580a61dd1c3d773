"""Transcription backends."""

from .base import AbstractTranscriptionBackend

__all__ = [
    "AbstractTranscriptionBackend",
]
