"""Recording storage."""

from .recording_store import RecordingStore

__all__ = ["RecordingStore"]
