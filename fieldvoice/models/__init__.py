"""Data models for the fieldvoice pipeline."""

from .audio import AudioChunk, AudioStats, CaptureResult, CaptureState
from .commands import (
    GLOBAL_SCOPE,
    Action,
    CatalogEntry,
    Command,
    CommandDescriptor,
    Fill,
    MatchResult,
    parse_command,
)
from .events import PipelineResult, RoundFailed, VoiceActivityEvent
from .catalog import CommandRecord, ProductRecord, ShopRecord

__all__ = [
    "AudioChunk",
    "AudioStats",
    "CaptureResult",
    "CaptureState",
    # Commands
    "GLOBAL_SCOPE",
    "Action",
    "Fill",
    "Command",
    "parse_command",
    "CommandDescriptor",
    "CatalogEntry",
    "MatchResult",
    # Events
    "VoiceActivityEvent",
    "PipelineResult",
    "RoundFailed",
    # Catalog records
    "CommandRecord",
    "ProductRecord",
    "ShopRecord",
]
