"""Pipeline services."""

from .publisher import (
    CAPTURE_FINISHED_TOPIC,
    PIPELINE_ERROR_TOPIC,
    PIPELINE_RESULT_TOPIC,
    PipelinePublisher,
)
from .pipeline import VoiceCommandPipeline

__all__ = [
    "CAPTURE_FINISHED_TOPIC",
    "PIPELINE_RESULT_TOPIC",
    "PIPELINE_ERROR_TOPIC",
    "PipelinePublisher",
    "VoiceCommandPipeline",
]
