"""Publishes audio chunks and voice-activity changes with pypubsub."""

import logging
from typing import Optional

from pubsub import pub

from ..models.audio import AudioChunk
from ..models.events import VoiceActivityEvent
from .vad import EnergyVAD

logger = logging.getLogger(__name__)

AUDIO_CHUNK_TOPIC = "audio.chunk"
AUDIO_VAD_TOPIC = "audio.vad"


class AudioPublisher:
    """Publishes every chunk, and a VAD event whenever voice activity flips."""

    def __init__(self,
                 vad: Optional[EnergyVAD] = None,
                 chunk_topic: str = AUDIO_CHUNK_TOPIC,
                 vad_topic: str = AUDIO_VAD_TOPIC):
        """Initialize audio publisher.

        Args:
            vad: Detector run on each chunk; no VAD events are published without one
            chunk_topic: Pub/sub topic name for audio chunks
            vad_topic: Pub/sub topic name for voice-activity events
        """
        self.vad = vad
        self.chunk_topic = chunk_topic
        self.vad_topic = vad_topic
        logger.info(f"AudioPublisher initialized with topics: {chunk_topic}, {vad_topic}")

    def publish_audio_chunk(self, chunk: AudioChunk) -> None:
        """Publish a chunk, followed by a VAD event if the chunk changed the voice state."""
        pub.sendMessage(self.chunk_topic, chunk=chunk)
        if self.vad is None:
            return
        event = self.vad.process(chunk)
        if event is not None:
            self.publish_voice_activity(event)

    def publish_voice_activity(self, event: VoiceActivityEvent) -> None:
        pub.sendMessage(self.vad_topic, event=event)
        logger.debug(f"Published voice activity: {event.is_voice_detected}")
