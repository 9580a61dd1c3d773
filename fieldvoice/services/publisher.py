"""Publishes pipeline outcomes using pubsub.pub."""

import logging

from pubsub import pub

from ..models.audio import CaptureResult
from ..models.events import PipelineResult, RoundFailed

logger = logging.getLogger(__name__)

CAPTURE_FINISHED_TOPIC = "capture.finished"
PIPELINE_RESULT_TOPIC = "pipeline.result"
PIPELINE_ERROR_TOPIC = "pipeline.error"


class PipelinePublisher:
    """Publishes finished captures, results and per-round failures."""

    def __init__(self,
                 capture_topic: str = CAPTURE_FINISHED_TOPIC,
                 result_topic: str = PIPELINE_RESULT_TOPIC,
                 error_topic: str = PIPELINE_ERROR_TOPIC):
        self.capture_topic = capture_topic
        self.result_topic = result_topic
        self.error_topic = error_topic
        logger.info(f"PipelinePublisher initialized with topics: "
                    f"{capture_topic}, {result_topic}, {error_topic}")

    def publish_capture(self, capture: CaptureResult) -> None:
        pub.sendMessage(self.capture_topic, capture=capture)

    def publish_result(self, result: PipelineResult) -> None:
        pub.sendMessage(self.result_topic, result=result)
        logger.debug(f"Published result for round {result.round_id}: {result.command}")

    def publish_error(self, failure: RoundFailed) -> None:
        pub.sendMessage(self.error_topic, failure=failure)
        logger.debug(f"Published failure for round {failure.round_id}: {failure.code}")
