"""
Build Result Publisher
======================

Bounded Context: Build Notification Delivery

This module provides the publisher that turns a finished build into one MQTT
message.

Design:
- Inherits from BasePublisher (connection management)
- Expands topic and message templates from the build context
- Publishes exactly one UTF-8 message
- Never raises: failures are logged and returned as a PublishOutcome

Message Flow:
    BuildContext → resolve_variables → BuildResultPublisher → MQTT Broker

Stages:
    IDLE → RESOLVING_VARIABLES → CONNECTING → (AUTHENTICATING)
         → PUBLISHING → DISCONNECTING → DONE

Example:
    >>> publisher = BuildResultPublisher(config, logger, credential_lookup=store)
    >>> outcome = publisher.publish_build_result(context)
    >>> outcome.delivered
    True
"""

from typing import Tuple

from .base import BasePublisher
from ..logging import LogEvent
from ..schemas import BuildContext, PipelineStage, PublishOutcome
from ..variables import resolve_variables

CONNECTION_STAGES = {PipelineStage.CONNECTING, PipelineStage.AUTHENTICATING}


class BuildResultPublisher(BasePublisher):
    """
    Publisher for build outcome notifications.

    One instance handles one notification; create a new one per build.
    """

    def format_message(self, context: BuildContext) -> Tuple[str, bytes]:
        """
        Expand the configured topic and message for ``context``.

        Returns:
            (topic, UTF-8 encoded message body)
        """
        self.stage = PipelineStage.RESOLVING_VARIABLES
        topic = resolve_variables(self.config.effective_topic, context)
        message = resolve_variables(self.config.effective_message, context)

        self.logger.debug(
            event=LogEvent.VARIABLES_RESOLVED,
            message="Expanded topic and message templates",
            metadata={'topic': topic, 'message': message}
        )
        return topic, message.encode("utf-8")

    def publish_build_result(self, context: BuildContext) -> PublishOutcome:
        """
        Deliver the notification for ``context``.

        This is the main public API. Any error while connecting,
        authenticating or publishing is logged with its traceback and
        reported through the returned outcome; nothing is raised.

        Args:
            context: Snapshot of the finished build

        Returns:
            PublishOutcome (delivered or failed with reason)
        """
        metadata = {
            'job': context.job_name,
            'build_number': context.build_number,
            'broker': str(self.address)
        }
        self.logger.info(
            event=LogEvent.NOTIFY_STARTED,
            message="Sending build notification",
            metadata=metadata
        )

        topic = None
        try:
            topic, payload = self.format_message(context)
            with self.session():
                self.publish(topic, payload)

        except Exception as e:
            stage = self.failed_stage or self.stage
            event = (
                LogEvent.MQTT_CONNECTION_ERROR
                if stage in CONNECTION_STAGES
                else LogEvent.MQTT_PUBLISH_ERROR
            )
            self.logger.error(
                event=event,
                message=f"Failed to deliver build notification: {e}",
                exc_info=e,
                metadata={**metadata, 'stage': stage.value, 'topic': topic}
            )
            self.logger.warning(
                event=LogEvent.NOTIFY_FAILED,
                message="Build notification not delivered; continuing",
                metadata={**metadata, 'stage': stage.value}
            )
            return PublishOutcome.failure(str(e), stage=stage, topic=topic)

        self.stage = PipelineStage.DONE
        self.logger.info(
            event=LogEvent.NOTIFY_COMPLETED,
            message="Build notification delivered",
            metadata={**metadata, 'topic': topic}
        )
        return PublishOutcome.success(topic=topic)

    def check_connection(self) -> PublishOutcome:
        """
        Connect and disconnect without publishing.

        Returns:
            Delivered outcome on success, failed outcome with reason otherwise
        """
        try:
            with self.session():
                pass
        except Exception as e:
            stage = self.failed_stage or self.stage
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Failed to connect: {e}",
                exc_info=e,
                metadata={'broker': str(self.address), 'stage': stage.value}
            )
            return PublishOutcome.failure(str(e), stage=stage)

        self.stage = PipelineStage.DONE
        return PublishOutcome.success()
