"""
Publish Outcome Schema
======================

Bounded Context: Notification Result

The value returned to the caller after a notification attempt. A failed
outcome is informational only; the caller always continues.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class PipelineStage(str, Enum):
    """Stages of one connect/publish/disconnect sequence, in order."""
    IDLE = "idle"
    RESOLVING_VARIABLES = "resolving_variables"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    PUBLISHING = "publishing"
    DISCONNECTING = "disconnecting"
    DONE = "done"


@dataclass(frozen=True)
class PublishOutcome:
    """
    Result of one notification attempt.

    Attributes:
        delivered: True if the broker accepted the message
        reason: Failure description (None when delivered)
        stage: Last stage reached, or the stage that failed
        topic: Expanded topic (None if expansion never ran)
    """
    delivered: bool
    reason: Optional[str] = None
    stage: PipelineStage = PipelineStage.DONE
    topic: Optional[str] = None

    @classmethod
    def success(cls, topic: Optional[str] = None) -> 'PublishOutcome':
        return cls(delivered=True, stage=PipelineStage.DONE, topic=topic)

    @classmethod
    def failure(
        cls,
        reason: str,
        stage: PipelineStage,
        topic: Optional[str] = None
    ) -> 'PublishOutcome':
        return cls(delivered=False, reason=reason, stage=stage, topic=topic)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            'delivered': self.delivered,
            'reason': self.reason,
            'stage': self.stage.value,
            'topic': self.topic,
        }
