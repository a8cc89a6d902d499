"""
Notification entry points.

notify() is called once per finished build. It always returns; a broker
that is down, slow or refusing credentials only shows up in the log sink
and in the returned PublishOutcome.
"""

from typing import Optional

from .config import NotificationConfig
from .credentials import CredentialLookup
from .logging import StructuredLogger, create_logger
from .publishers import BuildResultPublisher
from .publishers.base import ClientFactory
from .schemas import BuildContext, PublishOutcome


def notify(
    config: NotificationConfig,
    context: BuildContext,
    logger: Optional[StructuredLogger] = None,
    credential_lookup: Optional[CredentialLookup] = None,
    client_factory: Optional[ClientFactory] = None
) -> PublishOutcome:
    """
    Publish the notification for one build.

    Args:
        config: Validated notification configuration
        context: Snapshot of the finished build
        logger: Log sink for this invocation (default: "notifier" logger)
        credential_lookup: Resolves config.credentials_id
        client_factory: MQTT client factory (tests inject a fake)

    Returns:
        PublishOutcome; never raises for delivery problems
    """
    publisher = BuildResultPublisher(
        config,
        logger or create_logger("notifier"),
        credential_lookup=credential_lookup,
        client_factory=client_factory,
    )
    return publisher.publish_build_result(context)


def check_connection(
    config: NotificationConfig,
    logger: Optional[StructuredLogger] = None,
    credential_lookup: Optional[CredentialLookup] = None,
    client_factory: Optional[ClientFactory] = None
) -> PublishOutcome:
    """Connect to the configured broker and disconnect, publishing nothing."""
    publisher = BuildResultPublisher(
        config,
        logger or create_logger("notifier"),
        credential_lookup=credential_lookup,
        client_factory=client_factory,
    )
    return publisher.check_connection()
