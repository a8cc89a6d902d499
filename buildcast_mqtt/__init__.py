"""
buildcast MQTT Notification Package
===================================

Bounded Context: Build Outcome Notifications

Publishes one MQTT message per finished build, with topic and body expanded
from build metadata. Delivery is best effort: failures are logged and the
build carries on.

Architecture:
- config: NotificationConfig (validated once, reused per build)
- schemas/: BuildContext snapshot and PublishOutcome
- variables: $NAME / ${NAME} expansion over layered scopes
- credentials: Per-invocation credential lookup
- publishers/: Connection lifecycle and the build result publisher
- logging/: Structured JSON logging used as the invocation log sink

Public API
----------
Entry points:
    notify, check_connection

Configuration:
    NotificationConfig, Qos, DEFAULT_TOPIC, DEFAULT_MESSAGE

Schemas:
    BuildResult, BuildSummary, BuildContext, PipelineStage, PublishOutcome

Variables:
    expand, resolve_variables

Credentials:
    Credentials, CredentialLookup, InMemoryCredentialStore, YamlCredentialStore

Example:
    >>> from buildcast_mqtt import (
    ...     NotificationConfig, Qos, BuildContext, BuildResult, notify, create_logger
    ... )
    >>> config = NotificationConfig(broker="tcp://localhost:1883", qos=Qos.AT_LEAST_ONCE)
    >>> context = BuildContext(job_name="demo", build_number=42,
    ...                        result=BuildResult.SUCCESS)
    >>> outcome = notify(config, context, create_logger("notifier"))
    >>> # Publishes "SUCCESS" to "jenkins/job/demo/"
"""

# Version
__version__ = "1.0.0"

# Configuration
from .config import (
    DEFAULT_MESSAGE,
    DEFAULT_TOPIC,
    BrokerAddress,
    NotificationConfig,
    Qos,
)

# Errors
from .errors import (
    BrokerConnectionError,
    ConfigurationError,
    NotifierError,
    PublishError,
)

# Schemas
from .schemas import (
    BuildContext,
    BuildResult,
    BuildSummary,
    PipelineStage,
    PublishOutcome,
    collect_culprits,
)

# Variables
from .variables import expand, resolve_variables, static_variables

# Credentials
from .credentials import (
    CredentialLookup,
    Credentials,
    InMemoryCredentialStore,
    YamlCredentialStore,
)

# Publishers
from .publishers import BasePublisher, BuildResultPublisher

# Entry points
from .notifier import check_connection, notify

# Logging
from .logging import (
    LogEvent,
    StructuredLogger,
    create_logger,
)

__all__ = [
    # Version
    '__version__',
    # Configuration
    'DEFAULT_MESSAGE',
    'DEFAULT_TOPIC',
    'BrokerAddress',
    'NotificationConfig',
    'Qos',
    # Errors
    'BrokerConnectionError',
    'ConfigurationError',
    'NotifierError',
    'PublishError',
    # Schemas
    'BuildContext',
    'BuildResult',
    'BuildSummary',
    'PipelineStage',
    'PublishOutcome',
    'collect_culprits',
    # Variables
    'expand',
    'resolve_variables',
    'static_variables',
    # Credentials
    'CredentialLookup',
    'Credentials',
    'InMemoryCredentialStore',
    'YamlCredentialStore',
    # Publishers
    'BasePublisher',
    'BuildResultPublisher',
    # Entry points
    'check_connection',
    'notify',
    # Logging
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
