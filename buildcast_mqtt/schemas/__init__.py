"""
buildcast Schemas
=================

Bounded Context: Data Structures

Immutable, typed data structures describing a build and the outcome of
notifying about it.

Public API
----------
Build Types:
    BuildResult: Enum (SUCCESS, UNSTABLE, FAILURE, NOT_BUILT, ABORTED)
    BuildSummary: Prior build record
    BuildContext: Per-event build snapshot
    collect_culprits: Responsible parties since the last healthy build

Outcome Types:
    PipelineStage: Enum of publish pipeline stages
    PublishOutcome: Result of one notification attempt

Example:
    >>> from buildcast_mqtt.schemas import BuildContext, BuildResult
    >>> ctx = BuildContext(job_name="demo", build_number=7,
    ...                    result=BuildResult.FAILURE)
"""

from .build import (
    BuildResult,
    BuildSummary,
    BuildContext,
    collect_culprits,
    job_url_path,
)
from .outcome import PipelineStage, PublishOutcome

__all__ = [
    # Build types
    'BuildResult',
    'BuildSummary',
    'BuildContext',
    'collect_culprits',
    'job_url_path',
    # Outcome types
    'PipelineStage',
    'PublishOutcome',
]
