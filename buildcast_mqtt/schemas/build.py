"""
Build Context Schema
====================

Bounded Context: Build Metadata

This module defines the read-only snapshot of a build that a notification is
rendered from.

Design:
- BuildResult: Result names with severity ordering (SUCCESS best, ABORTED worst)
- BuildSummary: One prior build record (number, result, change authors)
- BuildContext: Snapshot supplied per event, never mutated by the pipeline
- collect_culprits: Responsible parties derived from build history

Message Flow:
    Host build → BuildContext → resolve_variables → BuildResultPublisher → MQTT
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote


class BuildResult(str, Enum):
    """Build result, ordered from healthiest to worst."""
    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"

    @property
    def ordinal(self) -> int:
        """Severity rank (0 = SUCCESS)."""
        return list(BuildResult).index(self)

    def is_worse_than(self, other: 'BuildResult') -> bool:
        return self.ordinal > other.ordinal

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional['BuildResult']:
        """
        Parse a result name (case-insensitive).

        Returns None for an empty or missing value, which is how an
        in-progress build reports its result.

        Raises:
            ValueError: If the name is not a known result
        """
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown build result: {value!r}. "
                f"Must be one of {[r.value for r in cls]}"
            )


@dataclass(frozen=True)
class BuildSummary:
    """
    One prior build, as seen when walking history backwards.

    Attributes:
        number: Build number
        result: Build result (None if it never completed)
        authors: Display names of the authors of this build's changes
    """
    number: Optional[int] = None
    result: Optional[BuildResult] = None
    authors: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildSummary':
        """Deserialize from dict (keys: number, result, authors)."""
        number = data.get('number')
        return cls(
            number=int(number) if number is not None else None,
            result=BuildResult.parse(data.get('result')),
            authors=tuple(str(a) for a in data.get('authors') or ()),
        )


def collect_culprits(
    change_authors: Iterable[str],
    history: Iterable[BuildSummary],
) -> List[str]:
    """
    Derive the users responsible for changes since the last healthy build.

    Starts from the authors of the current build, then walks ``history``
    (newest first) adding each build's authors while that build is worse
    than SUCCESS. Stops at the first SUCCESS build or when history runs out.
    A build without a result has not proven healthy, so the walk goes on.

    Args:
        change_authors: Authors of the current build's changes
        history: Prior builds, newest first

    Returns:
        Distinct author names in discovery order

    Example:
        >>> collect_culprits(["carol"], [
        ...     BuildSummary(11, BuildResult.FAILURE, ("alice", "carol")),
        ...     BuildSummary(10, BuildResult.SUCCESS, ("bob",)),
        ... ])
        ['carol', 'alice']
    """
    culprits: List[str] = []

    def add(authors: Iterable[str]) -> None:
        for author in authors:
            if author and author not in culprits:
                culprits.append(author)

    add(change_authors)
    for build in history:
        if build.result is not None and not build.result.is_worse_than(BuildResult.SUCCESS):
            break
        add(build.authors)
    return culprits


def job_url_path(job_name: str) -> str:
    """
    Path of a job relative to the server root, e.g. ``job/demo/``.

    Folder-qualified names (``team/demo``) map to nested
    ``job/team/job/demo/`` paths. Each segment is percent-encoded.
    """
    segments = [s for s in job_name.split('/') if s]
    return ''.join(f"job/{quote(segment, safe='')}/" for segment in segments)


def _scopes(name: str, value: Any) -> Tuple[Mapping[str, str], ...]:
    if value is None:
        return ()
    if isinstance(value, Mapping):
        return (value,)
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ValueError(
            f"{name} must be a sequence of mappings, got {type(value).__name__}"
        )
    scopes = tuple(value)
    for scope in scopes:
        if not isinstance(scope, Mapping):
            raise ValueError(
                f"{name} entries must be mappings, got {type(scope).__name__}"
            )
    return scopes


@dataclass(frozen=True)
class BuildContext:
    """
    Read-only snapshot of the build that triggered a notification.

    Attributes:
        job_name: Job (project) name, folder-qualified with '/'
        build_number: Build number
        result: Build result; None while running or after an abnormal abort
        job_url: Job path relative to the server root (derived if omitted)
        environment: Environment variable scopes, later scopes win
        parameters: Build parameter scopes, later scopes win
        change_authors: Authors of the current build's changes
        history: Prior builds, newest first

    Invariants:
        - job_name is non-empty
        - build_number >= 0
        - environment and parameters are sequences of mappings (a single
          mapping is wrapped into a one-scope tuple)

    Example:
        >>> ctx = BuildContext(
        ...     job_name="demo",
        ...     build_number=12,
        ...     result=BuildResult.SUCCESS,
        ...     environment=({'BRANCH_NAME': 'main'},),
        ... )
        >>> ctx.project_url
        'job/demo/'
    """
    job_name: str
    build_number: int
    result: Optional[BuildResult] = None
    job_url: Optional[str] = None
    environment: Sequence[Mapping[str, str]] = ()
    parameters: Sequence[Mapping[str, str]] = ()
    change_authors: Tuple[str, ...] = ()
    history: Tuple[BuildSummary, ...] = ()

    def __post_init__(self):
        """Validate invariants."""
        if not self.job_name:
            raise ValueError("job_name cannot be empty")
        if self.build_number < 0:
            raise ValueError(
                f"build_number must be >= 0, got {self.build_number}"
            )
        for name in ('environment', 'parameters'):
            object.__setattr__(self, name, _scopes(name, getattr(self, name)))

    @property
    def project_url(self) -> str:
        """Job path used for the PROJECT_URL variable."""
        return self.job_url if self.job_url else job_url_path(self.job_name)

    def culprits(self) -> List[str]:
        """Responsible parties since the last healthy build."""
        return collect_culprits(self.change_authors, self.history)
