"""
Template Variable Resolution
============================

Bounded Context: Topic and Message Templating

Expands ``$NAME`` and ``${NAME}`` placeholders in topic and message templates.

Scopes, lowest to highest precedence:
    1. Static values computed from the build (BUILD_RESULT, PROJECT_URL,
       BUILD_NUMBER, CULPRITS)
    2. Environment variables
    3. Build parameters

Scopes are merged into one mapping before a single substitution pass, so a
substituted value is never expanded again. Unknown placeholders are left as
they are. Expansion never raises.

Example:
    >>> expand("jenkins/$PROJECT_URL", [{'PROJECT_URL': 'job/demo/'}])
    'jenkins/job/demo/'
    >>> expand("${MISSING} stays", [{}])
    '${MISSING} stays'
"""

import re
from typing import Any, Callable, Dict, Iterable, Mapping, Union

from .schemas import BuildContext

Value = Union[str, Callable[[], str]]

PLACEHOLDER_PATTERN = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_.\-]*)\}|(?P<named>[A-Za-z_][A-Za-z0-9_]*))"
)

BUILD_RESULT = "BUILD_RESULT"
PROJECT_URL = "PROJECT_URL"
BUILD_NUMBER = "BUILD_NUMBER"
CULPRITS = "CULPRITS"


def merge_scopes(scopes: Iterable[Mapping[str, Value]]) -> Dict[str, Value]:
    """Collapse scopes into one mapping; later scopes override earlier ones."""
    merged: Dict[str, Value] = {}
    for scope in scopes:
        merged.update(scope)
    return merged


def expand(template: str, scopes: Iterable[Mapping[str, Value]]) -> str:
    """
    Substitute placeholders in ``template`` from layered scopes.

    A scope value may be a zero-argument callable. It is only called when the
    template references its name, and at most once per call.

    Args:
        template: String containing $NAME / ${NAME} placeholders
        scopes: Mappings in override order (last wins)

    Returns:
        Expanded string; unresolvable placeholders are kept literally
    """
    if not template or '$' not in template:
        return template or ""

    values = merge_scopes(scopes)
    computed: Dict[str, str] = {}

    def substitute(match: 're.Match[str]') -> str:
        name = match.group('braced') or match.group('named')
        if name not in values:
            return match.group(0)
        if name not in computed:
            value: Any = values[name]
            if callable(value):
                value = value()
            computed[name] = "" if value is None else str(value)
        return computed[name]

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def static_variables(context: BuildContext) -> Dict[str, Value]:
    """
    Values computed from the build itself.

    BUILD_RESULT is empty when the build has no result yet. CULPRITS is
    lazy, so build history is only walked when a template asks for it.
    """
    return {
        BUILD_RESULT: context.result.value if context.result is not None else "",
        PROJECT_URL: context.project_url,
        BUILD_NUMBER: str(context.build_number),
        CULPRITS: lambda: ",".join(context.culprits()),
    }


def resolve_variables(template: str, context: BuildContext) -> str:
    """
    Expand ``template`` against every variable scope of ``context``.

    Example:
        >>> ctx = BuildContext(job_name="demo", build_number=3,
        ...                    result=BuildResult.SUCCESS)
        >>> resolve_variables("$BUILD_RESULT #${BUILD_NUMBER}", ctx)
        'SUCCESS #3'
    """
    scopes = [static_variables(context)]
    scopes.extend(context.environment)
    scopes.extend(context.parameters)
    return expand(template, scopes)
