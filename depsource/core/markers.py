"""
Environment marker evaluation.

Markers are evaluated against a :class:`MarkerEnvironment` plus the set of
extras the caller has enabled. A requirement without a marker always
applies.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, TypeVar, Union

from packaging.markers import Marker

from depsource.models.environment import MarkerEnvironment
from depsource.models.names import normalize_extra_name
from depsource.models.requirement import (
    Requirement,
    RequirementsTxtRequirement,
    UnnamedRequirement,
    UvRequirement,
)

AnyRequirement = Union[
    Requirement, UnnamedRequirement, UvRequirement, RequirementsTxtRequirement
]
R = TypeVar("R", Requirement, UnnamedRequirement, UvRequirement, RequirementsTxtRequirement)


def _marker_of(requirement: AnyRequirement) -> Optional[Marker]:
    if isinstance(requirement, RequirementsTxtRequirement):
        return requirement.markers()
    return requirement.marker


def evaluate_markers(
    requirement: AnyRequirement,
    environment: MarkerEnvironment,
    enabled_extras: Iterable[str] = (),
) -> bool:
    """Return whether *requirement* applies to *environment*.

    ``extra == "name"`` terms are true only when ``name`` is one of
    *enabled_extras*; names are compared after normalization. Each enabled
    extra is tried on its own, see :meth:`MarkerEnvironment.evaluate`.
    """
    extras = [normalize_extra_name(extra) for extra in enabled_extras]
    return environment.evaluate(_marker_of(requirement), extras)


def filter_requirements(
    requirements: Sequence[R],
    environment: MarkerEnvironment,
    enabled_extras: Iterable[str] = (),
) -> List[R]:
    """Keep the requirements whose markers apply, preserving order."""
    extras = list(enabled_extras)
    return [
        requirement
        for requirement in requirements
        if evaluate_markers(requirement, environment, extras)
    ]
