"""
Extras selection and flattening of self-referential optional dependencies.

A project can compose extras by depending on itself::

    [project]
    name = "my-project"

    [project.optional-dependencies]
    test = ["pytest"]
    dev = ["my-project[test]", "ruff"]

Requesting ``dev`` must then pull in ``pytest`` as well as ``ruff``;
:func:`flatten_extra` performs that expansion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Mapping, Sequence, Set

from depsource.models.names import ExtraName, PackageName, normalize_extra_name
from depsource.models.requirement import UvRequirement
from depsource.utils.logger import get_logger

logger = get_logger("extras")


@dataclass(frozen=True)
class ExtrasSpecification:
    """Which extras of a project were requested.

    Use the :meth:`none`, :meth:`some` and :meth:`all` constructors.
    """

    extras: FrozenSet[ExtraName] = field(default_factory=frozenset)
    all_extras: bool = False

    @classmethod
    def none(cls) -> "ExtrasSpecification":
        return cls()

    @classmethod
    def some(cls, extras: Iterable[str]) -> "ExtrasSpecification":
        return cls(extras=frozenset(normalize_extra_name(extra) for extra in extras))

    @classmethod
    def all(cls) -> "ExtrasSpecification":
        return cls(all_extras=True)

    @classmethod
    def from_args(cls, extras: Sequence[str], all_extras: bool) -> "ExtrasSpecification":
        """Build from ``--extra`` values and an ``--all-extras`` flag."""
        if all_extras:
            return cls.all()
        if extras:
            return cls.some(extras)
        return cls.none()

    def is_empty(self) -> bool:
        return not self.all_extras and not self.extras

    def contains(self, extra: str) -> bool:
        return self.all_extras or normalize_extra_name(extra) in self.extras


def flatten_extra(
    project_name: PackageName,
    requirements: Sequence[UvRequirement],
    extras: Mapping[ExtraName, Sequence[UvRequirement]],
) -> List[UvRequirement]:
    """Expand references to *project_name* in *requirements*.

    A requirement on the project itself is replaced, depth first, by the
    requirements of each extra it names. Every extra is expanded at most
    once per call, so mutually recursive extras terminate. Other
    requirements are kept as-is; duplicates among them are not removed.
    The group being flattened is not marked as expanded up front, so an
    extra that refers back to it repeats its requirements once.

    Args:
        project_name: Normalized name of the project owning *extras*.
        requirements: The requirements of the group being flattened.
        extras: All optional dependency groups of the project.

    Returns:
        The flattened requirements, in first-seen order.
    """
    return _flatten(project_name, requirements, extras, set())


def _flatten(
    project_name: PackageName,
    requirements: Sequence[UvRequirement],
    extras: Mapping[ExtraName, Sequence[UvRequirement]],
    seen: Set[ExtraName],
) -> List[UvRequirement]:
    flattened: List[UvRequirement] = []
    for requirement in requirements:
        if requirement.name != project_name:
            flattened.append(requirement)
            continue

        for extra in requirement.extras:
            # Avoid infinite recursion on mutually recursive extras
            if extra in seen:
                logger.debug("Extra %r of %s already expanded", extra, project_name)
                continue
            seen.add(extra)

            if extra not in extras:
                logger.debug("%s has no extra %r to expand", project_name, extra)
                continue
            flattened.extend(_flatten(project_name, extras[extra], extras, seen))
    return flattened
