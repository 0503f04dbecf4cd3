"""
Requirement data models for depsource.

This module defines the structured forms a dependency declaration takes
on its way to the resolver:

- :class:`Requirement`: a parsed PEP 508 requirement.
- :class:`UnnamedRequirement`: a bare URL or path, only valid in
  requirements files.
- :class:`UvRequirement`: the canonical form, with the provenance of the
  artifact fixed in ``source``.
- :class:`RequirementsTxtRequirement`: one read-only facade over the
  named and unnamed forms.

All models are immutable value objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from packaging.markers import Marker
from packaging.specifiers import SpecifierSet

from depsource.models.environment import MarkerEnvironment
from depsource.models.names import ExtraName, PackageName
from depsource.models.source import (
    GitSource,
    PathSource,
    RegistrySource,
    UrlSource,
    UvSource,
    WorkspaceSource,
    source_to_json,
)
from depsource.models.url import VerbatimUrl

VersionOrUrl = Union[SpecifierSet, VerbatimUrl]


def _format_extras(extras: Tuple[ExtraName, ...]) -> str:
    return f"[{','.join(extras)}]" if extras else ""


def _format_marker(marker: Optional[Marker]) -> str:
    return f" ; {marker}" if marker is not None else ""


@dataclass(frozen=True)
class Requirement:
    """A parsed PEP 508 requirement.

    Attributes:
        name: Normalized distribution name.
        extras: Requested extras, unique, in the order written.
        marker: Environment marker, if any.
        version_or_url: ``None``, a non-empty specifier set, or a direct URL.
    """

    name: PackageName
    extras: Tuple[ExtraName, ...] = ()
    marker: Optional[Marker] = None
    version_or_url: Optional[VersionOrUrl] = None

    @property
    def specifier(self) -> Optional[SpecifierSet]:
        if isinstance(self.version_or_url, SpecifierSet):
            return self.version_or_url
        return None

    @property
    def url(self) -> Optional[VerbatimUrl]:
        if isinstance(self.version_or_url, VerbatimUrl):
            return self.version_or_url
        return None

    def __str__(self) -> str:
        rendered = f"{self.name}{_format_extras(self.extras)}"
        if self.url is not None:
            rendered += f" @ {self.url}"
            # PEP 508 needs whitespace before the marker separator after a URL
            if self.marker is not None:
                rendered += " "
        elif self.specifier is not None:
            rendered += str(self.specifier)
        if self.marker is not None:
            rendered += f"; {self.marker}"
        return rendered


@dataclass(frozen=True)
class UnnamedRequirement:
    """A direct URL or path requirement without a distribution name."""

    url: VerbatimUrl
    extras: Tuple[ExtraName, ...] = ()
    marker: Optional[Marker] = None

    def evaluate_markers(
        self,
        environment: MarkerEnvironment,
        extras: Tuple[ExtraName, ...] = (),
    ) -> bool:
        return environment.evaluate(self.marker, extras)

    def __str__(self) -> str:
        return f"{self.url}{_format_extras(self.extras)}{_format_marker(self.marker)}"


@dataclass(frozen=True)
class UvRequirement:
    """A requirement whose source has been decided.

    Attributes:
        name: Normalized distribution name.
        extras: Requested extras, unique, in the order written.
        marker: Environment marker, if any.
        source: Where the resolver fetches the artifact from.
    """

    name: PackageName
    source: UvSource
    extras: Tuple[ExtraName, ...] = ()
    marker: Optional[Marker] = None

    @classmethod
    def from_requirement(cls, requirement: Requirement) -> "UvRequirement":
        """Convert a parsed requirement without consulting any overrides.

        A bare name becomes an unconstrained registry requirement; this is
        how requirements files treat it.
        """
        source: UvSource
        if requirement.url is not None:
            source = UrlSource(url=requirement.url)
        else:
            source = RegistrySource(
                version=requirement.specifier or SpecifierSet(), index=None
            )
        return cls(
            name=requirement.name,
            source=source,
            extras=requirement.extras,
            marker=requirement.marker,
        )

    def evaluate_markers(
        self,
        environment: MarkerEnvironment,
        extras: Tuple[ExtraName, ...] = (),
    ) -> bool:
        """Return whether the marker applies to *environment* and *extras*."""
        return environment.evaluate(self.marker, extras)

    def to_json(self) -> Dict[str, Any]:
        """
        Serialize the requirement to a JSON-compatible dictionary.

        Returns:
            JSON-safe representation with the source broken out by kind.
        """
        return {
            "name": self.name,
            "extras": list(self.extras),
            "marker": str(self.marker) if self.marker is not None else None,
            "source": source_to_json(self.source),
        }

    def __str__(self) -> str:
        # For display, not for writing requirements files
        rendered = f"{self.name}{_format_extras(self.extras)}"
        source = self.source
        if isinstance(source, RegistrySource):
            rendered += str(source.version)
            if source.index:
                rendered += f" (index: {source.index})"
        elif isinstance(source, UrlSource):
            rendered += f" @ {source.url}"
        elif isinstance(source, GitSource):
            git = str(source.git)
            if not git.startswith("git+"):
                git = f"git+{git}"
            rendered += f" @ {git}"
            if source.reference is not None:
                rendered += f"@{source.reference}"
        elif isinstance(source, PathSource):
            rendered += f" @ {source.path}"
            if source.editable:
                rendered += " (editable)"
        elif isinstance(source, WorkspaceSource):
            rendered += " (workspace)"
        return rendered + _format_marker(self.marker)


@dataclass(frozen=True)
class UvRequirements:
    """Lowered ``dependencies`` and ``optional-dependencies`` of a project.

    ``optional_dependencies`` keeps the manifest's insertion order.
    """

    dependencies: Tuple[UvRequirement, ...] = ()
    optional_dependencies: Dict[ExtraName, Tuple[UvRequirement, ...]] = field(
        default_factory=dict
    )


@dataclass(frozen=True)
class RequirementsTxtRequirement:
    """A requirement as found in a requirements file, named or not."""

    requirement: Union[UvRequirement, UnnamedRequirement]

    @classmethod
    def parse(
        cls,
        text: str,
        working_dir: Optional[Union[str, Path]] = None,
    ) -> "RequirementsTxtRequirement":
        """Parse *text* as a named requirement, falling back to the unnamed
        grammar only when the named grammar reports an unsupported form.

        Raises:
            GrammarError: Neither grammar accepts the text.
        """
        from depsource.core.parser import parse_requirements_txt_requirement

        return parse_requirements_txt_requirement(text, working_dir)

    @property
    def name(self) -> Optional[PackageName]:
        if isinstance(self.requirement, UvRequirement):
            return self.requirement.name
        return None

    def name_or_url(self) -> str:
        """The package name, or the URL for unnamed requirements."""
        if isinstance(self.requirement, UvRequirement):
            return str(self.requirement.name)
        return str(self.requirement)

    def evaluate_markers(
        self,
        environment: MarkerEnvironment,
        extras: Tuple[ExtraName, ...] = (),
    ) -> bool:
        return self.requirement.evaluate_markers(environment, extras)

    def extras(self) -> Tuple[ExtraName, ...]:
        return self.requirement.extras

    def markers(self) -> Optional[Marker]:
        return self.requirement.marker

    def source(self) -> UvSource:
        if isinstance(self.requirement, UvRequirement):
            return self.requirement.source
        return UrlSource(url=self.requirement.url)

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "extras": list(self.extras()),
            "marker": str(self.markers()) if self.markers() is not None else None,
            "source": source_to_json(self.source()),
        }

    def __str__(self) -> str:
        return str(self.requirement)
