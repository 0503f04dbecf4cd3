"""Static requirement extraction from ``pyproject.toml``.

Only the manifest subset relevant to requirements is modelled:

- ``[project]``: ``name``, ``dependencies``, ``optional-dependencies``,
  ``dynamic``.
- ``[tool.<name>.sources]``: per-package source overrides.
- ``[tool.<name>.workspace]``: member and exclude glob patterns.

:meth:`UvMetadata.try_from` decides whether the requirements can be read
statically. When they cannot (no ``[project]`` table, or the relevant
fields are ``dynamic``) it returns ``None`` so the caller can fall back to
a build backend, unless source overrides exist: overrides that cannot be
applied are an error.

Typical usage::

    pyproject = PyProjectToml.from_string(text)
    metadata = UvMetadata.try_from(
        pyproject, ExtrasSpecification.some(["dev"]), {}, {}
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Set, Tuple

import tomli as tomllib

from depsource.constants import (
    DEFAULT_TOOL_NAME,
    DEFAULT_WARN_MISSING_EXTRAS,
    DYNAMIC_DEPENDENCIES,
    DYNAMIC_OPTIONAL_DEPENDENCIES,
)
from depsource.core.extras import ExtrasSpecification, flatten_extra
from depsource.core.lowering import SourceMap, WorkspacePackages, lower_requirements
from depsource.core.parser import WorkingDir
from depsource.exceptions import ManifestError, MissingEntryError
from depsource.models.names import (
    ExtraName,
    PackageName,
    normalize_extra_name,
    normalize_package_name,
)
from depsource.models.requirement import UvRequirement
from depsource.models.source import Source
from depsource.utils.logger import get_logger

logger = get_logger("pyproject")


def _string_list(value: Any, key: str) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestError("Expected a list of strings", key=key)
    return tuple(value)


def _table(value: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise ManifestError(f"Expected a table, got {type(value).__name__}", key=key)
    return value


@dataclass(frozen=True)
class Project:
    """PEP 621 ``[project]`` metadata relevant to static requirements."""

    name: PackageName
    dependencies: Optional[Tuple[str, ...]] = None
    optional_dependencies: Optional[Dict[ExtraName, Tuple[str, ...]]] = None
    dynamic: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_table(cls, table: Mapping[str, Any]) -> "Project":
        name = table.get("name")
        if not isinstance(name, str) or not name:
            raise ManifestError("`project.name` is required", key="project.name")

        dependencies = None
        if "dependencies" in table:
            dependencies = _string_list(table["dependencies"], "project.dependencies")

        optional_dependencies = None
        if "optional-dependencies" in table:
            groups = _table(table["optional-dependencies"], "project.optional-dependencies")
            optional_dependencies = {}
            for raw_extra, entries in groups.items():
                key = f"project.optional-dependencies.{raw_extra}"
                extra = normalize_extra_name(raw_extra)
                if extra in optional_dependencies:
                    raise ManifestError(f"Duplicate extra `{extra}`", key=key)
                optional_dependencies[extra] = _string_list(entries, key)

        dynamic = None
        if "dynamic" in table:
            dynamic = _string_list(table["dynamic"], "project.dynamic")

        return cls(
            name=normalize_package_name(name),
            dependencies=dependencies,
            optional_dependencies=optional_dependencies,
            dynamic=dynamic,
        )

    def is_dynamic(self, field_name: str) -> bool:
        return self.dynamic is not None and field_name in self.dynamic


@dataclass(frozen=True)
class WorkspaceSettings:
    """``[tool.<name>.workspace]`` glob patterns, not yet expanded."""

    members: Optional[Tuple[str, ...]] = None
    exclude: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class PyProjectToml:
    """The parts of a ``pyproject.toml`` that requirement lowering reads."""

    project: Optional[Project] = None
    sources: Optional[Dict[PackageName, Source]] = None
    workspace: Optional[WorkspaceSettings] = None
    tool_name: str = DEFAULT_TOOL_NAME

    @classmethod
    def from_string(cls, text: str, *, tool_name: str = DEFAULT_TOOL_NAME) -> "PyProjectToml":
        """Parse manifest text.

        Raises:
            ManifestError: Invalid TOML or a value of the wrong shape.
        """
        try:
            raw = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ManifestError(f"Invalid TOML: {exc}") from exc
        return cls.from_dict(raw, tool_name=tool_name)

    @classmethod
    def from_dict(
        cls, raw: Mapping[str, Any], *, tool_name: str = DEFAULT_TOOL_NAME
    ) -> "PyProjectToml":
        project = None
        if "project" in raw:
            project = Project.from_table(_table(raw["project"], "project"))

        prefix = f"tool.{tool_name}"
        tool = _table(raw.get("tool", {}), "tool")
        settings = _table(tool.get(tool_name, {}), prefix)

        sources = None
        if "sources" in settings:
            sources = parse_sources(
                _table(settings["sources"], f"{prefix}.sources"), key=f"{prefix}.sources"
            )

        workspace = None
        if "workspace" in settings:
            table = _table(settings["workspace"], f"{prefix}.workspace")
            workspace = WorkspaceSettings(
                members=(
                    _string_list(table["members"], f"{prefix}.workspace.members")
                    if "members" in table
                    else None
                ),
                exclude=(
                    _string_list(table["exclude"], f"{prefix}.workspace.exclude")
                    if "exclude" in table
                    else None
                ),
            )

        return cls(project=project, sources=sources, workspace=workspace, tool_name=tool_name)


def parse_sources(table: Mapping[str, Any], *, key: str = "sources") -> Dict[PackageName, Source]:
    """Parse a sources table into overrides keyed by normalized name.

    Used for both project and workspace ``sources`` tables.
    """
    sources: Dict[PackageName, Source] = {}
    for raw_name, entry in table.items():
        name = normalize_package_name(raw_name)
        if name in sources:
            raise ManifestError(f"Duplicate source for `{name}`", key=f"{key}.{raw_name}")
        sources[name] = Source.from_table(entry, key=f"{key}.{raw_name}")
    return sources


@dataclass(frozen=True)
class UvMetadata:
    """Static project requirements joined with their source overrides.

    Attributes:
        name: The project's normalized name.
        requirements: Base requirements followed by the flattened
            requirements of each requested extra.
        used_extras: Requested extras that the project defines.
    """

    name: PackageName
    requirements: Tuple[UvRequirement, ...] = ()
    used_extras: FrozenSet[ExtraName] = field(default_factory=frozenset)

    @classmethod
    def try_from(
        cls,
        pyproject: PyProjectToml,
        extras: ExtrasSpecification,
        workspace_sources: SourceMap,
        workspace_packages: WorkspacePackages,
        *,
        working_dir: WorkingDir = None,
        warn_missing_extras: bool = DEFAULT_WARN_MISSING_EXTRAS,
    ) -> Optional["UvMetadata"]:
        """Extract static metadata, if possible.

        Returns:
            The metadata, or ``None`` when requirements must be obtained
            dynamically and no source overrides are involved.

        Raises:
            MissingEntryError: Overrides exist but the static entries they
                would apply to are missing or dynamic.
            GrammarError, LoweringError: A requirement is invalid.
        """
        has_sources = pyproject.sources is not None or bool(workspace_sources)

        def unavailable(entry: str) -> None:
            if has_sources:
                raise MissingEntryError(entry)
            logger.debug("Static metadata unavailable: %s is missing or dynamic", entry)

        project = pyproject.project
        if project is None:
            unavailable("[project]")
            return None
        if project.is_dynamic(DYNAMIC_DEPENDENCIES):
            unavailable("[project.dependencies]")
            return None
        if not extras.is_empty() and project.is_dynamic(DYNAMIC_OPTIONAL_DEPENDENCIES):
            unavailable("[project.optional-dependencies]")
            return None

        optional_dependencies = project.optional_dependencies or {}
        lowered = lower_requirements(
            project.dependencies or (),
            optional_dependencies,
            pyproject.sources or {},
            workspace_sources,
            workspace_packages,
            working_dir=working_dir,
            tool_name=pyproject.tool_name,
        )

        requirements: List[UvRequirement] = list(lowered.dependencies)
        used_extras: Set[ExtraName] = set()
        if not extras.is_empty():
            for extra, group in lowered.optional_dependencies.items():
                if extras.contains(extra):
                    used_extras.add(extra)
                    requirements.extend(
                        flatten_extra(
                            project.name, group, lowered.optional_dependencies
                        )
                    )
            _report_missing_extras(project.name, extras, optional_dependencies, warn_missing_extras)

        return cls(
            name=project.name,
            requirements=tuple(requirements),
            used_extras=frozenset(used_extras),
        )


def _report_missing_extras(
    name: PackageName,
    extras: ExtrasSpecification,
    defined: Mapping[ExtraName, Any],
    warn: bool,
) -> None:
    missing = sorted(extra for extra in extras.extras if extra not in defined)
    if not missing:
        return
    log = logger.warning if warn else logger.debug
    log("Requested extras not defined by %s: %s", name, ", ".join(missing))
