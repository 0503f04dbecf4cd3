"""Lowering of parsed requirements into resolver-ready requirements.

Lowering combines a :class:`~depsource.models.Requirement` with the source
overrides that apply to it:

1. The project's ``[tool.<name>.sources]`` entry, else the workspace's.
2. Workspace membership: a requirement on a workspace member must opt in
   with ``workspace = true``, so a local package is never silently
   resolved from an index that happens to carry the same name.
3. Without an override, a bare name is ambiguous and rejected; a version
   range or direct URL is used as written.
4. With an override, its shape decides the :data:`UvSource` variant; an
   inline version range or direct URL on the requirement is not used.

Every function here is pure: override maps are passed in explicitly and
never mutated, so lowering different packages concurrently is safe.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Union

from depsource.constants import DEFAULT_TOOL_NAME, DEFAULT_WORKSPACE_EDITABLE
from depsource.core.parser import WorkingDir, parse_requirement
from depsource.exceptions import (
    DepSourceError,
    GrammarError,
    LoweringError,
    PolicyError,
    SourceConflictError,
    UnsupportedSourceError,
)
from depsource.models.names import ExtraName, PackageName
from depsource.models.requirement import Requirement, UvRequirement, UvRequirements
from depsource.models.source import (
    GitReference,
    GitReferenceKind,
    GitSource,
    Source,
    UrlSource,
    UvSource,
    WorkspaceSource,
)
from depsource.models.url import VerbatimUrl
from depsource.utils.logger import get_logger

logger = get_logger("lowering")

SourceMap = Mapping[PackageName, Source]
WorkspacePackages = Mapping[PackageName, Union[str, Path]]


def lower_requirement(
    requirement: Requirement,
    project_sources: SourceMap,
    workspace_sources: SourceMap,
    workspace_packages: WorkspacePackages,
    *,
    tool_name: str = DEFAULT_TOOL_NAME,
) -> UvRequirement:
    """Combine *requirement* with its source override, if any.

    Maps are keyed by normalized package name.

    Raises:
        PolicyError: A workspace member is used without ``workspace = true``,
            ``workspace = true`` names a non-member, or a bare name has no
            override.
        SourceConflictError: The override combines incompatible keys or sets
            more than one git reference.
        UnsupportedSourceError: The override is a ``path``, ``index`` or
            ``workspace = false`` source.
        GrammarError: A URL in the override is malformed.
    """
    name = requirement.name
    source = project_sources.get(name)
    if source is None:
        source = workspace_sources.get(name)

    uses_workspace = (
        source is not None and source.kind == "workspace" and source.workspace is True
    )
    if name in workspace_packages and not uses_workspace:
        raise PolicyError(
            f"`{name}` is a workspace package; to use it, add "
            f"`{name} = {{ workspace = true }}` to `tool.{tool_name}.sources`",
            package=name,
        )

    if source is None:
        if requirement.version_or_url is None:
            raise PolicyError(
                f"`{name}` needs a version constraint or an entry in "
                f"`tool.{tool_name}.sources`",
                package=name,
            )
        logger.debug("Lowered %s from its inline specification", name)
        return UvRequirement.from_requirement(requirement)

    if requirement.url is not None:
        logger.debug(
            "%s: direct URL %s is not used by its source override",
            name,
            requirement.url.given,
        )
    elif requirement.specifier is not None:
        logger.debug(
            "%s: version specifiers %s are not used by its source override",
            name,
            requirement.specifier,
        )

    try:
        lowered = _lower_source(name, source, workspace_packages, tool_name)
    except GrammarError as exc:
        exc.details["package"] = name
        raise

    logger.debug("Lowered %s to %s", name, type(lowered).__name__)
    return UvRequirement(
        name=name,
        source=lowered,
        extras=requirement.extras,
        marker=requirement.marker,
    )


def _lower_source(
    name: PackageName,
    source: Source,
    workspace_packages: WorkspacePackages,
    tool_name: str,
) -> UvSource:
    kind = source.kind

    if kind is None:
        keys = source.present_keys
        raise SourceConflictError(
            f"You can't combine these options in `tool.{tool_name}.sources` "
            f"for `{name}`: {', '.join(keys) or '<none>'}",
            package=name,
            keys=keys,
        )

    if kind == "git":
        references = source.git_reference_keys
        if len(references) > 1:
            raise SourceConflictError(
                f"You can only use one of rev, tag or branch for `{name}`",
                package=name,
                keys=references,
            )
        reference: Optional[GitReference] = None
        if references:
            selector = references[0]
            reference = GitReference(
                kind=GitReferenceKind(selector), value=getattr(source, selector)
            )
        assert source.git is not None
        return GitSource(git=VerbatimUrl.from_url(source.git), reference=reference)

    if kind == "url":
        assert source.url is not None
        return UrlSource(url=VerbatimUrl.from_url(source.url))

    if kind == "workspace":
        if not source.workspace:
            raise UnsupportedSourceError(
                f"`workspace = false` for `{name}` is not supported yet", package=name
            )
        if name not in workspace_packages:
            raise PolicyError(
                f"`{name}` uses `workspace = true` but is not a workspace member",
                package=name,
            )
        return WorkspaceSource(
            path=str(workspace_packages[name]),
            editable=(
                DEFAULT_WORKSPACE_EDITABLE
                if source.editable is None
                else source.editable
            ),
        )

    # path and registry overrides
    raise UnsupportedSourceError(
        f"`{kind}` sources in `tool.{tool_name}.sources` are not supported yet "
        f"(used by `{name}`)",
        package=name,
    )


def lower_requirements(
    dependencies: Sequence[str],
    optional_dependencies: Mapping[ExtraName, Sequence[str]],
    project_sources: SourceMap,
    workspace_sources: SourceMap,
    workspace_packages: WorkspacePackages,
    *,
    working_dir: WorkingDir = None,
    tool_name: str = DEFAULT_TOOL_NAME,
) -> UvRequirements:
    """Parse and lower every base and optional dependency of a project.

    Stops at the first failure. The error carries the requirement text
    and, for optional dependencies, the extra that declared it.
    """

    def lower_all(entries: Sequence[str], extra: Optional[ExtraName]) -> List[UvRequirement]:
        lowered = []
        for text in entries:
            try:
                requirement = parse_requirement(text, working_dir)
                lowered.append(
                    lower_requirement(
                        requirement,
                        project_sources,
                        workspace_sources,
                        workspace_packages,
                        tool_name=tool_name,
                    )
                )
            except DepSourceError as exc:
                exc.details["requirement"] = text
                if extra is not None:
                    exc.details["extra"] = extra
                    if isinstance(exc, LoweringError):
                        exc.extra = extra
                logger.debug("Failed to lower entry %r: %s", text, exc.message)
                raise
        return lowered

    return UvRequirements(
        dependencies=tuple(lower_all(dependencies, None)),
        optional_dependencies={
            extra: tuple(lower_all(entries, extra))
            for extra, entries in optional_dependencies.items()
        },
    )
