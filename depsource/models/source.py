"""
Source data models for depsource.

Two families live here:

- :data:`UvSource`: the lowered, resolver-ready provenance of a
  requirement. Exactly one variant describes where the artifact comes
  from.
- :class:`Source`: a raw ``[tool.<name>.sources]`` entry before
  validation. It records which keys were present; :attr:`Source.kind`
  classifies them against :data:`~depsource.constants.SOURCE_SHAPES`
  and is ``None`` when the combination matches no single shape.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from packaging.specifiers import SpecifierSet

from depsource.constants import (
    DEFAULT_PATH_EDITABLE,
    DEFAULT_WORKSPACE_EDITABLE,
    GIT_REFERENCE_KEYS,
    SOURCE_SHAPES,
)
from depsource.exceptions import ManifestError
from depsource.models.url import VerbatimUrl

#: Every key that may appear in a source table.
RECOGNIZED_SOURCE_KEYS: FrozenSet[str] = frozenset().union(
    *(required | optional for required, optional in SOURCE_SHAPES.values())
)

_BOOLEAN_KEYS = frozenset({"editable", "workspace"})


# ---------------------------------------------------------------------------
# Lowered sources
# ---------------------------------------------------------------------------


class GitReferenceKind(str, enum.Enum):
    REV = "rev"
    TAG = "tag"
    BRANCH = "branch"


@dataclass(frozen=True)
class GitReference:
    """A single git ref selector (``rev``, ``tag`` or ``branch``)."""

    kind: GitReferenceKind
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RegistrySource:
    """Resolve from a package index, constrained by *version*."""

    version: SpecifierSet = field(default_factory=SpecifierSet)
    index: Optional[str] = None


@dataclass(frozen=True)
class UrlSource:
    """Fetch a direct URL (archive or wheel)."""

    url: VerbatimUrl


@dataclass(frozen=True)
class GitSource:
    """Clone a git repository, optionally at a specific reference."""

    git: VerbatimUrl
    reference: Optional[GitReference] = None


@dataclass(frozen=True)
class PathSource:
    """Build from a local directory or archive."""

    path: str
    editable: bool = DEFAULT_PATH_EDITABLE


@dataclass(frozen=True)
class WorkspaceSource:
    """Use a member of the current workspace.

    ``path`` is filled in from the workspace membership map when known.
    """

    path: Optional[str] = None
    editable: bool = DEFAULT_WORKSPACE_EDITABLE


UvSource = Union[RegistrySource, UrlSource, GitSource, PathSource, WorkspaceSource]


# ---------------------------------------------------------------------------
# Raw overrides
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Source:
    """A ``[tool.<name>.sources]`` entry as written, prior to lowering.

    Every recognized key is optional here; :attr:`kind` reports which
    shape the present keys form. A ``None`` kind stands for the
    catch-all state: the keys cannot be combined, and lowering reports
    them all in one error.
    """

    git: Optional[str] = None
    rev: Optional[str] = None
    tag: Optional[str] = None
    branch: Optional[str] = None
    url: Optional[str] = None
    path: Optional[str] = None
    editable: Optional[bool] = None
    index: Optional[str] = None
    workspace: Optional[bool] = None

    @classmethod
    def from_table(cls, table: Mapping[str, Any], *, key: str = "source") -> "Source":
        """Build a :class:`Source` from a TOML table.

        Args:
            table: The parsed table for one package.
            key: Dotted key path used in error messages.

        Raises:
            ManifestError: The table contains unknown keys or values of the
                wrong type.
        """
        if not isinstance(table, Mapping):
            raise ManifestError(
                f"Expected a table, got {type(table).__name__}", key=key
            )

        unknown = set(table) - RECOGNIZED_SOURCE_KEYS
        if unknown:
            raise ManifestError(
                f"Unknown source keys: {', '.join(sorted(unknown))}", key=key
            )

        for name, value in table.items():
            expected = bool if name in _BOOLEAN_KEYS else str
            if not isinstance(value, expected):
                raise ManifestError(
                    f"`{name}` must be a {expected.__name__}, "
                    f"got {type(value).__name__}",
                    key=f"{key}.{name}",
                )

        return cls(**dict(table))

    @property
    def present_keys(self) -> Tuple[str, ...]:
        """Keys that were set, in declaration order."""
        return tuple(
            name
            for name in self.__dataclass_fields__
            if getattr(self, name) is not None
        )

    @property
    def kind(self) -> Optional[str]:
        """The matching key of ``SOURCE_SHAPES``, or ``None`` on conflict."""
        present = frozenset(self.present_keys)
        matches = [
            kind
            for kind, (required, optional) in SOURCE_SHAPES.items()
            if required <= present and present <= (required | optional)
        ]
        return matches[0] if len(matches) == 1 else None

    @property
    def git_reference_keys(self) -> Tuple[str, ...]:
        return tuple(
            name for name in GIT_REFERENCE_KEYS if getattr(self, name) is not None
        )


_SOURCE_KINDS = {
    RegistrySource: "registry",
    UrlSource: "url",
    GitSource: "git",
    PathSource: "path",
    WorkspaceSource: "workspace",
}


def source_kind(source: UvSource) -> str:
    """Return the short kind label of a lowered source (``"git"``, ...)."""
    return _SOURCE_KINDS[type(source)]


def source_to_json(source: UvSource) -> Dict[str, Any]:
    """Serialize a lowered source to a JSON-compatible dictionary."""
    data: Dict[str, Any] = {"kind": source_kind(source)}
    if isinstance(source, RegistrySource):
        data["version"] = str(source.version)
        data["index"] = source.index
    elif isinstance(source, UrlSource):
        data["url"] = source.url.url
    elif isinstance(source, GitSource):
        data["git"] = source.git.url
        if source.reference is not None:
            data[source.reference.kind.value] = source.reference.value
    else:  # path or workspace
        data["path"] = source.path
        data["editable"] = source.editable
    return data
