"""
Unified data model exports for depsource.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``depsource.models`` instead of individual submodules.

Example:
    >>> from depsource.models import UvRequirement, GitSource, Source
"""

from __future__ import annotations

from depsource.models.environment import MarkerEnvironment, TargetTriple
from depsource.models.names import (
    ExtraName,
    PackageName,
    normalize_extra_name,
    normalize_package_name,
)
from depsource.models.requirement import (
    Requirement,
    RequirementsTxtRequirement,
    UnnamedRequirement,
    UvRequirement,
    UvRequirements,
)
from depsource.models.source import (
    GitReference,
    GitReferenceKind,
    GitSource,
    PathSource,
    RegistrySource,
    Source,
    UrlSource,
    UvSource,
    WorkspaceSource,
    source_kind,
    source_to_json,
)
from depsource.models.url import VerbatimUrl

__all__ = [
    # Names
    "ExtraName",
    "PackageName",
    "normalize_extra_name",
    "normalize_package_name",
    # Requirements
    "Requirement",
    "RequirementsTxtRequirement",
    "UnnamedRequirement",
    "UvRequirement",
    "UvRequirements",
    # Sources
    "GitReference",
    "GitReferenceKind",
    "GitSource",
    "PathSource",
    "RegistrySource",
    "Source",
    "UrlSource",
    "UvSource",
    "WorkspaceSource",
    "source_kind",
    "source_to_json",
    # Environment
    "MarkerEnvironment",
    "TargetTriple",
    "VerbatimUrl",
]
