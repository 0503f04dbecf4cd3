"""
Core functionality exports for depsource.

This module provides convenient access to the core subsystems of depsource.
Importing from here keeps user-facing imports clean and stable:

    from depsource.core import lower_requirement, UvMetadata
"""

from __future__ import annotations

from depsource.core.extras import ExtrasSpecification, flatten_extra
from depsource.core.lowering import lower_requirement, lower_requirements
from depsource.core.markers import evaluate_markers, filter_requirements
from depsource.core.parser import (
    RequirementEntry,
    RequirementsTxtParser,
    parse_requirement,
    parse_requirements_txt_requirement,
    parse_unnamed_requirement,
)
from depsource.core.pyproject import (
    Project,
    PyProjectToml,
    UvMetadata,
    WorkspaceSettings,
    parse_sources,
)

__all__ = [
    # Parsing
    "RequirementEntry",
    "RequirementsTxtParser",
    "parse_requirement",
    "parse_requirements_txt_requirement",
    "parse_unnamed_requirement",
    # Lowering
    "lower_requirement",
    "lower_requirements",
    # Extras and markers
    "ExtrasSpecification",
    "flatten_extra",
    "evaluate_markers",
    "filter_requirements",
    # Manifests
    "Project",
    "PyProjectToml",
    "UvMetadata",
    "WorkspaceSettings",
    "parse_sources",
]
