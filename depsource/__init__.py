"""
depsource: requirement source lowering for Python projects.

depsource turns the dependency declarations of a project into
resolver-ready requirements, each with its source decided:

    • PEP 508 requirement parsing, including unnamed URL/path requirements
    • ``[tool.uv.sources]`` overrides (git, URL, workspace members)
    • Self-referential extras flattening
    • Environment marker evaluation for arbitrary target triples
    • pip-style requirements.txt parsing

Typical usage:

    >>> from depsource import PyProjectToml, UvMetadata, ExtrasSpecification
    >>> pyproject = PyProjectToml.from_string(text)
    >>> metadata = UvMetadata.try_from(pyproject, ExtrasSpecification.none(), {}, {})
"""

from __future__ import annotations

from depsource.__version__ import __version__
from depsource.core import (
    ExtrasSpecification,
    PyProjectToml,
    RequirementsTxtParser,
    UvMetadata,
    lower_requirement,
    parse_requirement,
)
from depsource.exceptions import DepSourceError

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depsource Contributors"
__license__ = "Apache-2.0"
__description__ = "Requirement parsing and source lowering for Python projects."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
    "DepSourceError",
    "ExtrasSpecification",
    "PyProjectToml",
    "RequirementsTxtParser",
    "UvMetadata",
    "lower_requirement",
    "parse_requirement",
]
