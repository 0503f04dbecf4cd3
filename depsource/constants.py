"""
Centralized constants for depsource.

This module defines immutable configuration values used across depsource,
including manifest keys, source override shapes, requirements-file
directives, and logging formats. All values are intended to be treated
as read-only.
"""

from typing import Final, FrozenSet, Mapping, Tuple

# ---------------------------------------------------------------------------
# Manifest layout
# ---------------------------------------------------------------------------

#: Tool table holding ``sources`` and ``workspace`` (``[tool.<name>]``).
DEFAULT_TOOL_NAME: Final[str] = "uv"

#: ``[project]`` field names that may be listed in ``project.dynamic``.
DYNAMIC_DEPENDENCIES: Final[str] = "dependencies"
DYNAMIC_OPTIONAL_DEPENDENCIES: Final[str] = "optional-dependencies"

# ---------------------------------------------------------------------------
# Source override shapes
# ---------------------------------------------------------------------------

#: Accepted shapes of a ``[tool.<name>.sources]`` entry, as
#: ``kind -> (required keys, optional keys)``. Every other key combination
#: is a conflict; the set of recognized keys is derived from this table.
SOURCE_SHAPES: Final[Mapping[str, Tuple[FrozenSet[str], FrozenSet[str]]]] = {
    "git": (frozenset({"git"}), frozenset({"rev", "tag", "branch"})),
    "url": (frozenset({"url"}), frozenset()),
    "path": (frozenset({"path"}), frozenset({"editable"})),
    "registry": (frozenset({"index"}), frozenset()),
    "workspace": (frozenset({"workspace"}), frozenset({"editable"})),
}

#: Keys that select a git reference; at most one may be set.
GIT_REFERENCE_KEYS: Final[Tuple[str, ...]] = ("rev", "tag", "branch")

#: Default of ``editable`` for ``path`` sources.
DEFAULT_PATH_EDITABLE: Final[bool] = False

#: Default of ``editable`` for ``workspace`` sources.
DEFAULT_WORKSPACE_EDITABLE: Final[bool] = True

# ---------------------------------------------------------------------------
# Requirements-file directives
# ---------------------------------------------------------------------------

#: Short editable-install directive.
EDITABLE_DIRECTIVE: Final[str] = "-e"

#: Long editable-install directive.
EDITABLE_DIRECTIVE_LONG: Final[str] = "--editable"

#: Hash-checking directive.
HASH_DIRECTIVE: Final[str] = "--hash"

#: Archive suffixes that mark a bare path or URL as a distribution file.
ARCHIVE_EXTENSIONS: Final[Tuple[str, ...]] = (
    ".whl",
    ".tar.gz",
    ".tar.bz2",
    ".tar.xz",
    ".tgz",
    ".zip",
)

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Log a warning (instead of a debug message) for undefined requested extras.
DEFAULT_WARN_MISSING_EXTRAS: Final[bool] = False

#: Environment variable holding an explicit configuration path.
CONFIG_ENV_VAR: Final[str] = "DEPSOURCE_CONFIG"

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading files from the CLI.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
