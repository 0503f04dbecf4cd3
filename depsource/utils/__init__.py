"""
Utility helpers for depsource.

This package provides reusable utilities used across depsource, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem helpers for the CLI

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from depsource.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from depsource.utils.filesystem import resolve_manifest_path, safe_read_file

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from depsource.utils.console import (
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
    style_source_kind,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    "style_source_kind",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "verbosity_to_level",
    # Filesystem
    "safe_read_file",
    "resolve_manifest_path",
]
