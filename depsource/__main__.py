"""
Executable module for depsource.

Running:
    python -m depsource

is equivalent to:
    depsource

This module simply forwards execution to the CLI entrypoint defined in
`depsource.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Report a CLI import failure on stderr."""
    sys.stderr.write("depsource CLI could not be loaded.\n")
    sys.stderr.write(f"Python version   : {sys.version}\n")
    try:
        from depsource.__version__ import __version__
    except ImportError:
        __version__ = "<unknown>"
    sys.stderr.write(f"depsource version: {__version__}\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m depsource`.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from depsource.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
