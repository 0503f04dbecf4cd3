"""
Command-line interface for depsource.

The ``depsource`` group loads configuration and logging once, then hands
a :class:`~depsource.context.DepSourceContext` to the ``lower`` and
``parse`` subcommands. :func:`main` maps failures to exit codes.
"""

from __future__ import annotations

import os
import sys
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from depsource.config import DepSourceConfig, load_config
from depsource.__version__ import __version__
from depsource.constants import CONFIG_ENV_VAR
from depsource.context import DepSourceContext
from depsource.exceptions import ConfigError, DepSourceError
from depsource.commands.lower import lower
from depsource.commands.parse import parse
from depsource.utils.logger import get_logger, setup_logging, verbosity_to_level
from depsource.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar=CONFIG_ENV_VAR,
)
@click.option(
    "--tool-name",
    default=None,
    metavar="NAME",
    help="Read source overrides from [tool.NAME] (overrides the configuration).",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="DEPSOURCE_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="depsource",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    tool_name: Optional[str],
    verbose: int,
    color: bool,
) -> None:
    """depsource: resolve where each project requirement comes from.

    \b
    Available commands:
      depsource lower              Lower pyproject.toml requirements
      depsource parse              Parse a requirements.txt file

    \b
    Examples:
      depsource lower --extra dev
      depsource parse requirements.txt --target x86_64-apple-darwin
      depsource --tool-name custom lower path/to/project
    """
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("depsource v%s, log level %s", __version__, logging.getLevelName(level))

    if tool_name is not None and not tool_name.strip():
        raise click.BadParameter("must not be empty", param_hint="--tool-name")

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    if tool_name is not None:
        loaded_config = replace(loaded_config, tool_name=tool_name.strip())

    ctx.obj = _build_context(loaded_config, config, verbose, color)
    _apply_color(color)


def _build_context(
    config: DepSourceConfig,
    config_path: Optional[Path],
    verbose: int,
    color: bool,
) -> DepSourceContext:
    depsource_ctx = DepSourceContext()
    depsource_ctx.config_path = config_path or config.source_path
    depsource_ctx.config = config
    depsource_ctx.verbose = verbose
    depsource_ctx.color = color

    logger.debug(
        "Config path: %s | tool table: [tool.%s]",
        depsource_ctx.config_path,
        config.tool_name,
    )
    return depsource_ctx


def _apply_color(color: bool) -> None:
    """Propagate the color choice through ``NO_COLOR`` and rebuild the console."""
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()


for _command in (lower, parse):
    cli.add_command(_command)


def main() -> int:
    """Main entry point for the depsource CLI.

    Returns:
        Exit code:
            0   Success
            1   Application error (invalid requirement, manifest or source)
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except DepSourceError as exc:
        print_error(str(exc))
        logger.debug("%s details: %s", type(exc).__name__, exc.details, exc_info=True)
        return 1

    except (KeyboardInterrupt, click.exceptions.Abort):
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
