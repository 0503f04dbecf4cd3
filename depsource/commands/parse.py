"""Parse command implementation for depsource.

Parses a pip-style ``requirements.txt`` and shows the requirements that
apply to a target environment. Named requirements are shown with their
registry or URL source; bare URLs and paths are shown as unnamed URL
requirements.

Typical usage::

    $ depsource parse requirements.txt

    # Evaluate markers for another platform and interpreter
    $ depsource parse requirements.txt --target aarch64-apple-darwin --python-version 3.9

    $ depsource parse requirements.txt --extra socks --format json
"""

from __future__ import annotations

import json
import click
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from rich.markup import escape

from depsource.core import RequirementEntry, RequirementsTxtParser, evaluate_markers
from depsource.context import DepSourceContext, pass_context
from depsource.models import MarkerEnvironment, TargetTriple, source_kind
from depsource.utils import (
    get_logger,
    print_success,
    print_table,
    safe_read_file,
    style_source_kind,
)

logger = get_logger("commands.parse")


@click.command()
@click.argument(
    "requirements",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default="requirements.txt",
)
@click.option(
    "--target",
    type=click.Choice([triple.value for triple in TargetTriple]),
    default=None,
    help="Evaluate markers for this target triple instead of the host.",
)
@click.option(
    "--python-version",
    default=None,
    metavar="X.Y",
    help="Evaluate markers for this Python version instead of the running one.",
)
@click.option(
    "--extra",
    "extras",
    multiple=True,
    metavar="EXTRA",
    help="Treat `extra == EXTRA` markers as true (can be repeated).",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def parse(
    ctx: DepSourceContext,
    requirements: Path,
    target: Optional[str],
    python_version: Optional[str],
    extras: Tuple[str, ...],
    format: str,
) -> None:
    """Parse a requirements file and show the entries that apply.

    Relative paths in the file are resolved against its directory.
    Option lines such as ``-r`` or ``--index-url`` are skipped.
    """
    environment = _build_environment(target, python_version)
    logger.debug("Marker environment: %s", environment.to_dict())

    text = safe_read_file(requirements)
    parser = RequirementsTxtParser()
    entries = parser.parse_string(
        text,
        working_dir=requirements.resolve().parent,
        source_file_path=str(requirements),
    )

    applicable = [
        entry
        for entry in entries
        if evaluate_markers(entry.requirement, environment, extras)
    ]
    skipped = len(entries) - len(applicable)
    if skipped:
        logger.info("Skipped %d requirement(s) whose markers do not apply", skipped)

    if format == "json":
        _display_json(applicable)
    else:
        _display_table(applicable, skipped)


def _build_environment(
    target: Optional[str], python_version: Optional[str]
) -> MarkerEnvironment:
    environment = MarkerEnvironment.current()
    if target is not None:
        environment = environment.for_target(TargetTriple(target))
    if python_version is not None:
        if not all(part.isdigit() for part in python_version.split(".")):
            raise click.BadParameter(
                f"invalid Python version {python_version!r}",
                param_hint="--python-version",
            )
        environment = environment.with_python_version(python_version)
    return environment


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(entries: List[RequirementEntry], skipped: int) -> None:
    if not entries:
        print_success("No requirements apply to the target environment")
        return

    data = [_create_table_row(entry) for entry in entries]
    column_styles: Dict[str, Dict[str, Any]] = {
        "Line": {"justify": "right", "style": "dim", "no_wrap": True},
        "Requirement": {"style": "bold cyan"},
        "Source": {"justify": "center", "no_wrap": True},
        "Flags": {"justify": "left"},
    }
    print_table(
        data,
        title="Requirements",
        caption=f"{skipped} skipped by markers" if skipped else None,
        column_styles=column_styles,
    )


def _create_table_row(entry: RequirementEntry) -> Dict[str, str]:
    flags = []
    if entry.editable:
        flags.append("editable")
    if entry.hashes:
        flags.append(f"{len(entry.hashes)} hash(es)")
    return {
        "Line": str(entry.line_number),
        "Requirement": escape(str(entry.requirement)),
        "Source": style_source_kind(source_kind(entry.requirement.source())),
        "Flags": ", ".join(flags),
    }


def _display_json(entries: List[RequirementEntry]) -> None:
    data = []
    for entry in entries:
        item = entry.requirement.to_json()
        item.update(
            {
                "line": entry.line_number,
                "editable": entry.editable,
                "hashes": list(entry.hashes),
            }
        )
        data.append(item)
    print(json.dumps(data, indent=2))
