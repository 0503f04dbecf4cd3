"""Lower command implementation for depsource.

Reads a project's ``pyproject.toml``, applies its ``[tool.<name>.sources]``
overrides and prints the resolver-ready requirements.

Typical usage::

    # Base requirements of the project in the current directory
    $ depsource lower

    # Include the ``dev`` extra, flattening self-references
    $ depsource lower path/to/pyproject.toml --extra dev

    # Machine-readable JSON output
    $ depsource lower --all-extras --format json > requirements.json
"""

from __future__ import annotations

import json
import click
from pathlib import Path
from typing import Any, Dict, List, Tuple

from rich.markup import escape

from depsource.core import ExtrasSpecification, PyProjectToml, UvMetadata
from depsource.context import DepSourceContext, pass_context
from depsource.models import UvRequirement, source_kind
from depsource.utils import (
    get_logger,
    print_success,
    print_table,
    print_warning,
    resolve_manifest_path,
    safe_read_file,
    style_source_kind,
)

logger = get_logger("commands.lower")


@click.command()
@click.argument(
    "pyproject",
    type=click.Path(exists=True, path_type=Path),
    default=".",
)
@click.option(
    "--extra",
    "extras",
    multiple=True,
    metavar="EXTRA",
    help="Include an optional dependency group (can be repeated).",
)
@click.option(
    "--all-extras",
    is_flag=True,
    help="Include every optional dependency group.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def lower(
    ctx: DepSourceContext,
    pyproject: Path,
    extras: Tuple[str, ...],
    all_extras: bool,
    format: str,
) -> None:
    """Lower the requirements of a pyproject.toml.

    PYPROJECT is a ``pyproject.toml`` file or a directory containing one
    (default: the current directory).

    When the requirements are ``dynamic`` and no source overrides are
    declared, they cannot be read statically; a notice is printed and the
    command exits with status 0.
    """
    if extras and all_extras:
        raise click.UsageError("--extra and --all-extras are mutually exclusive")

    manifest = resolve_manifest_path(pyproject)
    text = safe_read_file(manifest)

    tool_name = ctx.config.tool_name
    parsed = PyProjectToml.from_string(text, tool_name=tool_name)
    metadata = UvMetadata.try_from(
        parsed,
        ExtrasSpecification.from_args(extras, all_extras),
        {},
        {},
        working_dir=manifest.parent,
        warn_missing_extras=ctx.config.warn_missing_extras,
    )

    if metadata is None:
        print_warning(
            f"{manifest} declares its requirements dynamically; "
            "they must be obtained from the build backend"
        )
        return

    logger.info(
        "Lowered %d requirement(s) for %s", len(metadata.requirements), metadata.name
    )

    if format == "json":
        _display_json(metadata)
    else:
        _display_table(metadata)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(metadata: UvMetadata) -> None:
    if not metadata.requirements:
        print_success(f"{metadata.name} has no requirements")
        return

    data = [_create_table_row(requirement) for requirement in metadata.requirements]
    column_styles: Dict[str, Dict[str, Any]] = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Source": {"justify": "center", "no_wrap": True},
        "Details": {"justify": "left"},
        "Marker": {"style": "dim"},
    }
    caption = None
    if metadata.used_extras:
        caption = f"extras: {', '.join(sorted(metadata.used_extras))}"

    print_table(
        data,
        title=f"Requirements of {metadata.name}",
        caption=caption,
        column_styles=column_styles,
    )


def _create_table_row(requirement: UvRequirement) -> Dict[str, str]:
    name = requirement.name
    if requirement.extras:
        name += f"[{','.join(requirement.extras)}]"
    source = source_kind(requirement.source)
    # The display form repeats the name; keep only what follows it
    details = str(UvRequirement(name=requirement.name, source=requirement.source))
    details = details[len(requirement.name):].strip()
    return {
        "Package": escape(name),
        "Source": style_source_kind(source),
        "Details": escape(details) or "-",
        "Marker": (
            escape(str(requirement.marker)) if requirement.marker is not None else ""
        ),
    }


def _display_json(metadata: UvMetadata) -> None:
    data: Dict[str, Any] = {
        "name": metadata.name,
        "used_extras": sorted(metadata.used_extras),
        "requirements": _requirements_json(metadata.requirements),
    }
    print(json.dumps(data, indent=2))


def _requirements_json(requirements: Tuple[UvRequirement, ...]) -> List[Dict[str, Any]]:
    return [requirement.to_json() for requirement in requirements]
