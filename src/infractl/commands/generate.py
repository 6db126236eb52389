"""Generate command -- render resource command modules from an API description.

Implements ``infractl generate``. It loads the OpenAPI description (from a
URL, local file, or stdin), runs the generator over every declared resource
(or only the tags given with ``--tag``), and writes one module per resource
into the commands directory, where the CLI picks them up on the next run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from infractl.config import get_commands_dir
from infractl.exceptions import InfractlError
from infractl.generator import generate_all
from infractl.generator.naming import command_group, display_plural, sanitize_identifier
from infractl.models import ResourceDeclaration
from infractl.output import debug, error, info, success, suggest
from infractl.parser import list_tags, load_api_description
from infractl.resources import DECLARATIONS, find_declaration
from infractl.runtime.context import get_context


def declarations_for(tags: Optional[list[str]]) -> list[ResourceDeclaration]:
    """The declarations to generate: all of them, or one per requested tag.

    A tag without a declaration gets a default one derived from its name.
    """
    if not tags:
        return list(DECLARATIONS)

    selected: list[ResourceDeclaration] = []
    for tag in tags:
        declaration = find_declaration(tag)
        if declaration is None:
            declaration = ResourceDeclaration(
                tag=tag,
                module=sanitize_identifier(tag),
                command=command_group(tag),
                help=f"Manage {display_plural(tag)}.",
            )
        selected.append(declaration)
    return selected


def generate_command(
    spec: str = typer.Option(
        ...,
        "--spec",
        "-s",
        help="OpenAPI description URL or file path (use '-' for stdin).",
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        help="Directory to write modules to (defaults to the commands directory).",
    ),
    tags: Optional[list[str]] = typer.Option(
        None,
        "--tag",
        "-t",
        help="Only generate this tag. Repeatable.",
    ),
) -> None:
    """Generate resource commands from an OpenAPI description.

    Every generated module is written only after all requested resources
    generated successfully.

    Args:
        spec: URL, local file path, or ``-`` for stdin.
        out: Output directory. Defaults to the commands directory resolved
            from ``INFRACTL_COMMANDS_DIR`` or the config file.
        tags: Restrict generation to these tags.

    Raises:
        typer.Exit: With the error's exit code if loading or generation
            fails.

    Example::

        infractl generate --spec infra-api.json --tag disks
    """
    out_dir = out or get_commands_dir(get_context().config)
    try:
        document = load_api_description(spec)
        known = set(list_tags(document))
        selected = declarations_for(tags)
        for declaration in selected:
            if declaration.tag not in known:
                debug(f"Tag '{declaration.tag}' has no operations in this description")
        written = generate_all(document, selected, out_dir)
    except InfractlError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    for path in written:
        info(f"  {path}")
    success(f"Generated {len(written)} resource module(s) in {out_dir}")
    suggest("Run 'infractl --help' to see the new commands.")
