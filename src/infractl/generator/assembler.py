"""Render synthesized commands into one Python module per resource.

The generated module holds, in this order:

* ``VARIANTS`` -- the subcommand names, hand-authored ones first;
* ``ROUTES`` -- the request route of each collaborator method;
* one class per synthesized :class:`~infractl.models.CommandDescriptor`;
* ``COMMANDS`` -- subcommand name to class, including hand-authored ones.

A descriptor whose command name the declaration already provides by hand is
skipped, so hand-written variants always win. Rendering is a pure function
of its inputs: the same declaration and descriptors always produce
byte-identical output.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from infractl.models import Archetype, CommandDescriptor, ResourceDeclaration, py_source

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""

RESOURCE_TEMPLATE = "resource.py.j2"

_BASES: dict[Archetype, str] = {
    Archetype.CREATE: "CreateCommand",
    Archetype.VIEW: "ViewCommand",
    Archetype.EDIT: "EditCommand",
    Archetype.LIST: "ListCommand",
    Archetype.DELETE: "DeleteCommand",
}


def assemble(
    declaration: ResourceDeclaration,
    descriptors: Sequence[CommandDescriptor],
) -> str:
    """Render the module source for one resource.

    Args:
        declaration: The resource declaration, including its hand-authored
            variants (``name -> "module:Class"``).
        descriptors: Synthesized commands, in generation order.

    Returns:
        The module source text.

    Example::

        >>> source = assemble(ResourceDeclaration(tag="disks", module="disks", command="disk"), [])
        >>> "VARIANTS = ()" in source
        True
    """
    variant_names = list(declaration.variants)
    classes: dict[str, str] = {}
    hand_variants = []
    for name, target in declaration.variants.items():
        module, _, cls = target.partition(":")
        hand_variants.append({"module": module, "cls": cls})
        classes[name] = cls

    generated: list[CommandDescriptor] = []
    for descriptor in descriptors:
        if descriptor.command_name in classes:
            continue
        variant_names.append(descriptor.command_name)
        classes[descriptor.command_name] = descriptor.class_name
        generated.append(descriptor)

    template = _create_jinja_env().get_template(RESOURCE_TEMPLATE)
    return template.render(
        tag=declaration.tag,
        command=declaration.command,
        help=declaration.help or f"Manage {declaration.command} resources.",
        hand_variants=hand_variants,
        variant_names=tuple(variant_names),
        descriptors=generated,
        classes=classes,
        bases=_BASES,
    )


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for module templates.

    Autoescape is off since the output is Python source. Undefined
    variables raise instead of rendering as empty strings.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["py"] = py_source
    env.filters["summary"] = _summary
    return env


def _summary(text: str) -> str:
    return text.split("\n", 1)[0]
