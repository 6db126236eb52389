"""Drive one generation pass over a set of resource declarations.

The pass is all-or-nothing: every declaration is rendered in memory first,
and files are written only once all of them succeeded. Any
:class:`~infractl.exceptions.GenerationError` propagates unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from infractl.config import atomic_write
from infractl.generator.assembler import assemble
from infractl.generator.classifier import classify
from infractl.generator.synthesizer import synthesize
from infractl.models import Archetype, CommandDescriptor, ResourceDeclaration
from infractl.output import debug, warning
from infractl.parser.catalog import collect_operations
from infractl.parser.extractor import extract_fields
from infractl.parser.resolver import SchemaResolver


def synthesize_resource(
    document: dict[str, Any],
    declaration: ResourceDeclaration,
    resolver: SchemaResolver | None = None,
) -> list[CommandDescriptor]:
    """Classify and synthesize every operation of one resource tag.

    Operations without an archetype are skipped. When two operations share
    an archetype the first in catalog order wins.
    """
    resolver = resolver or SchemaResolver(document)
    tag = declaration.tag
    seen: set[Archetype] = set()
    descriptors: list[CommandDescriptor] = []

    for operation in collect_operations(document, tag):
        archetype = classify(operation, tag)
        if archetype is None:
            debug(f"{tag}: skipping {operation.method.value.upper()} {operation.path}")
            continue
        if archetype in seen:
            warning(
                f"{tag}: {operation.operation_id} is a second '{archetype.value}' "
                "operation and was skipped"
            )
            continue
        seen.add(archetype)
        if archetype.value in declaration.variants:
            debug(f"{tag}: '{archetype.value}' is hand-written")
            continue

        fields = extract_fields(operation, resolver)
        descriptors.append(synthesize(archetype, operation, fields, tag))

    return descriptors


def generate_resource(document: dict[str, Any], declaration: ResourceDeclaration) -> str:
    """Render the module source of one resource.

    Args:
        document: The loaded API description.
        declaration: The resource to generate.

    Returns:
        The generated module source.

    Raises:
        GenerationError: If any operation of the resource cannot be
            synthesized.
    """
    return assemble(declaration, synthesize_resource(document, declaration))


def generate_all(
    document: dict[str, Any],
    declarations: Iterable[ResourceDeclaration],
    out_dir: Path,
) -> list[Path]:
    """Generate and write one module per declaration into *out_dir*.

    Returns:
        The written paths, in declaration order.

    Raises:
        GenerationError: If any declaration fails. Nothing is written.
    """
    rendered: dict[str, str] = {}
    for declaration in declarations:
        debug(f"Generating {declaration.tag} -> {declaration.module}.py")
        rendered[declaration.module] = generate_resource(document, declaration)

    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for module, source in rendered.items():
        path = out_dir / f"{module}.py"
        atomic_write(path, source)
        written.append(path)
    return written
