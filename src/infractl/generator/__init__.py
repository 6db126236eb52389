"""Command generator -- turn API operations into CRUD command modules.

This sub-package is the second half of the infractl pipeline: it takes the
operations the parser collected for one resource tag and renders a Python
module of command classes that the runtime binds into Typer sub-commands.

Typical usage::

    from infractl.generator import generate_all
    from infractl.parser import load_api_description
    from infractl.resources import DECLARATIONS

    document = load_api_description("infra-api.json")
    generate_all(document, DECLARATIONS, Path("commands/"))

Sub-modules:

* :mod:`~infractl.generator.classifier` -- Decide which CRUD archetype an
  operation implements, if any.
* :mod:`~infractl.generator.type_mapper` -- Map resolved schemas to type
  tokens.
* :mod:`~infractl.generator.flags` and :mod:`~infractl.generator.naming` --
  Flag names, display names and class names.
* :mod:`~infractl.generator.synthesizer` -- Build one command descriptor
  per classified operation.
* :mod:`~infractl.generator.assembler` -- Render descriptors through the
  Jinja2 module template.
* :mod:`~infractl.generator.pipeline` -- Run a whole generation pass.
"""

from infractl.generator.assembler import assemble
from infractl.generator.classifier import classify
from infractl.generator.pipeline import generate_all, generate_resource, synthesize_resource
from infractl.generator.synthesizer import synthesize

__all__ = [
    "assemble",
    "classify",
    "generate_all",
    "generate_resource",
    "synthesize",
    "synthesize_resource",
]
