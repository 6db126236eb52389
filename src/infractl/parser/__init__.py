"""API description parser -- load, resolve schemas, and extract fields.

This sub-package is the first half of the generator pipeline: it turns the
raw OpenAPI document into the operations, schema nodes, parameters and
properties that :mod:`infractl.generator` turns into commands.

Typical usage::

    from infractl.parser import SchemaResolver, collect_operations, extract_fields
    from infractl.parser import load_api_description

    document = load_api_description("openapi.json")
    resolver = SchemaResolver(document)
    for op in collect_operations(document, "disks"):
        fields = extract_fields(op, resolver)

Sub-modules:

* :mod:`~infractl.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~infractl.parser.resolver` -- ``$ref`` resolution with composition
  collapsing and a bounded reference budget.
* :mod:`~infractl.parser.catalog` -- Operations of one resource tag.
* :mod:`~infractl.parser.extractor` -- Parameters and body properties of one
  operation.
"""

from infractl.parser.catalog import collect_operations, list_tags
from infractl.parser.extractor import extract_fields
from infractl.parser.loader import load_api_description, load_spec, validate_openapi_version
from infractl.parser.resolver import SchemaResolver

__all__ = [
    "SchemaResolver",
    "collect_operations",
    "extract_fields",
    "list_tags",
    "load_api_description",
    "load_spec",
    "validate_openapi_version",
]
