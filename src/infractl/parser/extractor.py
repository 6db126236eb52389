"""Extract the parameters and request-body properties of one operation.

This is the last parser stage before the generator. For a single
:class:`~infractl.models.Operation` it produces an
:class:`~infractl.models.ExtractedFields` holding:

* **parameters** -- one per distinct name, merged from the path item and the
  operation (operation-level wins), with path parameters always required.
  Only path and query parameters are kept; header and cookie parameters
  have no flag.
* **properties** -- the members of the ``application/json`` request-body
  object. For PUT operations every name is rewritten to ``new_<name>`` so
  edit commands can say "you may supply a new X"; such a property is
  required when either spelling appears in the body's ``required`` list.

Both mappings are keyed and ordered by name; their sorted union is the
canonical argument order of the outbound API call.
"""

from __future__ import annotations

from typing import Any

from infractl.exceptions import UnsupportedSchemaShape
from infractl.models import (
    ExtractedFields,
    HTTPMethod,
    Operation,
    Parameter,
    ParameterLocation,
    Property,
)
from infractl.parser.resolver import SchemaResolver, lookup_pointer

JSON_CONTENT_TYPE = "application/json"
EDIT_PREFIX = "new_"
_SENT_LOCATIONS = frozenset({ParameterLocation.PATH.value, ParameterLocation.QUERY.value})


def extract_fields(operation: Operation, resolver: SchemaResolver) -> ExtractedFields:
    """Gather the parameters and body properties of *operation*.

    Args:
        operation: The operation to inspect.
        resolver: Resolver bound to the same API description.

    Returns:
        The extracted fields, sorted by name.

    Raises:
        UnresolvedReference: A parameter, body, or schema reference is dangling.
        UnsupportedSchemaShape: A parameter has no schema.
    """
    parameters = _extract_parameters(operation, resolver)
    properties = _extract_properties(operation, resolver)
    return ExtractedFields(
        parameters=dict(sorted(parameters.items())),
        properties=dict(sorted(properties.items())),
    )


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field).
    """
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden]
    merged.extend(op_params)
    return merged


def _extract_parameters(operation: Operation, resolver: SchemaResolver) -> dict[str, Parameter]:
    document = resolver.document
    raw_params = _merge_parameters(
        [_deref(document, p) for p in operation.raw.get("x-path-parameters", [])],
        [_deref(document, p) for p in operation.raw.get("parameters", []) or []],
    )

    parameters: dict[str, Parameter] = {}
    for raw in raw_params:
        name = raw.get("name", "")
        location_name = raw.get("in", "query")
        # Generated commands only send path and query parameters.
        if location_name not in _SENT_LOCATIONS:
            continue
        location = ParameterLocation(location_name)
        if "schema" not in raw:
            raise UnsupportedSchemaShape(
                f"Parameter '{name}' of {operation.operation_id or operation.path} has no schema"
            )
        node = resolver.resolve(raw["schema"])

        # Path parameters are always required.
        required = bool(raw.get("required", False)) or location == ParameterLocation.PATH
        parameters[name] = Parameter(
            name=name,
            schema_node=node,
            required=required,
            description=str(raw.get("description", "")) or node.description,
            location=location,
        )
    return parameters


def _extract_properties(operation: Operation, resolver: SchemaResolver) -> dict[str, Property]:
    body = operation.raw.get("requestBody")
    if not body:
        return {}
    body = _deref(resolver.document, body)
    media = (body.get("content") or {}).get(JSON_CONTENT_TYPE)
    if not isinstance(media, dict) or "schema" not in media:
        return {}

    node = resolver.resolve_object(media["schema"])
    if node is None:
        return {}

    is_edit = operation.method == HTTPMethod.PUT
    required_list = set(node.required)
    properties: dict[str, Property] = {}
    for name, prop_node in node.properties.items():
        field_name = f"{EDIT_PREFIX}{name}" if is_edit else name
        properties[field_name] = Property(
            name=field_name,
            schema_node=prop_node,
            required=name in required_list or field_name in required_list,
            description=prop_node.description,
        )
    return properties


def _deref(document: dict[str, Any], raw: Any) -> dict[str, Any]:
    """Follow a ``$ref`` to a reusable parameter or request body."""
    if isinstance(raw, dict) and "$ref" in raw:
        raw = lookup_pointer(document, raw["$ref"])
    if not isinstance(raw, dict):
        raise UnsupportedSchemaShape(f"Expected an object, got {type(raw).__name__}")
    return raw
