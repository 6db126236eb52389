"""Resolve schema references in the API description into :class:`SchemaNode` trees.

The API description is an explicit input: a :class:`SchemaResolver` is built
once per generation pass around the parsed document and handed to every stage
that needs a schema. Named targets are memoised on the instance, so each
``components/schemas`` entry is examined at most once per pass.

Resolution rules:

* ``{"$ref": "#/components/schemas/Name"}`` becomes a ``NAMED`` node whose
  ``target`` is the resolved schema. Only ``#/components/schemas/`` references
  are accepted; anything else, a missing name, or a name that refers back to
  itself raises :class:`~infractl.exceptions.UnresolvedReference`.
* A composition (``allOf``/``anyOf``/``oneOf``) with exactly one member
  behaves as that member.
* A ``oneOf`` with several members becomes a ``ONE_OF`` node, except when
  every member is a single-valued string enum: that is an enum with one
  choice per member and becomes a ``STRING`` node.
* At most one reference hop combined with one collapse step is followed.
  Longer chains raise :class:`~infractl.exceptions.UnsupportedSchemaShape`
  instead of being followed indefinitely.

Named targets are resolved *shallowly*: their object properties are not
expanded, which keeps recursive types (a schema holding a list of itself)
from being walked.
"""

from __future__ import annotations

from typing import Any

from infractl.exceptions import UnresolvedReference, UnsupportedSchemaShape
from infractl.models import SchemaKind, SchemaNode

_SCHEMA_PREFIX = "#/components/schemas/"
_COMPOSITIONS = ("allOf", "anyOf", "oneOf")
_PRIMITIVES = {
    "boolean": SchemaKind.BOOLEAN,
    "integer": SchemaKind.INTEGER,
    "number": SchemaKind.NUMBER,
    "string": SchemaKind.STRING,
}

# Budget of one generation step: one reference hop plus one collapse.
_MAX_HOPS = 1
_MAX_COLLAPSES = 1


def lookup_pointer(document: dict[str, Any], ref: str) -> Any:
    """Resolve an internal JSON Pointer (``#/components/parameters/Limit``).

    Handles RFC 6901 escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Raises:
        UnresolvedReference: If the pointer is external or a segment is missing.
    """
    if not ref.startswith("#/"):
        raise UnresolvedReference(f"External $ref not supported: {ref}")

    current: Any = document
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            raise UnresolvedReference(f"Cannot resolve $ref '{ref}': '{segment}' not found")
    return current


class SchemaResolver:
    """Turns raw schema objects of one API description into :class:`SchemaNode` trees.

    Args:
        document: The parsed API description.

    Example::

        resolver = SchemaResolver(document)
        node = resolver.resolve({"$ref": "#/components/schemas/DiskCreate"})
        node.kind          # SchemaKind.NAMED
        node.target.kind   # SchemaKind.OBJECT
    """

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document
        self._schemas: dict[str, Any] = (document.get("components") or {}).get("schemas") or {}
        self._targets: dict[tuple[str, int, bool], SchemaNode] = {}

    @property
    def document(self) -> dict[str, Any]:
        return self._document

    def has_schema(self, name: str) -> bool:
        return name in self._schemas

    def describe(self, name: str) -> str:
        """Return the description of the named schema, or ``""``."""
        raw = self._schemas.get(name)
        if isinstance(raw, dict):
            return str(raw.get("description", ""))
        return ""

    def resolve(self, raw: Any, shallow: bool = False) -> SchemaNode:
        """Resolve *raw* (an inline schema or a ``$ref``) into a concrete node.

        Args:
            raw: The schema object as it appears in the document.
            shallow: Skip expanding object properties.

        Raises:
            UnresolvedReference: Missing or self-referential names.
            UnsupportedSchemaShape: Shapes outside the supported subset.
        """
        return self._resolve(raw, hops=0, collapses=0, chain=(), shallow=shallow)

    def resolve_object(self, raw: Any) -> SchemaNode | None:
        """Resolve a request-body schema down to its object node.

        Returns ``None`` when the body is not an object.
        """
        node = self.resolve(raw)
        if node.kind == SchemaKind.NAMED:
            assert node.target is not None
            name = node.name or ""
            node = self._expand(name, node.target)
        if node.kind != SchemaKind.OBJECT:
            return None
        return node

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _resolve(
        self,
        raw: Any,
        hops: int,
        collapses: int,
        chain: tuple[str, ...],
        shallow: bool,
    ) -> SchemaNode:
        if not isinstance(raw, dict):
            raise UnsupportedSchemaShape(f"Schema must be an object, got {type(raw).__name__}")

        if "$ref" in raw:
            return self._resolve_ref(raw, hops, collapses, chain)

        for key in _COMPOSITIONS:
            if key in raw:
                return self._resolve_composition(raw, key, hops, collapses, chain, shallow)

        description = str(raw.get("description", ""))
        type_name = raw.get("type")
        if isinstance(type_name, list):
            # OpenAPI 3.1 nullable form: ["string", "null"]
            non_null = [t for t in type_name if t != "null"]
            type_name = non_null[0] if len(non_null) == 1 else None
        if type_name is None and "properties" in raw:
            type_name = "object"

        if type_name in _PRIMITIVES:
            return SchemaNode(
                kind=_PRIMITIVES[type_name],
                format=str(raw.get("format", "") or ""),
                description=description,
                enum=list(raw.get("enum", []) or []),
            )

        if type_name == "array":
            if "items" not in raw:
                raise UnsupportedSchemaShape("Array schema without 'items'")
            items = self._resolve(raw["items"], 0, 0, chain, shallow=True)
            return SchemaNode(kind=SchemaKind.ARRAY, items=items, description=description)

        if type_name == "object":
            properties: dict[str, SchemaNode] = {}
            if not shallow:
                for prop_name, prop_raw in (raw.get("properties") or {}).items():
                    properties[prop_name] = self._resolve(prop_raw, 0, 0, chain, shallow=True)
            return SchemaNode(
                kind=SchemaKind.OBJECT,
                description=description,
                properties=properties,
                required=list(raw.get("required", []) or []),
            )

        raise UnsupportedSchemaShape(
            f"Schema has no supported type (type={raw.get('type')!r}, keys={sorted(raw)})"
        )

    def _resolve_ref(
        self,
        raw: dict[str, Any],
        hops: int,
        collapses: int,
        chain: tuple[str, ...],
    ) -> SchemaNode:
        ref = raw["$ref"]
        if not isinstance(ref, str) or not ref.startswith(_SCHEMA_PREFIX):
            raise UnresolvedReference(f"Unsupported schema reference: {ref!r}")
        name = ref[len(_SCHEMA_PREFIX):]
        if name in chain:
            raise UnresolvedReference(f"Schema '{name}' refers to itself")
        if name not in self._schemas:
            raise UnresolvedReference(f"Schema '{name}' is not defined in components/schemas")
        if hops >= _MAX_HOPS:
            raise UnsupportedSchemaShape(
                f"Reference chain through '{name}' is longer than one hop"
            )

        key = (name, collapses, True)
        target = self._targets.get(key)
        if target is None:
            target = self._resolve(
                self._schemas[name], hops + 1, collapses, chain + (name,), shallow=True
            )
            self._targets[key] = target

        return SchemaNode(
            kind=SchemaKind.NAMED,
            name=name,
            target=target,
            description=str(raw.get("description", "")) or target.description,
        )

    def _resolve_composition(
        self,
        raw: dict[str, Any],
        key: str,
        hops: int,
        collapses: int,
        chain: tuple[str, ...],
        shallow: bool,
    ) -> SchemaNode:
        members = raw[key]
        if not isinstance(members, list) or not members:
            raise UnsupportedSchemaShape(f"'{key}' must be a non-empty list")

        if len(members) == 1:
            if collapses >= _MAX_COLLAPSES:
                raise UnsupportedSchemaShape(
                    f"Nested single-member '{key}' compositions are not supported"
                )
            node = self._resolve(members[0], hops, collapses + 1, chain, shallow)
            description = str(raw.get("description", ""))
            if description:
                node = node.model_copy(update={"description": description})
            return node

        if key != "oneOf":
            raise UnsupportedSchemaShape(f"'{key}' with {len(members)} members is not supported")

        enum_values = _single_value_enums(members)
        if enum_values is not None:
            return SchemaNode(
                kind=SchemaKind.STRING,
                description=str(raw.get("description", "")),
                enum=enum_values,
            )

        variants = [self._resolve(member, 0, 0, chain, shallow=True) for member in members]
        return SchemaNode(
            kind=SchemaKind.ONE_OF,
            description=str(raw.get("description", "")),
            variants=variants,
            variant_labels=[_variant_label(m, i) for i, m in enumerate(members)],
        )

    def _expand(self, name: str, target: SchemaNode) -> SchemaNode:
        """Re-resolve a named object target with its properties expanded."""
        if target.kind != SchemaKind.OBJECT:
            return target
        return self._resolve(self._schemas[name], 1, 0, (name,), shallow=False)


def _single_value_enums(members: list[Any]) -> list[Any] | None:
    """Return the enum values when every member is ``{"type": "string", "enum": [v]}``."""
    values: list[Any] = []
    for member in members:
        if not isinstance(member, dict) or member.get("type") != "string":
            return None
        enum = member.get("enum")
        if not isinstance(enum, list) or len(enum) != 1:
            return None
        values.append(enum[0])
    return values


def _variant_label(member: Any, index: int) -> str:
    """Label of one ``oneOf`` member: its ``type`` tag, its ref name, or its position."""
    if isinstance(member, dict):
        tag = ((member.get("properties") or {}).get("type") or {}).get("enum")
        if isinstance(tag, list) and len(tag) == 1:
            return str(tag[0])
        ref = member.get("$ref")
        if isinstance(ref, str) and ref.startswith(_SCHEMA_PREFIX):
            return ref[len(_SCHEMA_PREFIX):]
    return f"variant{index}"
