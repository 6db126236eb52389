"""Map resolved schema nodes to type tokens.

:func:`map_type` is pure and total over the supported schema shapes. The
tokens form a tagged union (:class:`~infractl.models.ScalarType`,
:class:`~infractl.models.ListType`, :class:`~infractl.models.OptionalType`,
:class:`~infractl.models.NamedType`), so later stages ask ``token.is_optional``
instead of inspecting rendered type names.

Scalar token names:

========  =====================================================
Token     Schema
========  =====================================================
bool      ``boolean``
i8..i64   ``integer`` with ``int8``..``int64`` (``i64`` when no format)
u8..u64   ``integer`` with ``uint8``..``uint64`` (``u32`` for ``uint``)
f64       ``number`` with ``float``/``double``/no format
str       ``string`` with no format, ``password``, ``hostname``, ``email``,
          ``uri-template``
datetime  ``string`` / ``date-time``
date      ``string`` / ``date``
time      ``string`` / ``time``
bytes     ``string`` / ``byte`` or ``binary``
uuid      ``string`` / ``uuid``
url       ``string`` / ``uri`` or ``url``
ipv4      ``string`` / ``ip`` or ``ipv4``
========  =====================================================
"""

from __future__ import annotations

from infractl.exceptions import UnsupportedFormat, UnsupportedSchemaShape
from infractl.models import (
    ListType,
    NamedType,
    OptionalType,
    ScalarType,
    SchemaKind,
    SchemaNode,
    TypeToken,
)

# Named types that need an interactive step before a value exists.
NETWORK_TYPES = frozenset({"Ipv4Net", "Ipv6Net"})

_INTEGER_FORMATS: dict[str, str] = {
    "": "i64",
    "int64": "i64",
    "int32": "i32",
    "int16": "i16",
    "int8": "i8",
    "uint": "u32",
    "uint8": "u8",
    "uint16": "u16",
    "uint32": "u32",
    "uint64": "u64",
}

_NUMBER_FORMATS: dict[str, str] = {
    "": "f64",
    "float": "f64",
    "double": "f64",
}

_STRING_FORMATS: dict[str, str] = {
    "": "str",
    "password": "str",
    "hostname": "str",
    "email": "str",
    "uri-template": "str",
    "date-time": "datetime",
    "date": "date",
    "time": "time",
    "byte": "bytes",
    "binary": "bytes",
    "uuid": "uuid",
    "uri": "url",
    "url": "url",
    "ip": "ipv4",
    "ipv4": "ipv4",
}


def map_type(node: SchemaNode, required: bool) -> TypeToken:
    """Convert *node* into a type token.

    Args:
        node: A node produced by :class:`~infractl.parser.resolver.SchemaResolver`.
        required: Whether the field holding the value is required. Optional
            fields are wrapped in :class:`~infractl.models.OptionalType`;
            lists never are.

    Returns:
        The type token.

    Raises:
        UnsupportedFormat: For an unrecognised integer, number, or string format.
        UnsupportedSchemaShape: For object schemas used as a field value.

    Example::

        >>> map_type(SchemaNode(kind=SchemaKind.INTEGER, format="uint32"), True)
        ScalarType(kind='scalar', name='u32')
    """
    token = _map(node)
    if token.is_optional or token.is_list or required:
        return token
    return OptionalType(inner=token)


def _map(node: SchemaNode) -> TypeToken:
    kind = node.kind

    if kind == SchemaKind.BOOLEAN:
        return ScalarType(name="bool")
    if kind in (SchemaKind.INTEGER, SchemaKind.NUMBER, SchemaKind.STRING):
        return ScalarType(name=_scalar_name(node))

    if kind == SchemaKind.ARRAY:
        assert node.items is not None
        element = _map(node.items)
        # Lists are never lists of optionals.
        return ListType(element=element.unwrap())

    if kind == SchemaKind.NAMED:
        assert node.target is not None and node.name is not None
        return _map_named(node.name, node.target)

    if kind == SchemaKind.ONE_OF:
        return OptionalType(
            inner=NamedType(name="OneOf", variants=tuple(node.variant_labels))
        )

    raise UnsupportedSchemaShape(f"Cannot use a '{kind.value}' schema as a field value")


def _map_named(name: str, target: SchemaNode) -> TypeToken:
    if target.kind == SchemaKind.ONE_OF:
        return OptionalType(inner=NamedType(name=name, variants=tuple(target.variant_labels)))

    scalar: str | None = None
    if target.kind == SchemaKind.BOOLEAN:
        scalar = "bool"
    elif target.kind in (SchemaKind.INTEGER, SchemaKind.NUMBER, SchemaKind.STRING):
        scalar = _scalar_name(target)

    choices = tuple(str(v) for v in target.enum) if target.kind == SchemaKind.STRING else ()
    token = NamedType(name=name, scalar=scalar, choices=choices)
    if name in NETWORK_TYPES:
        return OptionalType(inner=token)
    return token


def _scalar_name(node: SchemaNode) -> str:
    table = {
        SchemaKind.INTEGER: _INTEGER_FORMATS,
        SchemaKind.NUMBER: _NUMBER_FORMATS,
        SchemaKind.STRING: _STRING_FORMATS,
    }[node.kind]
    try:
        return table[node.format]
    except KeyError:
        raise UnsupportedFormat(
            f"Unsupported {node.kind.value} format '{node.format}'"
        ) from None
