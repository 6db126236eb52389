"""Tests for infractl.generator.type_mapper -- schema nodes to type tokens."""

from __future__ import annotations

from typing import Any

import pytest

from infractl.exceptions import UnsupportedFormat, UnsupportedSchemaShape
from infractl.generator.type_mapper import map_type
from infractl.models import (
    ListType,
    NamedType,
    OptionalType,
    ScalarType,
    SchemaKind,
    SchemaNode,
)
from infractl.parser.resolver import SchemaResolver


def _node(kind: SchemaKind, fmt: str = "") -> SchemaNode:
    return SchemaNode(kind=kind, format=fmt)


class TestScalars:
    @pytest.mark.parametrize(
        ("kind", "fmt", "expected"),
        [
            (SchemaKind.BOOLEAN, "", "bool"),
            (SchemaKind.INTEGER, "", "i64"),
            (SchemaKind.INTEGER, "uint32", "u32"),
            (SchemaKind.INTEGER, "uint", "u32"),
            (SchemaKind.INTEGER, "int8", "i8"),
            (SchemaKind.NUMBER, "double", "f64"),
            (SchemaKind.STRING, "", "str"),
            (SchemaKind.STRING, "date-time", "datetime"),
            (SchemaKind.STRING, "uuid", "uuid"),
            (SchemaKind.STRING, "uri", "url"),
            (SchemaKind.STRING, "ip", "ipv4"),
            (SchemaKind.STRING, "binary", "bytes"),
        ],
    )
    def test_required_scalar(self, kind: SchemaKind, fmt: str, expected: str) -> None:
        assert map_type(_node(kind, fmt), required=True) == ScalarType(name=expected)

    def test_optional_scalar_is_wrapped(self) -> None:
        token = map_type(_node(SchemaKind.STRING), required=False)
        assert token == OptionalType(inner=ScalarType(name="str"))
        assert token.is_optional

    def test_unknown_format_raises(self) -> None:
        with pytest.raises(UnsupportedFormat, match="integer format 'int128'"):
            map_type(_node(SchemaKind.INTEGER, "int128"), required=True)

    def test_object_value_raises(self) -> None:
        with pytest.raises(UnsupportedSchemaShape):
            map_type(_node(SchemaKind.OBJECT), required=True)


class TestCompound:
    def test_list_never_optional(self) -> None:
        node = SchemaNode(kind=SchemaKind.ARRAY, items=_node(SchemaKind.STRING, "uuid"))
        token = map_type(node, required=False)
        assert token == ListType(element=ScalarType(name="uuid"))
        assert not token.is_optional

    def test_named_primitive_alias(self, infra_api: dict[str, Any]) -> None:
        node = SchemaResolver(infra_api).resolve({"$ref": "#/components/schemas/ByteCount"})
        assert map_type(node, required=True) == NamedType(name="ByteCount", scalar="u64")

    def test_named_string_enum_has_choices(self, infra_api: dict[str, Any]) -> None:
        node = SchemaResolver(infra_api).resolve({"$ref": "#/components/schemas/NameOrIdSortMode"})
        token = map_type(node, required=False)
        assert token == OptionalType(
            inner=NamedType(
                name="NameOrIdSortMode",
                scalar="str",
                choices=("name_ascending", "name_descending", "id_ascending"),
            )
        )

    def test_one_of_is_always_optional(self, infra_api: dict[str, Any]) -> None:
        node = SchemaResolver(infra_api).resolve({"$ref": "#/components/schemas/DiskSource"})
        token = map_type(node, required=True)
        assert token.is_optional
        inner = token.unwrap()
        assert isinstance(inner, NamedType)
        assert inner.variants == ("blank", "snapshot", "global_image")
        assert inner.is_one_of

    def test_network_types_are_always_optional(self, infra_api: dict[str, Any]) -> None:
        node = SchemaResolver(infra_api).resolve({"$ref": "#/components/schemas/Ipv4Net"})
        assert map_type(node, required=True) == OptionalType(
            inner=NamedType(name="Ipv4Net", scalar="str")
        )


class TestSource:
    def test_tokens_render_constructor_source(self) -> None:
        token = OptionalType(inner=NamedType(name="Sort", scalar="str", choices=("a", "b")))
        assert token.to_source() == (
            "OptionalType(inner=NamedType(name='Sort', scalar='str', choices=('a', 'b')))"
        )

    def test_labels(self) -> None:
        assert ListType(element=ScalarType(name="u32")).label() == "list[u32]"
        assert OptionalType(inner=ScalarType(name="str")).label() == "Optional[str]"
