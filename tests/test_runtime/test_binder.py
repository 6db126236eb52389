"""Tests for infractl.runtime.binder -- command classes as Typer callbacks."""

from __future__ import annotations

import enum
import inspect
from typing import Any, Optional

import pytest
import typer
from typer.testing import CliRunner

from infractl.models import (
    FieldRole,
    FieldSpec,
    FlagSpec,
    ListType,
    NamedType,
    OptionalType,
    ScalarType,
)
from infractl.output import OutputManager
from infractl.runtime.binder import add_commands, bind, python_type
from infractl.runtime.commands import Command, CreateCommand, ViewCommand
from infractl.runtime.context import Context, set_context


class TestPythonType:
    def test_scalars(self) -> None:
        assert python_type(ScalarType(name="u32")) is int
        assert python_type(ScalarType(name="bool")) is bool
        assert python_type(ScalarType(name="f64")) is float
        assert python_type(ScalarType(name="uuid")) is str

    def test_wrappers(self) -> None:
        assert python_type(OptionalType(inner=ScalarType(name="u32"))) == Optional[int]
        assert python_type(ListType(element=ScalarType(name="str"))) == list[str]

    def test_named(self) -> None:
        assert python_type(NamedType(name="ByteCount", scalar="u64")) is int
        sort = python_type(NamedType(name="Sort", scalar="str", choices=("up", "down")))
        assert issubclass(sort, enum.Enum)
        assert [member.value for member in sort] == ["up", "down"]
        assert python_type(NamedType(name="DiskSource", variants=("blank",))) is str


_IDENTITY = FieldSpec(
    name="thing_name",
    attr="thing",
    role=FieldRole.IDENTITY,
    required=True,
    help="The thing.",
)
_ORG = FieldSpec(
    name="organization_name",
    attr="organization",
    role=FieldRole.SCOPE,
    flag=FlagSpec(long_name="organization", short_name="o", required=True),
    required=True,
    envvar="INFRACTL_ORG",
)
_COUNT = FieldSpec(
    name="count",
    attr="count",
    type=ScalarType(name="u32"),
    flag=FlagSpec(long_name="count", short_name="c", required=True),
    required=True,
)
_SORT = FieldSpec(
    name="sort_by",
    attr="sort_by",
    type=OptionalType(inner=NamedType(name="Sort", scalar="str", choices=("up", "down"))),
    flag=FlagSpec(long_name="sort-by", short_name="s", has_default=True),
)


class _Seen(ViewCommand):
    """Record the values it was run with."""

    name = "view"
    aliases = ("get",)
    help_text = "Show a thing.\n\nMore details."
    fields = (_ORG, _COUNT, _SORT, _IDENTITY)
    runs: list[dict[str, Any]] = []

    async def run(self, ctx: Context) -> None:
        type(self).runs.append(dict(self.values))


class _Made(CreateCommand):
    name = "create"
    fields = (_IDENTITY, _ORG, _COUNT)


def _app(*commands: type[Command]) -> typer.Typer:
    app = typer.Typer()
    group = typer.Typer()
    add_commands(group, {c.name: c for c in commands})
    app.add_typer(group, name="thing")
    return app


class TestBind:
    def test_signature_positionals_first(self) -> None:
        params = list(inspect.signature(bind(_Seen)).parameters)
        assert params == ["thing", "organization", "count", "sort_by"]

    def test_docstring_is_help_text(self) -> None:
        assert bind(_Seen).__doc__ == "Show a thing.\n\nMore details."

    def test_values_keyed_by_field_name(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("INFRACTL_ORG", raising=False)
        _Seen.runs.clear()
        result = CliRunner().invoke(
            _app(_Seen), ["thing", "view", "t1", "-o", "acme", "-c", "3", "--sort-by", "up"]
        )
        assert result.exit_code == 0, result.output
        assert _Seen.runs == [
            {"organization_name": "acme", "count": 3, "sort_by": "up", "thing_name": "t1"}
        ]
        assert type(_Seen.runs[0]["sort_by"]) is str

    def test_alias_is_registered(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("INFRACTL_ORG", raising=False)
        _Seen.runs.clear()
        result = CliRunner().invoke(_app(_Seen), ["thing", "get", "t1", "-c", "1"])
        assert result.exit_code == 0, result.output
        assert _Seen.runs[0]["organization_name"] is None

    def test_envvar_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INFRACTL_ORG", "from-env")
        _Seen.runs.clear()
        CliRunner().invoke(_app(_Seen), ["thing", "view", "t1", "-c", "1"])
        assert _Seen.runs[0]["organization_name"] == "from-env"

    def test_choices_enforced(self) -> None:
        result = CliRunner().invoke(
            _app(_Seen), ["thing", "view", "t1", "-c", "1", "--sort-by", "sideways"]
        )
        assert result.exit_code == 2
        assert "sideways" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_required_generic_enforced_outside_create(self) -> None:
        result = CliRunner().invoke(_app(_Seen), ["thing", "view", "t1"])
        assert result.exit_code == 2
        assert "--count" in result.output

    def test_create_reports_missing_values_itself(
        self, monkeypatch: pytest.MonkeyPatch, plain_output: OutputManager
    ) -> None:
        monkeypatch.delenv("INFRACTL_ORG", raising=False)
        set_context(Context(interactive=False))
        result = CliRunner().invoke(_app(_Made), ["thing", "create"])
        assert result.exit_code == 2
        assert "[thing] required in non-interactive mode" in result.output
