"""Bind command classes to Typer.

Typer builds its parameters by inspecting a function signature, so
:func:`bind` builds that function: its source is assembled from the
command's :class:`~infractl.models.FieldSpec` tuple, compiled, and executed
into a namespace holding the annotations and the ``typer.Argument`` /
``typer.Option`` defaults. When called, the function hands its arguments to
the command class and runs it with :func:`asyncio.run`.

Which parameters Typer itself enforces:

* positionals are required except on create, where a missing value is
  prompted for (or reported) by the command;
* required generic options are required except on create, for the same
  reason;
* scope options (``-o``/``-p``) never are: they fall back to the
  environment and the config file before the command reports them.
"""

from __future__ import annotations

import asyncio
import enum
import json
from functools import lru_cache
from typing import Any, Callable, Optional

import typer

from infractl.exceptions import InfractlError
from infractl.models import (
    FieldRole,
    FieldSpec,
    ListType,
    NamedType,
    OptionalType,
    ScalarType,
    TypeToken,
)
from infractl.output import error
from infractl.runtime.commands import Command, CreateCommand
from infractl.runtime.context import get_context

_SCALAR_TYPES: dict[str, type] = {
    "bool": bool,
    "i8": int,
    "i16": int,
    "i32": int,
    "i64": int,
    "u8": int,
    "u16": int,
    "u32": int,
    "u64": int,
    "f64": float,
}


def python_type(token: TypeToken) -> Any:
    """Annotation Typer should see for *token*.

    Scalars without a Python counterpart (``datetime``, ``uuid``...) are
    taken as strings and sent as typed.

    Example::

        >>> python_type(OptionalType(inner=ScalarType(name="u32")))
        typing.Optional[int]
    """
    if isinstance(token, OptionalType):
        return Optional[python_type(token.inner)]
    if isinstance(token, ListType):
        return list[python_type(token.element)]
    if isinstance(token, NamedType):
        if token.choices:
            return choice_enum(token.name, token.choices)
        if token.scalar is not None:
            return _SCALAR_TYPES.get(token.scalar, str)
        return str
    if isinstance(token, ScalarType):
        return _SCALAR_TYPES.get(token.name, str)
    return str


@lru_cache(maxsize=None)
def choice_enum(name: str, choices: tuple[str, ...]) -> type[enum.Enum]:
    """String enum Typer offers as the choices of a closed set of values."""
    return enum.Enum(name, {choice: choice for choice in choices}, type=str)


def _typer_required(command_cls: type[Command], spec: FieldSpec) -> bool:
    if issubclass(command_cls, CreateCommand):
        return False
    if spec.positional:
        return True
    return spec.required and spec.role == FieldRole.GENERIC and spec.envvar is None


def _descriptor(command_cls: type[Command], spec: FieldSpec) -> Any:
    """The ``typer.Argument``/``typer.Option`` default of one parameter."""
    default = ... if _typer_required(command_cls, spec) else spec.default
    help_text = spec.help or None

    if spec.positional:
        return typer.Argument(default, help=help_text, show_default=False, metavar=spec.attr.upper())

    assert spec.flag is not None
    names = [f"--{spec.flag.long_name}"]
    if spec.flag.short_name:
        names.append(f"-{spec.flag.short_name}")

    kwargs: dict[str, Any] = {"help": help_text}
    if spec.envvar:
        kwargs["envvar"] = spec.envvar
    return typer.Option(default, *names, **kwargs)


def _coerce(spec: FieldSpec, value: Any) -> Any:
    """Decode JSON given for values that are not plain scalars."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, list):
        value = [v.value if isinstance(v, enum.Enum) else v for v in value]
    inner = spec.type.unwrap()
    if isinstance(value, str) and isinstance(inner, NamedType) and inner.is_one_of:
        try:
            return json.loads(value)
        except ValueError:
            return value
    if isinstance(value, list) and not value:
        return None
    return value


def invoke(command_cls: type[Command], kwargs: dict[str, Any]) -> None:
    """Run *command_cls* with bound CLI values and map errors to exit codes."""
    values = {}
    by_attr = {spec.attr: spec for spec in command_cls.fields}
    for attr, value in kwargs.items():
        values[attr] = _coerce(by_attr[attr], value)

    command = command_cls.from_cli(**values)
    try:
        asyncio.run(command.run(get_context()))
    except InfractlError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def bind(command_cls: type[Command]) -> Callable[..., None]:
    """Build the Typer callback of *command_cls*.

    Positional fields come first, then options, in field order.

    Args:
        command_cls: A generated or hand-written command class.

    Returns:
        A function whose signature Typer can inspect. Its docstring is the
        command's help text.
    """
    namespace: dict[str, Any] = {"_invoke": invoke, "_cls": command_cls}
    arguments = [spec for spec in command_cls.fields if spec.positional]
    options = [spec for spec in command_cls.fields if not spec.positional]

    sig_parts: list[str] = []
    for idx, spec in enumerate(arguments + options):
        sentinel = f"_default_{idx}"
        ann = f"_ann_{idx}"
        namespace[sentinel] = _descriptor(command_cls, spec)
        namespace[ann] = python_type(spec.type)
        sig_parts.append(f"{spec.attr}: {ann} = {sentinel}")

    collected = ", ".join(f"{spec.attr!r}: {spec.attr}" for spec in arguments + options)
    func_name = f"_cmd_{command_cls.__name__.lower()}"
    source = (
        f"def {func_name}({', '.join(sig_parts)}):\n"
        f"    _invoke(_cls, {{{collected}}})\n"
    )
    code = compile(source, f"<infractl:{command_cls.__name__}>", "exec", dont_inherit=True)
    exec(code, namespace)  # noqa: S102

    func = namespace[func_name]
    func.__doc__ = command_cls.help_text or command_cls.__doc__
    return func


def add_commands(group: typer.Typer, commands: dict[str, type[Command]]) -> None:
    """Register every command class of one resource on *group*, with aliases."""
    for name, command_cls in commands.items():
        callback = bind(command_cls)
        group.command(name)(callback)
        for alias in command_cls.aliases:
            group.command(alias, hidden=True)(callback)
