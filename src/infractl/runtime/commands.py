"""Archetype base classes for generated and hand-written commands.

A generated module subclasses one of :class:`CreateCommand`,
:class:`ViewCommand`, :class:`EditCommand`, :class:`ListCommand` or
:class:`DeleteCommand` and fills in class attributes only: the
:class:`~infractl.models.FieldSpec` tuple, the canonical argument order of
the outbound call, the route table, and the success templates. The
behaviour lives here, once per archetype.

An instance holds the values of one invocation in ``values``, keyed by
field name (the API name). ``await command.run(ctx)`` validates them,
prompts for what is missing when the terminal allows it, issues the API
call and prints the result.
"""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Optional

from infractl.exceptions import (
    ConfigError,
    ConfirmationMismatch,
    ConfirmationRequired,
    InvalidLimit,
    MissingRequiredField,
    NothingToEdit,
    UsageError,
)
from infractl.models import FieldRole, FieldSpec, NamedType, PromptKind, Route
from infractl.output import OutputFormat
from infractl.runtime.client import PAGE_TOKEN, ApiClient, base_url
from infractl.runtime.context import Context
from infractl.runtime.prompts import prompt_byte_count, prompt_ipnet, prompt_one_of

ORGANIZATION = "organization"
PROJECT = "project"
NEW_NAME = "new_name"

# Listing routes used to offer a choice of existing organizations and projects.
ORGANIZATION_ROUTE = Route(
    method="get",
    path="/organizations",
    arg_names=("limit",),
    query_params=("limit",),
)
PROJECT_ROUTE = Route(
    method="get",
    path="/organizations/{organization_name}/projects",
    arg_names=("limit", "organization_name"),
    path_params=("organization_name",),
    query_params=("limit",),
)
SELECT_LIMIT = 100


def is_empty(value: Any) -> bool:
    """True for ``None``, ``""``, ``0`` and empty collections; ``False`` is a value."""
    if value is None or isinstance(value, bool):
        return value is None
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, (int, float)):
        return value == 0
    return False


class Command:
    """Common state and helpers of every archetype."""

    tag: ClassVar[str] = ""
    name: ClassVar[str] = ""
    aliases: ClassVar[tuple[str, ...]] = ()
    display_name: ClassVar[str] = ""
    help_text: ClassVar[str] = ""
    routes: ClassVar[Mapping[str, Route]] = {}
    api_method: ClassVar[str] = ""
    api_call_order: ClassVar[tuple[str, ...]] = ()
    api_call_order_all: ClassVar[tuple[str, ...]] = ()
    prompt_sequence: ClassVar[tuple[str, ...]] = ()
    success_template: ClassVar[str] = ""
    rename_template: ClassVar[str] = ""
    fields: ClassVar[tuple[FieldSpec, ...]] = ()

    def __init__(self, **values: Any) -> None:
        self.values: dict[str, Any] = {}
        for spec in self.fields:
            self.values[spec.name] = values.pop(spec.name, spec.default)
        if values:
            unknown = ", ".join(sorted(values))
            raise TypeError(f"{type(self).__name__} got unknown fields: {unknown}")

    @classmethod
    def from_cli(cls, **kwargs: Any) -> Command:
        """Build an instance from bound CLI parameters, keyed by ``attr``."""
        return cls(**{spec.name: kwargs[spec.attr] for spec in cls.fields if spec.attr in kwargs})

    # ------------------------------------------------------------------ #
    # Field lookup
    # ------------------------------------------------------------------ #

    @classmethod
    def field(cls, name: str) -> FieldSpec:
        for spec in cls.fields:
            if spec.name == name or name in spec.aliases:
                return spec
        raise KeyError(name)

    @classmethod
    def role_fields(cls, role: FieldRole) -> list[FieldSpec]:
        return [spec for spec in cls.fields if spec.role == role]

    @classmethod
    def identity(cls) -> Optional[FieldSpec]:
        specs = cls.role_fields(FieldRole.IDENTITY)
        return specs[0] if specs else None

    @classmethod
    def scope(cls, attr: str) -> Optional[FieldSpec]:
        for spec in cls.role_fields(FieldRole.SCOPE):
            if spec.attr == attr:
                return spec
        return None

    def value_of(self, spec: Optional[FieldSpec]) -> Any:
        if spec is None:
            return None
        return self.values.get(spec.name)

    def arg(self, name: str) -> Any:
        """Value passed for API argument *name*."""
        if name == PAGE_TOKEN:
            return ""
        try:
            return self.values.get(self.field(name).name)
        except KeyError:
            return None

    def call_args(self, order: tuple[str, ...]) -> list[Any]:
        return [self.arg(name) for name in order]

    # ------------------------------------------------------------------ #
    # Shared steps
    # ------------------------------------------------------------------ #

    def apply_defaults(self, ctx: Context) -> None:
        """Fall back to the configured default organization."""
        org = self.scope(ORGANIZATION)
        if org is not None and is_empty(self.value_of(org)) and ctx.config.default_organization:
            self.values[org.name] = ctx.config.default_organization

    def check_scope(self) -> None:
        """Scope flags are optional on the command line but required by the API."""
        for spec in self.role_fields(FieldRole.SCOPE):
            if spec.required and is_empty(self.value_of(spec)):
                raise UsageError(f"{spec.render_flag()} is required")

    def template_values(self) -> dict[str, Any]:
        return {
            "name": self.value_of(self.identity()),
            "organization": self.value_of(self.scope(ORGANIZATION)),
            "project": self.value_of(self.scope(PROJECT)),
            "new_name": self.values.get(NEW_NAME),
        }

    def output_format(self) -> Optional[OutputFormat]:
        value = self.values.get("format")
        return OutputFormat(value) if value else None

    async def run(self, ctx: Context) -> None:
        raise NotImplementedError


class CreateCommand(Command):
    """Create one resource, prompting for missing required values."""

    async def run(self, ctx: Context) -> None:
        self.apply_defaults(ctx)
        if not ctx.can_prompt:
            self.require_all()
        async with ctx.api_client() as api:
            if ctx.can_prompt:
                await self.prompt_missing(ctx, api)
            await api.resource(self.routes).post(*self.call_args(self.api_call_order))
        ctx.output.success(self.success_template.format(**self.template_values()))

    def check_order(self) -> list[FieldSpec]:
        """Identity, organization, project, then the remaining required fields."""
        ordered: list[FieldSpec] = []
        identity = self.identity()
        if identity is not None:
            ordered.append(identity)
        for attr in (ORGANIZATION, PROJECT):
            spec = self.scope(attr)
            if spec is not None:
                ordered.append(spec)
        ordered.extend(
            spec for spec in self.role_fields(FieldRole.GENERIC) if spec.required
        )
        return ordered

    def require_all(self) -> None:
        """Fail on the first required field without a value.

        Raises:
            MissingRequiredField: Naming the flag (or ``[positional]``).
        """
        for spec in self.check_order():
            inner = spec.type.unwrap()
            if isinstance(inner, NamedType) and inner.is_one_of:
                # TODO: require one-of values here once each variant can be given as
                # its own flags; until then an unset value is left out of the request body.
                continue
            if is_empty(self.value_of(spec)):
                raise MissingRequiredField(spec.render_flag())

    async def prompt_missing(self, ctx: Context, api: ApiClient) -> None:
        for name in self.prompt_sequence:
            spec = self.field(name)
            if not is_empty(self.values.get(spec.name)):
                continue
            self.values[spec.name] = await self.ask(ctx, api, spec)

    async def ask(self, ctx: Context, api: ApiClient, spec: FieldSpec) -> Any:
        prompter = ctx.prompter
        label = spec.prompt_label
        kind = spec.prompt

        if kind == PromptKind.SELECT_ORGANIZATION:
            page = await api.resource({"get": ORGANIZATION_ROUTE}).get(SELECT_LIMIT)
            return prompter.select(label, _names(page))
        if kind == PromptKind.SELECT_PROJECT:
            org = self.value_of(self.scope(ORGANIZATION))
            page = await api.resource({"get": PROJECT_ROUTE}).get(SELECT_LIMIT, org)
            return prompter.select(label, _names(page))
        if kind == PromptKind.ONE_OF:
            inner = spec.type.unwrap()
            variants = inner.variants if isinstance(inner, NamedType) else ()
            return prompt_one_of(prompter, label, variants)
        if kind == PromptKind.BYTE_COUNT:
            return prompt_byte_count(prompter, label)
        if kind == PromptKind.IPV4_NET:
            return prompt_ipnet(prompter, label, 4)
        if kind == PromptKind.IPV6_NET:
            return prompt_ipnet(prompter, label, 6)
        return prompter.text(label)


class ViewCommand(Command):
    """Show one resource, or open it in the browser with ``--web``."""

    async def run(self, ctx: Context) -> None:
        self.apply_defaults(ctx)
        self.check_scope()
        if self.values.get("web"):
            if not ctx.config.host:
                raise ConfigError("No API host configured: set INFRACTL_HOST or pass --host")
            url = f"{base_url(ctx.config.host)}/{self.value_of(self.identity())}"
            ctx.output.debug(f"Opening {url}")
            ctx.open_browser(url)
            return

        async with ctx.api_client() as api:
            record = await api.resource(self.routes).get(*self.call_args(self.api_call_order))
        ctx.output.render_record(record, self.output_format())


class EditCommand(Command):
    """Update one resource with only the values that were supplied."""

    @classmethod
    def edit_fields(cls) -> list[FieldSpec]:
        body = cls.routes.get(cls.api_method)
        names = set(body.body_fields) if body is not None else set()
        return [spec for spec in cls.fields if spec.name in names]

    async def run(self, ctx: Context) -> None:
        self.apply_defaults(ctx)
        self.check_scope()
        supplied = [s for s in self.edit_fields() if not is_empty(self.value_of(s))]
        if not supplied:
            raise NothingToEdit()

        for spec in self.edit_fields():
            if is_empty(self.value_of(spec)):
                self.values[spec.name] = None

        async with ctx.api_client() as api:
            await api.resource(self.routes).put(*self.call_args(self.api_call_order))

        values = self.template_values()
        renamed = values["new_name"] and values["new_name"] != values["name"]
        template = self.rename_template if renamed and self.rename_template else self.success_template
        ctx.output.success(template.format(**values))


class ListCommand(Command):
    """List a collection one page at a time, or every page with ``--paginate``."""

    async def run(self, ctx: Context) -> None:
        self.apply_defaults(ctx)
        limit = self.values.get("limit")
        if limit is not None and limit < 1:
            raise InvalidLimit()
        self.check_scope()

        async with ctx.api_client() as api:
            client = api.resource(self.routes)
            if self.values.get("paginate"):
                items = await client.get_all(*self.call_args(self.api_call_order_all))
            else:
                page = await client.get_page(*self.call_args(self.api_call_order))
                items = page.get("items") or []
        ctx.output.render_collection(items, self.output_format())


class DeleteCommand(Command):
    """Delete one resource after confirmation."""

    async def run(self, ctx: Context) -> None:
        self.apply_defaults(ctx)
        if not self.values.get("confirm"):
            if not ctx.can_prompt:
                raise ConfirmationRequired()
            name = self.value_of(self.identity())
            answer = ctx.prompter.text(f"Type {name} to confirm deletion:")
            if answer != name:
                raise ConfirmationMismatch()
        self.check_scope()

        async with ctx.api_client() as api:
            await api.resource(self.routes).delete(*self.call_args(self.api_call_order))
        ctx.output.destructive(self.success_template.format(**self.template_values()))


def _names(page: Any) -> list[str]:
    items = page.get("items", []) if isinstance(page, dict) else page or []
    return [str(item["name"]) for item in items if isinstance(item, dict) and "name" in item]
