"""Canonical Pydantic models shared across all infractl modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CLIConfig`.

**Parser output models** -- produced from the OpenAPI description and consumed
by the generator:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Operation`,
    :class:`SchemaNode`, :class:`Parameter`, :class:`Property`, and
    :class:`ExtractedFields`.

**Generator models** -- the type tokens, flags and command descriptors the
synthesizer builds and the assembler renders:
    :class:`ScalarType`, :class:`ListType`, :class:`OptionalType`,
    :class:`NamedType`, :class:`FlagSpec`, :class:`FieldSpec`,
    :class:`Route`, :class:`CommandDescriptor`, and
    :class:`ResourceDeclaration`.

**Shared enums**: :class:`Archetype`, :class:`FieldRole`,
:class:`PromptKind`, and :class:`SchemaKind`.

Generated resource modules construct :class:`FieldSpec`, :class:`FlagSpec`,
:class:`Route` and the type tokens directly, so every model that ends up in
generated source has a deterministic ``to_source()`` rendering.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def py_source(value: Any) -> str:
    """Render a plain value (str, bool, int, None, tuple) as Python source."""
    if isinstance(value, tuple):
        if len(value) == 1:
            return f"({py_source(value[0])},)"
        return "(" + ", ".join(py_source(v) for v in value) + ")"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{py_source(k)}: {py_source(v)}" for k, v in value.items()) + "}"
    if isinstance(value, enum.Enum):
        return f"{type(value).__name__}.{value.name}"
    return repr(value)


# --- Config ---


class CLIConfig(BaseModel):
    """Resolved client settings.

    Stored in ``$XDG_CONFIG_HOME/infractl/config.json`` and overlaid with
    ``INFRACTL_*`` environment variables and command-line flags by
    :func:`infractl.config.resolve_config`.

    Example::

        CLIConfig(host="api.example.com", token="tok", format="json")
    """

    host: Optional[str] = Field(default=None, description="API host; https is assumed when no scheme is given")
    token: Optional[str] = Field(default=None, description="Bearer token for the API")
    default_organization: Optional[str] = Field(
        default=None, description="Organization used when -o/--organization is omitted"
    )
    format: str = Field(default="table", description="Output format: table, json, yaml")
    prompt: bool = Field(default=True, description="Allow interactive prompts")
    browser: Optional[str] = Field(default=None, description="Browser used by --web")
    commands_dir: Optional[str] = Field(
        default=None, description="Directory holding generated resource modules"
    )
    timeout: int = Field(default=30, description="Request timeout in seconds")
    max_retries: int = Field(default=0, description="Retries on connection errors and 5xx (off by default)")


# --- Parser Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects.

    Declaration order is the order the operation catalog visits the
    methods of one path.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class Operation(BaseModel):
    """One HTTP operation of the API description, identified by ``(path, method)``.

    ``paginated`` mirrors the ``x-dropshot-pagination`` extension.
    ``raw`` keeps the operation object for the extractor.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str
    operation_id: str = ""
    tags: tuple[str, ...] = ()
    paginated: bool = False
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.path, self.method.value)


class SchemaKind(str, enum.Enum):
    """Shapes a resolved :class:`SchemaNode` can take."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"
    ONE_OF = "one_of"
    NAMED = "named"


class SchemaNode(BaseModel):
    """A resolved, concrete description of a value's shape.

    ``NAMED`` nodes carry the referenced schema name in ``name`` and the
    node it resolves to in ``target``. ``ONE_OF`` nodes carry their member
    nodes in ``variants`` and a label per member in ``variant_labels``.
    """

    kind: SchemaKind
    format: str = ""
    description: str = ""
    name: Optional[str] = None
    target: Optional[SchemaNode] = None
    items: Optional[SchemaNode] = None
    properties: dict[str, SchemaNode] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    variants: list[SchemaNode] = Field(default_factory=list)
    variant_labels: list[str] = Field(default_factory=list)
    enum: list[Any] = Field(default_factory=list)


class Parameter(BaseModel):
    """A path/query/header/cookie parameter of one operation."""

    name: str
    schema_node: SchemaNode
    required: bool = False
    description: str = ""
    location: ParameterLocation = ParameterLocation.QUERY


class Property(BaseModel):
    """A member of an operation's JSON request-body object.

    For PUT operations ``name`` already carries the ``new_`` prefix.
    """

    name: str
    schema_node: SchemaNode
    required: bool = False
    description: str = ""


class ExtractedFields(BaseModel):
    """Parameters and body properties gathered for one operation.

    Both mappings are keyed by name and ordered by name.
    """

    parameters: dict[str, Parameter] = Field(default_factory=dict)
    properties: dict[str, Property] = Field(default_factory=dict)

    def all_names(self) -> list[str]:
        """Sorted union of parameter and property names.

        This is the canonical argument order of the outbound API call.
        """
        return sorted(set(self.parameters) | set(self.properties))

    def required_names(self) -> set[str]:
        names = {p.name for p in self.parameters.values() if p.required}
        names.update(p.name for p in self.properties.values() if p.required)
        return names

    def describe(self, name: str) -> str:
        if name in self.parameters:
            return self.parameters[name].description
        if name in self.properties:
            return self.properties[name].description
        return ""

    def schema_for(self, name: str) -> SchemaNode:
        if name in self.parameters:
            return self.parameters[name].schema_node
        return self.properties[name].schema_node


# --- Type tokens ---


class ScalarType(BaseModel):
    """A primitive target type such as ``i64``, ``str`` or ``datetime``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    name: str

    @property
    def is_optional(self) -> bool:
        return False

    @property
    def is_list(self) -> bool:
        return False

    def unwrap(self) -> TypeToken:
        return self

    def label(self) -> str:
        return self.name

    def to_source(self) -> str:
        return f"ScalarType(name={py_source(self.name)})"


class ListType(BaseModel):
    """A list of ``element``; the element is never optional."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    element: TypeToken

    @property
    def is_optional(self) -> bool:
        return False

    @property
    def is_list(self) -> bool:
        return True

    def unwrap(self) -> TypeToken:
        return self

    def label(self) -> str:
        return f"list[{self.element.label()}]"

    def to_source(self) -> str:
        return f"ListType(element={self.element.to_source()})"


class OptionalType(BaseModel):
    """A value that may be absent."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["optional"] = "optional"
    inner: TypeToken

    @property
    def is_optional(self) -> bool:
        return True

    @property
    def is_list(self) -> bool:
        return self.inner.is_list

    def unwrap(self) -> TypeToken:
        return self.inner

    def label(self) -> str:
        return f"Optional[{self.inner.label()}]"

    def to_source(self) -> str:
        return f"OptionalType(inner={self.inner.to_source()})"


class NamedType(BaseModel):
    """A type defined by name in the API's schema registry.

    ``scalar`` is set when the named schema is a primitive alias (for
    example ``ByteCount`` is an unsigned integer). ``choices`` lists the
    values of a string enum. ``variants`` lists the labels of an
    "exactly one of" composition.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["named"] = "named"
    name: str
    scalar: Optional[str] = None
    choices: tuple[str, ...] = ()
    variants: tuple[str, ...] = ()

    @property
    def is_optional(self) -> bool:
        return False

    @property
    def is_list(self) -> bool:
        return False

    @property
    def is_one_of(self) -> bool:
        return bool(self.variants)

    def unwrap(self) -> TypeToken:
        return self

    def label(self) -> str:
        return self.name

    def to_source(self) -> str:
        args = [f"name={py_source(self.name)}"]
        if self.scalar is not None:
            args.append(f"scalar={py_source(self.scalar)}")
        if self.choices:
            args.append(f"choices={py_source(self.choices)}")
        if self.variants:
            args.append(f"variants={py_source(self.variants)}")
        return f"NamedType({', '.join(args)})"


TypeToken = Annotated[
    Union[ScalarType, ListType, OptionalType, NamedType],
    Field(discriminator="kind"),
]

ListType.model_rebuild()
OptionalType.model_rebuild()


# --- Generator Models ---


class Archetype(str, enum.Enum):
    """The five CRUD command shapes the synthesizer knows how to produce.

    Declaration order is the classifier's checking order.
    """

    DELETE = "delete"
    VIEW = "view"
    EDIT = "edit"
    CREATE = "create"
    LIST = "list"


class FieldRole(str, enum.Enum):
    """How the runtime treats one field of a synthesized command."""

    IDENTITY = "identity"
    SCOPE = "scope"
    GENERIC = "generic"
    PAGINATION = "pagination"
    CONTROL = "control"


class PromptKind(str, enum.Enum):
    """Interactive fallback used when a required field is missing."""

    NONE = "none"
    TEXT = "text"
    SELECT_ORGANIZATION = "select_organization"
    SELECT_PROJECT = "select_project"
    ONE_OF = "one_of"
    BYTE_COUNT = "byte_count"
    IPV4_NET = "ipv4_net"
    IPV6_NET = "ipv6_net"


class FlagSpec(BaseModel):
    """Long/short command-line flag naming derived for one field.

    ``short_name`` is ``None`` when the field has no short flag.
    """

    model_config = ConfigDict(frozen=True)

    long_name: str
    short_name: Optional[str] = None
    required: bool = False
    has_default: bool = False

    def render(self) -> str:
        """Render the flag the way error messages name it (``-D|--description``)."""
        if self.short_name:
            return f"-{self.short_name}|--{self.long_name}"
        return f"--{self.long_name}"

    def to_source(self) -> str:
        args = [f"long_name={py_source(self.long_name)}"]
        if self.short_name is not None:
            args.append(f"short_name={py_source(self.short_name)}")
        if self.required:
            args.append("required=True")
        if self.has_default:
            args.append("has_default=True")
        return f"FlagSpec({', '.join(args)})"


class FieldSpec(BaseModel):
    """One field of a synthesized command.

    ``name`` is the API name (parameter or property, ``new_`` prefixed for
    edits) and keys the command's values. ``attr`` is the Python parameter
    name used in the bound CLI signature. Positional fields have no
    ``flag``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    attr: str
    role: FieldRole = FieldRole.GENERIC
    type: TypeToken = Field(default_factory=lambda: ScalarType(name="str"))
    flag: Optional[FlagSpec] = None
    required: bool = False
    default: Any = None
    envvar: Optional[str] = None
    aliases: tuple[str, ...] = ()
    help: str = ""
    prompt: PromptKind = PromptKind.NONE
    prompt_label: str = ""

    @property
    def positional(self) -> bool:
        return self.flag is None

    def render_flag(self) -> str:
        if self.flag is None:
            return f"[{self.attr}]"
        return self.flag.render()

    def to_source(self) -> str:
        """Render as a keyword-argument constructor call, omitting defaults."""
        args = [f"name={py_source(self.name)}", f"attr={py_source(self.attr)}"]
        args.append(f"role={py_source(self.role)}")
        args.append(f"type={self.type.to_source()}")
        if self.flag is not None:
            args.append(f"flag={self.flag.to_source()}")
        if self.required:
            args.append("required=True")
        if self.default is not None:
            args.append(f"default={py_source(self.default)}")
        if self.envvar is not None:
            args.append(f"envvar={py_source(self.envvar)}")
        if self.aliases:
            args.append(f"aliases={py_source(self.aliases)}")
        if self.help:
            args.append(f"help={py_source(self.help)}")
        if self.prompt != PromptKind.NONE:
            args.append(f"prompt={py_source(self.prompt)}")
        if self.prompt_label:
            args.append(f"prompt_label={py_source(self.prompt_label)}")
        return "FieldSpec(" + ", ".join(args) + ")"


class Route(BaseModel):
    """How canonical-order arguments become one HTTP request.

    ``body_fields`` maps a field name to the JSON key it is sent as
    (edits send ``new_description`` as ``description``).
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str
    arg_names: tuple[str, ...] = ()
    path_params: tuple[str, ...] = ()
    query_params: tuple[str, ...] = ()
    body_fields: dict[str, str] = Field(default_factory=dict)

    def to_source(self) -> str:
        lines = [
            "Route(",
            f"        method=HTTPMethod.{self.method.name},",
            f"        path={py_source(self.path)},",
            f"        arg_names={py_source(self.arg_names)},",
        ]
        if self.path_params:
            lines.append(f"        path_params={py_source(self.path_params)},")
        if self.query_params:
            lines.append(f"        query_params={py_source(self.query_params)},")
        if self.body_fields:
            lines.append(f"        body_fields={py_source(self.body_fields)},")
        lines.append("    )")
        return "\n".join(lines)


class CommandDescriptor(BaseModel):
    """A fully synthesized CRUD command, ready for the assembler.

    Attributes:
        archetype: Which CRUD shape this command has.
        resource_tag: The tag the command was generated for.
        class_name: Name of the generated class (``CmdDiskCreate``).
        command_name: Subcommand name (``create``).
        aliases: Extra subcommand names (``get`` for view).
        fields: Every CLI field, positional first.
        doc_text: Help text of the command.
        api_method: Collaborator method called (``post``, ``get_page``...).
        api_call_order: Canonical argument order of that call.
        api_call_order_all: Argument order of ``get_all`` (list only).
        prompt_sequence: Field names prompted for, in order (create only).
        success_template: ``str.format`` template of the success line.
        rename_template: Success line used by edit when the name changes.
        display_name: Human name of one resource (``disk``, ``VPC``).
        route: The request route of ``api_method``.
    """

    archetype: Archetype
    resource_tag: str
    class_name: str
    command_name: str
    aliases: tuple[str, ...] = ()
    fields: tuple[FieldSpec, ...] = ()
    doc_text: str = ""
    api_method: str = ""
    api_call_order: tuple[str, ...] = ()
    api_call_order_all: tuple[str, ...] = ()
    prompt_sequence: tuple[str, ...] = ()
    success_template: str = ""
    rename_template: str = ""
    display_name: str = ""
    route: Route

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)


class ResourceDeclaration(BaseModel):
    """Per-resource input that drives one generation pass.

    Attributes:
        tag: The API tag (``"disks"``, ``"images:global"``).
        module: File stem of the generated module (``"disks"``).
        command: CLI group name (``"disk"``).
        help: Help text of the CLI group.
        variants: Hand-authored subcommands, name to ``"module:Class"``.
    """

    tag: str
    module: str
    command: str
    help: str = ""
    variants: dict[str, str] = Field(default_factory=dict)
