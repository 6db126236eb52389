"""Synthesize command descriptors for the five CRUD archetypes.

:func:`synthesize` turns one classified operation plus its extracted fields
into a :class:`~infractl.models.CommandDescriptor`: the CLI fields with their
flags, documentation and prompt fallbacks, the canonical argument order of
the outbound call, the request route, and the success-message templates.

Every field name of the operation falls into one role:

* **identity** -- ``name``, ``{singular}``, ``{singular}_name`` or
  ``{singular}_id``. Bound to one positional argument.
* **scope** -- ``organization``/``organization_name`` and
  ``project``/``project_name``, unless the tag is ``organizations`` or
  ``projects`` respectively. Bound to ``-o/--organization`` and
  ``-p/--project``.
* **pagination** -- ``limit`` and ``page_token``. Only list commands expose
  ``--limit``; the page token is supplied by the runtime.
* **generic** -- everything else, one flag each (see
  :mod:`infractl.generator.flags`).

Each archetype then adds its fixed controls: ``--web`` and ``--format`` for
view, ``--limit``, ``--paginate`` and ``--format`` for list, ``--confirm``
for delete. No state is shared between archetypes.
"""

from __future__ import annotations

from typing import Any, Optional

from infractl.generator.flags import assign_flags, strip_edit_prefix
from infractl.generator.naming import (
    class_stem,
    command_group,
    display_name,
    display_plural,
    sanitize_identifier,
    singular,
    split_global,
)
from infractl.generator.type_mapper import map_type
from infractl.models import (
    Archetype,
    CommandDescriptor,
    ExtractedFields,
    FieldRole,
    FieldSpec,
    FlagSpec,
    NamedType,
    Operation,
    OptionalType,
    ParameterLocation,
    PromptKind,
    Route,
    ScalarType,
    TypeToken,
)

CLI_NAME = "infractl"
ORG_ENV_VAR = "INFRACTL_ORG"
DEFAULT_LIMIT = 30
PAGINATION_FIELDS = frozenset({"limit", "page_token"})
OUTPUT_FORMATS = ("table", "json", "yaml")

_ORGANIZATION_FIELDS = ("organization_name", "organization")
_PROJECT_FIELDS = ("project_name", "project")

_API_METHODS = {
    Archetype.CREATE: "post",
    Archetype.VIEW: "get",
    Archetype.EDIT: "put",
    Archetype.LIST: "get_page",
    Archetype.DELETE: "delete",
}


def synthesize(
    archetype: Archetype,
    operation: Operation,
    fields: ExtractedFields,
    tag: str,
) -> CommandDescriptor:
    """Build the descriptor of one generated command.

    Args:
        archetype: The archetype the classifier assigned to *operation*.
        operation: The classified operation.
        fields: Parameters and properties of *operation*.
        tag: The resource tag being generated.

    Returns:
        The complete command descriptor.

    Raises:
        UnsupportedFormat: A field has a format the type mapper rejects.
        InvalidFieldName: A field name is too short, or two fields cannot
            get distinct flags.
    """
    return _Synthesizer(archetype, operation, fields, tag).build()


class _Synthesizer:
    """Holds the per-command derived names while one descriptor is built."""

    def __init__(
        self,
        archetype: Archetype,
        operation: Operation,
        fields: ExtractedFields,
        tag: str,
    ) -> None:
        self.archetype = archetype
        self.operation = operation
        self.fields = fields
        self.tag = tag

        base, _ = split_global(tag)
        self.base = base
        self.ident = singular(base)
        self.display = display_name(tag)
        self.display_plural = display_plural(tag)
        self.names = fields.all_names()
        self.required = fields.required_names()
        self.attrs: set[str] = set()

    # ------------------------------------------------------------------ #
    # Roles
    # ------------------------------------------------------------------ #

    def identity_names(self) -> list[str]:
        candidates = (f"{self.ident}_name", self.ident, "name", f"{self.ident}_id")
        return [n for n in candidates if n in self.names]

    def scope_names(self, kind: str) -> list[str]:
        if kind == "organization":
            if self.base == "organizations":
                return []
            return [n for n in _ORGANIZATION_FIELDS if n in self.names]
        if self.base == "projects":
            return []
        return [n for n in _PROJECT_FIELDS if n in self.names]

    def role_of(self, name: str) -> FieldRole:
        if name in self.identity_names():
            return FieldRole.IDENTITY
        if name in self.scope_names("organization") or name in self.scope_names("project"):
            return FieldRole.SCOPE
        if name in PAGINATION_FIELDS:
            return FieldRole.PAGINATION
        return FieldRole.GENERIC

    def generic_names(self) -> list[str]:
        return [n for n in self.names if self.role_of(n) == FieldRole.GENERIC]

    # ------------------------------------------------------------------ #
    # Fields
    # ------------------------------------------------------------------ #

    def claim(self, attr: str) -> str:
        attr = sanitize_identifier(attr)
        while attr in self.attrs:
            attr = f"{attr}_"
        self.attrs.add(attr)
        return attr

    def identity_field(self) -> Optional[FieldSpec]:
        names = self.identity_names()
        if not names or self.archetype == Archetype.LIST:
            return None

        if self.archetype == Archetype.CREATE:
            help_text = f"The name of the {self.display} to create."
        else:
            help_text = f"The {self.display} to {self.archetype.value}. Can be an ID or name."

        is_create = self.archetype == Archetype.CREATE
        return FieldSpec(
            name=names[0],
            attr=self.claim(self.ident),
            role=FieldRole.IDENTITY,
            type=ScalarType(name="str"),
            required=True,
            default="" if is_create else None,
            aliases=tuple(names[1:]),
            help=help_text,
            prompt=PromptKind.TEXT if is_create else PromptKind.NONE,
            prompt_label=f"{self.display} name:" if is_create else "",
        )

    def scope_fields(self) -> list[FieldSpec]:
        specs: list[FieldSpec] = []
        is_create = self.archetype == Archetype.CREATE

        org_names = self.scope_names("organization")
        if org_names:
            specs.append(
                FieldSpec(
                    name=org_names[0],
                    attr=self.claim("organization"),
                    role=FieldRole.SCOPE,
                    type=ScalarType(name="str"),
                    flag=FlagSpec(long_name="organization", short_name="o", required=True),
                    required=True,
                    default="" if is_create else None,
                    envvar=ORG_ENV_VAR,
                    aliases=tuple(org_names[1:]),
                    help="The organization that holds the project.",
                    prompt=PromptKind.SELECT_ORGANIZATION if is_create else PromptKind.NONE,
                    prompt_label="Project organization:" if is_create else "",
                )
            )

        project_names = self.scope_names("project")
        if project_names:
            if self.archetype == Archetype.DELETE:
                help_text = f"The project to delete the {self.display} from."
            else:
                help_text = f"The project that holds the {self.subject()}."
            specs.append(
                FieldSpec(
                    name=project_names[0],
                    attr=self.claim("project"),
                    role=FieldRole.SCOPE,
                    type=ScalarType(name="str"),
                    flag=FlagSpec(long_name="project", short_name="p", required=True),
                    required=True,
                    default="" if is_create else None,
                    aliases=tuple(project_names[1:]),
                    help=help_text,
                    prompt=PromptKind.SELECT_PROJECT if is_create else PromptKind.NONE,
                    prompt_label="Select project:" if is_create else "",
                )
            )
        return specs

    def generic_fields(self, claimed_shorts: set[str], claimed_longs: set[str]) -> list[FieldSpec]:
        names = self.generic_names()
        is_edit = self.archetype == Archetype.EDIT
        types: dict[str, TypeToken] = {}
        triples = []
        for name in names:
            # New values of an edit are optional; its path parameters are not.
            required = name in self.required and not (is_edit and name in self.fields.properties)
            token = map_type(self.fields.schema_for(name), required)
            types[name] = token
            has_default = not required
            triples.append((name, required, has_default))

        flags = assign_flags(triples, claimed_shorts, claimed_longs)

        specs: list[FieldSpec] = []
        for name, required, _ in triples:
            token = types[name]
            prompt = PromptKind.NONE
            label = ""
            if required and self.archetype == Archetype.CREATE:
                prompt = _prompt_kind(token)
                label = f"{self.display} {strip_edit_prefix(name).replace('_', ' ')}:"
            specs.append(
                FieldSpec(
                    name=name,
                    attr=self.claim(name),
                    role=FieldRole.GENERIC,
                    type=token,
                    flag=flags[name],
                    required=required,
                    default=_default_for(token),
                    help=self.field_doc(name),
                    prompt=prompt,
                    prompt_label=label,
                )
            )
        return specs

    def control_fields(self) -> list[FieldSpec]:
        specs: list[FieldSpec] = []
        if self.archetype == Archetype.VIEW:
            specs.append(
                FieldSpec(
                    name="web",
                    attr=self.claim("web"),
                    role=FieldRole.CONTROL,
                    type=ScalarType(name="bool"),
                    flag=FlagSpec(long_name="web", short_name="w", has_default=True),
                    default=False,
                    help=f"Open the {self.display} in the browser.",
                )
            )
        if self.archetype == Archetype.LIST:
            specs.append(
                FieldSpec(
                    name="limit",
                    attr=self.claim("limit"),
                    role=FieldRole.PAGINATION,
                    type=ScalarType(name="u32"),
                    flag=FlagSpec(long_name="limit", short_name="l", has_default=True),
                    default=DEFAULT_LIMIT,
                    help="Maximum number of items to list.",
                )
            )
            specs.append(
                FieldSpec(
                    name="paginate",
                    attr=self.claim("paginate"),
                    role=FieldRole.CONTROL,
                    type=ScalarType(name="bool"),
                    flag=FlagSpec(long_name="paginate", has_default=True),
                    default=False,
                    help="Make additional HTTP requests to fetch all pages.",
                )
            )
        if self.archetype in (Archetype.VIEW, Archetype.LIST):
            specs.append(
                FieldSpec(
                    name="format",
                    attr=self.claim("format"),
                    role=FieldRole.CONTROL,
                    type=OptionalType(inner=NamedType(name="OutputFormat", choices=OUTPUT_FORMATS)),
                    flag=FlagSpec(long_name="format", has_default=True),
                    help="Output format: table, json or yaml.",
                )
            )
        if self.archetype == Archetype.DELETE:
            specs.append(
                FieldSpec(
                    name="confirm",
                    attr=self.claim("confirm"),
                    role=FieldRole.CONTROL,
                    type=ScalarType(name="bool"),
                    flag=FlagSpec(long_name="confirm", has_default=True),
                    default=False,
                    help="Confirm deletion without prompting.",
                )
            )
        return specs

    # ------------------------------------------------------------------ #
    # Text
    # ------------------------------------------------------------------ #

    def subject(self) -> str:
        """What a scope or generic field "holds": plural for list, singular otherwise."""
        return self.display_plural if self.archetype == Archetype.LIST else self.display

    def field_doc(self, name: str) -> str:
        description = self.fields.describe(name).strip()
        if description:
            return description
        if name == "sort_by":
            return "The order in which to sort the results."
        n = strip_edit_prefix(name)
        for suffix in ("_name", "_id"):
            if n.endswith(suffix):
                n = n[: -len(suffix)]
                break
        n = "VPC" if n == "vpc" else n.replace("_", " ")
        return f"The {n} that holds the {self.subject()}."

    def doc_text(self) -> str:
        x = self.display
        if self.archetype == Archetype.CREATE:
            return (
                f"Create a new {x}.\n\n"
                f"To create a {x} interactively, use `{CLI_NAME} {command_group(self.tag)} create` "
                "with no arguments."
            )
        if self.archetype == Archetype.VIEW:
            return (
                f"View {x}.\n\n"
                f"Display information about an {x}.\n\n"
                f"With '--web', open the {x} in a web browser instead."
            )
        if self.archetype == Archetype.EDIT:
            return f"Edit {x} settings."
        if self.archetype == Archetype.LIST:
            return f"List {self.display_plural}."
        return f"Delete {x}."

    def templates(self, has_org: bool, has_project: bool) -> tuple[str, str]:
        x = self.display
        is_projects = self.base == "projects" and has_org
        if self.archetype == Archetype.CREATE:
            if has_org and has_project:
                return f"Created {x} {{name}} in {{organization}}/{{project}}", ""
            if is_projects:
                return f"Created {x} {{organization}}/{{name}}", ""
            return f"Created {x} {{name}}", ""
        if self.archetype == Archetype.EDIT:
            scope = " in {organization}/{project}" if has_org and has_project else ""
            if is_projects:
                return (
                    f"Edited {x} {{organization}}/{{name}}",
                    f"Edited {x} {{organization}}/{{name}} -> {{organization}}/{{new_name}}",
                )
            return f"Edited {x} {{name}}{scope}", f"Edited {x} {{name}} -> {{new_name}}{scope}"
        if self.archetype == Archetype.DELETE:
            if has_org and has_project:
                return f"Deleted {x} {{name}} from {{organization}}/{{project}}", ""
            if is_projects:
                return f"Deleted {x} {{organization}}/{{name}}", ""
            return f"Deleted {x} {{name}}", ""
        return "", ""

    # ------------------------------------------------------------------ #
    # Assembly
    # ------------------------------------------------------------------ #

    def route(self) -> Route:
        path_params: list[str] = []
        query_params: list[str] = []
        for name in self.names:
            param = self.fields.parameters.get(name)
            if param is None:
                continue
            if param.location == ParameterLocation.PATH:
                path_params.append(name)
            elif param.location == ParameterLocation.QUERY:
                query_params.append(name)
        body_fields = {name: strip_edit_prefix(name) for name in self.fields.properties}
        return Route(
            method=self.operation.method,
            path=self.operation.path,
            arg_names=tuple(self.names),
            path_params=tuple(path_params),
            query_params=tuple(query_params),
            body_fields=body_fields,
        )

    def build(self) -> CommandDescriptor:
        identity = self.identity_field()
        scopes = self.scope_fields()
        controls = self.control_fields()

        claimed_shorts = {
            s.flag.short_name for s in scopes + controls if s.flag and s.flag.short_name
        }
        claimed_longs = {s.flag.long_name for s in scopes + controls if s.flag}
        generics = self.generic_fields(claimed_shorts, claimed_longs)

        all_fields = ([identity] if identity else []) + scopes + generics + controls

        prompt_sequence = [s.name for s in scopes if s.prompt != PromptKind.NONE]
        if identity is not None and identity.prompt != PromptKind.NONE:
            prompt_sequence.append(identity.name)
        prompt_sequence.extend(s.name for s in generics if s.prompt != PromptKind.NONE)

        has_org = any(s.attr == "organization" for s in scopes)
        has_project = any(s.attr == "project" for s in scopes)
        success, rename = self.templates(has_org, has_project)

        call_order = tuple(self.names)
        call_order_all: tuple[str, ...] = ()
        if self.archetype == Archetype.LIST:
            call_order_all = tuple(n for n in self.names if n not in PAGINATION_FIELDS)

        archetype_title = self.archetype.value.title()
        return CommandDescriptor(
            archetype=self.archetype,
            resource_tag=self.tag,
            class_name=f"Cmd{class_stem(self.tag)}{archetype_title}",
            command_name=self.archetype.value,
            aliases=("get",) if self.archetype == Archetype.VIEW else (),
            fields=tuple(all_fields),
            doc_text=self.doc_text(),
            api_method=_API_METHODS[self.archetype],
            api_call_order=call_order,
            api_call_order_all=call_order_all,
            prompt_sequence=tuple(prompt_sequence),
            success_template=success,
            rename_template=rename,
            display_name=self.display,
            route=self.route(),
        )


def _prompt_kind(token: TypeToken) -> PromptKind:
    inner = token.unwrap()
    if isinstance(inner, NamedType):
        if inner.is_one_of:
            return PromptKind.ONE_OF
        if inner.name == "ByteCount":
            return PromptKind.BYTE_COUNT
        if inner.name == "Ipv4Net":
            return PromptKind.IPV4_NET
        if inner.name == "Ipv6Net":
            return PromptKind.IPV6_NET
    return PromptKind.TEXT


def _default_for(token: TypeToken) -> Any:
    if token.is_optional or token.is_list:
        return None
    if isinstance(token, ScalarType) and token.name == "bool":
        return False
    return None
