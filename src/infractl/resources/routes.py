"""Hand-written route edit.

A route's destination and target are "exactly one of" values. Generated
edit commands cannot take those from flags, so this command accepts them
as ``TYPE=VALUE`` (``--destination ip_net=10.0.0.0/24``,
``--target instance=web-1``).
"""

from __future__ import annotations

from typing import Any

from infractl.exceptions import UsageError
from infractl.models import (
    FieldRole,
    FieldSpec,
    FlagSpec,
    HTTPMethod,
    OptionalType,
    Route,
    ScalarType,
)
from infractl.runtime.commands import EditCommand
from infractl.runtime.context import Context

_ARGS = (
    "new_description",
    "new_destination",
    "new_name",
    "new_target",
    "organization_name",
    "project_name",
    "route_name",
    "router_name",
    "vpc_name",
)

_PATH = (
    "/organizations/{organization_name}/projects/{project_name}"
    "/vpcs/{vpc_name}/routers/{router_name}/routes/{route_name}"
)


def parse_typed_value(flag: str, text: Any) -> Any:
    """``"ip=10.0.0.1"`` -> ``{"type": "ip", "value": "10.0.0.1"}``.

    Raises:
        UsageError: If *text* has no ``=``.
    """
    if not isinstance(text, str) or not text:
        return text
    kind, sep, value = text.partition("=")
    if not sep or not kind:
        raise UsageError(f"{flag} must look like TYPE=VALUE, got '{text}'")
    return {"type": kind, "value": value}


class CmdRouteEdit(EditCommand):
    """Edit route settings."""

    tag = "routes"
    name = "edit"
    display_name = "route"
    help_text = (
        "Edit route settings.\n\n"
        "Destinations and targets are given as TYPE=VALUE, for example "
        "--destination ip_net=10.0.0.0/24 --target instance=web-1."
    )
    api_method = "put"
    api_call_order = _ARGS
    success_template = "Edited route {name} in {organization}/{project}"
    rename_template = "Edited route {name} -> {new_name} in {organization}/{project}"
    routes = {
        "put": Route(
            method=HTTPMethod.PUT,
            path=_PATH,
            arg_names=_ARGS,
            path_params=(
                "organization_name",
                "project_name",
                "route_name",
                "router_name",
                "vpc_name",
            ),
            body_fields={
                "new_description": "description",
                "new_destination": "destination",
                "new_name": "name",
                "new_target": "target",
            },
        )
    }
    fields = (
        FieldSpec(
            name="route_name",
            attr="route",
            role=FieldRole.IDENTITY,
            required=True,
            help="The route to edit. Can be an ID or name.",
        ),
        FieldSpec(
            name="organization_name",
            attr="organization",
            role=FieldRole.SCOPE,
            flag=FlagSpec(long_name="organization", short_name="o", required=True),
            required=True,
            envvar="INFRACTL_ORG",
            help="The organization that holds the project.",
        ),
        FieldSpec(
            name="project_name",
            attr="project",
            role=FieldRole.SCOPE,
            flag=FlagSpec(long_name="project", short_name="p", required=True),
            required=True,
            help="The project that holds the route.",
        ),
        FieldSpec(
            name="vpc_name",
            attr="vpc",
            flag=FlagSpec(long_name="vpc", short_name="v", required=True),
            required=True,
            help="The VPC that holds the route.",
        ),
        FieldSpec(
            name="router_name",
            attr="router",
            flag=FlagSpec(long_name="router", short_name="r", required=True),
            required=True,
            help="The router that holds the route.",
        ),
        FieldSpec(
            name="new_description",
            attr="new_description",
            type=OptionalType(inner=ScalarType(name="str")),
            flag=FlagSpec(long_name="description", short_name="D", has_default=True),
            help="The new description for the route.",
        ),
        FieldSpec(
            name="new_name",
            attr="new_name",
            type=OptionalType(inner=ScalarType(name="str")),
            flag=FlagSpec(long_name="name", short_name="n", has_default=True),
            help="The new name for the route.",
        ),
        FieldSpec(
            name="new_destination",
            attr="new_destination",
            type=OptionalType(inner=ScalarType(name="str")),
            flag=FlagSpec(long_name="destination", has_default=True),
            help="The new destination, as TYPE=VALUE.",
        ),
        FieldSpec(
            name="new_target",
            attr="new_target",
            type=OptionalType(inner=ScalarType(name="str")),
            flag=FlagSpec(long_name="target", short_name="t", has_default=True),
            help="The new target, as TYPE=VALUE.",
        ),
    )

    async def run(self, ctx: Context) -> None:
        for name, flag in (("new_destination", "--destination"), ("new_target", "-t|--target")):
            self.values[name] = parse_typed_value(flag, self.values.get(name))
        await super().run(ctx)

