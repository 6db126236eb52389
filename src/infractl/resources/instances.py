"""Hand-written instance subcommands: start, stop and reboot.

These are state transitions rather than CRUD operations, so the generator
has no archetype for them.
"""

from __future__ import annotations

from typing import ClassVar

from infractl.models import FieldRole, FieldSpec, FlagSpec, HTTPMethod, Route, ScalarType
from infractl.runtime.commands import Command
from infractl.runtime.context import Context

_INSTANCE_PATH = (
    "/organizations/{organization_name}/projects/{project_name}/instances/{instance_name}"
)
_ARGS = ("instance_name", "organization_name", "project_name")


def _route(action: str) -> Route:
    return Route(
        method=HTTPMethod.POST,
        path=f"{_INSTANCE_PATH}/{action}",
        arg_names=_ARGS,
        path_params=_ARGS,
    )


def _fields(action: str) -> tuple[FieldSpec, ...]:
    return (
        FieldSpec(
            name="instance_name",
            attr="instance",
            role=FieldRole.IDENTITY,
            type=ScalarType(name="str"),
            required=True,
            help=f"The instance to {action}. Can be an ID or name.",
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
            help="The project that holds the instance.",
        ),
    )


class InstanceAction(Command):
    """Post one state transition for an instance."""

    tag = "instances"
    display_name = "instance"
    api_method = "post"
    api_call_order = _ARGS
    past_tense: ClassVar[str] = ""

    async def run(self, ctx: Context) -> None:
        self.apply_defaults(ctx)
        self.check_scope()
        async with ctx.api_client() as api:
            await api.resource(self.routes).post(*self.call_args(self.api_call_order))
        values = self.template_values()
        ctx.output.success(
            f"{self.past_tense} instance {values['name']} in "
            f"{values['organization']}/{values['project']}"
        )


class CmdInstanceStart(InstanceAction):
    """Start an instance."""

    name = "start"
    help_text = "Start an instance."
    past_tense = "Started"
    routes = {"post": _route("start")}
    fields = _fields("start")


class CmdInstanceStop(InstanceAction):
    """Stop an instance."""

    name = "stop"
    help_text = "Stop an instance."
    past_tense = "Stopped"
    routes = {"post": _route("stop")}
    fields = _fields("stop")


class CmdInstanceReboot(InstanceAction):
    """Reboot an instance."""

    name = "reboot"
    help_text = "Reboot an instance."
    past_tense = "Rebooted"
    routes = {"post": _route("reboot")}
    fields = _fields("reboot")
