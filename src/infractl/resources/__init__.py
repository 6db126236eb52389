"""Resource declarations and hand-written subcommands.

:data:`DECLARATIONS` lists every resource ``infractl generate`` renders a
module for. A declaration may name hand-written variants
(``name -> "module:Class"``); the generator leaves those subcommands alone
and imports the hand-written class instead.
"""

from __future__ import annotations

from typing import Optional

from infractl.models import ResourceDeclaration

DECLARATIONS: tuple[ResourceDeclaration, ...] = (
    ResourceDeclaration(
        tag="organizations",
        module="organizations",
        command="organization",
        help="Create, list, edit, view, and delete organizations.",
    ),
    ResourceDeclaration(
        tag="projects",
        module="projects",
        command="project",
        help="Create, list, edit, view, and delete projects.",
    ),
    ResourceDeclaration(
        tag="disks",
        module="disks",
        command="disk",
        help="Create, list, view, and delete disks.",
    ),
    ResourceDeclaration(
        tag="instances",
        module="instances",
        command="instance",
        help="Create, list, view, delete, start, stop, and reboot instances.",
        variants={
            "start": "infractl.resources.instances:CmdInstanceStart",
            "stop": "infractl.resources.instances:CmdInstanceStop",
            "reboot": "infractl.resources.instances:CmdInstanceReboot",
        },
    ),
    ResourceDeclaration(
        tag="vpcs",
        module="vpcs",
        command="vpc",
        help="Create, list, edit, view, and delete VPCs.",
    ),
    ResourceDeclaration(
        tag="subnets",
        module="subnets",
        command="subnet",
        help="Create, list, edit, view, and delete subnets.",
    ),
    ResourceDeclaration(
        tag="routes",
        module="routes",
        command="route",
        help="Create, list, edit, view, and delete routes.",
        variants={"edit": "infractl.resources.routes:CmdRouteEdit"},
    ),
    ResourceDeclaration(
        tag="images:global",
        module="images_global",
        command="image-global",
        help="Create, list, view, and delete global images.",
    ),
    ResourceDeclaration(
        tag="images",
        module="images",
        command="image",
        help="Create, list, view, and delete images.",
    ),
    ResourceDeclaration(
        tag="snapshots",
        module="snapshots",
        command="snapshot",
        help="Create, list, view, and delete snapshots.",
    ),
    ResourceDeclaration(
        tag="routers",
        module="routers",
        command="router",
        help="Create, list, edit, view, and delete routers.",
    ),
    ResourceDeclaration(
        tag="roles",
        module="roles",
        command="role",
        help="Manage built-in roles.",
    ),
    ResourceDeclaration(
        tag="racks",
        module="racks",
        command="rack",
        help="Manage racks.",
    ),
    ResourceDeclaration(
        tag="sleds",
        module="sleds",
        command="sled",
        help="Manage sleds.",
    ),
)


def find_declaration(tag: str) -> Optional[ResourceDeclaration]:
    for declaration in DECLARATIONS:
        if declaration.tag == tag:
            return declaration
    return None
