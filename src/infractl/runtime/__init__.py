"""Runtime -- execute generated commands against the API.

Sub-modules:

* :mod:`~infractl.runtime.commands` -- Archetype base classes holding the
  behaviour of create, view, edit, list and delete.
* :mod:`~infractl.runtime.binder` -- Turn a command class into a Typer
  callback.
* :mod:`~infractl.runtime.client` -- Async API client and the per-resource
  collaborator.
* :mod:`~infractl.runtime.context` -- Configuration and collaborators of
  one invocation.
* :mod:`~infractl.runtime.prompts` -- Interactive prompts.
"""

from infractl.runtime.binder import add_commands, bind
from infractl.runtime.client import ApiClient, ResourceClient
from infractl.runtime.commands import (
    Command,
    CreateCommand,
    DeleteCommand,
    EditCommand,
    ListCommand,
    ViewCommand,
)
from infractl.runtime.context import Context, get_context, set_context

__all__ = [
    "ApiClient",
    "Command",
    "Context",
    "CreateCommand",
    "DeleteCommand",
    "EditCommand",
    "ListCommand",
    "ResourceClient",
    "ViewCommand",
    "add_commands",
    "bind",
    "get_context",
    "set_context",
]
