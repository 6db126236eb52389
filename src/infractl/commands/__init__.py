"""Built-in CLI sub-commands for infractl.

This package groups the Typer sub-command modules that sit beside the
generated resource groups in the top-level command tree:

* :mod:`~infractl.commands.generate` -- render resource command modules
  from an OpenAPI description.
* :mod:`~infractl.commands.config` -- view and modify the settings file.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``config``) or a plain callback function
registered directly on the root app (for single commands like
``generate``).
"""
