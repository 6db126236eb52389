"""Config commands -- view and modify the settings file.

Provides the ``infractl config`` sub-command group for reading, updating,
and resetting ``config.json`` in the infractl config directory
(:class:`~infractl.models.CLIConfig`). Values set here are the lowest
precedence layer: environment variables and command-line flags override
them.
"""

from __future__ import annotations

import typer

from infractl.config import get_config_dir, load_config, save_config
from infractl.exceptions import InfractlError
from infractl.models import CLIConfig
from infractl.output import error, info, render_record, success

config_app = typer.Typer(no_args_is_help=True)

_SECRET_KEYS = frozenset({"token"})


def _load() -> CLIConfig:
    try:
        return load_config()
    except InfractlError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@config_app.command("show")
def config_show() -> None:
    """Show the settings file.

    The token is masked.

    Example::

        infractl config show
        infractl --format json config show
    """
    data = _load().model_dump(mode="json")
    for key in _SECRET_KEYS:
        if data.get(key):
            data[key] = "********"
    info(f"Config directory: {get_config_dir()}")
    render_record(data)


@config_app.command("get")
def config_get(key: str = typer.Argument(help="Config key, e.g. 'host'.")) -> None:
    """Print one setting."""
    data = _load().model_dump(mode="json")
    if key not in data:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)
    value = data[key]
    typer.echo("" if value is None else value)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'host'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set one setting.

    The value is coerced to the field's type (bool or int) and the result
    is validated against :class:`~infractl.models.CLIConfig` before saving.

    Raises:
        typer.Exit: With code 2 if the key is unknown, the value cannot be
            coerced, or validation fails.

    Example::

        infractl config set host api.example.com
        infractl config set prompt false
        infractl config set timeout 60
    """
    config = _load()
    data = config.model_dump(mode="json")
    if key not in CLIConfig.model_fields:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    annotation = CLIConfig.model_fields[key].annotation
    coerced: object = value
    if annotation is bool:
        coerced = value.lower() in ("true", "1", "yes", "on")
    elif annotation is int:
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None

    data[key] = coerced
    try:
        new_config = CLIConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_config(new_config)
    shown = "********" if key in _SECRET_KEYS else coerced
    success(f"Set {key} = {shown}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Reset the settings file to defaults.

    Example::

        infractl config reset --yes
    """
    if not yes:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_config(CLIConfig())
    success("Configuration reset to defaults.")
