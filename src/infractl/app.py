"""Typer application factory and CLI entry point for infractl.

This module wires together the top-level Typer application, registers the
built-in sub-commands (``generate``, ``config``), and loads the generated
resource modules from the commands directory at startup: each module
becomes one sub-group (``infractl disk ...``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, builds the app, and invokes
it. Unhandled exceptions are written to a crash log under the cache
directory.

See Also:
    :mod:`infractl.config`: Settings resolution.
    :mod:`infractl.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import importlib.util
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any, Optional

import typer

from infractl import __version__
from infractl.exit_codes import EXIT_GENERIC_FAILURE

GENERATED_PACKAGE = "infractl_generated"


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"infractl {__version__}")
        raise typer.Exit()


def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: table, json or yaml."
    ),
    host: Optional[str] = typer.Option(None, "--host", help="API host to talk to."),
    no_input: bool = typer.Option(
        False, "--no-input", help="Disable interactive prompts."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the settings (flags over environment over config file),
    initialises the global :class:`~infractl.output.OutputManager`, and
    installs the settings on the runtime context the commands read.

    Args:
        version: If ``True``, print the version string and exit.
        output_format: Output format override.
        host: API host override.
        no_input: Disable all interactive prompts.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
    """
    from infractl.config import resolve_config
    from infractl.exceptions import ConfigError
    from infractl.output import OutputFormat, OutputManager, error, set_output
    from infractl.runtime.context import configure

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    try:
        config = resolve_config(cli_host=host, cli_format=output_format, cli_no_input=no_input)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    set_output(
        OutputManager(
            format=OutputFormat(config.format),
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    configure(config)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from infractl.config import get_cache_dir

    logs_dir = get_cache_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


# ------------------------------------------------------------------ #
# Generated resource modules
# ------------------------------------------------------------------ #


def _load_module(path: Path) -> ModuleType:
    """Import a generated module from *path* without touching ``sys.path``."""
    name = f"{GENERATED_PACKAGE}.{path.stem}"
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _default_commands_dir() -> Path:
    from infractl.config import get_commands_dir, load_config
    from infractl.exceptions import ConfigError

    try:
        return get_commands_dir(load_config())
    except ConfigError:
        return get_commands_dir()


def load_resource_commands(target: typer.Typer, commands_dir: Optional[Path] = None) -> list[str]:
    """Attach one sub-group per generated module in *commands_dir*.

    A module that fails to import is reported and skipped, so the
    built-in commands always keep working.

    Args:
        target: The root application.
        commands_dir: Directory of generated modules. Defaults to the
            configured commands directory.

    Returns:
        The names of the attached groups, in file-name order.
    """
    from infractl.output import debug, warning
    from infractl.runtime.binder import add_commands

    directory = commands_dir or _default_commands_dir()
    if not directory.is_dir():
        debug(f"No generated commands in {directory}; run 'infractl generate'")
        return []

    attached: list[str] = []
    for path in sorted(directory.glob("*.py")):
        if path.name.startswith("_"):
            continue
        try:
            module = _load_module(path)
            group = typer.Typer(no_args_is_help=True, help=module.HELP)
            add_commands(group, module.COMMANDS)
        except Exception as exc:
            warning(f"Could not load {path.name}: {exc}")
            continue
        target.add_typer(group, name=module.COMMAND)
        attached.append(module.COMMAND)
    return attached


def create_app(commands_dir: Optional[Path] = None) -> typer.Typer:
    """Build the root application with built-in and generated commands.

    Args:
        commands_dir: Directory of generated modules. Defaults to the
            configured commands directory.

    Returns:
        The ready-to-run :class:`typer.Typer` application.
    """
    from infractl.commands.config import config_app
    from infractl.commands.generate import generate_command

    app = typer.Typer(
        name="infractl",
        help="Create, list, view, edit, and delete cloud infrastructure resources.",
        no_args_is_help=True,
        add_completion=True,
        rich_markup_mode="rich",
    )
    app.callback()(main_callback)
    app.command("generate")(generate_command)
    app.add_typer(config_app, name="config", help="Configuration management.")
    load_resource_commands(app, commands_dir)
    return app


def main() -> None:
    """CLI entry point invoked by the ``infractl`` console script.

    Unhandled :class:`~infractl.exceptions.InfractlError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app = create_app()
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from infractl.exceptions import InfractlError
        from infractl.output import error

        if isinstance(exc, InfractlError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
