"""Output formatting system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (the records and collections returned by
  the API, rendered as a table, JSON, or YAML). This is what downstream
  tools pipe and parse.
* **stderr** -- all diagnostics (status, success and deletion markers,
  warnings, errors, suggestions). Never contaminates the data stream.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- a stateful object holding the format
   preference, Rich consoles, and quiet/verbose flags. Created once in
   :func:`~infractl.app.main_callback` and installed via :func:`set_output`.
2. Module-level convenience functions (:func:`info`, :func:`error`,
   :func:`debug`, etc.) that delegate to the global ``OutputManager``
   instance so callers do not need to pass the manager around.

This is also the project's logging channel: there is no separate logger,
diagnostics are written with :func:`debug` (``--verbose`` only),
:func:`info`, :func:`warning` and :func:`error`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table


SUCCESS_ICON = "✔"


class OutputFormat(str, Enum):
    """Enumeration of supported data output formats.

    ``TABLE`` renders a Rich table (a two-column, rotated table for a
    single record). ``JSON`` and ``YAML`` dump the API payload as-is.
    """

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


class OutputManager:
    """Central manager for all CLI output with stdout/stderr discipline.

    Maintains two Rich :class:`~rich.console.Console` instances -- one for
    stdout (data) and one for stderr (diagnostics) -- and routes every
    output call to the correct stream with appropriate formatting.

    Args:
        format: Default data format used when a command does not pass an
            explicit ``--format``.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TABLE,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._format = format
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        # Console for stdout (data output)
        self._stdout = Console(file=sys.stdout, no_color=self._no_color)

        # Console for stderr (diagnostics)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The default data format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        """Whether quiet mode is enabled."""
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        """Whether verbose mode is enabled."""
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def render_record(self, data: Any, format: Optional[OutputFormat] = None) -> None:
        """Render a single API record to stdout.

        In table mode the record is rotated: one row per attribute, with
        nested values shown as compact JSON.

        Args:
            data: The decoded response body (normally a dict).
            format: Overrides the manager's default format.
        """
        fmt = format or self._format
        if fmt != OutputFormat.TABLE or not isinstance(data, dict):
            self._dump(data, fmt)
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("field")
        table.add_column("value")
        for key, value in data.items():
            table.add_row(escape(str(key)), escape(_cell(value)))
        self._stdout.print(table)

    def render_collection(self, items: list[Any], format: Optional[OutputFormat] = None) -> None:
        """Render a list of API records to stdout.

        In table mode the columns are the keys of the records, in the order
        they first appear.

        Args:
            items: The records of one page, or of every page with
                ``--paginate``.
            format: Overrides the manager's default format.
        """
        fmt = format or self._format
        if fmt != OutputFormat.TABLE:
            self._dump(items, fmt)
            return

        headers: list[str] = []
        for item in items:
            if isinstance(item, dict):
                for key in item:
                    if key not in headers:
                        headers.append(key)

        table = Table(show_header=True, header_style="bold cyan")
        for h in headers or ["value"]:
            table.add_column(escape(h))
        for item in items:
            if isinstance(item, dict):
                table.add_row(*(escape(_cell(item.get(h))) for h in headers))
            else:
                table.add_row(escape(_cell(item)))
        self._stdout.print(table)

    def print_data(self, text: str) -> None:
        """Print raw text to stdout.

        Args:
            text: The string to write. A trailing newline is appended.
        """
        print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed by ``--quiet``.

        Args:
            message: The message text.
        """
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(escape(message))

    def success(self, message: str) -> None:
        """Print a green check-marked success line to stderr. Suppressed by ``--quiet``.

        Args:
            message: The message text.
        """
        if not self._quiet:
            if self._no_color:
                print(f"{SUCCESS_ICON} {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[green]{SUCCESS_ICON}[/green] {escape(message)}")

    def destructive(self, message: str) -> None:
        """Print a red check-marked line for a completed deletion. Suppressed by ``--quiet``.

        Args:
            message: The message text.
        """
        if not self._quiet:
            if self._no_color:
                print(f"{SUCCESS_ICON} {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[red]{SUCCESS_ICON}[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr. NOT suppressed by ``--quiet``.

        Args:
            message: The warning text.
        """
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed.

        Args:
            message: The error text.
        """
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def suggest(self, message: str) -> None:
        """Print a dimmed next-step suggestion to stderr. Suppressed by ``--quiet``.

        Args:
            message: The suggestion text (prefixed with an arrow on output).
        """
        if not self._quiet:
            formatted = f"→ {message}"
            if self._no_color:
                print(formatted, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]{escape(formatted)}[/dim]")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active.

        Args:
            message: The debug text (prefixed with ``[debug]`` on output).
        """
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]\\[debug] {escape(message)}[/dim]")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _dump(self, data: Any, fmt: OutputFormat) -> None:
        if fmt == OutputFormat.YAML:
            self.print_data(
                yaml.safe_dump(_plain(data), sort_keys=False, allow_unicode=True).rstrip("\n")
            )
        else:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _cell(value: Any) -> str:
    """Render one table cell."""
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _plain(data: Any) -> Any:
    """Round-trip through JSON so YAML only sees plain types."""
    return json.loads(json.dumps(data, default=str))


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager` instance.

    If no instance has been installed via :func:`set_output`, a default
    ``OutputManager`` is created lazily.

    Returns:
        The active :class:`OutputManager`.
    """
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance.

    Called once during CLI startup from :func:`~infractl.app.main_callback`.

    Args:
        output: The configured manager to install.
    """
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def render_record(data: Any, format: Optional[OutputFormat] = None) -> None:
    """Render one record to stdout via the global :class:`OutputManager`."""
    get_output().render_record(data, format)


def render_collection(items: list[Any], format: Optional[OutputFormat] = None) -> None:
    """Render a collection to stdout via the global :class:`OutputManager`."""
    get_output().render_collection(items, format)


def print_data(text: str) -> None:
    """Print raw data to stdout via the global OutputManager."""
    get_output().print_data(text)


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def success(message: str) -> None:
    """Print success message to stderr via the global OutputManager."""
    get_output().success(message)


def destructive(message: str) -> None:
    """Print deletion success message to stderr via the global OutputManager."""
    get_output().destructive(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def suggest(message: str) -> None:
    """Print next-step suggestion to stderr via the global OutputManager."""
    get_output().suggest(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
