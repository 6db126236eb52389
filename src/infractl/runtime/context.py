"""Per-invocation state shared by generated commands.

The root CLI callback builds the :class:`CLIConfig` and hands it to
:func:`configure`; commands then read the process-wide :class:`Context`
through :func:`get_context`. Tests install their own context (with an
:class:`httpx.MockTransport`, a mocked prompter and browser) via
:func:`set_context` before invoking the CLI.
"""

from __future__ import annotations

import sys
import webbrowser
from typing import Callable, Optional

import httpx

from infractl.models import CLIConfig
from infractl.output import OutputManager, get_output
from infractl.runtime.client import ApiClient
from infractl.runtime.prompts import Prompter


class Context:
    """Configuration and collaborators of one command invocation.

    Args:
        config: Resolved settings. Defaults to an empty :class:`CLIConfig`.
        prompter: Source of interactive answers.
        transport: httpx transport handed to every :class:`ApiClient`.
        browser: Callable that opens a URL; defaults to :mod:`webbrowser`
            honouring ``config.browser``.
        interactive: Force prompting on or off. ``None`` checks the
            terminal.
    """

    def __init__(
        self,
        config: Optional[CLIConfig] = None,
        prompter: Optional[Prompter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        browser: Optional[Callable[[str], object]] = None,
        interactive: Optional[bool] = None,
    ) -> None:
        self.config = config or CLIConfig()
        self.prompter = prompter or Prompter()
        self.transport = transport
        self._browser = browser
        self._interactive = interactive

    @property
    def output(self) -> OutputManager:
        return get_output()

    @property
    def can_prompt(self) -> bool:
        """True when prompts are allowed and both stdin and stdout are terminals."""
        if not self.config.prompt:
            return False
        if self._interactive is not None:
            return self._interactive
        return sys.stdin.isatty() and sys.stdout.isatty()

    def api_client(self) -> ApiClient:
        return ApiClient(self.config, transport=self.transport)

    def open_browser(self, url: str) -> None:
        if self._browser is not None:
            self._browser(url)
        elif self.config.browser:
            webbrowser.get(self.config.browser).open(url)
        else:
            webbrowser.open(url)


# --- Module-level accessor ---

_context: Optional[Context] = None


def get_context() -> Context:
    """Return the global context, creating a default one if needed."""
    global _context
    if _context is None:
        _context = Context()
    return _context


def set_context(context: Context) -> None:
    global _context
    _context = context


def reset_context() -> None:
    global _context
    _context = None


def configure(config: CLIConfig) -> Context:
    """Install *config* on the global context, keeping injected collaborators."""
    context = get_context()
    context.config = config
    return context
