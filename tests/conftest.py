"""Shared test fixtures for infractl.

Provides reusable fixtures for loading the API description fixture,
creating isolated config environments, resetting process-wide state, and
running CLI commands. These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Iterator

import pytest

from infractl.output import OutputManager, reset_output, set_output
from infractl.runtime.context import reset_context


FIXTURES_DIR = Path(__file__).parent / "fixtures"

_ENV_VARS = (
    "INFRACTL_HOST",
    "INFRACTL_TOKEN",
    "INFRACTL_ORG",
    "INFRACTL_FORMAT",
    "INFRACTL_PROMPT",
    "INFRACTL_COMMANDS_DIR",
    "BROWSER",
)


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests() -> Iterator[None]:
    """Reset the global OutputManager and runtime Context after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  The Context carries the transport
    and prompter a test installed, which must not leak into the next one.
    """
    yield
    reset_output()
    reset_context()


# ---------------------------------------------------------------------------
# API description fixtures
# ---------------------------------------------------------------------------


_INFRA_API: dict[str, Any] = {}


@pytest.fixture
def infra_api() -> dict[str, Any]:
    """The infrastructure API description, as a fresh dict per test."""
    if not _INFRA_API:
        with open(FIXTURES_DIR / "infra_api.json") as f:
            _INFRA_API.update(json.load(f))
    return copy.deepcopy(_INFRA_API)


@pytest.fixture
def infra_api_path() -> Path:
    """Path of the infrastructure API description on disk."""
    return FIXTURES_DIR / "infra_api.json"


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all INFRACTL_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("infractl.config._is_xdg_platform", lambda: True)

    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> Iterator[OutputManager]:
    """Install a colourless OutputManager so messages are easy to assert on."""
    output = OutputManager(no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
