"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for infractl:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.infractl/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Settings file** -- A single :class:`~infractl.models.CLIConfig` JSON
  file (API host, token, default organization, output format).
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  ``INFRACTL_*`` environment variables and the settings file into the
  effective configuration.
* **Generated commands** -- :func:`get_commands_dir` locates the directory
  that ``infractl generate`` writes resource modules into.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so that a crash never leaves a half-written settings
file or generated module behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from infractl.exceptions import ConfigError
from infractl.models import CLIConfig

_APP_NAME = "infractl"
_CONFIG_FILENAME = "config.json"

ENV_HOST = "INFRACTL_HOST"
ENV_TOKEN = "INFRACTL_TOKEN"
ENV_ORG = "INFRACTL_ORG"
ENV_FORMAT = "INFRACTL_FORMAT"
ENV_PROMPT = "INFRACTL_PROMPT"
ENV_COMMANDS_DIR = "INFRACTL_COMMANDS_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/infractl/`` (default ``~/.config/infractl/``).
    On macOS/Windows: ``~/.infractl/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/infractl/`` (default ``~/.cache/infractl/``).
    On macOS/Windows: ``~/.infractl/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/infractl/`` (default ``~/.local/share/infractl/``).
    On macOS/Windows: ``~/.infractl/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_commands_dir(config: Optional[CLIConfig] = None) -> Path:
    """Return the directory holding generated resource modules.

    Resolution order: ``INFRACTL_COMMANDS_DIR``, ``config.commands_dir``,
    then ``<data_dir>/commands``. The directory is not created here; a
    missing directory simply means nothing has been generated yet.
    """
    env_value = os.environ.get(ENV_COMMANDS_DIR, "")
    if env_value:
        return Path(env_value).expanduser()
    if config is not None and config.commands_dir:
        return Path(config.commands_dir).expanduser()
    return get_data_dir() / "commands"


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings file ---


def _config_path() -> Path:
    """Path to the settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> CLIConfig:
    """Load the settings file from the XDG config directory.

    Returns:
        The deserialised :class:`~infractl.models.CLIConfig`. If the file
        does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _config_path()
    if not path.is_file():
        return CLIConfig()
    try:
        text = path.read_text(encoding="utf-8")
        return CLIConfig.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: CLIConfig) -> None:
    """Persist the settings atomically to disk.

    Args:
        config: The configuration to save.
    """
    data = config.model_dump(mode="json", exclude_none=True)
    atomic_write(_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    return value.lower() not in ("0", "false", "no", "off", "disabled")


def resolve_config(
    cli_host: Optional[str] = None,
    cli_format: Optional[str] = None,
    cli_no_input: bool = False,
) -> CLIConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``--host``, ``--format``, ``--no-input``)
        2. Environment variables (``INFRACTL_HOST``, ``INFRACTL_TOKEN``,
           ``INFRACTL_ORG``, ``INFRACTL_FORMAT``, ``INFRACTL_PROMPT``,
           ``INFRACTL_COMMANDS_DIR``, ``BROWSER``)
        3. User config (``~/.config/infractl/config.json``)
        4. Defaults

    Returns:
        The effective :class:`~infractl.models.CLIConfig`.

    Raises:
        ConfigError: If the settings file is invalid or the resolved output
            format is unknown.
    """
    config = load_config()

    overrides: dict[str, object] = {}
    for env_var, key in (
        (ENV_HOST, "host"),
        (ENV_TOKEN, "token"),
        (ENV_ORG, "default_organization"),
        (ENV_FORMAT, "format"),
        (ENV_COMMANDS_DIR, "commands_dir"),
        ("BROWSER", "browser"),
    ):
        value = os.environ.get(env_var)
        if value:
            overrides[key] = value

    prompt = _env_flag(ENV_PROMPT)
    if prompt is not None:
        overrides["prompt"] = prompt

    if cli_host is not None:
        overrides["host"] = cli_host
    if cli_format is not None:
        overrides["format"] = cli_format
    if cli_no_input:
        overrides["prompt"] = False

    config = config.model_copy(update=overrides)
    if config.format not in ("table", "json", "yaml"):
        raise ConfigError(f"Unknown output format '{config.format}' (expected table, json or yaml)")
    return config

