"""Interactive prompts used by generated commands.

:class:`Prompter` is the thin layer over :func:`typer.prompt` and
:func:`typer.confirm` that commands call; tests replace it with a
:class:`unittest.mock.Mock`. The disambiguation helpers build on it for
values a plain text prompt cannot produce: "exactly one of" compositions,
byte sizes and IP networks.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Any, Optional, Sequence

import typer

from infractl.exceptions import UsageError
from infractl.output import info, warning

_BYTE_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "kb": 1000,
    "mb": 1000**2,
    "gb": 1000**3,
    "tb": 1000**4,
    "kib": 1024,
    "mib": 1024**2,
    "gib": 1024**3,
    "tib": 1024**4,
}

_BYTE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]*)\s*$")


class Prompter:
    """Ask the user for values on the terminal."""

    def text(self, label: str, default: Optional[str] = None) -> str:
        if default is None:
            return str(typer.prompt(label)).strip()
        return str(typer.prompt(label, default=default, show_default=False)).strip()

    def select(self, label: str, items: Sequence[str]) -> str:
        """Show a numbered list and return the chosen item.

        A single item is selected without asking.

        Raises:
            UsageError: If there is nothing to choose from.
        """
        if not items:
            raise UsageError(f"{label} nothing to choose from")
        if len(items) == 1:
            info(f"{label} {items[0]}")
            return items[0]

        info(label)
        for i, item in enumerate(items, 1):
            info(f"  {i}. {item}")
        while True:
            choice = typer.prompt("Select number", default="1")
            try:
                idx = int(choice) - 1
            except ValueError:
                idx = -1
            if 0 <= idx < len(items):
                return items[idx]
            warning(f"Selection must be between 1 and {len(items)}.")

    def confirm(self, label: str) -> bool:
        return typer.confirm(label)


def parse_byte_count(text: str) -> int:
    """Parse ``"10 GiB"``, ``"512MB"`` or ``"1024"`` into a byte count.

    Raises:
        ValueError: If *text* is not a size.

    Example::

        >>> parse_byte_count("1 GiB")
        1073741824
    """
    match = _BYTE_RE.match(text)
    if match is None:
        raise ValueError(f"'{text}' is not a size")
    number, unit = match.groups()
    try:
        factor = _BYTE_UNITS[unit.lower()]
    except KeyError:
        raise ValueError(f"Unknown size unit '{unit}'") from None
    return int(float(number) * factor)


def prompt_byte_count(prompter: Prompter, label: str) -> int:
    """Ask for a size with units until it parses, and echo the byte count."""
    while True:
        text = prompter.text(f"{label} (e.g. 10 GiB)")
        try:
            value = parse_byte_count(text)
        except ValueError as exc:
            warning(str(exc))
            continue
        info(f"Using {value} bytes")
        return value


def prompt_ipnet(prompter: Prompter, label: str, version: int) -> str:
    """Ask for an IPv4 or IPv6 network in CIDR notation until it is valid."""
    while True:
        text = prompter.text(label)
        try:
            network = ipaddress.ip_network(text, strict=False)
        except ValueError as exc:
            warning(str(exc))
            continue
        if network.version != version:
            warning(f"'{text}' is not an IPv{version} network")
            continue
        return str(network)


def prompt_one_of(prompter: Prompter, label: str, variants: Sequence[str]) -> dict[str, Any]:
    """Choose a variant of an "exactly one of" value, then its value.

    Returns:
        ``{"type": variant}`` plus ``"value"`` when one was entered.
    """
    variant = prompter.select(label, list(variants))
    value = prompter.text(f"{variant} value:", default="")
    if not value:
        return {"type": variant}
    return {"type": variant, "value": value}
