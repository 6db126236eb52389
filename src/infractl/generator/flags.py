"""Derive command-line flag names from parameter and property names.

:func:`derive_flag` is the pure, per-name rule:

1. A leading ``new_`` marker is stripped, so an edited field gets the same
   flag as its create-time counterpart.
2. The long flag is the kebab-cased name, with ``ipv-4``/``ipv-6`` folded to
   ``ipv4``/``ipv6``; ``vpc-name`` and ``router-name`` lose their ``-name``.
3. The short flag is the lowercase first character, overridden in order:
   ``description`` gets ``D``; ``size``, or a character reserved for
   ``-d`` (debug) / ``-h`` (help), gets none; ``ncpus`` gets ``c``;
   ``ipv4-block``/``ipv6-block`` get ``4``/``6``.

:func:`assign_flags` applies the rule to every generic field of one command
in sorted name order and drops the short flag of any field whose letter is
already taken, so collisions never depend on generation order.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from infractl.exceptions import InvalidFieldName
from infractl.models import FlagSpec

EDIT_PREFIX = "new_"
RESERVED_SHORTS = frozenset({"d", "h"})

_DROP_NAME_SUFFIX = frozenset({"vpc-name", "router-name"})
_LONG_REPLACEMENTS = (("ipv-4", "ipv4"), ("ipv-6", "ipv6"))


def strip_edit_prefix(name: str) -> str:
    """``new_description`` -> ``description``."""
    if name.startswith(EDIT_PREFIX):
        return name[len(EDIT_PREFIX):]
    return name


def kebab_case(name: str) -> str:
    """``sort_by`` -> ``sort-by``, ``ipv4Block`` -> ``ipv4-block``."""
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", name)
    text = re.sub(r"[_\s]+", "-", text).lower()
    return re.sub(r"-+", "-", text).strip("-")


def long_flag(name: str) -> str:
    """Long flag (without dashes) for a name that has already lost its ``new_``."""
    long = kebab_case(name)
    for old, new in _LONG_REPLACEMENTS:
        long = long.replace(old, new)
    if long in _DROP_NAME_SUFFIX:
        long = long[: -len("-name")]
    return long


def derive_flag(
    name: str,
    required: bool = False,
    has_default: bool = False,
    reserved: Iterable[str] = RESERVED_SHORTS,
) -> FlagSpec:
    """Derive the :class:`~infractl.models.FlagSpec` of one field.

    Args:
        name: Parameter or property name, possibly ``new_`` prefixed.
        required: Whether the field must be supplied.
        has_default: Whether the field has a default value.
        reserved: Short letters that must not be used. Defaults to ``d``
            and ``h``.

    Returns:
        The derived flag spec.

    Raises:
        InvalidFieldName: If *name* is shorter than two characters.

    Example::

        >>> derive_flag("description").short_name
        'D'
        >>> derive_flag("size").short_name is None
        True
        >>> derive_flag("new_name") == derive_flag("name")
        True
    """
    if len(name) < 2:
        raise InvalidFieldName(f"Field name '{name}' is too short to derive a flag from")
    stripped = strip_edit_prefix(name)
    if not stripped:
        raise InvalidFieldName(f"Field name '{name}' is empty after removing '{EDIT_PREFIX}'")

    long = long_flag(stripped)
    first = stripped[0].lower()
    reserved_set = set(reserved)

    short: str | None
    if stripped == "description":
        short = "D"
    elif stripped == "size" or first in reserved_set:
        short = None
    elif stripped == "ncpus":
        short = "c"
    elif long == "ipv4-block":
        short = "4"
    elif long == "ipv6-block":
        short = "6"
    else:
        short = first

    return FlagSpec(long_name=long, short_name=short, required=required, has_default=has_default)


def assign_flags(
    fields: Iterable[tuple[str, bool, bool]],
    claimed_shorts: Iterable[str] = (),
    claimed_longs: Iterable[str] = (),
) -> dict[str, FlagSpec]:
    """Derive flags for the generic fields of one command without collisions.

    Fields are processed in sorted name order. A field whose short letter is
    reserved or already taken loses its short flag. A field whose long flag
    is already taken falls back to the kebab-cased full name.

    Args:
        fields: ``(name, required, has_default)`` triples.
        claimed_shorts: Letters used by the command's fixed flags
            (``-o``, ``-p``, ``-l``, ``-w``).
        claimed_longs: Long flags used by the command's fixed flags.

    Returns:
        Mapping of field name to its flag, in sorted name order.

    Raises:
        InvalidFieldName: If a name is too short or two fields cannot be
            given distinct long flags.
    """
    fixed = set(RESERVED_SHORTS) | set(claimed_shorts)
    shorts = set(fixed)
    longs = set(claimed_longs)
    flags: dict[str, FlagSpec] = {}

    for name, required, has_default in sorted(fields):
        spec = derive_flag(name, required=required, has_default=has_default, reserved=fixed)
        if spec.long_name in longs:
            fallback = kebab_case(name)
            if fallback in longs:
                raise InvalidFieldName(f"Field '{name}' collides with flag --{spec.long_name}")
            spec = spec.model_copy(update={"long_name": fallback})
        if spec.short_name is not None and spec.short_name in shorts:
            spec = spec.model_copy(update={"short_name": None})

        longs.add(spec.long_name)
        if spec.short_name is not None:
            shorts.add(spec.short_name)
        flags[name] = spec

    return flags
