"""Names derived from a resource tag.

A tag such as ``"disks"`` yields a singular (``disk``), a plural, a display
name used in help and success messages, and the stem of generated class
names. A tag may carry a ``":global"`` suffix (``"images:global"``): it is
stripped before every derivation and re-applied as a qualifier to display
and class names.

The pluralisation rules are deliberately small: strip or add ``s``, add
``es`` after ``s``, and turn a trailing ``y`` into ``ies``. Irregular plurals
are not supported.
"""

from __future__ import annotations

import keyword
import re

GLOBAL_SUFFIX = ":global"

# Resources whose display name is an acronym.
_UPPERCASE_NAMES = frozenset({"vpc"})

_INVALID_IDENT_RE = re.compile(r"[^a-z0-9_]")


def split_global(tag: str) -> tuple[str, bool]:
    """Split ``"images:global"`` into ``("images", True)``."""
    if tag.endswith(GLOBAL_SUFFIX):
        return tag[: -len(GLOBAL_SUFFIX)], True
    return tag, False


def singular(s: str) -> str:
    """Undo :func:`plural`: ``ies`` becomes ``y``, ``sses`` loses ``es``, one ``s`` is stripped.

    A word ending in ``ss`` is already singular.

    Example::

        >>> singular("disks")
        'disk'
        >>> singular("policies")
        'policy'
        >>> singular("addresses")
        'address'
    """
    if s.endswith("ies"):
        return f"{s[:-3]}y"
    if s.endswith("sses"):
        return s[:-2]
    if s.endswith("s") and not s.endswith("ss"):
        return s[:-1]
    return s


def plural(s: str) -> str:
    """Pluralise *s* after singularising it.

    Example::

        >>> plural("disk")
        'disks'
        >>> plural("policy")
        'policies'
        >>> plural("address")
        'addresses'
    """
    s = singular(s)
    if s.endswith("s"):
        return f"{s}es"
    if s.endswith("y"):
        return f"{s[:-1]}ies"
    return f"{s}s"


def display_name(tag: str) -> str:
    """Human name of one resource: ``"disk"``, ``"VPC"``, ``"global image"``."""
    base, is_global = split_global(tag)
    name = singular(base)
    if name in _UPPERCASE_NAMES:
        name = name.upper()
    return f"global {name}" if is_global else name


def display_plural(tag: str) -> str:
    """Human name of a collection: ``"disks"``, ``"VPCs"``, ``"global images"``."""
    base, is_global = split_global(tag)
    name = singular(base)
    text = f"{name.upper()}s" if name in _UPPERCASE_NAMES else plural(name)
    return f"global {text}" if is_global else text


def class_stem(tag: str) -> str:
    """Stem of generated class names: ``"Disk"``, ``"Vpc"``, ``"ImageGlobal"``."""
    base, is_global = split_global(tag)
    words = re.split(r"[_\-\s]+", singular(base))
    stem = "".join(w[:1].upper() + w[1:] for w in words if w)
    return f"{stem}Global" if is_global else stem


def command_group(tag: str) -> str:
    """CLI group name: ``"disk"``, ``"image-global"``."""
    base, is_global = split_global(tag)
    name = singular(base).replace("_", "-")
    return f"{name}-global" if is_global else name


def sanitize_identifier(name: str) -> str:
    """Convert a field name into a valid Python identifier.

    CamelCase is split, separators become underscores, a leading digit gets
    an underscore prefix and keywords get a trailing underscore.

    Example::

        >>> sanitize_identifier("ipv4-block")
        'ipv4_block'
        >>> sanitize_identifier("class")
        'class_'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()
    result = result.replace("-", "_").replace(".", "_")
    result = _INVALID_IDENT_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_") or "field"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result
