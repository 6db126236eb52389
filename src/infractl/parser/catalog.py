"""Collect the operations of one resource tag from the API description.

The catalog walks ``paths`` in document order and, within one path item,
visits the methods in :class:`~infractl.models.HTTPMethod` declaration order
(GET, POST, PUT, DELETE, OPTIONS, HEAD, PATCH, TRACE). An operation belongs
to the tag's generation pass iff the tag appears in its ``tags`` list.
"""

from __future__ import annotations

from typing import Any

from infractl.models import HTTPMethod, Operation

PAGINATION_EXTENSION = "x-dropshot-pagination"


def collect_operations(document: dict[str, Any], tag: str) -> list[Operation]:
    """Return every operation of *document* tagged with *tag*.

    Args:
        document: The parsed API description.
        tag: The resource tag, exactly as it appears in the document
            (``"disks"``, ``"images:global"``).

    Returns:
        Operations in natural path order. An operation with no
        ``operationId`` gets an empty identifier.
    """
    operations: list[Operation] = []
    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTPMethod:
            raw = path_item.get(method.value)
            if not isinstance(raw, dict):
                continue
            tags = tuple(raw.get("tags") or ())
            if tag not in tags:
                continue
            operations.append(
                Operation(
                    method=method,
                    path=path,
                    operation_id=raw.get("operationId") or "",
                    tags=tags,
                    paginated=bool(raw.get(PAGINATION_EXTENSION, False)),
                    raw=_with_path_parameters(raw, path_item),
                )
            )
    return operations


def list_tags(document: dict[str, Any]) -> list[str]:
    """Return every tag used by an operation, sorted."""
    tags: set[str] = set()
    for path_item in (document.get("paths") or {}).values():
        if not isinstance(path_item, dict):
            continue
        for method in HTTPMethod:
            raw = path_item.get(method.value)
            if isinstance(raw, dict):
                tags.update(raw.get("tags") or ())
    return sorted(tags)


def _with_path_parameters(raw: dict[str, Any], path_item: dict[str, Any]) -> dict[str, Any]:
    """Attach path-item level parameters so the extractor sees one operation object."""
    shared = path_item.get("parameters")
    if not shared:
        return raw
    merged = dict(raw)
    merged["x-path-parameters"] = list(shared)
    return merged
