"""Classify operations of a resource tag by CRUD role.

Classification relies on the API's operation-identifier naming convention
and on the pagination extension:

* **root-level** (view/edit/delete one resource): the identifier ends with
  ``"{method}_{singular}"`` -- ``organizations_get_organization``.
* **root-create**: the identifier ends with ``"{tag}_post"`` and the method
  is POST -- ``organizations_post``.
* **root-list**: the identifier ends with ``"{tag}_get"``, the method is
  GET and the operation is paginated -- ``organizations_get``.

For a tag with a ``":global"`` suffix the suffix is stripped first.
:func:`classify` checks delete, view, edit, create, then list; the first
match wins.
"""

from __future__ import annotations

from typing import Optional

from infractl.generator.naming import singular, split_global
from infractl.models import Archetype, HTTPMethod, Operation


def is_root_level(operation: Operation, tag: str) -> bool:
    """True if *operation* acts on one resource identified by name."""
    base, _ = split_global(tag)
    suffix = f"{operation.method.value}_{singular(base)}"
    return operation.operation_id.endswith(suffix)


def is_root_create(operation: Operation, tag: str) -> bool:
    """True if *operation* creates a resource in the collection."""
    base, _ = split_global(tag)
    return (
        operation.method == HTTPMethod.POST
        and operation.operation_id.endswith(f"{base}_{operation.method.value}")
    )


def is_root_list(operation: Operation, tag: str) -> bool:
    """True if *operation* lists the collection page by page."""
    base, _ = split_global(tag)
    return (
        operation.method == HTTPMethod.GET
        and operation.paginated
        and operation.operation_id.endswith(f"{base}_{operation.method.value}")
    )


def classify(operation: Operation, tag: str) -> Optional[Archetype]:
    """Return the archetype of *operation*, or ``None`` if it has none.

    Example::

        >>> op = Operation(method=HTTPMethod.DELETE, path="/organizations/{organization_name}",
        ...                operation_id="organizations_delete_organization")
        >>> classify(op, "organizations")
        <Archetype.DELETE: 'delete'>
    """
    root_level = is_root_level(operation, tag)
    if root_level and operation.method == HTTPMethod.DELETE:
        return Archetype.DELETE
    if root_level and operation.method == HTTPMethod.GET:
        return Archetype.VIEW
    if root_level and operation.method == HTTPMethod.PUT:
        return Archetype.EDIT
    if is_root_create(operation, tag):
        return Archetype.CREATE
    if is_root_list(operation, tag):
        return Archetype.LIST
    return None
