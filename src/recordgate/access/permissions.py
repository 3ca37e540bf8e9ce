"""Ownership check for mutations."""

from typing import Any

from recordgate.access.models import IdentityContext
from recordgate.database.introspection import SchemaIntrospector
from recordgate.entities.descriptor import EntityDescriptor

_MISSING = object()


def can_mutate(
    record: Any,
    column_name: str,
    expected_value: Any,
    *,
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
    identity: IdentityContext,
) -> bool:
    """
    Check whether the acting identity may change ``record``.

    Elevated identities always may. Otherwise only owner-managed entities are
    mutable, and only when ``column_name`` is a primary-table column whose
    value on the record equals ``expected_value``.

    Args:
        record: Mapped row or record dict
        column_name: Column identifying the owner (usually ``user_id``)
        expected_value: Value the column must hold (usually the acting user id)
    """
    if identity.has_elevated_permission:
        return True

    if not descriptor.owner_managed:
        return False

    if not schema.column_exists(descriptor.plural_table, column_name):
        return False

    if isinstance(record, dict):
        actual = record.get(column_name, _MISSING)
    else:
        actual = getattr(record, column_name, _MISSING)
    if actual is _MISSING:
        return False
    return actual == expected_value
