"""Create, update and delete with translation-row synchronization.

Each operation runs in one transaction: the primary and translation writes
commit together or roll back together.
"""

from typing import Any, Dict, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from recordgate.access.errors import PermissionDeniedError, PersistenceConflictError, RecordNotFoundError
from recordgate.access.messages import lookup
from recordgate.access.models import IdentityContext
from recordgate.access.permissions import can_mutate
from recordgate.database.introspection import SchemaIntrospector
from recordgate.database.record_repo import (
    assignable_values,
    find_or_new_translation,
    find_record,
    insert_row,
    row_attributes,
    update_row,
)
from recordgate.entities.descriptor import LANGUAGE_FOREIGN_KEY, OWNER_COLUMN, EntityBinding, EntityDescriptor
from recordgate.utils.logging import get_logger

logger = get_logger(__name__)


def _language_id(payload: Mapping[str, Any], default_language_id: int) -> Any:
    language_id = payload.get(LANGUAGE_FOREIGN_KEY)
    return default_language_id if language_id in (None, "") else language_id


def merge_attributes(primary: Mapping[str, Any], translation: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Translation values win on collision, except the primary ``id``."""
    if translation is None:
        return dict(primary)
    merged = {**primary, **translation}
    if "id" in primary:
        merged["id"] = primary["id"]
    return merged


def _write_translation(
    session: Session,
    binding: EntityBinding,
    descriptor: EntityDescriptor,
    entity_id: Any,
    payload: Mapping[str, Any],
    default_language_id: int,
) -> Dict[str, Any]:
    translation = find_or_new_translation(
        session,
        binding.translation_model,
        descriptor.translation_foreign_key,
        entity_id,
        LANGUAGE_FOREIGN_KEY,
        _language_id(payload, default_language_id),
    )
    values = assignable_values(
        binding.translation_model,
        payload,
        exclude=(descriptor.translation_foreign_key, LANGUAGE_FOREIGN_KEY),
    )
    update_row(session, translation, values)
    return row_attributes(translation)


def _load_for_mutation(
    session: Session,
    binding: EntityBinding,
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
    entity_id: Any,
    *,
    identity: IdentityContext,
    expected_value: Any,
    column_name: str,
    action: str,
    messages: Optional[Mapping[str, Any]] = None,
) -> Any:
    row = find_record(session, binding.model, entity_id)
    if row is None:
        logger.info(f"Cannot {action}. {binding.name} {entity_id} not found")
        raise RecordNotFoundError(lookup("not_found", identity.locale, messages))

    if not can_mutate(
        row,
        column_name,
        expected_value,
        descriptor=descriptor,
        schema=schema,
        identity=identity,
    ):
        logger.info(f"Cannot {action}. Permission denied for {binding.name} {entity_id}")
        raise PermissionDeniedError(lookup("permission_denied", identity.locale, messages))
    return row


def create_one(
    session: Session,
    binding: EntityBinding,
    descriptor: EntityDescriptor,
    payload: Mapping[str, Any],
    *,
    identity: IdentityContext,
    default_language_id: int = 1,
    messages: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Create a primary row (and its translation row when translatable).

    ``user_id`` is always the acting user, whatever the payload says.

    Returns:
        Merged attributes of the created rows

    Raises:
        PersistenceConflictError: If either write fails
    """
    data = dict(payload)
    data[OWNER_COLUMN] = identity.acting_user_id

    try:
        main_row = insert_row(session, binding.model, assignable_values(binding.model, data))
        attributes = row_attributes(main_row)

        translation_attributes = None
        if descriptor.translatable:
            translation_attributes = _write_translation(
                session, binding, descriptor, main_row.id, data, default_language_id
            )

        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.critical(f"{binding.name} creation error - {e}")
        raise PersistenceConflictError(lookup("save_error", identity.locale, messages), operation="create") from None

    return merge_attributes(attributes, translation_attributes)


def update_one(
    session: Session,
    binding: EntityBinding,
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
    entity_id: Any,
    payload: Mapping[str, Any],
    *,
    identity: IdentityContext,
    expected_value: Any,
    column_name: str = OWNER_COLUMN,
    default_language_id: int = 1,
    messages: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Update a record after the not-found and ownership checks.

    Storage errors roll back both writes and propagate unchanged.

    Args:
        entity_id: Primary key of the record
        payload: New values; keys that are not columns are ignored
        expected_value: Value ``column_name`` must hold for a non-elevated caller
        column_name: Ownership column to check
    """
    row = _load_for_mutation(
        session,
        binding,
        descriptor,
        schema,
        entity_id,
        identity=identity,
        expected_value=expected_value,
        column_name=column_name,
        action="update",
        messages=messages,
    )

    try:
        update_row(session, row, assignable_values(binding.model, payload))
        attributes = row_attributes(row)

        translation_attributes = None
        if descriptor.translatable:
            translation_attributes = _write_translation(
                session, binding, descriptor, row.id, payload, default_language_id
            )

        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    return merge_attributes(attributes, translation_attributes)


def delete_one(
    session: Session,
    binding: EntityBinding,
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
    entity_id: Any,
    *,
    identity: IdentityContext,
    expected_value: Any,
    column_name: str = OWNER_COLUMN,
    messages: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Delete a record after the not-found and ownership checks.

    Translation rows are removed by the storage layer's cascade.
    """
    row = _load_for_mutation(
        session,
        binding,
        descriptor,
        schema,
        entity_id,
        identity=identity,
        expected_value=expected_value,
        column_name=column_name,
        action="delete",
        messages=messages,
    )

    try:
        session.delete(row)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.critical(f"Cannot delete. {binding.name} {entity_id} {e}")
        raise PersistenceConflictError(lookup("destroy_error", identity.locale, messages), operation="delete") from None
