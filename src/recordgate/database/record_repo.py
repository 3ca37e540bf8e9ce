"""Repository functions for primary and translation rows."""

from typing import Any, Dict, Iterable, Mapping, Optional, Type

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from recordgate.utils.logging import get_logger

logger = get_logger(__name__)


def find_record(session: Session, model: Type[Any], entity_id: Any) -> Optional[Any]:
    """Get a row by primary key."""
    return session.get(model, entity_id)


def row_attributes(row: Any) -> Dict[str, Any]:
    """Column name -> value for a mapped row."""
    mapper = inspect(type(row))
    return {prop.columns[0].name: getattr(row, prop.key) for prop in mapper.column_attrs}


def _column_keys(model: Type[Any]) -> Dict[str, str]:
    """Column name -> mapped attribute key."""
    mapper = inspect(model)
    return {prop.columns[0].name: prop.key for prop in mapper.column_attrs}


def _primary_key_names(model: Type[Any]) -> set[str]:
    return {column.name for column in inspect(model).primary_key}


def assignable_values(
    model: Type[Any],
    payload: Mapping[str, Any],
    exclude: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Pick the payload entries that map to columns of ``model``.

    Primary key columns and ``exclude`` are never assignable. Keys are the
    mapped attribute names, ready for ``model(**values)`` or ``setattr``.
    """
    blocked = _primary_key_names(model) | set(exclude)
    keys = _column_keys(model)
    return {
        keys[name]: value
        for name, value in payload.items()
        if name in keys and name not in blocked
    }


def insert_row(session: Session, model: Type[Any], values: Mapping[str, Any]) -> Any:
    row = model(**values)
    session.add(row)
    session.flush()
    logger.debug(f"Inserted {model.__name__} row")
    return row


def update_row(session: Session, row: Any, values: Mapping[str, Any]) -> Any:
    for key, value in values.items():
        setattr(row, key, value)
    session.add(row)
    session.flush()
    return row


def find_or_new_translation(
    session: Session,
    translation_model: Type[Any],
    foreign_key: str,
    entity_id: Any,
    language_column: str,
    language_id: Any,
) -> Any:
    """
    Find the translation row for ``(entity_id, language_id)``, or build a new
    unsaved one carrying both keys.
    """
    keys = _column_keys(translation_model)
    fk_attr = getattr(translation_model, keys[foreign_key])
    language_attr = getattr(translation_model, keys[language_column])

    row = (
        session.query(translation_model)
        .filter(fk_attr == entity_id, language_attr == language_id)
        .first()
    )
    if row is not None:
        return row

    row = translation_model(**{keys[foreign_key]: entity_id, keys[language_column]: language_id})
    session.add(row)
    return row
