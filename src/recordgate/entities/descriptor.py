"""Static per-entity facts: table names, translation wiring, ownership."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Type

from sqlalchemy import inspect as sa_inspect

from recordgate.database.introspection import SchemaIntrospector
from recordgate.utils.inflector import singularize

LANGUAGE_FOREIGN_KEY = "language_id"
OWNER_COLUMN = "user_id"
TRANSLATION_TABLE_SUFFIX = "_translations"


@dataclass(frozen=True)
class EntityBinding:
    """What the application registers for one entity type."""

    name: str
    model: Type[Any]
    translation_model: Optional[Type[Any]] = None
    owner_managed: bool = True
    relations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EntityDescriptor:
    entity_name: str
    plural_table: str
    singular_table: str
    translation_table: str
    translation_foreign_key: str
    translation_class_exists: bool
    owner_managed: bool
    translatable: bool
    associations: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def primary_key_column(self) -> str:
        return f"{self.plural_table}.id"


def translation_table_name(singular_table: str) -> str:
    """
    Example:
        - Main table: base_invoices
        - Translation table: base_invoice_translations
    """
    return singular_table + TRANSLATION_TABLE_SUFFIX


def translation_foreign_key_name(singular_table: str) -> str:
    """Foreign key in the translation table, e.g. ``base_invoice_id``."""
    return singular_table + "_id"


def is_translatable(
    translation_class_exists: bool,
    translation_table: str,
    foreign_key: str,
    schema: SchemaIntrospector,
) -> bool:
    """
    A translation table is active only when a translation model is registered
    and the table carries both the foreign key and the language column.
    """
    if not translation_class_exists:
        return False
    return schema.column_exists(translation_table, foreign_key) and schema.column_exists(
        translation_table, LANGUAGE_FOREIGN_KEY
    )


def model_associations(model: Type[Any]) -> Mapping[str, str]:
    """Association name -> target table name, read from the ORM mapper."""
    mapper = sa_inspect(model)
    return MappingProxyType(
        {rel.key: rel.mapper.local_table.name for rel in mapper.relationships}
    )


def describe_entity(binding: EntityBinding, schema: SchemaIntrospector) -> EntityDescriptor:
    plural_table = binding.model.__table__.name
    singular_table = singularize(plural_table)
    translation_table = translation_table_name(singular_table)
    foreign_key = translation_foreign_key_name(singular_table)
    translation_class_exists = binding.translation_model is not None

    return EntityDescriptor(
        entity_name=binding.name,
        plural_table=plural_table,
        singular_table=singular_table,
        translation_table=translation_table,
        translation_foreign_key=foreign_key,
        translation_class_exists=translation_class_exists,
        owner_managed=binding.owner_managed,
        translatable=is_translatable(translation_class_exists, translation_table, foreign_key, schema),
        associations=model_associations(binding.model),
    )
