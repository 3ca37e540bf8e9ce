"""Tests for entity descriptors and the registry."""

import pytest

from recordgate.access.errors import UnknownEntityError
from recordgate.database.introspection import SchemaSnapshot
from recordgate.entities.descriptor import (
    EntityBinding,
    describe_entity,
    is_translatable,
    translation_foreign_key_name,
    translation_table_name,
)
from recordgate.entities.registry import EntityRegistry
from sample_models import Country, CountryTranslation, Tag


def test_descriptor_for_translatable_entity(registry):
    descriptor = registry.descriptor("countries")

    assert descriptor.entity_name == "countries"
    assert descriptor.plural_table == "countries"
    assert descriptor.singular_table == "country"
    assert descriptor.translation_table == "country_translations"
    assert descriptor.translation_foreign_key == "country_id"
    assert descriptor.translation_class_exists
    assert descriptor.translatable
    assert descriptor.owner_managed
    assert descriptor.primary_key_column == "countries.id"


def test_descriptor_for_plain_entity(registry):
    descriptor = registry.descriptor("tags")

    assert descriptor.singular_table == "tag"
    assert not descriptor.translation_class_exists
    assert not descriptor.translatable
    assert not descriptor.owner_managed


def test_irregular_plural_table(registry):
    descriptor = registry.descriptor("people")

    assert descriptor.singular_table == "person"
    assert descriptor.translation_table == "person_translations"


def test_translation_table_without_language_column_is_inactive(registry):
    descriptor = registry.descriptor("articles")

    assert descriptor.translation_class_exists
    assert not descriptor.translatable


def test_translation_model_without_table_is_inactive():
    schema = SchemaSnapshot({"countries": ["id", "code"]})
    binding = EntityBinding(name="countries", model=Country, translation_model=CountryTranslation)

    assert not describe_entity(binding, schema).translatable


def test_is_translatable_needs_registered_model():
    schema = SchemaSnapshot({"country_translations": ["id", "country_id", "language_id"]})

    assert is_translatable(True, "country_translations", "country_id", schema)
    assert not is_translatable(False, "country_translations", "country_id", schema)
    assert not is_translatable(True, "country_translations", "nation_id", schema)


def test_name_helpers():
    assert translation_table_name("base_invoice") == "base_invoice_translations"
    assert translation_foreign_key_name("base_invoice") == "base_invoice_id"


def test_associations_come_from_mapper(registry):
    countries = registry.descriptor("countries")
    cities = registry.descriptor("cities")

    assert dict(countries.associations) == {"translations": "country_translations", "cities": "cities"}
    assert dict(cities.associations) == {"country": "countries"}
    with pytest.raises(TypeError):
        countries.associations["planets"] = "planets"


def test_descriptor_is_cached_until_refresh(registry):
    first = registry.descriptor("countries")

    assert registry.descriptor("countries") is first

    registry.refresh_schema()

    assert registry.descriptor("countries") is not first
    assert registry.descriptor("countries") == first


def test_unknown_entity_raises(registry):
    with pytest.raises(UnknownEntityError) as exc_info:
        registry.descriptor("planets")

    assert exc_info.value.entity_name == "planets"
    assert "planets" in str(exc_info.value)
    assert "planets" not in registry


def test_register_replaces_binding_and_drops_cache(schema):
    registry = EntityRegistry(schema)
    registry.register("tags", Tag)
    assert registry.descriptor("tags").owner_managed

    registry.register("tags", Tag, owner_managed=False)

    assert not registry.descriptor("tags").owner_managed
    assert registry.names() == ["tags"]
    assert registry.binding("tags").relations == ()
