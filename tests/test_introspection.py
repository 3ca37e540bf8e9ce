"""Tests for the schema metadata snapshot."""

import pytest
from sqlalchemy import text

from recordgate.database.introspection import SchemaSnapshot


def test_snapshot_reads_tables_and_columns(schema):
    assert schema.table_exists("countries")
    assert schema.table_exists("country_translations")
    assert not schema.table_exists("planets")

    assert schema.column_exists("countries", "code")
    assert schema.column_exists("country_translations", "language_id")
    assert not schema.column_exists("countries", "language_id")
    assert not schema.column_exists("planets", "id")


def test_columns_and_tables_listing(schema):
    assert schema.columns("tags") == {"id", "label"}
    assert schema.columns("planets") == set()
    assert "countries" in schema.tables()
    assert schema.tables() == sorted(schema.tables())


def test_snapshot_is_not_refreshed_implicitly(engine, schema):
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE planets (id INTEGER PRIMARY KEY, name VARCHAR)"))

    assert not schema.table_exists("planets")

    schema.refresh()

    assert schema.column_exists("planets", "name")


def test_snapshot_from_mapping():
    snapshot = SchemaSnapshot({"items": ["id", "title"]})

    assert snapshot.column_exists("items", "title")
    assert not snapshot.column_exists("items", "user_id")


def test_refresh_without_bind_raises():
    snapshot = SchemaSnapshot({"items": ["id"]})

    with pytest.raises(RuntimeError):
        snapshot.refresh()
