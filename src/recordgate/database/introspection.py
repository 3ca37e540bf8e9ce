"""Schema metadata snapshot used to validate client-supplied column names."""

from typing import Dict, Iterable, Mapping, Optional, Protocol, Set

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

from recordgate.utils.logging import get_logger

logger = get_logger(__name__)


class SchemaIntrospector(Protocol):
    """Answers existence questions about live tables and columns."""

    def table_exists(self, table: str) -> bool: ...

    def column_exists(self, table: str, column: str) -> bool: ...


class SchemaSnapshot:
    """
    Cached table -> columns metadata.

    Built once from a database bind and re-read only when ``refresh()`` is
    called, so request handling never queries the catalog. Can also be built
    from a plain mapping for callers that already know their schema.
    """

    def __init__(
        self,
        tables: Optional[Mapping[str, Iterable[str]]] = None,
        bind: Engine | Connection | None = None,
    ):
        self._bind = bind
        self._tables: Dict[str, Set[str]] = {}
        if tables is not None:
            self._tables = {name: set(columns) for name, columns in tables.items()}
        elif bind is not None:
            self.refresh()

    @classmethod
    def from_bind(cls, bind: Engine | Connection) -> "SchemaSnapshot":
        return cls(bind=bind)

    def refresh(self) -> None:
        """Re-read table and column names from the bind."""
        if self._bind is None:
            raise RuntimeError("SchemaSnapshot has no bind to refresh from.")
        inspector = inspect(self._bind)
        tables: Dict[str, Set[str]] = {}
        for table_name in inspector.get_table_names():
            tables[table_name] = {col["name"] for col in inspector.get_columns(table_name)}
        self._tables = tables
        logger.debug(f"Schema snapshot refreshed: {len(tables)} tables")

    def table_exists(self, table: str) -> bool:
        return table in self._tables

    def column_exists(self, table: str, column: str) -> bool:
        return column in self._tables.get(table, ())

    def columns(self, table: str) -> Set[str]:
        return set(self._tables.get(table, ()))

    def tables(self) -> list[str]:
        return sorted(self._tables)
