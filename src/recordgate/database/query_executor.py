"""Compile query plans to SQLAlchemy selects and hydrate records."""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from sqlalchemy import Column, Select, Table, and_, inspect, select
from sqlalchemy.orm import Session

from recordgate.query.composer import QueryPlan
from recordgate.utils.logging import get_logger

logger = get_logger(__name__)

Record = Dict[str, Any]

# Parent-side relation keys are selected under this prefix and removed after matching.
KEY_LABEL_PREFIX = "_relation_key_"


def plan_tables(model: Type[Any], translation_model: Optional[Type[Any]] = None) -> Dict[str, Table]:
    """Table name -> Table for the primary model and its translation model."""
    tables = {model.__table__.name: model.__table__}
    if translation_model is not None:
        tables[translation_model.__table__.name] = translation_model.__table__
    return tables


def _resolve(qualified: str, tables: Mapping[str, Table]) -> List[Column]:
    table_name, _, column_name = qualified.partition(".")
    table = tables[table_name]
    if column_name == "*":
        return list(table.columns)
    return [table.c[column_name]]


def _select_columns(plan: QueryPlan, tables: Mapping[str, Table]) -> List[Column]:
    columns: List[Column] = []
    seen = set()
    for qualified in plan.select_columns:
        for column in _resolve(qualified, tables):
            key = (column.table.name, column.name)
            if key in seen:
                continue
            seen.add(key)
            columns.append(column)
    return columns


def _build(plan: QueryPlan, tables: Mapping[str, Table]) -> Tuple[Select, List[Column]]:
    columns = _select_columns(plan, tables)
    primary = tables[plan.primary_table]

    stmt = select(*columns)
    join = plan.translation_join
    if join is not None:
        translation = tables[join.table]
        stmt = stmt.select_from(
            primary.outerjoin(translation, primary.c.id == translation.c[join.foreign_key])
        ).where(translation.c[join.language_column] == join.language_id)
    else:
        stmt = stmt.select_from(primary)

    conditions = [_resolve(name, tables)[0] == value for name, value in plan.where_equals.items()]
    if conditions:
        stmt = stmt.where(and_(*conditions))

    for name in plan.where_not_null:
        stmt = stmt.where(_resolve(name, tables)[0].is_not(None))

    if plan.order_by is not None:
        column = _resolve(plan.order_by[0], tables)[0]
        stmt = stmt.order_by(column.desc() if plan.order_by[1] == "desc" else column.asc())

    if plan.limit is not None:
        stmt = stmt.limit(plan.limit)

    return stmt, columns


def build_select(plan: QueryPlan, tables: Mapping[str, Table]) -> Select:
    """Compile a plan to a SQLAlchemy ``Select``."""
    stmt, _ = _build(plan, tables)
    return stmt


def _hydrate(columns: List[Column], row: Any) -> Record:
    # Later columns overwrite earlier ones with the same name.
    record: Record = {}
    for column, value in zip(columns, row):
        record[column.name] = value
    return record


def _relation_keys(model: Type[Any], relation_names: Iterable[str]) -> Dict[str, Tuple[Column, Column]]:
    """Relation name -> (local column, remote column); composite keys are skipped."""
    keys = {}
    for relation_name in relation_names:
        pairs = list(inspect(model).relationships[relation_name].local_remote_pairs)
        if len(pairs) != 1:
            logger.warning(f"Skipping eager load of {relation_name}: composite keys are not supported")
            continue
        keys[relation_name] = pairs[0]
    return keys


def _key_label(column: Column) -> str:
    return KEY_LABEL_PREFIX + column.name


def _attach_relation(
    session: Session,
    records: List[Record],
    model: Type[Any],
    relation_name: str,
    projection: Optional[List[str]],
    key_pair: Tuple[Column, Column],
) -> None:
    relationship = inspect(model).relationships[relation_name]
    local_column, remote_column = key_pair
    local_key = _key_label(local_column)
    target: Table = relationship.mapper.local_table

    if projection:
        columns = [target.c[name.partition(".")[2]] for name in projection]
        if remote_column.name not in {c.name for c in columns}:
            columns.append(target.c[remote_column.name])
    else:
        columns = list(target.columns)

    keys = {r.get(local_key) for r in records} - {None}
    grouped: Dict[Any, List[Record]] = {}
    if keys:
        stmt = select(*columns).where(target.c[remote_column.name].in_(sorted(keys)))
        for row in session.execute(stmt):
            related = _hydrate(columns, row)
            grouped.setdefault(related[remote_column.name], []).append(related)

    for record in records:
        matches = grouped.get(record.get(local_key), [])
        if relationship.uselist:
            record[relation_name] = matches
        else:
            record[relation_name] = matches[0] if matches else None


def fetch_records(
    session: Session,
    plan: QueryPlan,
    *,
    model: Type[Any],
    translation_model: Optional[Type[Any]] = None,
) -> List[Record]:
    """
    Run a plan and return merged records.

    Eager-loaded relations are fetched with one ``IN`` query each and attached
    under the relation name. Their parent-side key is selected under a
    hidden label, so relations load whatever ``selected_fields`` asked for.
    """
    tables = plan_tables(model, translation_model)
    stmt, columns = _build(plan, tables)

    relation_keys = _relation_keys(model, plan.eager_loads)
    hidden = []
    for local_column, _ in relation_keys.values():
        label = _key_label(local_column)
        if label in hidden:
            continue
        hidden.append(label)
        key_column = tables[plan.primary_table].c[local_column.name].label(label)
        stmt = stmt.add_columns(key_column)
        columns.append(key_column)

    records = [_hydrate(columns, row) for row in session.execute(stmt)]

    for relation_name, key_pair in relation_keys.items():
        _attach_relation(session, records, model, relation_name, plan.eager_loads[relation_name], key_pair)

    for record in records:
        for label in hidden:
            record.pop(label, None)
    return records


def fetch_record(
    session: Session,
    plan: QueryPlan,
    *,
    model: Type[Any],
    translation_model: Optional[Type[Any]] = None,
) -> Optional[Record]:
    records = fetch_records(session, plan, model=model, translation_model=translation_model)
    return records[0] if records else None
