"""Build validated query plans from loosely typed request parameters.

Every column that ends up in a plan has been checked against the schema
snapshot. Unknown names are dropped, never passed through.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from recordgate.database.introspection import SchemaIntrospector
from recordgate.entities.descriptor import LANGUAGE_FOREIGN_KEY, OWNER_COLUMN, EntityDescriptor
from recordgate.query import params as rp
from recordgate.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_DIRECTIONS = ("asc", "desc")

# Bound parameters are bound as signed 64-bit integers.
MAX_BIND_INT = 2**63 - 1


@dataclass(frozen=True)
class TranslationJoin:
    table: str
    foreign_key: str
    language_id: int
    language_column: str = LANGUAGE_FOREIGN_KEY


@dataclass
class QueryPlan:
    primary_table: str
    select_columns: List[str] = field(default_factory=list)
    translation_join: Optional[TranslationJoin] = None
    where_equals: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[Tuple[str, str]] = None
    where_not_null: List[str] = field(default_factory=list)
    limit: Optional[int] = None
    eager_loads: Dict[str, Optional[List[str]]] = field(default_factory=dict)

    def referenced_columns(self) -> List[str]:
        """Every qualified column the plan touches, ``table.*`` included."""
        columns = list(self.select_columns)
        columns.extend(self.where_equals)
        if self.order_by:
            columns.append(self.order_by[0])
        columns.extend(self.where_not_null)
        return columns


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _as_int(value: Any) -> Optional[int]:
    """Integer value of a request parameter, or None when it is not one the database can bind."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError):
            return None
    if not -MAX_BIND_INT - 1 <= number <= MAX_BIND_INT:
        return None
    return number


def filtering_for_params(
    params: Mapping[str, Any],
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
) -> Dict[str, Any]:
    """Drop parameter keys that are not columns of the primary table."""
    return {
        key: value
        for key, value in params.items()
        if schema.column_exists(descriptor.plural_table, key)
    }


def qualify_params(params: Mapping[str, Any], table: str) -> Dict[str, Any]:
    """``{"id": 1}`` -> ``{"countries.id": 1}`` for table ``countries``."""
    return {f"{table}.{key}": value for key, value in params.items()}


def filter_existing_columns_in_table(
    fields: Iterable[str],
    table: str,
    schema: SchemaIntrospector,
) -> List[str]:
    return [f for f in fields if schema.column_exists(table, f)]


def _qualified_field(field_name: str, descriptor: EntityDescriptor, schema: SchemaIntrospector) -> Optional[str]:
    """Validate an already-qualified ``table.column`` against the active tables."""
    table, _, column = field_name.partition(".")
    active_tables = [descriptor.plural_table]
    if descriptor.translatable:
        active_tables.append(descriptor.translation_table)
    if table in active_tables and schema.column_exists(table, column):
        return field_name
    return None


def get_value_for_existing_table_columns(
    params: Mapping[str, Any],
    params_field_name: str,
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
) -> List[str]:
    """
    Turn a comma list such as ``selected_fields=year,name,id`` into qualified
    columns that exist.

    With an active translation table, ``id`` always means the primary id and
    any other field is taken from each table that has it (both, when both
    do; the primary column comes last so it wins on merge).
    """
    if params_field_name not in params:
        return []

    result: List[str] = []
    for selected_field in rp.split_list(params[params_field_name]):
        if "." in selected_field:
            qualified = _qualified_field(selected_field, descriptor, schema)
            if qualified:
                result.append(qualified)
            continue

        if descriptor.translatable and selected_field == "id":
            # Both tables have an id; use the primary one.
            result.append(descriptor.primary_key_column)
            continue

        if descriptor.translatable and schema.column_exists(descriptor.translation_table, selected_field):
            result.append(f"{descriptor.translation_table}.{selected_field}")
        if schema.column_exists(descriptor.plural_table, selected_field):
            result.append(f"{descriptor.plural_table}.{selected_field}")

    return _unique(result)


def _resolve_language_id(params: Mapping[str, Any], default_language_id: int) -> int:
    language_id = _as_int(params.get(rp.LANGUAGE_ID))
    if language_id is None:
        return default_language_id
    return language_id


def _order_by(
    params: Mapping[str, Any],
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
) -> Optional[Tuple[str, str]]:
    raw = params.get(rp.ORDER_BY)
    if rp.is_blank(raw):
        return None

    parsed = rp.parse_parameter_with_additional_values(str(raw))
    if not parsed:
        return None
    # Only one order clause per request.
    order = parsed[0]

    column = get_value_for_existing_table_columns(
        {rp.ORDER_BY: order.name}, rp.ORDER_BY, descriptor, schema
    )
    if not column:
        logger.debug(f"Ignoring order_by on unknown column {order.name!r} for {descriptor.entity_name}")
        return None

    direction = (order.first_value("asc") or "asc").strip().lower()
    if direction not in ORDER_DIRECTIONS:
        direction = "asc"
    # A field present in both tables sorts by the primary column.
    return column[-1], direction


def _eager_loads(
    params: Mapping[str, Any],
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
    with_relation_names: Iterable[str],
) -> Dict[str, Optional[List[str]]]:
    raw = params.get(rp.WITH)
    if rp.is_blank(raw):
        return {}

    allowed = set(with_relation_names)
    eager: Dict[str, Optional[List[str]]] = {}
    for with_parameter in rp.parse_parameter_with_additional_values(str(raw)):
        name = with_parameter.name
        if name not in allowed or name not in descriptor.associations:
            logger.debug(f"Ignoring relation {name!r} for {descriptor.entity_name}")
            continue

        if with_parameter.values is None:
            eager[name] = None
            continue

        table_name = descriptor.associations[name]
        columns = filter_existing_columns_in_table(with_parameter.value_list(), table_name, schema)
        eager[name] = [f"{table_name}.{column}" for column in _unique(columns)] or None
    return eager


def compose_query_plan(
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
    params: Mapping[str, Any],
    *,
    acting_user_id: Optional[int] = None,
    with_relation_names: Iterable[str] = (),
    default_language_id: int = 1,
    max_limit: Optional[int] = None,
) -> QueryPlan:
    """
    Build the plan for a collection request.

    Args:
        descriptor: Entity descriptor for the requested entity
        schema: Schema snapshot used for every column check
        params: Raw request parameters (strings)
        acting_user_id: Identity used for owner scoping
        with_relation_names: Relations the caller allows in ``with``
        default_language_id: Used when ``language_id`` is missing or invalid
        max_limit: Upper bound applied to ``limit``

    Returns:
        QueryPlan with validated columns only
    """
    request_params: Dict[str, Any] = dict(params)

    # Owner-managed entities only return the acting user's rows.
    if descriptor.owner_managed:
        request_params[OWNER_COLUMN] = acting_user_id

    plan = QueryPlan(primary_table=descriptor.plural_table)

    if descriptor.translatable:
        plan.translation_join = TranslationJoin(
            table=descriptor.translation_table,
            foreign_key=descriptor.translation_foreign_key,
            language_id=_resolve_language_id(request_params, default_language_id),
        )
        plan.select_columns.append(f"{descriptor.translation_table}.*")
    plan.select_columns.append(f"{descriptor.plural_table}.*")

    plan.eager_loads = _eager_loads(request_params, descriptor, schema, with_relation_names)

    selected = get_value_for_existing_table_columns(request_params, rp.SELECTED_FIELDS, descriptor, schema)
    if selected:
        plan.select_columns = selected

    plan.order_by = _order_by(request_params, descriptor, schema)

    if not rp.is_blank(request_params.get(rp.WHERE_NOT_NULL)):
        plan.where_not_null = get_value_for_existing_table_columns(
            request_params, rp.WHERE_NOT_NULL, descriptor, schema
        )

    if not rp.is_blank(request_params.get(rp.LIMIT)):
        limit = _as_int(request_params[rp.LIMIT])
        if limit is not None and limit > 0:
            plan.limit = min(limit, max_limit) if max_limit else limit

    plan.where_equals = qualify_params(
        filtering_for_params(request_params, descriptor, schema),
        descriptor.plural_table,
    )
    return plan


def compose_query_plan_one(
    descriptor: EntityDescriptor,
    schema: SchemaIntrospector,
    params: Mapping[str, Any],
    entity_id: int,
    **kwargs: Any,
) -> QueryPlan:
    """Same as ``compose_query_plan`` restricted to one primary id."""
    plan = compose_query_plan(descriptor, schema, params, **kwargs)
    plan.where_equals[descriptor.primary_key_column] = entity_id
    return plan
