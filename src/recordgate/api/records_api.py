"""Records API: one entry point for reading and mutating registered entities."""

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional

from ..access.errors import RecordNotFoundError
from ..access.messages import lookup
from ..access.models import IdentityContext
from ..access.mutations import create_one, delete_one, update_one
from ..config.loader import get_query_settings
from ..database.query_executor import build_select, fetch_record, fetch_records, plan_tables
from ..entities.descriptor import OWNER_COLUMN
from ..entities.registry import EntityRegistry
from ..query.composer import QueryPlan, compose_query_plan, compose_query_plan_one
from ..utils.logging import get_logger
from .models import PlanSummary

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = get_logger(__name__)


class RecordAccess:
    """
    Per-request access object.

    Combines the registry (descriptors, schema snapshot), the request's
    session and the acting identity. Entities are addressed by their
    registered name. Without a session only the planning methods
    (``plan``, ``plan_one``, ``describe_plan``) are available.
    """

    def __init__(
        self,
        registry: EntityRegistry,
        session: Optional["Session"] = None,
        identity: Optional[IdentityContext] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.registry = registry
        self.session = session
        self.identity = identity or IdentityContext()
        self.settings = get_query_settings(config or {})
        self.messages = (config or {}).get("messages") or {}

    def _require_session(self) -> "Session":
        if self.session is None:
            raise RuntimeError("RecordAccess was created without a session; only planning is available")
        return self.session

    @property
    def _locale(self) -> str:
        return self.identity.locale or self.settings.default_locale

    def _plan_kwargs(self, entity: str, with_relation_names: Optional[Iterable[str]]) -> Dict[str, Any]:
        binding = self.registry.binding(entity)
        return {
            "acting_user_id": self.identity.acting_user_id,
            "with_relation_names": binding.relations if with_relation_names is None else tuple(with_relation_names),
            "default_language_id": self.settings.default_language_id,
            "max_limit": self.settings.max_limit,
        }

    def plan(
        self,
        entity: str,
        params: Mapping[str, Any],
        with_relation_names: Optional[Iterable[str]] = None,
    ) -> QueryPlan:
        descriptor = self.registry.descriptor(entity)
        return compose_query_plan(
            descriptor,
            self.registry.schema,
            params,
            **self._plan_kwargs(entity, with_relation_names),
        )

    def plan_one(
        self,
        entity: str,
        params: Mapping[str, Any],
        entity_id: int,
        with_relation_names: Optional[Iterable[str]] = None,
    ) -> QueryPlan:
        descriptor = self.registry.descriptor(entity)
        return compose_query_plan_one(
            descriptor,
            self.registry.schema,
            params,
            entity_id,
            **self._plan_kwargs(entity, with_relation_names),
        )

    def describe_plan(self, entity: str, plan: QueryPlan) -> PlanSummary:
        binding = self.registry.binding(entity)
        stmt = build_select(plan, plan_tables(binding.model, binding.translation_model))
        join = plan.translation_join
        return PlanSummary(
            primary_table=plan.primary_table,
            select_columns=plan.select_columns,
            translation_table=join.table if join else None,
            language_id=join.language_id if join else None,
            where_equals=plan.where_equals,
            order_by=list(plan.order_by) if plan.order_by else None,
            where_not_null=plan.where_not_null,
            limit=plan.limit,
            eager_loads=plan.eager_loads,
            sql=str(stmt),
        )

    def list_records(
        self,
        entity: str,
        params: Mapping[str, Any],
        with_relation_names: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        binding = self.registry.binding(entity)
        plan = self.plan(entity, params, with_relation_names)
        return fetch_records(
            self._require_session(), plan, model=binding.model, translation_model=binding.translation_model
        )

    def get_record(
        self,
        entity: str,
        params: Mapping[str, Any],
        entity_id: int,
        with_relation_names: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        binding = self.registry.binding(entity)
        plan = self.plan_one(entity, params, entity_id, with_relation_names)
        record = fetch_record(
            self._require_session(), plan, model=binding.model, translation_model=binding.translation_model
        )
        if record is None:
            logger.info(f"{entity} {entity_id} not found")
            raise RecordNotFoundError(lookup("not_found", self._locale, self.messages))
        return record

    def create(self, entity: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return create_one(
            self._require_session(),
            self.registry.binding(entity),
            self.registry.descriptor(entity),
            payload,
            identity=self._identity_with_locale(),
            default_language_id=self.settings.default_language_id,
            messages=self.messages,
        )

    def update(
        self,
        entity: str,
        entity_id: int,
        payload: Mapping[str, Any],
        expected_value: Any = None,
        column_name: str = OWNER_COLUMN,
    ) -> Dict[str, Any]:
        """``expected_value`` defaults to the acting user id."""
        return update_one(
            self._require_session(),
            self.registry.binding(entity),
            self.registry.descriptor(entity),
            self.registry.schema,
            entity_id,
            payload,
            identity=self._identity_with_locale(),
            expected_value=self.identity.acting_user_id if expected_value is None else expected_value,
            column_name=column_name,
            default_language_id=self.settings.default_language_id,
            messages=self.messages,
        )

    def delete(
        self,
        entity: str,
        entity_id: int,
        expected_value: Any = None,
        column_name: str = OWNER_COLUMN,
    ) -> None:
        delete_one(
            self._require_session(),
            self.registry.binding(entity),
            self.registry.descriptor(entity),
            self.registry.schema,
            entity_id,
            identity=self._identity_with_locale(),
            expected_value=self.identity.acting_user_id if expected_value is None else expected_value,
            column_name=column_name,
            messages=self.messages,
        )

    def _identity_with_locale(self) -> IdentityContext:
        if self.identity.locale:
            return self.identity
        return self.identity.model_copy(update={"locale": self.settings.default_locale})
