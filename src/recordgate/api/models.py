"""DTOs returned to the host application's transport layer."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..access.errors import ErrorKind


class ErrorBody(BaseModel):
    """Serializable error payload for a RecordAccessError."""
    kind: ErrorKind
    message: str
    status_code: int


class PlanSummary(BaseModel):
    """Inspectable view of a query plan (used by the CLI and debugging)."""
    primary_table: str
    select_columns: List[str]
    translation_table: Optional[str] = None
    language_id: Optional[int] = None
    where_equals: Dict[str, Any] = {}
    order_by: Optional[List[str]] = None
    where_not_null: List[str] = []
    limit: Optional[int] = None
    eager_loads: Dict[str, Optional[List[str]]] = {}
    sql: Optional[str] = None
