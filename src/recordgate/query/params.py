"""Parsing of compound request parameters such as ``rel1:col1,col2|rel2``."""

from dataclasses import dataclass
from typing import Any, List, Optional, Union

LANGUAGE_ID = "language_id"
WITH = "with"
SELECTED_FIELDS = "selected_fields"
ORDER_BY = "order_by"
WHERE_NOT_NULL = "where_not_null"
LIMIT = "limit"

RESERVED_KEYS = (LANGUAGE_ID, WITH, SELECTED_FIELDS, ORDER_BY, WHERE_NOT_NULL, LIMIT)

ParameterValues = Union[str, List[str]]


@dataclass(frozen=True)
class ParsedParameter:
    """
    One ``name[:v1,v2]`` group.

    ``values`` is None without a ``:``, a plain string for a single value and
    a list for several; callers handle both shapes.
    """

    name: str
    values: Optional[ParameterValues] = None

    def value_list(self) -> List[str]:
        if self.values is None:
            return []
        if isinstance(self.values, list):
            return list(self.values)
        return [self.values]

    def first_value(self, default: Optional[str] = None) -> Optional[str]:
        values = self.value_list()
        return values[0] if values else default


def parse_parameter_with_additional_values(parameters_string: str) -> List[ParsedParameter]:
    """
    Split ``a:1,2|b:3|c`` into parsed groups.

    Groups are separated by ``|``, the name by the first ``:``, values by
    ``,``. Always returns a list, also for a single group.

    Example:
        >>> parse_parameter_with_additional_values("a:1,2|b:3|c")
        [ParsedParameter(name='a', values=['1', '2']), ParsedParameter(name='b', values='3'), ParsedParameter(name='c', values=None)]
    """
    parsed: List[ParsedParameter] = []
    for group in (parameters_string or "").split("|"):
        if not group:
            continue
        if ":" in group:
            name, _, raw_values = group.partition(":")
            values = raw_values.split(",")
            parsed.append(ParsedParameter(name=name, values=values[0] if len(values) == 1 else values))
        else:
            parsed.append(ParsedParameter(name=group))
    return parsed


def split_list(raw: Any) -> List[str]:
    """Split a comma list (``year,recipient_company,id``), dropping blanks."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        items = [str(item) for item in raw]
    else:
        items = str(raw).split(",")
    return [item.strip() for item in items if item.strip()]


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
