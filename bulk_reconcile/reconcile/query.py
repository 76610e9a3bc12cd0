"""
Lookup query construction.

Builds `SELECT ... WHERE (a = 1 AND b = 'x') OR (...)` queries, one clause per
local instance, split into several queries so none exceeds the remote store's
length or clause limits. Values shared between unrelated instances can make a
query return extra rows; matching by identity hash filters them out later.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Sequence, Set, Tuple, Union

from bulk_reconcile.domain.models import CompoundField, Instance, PrimitiveField, PrimitiveType
from bulk_reconcile.errors import SchemaError
from bulk_reconcile.reconcile.identity import IdentityColumn
from bulk_reconcile.utils.logging import get_logger

log = get_logger(__name__)

_ESCAPE_PATTERN = re.compile(r"(\\|')")
_OR = " OR "

WhereValues = List[Tuple[str, str]]


def escape_where_str(value: str) -> str:
    """Backslash-escape backslashes and single quotes."""
    return _ESCAPE_PATTERN.sub(r"\\\1", value)


def format_value_for_where(field: Union[PrimitiveField, CompoundField], value: Any) -> str:
    """
    Render a value as a literal of the remote query dialect.
    """
    if value is None:
        return "null"
    if isinstance(field, CompoundField):
        raise SchemaError(f"Can not create WHERE clause for non-primitive field {field.name}")
    if field.primitive is PrimitiveType.STRING:
        return f"'{escape_where_str(str(value))}'"
    if field.primitive is PrimitiveType.BOOLEAN:
        return str(value).lower()
    return str(value)


def _column_value(instance: Instance, column: IdentityColumn) -> Any:
    value = instance.get(column.source_field)
    if not column.is_compound_member:
        return value
    if isinstance(value, Mapping):
        return value.get(column.sub_field)
    return None


def instance_where_values(instance: Instance, columns: Sequence[IdentityColumn]) -> WhereValues:
    """Column name and rendered literal for every identity column of one instance."""
    return [
        (column.remote_column, format_value_for_where(column.descriptor, _column_value(instance, column)))
        for column in columns
    ]


def _clause(values: WhereValues) -> str:
    return "(" + " AND ".join(f"{column} = {literal}" for column, literal in values) + ")"


def build_select_queries(
    type_name: str,
    select_columns: Sequence[str],
    per_instance_values: Sequence[WhereValues],
    max_query_length: int,
    max_clauses: int,
) -> List[str]:
    """
    Build lookup queries covering every instance's identity values.

    Parameters
    ----------
    type_name : str
        Remote object name for the FROM clause.
    select_columns : Sequence[str]
        Columns to select; must include the id column.
    per_instance_values : Sequence[WhereValues]
        Rendered (column, literal) pairs per instance.
    max_query_length : int
        Maximum characters per query. A single clause that alone exceeds it is
        still emitted in its own query.
    max_clauses : int
        Maximum OR-ed clauses per query.

    Returns
    -------
    List[str]
        Independently executable queries; empty when there is nothing to look up.
    """
    clauses: List[str] = []
    seen: Set[str] = set()
    for values in per_instance_values:
        if not values:
            continue
        clause = _clause(values)
        if clause not in seen:
            seen.add(clause)
            clauses.append(clause)

    prefix = f"SELECT {','.join(select_columns)} FROM {type_name} WHERE "
    queries: List[str] = []
    current: List[str] = []
    current_length = len(prefix)

    for clause in clauses:
        added = len(clause) + (len(_OR) if current else 0)
        if current and (current_length + added > max_query_length or len(current) >= max_clauses):
            queries.append(prefix + _OR.join(current))
            current = []
            current_length = len(prefix)
            added = len(clause)
        if not current and current_length + added > max_query_length:
            log.warning(
                "Lookup clause exceeds the maximum query length",
                extra={"record_type": type_name, "clause_length": len(clause)},
            )
        current.append(clause)
        current_length += added

    if current:
        queries.append(prefix + _OR.join(current))

    log.debug(
        "Built lookup queries",
        extra={"record_type": type_name, "clauses": len(clauses), "queries": len(queries)},
    )
    return queries


__all__ = [
    "WhereValues",
    "build_select_queries",
    "escape_where_str",
    "format_value_for_where",
    "instance_where_values",
]
