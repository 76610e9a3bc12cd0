"""
In-memory RemoteStore used for dry runs from the CLI and in tests.

Lookup queries return every row of the queried type projected on the selected
columns. That over-fetches compared to a real store, which matching tolerates.
Bulk calls apply per record and report per-record failures for unknown ids.
"""

from __future__ import annotations

import itertools
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from bulk_reconcile.domain.models import DEFAULT_ID_FIELD
from bulk_reconcile.infrastructure.remote_store import BulkOperation, BulkResultInfo

_SELECT_PATTERN = re.compile(
    r"^\s*SELECT\s+(?P<columns>.+?)\s+FROM\s+(?P<type_name>\w+)", re.IGNORECASE | re.DOTALL
)


class InMemoryRemoteStore:
    """
    Dict-backed remote store keyed by type name, then record id.

    Every query and bulk call is recorded on `queries` / `bulk_calls`.
    """

    def __init__(
        self,
        rows_by_type: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None,
        id_column: str = DEFAULT_ID_FIELD,
    ) -> None:
        self.id_column = id_column
        self.queries: List[str] = []
        self.bulk_calls: List[Tuple[str, BulkOperation, List[Dict[str, Any]]]] = []
        self._ids = itertools.count(1)
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for type_name, rows in (rows_by_type or {}).items():
            table = self._tables.setdefault(type_name, {})
            for row in rows:
                record_id = row.get(id_column) or self._next_id(type_name)
                table[str(record_id)] = {**row, id_column: str(record_id)}

    def _next_id(self, type_name: str) -> str:
        return f"{type_name[:3].upper()}{next(self._ids):012d}"

    def rows(self, type_name: str) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._tables.get(type_name, {}).values()]

    async def query(self, query: str) -> Sequence[Mapping[str, Any]]:
        self.queries.append(query)
        parsed = _SELECT_PATTERN.match(query)
        if parsed is None:
            raise ValueError(f"Unsupported query: {query}")
        columns = [column.strip() for column in parsed.group("columns").split(",")]
        table = self._tables.get(parsed.group("type_name"), {})
        return [{column: row.get(column) for column in columns} for row in table.values()]

    async def bulk_operation(
        self,
        type_name: str,
        operation: BulkOperation,
        records: Sequence[Dict[str, Any]],
    ) -> Sequence[BulkResultInfo]:
        if operation not in ("insert", "update", "delete"):
            raise ValueError(f"Unknown bulk operation '{operation}'")
        self.bulk_calls.append((type_name, operation, [dict(record) for record in records]))
        table = self._tables.setdefault(type_name, {})
        return [self._apply(table, type_name, operation, record) for record in records]

    def _apply(
        self,
        table: Dict[str, Dict[str, Any]],
        type_name: str,
        operation: BulkOperation,
        record: Mapping[str, Any],
    ) -> BulkResultInfo:
        record_id = record.get(self.id_column)
        if operation == "insert":
            if record_id is not None:
                return BulkResultInfo(
                    success=False,
                    errors=[f"INVALID_FIELD: cannot specify {self.id_column} in an insert call"],
                )
            record_id = self._next_id(type_name)
            table[record_id] = {**record, self.id_column: record_id}
            return BulkResultInfo(success=True, id=record_id)

        if record_id is None or record_id not in table:
            return BulkResultInfo(
                success=False, errors=[f"ENTITY_IS_DELETED: entity {record_id} not found"]
            )
        if operation == "update":
            table[record_id].update(record)
        else:
            del table[record_id]
        return BulkResultInfo(success=True, id=record_id)


__all__ = ["InMemoryRemoteStore"]
