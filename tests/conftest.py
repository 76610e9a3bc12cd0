"""
Pytest configuration for bulk-reconcile.

Provides fixtures for:
- A record type with primitive, renamed and compound fields
- Identity configuration (DataManagement) and test settings
- A scriptable fake RemoteStore that records every call
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pytest

from bulk_reconcile.config import Settings
from bulk_reconcile.domain.data_management import DataManagement
from bulk_reconcile.domain.models import (
    CompoundField,
    Instance,
    PrimitiveField,
    PrimitiveType,
    RecordType,
)

BulkResponder = Callable[[Sequence[Dict[str, Any]]], List[Dict[str, Any]]]


class FakeRemoteStore:
    """
    RemoteStore double.

    `rows` is returned (filtered by nothing) for every query. `responders`
    maps an operation to a callable producing the per-record results;
    operations without a responder succeed for every record. Set
    `query_error` / `bulk_error` to make the whole call fail.
    """

    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []
        self.responders: Dict[str, BulkResponder] = {}
        self.query_error: Optional[BaseException] = None
        self.bulk_error: Optional[BaseException] = None
        self.queries: List[str] = []
        self.bulk_calls: List[Tuple[str, str, List[Dict[str, Any]]]] = []
        self._ids = itertools.count(1)

    async def query(self, query: str) -> Sequence[Mapping[str, Any]]:
        self.queries.append(query)
        if self.query_error is not None:
            raise self.query_error
        return [dict(row) for row in self.rows]

    async def bulk_operation(
        self, type_name: str, operation: str, records: Sequence[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        self.bulk_calls.append((type_name, operation, [dict(record) for record in records]))
        if self.bulk_error is not None:
            raise self.bulk_error
        responder = self.responders.get(operation)
        if responder is not None:
            return responder(records)
        if operation == "insert":
            return [{"success": True, "id": f"NEW{next(self._ids):03d}"} for _ in records]
        return [{"success": True, "id": record.get("Id")} for record in records]

    def calls_for(self, operation: str) -> List[List[Dict[str, Any]]]:
        return [records for _, op, records in self.bulk_calls if op == operation]


@pytest.fixture
def account_type() -> RecordType:
    return RecordType(
        name="Account",
        fields=(
            PrimitiveField(name="Name"),
            PrimitiveField(name="external", api_name="External__c"),
            PrimitiveField(
                name="employees", primitive=PrimitiveType.NUMBER, api_name="NumberOfEmployees"
            ),
            PrimitiveField(name="active", primitive=PrimitiveType.BOOLEAN, api_name="Active__c"),
            CompoundField(
                name="address",
                sub_fields=(PrimitiveField(name="street"), PrimitiveField(name="city")),
            ),
        ),
    )


@pytest.fixture
def data_management() -> DataManagement:
    return DataManagement(include_objects=["^Account$"], default_id_fields=["Name", "address"])


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with explicit limits so tests do not depend on the environment.
    """
    return Settings(
        app_env="test",
        log_level="DEBUG",
        max_query_length=100_000,
        max_query_clauses=500,
        query_retry_attempts=3,
        query_retry_max_wait=0,
    )


@pytest.fixture
def fake_store() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def make_instance(account_type: RecordType) -> Callable[..., Instance]:
    def _make(name: str, identifier: Optional[str] = None, **values: Any) -> Instance:
        return Instance(record_type=account_type, name=name, values=values, identifier=identifier)

    return _make
