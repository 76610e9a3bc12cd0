"""
Bulk execution of one operation kind for a list of instances.

One remote call per (type, operation). Results come back positionally aligned
with the submitted instances; record-level failures stay in the results and
transport failures propagate.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from bulk_reconcile.domain.models import CompoundField, Instance, OperationResult
from bulk_reconcile.infrastructure.remote_store import BulkOperation, BulkResultInfo, RemoteStore
from bulk_reconcile.reconcile.identity import capitalize_first_letter
from bulk_reconcile.utils.logging import get_logger

log = get_logger(__name__)

MISSING_RESULT_ERROR = "no result returned by remote store"


def _field_columns(instance: Instance) -> Dict[str, Any]:
    """Declared values keyed by remote column; compound values flattened."""
    record_type = instance.record_type
    columns: Dict[str, Any] = {}
    for field_def in record_type.fields:
        if field_def.name == record_type.id_field or field_def.name not in instance.values:
            continue
        value = instance.values[field_def.name]
        if isinstance(field_def, CompoundField):
            if isinstance(value, Mapping):
                for sub in field_def.sub_fields:
                    if sub.name in value:
                        columns[capitalize_first_letter(sub.name)] = value[sub.name]
            continue
        columns[field_def.remote_name] = value
    return columns


def instances_to_records(
    instances: Sequence[Instance], operation: BulkOperation
) -> List[Dict[str, Any]]:
    """
    Convert instances to the remote bulk record shape for an operation.
    """
    records: List[Dict[str, Any]] = []
    for instance in instances:
        id_column = instance.record_type.id_field
        if operation == "insert":
            records.append(_field_columns(instance))
        elif operation == "update":
            records.append({id_column: instance.identifier, **_field_columns(instance)})
        else:
            records.append({id_column: instance.identifier})
    return records


def _to_operation_result(raw: BulkResultInfo) -> OperationResult:
    return OperationResult(
        success=bool(raw.get("success")),
        id=raw.get("id"),
        errors=list(raw.get("errors") or []),
    )


async def execute(
    client: RemoteStore,
    type_name: str,
    operation: BulkOperation,
    instances: Sequence[Instance],
) -> List[OperationResult]:
    """
    Run one bulk call and map its outcomes back onto the instances.

    Successful inserts get the remote-assigned identifier written onto the
    instance. An empty instance list never reaches the remote store.
    """
    if not instances:
        return []

    records = instances_to_records(instances, operation)
    log.info(
        f"[BULK {operation.upper()}] {type_name}",
        extra={"record_type": type_name, "operation": operation, "records": len(records)},
    )
    raw_results = list(await client.bulk_operation(type_name, operation, records))
    if len(raw_results) != len(instances):
        log.warning(
            "Bulk result count does not match submitted records",
            extra={
                "record_type": type_name,
                "operation": operation,
                "submitted": len(instances),
                "returned": len(raw_results),
            },
        )

    results = [
        _to_operation_result(raw_results[index])
        if index < len(raw_results)
        else OperationResult(success=False, errors=[MISSING_RESULT_ERROR])
        for index in range(len(instances))
    ]

    if operation == "insert":
        for instance, result in zip(instances, results):
            if result.success:
                instance.identifier = result.id

    return results


__all__ = ["MISSING_RESULT_ERROR", "execute", "instances_to_records"]
