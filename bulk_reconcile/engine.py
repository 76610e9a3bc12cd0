"""
Deploy engine for groups of instance changes.

Usage (example):
    from bulk_reconcile.engine import deploy_instances_group

    outcome = await deploy_instances_group(changes, client, data_management)
    print(outcome.applied_changes, outcome.errors)

A change group holds changes of a single record type and a single action:
- additions are upserted: instances whose identity fields match an existing
  remote record are updated, the rest inserted;
- removals are deleted by identifier;
- modifications are updated, except those whose identifier changed.

The call always returns a DeployOutcome. Record-level failures become error
strings next to the applied changes; anything fatal to the group (bad
configuration, transport failure) yields an outcome with no applied changes
and a single error.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, List, Optional, Sequence, TypeVar

from bulk_reconcile.config import Settings, get_settings
from bulk_reconcile.domain.changes import (
    Change,
    ModificationChange,
    change_actions,
    change_instance,
    is_addition_change,
    is_modification_change,
    is_removal_change,
)
from bulk_reconcile.domain.data_management import DataManagement
from bulk_reconcile.domain.models import DeployOutcome, Instance, RecordType, RemoteRecord
from bulk_reconcile.errors import PreconditionError
from bulk_reconcile.infrastructure.remote_store import RemoteStore
from bulk_reconcile.reconcile.bulk import execute
from bulk_reconcile.reconcile.identity import expand, resolve_id_fields
from bulk_reconcile.reconcile.matching import find_identity_collisions, match
from bulk_reconcile.reconcile.query import build_select_queries, instance_where_values
from bulk_reconcile.reconcile.results import (
    aggregate_add,
    aggregate_modify,
    aggregate_remove,
    fatal_outcome,
    pair_results,
)
from bulk_reconcile.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


def _single_record_type(instances: Sequence[Instance]) -> RecordType:
    type_names = list(dict.fromkeys(instance.type_name for instance in instances))
    if len(type_names) > 1:
        raise PreconditionError(
            f"Instances change group should have a single type but got: {', '.join(type_names)}"
        )
    return instances[0].record_type


def _effective_data_management(
    record_type: RecordType, data_management: Optional[DataManagement]
) -> DataManagement:
    if record_type.is_list_setting:
        return DataManagement.for_list_setting(record_type.name)
    if data_management is None:
        raise PreconditionError(
            f"Data management must be configured to deploy instances of {record_type.name}"
        )
    if not data_management.is_object_match(record_type.name):
        raise PreconditionError(
            f"Type {record_type.name} is not included in the data management configuration"
        )
    return data_management


async def _settled(*aws: Awaitable[T]) -> List[T]:
    """
    Await all awaitables to completion, then raise the first failure if any.

    No call is left running once the group returns, even when a sibling fails.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


async def _lookup(client: RemoteStore, queries: Sequence[str], id_column: str) -> List[RemoteRecord]:
    batches = await _settled(*(client.query(query) for query in queries))
    return [RemoteRecord.from_row(row, id_column) for batch in batches for row in batch]


async def _deploy_additions(
    instances: Sequence[Instance],
    record_type: RecordType,
    id_fields: Sequence[str],
    client: RemoteStore,
    settings: Settings,
) -> DeployOutcome:
    unique, duplicates = find_identity_collisions(instances, id_fields)
    rejected = [
        f"{duplicate.name}:\n\thas the same identity ({', '.join(id_fields)}) as {first.name}"
        for duplicate, first in duplicates
    ]
    if duplicates:
        log.warning(
            "Rejected additions with duplicate identities",
            extra={"record_type": record_type.name, "duplicates": len(duplicates)},
        )

    columns = expand(record_type, id_fields)
    where_columns = [column for column in columns if column.source_field in id_fields]
    queries = build_select_queries(
        record_type.name,
        [column.remote_column for column in columns],
        [instance_where_values(instance, where_columns) for instance in unique],
        settings.max_query_length,
        settings.max_query_clauses,
    )
    remote_records = await _lookup(client, queries, record_type.id_field)
    matched = match(unique, remote_records, record_type, id_fields)

    # identifiers are assigned on match, before the update is known to succeed
    existing = []
    for instance, record in matched.existing:
        instance.identifier = record.id
        existing.append(instance)

    log.info(
        f"[LOOKUP] {record_type.name}",
        extra={
            "record_type": record_type.name,
            "queries": len(queries),
            "remote_records": len(remote_records),
            "existing": len(existing),
            "new": len(matched.new),
        },
    )

    insert_results, update_results = await _settled(
        execute(client, record_type.name, "insert", matched.new),
        execute(client, record_type.name, "update", existing),
    )
    return aggregate_add(
        pair_results(matched.new, insert_results),
        pair_results(existing, update_results),
        rejected,
    )


async def _deploy_removals(
    instances: Sequence[Instance], record_type: RecordType, client: RemoteStore
) -> DeployOutcome:
    results = await execute(client, record_type.name, "delete", instances)
    return aggregate_remove(pair_results(instances, results))


async def _deploy_modifications(
    changes: Sequence[ModificationChange], record_type: RecordType, client: RemoteStore
) -> DeployOutcome:
    valid: List[ModificationChange] = []
    rejected: List[str] = []
    for change in changes:
        if change.before.identifier != change.after.identifier:
            rejected.append(
                f"Failed to update {change.after.name} as id prev={change.before.identifier} "
                f"and new={change.after.identifier} are different"
            )
        else:
            valid.append(change)
    if rejected:
        log.warning(
            "Rejected modifications that change the record identifier",
            extra={"record_type": record_type.name, "rejected": len(rejected)},
        )

    afters = [change.after for change in valid]
    results = await execute(client, record_type.name, "update", afters)
    return aggregate_modify(valid, pair_results(afters, results), rejected)


async def deploy_instances_group(
    changes: Sequence[Change],
    client: RemoteStore,
    data_management: Optional[DataManagement] = None,
    settings: Optional[Settings] = None,
) -> DeployOutcome:
    """
    Reconcile and deploy one group of instance changes.

    Parameters
    ----------
    changes : Sequence[Change]
        Changes of a single record type and a single action kind.
    client : RemoteStore
        Remote store to look up and mutate records in.
    data_management : DataManagement | None
        Identity configuration. Not needed for list-setting record types.
    settings : Settings | None
        Query limits. Defaults to `get_settings()`.

    Returns
    -------
    DeployOutcome
        Applied changes and error messages. Never raises for configuration or
        transport failures; those produce an outcome with a single error.
    """
    if not changes:
        return DeployOutcome()
    settings = settings or get_settings()

    try:
        instances = [change_instance(change) for change in changes]
        record_type = _single_record_type(instances)
        effective = _effective_data_management(record_type, data_management)
        actions = change_actions(changes)
        log.info(
            f"[GROUP START] {record_type.name}",
            extra={"record_type": record_type.name, "actions": actions, "changes": len(changes)},
        )

        if all(is_addition_change(change) for change in changes):
            resolution = resolve_id_fields(record_type, effective)
            if resolution.invalid_fields:
                raise PreconditionError(
                    f"Failed to add instances of type {record_type.name} due to invalid "
                    f"identity fields - {', '.join(resolution.invalid_fields)}"
                )
            outcome = await _deploy_additions(
                instances, record_type, resolution.id_fields, client, settings
            )
        elif all(is_removal_change(change) for change in changes):
            outcome = await _deploy_removals(instances, record_type, client)
        elif all(is_modification_change(change) for change in changes):
            modifications = list(changes)
            outcome = await _deploy_modifications(modifications, record_type, client)
        else:
            raise PreconditionError("Instances change group must have one action")
    except Exception as exc:  # noqa: BLE001
        log.exception("[GROUP FAILED]", extra={"changes": len(changes)})
        return fatal_outcome(exc)

    log.info(
        f"[GROUP COMPLETE] {record_type.name}",
        extra={
            "record_type": record_type.name,
            "applied": len(outcome.applied_changes),
            "errors": len(outcome.errors),
        },
    )
    return outcome


__all__ = ["deploy_instances_group"]
