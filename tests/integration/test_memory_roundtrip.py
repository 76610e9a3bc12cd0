"""
End-to-end deploys against the in-memory store wrapped in the retrying client.
"""

from __future__ import annotations

import pytest

from bulk_reconcile.domain.changes import AdditionChange, ModificationChange, RemovalChange
from bulk_reconcile.domain.models import Instance
from bulk_reconcile.engine import deploy_instances_group
from bulk_reconcile.infrastructure.memory_store import InMemoryRemoteStore
from bulk_reconcile.infrastructure.remote_store import RetryingRemoteStore


@pytest.fixture
def memory_store() -> InMemoryRemoteStore:
    return InMemoryRemoteStore()


@pytest.fixture
def client(memory_store, test_settings) -> RetryingRemoteStore:
    return RetryingRemoteStore(
        memory_store,
        attempts=test_settings.query_retry_attempts,
        max_wait=test_settings.query_retry_max_wait,
    )


@pytest.mark.asyncio
async def test_add_redeploy_modify_remove_lifecycle(
    client, memory_store, account_type, data_management, test_settings
):
    def fresh(employees: int) -> Instance:
        return Instance(
            record_type=account_type,
            name="acme",
            values={
                "Name": "Acme",
                "employees": employees,
                "address": {"street": "1 Main St", "city": "Springfield"},
            },
        )

    first = fresh(10)
    outcome = await deploy_instances_group(
        [AdditionChange(after=first)], client, data_management, test_settings
    )
    assert outcome.errors == []
    assert [change.action for change in outcome.applied_changes] == ["add"]
    created_id = first.identifier
    assert created_id is not None
    assert memory_store.rows("Account")[0]["Street"] == "1 Main St"

    # same identity deployed again from a fresh copy without an identifier
    second = fresh(20)
    outcome = await deploy_instances_group(
        [AdditionChange(after=second)], client, data_management, test_settings
    )
    assert outcome.errors == []
    assert [change.action for change in outcome.applied_changes] == ["modify"]
    assert second.identifier == created_id
    assert len(memory_store.rows("Account")) == 1
    assert memory_store.rows("Account")[0]["NumberOfEmployees"] == 20

    renamed = second.model_copy(update={"values": {**second.values, "Name": "Acme Inc"}})
    outcome = await deploy_instances_group(
        [ModificationChange(before=second, after=renamed)], client, data_management, test_settings
    )
    assert outcome.errors == []
    assert memory_store.rows("Account")[0]["Name"] == "Acme Inc"

    outcome = await deploy_instances_group(
        [RemovalChange(before=renamed)], client, data_management, test_settings
    )
    assert outcome.errors == []
    assert memory_store.rows("Account") == []
    assert [operation for _, operation, _ in memory_store.bulk_calls] == [
        "insert",
        "update",
        "update",
        "delete",
    ]


@pytest.mark.asyncio
async def test_null_remote_identity_field_matches_absent_local_value(
    client, memory_store, account_type, data_management, test_settings
):
    await memory_store.bulk_operation(
        "Account", "insert", [{"Name": "Nomad", "Street": None, "City": None}]
    )
    existing_id = memory_store.rows("Account")[0]["Id"]
    nomad = Instance(record_type=account_type, name="nomad", values={"Name": "Nomad"})

    outcome = await deploy_instances_group(
        [AdditionChange(after=nomad)], client, data_management, test_settings
    )

    assert outcome.errors == []
    assert [change.action for change in outcome.applied_changes] == ["modify"]
    assert nomad.identifier == existing_id


@pytest.mark.asyncio
async def test_stale_removal_reports_error_without_touching_other_rows(
    client, memory_store, account_type, data_management, test_settings
):
    await memory_store.bulk_operation("Account", "insert", [{"Name": "Keep"}])
    kept_id = memory_store.rows("Account")[0]["Id"]
    stale = Instance(record_type=account_type, name="stale", identifier="ACC999999999999")
    kept = Instance(record_type=account_type, name="keep", identifier=kept_id)

    outcome = await deploy_instances_group(
        [RemovalChange(before=stale), RemovalChange(before=kept)],
        client,
        data_management,
        test_settings,
    )

    assert [change.before.name for change in outcome.applied_changes] == ["keep"]
    assert len(outcome.errors) == 1
    assert outcome.errors[0].startswith("stale:\n\tENTITY_IS_DELETED")
