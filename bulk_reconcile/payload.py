"""
Deploy payload accepted by the `deploy` CLI command.

A payload bundles a record type schema, its identity configuration, the remote
records to seed the in-memory store with, and the changes to deploy.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from bulk_reconcile.domain.changes import AdditionChange, Change, ModificationChange, RemovalChange
from bulk_reconcile.domain.data_management import DataManagement
from bulk_reconcile.domain.models import Instance, RecordType


class InstancePayload(BaseModel):
    name: str
    values: Dict[str, Any] = Field(default_factory=dict)
    identifier: Optional[str] = None

    def to_instance(self, record_type: RecordType) -> Instance:
        return Instance(
            record_type=record_type,
            name=self.name,
            values=dict(self.values),
            identifier=self.identifier,
        )


class ChangePayload(BaseModel):
    action: Literal["add", "remove", "modify"]
    before: Optional[InstancePayload] = None
    after: Optional[InstancePayload] = None

    @model_validator(mode="after")
    def _check_sides(self) -> "ChangePayload":
        needs_before = self.action in ("remove", "modify")
        needs_after = self.action in ("add", "modify")
        if needs_before and self.before is None:
            raise ValueError(f"'{self.action}' change requires 'before'")
        if needs_after and self.after is None:
            raise ValueError(f"'{self.action}' change requires 'after'")
        return self


class DeployPayload(BaseModel):
    record_type: RecordType
    data_management: Optional[DataManagement] = None
    remote_records: List[Dict[str, Any]] = Field(default_factory=list)
    changes: List[ChangePayload] = Field(default_factory=list)

    def build_changes(self) -> List[Change]:
        changes: List[Change] = []
        for change in self.changes:
            if change.action == "add":
                changes.append(AdditionChange(after=change.after.to_instance(self.record_type)))
            elif change.action == "remove":
                changes.append(RemovalChange(before=change.before.to_instance(self.record_type)))
            else:
                changes.append(
                    ModificationChange(
                        before=change.before.to_instance(self.record_type),
                        after=change.after.to_instance(self.record_type),
                    )
                )
        return changes


__all__ = ["ChangePayload", "DeployPayload", "InstancePayload"]
