"""
Domain models for bulk-reconcile.

Record types describe the remote object schema, instances are the local
declarations being reconciled, and remote records are the rows fetched during
lookup. Field descriptors form a tagged union on `kind` so compound-field
handling dispatches on the descriptor, never on the runtime shape of a value.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field

from bulk_reconcile.errors import SchemaError

DEFAULT_ID_FIELD = "Id"


class PrimitiveType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class PrimitiveField(BaseModel):
    """
    A field holding a single string, number or boolean.

    `api_name` is the remote column name when it differs from the local name.
    """

    kind: Literal["primitive"] = "primitive"
    name: str
    primitive: PrimitiveType = PrimitiveType.STRING
    api_name: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def remote_name(self) -> str:
        return self.api_name or self.name


class CompoundField(BaseModel):
    """
    A field made of a fixed set of named primitive sub-fields (e.g. an address).

    Locally the value is a nested mapping; remotely every sub-field is its own column.
    """

    kind: Literal["compound"] = "compound"
    name: str
    sub_fields: Tuple[PrimitiveField, ...]

    model_config = {"frozen": True}


FieldDef = Annotated[Union[PrimitiveField, CompoundField], Field(discriminator="kind")]


class RecordType(BaseModel):
    """
    Schema of one remote object type: its name and ordered field descriptors.
    """

    name: str = Field(..., description="Remote object name, used in queries and bulk calls.")
    fields: Tuple[FieldDef, ...] = Field(default=(), description="Ordered field descriptors.")
    id_field: str = Field(DEFAULT_ID_FIELD, description="Remote unique identifier column.")
    is_list_setting: bool = Field(
        False, description="List-type custom setting objects are always identified by Name."
    )

    model_config = {"frozen": True}

    def field(self, name: str) -> Optional[Union[PrimitiveField, CompoundField]]:
        for field_def in self.fields:
            if field_def.name == name:
                return field_def
        return None


class Instance(BaseModel):
    """
    A locally declared record pending reconciliation.

    `identifier` is empty until the remote store assigns one (insert) or a
    lookup matches the instance to an existing remote record.
    """

    record_type: RecordType
    name: str = Field(..., description="Display name used in logs and error messages.")
    values: Dict[str, Any] = Field(default_factory=dict)
    identifier: Optional[str] = None

    def get(self, field_name: str) -> Any:
        if field_name == self.record_type.id_field:
            return self.identifier
        return self.values.get(field_name)

    @property
    def type_name(self) -> str:
        return self.record_type.name


class RemoteRecord(BaseModel):
    """
    A row returned by the remote store: identifier plus raw column values.
    """

    id: str
    values: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @classmethod
    def from_row(cls, row: Mapping[str, Any], id_column: str) -> "RemoteRecord":
        if row.get(id_column) is None:
            raise SchemaError(f"Remote row is missing its '{id_column}' column: {dict(row)}")
        return cls(id=str(row[id_column]), values=dict(row))


class OperationResult(BaseModel):
    """
    Outcome of one record within a bulk call.
    """

    success: bool
    id: Optional[str] = None
    errors: List[str] = Field(default_factory=list)


ActionName = Literal["add", "remove", "modify"]


class AppliedChange(BaseModel):
    action: ActionName
    before: Optional[Instance] = None
    after: Optional[Instance] = None


class DeployOutcome(BaseModel):
    """
    Result of reconciling one change group: applied changes plus error messages.
    """

    applied_changes: List[AppliedChange] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    def merge(self, other: "DeployOutcome") -> "DeployOutcome":
        return DeployOutcome(
            applied_changes=[*self.applied_changes, *other.applied_changes],
            errors=[*self.errors, *other.errors],
        )


__all__ = [
    "DEFAULT_ID_FIELD",
    "ActionName",
    "AppliedChange",
    "CompoundField",
    "DeployOutcome",
    "FieldDef",
    "Instance",
    "OperationResult",
    "PrimitiveField",
    "PrimitiveType",
    "RecordType",
    "RemoteRecord",
]
