"""
Domain package for bulk-reconcile.

Exports the record, instance, change, and identity-configuration models used
across the reconcile steps and the engine. Keep this package focused on data
definitions and validation concerns.
"""

from bulk_reconcile.domain.changes import (
    AdditionChange,
    Change,
    ModificationChange,
    RemovalChange,
    change_instance,
)
from bulk_reconcile.domain.data_management import DataManagement, IdFieldsOverride
from bulk_reconcile.domain.models import (
    AppliedChange,
    CompoundField,
    DeployOutcome,
    Instance,
    OperationResult,
    PrimitiveField,
    PrimitiveType,
    RecordType,
    RemoteRecord,
)

__all__ = [
    "AdditionChange",
    "AppliedChange",
    "Change",
    "CompoundField",
    "DataManagement",
    "DeployOutcome",
    "IdFieldsOverride",
    "Instance",
    "ModificationChange",
    "OperationResult",
    "PrimitiveField",
    "PrimitiveType",
    "RecordType",
    "RemoteRecord",
    "RemovalChange",
    "change_instance",
]
