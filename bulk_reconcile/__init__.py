"""
bulk-reconcile - upsert-style deploy of locally declared records to a remote store.

For record types that have no remote identifier known in advance, this package
matches local instances to remote records by a hash of their identity fields
and deploys the resulting changes as bulk operations:

- Identity field resolution, including compound fields
- Lookup query construction with size-bounded batching
- Deterministic identity-hash matching
- One bulk call per operation kind with per-record outcomes
- A DeployOutcome separating applied changes from per-record errors
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from bulk_reconcile.config import Settings, get_settings
from bulk_reconcile.domain import (
    AdditionChange,
    AppliedChange,
    CompoundField,
    DataManagement,
    DeployOutcome,
    Instance,
    ModificationChange,
    PrimitiveField,
    PrimitiveType,
    RecordType,
    RemovalChange,
)
from bulk_reconcile.engine import deploy_instances_group
from bulk_reconcile.errors import PreconditionError, ReconcileError, SchemaError, TransportError
from bulk_reconcile.infrastructure import InMemoryRemoteStore, RemoteStore, RetryingRemoteStore
from bulk_reconcile.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Engine
    "deploy_instances_group",
    # Domain
    "AdditionChange",
    "AppliedChange",
    "CompoundField",
    "DataManagement",
    "DeployOutcome",
    "Instance",
    "ModificationChange",
    "PrimitiveField",
    "PrimitiveType",
    "RecordType",
    "RemovalChange",
    # Errors
    "PreconditionError",
    "ReconcileError",
    "SchemaError",
    "TransportError",
    # Remote store
    "InMemoryRemoteStore",
    "RemoteStore",
    "RetryingRemoteStore",
    # Logging
    "configure_logging",
    "get_logger",
]
