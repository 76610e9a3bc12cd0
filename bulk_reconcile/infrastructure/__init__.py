"""
Infrastructure package for bulk-reconcile.

Centralizes the remote store boundary (protocol, retrying decorator, in-memory
store). Keep this layer focused on I/O, decoupled from matching and
aggregation logic.
"""

from bulk_reconcile.infrastructure.memory_store import InMemoryRemoteStore
from bulk_reconcile.infrastructure.remote_store import (
    BulkOperation,
    BulkResultInfo,
    RemoteStore,
    RetryingRemoteStore,
)

__all__ = [
    "BulkOperation",
    "BulkResultInfo",
    "InMemoryRemoteStore",
    "RemoteStore",
    "RetryingRemoteStore",
]
