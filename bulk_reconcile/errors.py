"""
Exception taxonomy for bulk-reconcile.

Per-record remote failures are never raised; they travel as strings on
OperationResult / DeployOutcome. Everything here is fatal for one change group.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base class for errors raised while reconciling a change group."""


class PreconditionError(ReconcileError):
    """The change group or its configuration cannot be reconciled at all."""


class SchemaError(ReconcileError):
    """A field name or value does not fit the record type's schema."""


class TransportError(ReconcileError):
    """The remote store could not be reached or rejected a whole call."""


__all__ = [
    "ReconcileError",
    "PreconditionError",
    "SchemaError",
    "TransportError",
]
