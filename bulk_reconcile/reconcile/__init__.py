"""
Reconcile steps: identity resolution, lookup queries, matching, bulk execution
and result aggregation. Each step is a plain module; the engine wires them.
"""

from bulk_reconcile.reconcile import bulk, identity, matching, query, results

__all__ = ["bulk", "identity", "matching", "query", "results"]
