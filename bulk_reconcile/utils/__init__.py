"""
Utilities package for bulk-reconcile.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of reconciliation logic.
"""

from bulk_reconcile.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "JsonFormatter",
]
