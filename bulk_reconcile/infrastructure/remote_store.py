"""
Remote store interface and adapters.

The engine talks to the remote store only through the RemoteStore protocol:
a lookup `query` and a per-record `bulk_operation`. Transport, authentication
and pagination live behind it.

RetryingRemoteStore wraps any RemoteStore and retries lookup queries on
transient transport failures using tenacity. Bulk operations are never retried
because inserts are not idempotent.
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    TypedDict,
    runtime_checkable,
)

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bulk_reconcile.errors import TransportError
from bulk_reconcile.utils.logging import get_logger

log = get_logger(__name__)

BulkOperation = Literal["insert", "update", "delete"]

RETRYABLE_ERRORS = (TransportError, ConnectionError, TimeoutError)


class BulkResultInfo(TypedDict, total=False):
    """
    Per-record outcome returned by a bulk call, aligned with the submitted records.
    """

    success: bool
    id: Optional[str]
    errors: List[str]


@runtime_checkable
class RemoteStore(Protocol):
    """
    Interface every remote store client must implement.
    """

    async def query(self, query: str) -> Sequence[Mapping[str, Any]]:
        """
        Run a lookup query and return every matching row (pagination flattened).
        """
        ...

    async def bulk_operation(
        self,
        type_name: str,
        operation: BulkOperation,
        records: Sequence[Dict[str, Any]],
    ) -> Sequence[BulkResultInfo]:
        """
        Submit records for one operation; return one outcome per record.

        Raises
        ------
        TransportError
            If the call as a whole could not be completed.
        """
        ...


class RetryingRemoteStore:
    """
    RemoteStore decorator adding exponential-backoff retries to lookup queries.

    Parameters
    ----------
    inner : RemoteStore
        The store to delegate to.
    attempts : int
        Total attempts per query, including the first one.
    max_wait : float
        Upper bound in seconds for a single backoff wait.
    """

    def __init__(self, inner: RemoteStore, attempts: int = 3, max_wait: float = 10.0) -> None:
        self._inner = inner
        self.attempts = attempts
        self.max_wait = max_wait

    async def query(self, query: str) -> Sequence[Mapping[str, Any]]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=1, min=0, max=self.max_wait),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(log, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._inner.query(query)
        raise AssertionError("unreachable")  # pragma: no cover

    async def bulk_operation(
        self,
        type_name: str,
        operation: BulkOperation,
        records: Sequence[Dict[str, Any]],
    ) -> Sequence[BulkResultInfo]:
        return await self._inner.bulk_operation(type_name, operation, records)


__all__ = [
    "BulkOperation",
    "BulkResultInfo",
    "RETRYABLE_ERRORS",
    "RemoteStore",
    "RetryingRemoteStore",
]
