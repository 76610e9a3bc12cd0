"""
Aggregation of bulk results into a DeployOutcome.

Additions matched to an existing remote record are applied as updates and are
reported as `modify` changes; unmatched additions are reported as `add`.
"""

from __future__ import annotations

import json
from typing import List, NamedTuple, Sequence

from bulk_reconcile.domain.changes import ModificationChange
from bulk_reconcile.domain.models import AppliedChange, DeployOutcome, Instance, OperationResult
from bulk_reconcile.utils.logging import get_logger

log = get_logger(__name__)

UNKNOWN_ERROR = "unknown error"


class InstanceAndResult(NamedTuple):
    instance: Instance
    result: OperationResult


class ActionResult(NamedTuple):
    success_instances: List[Instance]
    error_messages: List[str]


def pair_results(
    instances: Sequence[Instance], results: Sequence[OperationResult]
) -> List[InstanceAndResult]:
    return [InstanceAndResult(instance, result) for instance, result in zip(instances, results)]


def error_message(pair: InstanceAndResult) -> str:
    errors = pair.result.errors or [UNKNOWN_ERROR]
    return f"{pair.instance.name}:\n\t" + "\n\t".join(errors)


def _log_errored(pairs: Sequence[InstanceAndResult]) -> None:
    for instance, result in pairs:
        log.error(
            f"Instance {instance.type_name}.{instance.name} had deploy errors - "
            + "\n\t".join(["", *(result.errors or [UNKNOWN_ERROR])])
            + "\n\nand values -\n"
            + json.dumps(instance.values, indent=2, default=str),
            extra={"record_type": instance.type_name, "instance": instance.name},
        )


def action_result(pairs: Sequence[InstanceAndResult]) -> ActionResult:
    failed = [pair for pair in pairs if not pair.result.success]
    _log_errored(failed)
    return ActionResult(
        success_instances=[pair.instance for pair in pairs if pair.result.success],
        error_messages=[error_message(pair) for pair in failed],
    )


def aggregate_add(
    insert_pairs: Sequence[InstanceAndResult],
    update_pairs: Sequence[InstanceAndResult],
    rejected: Sequence[str] = (),
) -> DeployOutcome:
    inserted = action_result(insert_pairs)
    updated = action_result(update_pairs)
    insert_outcome = DeployOutcome(
        applied_changes=[
            AppliedChange(action="add", after=instance) for instance in inserted.success_instances
        ],
        errors=inserted.error_messages,
    )
    # matched additions were applied as updates
    update_outcome = DeployOutcome(
        applied_changes=[
            AppliedChange(action="modify", after=instance) for instance in updated.success_instances
        ],
        errors=updated.error_messages,
    )
    return insert_outcome.merge(update_outcome).merge(DeployOutcome(errors=list(rejected)))


def aggregate_remove(pairs: Sequence[InstanceAndResult]) -> DeployOutcome:
    removed = action_result(pairs)
    return DeployOutcome(
        applied_changes=[
            AppliedChange(action="remove", before=instance) for instance in removed.success_instances
        ],
        errors=removed.error_messages,
    )


def aggregate_modify(
    changes: Sequence[ModificationChange],
    update_pairs: Sequence[InstanceAndResult],
    rejected: Sequence[str] = (),
) -> DeployOutcome:
    updated = action_result(update_pairs)
    succeeded = {id(instance) for instance in updated.success_instances}
    return DeployOutcome(
        applied_changes=[
            AppliedChange(action="modify", before=change.before, after=change.after)
            for change in changes
            if id(change.after) in succeeded
        ],
        errors=[*updated.error_messages, *rejected],
    )


def fatal_outcome(error: BaseException) -> DeployOutcome:
    return DeployOutcome(errors=[str(error) or type(error).__name__])


__all__ = [
    "ActionResult",
    "InstanceAndResult",
    "action_result",
    "aggregate_add",
    "aggregate_modify",
    "aggregate_remove",
    "error_message",
    "fatal_outcome",
    "pair_results",
]
