"""
Change records handed to the engine.

What changed is decided upstream; a change only ties an instance to the
operation the caller wants applied.
"""
from __future__ import annotations

from typing import Iterable, Literal, Union

from pydantic import BaseModel

from bulk_reconcile.domain.models import Instance


class AdditionChange(BaseModel):
    action: Literal["add"] = "add"
    after: Instance


class RemovalChange(BaseModel):
    action: Literal["remove"] = "remove"
    before: Instance


class ModificationChange(BaseModel):
    action: Literal["modify"] = "modify"
    before: Instance
    after: Instance


Change = Union[AdditionChange, RemovalChange, ModificationChange]


def change_instance(change: Change) -> Instance:
    """Return the instance a change applies to (the `after` side when present)."""
    if isinstance(change, RemovalChange):
        return change.before
    return change.after


def is_addition_change(change: Change) -> bool:
    return isinstance(change, AdditionChange)


def is_removal_change(change: Change) -> bool:
    return isinstance(change, RemovalChange)


def is_modification_change(change: Change) -> bool:
    return isinstance(change, ModificationChange)


def change_actions(changes: Iterable[Change]) -> list[str]:
    """Distinct action names in first-seen order."""
    seen: list[str] = []
    for change in changes:
        if change.action not in seen:
            seen.append(change.action)
    return seen


__all__ = [
    "AdditionChange",
    "Change",
    "ModificationChange",
    "RemovalChange",
    "change_actions",
    "change_instance",
    "is_addition_change",
    "is_modification_change",
    "is_removal_change",
]
