"""
Identity-hash matching of local instances to remote records.

Both sides are reduced to an ordered mapping of identity field values (in the
configured identity order, never sorted) and hashed with SHA-256. Remote nulls
and local absence normalize to the same sentinel, which is left out of the
serialized form, so they match each other and never match a real value.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, List, Mapping, NamedTuple, Sequence, Tuple

from bulk_reconcile.domain.models import CompoundField, Instance, RecordType, RemoteRecord
from bulk_reconcile.errors import SchemaError
from bulk_reconcile.reconcile.identity import capitalize_first_letter
from bulk_reconcile.utils.logging import get_logger

log = get_logger(__name__)


class _Absent:
    def __repr__(self) -> str:
        return "<absent>"


ABSENT = _Absent()


class MatchResult(NamedTuple):
    existing: List[Tuple[Instance, RemoteRecord]]
    new: List[Instance]


def _normalize(value: Any) -> Any:
    if value is None:
        return ABSENT
    # 1 and 1.0 are the same remote number
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _compound_value(field_def: CompoundField, raw: Any) -> Any:
    if raw is None:
        return ABSENT
    if not isinstance(raw, Mapping):
        raise SchemaError(f"Compound field {field_def.name} expects a mapping, got {raw!r}")
    inner = {
        sub.name: _normalize(raw.get(sub.name))
        for sub in field_def.sub_fields
    }
    inner = {key: value for key, value in inner.items() if value is not ABSENT}
    return inner or ABSENT


def identity_values(
    values: Mapping[str, Any], record_type: RecordType, identity_spec: Sequence[str]
) -> Dict[str, Any]:
    """Ordered identity mapping in identity-spec order."""
    ordered: Dict[str, Any] = {}
    for name in identity_spec:
        field_def = record_type.field(name)
        if isinstance(field_def, CompoundField):
            ordered[name] = _compound_value(field_def, values.get(name))
        else:
            ordered[name] = _normalize(values.get(name))
    return ordered


def compute_identity_hash(ordered_values: Mapping[str, Any]) -> str:
    payload = {key: value for key, value in ordered_values.items() if value is not ABSENT}
    serialized = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def clone_without_nulls(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        key: clone_without_nulls(value) if isinstance(value, Mapping) else value
        for key, value in values.items()
        if value is not None
    }


def record_to_values(record_type: RecordType, record: RemoteRecord) -> Dict[str, Any]:
    """
    Reassemble local-shaped values from a remote row, dropping nulls.
    """
    values: Dict[str, Any] = {record_type.id_field: record.id}
    for field_def in record_type.fields:
        if isinstance(field_def, CompoundField):
            values[field_def.name] = {
                sub.name: record.values.get(capitalize_first_letter(sub.name))
                for sub in field_def.sub_fields
            }
        elif field_def.remote_name in record.values:
            values[field_def.name] = record.values[field_def.remote_name]
    return clone_without_nulls(values)


def _instance_values(instance: Instance) -> Dict[str, Any]:
    values = dict(instance.values)
    if instance.identifier is not None:
        values[instance.record_type.id_field] = instance.identifier
    return values


def hash_instance(instance: Instance, identity_spec: Sequence[str]) -> str:
    record_type = instance.record_type
    return compute_identity_hash(
        identity_values(_instance_values(instance), record_type, identity_spec)
    )


def hash_record(record: RemoteRecord, record_type: RecordType, identity_spec: Sequence[str]) -> str:
    return compute_identity_hash(
        identity_values(record_to_values(record_type, record), record_type, identity_spec)
    )


def find_identity_collisions(
    instances: Sequence[Instance], identity_spec: Sequence[str]
) -> Tuple[List[Instance], List[Tuple[Instance, Instance]]]:
    """
    Split instances into the first holder of each identity and later duplicates.

    Duplicates come paired with the instance whose identity they repeat.
    """
    first_by_hash: Dict[str, Instance] = {}
    unique: List[Instance] = []
    duplicates: List[Tuple[Instance, Instance]] = []
    for instance in instances:
        digest = hash_instance(instance, identity_spec)
        if digest in first_by_hash:
            duplicates.append((instance, first_by_hash[digest]))
            continue
        first_by_hash[digest] = instance
        unique.append(instance)
    return unique, duplicates


def match(
    instances: Sequence[Instance],
    remote_records: Sequence[RemoteRecord],
    record_type: RecordType,
    identity_spec: Sequence[str],
) -> MatchResult:
    """
    Classify instances as existing (identity found remotely) or new.

    When two remote records share an identity hash the later one wins.
    """
    lookup: Dict[str, RemoteRecord] = {}
    for record in remote_records:
        digest = hash_record(record, record_type, identity_spec)
        if digest in lookup:
            log.warning(
                "Remote records share an identity; keeping the later one",
                extra={
                    "record_type": record_type.name,
                    "shadowed_id": lookup[digest].id,
                    "kept_id": record.id,
                },
            )
        lookup[digest] = record

    existing: List[Tuple[Instance, RemoteRecord]] = []
    new: List[Instance] = []
    for instance in instances:
        record = lookup.get(hash_instance(instance, identity_spec))
        if record is None:
            new.append(instance)
        else:
            existing.append((instance, record))

    log.debug(
        "Matched instances against remote records",
        extra={
            "record_type": record_type.name,
            "remote_records": len(remote_records),
            "existing": len(existing),
            "new": len(new),
        },
    )
    return MatchResult(existing, new)


__all__ = [
    "ABSENT",
    "MatchResult",
    "clone_without_nulls",
    "compute_identity_hash",
    "find_identity_collisions",
    "hash_instance",
    "hash_record",
    "identity_values",
    "match",
    "record_to_values",
]
