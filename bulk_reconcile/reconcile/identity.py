"""
Identity field resolution.

Turns the configured identity field names of a record type into the flat list
of remote columns a lookup query has to select and filter on. Compound fields
expand into one column per sub-field, named the way the remote store names
them (first letter upper-cased).
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence

from bulk_reconcile.domain.data_management import DataManagement
from bulk_reconcile.domain.models import CompoundField, PrimitiveField, PrimitiveType, RecordType
from bulk_reconcile.errors import SchemaError


class IdentityColumn(NamedTuple):
    source_field: str
    remote_column: str
    is_compound_member: bool
    descriptor: PrimitiveField
    sub_field: Optional[str] = None


class IdFieldsResolution(NamedTuple):
    id_fields: List[str]
    invalid_fields: List[str]


def capitalize_first_letter(name: str) -> str:
    return name[:1].upper() + name[1:]


def _id_column(record_type: RecordType) -> IdentityColumn:
    descriptor = PrimitiveField(name=record_type.id_field, primitive=PrimitiveType.STRING)
    return IdentityColumn(record_type.id_field, record_type.id_field, False, descriptor)


def expand(record_type: RecordType, identity_field_names: Sequence[str]) -> List[IdentityColumn]:
    """
    Expand identity field names into remote columns, id column first.

    Raises
    ------
    SchemaError
        If a name is not a field of the record type.
    """
    columns: List[IdentityColumn] = []
    if record_type.id_field not in identity_field_names:
        columns.append(_id_column(record_type))

    for name in identity_field_names:
        if name == record_type.id_field:
            columns.append(_id_column(record_type))
            continue
        field_def = record_type.field(name)
        if field_def is None:
            raise SchemaError(f"Identity field '{name}' does not exist on type {record_type.name}")
        if isinstance(field_def, CompoundField):
            columns.extend(
                IdentityColumn(
                    name,
                    capitalize_first_letter(sub.name),
                    True,
                    sub,
                    sub.name,
                )
                for sub in field_def.sub_fields
            )
        else:
            columns.append(IdentityColumn(name, field_def.remote_name, False, field_def))
    return columns


def resolve_id_fields(
    record_type: RecordType, data_management: DataManagement
) -> IdFieldsResolution:
    """
    Pick the identity field names configured for a record type.

    Unknown names are reported back instead of raised so the caller can build a
    single error listing all of them.
    """
    names = data_management.id_fields_for(record_type.name)
    invalid = [
        name
        for name in names
        if name != record_type.id_field and record_type.field(name) is None
    ]
    valid = [name for name in names if name not in invalid]
    return IdFieldsResolution(valid, invalid)


__all__ = [
    "IdFieldsResolution",
    "IdentityColumn",
    "capitalize_first_letter",
    "expand",
    "resolve_id_fields",
]
