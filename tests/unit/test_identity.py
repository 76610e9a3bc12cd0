from __future__ import annotations

import pytest

from bulk_reconcile.domain.data_management import DataManagement, IdFieldsOverride
from bulk_reconcile.domain.models import RecordType
from bulk_reconcile.errors import SchemaError
from bulk_reconcile.reconcile.identity import (
    capitalize_first_letter,
    expand,
    resolve_id_fields,
)


def test_capitalize_first_letter_only_touches_first_character():
    assert capitalize_first_letter("street") == "Street"
    assert capitalize_first_letter("postalCode") == "PostalCode"
    assert capitalize_first_letter("Already") == "Already"
    assert capitalize_first_letter("") == ""


def test_expand_prepends_id_column_and_uses_external_names(account_type: RecordType):
    columns = expand(account_type, ["external", "employees"])

    assert [column.remote_column for column in columns] == [
        "Id",
        "External__c",
        "NumberOfEmployees",
    ]
    assert [column.source_field for column in columns] == ["Id", "external", "employees"]
    assert not any(column.is_compound_member for column in columns)


def test_expand_compound_field_yields_one_column_per_sub_field(account_type: RecordType):
    columns = expand(account_type, ["Name", "address"])

    assert [column.remote_column for column in columns] == ["Id", "Name", "Street", "City"]
    compound = [column for column in columns if column.is_compound_member]
    assert [(column.source_field, column.sub_field) for column in compound] == [
        ("address", "street"),
        ("address", "city"),
    ]


def test_expand_does_not_duplicate_id_column_when_it_is_an_identity_field(
    account_type: RecordType,
):
    columns = expand(account_type, ["Name", "Id"])

    assert [column.remote_column for column in columns] == ["Name", "Id"]


def test_expand_unknown_field_raises_schema_error(account_type: RecordType):
    with pytest.raises(SchemaError, match="missing"):
        expand(account_type, ["Name", "missing"])


def test_resolve_id_fields_reports_invalid_names(account_type: RecordType):
    data_management = DataManagement(
        include_objects=["Account"], default_id_fields=["Name", "Nope", "Id"]
    )

    resolution = resolve_id_fields(account_type, data_management)

    assert resolution.id_fields == ["Name", "Id"]
    assert resolution.invalid_fields == ["Nope"]


def test_resolve_id_fields_prefers_first_matching_override(account_type: RecordType):
    data_management = DataManagement(
        include_objects=[".*"],
        default_id_fields=["Name"],
        id_field_overrides=[
            IdFieldsOverride(object_pattern="^Contact$", id_fields=["Email"]),
            IdFieldsOverride(object_pattern="^Acc", id_fields=["external"]),
            IdFieldsOverride(object_pattern="Account", id_fields=["employees"]),
        ],
    )

    resolution = resolve_id_fields(account_type, data_management)

    assert resolution.id_fields == ["external"]
    assert resolution.invalid_fields == []
