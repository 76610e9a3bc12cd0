from __future__ import annotations

import logging

from bulk_reconcile.domain.changes import ModificationChange
from bulk_reconcile.domain.models import OperationResult
from bulk_reconcile.reconcile.results import (
    UNKNOWN_ERROR,
    action_result,
    aggregate_add,
    aggregate_modify,
    aggregate_remove,
    fatal_outcome,
    pair_results,
)

OK = OperationResult(success=True, id="001")


def _failed(*errors: str) -> OperationResult:
    return OperationResult(success=False, errors=list(errors))


def test_action_result_separates_successes_and_formats_errors(make_instance):
    good = make_instance("good", Name="Good")
    bad = make_instance("bad", Name="Bad")

    result = action_result(pair_results([good, bad], [OK, _failed("FIELD_INVALID", "DUPLICATE")]))

    assert result.success_instances == [good]
    assert result.error_messages == ["bad:\n\tFIELD_INVALID\n\tDUPLICATE"]


def test_action_result_reports_failures_without_error_text(make_instance):
    bad = make_instance("bad", Name="Bad")

    result = action_result(pair_results([bad], [_failed()]))

    assert result.error_messages == [f"bad:\n\t{UNKNOWN_ERROR}"]


def test_action_result_logs_failed_instance_values(make_instance, caplog):
    bad = make_instance("bad", Name="Bad")

    with caplog.at_level(logging.ERROR, logger="bulk_reconcile.reconcile.results"):
        action_result(pair_results([bad], [_failed("FIELD_INVALID")]))

    assert "Account.bad had deploy errors" in caplog.text
    assert '"Name": "Bad"' in caplog.text


def test_aggregate_add_reports_upserts_as_modify(make_instance):
    inserted = make_instance("new", identifier="NEW1", Name="New")
    upserted = make_instance("old", identifier="001", Name="Old")

    outcome = aggregate_add(
        pair_results([inserted], [OperationResult(success=True, id="NEW1")]),
        pair_results([upserted], [OK]),
        ["dup:\n\tduplicate"],
    )

    assert [(change.action, change.after.name) for change in outcome.applied_changes] == [
        ("add", "new"),
        ("modify", "old"),
    ]
    assert outcome.applied_changes[1].after.identifier == "001"
    assert outcome.errors == ["dup:\n\tduplicate"]


def test_aggregate_remove_reports_before_side(make_instance):
    gone = make_instance("gone", identifier="001")
    kept = make_instance("kept", identifier="002")

    outcome = aggregate_remove(pair_results([gone, kept], [OK, _failed("ENTITY_IS_LOCKED")]))

    assert [(change.action, change.before.name) for change in outcome.applied_changes] == [
        ("remove", "gone")
    ]
    assert outcome.errors == ["kept:\n\tENTITY_IS_LOCKED"]


def test_aggregate_modify_keeps_before_and_after(make_instance):
    before = make_instance("acme", identifier="001", Name="Acme")
    after = make_instance("acme", identifier="001", Name="Acme Inc")
    change = ModificationChange(before=before, after=after)

    outcome = aggregate_modify([change], pair_results([after], [OK]), ["rejected"])

    assert len(outcome.applied_changes) == 1
    applied = outcome.applied_changes[0]
    assert applied.action == "modify"
    assert applied.before is before
    assert applied.after is after
    assert outcome.errors == ["rejected"]


def test_fatal_outcome_has_one_error_and_no_changes():
    outcome = fatal_outcome(RuntimeError("network down"))

    assert outcome.applied_changes == []
    assert outcome.errors == ["network down"]
    assert fatal_outcome(RuntimeError()).errors == ["RuntimeError"]
