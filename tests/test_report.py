from __future__ import annotations

import json

import pytest

from errscope import ErrorKind, Handler, Operation, OutcomeReport, PropagatedError, run

pytestmark = pytest.mark.unit


def test_report_from_handled_outcome() -> None:
    outcome = run(
        Operation(lambda: 1 / 0, name="divide"),
        [Handler.on(ErrorKind.DIVISION_BY_ZERO, lambda f: "Cannot divide by zero!")],
    )

    report = OutcomeReport.from_outcome("division", outcome)

    assert report.status == "handled"
    assert report.kind == "DivisionByZero"
    assert report.handler == "on[DivisionByZero]"
    assert report.states == ("Pending", "Handled", "CleanupRan", "Done")
    assert report.summary() == (
        "division: handled DivisionByZero by on[DivisionByZero] -> 'Cannot divide by zero!'"
    )


def test_report_from_propagated_error_serializes_to_json() -> None:
    err = PropagatedError(
        ErrorKind.UNCLASSIFIED, "wrapped", origin="validate_age", path=("outer", "validate_age")
    )

    payload = json.loads(OutcomeReport.from_error("nested", err, events=("a",)).model_dump_json())

    assert payload["status"] == "propagated"
    assert payload["kind"] == "Unclassified"
    assert payload["operation"] == "validate_age"
    assert payload["path"] == ["outer", "validate_age"]
    assert payload["events"] == ["a"]


def test_report_from_error_carries_scope_states() -> None:
    with pytest.raises(PropagatedError) as exc:
        run(lambda: 1 / 0)

    report = OutcomeReport.from_error("broken", exc.value)

    assert report.states == ("Pending", "Propagating", "CleanupRan", "Done")


def test_non_scalar_values_are_serialized_as_repr() -> None:
    outcome = run(Operation(lambda: {"a": 1}, name="mapping"))

    dumped = OutcomeReport.from_outcome("m", outcome).model_dump()

    assert dumped["value"] == "{'a': 1}"
    assert OutcomeReport.from_outcome("m", outcome).summary() == "m: succeeded -> {'a': 1}"
