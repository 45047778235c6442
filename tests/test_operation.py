from __future__ import annotations

import pytest

from errscope import ConfigurationError, ErrorKind, LifecycleError, Operation, operation, run

pytestmark = pytest.mark.unit


def test_operation_executes_only_once() -> None:
    op = Operation(lambda: 1, name="one")

    assert op.execute() == 1
    assert op.executed
    with pytest.raises(LifecycleError, match="already executed"):
        op.execute()


def test_reused_operation_is_rejected_before_cleanup(log) -> None:
    op = Operation(lambda: 1, name="one")
    run(op)

    with pytest.raises(LifecycleError) as exc:
        run(op, cleanup=log.cleanup())

    assert exc.value.hint is not None
    assert log.events == []


def test_decorator_builds_fresh_operations() -> None:
    @operation(raises=[ErrorKind.DIVISION_BY_ZERO])
    def halve(n: int) -> int:
        return n // 2

    first, second = halve(8), halve(8)

    assert first is not second
    assert first.name == "halve"
    assert first.raises == frozenset({ErrorKind.DIVISION_BY_ZERO})
    assert run(first).value == 4
    assert run(second).value == 4


def test_bare_decorator_declares_every_classified_kind() -> None:
    @operation
    def noop() -> None:
        return None

    op = noop()
    assert op.raises is None
    assert op.declares(ErrorKind.RESOURCE_NOT_FOUND)
    assert not op.declares(ErrorKind.UNCLASSIFIED)


def test_explicit_raises_limits_declarations() -> None:
    op = Operation(lambda: None, raises=[ErrorKind.INVALID_ARGUMENT])

    assert op.declares(ErrorKind.INVALID_ARGUMENT)
    assert not op.declares(ErrorKind.DIVISION_BY_ZERO)


def test_fault_from_classifies_and_flags_declaration() -> None:
    op = Operation(lambda: None, name="parse", raises=[ErrorKind.NUMBER_FORMAT])

    fault = op.fault_from(ValueError("bad literal"))

    assert fault.kind is ErrorKind.INVALID_ARGUMENT
    assert fault.message == "bad literal"
    assert fault.operation == "parse"
    assert fault.declared is False


def test_callables_are_coerced_and_named() -> None:
    def compute() -> int:
        return 3

    op = Operation.coerce(compute)
    assert isinstance(op, Operation)
    assert op.name == "compute"


@pytest.mark.parametrize(
    "build",
    [
        lambda: Operation("not callable"),  # type: ignore[arg-type]
        lambda: Operation.coerce(42),  # type: ignore[arg-type]
        lambda: Operation(lambda: None, raises=[ErrorKind.UNCLASSIFIED]),
        lambda: Operation(lambda: None, raises=["InvalidArgument"]),  # type: ignore[list-item]
    ],
    ids=["body", "coerce", "unclassified", "string-kind"],
)
def test_invalid_operations_raise_configuration_error(build) -> None:
    with pytest.raises(ConfigurationError):
        build()
