"""Example driver: the classic try/catch/throw/finally lessons on top of ``run()``.

Each example receives an ``emit`` callback for the lines a learner would see
printed, and returns the Outcome of its last run (or lets a PropagatedError
escape).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from errscope.core import run
from errscope.errors import OperationError, PropagatedError
from errscope.handlers import Handler, rethrow_as
from errscope.kinds import ANY, ErrorKind
from errscope.operation import Operation, operation
from errscope.report import OutcomeReport

if TYPE_CHECKING:
    from errscope.operation import Fault
    from errscope.result import Outcome

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]


# --- Sample operations -------------------------------------------------------


@operation(raises=[ErrorKind.DIVISION_BY_ZERO])
def divide(a: int, b: int) -> int:
    if b == 0:
        raise OperationError(ErrorKind.DIVISION_BY_ZERO, "Cannot divide by zero!")
    return a // b


@operation(raises=[ErrorKind.INVALID_ARGUMENT])
def validate_age(age: int) -> int:
    if age < 0 or age > 120:
        raise OperationError(
            ErrorKind.INVALID_ARGUMENT, "Age must be between 0 and 120!"
        )
    return age


@operation(raises=[ErrorKind.RESOURCE_NOT_FOUND])
def read_resource(filename: str) -> str:
    del filename
    # Simulated: the lesson is about the cleanup path, not the filesystem.
    raise FileNotFoundError("File not found!")


@operation(raises=[ErrorKind.NUMBER_FORMAT, ErrorKind.DIVISION_BY_ZERO])
def process_data(data: str) -> int:
    try:
        number = int(data)
    except ValueError as e:
        raise OperationError(
            ErrorKind.NUMBER_FORMAT, f'For input string: "{data}"'
        ) from e
    if number == 0:
        raise OperationError(ErrorKind.DIVISION_BY_ZERO, "/ by zero")
    return 100 // number


@operation
def element_at(items: list[int], index: int) -> int:
    return items[index]


# --- Examples ----------------------------------------------------------------


def _caught(prefix: str) -> Callable[[Fault], str]:
    return lambda fault: f"{prefix}{fault.message}"


def division_example(emit: Emit) -> Outcome[Any]:
    first = run(divide(10, 2))
    emit(f"Result: {first.value}")
    handled = run(
        divide(10, 0),
        [Handler.on(ErrorKind.DIVISION_BY_ZERO, _caught("Caught: "))],
    )
    emit(str(handled.value))
    return handled


def validation_example(emit: Emit) -> Outcome[Any]:
    first = run(validate_age(25))
    emit(f"Valid age: {first.value}")
    handled = run(
        validate_age(150),
        [Handler.on(ErrorKind.INVALID_ARGUMENT, _caught("Caught: "))],
    )
    emit(str(handled.value))
    return handled


def cleanup_example(emit: Emit) -> Outcome[Any]:
    filename = "test.txt"
    emit(f"Attempting to read file: {filename}")

    def caught(fault: Fault) -> str:
        emit(f"Caught exception: {fault.message}")
        return fault.message

    return run(
        read_resource(filename),
        [Handler.on(ErrorKind.RESOURCE_NOT_FOUND, caught)],
        cleanup=lambda: emit("Finally block: Cleanup code executed"),
    )


def multiple_handlers_example(emit: Emit) -> Outcome[Any]:
    handlers = [
        Handler.on(ErrorKind.NUMBER_FORMAT, _caught("Error: Invalid number format - ")),
        Handler.on(ErrorKind.DIVISION_BY_ZERO, _caught("Error: Arithmetic error - ")),
        Handler.any(_caught("Error: Unexpected error - ")),
    ]
    outcomes = [run(process_data(data), handlers) for data in ("abc", "0", "25")]
    for outcome in outcomes:
        emit(str(outcome.value) if outcome.handled else f"Result: {outcome.value}")
    return outcomes[-1]


def nested_example(emit: Emit) -> Outcome[Any]:
    remap = rethrow_as(ErrorKind.UNCLASSIFIED, "Rethrowing as unclassified error")

    def inner_catch(fault: Fault) -> Any:
        emit("Inner catch: Array index out of bounds!")
        return remap(fault)

    def inner() -> Any:
        return run(
            element_at([1, 2, 3], 5),
            [Handler.on(ErrorKind.INDEX_OUT_OF_BOUNDS, inner_catch)],
        )

    outcome = run(
        Operation(inner, name="outer"),
        [Handler(ANY, _caught("Outer catch: "))],
    )
    emit(str(outcome.value))
    return outcome


def return_then_cleanup_example(emit: Emit) -> Outcome[Any]:
    def body() -> str:
        emit("In try block")
        return "Try block return"

    outcome = run(
        Operation(body, name="try_block"),
        cleanup=lambda: emit("Cleanup always runs (even with return)"),
    )
    emit(f"Returned: {outcome.value}")
    return outcome


# --- Registry ----------------------------------------------------------------


@dataclass(frozen=True)
class Example:
    name: str
    title: str
    body: Callable[[Emit], Outcome[Any]]


EXAMPLES: dict[str, Example] = {
    ex.name: ex
    for ex in (
        Example("division", "Division with a declared failure kind", division_example),
        Example("validation", "Argument validation with throw", validation_example),
        Example("cleanup", "Handled failure with cleanup", cleanup_example),
        Example("multiple", "Multiple handlers and a wildcard", multiple_handlers_example),
        Example("nested", "Nested scopes with kind remapping", nested_example),
        Example("return", "Cleanup after a return value", return_then_cleanup_example),
    )
}


def run_example(example: Example) -> OutcomeReport:
    """Run one example, capturing its emitted lines into the report."""
    events: list[str] = []

    def emit(line: str) -> None:
        logger.debug("[%s] %s", example.name, line)
        events.append(line)

    try:
        outcome = example.body(emit)
    except PropagatedError as err:
        return OutcomeReport.from_error(example.name, err, events=tuple(events))
    return OutcomeReport.from_outcome(example.name, outcome, events=tuple(events))
