"""Error propagation core: run an operation inside a guarded scope.

One ``run()`` call:
1. validates its inputs (before any scope is entered),
2. executes the operation once,
3. routes a failure to the earliest exact handler, else the earliest wildcard,
4. lets unmatched failures ascend as PropagatedError,
5. runs cleanup exactly once on every exit path.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from errscope.config import Config
from errscope.errors import (
    ConfigurationError,
    ErrscopeError,
    LifecycleError,
    OperationError,
    PropagatedError,
)
from errscope.handlers import Handler, select_handler, validate_handlers
from errscope.kinds import classify, describe
from errscope.operation import Operation
from errscope.result import Failure, Outcome, Result, Success
from errscope.scope import Scope, ScopeGuard, ScopeState
from errscope.telemetry import TelemetryContext

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from errscope.operation import Fault
    from errscope.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)


def run(
    operation: Operation[Any] | Callable[[], Any],
    handlers: Iterable[Handler] = (),
    cleanup: Callable[[], object] | None = None,
    *,
    config: Config | None = None,
    telemetry: TelemetryContextProtocol | None = None,
) -> Outcome[Any]:
    """Run one operation with ordered handlers and a guaranteed cleanup.

    Args:
        operation: A fresh Operation, or a zero-argument callable to wrap.
        handlers: Tried in declaration order; exact kinds beat wildcards.
        cleanup: Runs exactly once before this call returns or raises.
        config: Cleanup-failure policy and telemetry switch.
        telemetry: Explicit telemetry context; overrides ``config.telemetry``.

    Returns:
        Outcome with status ``"succeeded"`` or ``"handled"``.

    Raises:
        PropagatedError: No handler matched, or a handler raised/rethrew.
        ConfigurationError: Invalid handlers or cleanup (cleanup does not run).
        LifecycleError: The operation was already executed (cleanup does not run).

    Example:
        outcome = run(
            divide(10, 0),
            [Handler.returning(ErrorKind.DIVISION_BY_ZERO, "Cannot divide by zero!")],
            cleanup=lambda: print("cleanup"),
        )
        assert outcome.value == "Cannot divide by zero!"
    """
    op = Operation.coerce(operation)
    checked = validate_handlers(handlers)
    if cleanup is not None and not callable(cleanup):
        raise ConfigurationError(
            f"cleanup must be callable, got {type(cleanup).__name__}",
            hint="Pass a zero-argument function, or None.",
        )
    if op.executed:
        raise LifecycleError(
            f"Operation {op.name!r} was already executed",
            hint="Construct a fresh Operation for every run().",
        )

    cfg = config or Config()
    tele = (
        telemetry
        if telemetry is not None
        else TelemetryContext(enabled=bool(cfg.telemetry))
    )

    scope = Scope(op.name)
    handler_label: str | None = None
    fault: Fault | None = None
    value: Any = None

    with scope, tele.time(".".join(scope.path), depth=scope.depth):
        logger.debug("Running %s (depth %d)", op.name, scope.depth)
        try:
            with ScopeGuard(scope, cleanup, policy=cfg.cleanup_errors or "raise"):
                try:
                    value = op.execute()
                except Exception as exc:
                    if _is_usage_error(exc):
                        scope.advance(ScopeState.PROPAGATING)
                        raise
                    fault = op.fault_from(exc)
                    handler = select_handler(checked, fault)
                    if handler is None:
                        scope.advance(ScopeState.PROPAGATING)
                        logger.debug(
                            "No handler for %s in %s; propagating", fault.kind, op.name
                        )
                        if isinstance(exc, PropagatedError):
                            _stamp(exc, scope)
                            raise
                        raise PropagatedError(
                            fault.kind,
                            fault.message,
                            origin=op.name,
                            path=scope.path,
                        ) from exc
                    handler_label = handler.label
                    value = _recover(handler, fault, scope)
                    scope.advance(ScopeState.HANDLED)
                else:
                    scope.advance(ScopeState.SUCCEEDED)
        except PropagatedError as err:
            if not err.history:
                err.history = scope.history
            tele.count("outcome.propagated", kind=str(err.kind))
            raise

    status = "handled" if fault is not None else "succeeded"
    tele.count(f"outcome.{status}")
    return Outcome(
        status=status,
        value=value,
        operation=op.name,
        fault=fault,
        handler=handler_label,
        path=scope.path,
        history=scope.history,
    )


def run_result(
    operation: Operation[Any] | Callable[[], Any],
    handlers: Iterable[Handler] = (),
    cleanup: Callable[[], object] | None = None,
    *,
    config: Config | None = None,
    telemetry: TelemetryContextProtocol | None = None,
) -> Result[Outcome[Any], PropagatedError]:
    """Like ``run()``, but return an unhandled failure instead of raising it.

    Input validation errors (ConfigurationError, LifecycleError) still raise.

    Example:
        result = run_result(divide(10, 0))
        if not result.ok:
            print(result.error.kind)
    """
    try:
        return Success(
            run(operation, handlers, cleanup, config=config, telemetry=telemetry)
        )
    except PropagatedError as err:
        return Failure(err)


def _recover(handler: Handler, fault: Fault, scope: Scope) -> Any:
    """Invoke a handler; anything it raises leaves the scope as PropagatedError."""
    try:
        return handler.recover(fault)
    except PropagatedError as err:
        scope.advance(ScopeState.PROPAGATING)
        _stamp(err, scope)
        raise
    except Exception as err:
        scope.advance(ScopeState.PROPAGATING)
        raise PropagatedError(
            classify(err),
            describe(err),
            origin=handler.label,
            path=scope.path,
        ) from err


def _stamp(err: PropagatedError, scope: Scope) -> None:
    # The first scope an error leaves is where it is reported from.
    if not err.path:
        err.path = scope.path


def _is_usage_error(exc: Exception) -> bool:
    # Misuse of errscope itself (reused operation, bad declaration, broken
    # invariant) is never routed to handlers, so a wildcard cannot swallow it.
    return isinstance(exc, ErrscopeError) and not isinstance(
        exc, OperationError | PropagatedError
    )
