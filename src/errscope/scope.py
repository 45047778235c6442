"""Per-run scope: state machine, nesting path and the cleanup guard.

State machine for one ``run()`` invocation::

    Pending -> {Succeeded | Handled | Propagating} -> CleanupRan -> Done

``CleanupRan`` is entered from every outcome, also when no cleanup was
given, and ``Done`` is terminal.
"""

from __future__ import annotations

from contextvars import ContextVar
import enum
import logging
from types import TracebackType
from typing import TYPE_CHECKING, Literal, Self

from errscope.errors import CleanupError, InternalError
from errscope.kinds import classify, describe

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_scope_path_var: ContextVar[tuple[str, ...]] = ContextVar("scope_path", default=())

CleanupErrorPolicy = Literal["raise", "log"]


class ScopeState(enum.StrEnum):
    PENDING = "Pending"
    SUCCEEDED = "Succeeded"
    HANDLED = "Handled"
    PROPAGATING = "Propagating"
    CLEANUP_RAN = "CleanupRan"
    DONE = "Done"


_TRANSITIONS: dict[ScopeState, frozenset[ScopeState]] = {
    ScopeState.PENDING: frozenset(
        {ScopeState.SUCCEEDED, ScopeState.HANDLED, ScopeState.PROPAGATING}
    ),
    ScopeState.SUCCEEDED: frozenset({ScopeState.CLEANUP_RAN}),
    ScopeState.HANDLED: frozenset({ScopeState.CLEANUP_RAN}),
    ScopeState.PROPAGATING: frozenset({ScopeState.CLEANUP_RAN}),
    ScopeState.CLEANUP_RAN: frozenset({ScopeState.DONE}),
    ScopeState.DONE: frozenset(),
}


def current_path() -> tuple[str, ...]:
    """Return the names of the scopes active in this execution context."""
    return _scope_path_var.get()


class Scope:
    """Tracks one run's state and its position in the nesting path."""

    __slots__ = ("_history", "_token", "name", "path")

    def __init__(self, name: str) -> None:
        self.name = name
        self.path: tuple[str, ...] = (*current_path(), name)
        self._history: list[ScopeState] = [ScopeState.PENDING]
        self._token = None

    @property
    def state(self) -> ScopeState:
        return self._history[-1]

    @property
    def history(self) -> tuple[ScopeState, ...]:
        return tuple(self._history)

    @property
    def depth(self) -> int:
        return len(self.path) - 1

    def advance(self, state: ScopeState) -> None:
        """Move to *state*, rejecting transitions the state machine forbids."""
        if state not in _TRANSITIONS[self.state]:
            raise InternalError(
                f"Illegal scope transition {self.state} -> {state} in {self.name!r}"
            )
        self._history.append(state)
        logger.debug("Scope %s: %s", ".".join(self.path), state)

    def __enter__(self) -> Self:
        self._token = _scope_path_var.set(self.path)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _scope_path_var.reset(self._token)
            self._token = None


class ScopeGuard:
    """Runs a cleanup action exactly once when the guarded block exits.

    Covers every exit path: normal completion, a handled failure, and a
    propagating exception. Moves the scope through ``CleanupRan`` and ``Done``.

    A cleanup failure never masks an exception already in flight: it is
    logged and attached to that exception as a note. With nothing in flight,
    ``policy="raise"`` raises CleanupError and ``policy="log"`` only logs.
    """

    __slots__ = ("_cleanup", "_ran", "policy", "scope")

    def __init__(
        self,
        scope: Scope,
        cleanup: Callable[[], object] | None,
        *,
        policy: CleanupErrorPolicy = "raise",
    ) -> None:
        self.scope = scope
        self._cleanup = cleanup
        self._ran = False
        self.policy = policy

    @property
    def ran(self) -> bool:
        return self._ran

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._ran:
            return
        self._ran = True

        if exc is not None and self.scope.state is ScopeState.PENDING:
            # Something escaped before the core could classify the outcome.
            self.scope.advance(ScopeState.PROPAGATING)

        cleanup_exc: Exception | None = None
        try:
            if self._cleanup is not None:
                try:
                    self._cleanup()
                except Exception as e:
                    cleanup_exc = e
        finally:
            # Interrupts raised by cleanup still leave the scope finished.
            self.scope.advance(ScopeState.CLEANUP_RAN)
            self.scope.advance(ScopeState.DONE)

        if cleanup_exc is None:
            return
        if exc is not None:
            logger.warning(
                "Cleanup for %r failed while an error was propagating: %s",
                self.scope.name,
                cleanup_exc,
            )
            exc.add_note(f"cleanup for {self.scope.name!r} also failed: {cleanup_exc!r}")
            return
        if self.policy == "log":
            logger.warning("Cleanup for %r failed: %s", self.scope.name, cleanup_exc)
            return
        raise CleanupError(
            classify(cleanup_exc),
            describe(cleanup_exc),
            origin=self.scope.name,
            path=self.scope.path,
            hint="Set cleanup_errors='log' to keep the outcome when cleanup fails.",
        ) from cleanup_exc
