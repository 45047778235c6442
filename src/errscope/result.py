"""Outcome records and the Success/Failure result variants.

``run()`` returns an Outcome or raises PropagatedError. ``run_result()``
returns ``Success[Outcome] | Failure[PropagatedError]`` so the error channel
is part of the return type and callers have to branch on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from errscope.operation import Fault
    from errscope.scope import ScopeState

OutcomeStatus = Literal["succeeded", "handled"]


@dataclass(frozen=True)
class Outcome[T]:
    """Completed run: the operation succeeded or a handler consumed its failure."""

    status: OutcomeStatus
    #: The operation's result, or the handler's return value when handled.
    value: T
    operation: str
    fault: Fault | None = None
    handler: str | None = None
    path: tuple[str, ...] = ()
    history: tuple[ScopeState, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    @property
    def handled(self) -> bool:
        return self.status == "handled"


@dataclass(frozen=True, slots=True)
class Success[T]:
    """A completed run."""

    value: T
    ok: Literal[True] = True


@dataclass(frozen=True, slots=True)
class Failure[E: Exception]:
    """A run whose failure propagated out of its scope."""

    error: E
    ok: Literal[False] = False


type Result[T, E: Exception] = Success[T] | Failure[E]
