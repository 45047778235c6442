"""Serializable reports of run outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, field_serializer

if TYPE_CHECKING:
    from errscope.errors import PropagatedError
    from errscope.result import Outcome


class OutcomeReport(BaseModel):
    """One completed or propagated run, flattened for logs and JSON output."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: Literal["succeeded", "handled", "propagated"]
    operation: str | None = None
    value: Any = None
    kind: str | None = None
    message: str | None = None
    handler: str | None = None
    path: tuple[str, ...] = ()
    states: tuple[str, ...] = ()
    #: Lines emitted by the example while it ran (driver only).
    events: tuple[str, ...] = ()

    @field_serializer("value")
    def _serialize_value(self, value: Any) -> Any:
        if value is None or isinstance(value, str | int | float | bool):
            return value
        return repr(value)

    @classmethod
    def from_outcome(
        cls, name: str, outcome: Outcome[Any], *, events: tuple[str, ...] = ()
    ) -> OutcomeReport:
        fault = outcome.fault
        return cls(
            name=name,
            status=outcome.status,
            operation=outcome.operation,
            value=outcome.value,
            kind=str(fault.kind) if fault else None,
            message=fault.message if fault else None,
            handler=outcome.handler,
            path=outcome.path,
            states=tuple(str(s) for s in outcome.history),
            events=events,
        )

    @classmethod
    def from_error(
        cls, name: str, error: PropagatedError, *, events: tuple[str, ...] = ()
    ) -> OutcomeReport:
        return cls(
            name=name,
            status="propagated",
            operation=error.origin,
            kind=str(error.kind),
            message=error.message,
            path=error.path,
            states=tuple(str(s) for s in error.history),
            events=events,
        )

    def summary(self) -> str:
        """One human-readable line."""
        if self.status == "succeeded":
            return f"{self.name}: succeeded -> {self.value!r}"
        if self.status == "handled":
            return f"{self.name}: handled {self.kind} by {self.handler} -> {self.value!r}"
        return f"{self.name}: propagated {self.kind}: {self.message}"
