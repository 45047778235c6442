"""Handlers and handler selection.

Selection contract:
- An exact handler matches only a declared kind.
- The earliest exact match wins over any wildcard, whatever the declaration order.
- Without an exact match, the earliest wildcard handler runs.
- Without either, the failure propagates.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, NoReturn

from errscope.errors import ConfigurationError, PropagatedError
from errscope.kinds import ANY, ErrorKind, KindMatcher, is_wildcard

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from errscope.operation import Fault

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Handler:
    """Recovery logic bound to one ErrorKind or to the ``ANY`` wildcard.

    ``recover`` receives the Fault and returns the value recorded on the
    handled Outcome. Raising from ``recover`` turns the scope into a
    propagating one (see ``rethrow_as``).
    """

    kind: KindMatcher
    recover: Callable[[Fault], Any]
    name: str | None = None

    def __post_init__(self) -> None:
        if not (isinstance(self.kind, ErrorKind) or is_wildcard(self.kind)):
            raise ConfigurationError(
                f"Handler kind must be an ErrorKind or ANY, got {self.kind!r}",
                hint="Use Handler.on(ErrorKind.X, ...) or Handler.any(...).",
            )
        if self.kind is ErrorKind.UNCLASSIFIED:
            raise ConfigurationError(
                "UNCLASSIFIED failures can only be caught by the wildcard",
                hint="Use Handler.any(...) as the catch-all.",
            )
        if not callable(self.recover):
            raise ConfigurationError(
                f"Handler recover must be callable, got {type(self.recover).__name__}",
                hint="Use Handler.returning(kind, value) for a constant result.",
            )

    @property
    def is_wildcard(self) -> bool:
        return is_wildcard(self.kind)

    @property
    def label(self) -> str:
        return self.name or f"on[{self.kind}]"

    def matches(self, fault: Fault) -> bool:
        """Return True when this handler can consume *fault* as an exact match."""
        return not self.is_wildcard and fault.declared and self.kind == fault.kind

    @classmethod
    def on(
        cls,
        kind: ErrorKind,
        recover: Callable[[Fault], Any],
        *,
        name: str | None = None,
    ) -> Handler:
        return cls(kind, recover, name)

    @classmethod
    def any(cls, recover: Callable[[Fault], Any], *, name: str | None = None) -> Handler:
        return cls(ANY, recover, name)

    @classmethod
    def returning(
        cls, kind: KindMatcher, value: Any, *, name: str | None = None
    ) -> Handler:
        """Handler that recovers with a constant value."""
        return cls(kind, lambda _fault: value, name)


def validate_handlers(handlers: Iterable[Handler]) -> tuple[Handler, ...]:
    """Return handlers as a tuple, rejecting anything that is not a Handler."""
    checked = tuple(handlers)
    for i, handler in enumerate(checked):
        if not isinstance(handler, Handler):
            raise ConfigurationError(
                f"handlers[{i}] must be a Handler, got {type(handler).__name__}",
                hint="Build handlers with Handler.on(), Handler.any() or Handler.returning().",
            )
    return checked


def select_handler(handlers: tuple[Handler, ...], fault: Fault) -> Handler | None:
    """Pick the handler that consumes *fault*, or None when it must propagate."""
    for handler in handlers:
        if handler.matches(fault):
            logger.debug("Exact handler %s selected for %s", handler.label, fault.kind)
            return handler
    for handler in handlers:
        if handler.is_wildcard:
            logger.debug("Wildcard handler %s selected for %s", handler.label, fault.kind)
            return handler
    return None


def rethrow_as(
    kind: ErrorKind, message: str | None = None
) -> Callable[[Fault], NoReturn]:
    """Recovery that remaps the fault to *kind* and lets it ascend.

    The remap is explicit: the new PropagatedError chains the original error
    via ``__cause__`` and keeps the original message unless *message* is given.

    Example:
        Handler.on(ErrorKind.INVALID_ARGUMENT, rethrow_as(ErrorKind.UNCLASSIFIED))
    """
    if not isinstance(kind, ErrorKind):
        raise ConfigurationError(
            f"rethrow_as kind must be an ErrorKind, got {kind!r}",
            hint="Remap to a concrete kind such as ErrorKind.UNCLASSIFIED.",
        )

    def _rethrow(fault: Fault) -> NoReturn:
        raise PropagatedError(
            kind,
            message if message is not None else fault.message,
            origin=fault.operation,
        ) from fault.error

    return _rethrow
