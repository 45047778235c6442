"""Operations: single-use units of fallible work."""

from __future__ import annotations

from dataclasses import dataclass
import functools
from typing import TYPE_CHECKING, Any

from errscope.errors import ConfigurationError, LifecycleError
from errscope.kinds import ErrorKind, classify, describe

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


@dataclass(frozen=True)
class Fault:
    """One failure, as handed to a handler's recovery logic."""

    kind: ErrorKind
    message: str
    error: BaseException
    operation: str
    #: False when the kind is UNCLASSIFIED or outside the operation's ``raises``.
    declared: bool


class Operation[T]:
    """A unit of work that produces a value or fails with a classified error.

    Operations are single-use: construct one right before handing it to
    ``run()``. Executing the same instance twice raises ``LifecycleError``.

    ``raises`` plays the role of a ``throws`` clause. When given, only the
    listed kinds are declared; a failure of any other kind can only be
    consumed by a wildcard handler. When omitted, every kind except
    ``UNCLASSIFIED`` counts as declared.

    Example:
        op = Operation(lambda: 10 / 2, name="divide")
        outcome = run(op)
    """

    __slots__ = ("_executed", "_fn", "name", "raises")

    def __init__(
        self,
        fn: Callable[[], T],
        *,
        name: str | None = None,
        raises: Iterable[ErrorKind] | None = None,
    ) -> None:
        if not callable(fn):
            raise ConfigurationError(
                f"Operation body must be callable, got {type(fn).__name__}",
                hint="Pass a zero-argument function or lambda.",
            )
        self._fn = fn
        self.name = name or getattr(fn, "__name__", None) or "operation"
        self.raises = _normalize_raises(raises)
        self._executed = False

    @property
    def executed(self) -> bool:
        return self._executed

    def execute(self) -> T:
        """Run the operation body. Valid exactly once."""
        if self._executed:
            raise LifecycleError(
                f"Operation {self.name!r} was already executed",
                hint="Construct a fresh Operation for every run().",
            )
        self._executed = True
        return self._fn()

    def declares(self, kind: ErrorKind) -> bool:
        """Return True when *kind* is part of this operation's declared failures."""
        if kind is ErrorKind.UNCLASSIFIED:
            return False
        if self.raises is None:
            return True
        return kind in self.raises

    def fault_from(self, exc: BaseException) -> Fault:
        """Build the Fault describing *exc* raised by this operation."""
        kind = classify(exc)
        return Fault(
            kind=kind,
            message=describe(exc),
            error=exc,
            operation=self.name,
            declared=self.declares(kind),
        )

    @classmethod
    def coerce(cls, target: Operation[Any] | Callable[[], Any]) -> Operation[Any]:
        """Return *target* as an Operation, wrapping plain callables."""
        if isinstance(target, Operation):
            return target
        if callable(target):
            return cls(target)
        raise ConfigurationError(
            f"Expected an Operation or callable, got {type(target).__name__}",
            hint="Wrap the work in Operation(fn) or a zero-argument lambda.",
        )

    def __repr__(self) -> str:
        raises = sorted(self.raises) if self.raises is not None else None
        return f"Operation(name={self.name!r}, raises={raises!r}, executed={self._executed})"


def _normalize_raises(
    raises: Iterable[ErrorKind] | None,
) -> frozenset[ErrorKind] | None:
    if raises is None:
        return None
    kinds = frozenset(raises)
    for kind in kinds:
        if not isinstance(kind, ErrorKind):
            raise ConfigurationError(
                f"raises entries must be ErrorKind members, got {kind!r}",
                hint="Use ErrorKind.INVALID_ARGUMENT, ErrorKind.DIVISION_BY_ZERO, ...",
            )
        if kind is ErrorKind.UNCLASSIFIED:
            raise ConfigurationError(
                "UNCLASSIFIED cannot be declared in raises",
                hint="Unclassified failures are undeclared by definition.",
            )
    return kinds


def operation(
    fn: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    raises: Iterable[ErrorKind] | None = None,
) -> Any:
    """Turn a function into a factory of single-use Operations.

    Calling the decorated function binds its arguments and returns a fresh
    Operation instead of executing the body.

    Example:
        @operation(raises=[ErrorKind.DIVISION_BY_ZERO])
        def divide(a: int, b: int) -> int:
            return a // b

        run(divide(10, 2))
    """
    declared = _normalize_raises(raises)

    def decorate(func: Callable[..., Any]) -> Callable[..., Operation[Any]]:
        op_name = name or func.__name__

        @functools.wraps(func)
        def factory(*args: Any, **kwargs: Any) -> Operation[Any]:
            return Operation(
                functools.partial(func, *args, **kwargs),
                name=op_name,
                raises=declared,
            )

        return factory

    if fn is not None:
        return decorate(fn)
    return decorate
