"""Exception hierarchy for errscope."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from errscope.kinds import ErrorKind


class ErrscopeError(Exception):
    """Base exception for all errscope errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ErrscopeError):
    """Configuration or handler declaration is invalid."""


class LifecycleError(ErrscopeError):
    """An operation was used outside its construct-execute-discard lifecycle."""


class InternalError(ErrscopeError):
    """An errscope internal error (bug) or invariant violation."""


class OperationError(ErrscopeError):
    """Raised by operation code to fail with an explicit kind.

    Plain Python exceptions are classified by type; raise this when the kind
    cannot be inferred (e.g. a number-format failure surfacing as ValueError).
    """

    def __init__(
        self, kind: ErrorKind, message: str, *, hint: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.kind = kind
        self.message = message


class PropagatedError(ErrscopeError):
    """A failure that ascended past its scope without a matching handler.

    ``origin`` names the operation (or handler) the failure came from and
    ``path`` is the scope path active when it first left a scope. ``history``
    is the state sequence of that same scope, ending in ``Done``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        hint: str | None = None,
        origin: str | None = None,
        path: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message, hint=hint)
        self.kind = kind
        self.message = message
        self.origin = origin
        self.path = path
        self.history: tuple[str, ...] = ()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind!s}, message={self.message!r}, "
            f"origin={self.origin!r})"
        )


class CleanupError(PropagatedError):
    """Cleanup failed while no other failure was propagating."""


def walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
