"""Error kinds: the flat failure taxonomy plus the ``ANY`` wildcard.

Kinds form a closed enumeration with no hierarchy. ``UNCLASSIFIED`` is the
fallback for failures that cannot be mapped to a more specific kind; it is
never matched by an exact handler, only by ``ANY``.
"""

from __future__ import annotations

import enum
from typing import Final


class ErrorKind(enum.StrEnum):
    """Category tag for a failure."""

    INVALID_ARGUMENT = "InvalidArgument"
    DIVISION_BY_ZERO = "DivisionByZero"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    NUMBER_FORMAT = "NumberFormat"
    INDEX_OUT_OF_BOUNDS = "IndexOutOfBounds"
    UNCLASSIFIED = "Unclassified"


class _Wildcard:
    """Sentinel matching every kind. Use the module-level ``ANY``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ANY"


ANY: Final = _Wildcard()

type KindMatcher = ErrorKind | _Wildcard

# Looked up along the exception's MRO, so subclasses inherit their base's kind.
# Order within the MRO decides: FileNotFoundError is found before OSError.
_EXCEPTION_KINDS: dict[type[BaseException], ErrorKind] = {
    ZeroDivisionError: ErrorKind.DIVISION_BY_ZERO,
    FileNotFoundError: ErrorKind.RESOURCE_NOT_FOUND,
    KeyError: ErrorKind.RESOURCE_NOT_FOUND,
    IndexError: ErrorKind.INDEX_OUT_OF_BOUNDS,
    ValueError: ErrorKind.INVALID_ARGUMENT,
    TypeError: ErrorKind.INVALID_ARGUMENT,
}


def is_wildcard(matcher: object) -> bool:
    """Return True when *matcher* is the ``ANY`` sentinel."""
    return matcher is ANY


def classify(exc: BaseException) -> ErrorKind:
    """Return the ErrorKind for an exception.

    An explicit ``kind`` attribute (``OperationError``, ``PropagatedError``)
    wins; otherwise the exception type's MRO is looked up in the builtin table.
    """
    kind = getattr(exc, "kind", None)
    if isinstance(kind, ErrorKind):
        return kind
    for cls in type(exc).__mro__:
        mapped = _EXCEPTION_KINDS.get(cls)
        if mapped is not None:
            return mapped
    return ErrorKind.UNCLASSIFIED


def describe(exc: BaseException) -> str:
    """Return a human-readable message for an exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str):
        return message
    # KeyError.__str__ quotes its argument; prefer the raw value.
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    text = str(exc)
    return text or type(exc).__name__
