from __future__ import annotations

import pytest

from errscope.errors import (
    CleanupError,
    ConfigurationError,
    ErrscopeError,
    InternalError,
    LifecycleError,
    OperationError,
    PropagatedError,
    walk_exception_chain,
)
from errscope.kinds import ErrorKind

pytestmark = pytest.mark.unit


def test_propagated_error_structured_metadata() -> None:
    err = PropagatedError(
        ErrorKind.RESOURCE_NOT_FOUND,
        "File not found!",
        hint="check the path",
        origin="read_resource",
        path=("outer", "read_resource"),
    )

    assert str(err) == "File not found!"
    assert err.kind is ErrorKind.RESOURCE_NOT_FOUND
    assert err.message == "File not found!"
    assert err.hint == "check the path"
    assert err.origin == "read_resource"
    assert err.path == ("outer", "read_resource")
    assert "ResourceNotFound" in repr(err)


def test_propagated_error_defaults() -> None:
    err = PropagatedError(ErrorKind.UNCLASSIFIED, "x")
    assert err.hint is None
    assert err.origin is None
    assert err.path == ()


def test_subclass_hierarchy() -> None:
    """Every library error is catchable as ErrscopeError."""
    for cls in (ConfigurationError, LifecycleError, InternalError):
        assert issubclass(cls, ErrscopeError)
    assert issubclass(OperationError, ErrscopeError)
    assert issubclass(CleanupError, PropagatedError)
    assert issubclass(PropagatedError, ErrscopeError)


def test_walk_exception_chain_follows_cause_and_context() -> None:
    root = ValueError("root")
    middle = OperationError(ErrorKind.INVALID_ARGUMENT, "middle")
    middle.__cause__ = root
    top = PropagatedError(ErrorKind.UNCLASSIFIED, "top")
    top.__context__ = middle

    assert list(walk_exception_chain(top)) == [top, middle, root]


def test_walk_exception_chain_survives_cycles() -> None:
    a = RuntimeError("a")
    b = RuntimeError("b")
    a.__cause__ = b
    b.__cause__ = a

    assert list(walk_exception_chain(a)) == [a, b]
