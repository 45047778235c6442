from __future__ import annotations

import pytest

from errscope.errors import OperationError, PropagatedError
from errscope.kinds import ANY, ErrorKind, classify, describe, is_wildcard

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (ZeroDivisionError("division by zero"), ErrorKind.DIVISION_BY_ZERO),
        (FileNotFoundError("test.txt"), ErrorKind.RESOURCE_NOT_FOUND),
        (KeyError("missing"), ErrorKind.RESOURCE_NOT_FOUND),
        (IndexError("list index out of range"), ErrorKind.INDEX_OUT_OF_BOUNDS),
        (ValueError("bad"), ErrorKind.INVALID_ARGUMENT),
        (TypeError("bad type"), ErrorKind.INVALID_ARGUMENT),
        (UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid"), ErrorKind.INVALID_ARGUMENT),
        (PermissionError("denied"), ErrorKind.UNCLASSIFIED),
        (RuntimeError("?"), ErrorKind.UNCLASSIFIED),
    ],
)
def test_classify_builtin_exceptions(exc: BaseException, kind: ErrorKind) -> None:
    assert classify(exc) is kind


def test_explicit_kind_attribute_wins() -> None:
    assert classify(OperationError(ErrorKind.NUMBER_FORMAT, "x")) is ErrorKind.NUMBER_FORMAT
    assert classify(PropagatedError(ErrorKind.UNCLASSIFIED, "x")) is ErrorKind.UNCLASSIFIED


def test_describe_prefers_message_attribute_and_unquotes_key_errors() -> None:
    assert describe(OperationError(ErrorKind.INVALID_ARGUMENT, "Age!")) == "Age!"
    assert describe(KeyError("settings")) == "settings"
    assert describe(RuntimeError()) == "RuntimeError"


def test_kinds_are_string_tags() -> None:
    assert ErrorKind.DIVISION_BY_ZERO == "DivisionByZero"
    assert str(ErrorKind.UNCLASSIFIED) == "Unclassified"


def test_wildcard_sentinel() -> None:
    assert is_wildcard(ANY)
    assert not is_wildcard(ErrorKind.UNCLASSIFIED)
    assert repr(ANY) == "ANY"
