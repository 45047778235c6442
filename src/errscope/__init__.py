"""errscope: typed error propagation with guaranteed cleanup.

Public API:
    - run(): Execute an operation with ordered handlers and a cleanup action
    - run_result(): Same, returning Success/Failure instead of raising
    - Operation / operation: Single-use units of fallible work
    - Handler / rethrow_as: Recovery logic and explicit kind remapping
    - ErrorKind / ANY: Failure taxonomy and the wildcard matcher
    - Config: Configuration dataclass
"""

from __future__ import annotations

import logging

from errscope.config import Config
from errscope.core import run, run_result
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
from errscope.handlers import Handler, rethrow_as
from errscope.kinds import ANY, ErrorKind, classify
from errscope.operation import Fault, Operation, operation
from errscope.report import OutcomeReport
from errscope.result import Failure, Outcome, Result, Success
from errscope.scope import ScopeState, current_path

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("errscope")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("errscope").addHandler(logging.NullHandler())

__all__ = [
    "ANY",
    "CleanupError",
    "Config",
    "ConfigurationError",
    "ErrorKind",
    "ErrscopeError",
    "Failure",
    "Fault",
    "Handler",
    "InternalError",
    "LifecycleError",
    "Operation",
    "OperationError",
    "Outcome",
    "OutcomeReport",
    "PropagatedError",
    "Result",
    "ScopeState",
    "Success",
    "classify",
    "current_path",
    "operation",
    "rethrow_as",
    "run",
    "run_result",
    "walk_exception_chain",
]
