"""Configuration: frozen Config resolved from the environment."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import get_args

from dotenv import load_dotenv

from errscope.errors import ConfigurationError
from errscope.scope import CleanupErrorPolicy

load_dotenv()

_CLEANUP_ERRORS_ENV = "ERRSCOPE_CLEANUP_ERRORS"
_TELEMETRY_ENV = "ERRSCOPE_TELEMETRY"


@dataclass(frozen=True)
class Config:
    """Immutable configuration for ``run()``.

    Fields left as ``None`` are resolved from the environment (a project
    ``.env`` file is honored).

    Example:
        config = Config(cleanup_errors="log")
        run(op, handlers, cleanup, config=config)
    """

    #: Auto-resolved from ``ERRSCOPE_CLEANUP_ERRORS`` when *None*; defaults to ``"raise"``.
    cleanup_errors: CleanupErrorPolicy | None = None
    #: Auto-resolved from ``ERRSCOPE_TELEMETRY == "1"`` when *None*.
    telemetry: bool | None = None

    def __post_init__(self) -> None:
        """Resolve environment defaults and validate."""
        if self.cleanup_errors is None:
            resolved = os.environ.get(_CLEANUP_ERRORS_ENV, "raise").strip().lower()
            object.__setattr__(self, "cleanup_errors", resolved or "raise")

        if self.cleanup_errors not in get_args(CleanupErrorPolicy):
            raise ConfigurationError(
                f"Unknown cleanup_errors policy: {self.cleanup_errors!r}",
                hint=f"Use 'raise' or 'log' (argument or {_CLEANUP_ERRORS_ENV}).",
            )

        if self.telemetry is None:
            object.__setattr__(
                self, "telemetry", os.environ.get(_TELEMETRY_ENV) == "1"
            )
        elif not isinstance(self.telemetry, bool):
            raise ConfigurationError(
                f"telemetry must be a bool, got {type(self.telemetry).__name__}",
                hint=f"Pass telemetry=True or set {_TELEMETRY_ENV}=1.",
            )
