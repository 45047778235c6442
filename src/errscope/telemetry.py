"""Telemetry context and reporter interfaces.

Disabled by default and then a shared no-op. When enabled (``Config.telemetry``
or ``ERRSCOPE_TELEMETRY=1``), every ``run()`` records a timing under its dotted
scope path and counts its outcome.
"""

from collections import deque
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
import logging
import time
from types import TracebackType
from typing import Any, Protocol, Self, runtime_checkable

log = logging.getLogger(__name__)


@runtime_checkable
class TelemetryReporter(Protocol):
    """Duck-typed protocol for telemetry reporters."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """Stateless stand-in used while telemetry is disabled."""

    def time(self, scope: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        _: type[BaseException] | None,
        __: BaseException | None,
        ___: TracebackType | None,
    ) -> None:
        return None

    @property
    def is_enabled(self) -> bool:
        return False

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _EnabledTelemetryContext:
    """Forwards timings and counters to the configured reporters."""

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    def time(
        self, scope: str, **metadata: Any
    ) -> AbstractContextManager["_EnabledTelemetryContext"]:
        """Time the enclosed block and report it under *scope*."""
        return self._timed(scope, **metadata)

    @contextmanager
    def _timed(self, scope: str, **metadata: Any) -> Iterator["_EnabledTelemetryContext"]:
        if not scope or not isinstance(scope, str):
            raise ValueError("Scope name must be a non-empty string")
        start = time.perf_counter()
        try:
            yield self
        finally:
            duration = time.perf_counter() - start
            for reporter in self.reporters:
                try:
                    reporter.record_timing(scope, duration, **metadata)
                except Exception as e:
                    log.error(
                        "Telemetry reporter '%s' failed: %s",
                        type(reporter).__name__,
                        e,
                        exc_info=True,
                    )

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        """Record a counter metric."""
        for reporter in self.reporters:
            try:
                reporter.record_metric(
                    name, increment, metric_type="counter", **metadata
                )
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )

    @property
    def is_enabled(self) -> bool:
        return True


class SimpleReporter:
    """In-memory reporter for development and tests."""

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = {}
        self.metrics: dict[str, deque[tuple[Any, dict[str, Any]]]] = {}

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self.timings.setdefault(scope, deque(maxlen=self.max_entries)).append(
            (duration, metadata)
        )

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self.metrics.setdefault(scope, deque(maxlen=self.max_entries)).append(
            (value, metadata)
        )

    def reset(self) -> None:
        self.timings.clear()
        self.metrics.clear()

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot of collected data."""
        return {
            "timings": {key: list(values) for key, values in self.timings.items()},
            "metrics": {key: list(values) for key, values in self.metrics.items()},
        }

    def get_report(self) -> str:
        """Format collected timings and counters, one scope per line."""
        lines = ["=== Telemetry Report ==="]
        for scope, values in sorted(self.timings.items()):
            durations = [v[0] for v in values]
            lines.append(
                f"{scope:<40} | Runs: {len(durations):<4} | "
                f"Total: {sum(durations):.4f}s"
            )
        for scope, values in sorted(self.metrics.items()):
            total = sum(v[0] for v in values if isinstance(v[0], int | float))
            lines.append(f"{scope:<40} | Count: {total}")
        return "\n".join(lines)


_NO_OP_SINGLETON = _NoOpTelemetryContext()
_DEFAULT_REPORTER = SimpleReporter()

type TelemetryContextProtocol = _EnabledTelemetryContext | _NoOpTelemetryContext


def default_reporter() -> SimpleReporter:
    """Return the process-wide reporter used when none is passed explicitly."""
    return _DEFAULT_REPORTER


def TelemetryContext(  # noqa: N802
    *reporters: TelemetryReporter, enabled: bool = True
) -> TelemetryContextProtocol:
    """Return a telemetry context.

    Disabled contexts are the shared no-op instance. Enabled contexts without
    reporters use ``default_reporter()``.
    """
    if not enabled:
        return _NO_OP_SINGLETON
    return _EnabledTelemetryContext(*(reporters or (_DEFAULT_REPORTER,)))
