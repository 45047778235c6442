"""Pytest configuration and fixtures.

Provides environment isolation and small recording doubles for handlers and
cleanup actions. Environment fixtures are autouse.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import os
from typing import Any

import pytest

from errscope.telemetry import SimpleReporter, TelemetryContext

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class EventLog:
    """Ordered record of everything operations, handlers and cleanups did.

    Build callables with the helpers so a test can assert exact ordering.
    """

    events: list[str] = field(default_factory=list)

    def record(self, event: str) -> None:
        self.events.append(event)

    def cleanup(self, label: str = "cleanup") -> Any:
        return lambda: self.record(label)

    def handler(self, label: str, value: Any = None) -> Any:
        def _recover(fault: Any) -> Any:
            self.record(label)
            return value if value is not None else fault.message

        return _recover

    def count(self, event: str) -> int:
        return self.events.count(event)


@pytest.fixture
def log() -> EventLog:
    return EventLog()


@pytest.fixture
def reporter() -> SimpleReporter:
    return SimpleReporter()


@pytest.fixture
def telemetry(reporter: SimpleReporter):
    return TelemetryContext(reporter)


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_errscope_env(request, monkeypatch):
    """Clear ERRSCOPE_* variables so config defaults are deterministic.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("ERRSCOPE_"):
            monkeypatch.delenv(key, raising=False)
