# tests/conftest.py
"""Global PyTest fixtures for the test-suite.

Most tests back their contexts with a :class:`ScriptedFpeSource` so kind
words are exact on every host. Tests that read the real floating-point
status flags request ``hardware_environment`` and are skipped on hosts whose
flags cannot be sampled.
"""

from __future__ import annotations

import signal
from types import FrameType
from typing import Callable, Generator

import pytest

from effectscope import (
    ContextType,
    ExecutionContext,
    FloatingPointEnvironment,
    ScriptedFpeSource,
)
from effectscope.fenv import NumpyFloatStatus, get_hardware_fenv
from tests.helpers import ContextFactory

DEFAULT_TEST_TIMEOUT_SECONDS = 30.0


def _build_timeout_handler(
    timeout_seconds: float,
) -> Callable[[int, FrameType | None], None]:
    """Create SIGALRM handler that fails the test when timeout is reached."""

    def _handle_timeout(signum: int, frame: FrameType | None) -> None:
        pytest.fail(
            f"Test exceeded {timeout_seconds:.0f}s timeout (includes setup/teardown)",
            pytrace=True,
        )

    return _handle_timeout


def _resolve_timeout_seconds(request: pytest.FixtureRequest) -> float:
    """Return timeout for current test (marker override allowed)."""
    marker = request.node.get_closest_marker("timeout")
    if marker is None:
        return DEFAULT_TEST_TIMEOUT_SECONDS

    raw_value = marker.kwargs.get("seconds", marker.args[0] if marker.args else None)
    if raw_value is None:
        pytest.fail("timeout marker requires seconds argument", pytrace=True)

    seconds = float(raw_value)
    if seconds <= 0:
        pytest.fail("timeout marker must be positive seconds", pytrace=True)

    return seconds


@pytest.fixture(autouse=True)
def per_test_timeout(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Fail any test that runs longer than the default timeout."""
    if not hasattr(signal, "SIGALRM") or not hasattr(signal, "setitimer"):
        yield
        return

    timeout_seconds = _resolve_timeout_seconds(request)
    handler = _build_timeout_handler(timeout_seconds)
    previous_handler = signal.getsignal(signal.SIGALRM)
    signal.signal(signal.SIGALRM, handler)
    signal.setitimer(signal.ITIMER_REAL, timeout_seconds)
    try:
        yield
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0.0)
        signal.signal(signal.SIGALRM, previous_handler)


# =========================================================================== #
#                   FLOATING-POINT ENVIRONMENT FIXTURES                       #
# =========================================================================== #


@pytest.fixture
def scripted_source() -> ScriptedFpeSource:
    """Floating-point source whose flags are raised by the test."""
    return ScriptedFpeSource()


@pytest.fixture
def scripted_environment(scripted_source: ScriptedFpeSource) -> FloatingPointEnvironment:
    return FloatingPointEnvironment([scripted_source])


@pytest.fixture
def make_context(scripted_environment: FloatingPointEnvironment) -> ContextFactory:
    """
    Build contexts backed by the scripted environment.

    Usage:
        def test_something(make_context: ContextFactory) -> None:
            ctx = make_context(EffectKind.reference)
    """

    def _make(
        permitted: int,
        context_type: ContextType = ContextType.terminating,
    ) -> ExecutionContext:
        return ExecutionContext(permitted, context_type, environment=scripted_environment)

    return _make


@pytest.fixture
def numpy_environment() -> FloatingPointEnvironment:
    """Environment that only sees numpy-reported exceptions."""
    return FloatingPointEnvironment([NumpyFloatStatus()])


@pytest.fixture
def hardware_environment() -> FloatingPointEnvironment:
    """Environment reading the real status flags; skips where unavailable."""
    hardware = get_hardware_fenv()
    if hardware is None:
        pytest.skip("floating-point status flags cannot be sampled on this host")
    return FloatingPointEnvironment([hardware])
