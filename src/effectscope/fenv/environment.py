"""
The floating-point exception environment a context samples.

A :class:`FloatingPointEnvironment` is the capability object through which an
:class:`~effectscope.context.ExecutionContext` reads and discards pending
floating-point exceptions. It composes one or more :class:`FpeSource`
implementations and presents their union:

* :class:`~effectscope.fenv.hardware.HardwareFenv` - the C library flags,
  raised by plain ``float`` arithmetic, ``math`` functions and native code.
* :class:`~effectscope.fenv.numpy_status.NumpyFloatStatus` - exceptions that
  numpy caught and cleared itself.

The flags are per native thread, so the default environment is a
thread-scoped singleton (:func:`current_environment`). Two contexts on one
thread share it: a sample taken by either consumes the flags for both.
"""

from __future__ import annotations

import contextlib
import threading
from typing import Protocol, Sequence, runtime_checkable

from effectscope.fenv.hardware import get_hardware_fenv
from effectscope.fenv.numpy_status import NumpyFloatStatus
from effectscope.kinds import FpeKind


__all__ = ["FloatingPointEnvironment", "FpeSource", "current_environment"]


@runtime_checkable
class FpeSource(Protocol):
    """Anything that can report and lower floating-point exception flags."""

    @property
    def supported(self) -> FpeKind: ...

    def test(self) -> FpeKind: ...

    def clear(self) -> None: ...


class FloatingPointEnvironment:
    """Union of several :class:`FpeSource` objects with sample-then-clear."""

    def __init__(self, sources: Sequence[FpeSource]) -> None:
        self._sources = tuple(sources)

    @property
    def sources(self) -> tuple[FpeSource, ...]:
        return self._sources

    @property
    def supported(self) -> FpeKind:
        """FPE categories at least one source can report."""
        supported = FpeKind.none
        for source in self._sources:
            supported |= source.supported
        return supported

    def test(self) -> FpeKind:
        """Pending flags across all sources, left raised."""
        raised = FpeKind.none
        for source in self._sources:
            raised |= source.test()
        return raised

    def clear(self) -> None:
        """Discard every pending flag."""
        for source in self._sources:
            source.clear()

    def sample(self) -> FpeKind:
        """Return the pending flags and discard them.

        The next sample therefore only sees exceptions raised after this one.
        """
        raised = self.test()
        if raised:
            self.clear()
        return raised

    def errstate(self) -> contextlib.AbstractContextManager[object]:
        """Install the numpy error hook for a ``with`` block, if numpy is a source."""
        stack = contextlib.ExitStack()
        for source in self._sources:
            if isinstance(source, NumpyFloatStatus):
                stack.enter_context(source.errstate())
        return stack

    def __repr__(self) -> str:
        return f"FloatingPointEnvironment(sources={list(self._sources)!r})"


_THREAD_STATE = threading.local()


def _build_default_environment() -> FloatingPointEnvironment:
    sources: list[FpeSource] = []
    hardware = get_hardware_fenv()
    if hardware is not None:
        sources.append(hardware)
    sources.append(NumpyFloatStatus())
    return FloatingPointEnvironment(sources)


def current_environment() -> FloatingPointEnvironment:
    """Return the calling thread's environment, creating it on first use."""
    environment: FloatingPointEnvironment | None = getattr(_THREAD_STATE, "environment", None)
    if environment is None:
        environment = _build_default_environment()
        _THREAD_STATE.environment = environment
    return environment
