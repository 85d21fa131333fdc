"""
Floating-point exceptions reported by numpy.

numpy clears the hardware status flags before every ufunc loop and scalar
operation and reads them back afterwards, so exceptions raised inside numpy
never survive long enough for :class:`~effectscope.fenv.hardware.HardwareFenv`
to see them. numpy hands them to its error callback instead when the error
mode is ``"call"``; :class:`NumpyFloatStatus` is that callback, latching the
reported bits until they are sampled.

numpy tracks divide-by-zero, overflow, underflow and invalid. It never
reports inexact.
"""

from __future__ import annotations

import contextlib
from typing import Final

import numpy as np

from effectscope.kinds import FpeKind


__all__ = ["NUMPY_FPE_FLAGS", "NumpyFloatStatus"]

# numpy/ufuncobject.h UFUNC_FPE_* -> FpeKind
NUMPY_FPE_FLAGS: Final[dict[int, FpeKind]] = {
    1: FpeKind.divide_by_zero,
    2: FpeKind.overflow,
    4: FpeKind.underflow,
    8: FpeKind.invalid,
}


class NumpyFloatStatus:
    """Latch for numpy-reported floating-point exceptions.

    One instance belongs to one thread's
    :class:`~effectscope.fenv.environment.FloatingPointEnvironment`; numpy's
    error state is itself thread local, so the callback only ever fires for
    operations on that thread.
    """

    def __init__(self) -> None:
        self._pending = FpeKind.none
        self._supported = FpeKind.none
        for flag in NUMPY_FPE_FLAGS.values():
            self._supported |= flag

    @property
    def supported(self) -> FpeKind:
        return self._supported

    def record(self, error: str, status: int) -> None:
        """numpy error callback: ``status`` carries every raised UFUNC_FPE bit."""
        for bit, flag in NUMPY_FPE_FLAGS.items():
            if status & bit:
                self._pending |= flag

    def test(self) -> FpeKind:
        return self._pending

    def clear(self) -> None:
        self._pending = FpeKind.none

    def errstate(self) -> contextlib.AbstractContextManager[None]:
        """Route every numpy floating-point error on this thread to :meth:`record`."""
        return np.errstate(all="call", call=self.record)

    def __repr__(self) -> str:
        return f"NumpyFloatStatus(pending={self._pending!r})"
