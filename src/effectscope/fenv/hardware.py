"""
C floating-point environment access through ``fetestexcept``/``feclearexcept``.

The status flags live in the FPU control registers (MXCSR/x87 status word on
x86, FPSR on AArch64, FCSR on RISC-V, FPSCR on POWER), one set per native
thread. CPython's own ``float`` arithmetic updates them without ever looking
at them, so reading them straight after an operation tells us which
exceptions it raised.

The native ``FE_*`` constants are not exposed to Python, so they are tabulated
per architecture. A host missing from the table, or whose C library does not
export the two functions, is *rejected*: its hardware flags are simply not
sampled. Loading follows a decide/apply split so the decision can be
inspected (and tested) as data before anything touches the process.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import logging
import platform
import sys
from dataclasses import dataclass
from typing import Final, Literal

from effectscope.kinds import FpeKind
from effectscope.result import Failure, Result, Success


__all__ = [
    "FE_CONSTANTS",
    "FenvRuntime",
    "HardwareFenv",
    "apply_fenv_runtime",
    "decide_fenv_runtime",
    "get_fenv_runtime",
    "get_hardware_fenv",
]

logger = logging.getLogger(__name__)

_X86: Final[dict[FpeKind, int]] = {
    FpeKind.invalid: 0x01,
    FpeKind.divide_by_zero: 0x04,
    FpeKind.overflow: 0x08,
    FpeKind.underflow: 0x10,
    FpeKind.inexact: 0x20,
}
_ARM64: Final[dict[FpeKind, int]] = {
    FpeKind.invalid: 0x01,
    FpeKind.divide_by_zero: 0x02,
    FpeKind.overflow: 0x04,
    FpeKind.underflow: 0x08,
    FpeKind.inexact: 0x10,
}
_RISCV: Final[dict[FpeKind, int]] = {
    FpeKind.inexact: 0x01,
    FpeKind.underflow: 0x02,
    FpeKind.overflow: 0x04,
    FpeKind.divide_by_zero: 0x08,
    FpeKind.invalid: 0x10,
}
_POWER: Final[dict[FpeKind, int]] = {
    FpeKind.inexact: 0x02000000,
    FpeKind.divide_by_zero: 0x04000000,
    FpeKind.underflow: 0x08000000,
    FpeKind.overflow: 0x10000000,
    FpeKind.invalid: 0x20000000,
}

# platform.machine() -> native FE_* values
FE_CONSTANTS: Final[dict[str, dict[FpeKind, int]]] = {
    "x86_64": _X86,
    "amd64": _X86,
    "i386": _X86,
    "i686": _X86,
    "x86": _X86,
    "aarch64": _ARM64,
    "arm64": _ARM64,
    "riscv64": _RISCV,
    "ppc64": _POWER,
    "ppc64le": _POWER,
}


@dataclass(frozen=True)
class FenvRuntime:
    """Hardware floating-point environment readiness ADT.

    Attributes:
        kind: Discriminator indicating whether the flags can be sampled.
        machine: Normalised ``platform.machine()`` of the host.
        library: Path or name of the C library providing ``fetestexcept``.
        reason: Rejection reason when not ready.
    """

    kind: Literal["ready", "rejected"]
    machine: str = ""
    library: str | None = None
    reason: str | None = None


class HardwareFenv:
    """Bound ``fetestexcept``/``feclearexcept`` pair for one C library.

    The flags themselves are per thread; this object is only the handle and
    can be shared, but every call acts on the calling thread's flags.
    """

    def __init__(self, library: ctypes.CDLL, constants: dict[FpeKind, int]) -> None:
        self._fetestexcept = library.fetestexcept
        self._fetestexcept.argtypes = [ctypes.c_int]
        self._fetestexcept.restype = ctypes.c_int
        self._feclearexcept = library.feclearexcept
        self._feclearexcept.argtypes = [ctypes.c_int]
        self._feclearexcept.restype = ctypes.c_int
        self._constants = dict(constants)
        self._native_all = 0
        for native in self._constants.values():
            self._native_all |= native
        self._supported = FpeKind.none
        for flag in self._constants:
            self._supported |= flag

    @property
    def supported(self) -> FpeKind:
        """FPE categories this host reports."""
        return self._supported

    def test(self) -> FpeKind:
        """Return the currently raised flags without clearing them."""
        raised_native = int(self._fetestexcept(self._native_all))
        if not raised_native:
            return FpeKind.none
        raised = FpeKind.none
        for flag, native in self._constants.items():
            if raised_native & native:
                raised |= flag
        return raised

    def clear(self) -> None:
        """Lower every supported flag on the calling thread."""
        self._feclearexcept(self._native_all)

    def __repr__(self) -> str:
        return f"HardwareFenv(supported={self._supported!r})"


_HARDWARE_FENV: HardwareFenv | None = None
_FENV_RUNTIME: FenvRuntime | None = None


def _find_c_library() -> str | None:
    match sys.platform:
        case "win32":
            return None
        case _:
            return ctypes.util.find_library("m") or ctypes.util.find_library("c")


def decide_fenv_runtime() -> FenvRuntime:
    """Return whether the host's floating-point flags can be sampled.

    Returns:
        FenvRuntime: ``ready`` with the library to load, otherwise ``rejected``.
    """
    machine = platform.machine().lower()
    library = _find_c_library()
    match (machine in FE_CONSTANTS, sys.platform, library):
        case (False, _, _):
            return FenvRuntime(kind="rejected", machine=machine, reason="unknown_architecture")
        case (True, "win32", _):
            return FenvRuntime(kind="rejected", machine=machine, reason="platform_unsupported")
        case (True, _, None):
            return FenvRuntime(kind="rejected", machine=machine, reason="libm_not_found")
        case (True, _, found):
            return FenvRuntime(kind="ready", machine=machine, library=found)
    return FenvRuntime(kind="rejected", machine=machine, reason="fenv_runtime_unknown")


def apply_fenv_runtime(runtime: FenvRuntime) -> Result[HardwareFenv, FenvRuntime]:
    """Load the C library named by ``runtime`` and bind the flag functions.

    Args:
        runtime: Decision produced by :func:`decide_fenv_runtime`.

    Returns:
        Result[HardwareFenv, FenvRuntime]: Success with the bound handle, or
        Failure with a rejected runtime describing what was missing.
    """
    match runtime:
        case FenvRuntime(kind="ready", machine=machine, library=str(library)):
            try:
                handle = ctypes.CDLL(library)
            except OSError as exc:
                return Failure(
                    FenvRuntime(
                        kind="rejected",
                        machine=machine,
                        library=library,
                        reason=f"load_failed: {exc}",
                    )
                )
            if not (hasattr(handle, "fetestexcept") and hasattr(handle, "feclearexcept")):
                return Failure(
                    FenvRuntime(
                        kind="rejected",
                        machine=machine,
                        library=library,
                        reason="symbols_missing",
                    )
                )
            return Success(HardwareFenv(handle, FE_CONSTANTS[machine]))
        case _:
            return Failure(runtime)


def get_hardware_fenv() -> HardwareFenv | None:
    """Return the cached hardware handle, or ``None`` on a rejected host."""
    global _HARDWARE_FENV, _FENV_RUNTIME
    if _FENV_RUNTIME is None:
        runtime = decide_fenv_runtime()
        match apply_fenv_runtime(runtime):
            case Success(handle):
                _HARDWARE_FENV = handle
                _FENV_RUNTIME = runtime
                logger.debug(
                    "hardware FPE flags available: machine=%s library=%s",
                    runtime.machine,
                    runtime.library,
                )
            case Failure(rejected):
                _FENV_RUNTIME = rejected
                logger.debug(
                    "hardware FPE flags unavailable: machine=%s reason=%s",
                    rejected.machine,
                    rejected.reason,
                )
    return _HARDWARE_FENV


def get_fenv_runtime() -> FenvRuntime:
    """Return the cached readiness decision behind :func:`get_hardware_fenv`."""
    get_hardware_fenv()
    assert _FENV_RUNTIME is not None
    return _FENV_RUNTIME
