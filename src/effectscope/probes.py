"""
Floating-point probes: which exceptions does this host actually report?

Each probe performs one operation with a known IEEE 754 outcome inside a
fresh :class:`~effectscope.context.ExecutionContext` and records the kind
word the context ends up with. Categories the host cannot report are simply
missing from the result, so the same probe may legitimately produce
different words on different platforms.

Operands are passed through functions so CPython cannot fold the operation
into a constant at compile time, which would raise the flags while the
module is compiled instead of while the probe runs.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Callable, Final

import numpy as np

from effectscope.context import ExecutionContext
from effectscope.fenv.environment import FloatingPointEnvironment
from effectscope.kinds import FPE_BITMASK, EffectKind, FpeKind


__all__ = ["PROBES", "Probe", "ProbeResult", "run_probe", "run_probes"]


def _divide(a: float, b: float) -> float:
    return a / b


def _subtract(a: float, b: float) -> float:
    return a - b


def _multiply(a: float, b: float) -> float:
    return a * b


def _numpy_divide(a: float, b: float) -> np.float64:
    return np.float64(a) / np.float64(b)


@dataclass(frozen=True)
class Probe:
    """One operation and the FPE categories IEEE 754 says it raises."""

    name: str
    expression: str
    evaluate: Callable[[], object]
    expected: FpeKind


@dataclass(frozen=True)
class ProbeResult:
    """Kind word a probe produced on this host."""

    name: str
    expression: str
    kind: int
    expected: FpeKind

    @property
    def raised(self) -> FpeKind:
        return FpeKind(self.kind & FPE_BITMASK)

    @property
    def detected(self) -> bool:
        """Every expected category was reported."""
        return (self.raised & self.expected) == self.expected


PROBES: Final[tuple[Probe, ...]] = (
    Probe("inexact", "2.0 / 3.0", lambda: _divide(2.0, 3.0), FpeKind.inexact),
    Probe("sqrt", "math.sqrt(2.0)", lambda: math.sqrt(2.0), FpeKind.inexact),
    Probe(
        "invalid",
        "inf - inf",
        lambda: _subtract(math.inf, math.inf),
        FpeKind.invalid,
    ),
    Probe(
        "overflow",
        "DBL_MAX * 2.0",
        lambda: _multiply(sys.float_info.max, 2.0),
        FpeKind.overflow | FpeKind.inexact,
    ),
    Probe(
        "underflow",
        "DBL_MIN / 3.0",
        lambda: _divide(sys.float_info.min, 3.0),
        FpeKind.underflow | FpeKind.inexact,
    ),
    Probe(
        "numpy_divide_by_zero",
        "np.float64(1.0) / np.float64(0.0)",
        lambda: _numpy_divide(1.0, 0.0),
        FpeKind.divide_by_zero,
    ),
    Probe(
        "numpy_invalid",
        "np.float64(0.0) / np.float64(0.0)",
        lambda: _numpy_divide(0.0, 0.0),
        FpeKind.invalid,
    ),
)


def run_probe(
    probe: Probe,
    *,
    environment: FloatingPointEnvironment | None = None,
) -> ProbeResult:
    """Evaluate ``probe`` in its own context and capture the kind word."""
    with ExecutionContext(
        EffectKind.reference | EffectKind.fpe, environment=environment
    ) as ctx:
        ctx.observe(probe.evaluate())
        kind = ctx.kind()
    return ProbeResult(
        name=probe.name,
        expression=probe.expression,
        kind=kind,
        expected=probe.expected,
    )


def run_probes(
    probes: tuple[Probe, ...] = PROBES,
    *,
    environment: FloatingPointEnvironment | None = None,
) -> list[ProbeResult]:
    return [run_probe(probe, environment=environment) for probe in probes]
