"""
End-to-end usage scenarios.

The scripted tests pin exact kind words. The ``hardware_fpe`` tests run the
same scenarios against the real status flags; CPython itself may raise
``inexact`` between two observations, so they assert on the bits that must
be present rather than on the whole word.
"""

from __future__ import annotations

import ctypes
import math

import numpy as np
import pytest

from effectscope import (
    Const,
    EffectKind,
    ExecutionContext,
    FloatingPointEnvironment,
    FpeKind,
    ItemRef,
    ScriptedFpeSource,
)
from tests.helpers import DBL_MAX, DBL_MIN, INF, ContextFactory, divide, multiply, subtract

PERMIT_FP = EffectKind.reference | EffectKind.fpe
EFFECTS_ONLY = 0x00FF

# module-level state aliased by the integer scenarios
GLOBALS: dict[str, int] = {"i": 1, "j": 2}


@pytest.fixture(autouse=True)
def reset_globals() -> None:
    GLOBALS.update(i=1, j=2)


class TestScriptedScenarios:
    """Scenarios with exact kind words."""

    def test_mutable_integer_alias(self, make_context: ContextFactory) -> None:
        ctx = make_context(EffectKind.reference)
        ctx.observe(ItemRef(GLOBALS, "i"))
        assert ctx.kind() == EffectKind.reference
        assert ctx.valid()

    def test_rounded_division(
        self, scripted_source: ScriptedFpeSource, make_context: ContextFactory
    ) -> None:
        ctx = make_context(PERMIT_FP)
        scripted_source.raise_flags(FpeKind.inexact)
        ctx.observe(divide(2.0, 3.0))
        assert ctx.kind() == 0x2014
        assert ctx.has_fpe()
        assert ctx.has_reference()
        assert ctx.valid()

    def test_invalid_after_clear(
        self, scripted_source: ScriptedFpeSource, make_context: ContextFactory
    ) -> None:
        ctx = make_context(PERMIT_FP)
        scripted_source.raise_flags(FpeKind.inexact)
        ctx.observe(divide(2.0, 3.0))
        ctx.clear()
        scripted_source.raise_flags(FpeKind.invalid)
        ctx.observe(float("nan"))
        assert ctx.kind() == 0x0114
        assert not ctx.is_pure()
        assert ctx.valid()

    def test_owned_address_then_release(self, make_context: ContextFactory) -> None:
        ctx = make_context(EffectKind.reference | EffectKind.write)
        buffer = (ctypes.c_int * 4)()
        address = ctx.observe(ctypes.cast(buffer, ctypes.POINTER(ctypes.c_int)))
        assert ctx.has_write()
        assert ctx.valid()
        address.value = None
        del buffer
        ctx.clear()
        assert ctx.is_pure()

    def test_constant_alias_to_global(self, make_context: ContextFactory) -> None:
        ctx = make_context(EffectKind.pure)
        ctx.observe(Const(GLOBALS["j"]))
        assert ctx.is_pure()


class TestIntegerHarness:
    """Reference and constant aliases to module-level integers."""

    def test_integers(self, make_context: ContextFactory) -> None:
        ctx = make_context(EffectKind.reference)
        i_reference = ctx.observe(ItemRef(GLOBALS, "i"))
        assert ctx.kind() == 0x0004
        assert ctx.has_reference()
        assert GLOBALS["i"] == i_reference
        i_reference.value = i_reference + 1
        assert GLOBALS["i"] == i_reference
        assert GLOBALS["i"] == 2
        assert ctx.valid()
        ctx.clear()
        j_constant = ctx.observe(Const(GLOBALS["j"]))
        assert i_reference + j_constant == 4
        value = ctx.observe(3)
        assert value + j_constant == 5
        assert ctx.is_pure()
        assert ctx.valid()


class TestPointerHarness:
    """The address heuristic: any non-null address is an owned write."""

    def test_pointer_to_double(self, make_context: ContextFactory) -> None:
        ctx = make_context(EffectKind.reference | EffectKind.write)
        cell = ctypes.c_double(2.0 / 3)
        pointer = ctx.observe(ctypes.pointer(cell))
        assert ctx.kind() == 0x000C
        assert ctx.valid()
        pointer.value = None
        ctx.clear()
        assert ctx.is_pure()

    def test_pointer_to_int(self, make_context: ContextFactory) -> None:
        ctx = make_context(EffectKind.reference | EffectKind.write)
        cell = ctypes.c_int(1)
        ctx.observe(ctypes.pointer(cell))
        assert ctx.kind() == 0x0008
        assert ctx.valid()

    def test_string_literal_looks_owned(self, make_context: ContextFactory) -> None:
        """A char pointer into read-only data cannot be told apart from a heap pointer."""
        ctx = make_context(EffectKind.reference | EffectKind.write)
        ctx.observe(ctypes.c_char_p(b"invalid write effect"))
        assert ctx.kind() == 0x0008
        assert ctx.valid()

    def test_null_pointer_is_pure(self, make_context: ContextFactory) -> None:
        ctx = make_context(EffectKind.reference | EffectKind.write)
        ctx.observe(ctypes.POINTER(ctypes.c_int)())
        assert ctx.is_pure()
        assert ctx.valid()


@pytest.mark.hardware_fpe
class TestHardwareScenarios:
    """Scenarios against the real floating-point status flags."""

    @staticmethod
    def _context(environment: FloatingPointEnvironment) -> ExecutionContext:
        return ExecutionContext(PERMIT_FP, environment=environment)

    def test_rounded_division(self, hardware_environment: FloatingPointEnvironment) -> None:
        ctx = self._context(hardware_environment)
        ctx.observe(divide(2.0, 3.0))
        assert ctx.kind() & EFFECTS_ONLY == PERMIT_FP
        assert ctx.kind() & FpeKind.inexact
        assert ctx.valid()

    def test_invalid(self, hardware_environment: FloatingPointEnvironment) -> None:
        ctx = self._context(hardware_environment)
        ctx.observe(subtract(INF, INF))
        assert ctx.kind() & EFFECTS_ONLY == PERMIT_FP
        assert ctx.kind() & FpeKind.invalid
        assert not ctx.is_pure()
        assert ctx.valid()

    def test_overflow(self, hardware_environment: FloatingPointEnvironment) -> None:
        ctx = self._context(hardware_environment)
        ctx.observe(multiply(DBL_MAX, 2.0))
        assert ctx.kind() & (FpeKind.overflow | FpeKind.inexact) == (
            FpeKind.overflow | FpeKind.inexact
        )
        assert ctx.valid()

    def test_underflow(self, hardware_environment: FloatingPointEnvironment) -> None:
        ctx = self._context(hardware_environment)
        ctx.observe(divide(DBL_MIN, 3.0))
        assert ctx.kind() & (FpeKind.underflow | FpeKind.inexact) == (
            FpeKind.underflow | FpeKind.inexact
        )
        assert ctx.valid()

    def test_square_root(self, hardware_environment: FloatingPointEnvironment) -> None:
        ctx = self._context(hardware_environment)
        ctx.observe(math.sqrt(2))
        found, kind = ctx.has_fpe(with_kind=True)
        assert found
        assert kind & FpeKind.inexact

    def test_clear_between_scenarios(self, hardware_environment: FloatingPointEnvironment) -> None:
        ctx = self._context(hardware_environment)
        ctx.observe(multiply(DBL_MAX, 2.0))
        ctx.clear()
        ctx.observe(subtract(INF, INF))
        assert not ctx.kind() & FpeKind.overflow
        assert ctx.kind() & FpeKind.invalid

    def test_fpe_not_permitted_is_invalid(
        self, hardware_environment: FloatingPointEnvironment
    ) -> None:
        ctx = ExecutionContext(EffectKind.reference, environment=hardware_environment)
        ctx.observe(subtract(INF, INF))
        assert not ctx.valid()


class TestNumpyScenarios:
    """Division by zero, which plain Python refuses, through numpy."""

    def test_divide_by_zero(self, numpy_environment: FloatingPointEnvironment) -> None:
        with ExecutionContext(PERMIT_FP, environment=numpy_environment) as ctx:
            ctx.observe(np.float64(1.0) / np.float64(0.0))
        assert ctx.kind() == 0x0414
        assert not ctx.is_pure()
        assert ctx.valid()

    def test_clear_between_exceptions(self, numpy_environment: FloatingPointEnvironment) -> None:
        with ExecutionContext(PERMIT_FP, environment=numpy_environment) as ctx:
            ctx.observe(np.float64(0.0) / np.float64(0.0))
            ctx.clear()
            ctx.observe(np.float64(1e308) * np.float64(10.0))
        assert ctx.kind() == 0x0814
