"""
Scripted floating-point source for deterministic tests.

Real hardware flags depend on the compiler, the C library and the CPU, and
CPython may raise ``inexact`` on its own between two observations. Code that
needs exact kind words can back its context with :class:`ScriptedFpeSource`
and raise flags by hand.

Example:
    >>> source = ScriptedFpeSource()
    >>> ctx = ExecutionContext(
    ...     EffectKind.reference | EffectKind.fpe,
    ...     environment=FloatingPointEnvironment([source]),
    ... )
    >>> source.raise_flags(FpeKind.invalid)
    >>> region = ctx.observe(float("nan"))
    >>> hex(ctx.kind())
    '0x114'
    >>> source.clear_count
    2
"""

from __future__ import annotations

from effectscope.kinds import FpeKind


__all__ = ["ScriptedFpeSource"]


class ScriptedFpeSource:
    """Source whose pending flags are set explicitly.

    Attributes:
        test_count: Number of times the pending flags were read.
        clear_count: Number of times the pending flags were cleared.
    """

    def __init__(self, supported: FpeKind | None = None) -> None:
        if supported is None:
            supported = (
                FpeKind.invalid
                | FpeKind.divide_by_zero
                | FpeKind.overflow
                | FpeKind.underflow
                | FpeKind.inexact
            )
        self._supported = supported
        self._pending = FpeKind.none
        self.test_count = 0
        self.clear_count = 0

    @property
    def supported(self) -> FpeKind:
        return self._supported

    def raise_flags(self, flags: FpeKind) -> None:
        """Raise ``flags``; categories outside ``supported`` are dropped."""
        self._pending |= flags & self._supported

    def test(self) -> FpeKind:
        self.test_count += 1
        return self._pending

    def clear(self) -> None:
        self.clear_count += 1
        self._pending = FpeKind.none
