#!/usr/bin/env python3
"""
Effect audit example.

Demonstrates:
- Declaring permitted effects for a unit of work
- Reference write-through and constant aliases
- Floating-point exception attribution
- Manual OS/hardware variation marks
"""

from __future__ import annotations

import ctypes
import os
import sys

import numpy as np

from effectscope import (
    Const,
    EffectKind,
    ExecutionContext,
    ItemRef,
    format_kind,
)

COUNTERS = {"requests": 0}
LIMIT = 100


def show(label: str, ctx: ExecutionContext) -> None:
    status = "✓" if ctx.valid() else "✗"
    print(f"  {status} {label:<28} {ctx.kind():#06x}  {format_kind(ctx.kind())}")


def main() -> None:
    """Run the audit demo."""
    print("=== Effect Audit ===")

    # Integers only: nothing escapes
    print("\n1. Pure arithmetic")
    ctx = ExecutionContext(EffectKind.pure)
    total = ctx.observe(3) + ctx.observe(Const(LIMIT))
    show(f"3 + LIMIT = {total}", ctx)

    # Mutating caller state is a reference effect
    print("\n2. Reference to module state")
    ctx = ExecutionContext(EffectKind.reference)
    requests = ctx.observe(ItemRef(COUNTERS, "requests"))
    requests.value = requests + 1
    show(f"requests -> {COUNTERS['requests']}", ctx)

    # Floating point reads the rounding mode and may raise exceptions
    print("\n3. Floating point")
    with ExecutionContext(EffectKind.reference | EffectKind.fpe) as ctx:
        ctx.observe(np.float64(1.0) / np.float64(0.0))
        show("1.0 / 0.0 (numpy)", ctx)
        ctx.clear()
        ctx.observe(np.sqrt(np.array([-1.0, 4.0])))
        show("sqrt([-1, 4]) (numpy)", ctx)

    # Any live address is treated as owned memory
    print("\n4. Addresses")
    ctx = ExecutionContext(EffectKind.reference)
    buffer = (ctypes.c_double * 8)()
    ctx.observe(ctypes.cast(buffer, ctypes.POINTER(ctypes.c_double)))
    show("double[8] buffer", ctx)
    ctx.clear()
    ctx.observe(None)
    show("null address", ctx)

    # Platform dependence is declared by the caller
    print("\n5. Variation")
    ctx = ExecutionContext(EffectKind.pure)
    separator = ctx.observe(os.sep)
    ctx.mark_variation_os()
    word_bits = ctx.observe(sys.maxsize.bit_length() + 1)
    ctx.mark_variation_hardware()
    show(f"sep={separator!s} bits={word_bits}", ctx)


if __name__ == "__main__":
    main()
