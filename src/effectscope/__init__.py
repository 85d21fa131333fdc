"""
effectscope - record what a unit of code actually does.

An :class:`ExecutionContext` accumulates *effects* - non-termination,
exceptions, references to data it does not own, writes to memory it owns,
floating-point exceptions, and OS or hardware variation - for one unit of
work. Values enter the ledger through :meth:`ExecutionContext.observe`, which
returns a region that stands in for the value and reports its effects. At any
point the context can say whether only the declared effects were observed.

Example:
    >>> from effectscope import Const, EffectKind, ExecutionContext, ItemRef
    >>>
    >>> state = {"count": 1}
    >>> ctx = ExecutionContext(EffectKind.reference)
    >>> count = ctx.observe(ItemRef(state, "count"))
    >>> count.value = count + 1
    >>> state["count"], ctx.valid()
    (2, True)
    >>> ctx.clear()
    >>> total = ctx.observe(3) + ctx.observe(Const(2))
    >>> total, ctx.is_pure()
    (5, True)

Nothing here is static analysis: only code that routes its values through a
context is classified, and OS, hardware and abrupt-exit effects are recorded
by the caller with the ``mark_*`` methods.
"""

from __future__ import annotations

from effectscope.aliases import AttrRef, Const, ItemRef, Ref
from effectscope.config import ContextConfig, build_context_config
from effectscope.context import ExecutionContext
from effectscope.errors import (
    ContextCopyError,
    ContextError,
    ContextThreadError,
    RegionConstructionError,
)
from effectscope.errors.tracking import EffectViolation
from effectscope.fenv import (
    FloatingPointEnvironment,
    FpeSource,
    ScriptedFpeSource,
    current_environment,
)
from effectscope.kinds import (
    EFFECT_BITMASK,
    FPE_BITMASK,
    ContextType,
    EffectKind,
    FpeKind,
    format_kind,
    invalid_mask_for,
    kind_names,
    parse_kind,
    split_kind,
)
from effectscope.regions import ConstantRegion, ReferenceRegion, Region, ValueRegion, unwrap
from effectscope.report import EffectReport, build_report
from effectscope.result import Failure, Result, Success
from effectscope.tracking import TrackedRun, run_tracked, tracked


__all__ = [
    # Algebra
    "EFFECT_BITMASK",
    "FPE_BITMASK",
    "ContextType",
    "EffectKind",
    "FpeKind",
    "format_kind",
    "invalid_mask_for",
    "kind_names",
    "parse_kind",
    "split_kind",
    # Context and regions
    "ExecutionContext",
    "Region",
    "ValueRegion",
    "ConstantRegion",
    "ReferenceRegion",
    "unwrap",
    # Argument categories
    "Const",
    "Ref",
    "ItemRef",
    "AttrRef",
    # Floating-point environment
    "FloatingPointEnvironment",
    "FpeSource",
    "ScriptedFpeSource",
    "current_environment",
    # Configuration and diagnostics
    "ContextConfig",
    "build_context_config",
    "EffectReport",
    "build_report",
    "TrackedRun",
    "run_tracked",
    "tracked",
    # Results and errors
    "Result",
    "Success",
    "Failure",
    "EffectViolation",
    "ContextError",
    "ContextThreadError",
    "ContextCopyError",
    "RegionConstructionError",
]
