# src/effectscope/errors/context.py
"""Exception hierarchy for ExecutionContext misuse.

The effect-tracking operations themselves cannot fail. These exceptions only
signal contract violations by the caller: using a context from a thread that
did not create it, duplicating a context, or building a region by hand.
"""

from __future__ import annotations


class ContextError(Exception):
    """Base exception for ExecutionContext contract violations."""

    pass


class ContextThreadError(ContextError):
    """A context was used from a thread other than the one that created it."""

    def __init__(self, owner_thread: int, current_thread: int) -> None:
        self.owner_thread = owner_thread
        self.current_thread = current_thread
        super().__init__(
            f"ExecutionContext created on thread {owner_thread} "
            f"used from thread {current_thread}"
        )


class ContextCopyError(ContextError, TypeError):
    """A context was copied, deep-copied or pickled."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"ExecutionContext cannot be {operation}: "
            "a copy would split one effect ledger in two"
        )


class RegionConstructionError(ContextError, TypeError):
    """A region was constructed outside ExecutionContext.observe."""

    def __init__(self, region_type: str) -> None:
        self.region_type = region_type
        super().__init__(f"{region_type} instances are created by ExecutionContext.observe")
