"""effectscope error types: Result ADTs and the context misuse hierarchy.

Import :class:`EffectViolation` from :mod:`effectscope.errors.tracking`.
"""

from effectscope.errors.context import (
    ContextCopyError,
    ContextError,
    ContextThreadError,
    RegionConstructionError,
)
from effectscope.errors.kinds import (
    EmptyKindText,
    KindOutOfRange,
    KindParseError,
    UnknownKindName,
)

__all__ = [
    "ContextCopyError",
    "ContextError",
    "ContextThreadError",
    "RegionConstructionError",
    "EmptyKindText",
    "KindOutOfRange",
    "KindParseError",
    "UnknownKindName",
]
