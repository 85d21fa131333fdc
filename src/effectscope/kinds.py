"""
`effectscope.kinds`
-------------------
The effect classification algebra: two groups of independent bit flags packed
into one integer word.

The low byte holds :class:`EffectKind` (what sort of impurity was observed);
the high byte holds :class:`FpeKind` (which floating-point exceptions were
raised). The groups never share a bit position, so a single ``&`` against a
member or one of the bitmasks answers "has X" without decoding the word.

The numeric values are part of the public contract and appear verbatim in
serialized diagnostics:

==================== ======  ================= ======
EffectKind           value   FpeKind           value
==================== ======  ================= ======
pure                 0x0000  none              0x0000
nonterminating       0x0001  invalid           0x0100
exception            0x0002  divide_by_zero    0x0400
reference            0x0004  overflow          0x0800
write                0x0008  underflow         0x1000
fpe                  0x0010  inexact           0x2000
variation_os         0x0020
variation_hardware   0x0040
(bitmask)            0x00ff  (bitmask)         0xff00
==================== ======  ================= ======
"""

from __future__ import annotations

import re
from enum import Enum, IntFlag
from typing import Final

from effectscope.errors.kinds import (
    EmptyKindText,
    KindOutOfRange,
    KindParseError,
    UnknownKindName,
)
from effectscope.result import Failure, Result, Success, collect_results


__all__ = [
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
]


EFFECT_BITMASK: Final[int] = 0x00FF
FPE_BITMASK: Final[int] = 0xFF00


class ContextType(str, Enum):
    """Whether a unit of work is guaranteed to finish."""

    # no infinite loops and no unbounded timeouts
    terminating = "terminating"
    nonterminating = "nonterminating"


class EffectKind(IntFlag):
    """Effect categories a unit of work may exhibit."""

    pure = 0x0000  # mathematical purity
    nonterminating = 0x0001  # execution may not terminate
    exception = 0x0002  # raise/signal/exit/abort
    reference = 0x0004  # reference to global data not owned
    write = 0x0008  # write to global (heap) data owned
    fpe = 0x0010  # floating-point exceptions, detail in FpeKind
    variation_os = 0x0020  # operating system variation
    variation_hardware = 0x0040  # hardware variation


class FpeKind(IntFlag):
    """Floating-point exceptions, only ever set together with ``EffectKind.fpe``."""

    none = 0x0000
    invalid = 0x0100
    divide_by_zero = 0x0400
    overflow = 0x0800
    underflow = 0x1000
    inexact = 0x2000


_EFFECT_FLAGS: Final[tuple[EffectKind, ...]] = (
    EffectKind.nonterminating,
    EffectKind.exception,
    EffectKind.reference,
    EffectKind.write,
    EffectKind.fpe,
    EffectKind.variation_os,
    EffectKind.variation_hardware,
)

_FPE_FLAGS: Final[tuple[FpeKind, ...]] = (
    FpeKind.invalid,
    FpeKind.divide_by_zero,
    FpeKind.overflow,
    FpeKind.underflow,
    FpeKind.inexact,
)

_NAME_TO_BITS: Final[dict[str, int]] = {
    "pure": 0,
    "none": 0,
    **{str(flag.name): int(flag) for flag in _EFFECT_FLAGS},
    **{str(flag.name): int(flag) for flag in _FPE_FLAGS},
}

_SEPARATORS: Final[re.Pattern[str]] = re.compile(r"[|,+\s]+")


def invalid_mask_for(permitted: int) -> int:
    """Return the EffectKind bits *not* covered by ``permitted``."""
    return ~int(permitted) & EFFECT_BITMASK


def split_kind(word: int) -> tuple[EffectKind, FpeKind]:
    """Separate a kind word into its effect and FPE halves."""
    return EffectKind(word & EFFECT_BITMASK), FpeKind(word & FPE_BITMASK)


def kind_names(word: int) -> list[str]:
    """Names of every flag set in ``word``: effects first, then FPE details.

    A word with no bits set is reported as ``["pure"]``.
    """
    names = [str(flag.name) for flag in _EFFECT_FLAGS if word & flag]
    names.extend(str(flag.name) for flag in _FPE_FLAGS if word & flag)
    return names if names else ["pure"]


def format_kind(word: int) -> str:
    """Render ``word`` as ``"reference|fpe|inexact"`` style text."""
    return "|".join(kind_names(word))


def _parse_token(token: str) -> Result[int, KindParseError]:
    name = token.lower()
    if name in _NAME_TO_BITS:
        return Success(_NAME_TO_BITS[name])
    try:
        value = int(token, 0)
    except ValueError:
        return Failure(UnknownKindName(token=token, message=f"unknown kind name: {token!r}"))
    if not 0 <= value <= EFFECT_BITMASK | FPE_BITMASK:
        return Failure(
            KindOutOfRange(value=value, message=f"kind word out of range: {value:#x}")
        )
    return Success(value)


def parse_kind(text: str) -> Result[int, KindParseError]:
    """Parse a kind word from user text.

    Accepts a decimal or ``0x`` hex literal, or member names separated by
    ``|``, ``,`` or ``+`` (``"reference|fpe|inexact"``). Names from both
    groups may be mixed. Unknown names and out-of-range numbers fail.
    """
    tokens = [token for token in _SEPARATORS.split(text.strip()) if token]
    if not tokens:
        return Failure(EmptyKindText())
    match collect_results([_parse_token(token) for token in tokens]):
        case Success(values):
            word = 0
            for value in values:
                word |= value
            return Success(word)
        case Failure(error):
            return Failure(error)
    raise AssertionError("Unreachable: Result match exhaustive")
