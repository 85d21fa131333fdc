"""ADTs for kind-word parsing failures."""

from dataclasses import dataclass
from typing import Literal

__all__ = [
    "EmptyKindText",
    "UnknownKindName",
    "KindOutOfRange",
    "KindParseError",
]


@dataclass(frozen=True)
class EmptyKindText:
    """No kind word or name was supplied."""

    message: str = "kind text is empty"
    kind: Literal["EmptyKindText"] = "EmptyKindText"


@dataclass(frozen=True)
class UnknownKindName:
    """A token is neither a number nor an EffectKind/FpeKind member name."""

    token: str
    message: str = ""
    kind: Literal["UnknownKindName"] = "UnknownKindName"


@dataclass(frozen=True)
class KindOutOfRange:
    """A numeric kind word does not fit in the 16-bit effect/FPE word."""

    value: int
    message: str = ""
    kind: Literal["KindOutOfRange"] = "KindOutOfRange"


KindParseError = EmptyKindText | UnknownKindName | KindOutOfRange
