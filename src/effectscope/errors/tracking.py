"""ADTs for tracked-run outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from effectscope.report import EffectReport

__all__ = ["EffectViolation"]


@dataclass(frozen=True)
class EffectViolation:
    """A tracked unit of work exhibited effects outside its permitted set.

    Attributes:
        report: Classification at the end of the run.
        function: Qualified name of the tracked callable.
        kind: Discriminator for pattern matching. Always "EffectViolation".
    """

    report: EffectReport
    function: str = ""
    kind: Literal["EffectViolation"] = "EffectViolation"
