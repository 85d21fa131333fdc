"""Serializable effect diagnostics."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from effectscope.kinds import (
    EFFECT_BITMASK,
    FPE_BITMASK,
    format_kind,
    invalid_mask_for,
    kind_names,
)


__all__: list[str] = ["EffectReport", "build_report"]


class EffectReport(BaseModel):
    """Snapshot of a context's classification.

    ``kind``, ``permitted`` and ``invalid_mask`` carry the raw words with the
    public bit values; the name lists are derived from them for humans.
    """

    kind: int
    label: str
    effects: list[str]
    fpe: list[str]
    permitted: int
    invalid_mask: int
    disallowed: list[str]
    valid: bool

    model_config = ConfigDict(frozen=True, extra="forbid")


def _names(word: int) -> list[str]:
    return [] if word == 0 else kind_names(word)


def build_report(kind: int, permitted: int) -> EffectReport:
    """Describe ``kind`` against the ``permitted`` effect flags."""
    invalid_mask = invalid_mask_for(permitted)
    return EffectReport(
        kind=kind,
        label=format_kind(kind),
        effects=_names(kind & EFFECT_BITMASK),
        fpe=_names(kind & FPE_BITMASK),
        permitted=permitted,
        invalid_mask=invalid_mask,
        disallowed=_names(kind & invalid_mask),
        valid=(kind & invalid_mask) == 0,
    )
