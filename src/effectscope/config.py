"""
Validated configuration for :class:`~effectscope.context.ExecutionContext`.

``permitted`` may be given as an integer word or as kind names, which keeps
configuration files readable::

    >>> build_context_config(permitted="reference|fpe").unwrap().permitted
    20
    >>> build_context_config(permitted=["reference", "write"]).unwrap().permitted
    12
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from effectscope.kinds import EFFECT_BITMASK, ContextType, parse_kind
from effectscope.result import Failure, Result, Success
from effectscope.validation import validate_model


__all__: list[str] = ["ContextConfig", "build_context_config"]


def _permitted_word(value: object) -> int:
    match value:
        case bool():
            raise ValueError("permitted must be a kind word or kind names, not a bool")
        case int():
            return int(value)
        case str():
            match parse_kind(value):
                case Success(word):
                    return word
                case Failure(error):
                    raise ValueError(error.message)
        case list() | tuple() | set() | frozenset():
            word = 0
            for item in value:
                word |= _permitted_word(item)
            return word
    raise ValueError(f"unsupported permitted value: {value!r}")


class ContextConfig(BaseModel):
    """Configuration for one unit of work.

    Attributes
    ----------
    permitted
        Union of :class:`~effectscope.kinds.EffectKind` flags the unit of work
        may exhibit.
    context_type
        Whether the unit of work is guaranteed to terminate.
    numpy_errors
        Route numpy floating-point errors into the context while it is
        entered with ``with``.
    """

    permitted: Annotated[
        int, Field(ge=0, le=EFFECT_BITMASK, description="Permitted EffectKind flags")
    ] = 0
    context_type: ContextType = ContextType.terminating
    numpy_errors: bool = True

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("permitted", mode="before")
    @classmethod
    def _parse_permitted(cls, value: object) -> int:
        return _permitted_word(value)


def build_context_config(**data: object) -> Result[ContextConfig, ValidationError]:
    """Validate ``data`` into a :class:`ContextConfig`."""
    return validate_model(ContextConfig, **data)
