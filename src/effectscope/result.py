"""
Result type for the fallible edges of effectscope.

The effect-tracking core is total and never returns errors. The edges around
it (configuration, kind parsing, loading the C floating-point environment,
tracked runs) can fail, and they report that through ``Result[T, E]`` instead
of raising.

Usage:
    >>> match parse_kind("reference|fpe"):
    ...     case Success(word):
    ...         print(hex(word))
    ...     case Failure(error):
    ...         print(error.message)
    0x14
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar


T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Represents a successful result containing a value of type T."""

    value: T

    def unwrap(self) -> T:
        """Unwrap the success value. Safe to call on Success."""
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Represents a failed result containing an error of type E."""

    error: E

    def unwrap(self) -> NoReturn:
        """
        Unwrap the success value.

        Raises:
            RuntimeError: Always, since Failure has no value.
        """
        raise RuntimeError(f"Called unwrap() on Failure: {self.error}")


Result = Success[T] | Failure[E]


def collect_results(results: list[Result[T, E]]) -> Result[list[T], E]:
    """
    Collect a list of Results into a Result of list.

    Returns the first Failure encountered, otherwise Success with every value
    in order.
    """
    first_failure = next((result for result in results if isinstance(result, Failure)), None)
    return (
        first_failure
        if isinstance(first_failure, Failure)
        else Success([result.value for result in results if isinstance(result, Success)])
    )


__all__ = ["Failure", "Result", "Success", "collect_results"]
