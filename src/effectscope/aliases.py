"""
Argument categories accepted by :meth:`ExecutionContext.observe`.

The region variant, and with it the effect attribution, depends on how the
unit of work relates to the data it touches:

* plain value - the unit of work owns it (``ValueRegion``)
* :class:`Const` - a read-only alias to caller data (``ConstantRegion``)
* :class:`Ref` - a mutable alias to caller data the unit of work does not
  own (``ReferenceRegion``). :class:`ItemRef` aliases ``container[key]``,
  :class:`AttrRef` aliases ``getattr(target, name)``.

Example:
    >>> settings = {"retries": 1}
    >>> retries = ctx.observe(ItemRef(settings, "retries"))
    >>> retries.assign(retries + 1)
    >>> settings["retries"]
    2
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Hashable, MutableMapping, MutableSequence, TypeVar


__all__ = ["AttrRef", "Const", "ItemRef", "Ref"]

T = TypeVar("T")


@dataclass(frozen=True)
class Const(Generic[T]):
    """Read-only alias: the unit of work reads ``value`` but never writes it."""

    value: T


class Ref(ABC, Generic[T]):
    """Mutable alias to storage owned by the caller."""

    @abstractmethod
    def get(self) -> T:
        """Read the caller's current value."""

    @abstractmethod
    def set(self, value: T) -> None:
        """Write ``value`` into the caller's storage."""


@dataclass(frozen=True)
class ItemRef(Ref[T]):
    """Alias to ``container[key]`` of a mutable mapping or sequence."""

    container: MutableMapping[Any, T] | MutableSequence[T]
    key: Hashable

    def get(self) -> T:
        return self.container[self.key]  # type: ignore[index]

    def set(self, value: T) -> None:
        self.container[self.key] = value  # type: ignore[index]


@dataclass(frozen=True)
class AttrRef(Ref[T]):
    """Alias to the attribute ``name`` of ``target``.

    Works for ctypes scalars too: ``AttrRef(c_int(1), "value")``.
    """

    target: object
    name: str

    def get(self) -> T:
        value: T = getattr(self.target, self.name)
        return value

    def set(self, value: T) -> None:
        setattr(self.target, self.name, value)
