"""
Effect regions: tracked wrappers handed out by :meth:`ExecutionContext.observe`.

A region reports its effect profile to the context that created it when it is
constructed and again every time it is reassigned. Reports only ever add bits
to the context.

==================  =====================  ===================================
Region              Created from           Reports
==================  =====================  ===================================
``ValueRegion``     plain value            ``write`` for a non-null address
``ConstantRegion``  ``Const(value)``       ``write`` for a non-null address
``ReferenceRegion`` ``ItemRef``/``AttrRef`` ``reference``, plus ``write`` for a
                                           non-null address
==================  =====================  ===================================

A value region additionally reports ``reference`` when its value is floating
point (floating-point arithmetic consults the process-wide rounding mode).
Every floating-point report also samples the floating-point exception flags,
adding ``fpe`` plus the raised :class:`~effectscope.kinds.FpeKind` bits.

Regions stand in for their value in expressions: arithmetic, comparisons and
conversions all act on the wrapped value, and region operands are unwrapped::

    >>> total = ctx.observe(3) + ctx.observe(Const(2))
    >>> total
    5
"""

from __future__ import annotations

import copy
import math
import operator
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterator, TypeVar

from effectscope.aliases import Ref
from effectscope.errors.context import RegionConstructionError


if TYPE_CHECKING:
    from effectscope.context import ExecutionContext


__all__ = ["ConstantRegion", "ReferenceRegion", "Region", "ValueRegion", "unwrap"]

T = TypeVar("T")

# Handed to region constructors by ExecutionContext only.
_CONTEXT_TOKEN = object()


def unwrap(value: object) -> object:
    """Return the wrapped value of a region, or ``value`` itself."""
    if isinstance(value, Region):
        return value.value
    return value


def _binary(op: Callable[[Any, Any], Any]) -> Callable[[Region[Any], object], Any]:
    def method(self: Region[Any], other: object) -> Any:
        return op(self.value, unwrap(other))

    method.__name__ = f"__{op.__name__.strip('_')}__"
    return method


def _reflected(op: Callable[[Any, Any], Any]) -> Callable[[Region[Any], object], Any]:
    def method(self: Region[Any], other: object) -> Any:
        return op(unwrap(other), self.value)

    method.__name__ = f"__r{op.__name__.strip('_')}__"
    return method


def _unary(op: Callable[[Any], Any]) -> Callable[[Region[Any]], Any]:
    def method(self: Region[Any]) -> Any:
        return op(self.value)

    method.__name__ = f"__{op.__name__.strip('_')}__"
    return method


class Region(ABC, Generic[T]):
    """Common behaviour of the three region variants.

    Regions are cheap to copy; a copy keeps reporting to the same context.
    ``copy.deepcopy`` duplicates the wrapped value but still shares the
    context, and a reference region keeps aliasing the same caller storage.
    Copies report nothing until they are reassigned.
    """

    __slots__ = ("_context",)

    def __init__(self, context: ExecutionContext, token: object) -> None:
        if token is not _CONTEXT_TOKEN:
            raise RegionConstructionError(type(self).__name__)
        self._context = context

    @property
    def context(self) -> ExecutionContext:
        """The context this region reports to."""
        return self._context

    @property
    @abstractmethod
    def value(self) -> T:
        """The wrapped value."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"

    def __str__(self) -> str:
        return str(self.value)

    def __format__(self, format_spec: str) -> str:
        return format(self.value, format_spec)

    # comparison
    __eq__ = _binary(operator.eq)  # type: ignore[assignment]
    __ne__ = _binary(operator.ne)  # type: ignore[assignment]
    __lt__ = _binary(operator.lt)
    __le__ = _binary(operator.le)
    __gt__ = _binary(operator.gt)
    __ge__ = _binary(operator.ge)

    # arithmetic
    __add__ = _binary(operator.add)
    __radd__ = _reflected(operator.add)
    __sub__ = _binary(operator.sub)
    __rsub__ = _reflected(operator.sub)
    __mul__ = _binary(operator.mul)
    __rmul__ = _reflected(operator.mul)
    __truediv__ = _binary(operator.truediv)
    __rtruediv__ = _reflected(operator.truediv)
    __floordiv__ = _binary(operator.floordiv)
    __rfloordiv__ = _reflected(operator.floordiv)
    __mod__ = _binary(operator.mod)
    __rmod__ = _reflected(operator.mod)
    __pow__ = _binary(operator.pow)
    __rpow__ = _reflected(operator.pow)
    __matmul__ = _binary(operator.matmul)
    __rmatmul__ = _reflected(operator.matmul)

    # bitwise
    __and__ = _binary(operator.and_)
    __rand__ = _reflected(operator.and_)
    __or__ = _binary(operator.or_)
    __ror__ = _reflected(operator.or_)
    __xor__ = _binary(operator.xor)
    __rxor__ = _reflected(operator.xor)
    __lshift__ = _binary(operator.lshift)
    __rlshift__ = _reflected(operator.lshift)
    __rshift__ = _binary(operator.rshift)
    __rrshift__ = _reflected(operator.rshift)

    __neg__ = _unary(operator.neg)
    __pos__ = _unary(operator.pos)
    __abs__ = _unary(operator.abs)
    __invert__ = _unary(operator.invert)

    def __hash__(self) -> int:
        return hash(self.value)

    def __bool__(self) -> bool:
        return bool(self.value)

    def __float__(self) -> float:
        return float(self.value)  # type: ignore[arg-type]

    def __int__(self) -> int:
        return int(self.value)  # type: ignore[call-overload]

    def __index__(self) -> int:
        return operator.index(self.value)

    def __round__(self, ndigits: int | None = None) -> Any:
        return round(self.value, ndigits)  # type: ignore[call-overload]

    def __trunc__(self) -> int:
        return math.trunc(self.value)  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self.value)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.value)  # type: ignore[call-overload, no-any-return]

    def __contains__(self, item: object) -> bool:
        return unwrap(item) in self.value  # type: ignore[operator]

    def __getitem__(self, key: object) -> Any:
        return self.value[unwrap(key)]  # type: ignore[index]


class ValueRegion(Region[T]):
    """Region around a value owned by the unit of work."""

    __slots__ = ("_value",)

    def __init__(self, context: ExecutionContext, value: T, token: object) -> None:
        super().__init__(context, token)
        self._value = value
        context._report_value(self._value)

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        self.assign(value)

    def assign(self, value: T | Region[T]) -> ValueRegion[T]:
        """Replace the wrapped value and report it again."""
        self._value = value.value if isinstance(value, Region) else value
        self._context._report_value(self._value)
        return self

    def __deepcopy__(self, memo: dict[int, object]) -> ValueRegion[T]:
        duplicate = copy.copy(self)
        memo[id(self)] = duplicate
        duplicate._value = copy.deepcopy(self._value, memo)
        return duplicate


class ConstantRegion(Region[T]):
    """Region around a read-only alias to caller data. It has no assignment."""

    __slots__ = ("_constant",)

    def __init__(self, context: ExecutionContext, constant: T, token: object) -> None:
        super().__init__(context, token)
        self._constant = constant
        context._report_constant(self._constant)

    @property
    def value(self) -> T:
        return self._constant

    def __deepcopy__(self, memo: dict[int, object]) -> ConstantRegion[T]:
        duplicate = copy.copy(self)
        memo[id(self)] = duplicate
        duplicate._constant = copy.deepcopy(self._constant, memo)
        return duplicate


class ReferenceRegion(Region[T]):
    """Region around a mutable alias to caller data the unit of work does not own.

    Reads and assignments go straight through to the caller's storage.
    """

    __slots__ = ("_reference",)

    def __init__(self, context: ExecutionContext, reference: Ref[T], token: object) -> None:
        super().__init__(context, token)
        self._reference = reference
        context._report_reference(self._reference.get())

    @property
    def reference(self) -> Ref[T]:
        return self._reference

    @property
    def value(self) -> T:
        return self._reference.get()

    @value.setter
    def value(self, value: T) -> None:
        self.assign(value)

    def assign(self, value: T | Region[T]) -> ReferenceRegion[T]:
        """Write ``value`` through to the caller and report it again."""
        new_value: T = value.value if isinstance(value, Region) else value
        self._reference.set(new_value)
        self._context._report_reference(self._reference.get())
        return self

    def __deepcopy__(self, memo: dict[int, object]) -> ReferenceRegion[T]:
        # still aliases the caller storage
        duplicate = copy.copy(self)
        memo[id(self)] = duplicate
        return duplicate
