"""
`effectscope.context`
---------------------
:class:`ExecutionContext` is the effect ledger for one unit of work.

The caller declares which :class:`~effectscope.kinds.EffectKind` flags the
unit of work may exhibit and whether it is guaranteed to terminate, then
passes every value, constant and reference it touches through
:meth:`ExecutionContext.observe`. Each returned region adds its effects to
the context. Effects only accumulate; :meth:`ExecutionContext.clear` is the
one way to drop them.

Floating-point exceptions are attributed lazily. Whenever a floating-point
value is observed, and before every query except :meth:`kind`, the context
samples its :class:`~effectscope.fenv.FloatingPointEnvironment` and adds
``fpe`` plus the raised :class:`~effectscope.kinds.FpeKind` bits, clearing
the flags so nothing is counted twice.

Example:
    >>> with ExecutionContext(EffectKind.reference | EffectKind.fpe) as ctx:
    ...     two, three = 2.0, 3.0
    ...     ratio = ctx.observe(two / three)
    ...     ctx.valid()
    True
    >>> format_kind(ctx.kind())  # inexact where the host reports it
    'reference|fpe|inexact'

Threading
---------
The floating-point flags belong to the native thread, so a context is bound
to the thread that created it. Calls from any other thread raise
:class:`~effectscope.errors.ContextThreadError`.

``clear()`` resets to ``pure`` unconditionally, including for contexts
created as ``nonterminating``.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from types import TracebackType
from typing import Literal, NoReturn, TypeVar, overload

from effectscope.aliases import Const, Ref
from effectscope.classify import is_floating_point, is_memory_owned
from effectscope.config import ContextConfig
from effectscope.errors.context import ContextCopyError, ContextThreadError
from effectscope.fenv.environment import FloatingPointEnvironment, current_environment
from effectscope.kinds import ContextType, EffectKind, format_kind, invalid_mask_for
from effectscope.regions import (
    _CONTEXT_TOKEN,
    ConstantRegion,
    ReferenceRegion,
    Region,
    ValueRegion,
)
from effectscope.report import EffectReport, build_report


__all__ = ["ExecutionContext"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExecutionContext:
    """Accumulated effect classification for one unit of work.

    Args:
        permitted: Union of EffectKind flags the unit of work may exhibit.
        context_type: ``nonterminating`` pre-accumulates
            ``EffectKind.nonterminating``.
        environment: Floating-point environment to sample; defaults to the
            calling thread's :func:`~effectscope.fenv.current_environment`.
        numpy_errors: Install the numpy error hook while entered with ``with``.
    """

    def __init__(
        self,
        permitted: int,
        context_type: ContextType = ContextType.terminating,
        *,
        environment: FloatingPointEnvironment | None = None,
        numpy_errors: bool = True,
    ) -> None:
        self._permitted = int(permitted)
        self._invalid_mask = invalid_mask_for(self._permitted)
        self._context_type = context_type
        self._kind = int(EffectKind.pure)
        if context_type is ContextType.nonterminating:
            self._kind = int(EffectKind.nonterminating)
        self._environment = environment if environment is not None else current_environment()
        self._numpy_errors = numpy_errors
        self._owner_thread = threading.get_ident()
        self._entered: list[contextlib.AbstractContextManager[object]] = []
        # flags raised before this context existed are not ours
        self._environment.clear()
        logger.debug(
            "context created: permitted=%s invalid_mask=%#06x type=%s",
            format_kind(self._permitted),
            self._invalid_mask,
            context_type.value,
        )

    @classmethod
    def from_config(
        cls,
        config: ContextConfig,
        *,
        environment: FloatingPointEnvironment | None = None,
    ) -> ExecutionContext:
        """Build a context from a validated :class:`ContextConfig`."""
        return cls(
            config.permitted,
            config.context_type,
            environment=environment,
            numpy_errors=config.numpy_errors,
        )

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def permitted(self) -> int:
        return self._permitted

    @property
    def invalid_mask(self) -> int:
        """EffectKind bits that make :meth:`valid` false."""
        return self._invalid_mask

    @property
    def context_type(self) -> ContextType:
        return self._context_type

    @property
    def environment(self) -> FloatingPointEnvironment:
        return self._environment

    # ------------------------------------------------------------------ #
    # Observation
    # ------------------------------------------------------------------ #

    @overload
    def observe(self, value: Const[T]) -> ConstantRegion[T]: ...

    @overload
    def observe(self, value: Ref[T]) -> ReferenceRegion[T]: ...

    @overload
    def observe(self, value: Region[T]) -> ValueRegion[T]: ...

    @overload
    def observe(self, value: T) -> ValueRegion[T]: ...

    def observe(self, value: object) -> Region[object]:
        """Wrap ``value`` in the region matching its category and report it.

        * ``Const(x)`` -> :class:`ConstantRegion`
        * ``ItemRef``/``AttrRef`` -> :class:`ReferenceRegion`
        * a region -> :class:`ValueRegion` of its current value
        * anything else -> :class:`ValueRegion`
        """
        self._check_thread()
        match value:
            case Const(value=constant):
                return ConstantRegion(self, constant, _CONTEXT_TOKEN)
            case Ref():
                return ReferenceRegion(self, value, _CONTEXT_TOKEN)
            case Region():
                return ValueRegion(self, value.value, _CONTEXT_TOKEN)
            case _:
                return ValueRegion(self, value, _CONTEXT_TOKEN)

    # ------------------------------------------------------------------ #
    # Manual annotations
    # ------------------------------------------------------------------ #

    def mark_exception(self) -> None:
        """Record that execution may raise, signal, exit or abort."""
        self._update(EffectKind.exception, floating_point=False)

    def mark_variation_os(self) -> None:
        """Record behaviour that depends on the operating system.

        A path helper returning ``/`` separators on POSIX and ``\\`` on
        Windows is an example.
        """
        self._update(EffectKind.variation_os, floating_point=False)

    def mark_variation_hardware(self) -> None:
        """Record behaviour that depends on the hardware.

        A result whose range depends on the native word size is an example.
        """
        self._update(EffectKind.variation_hardware, floating_point=False)

    def clear(self) -> None:
        """Reset to ``pure`` and discard pending floating-point exceptions."""
        self._check_thread()
        self._kind = int(EffectKind.pure)
        self._environment.clear()
        logger.debug("context cleared")

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def kind(self) -> int:
        """Accumulated EffectKind | FpeKind word, without sampling."""
        self._check_thread()
        return self._kind

    def valid(self) -> bool:
        """True when no effect outside ``permitted`` has been observed."""
        self._sample()
        return (self._kind & self._invalid_mask) == 0

    def is_pure(self) -> bool:
        self._sample()
        return self._kind == EffectKind.pure

    def has_nonterminating(self) -> bool:
        return self._has(EffectKind.nonterminating)

    def has_exception(self) -> bool:
        return self._has(EffectKind.exception)

    def has_reference(self) -> bool:
        return self._has(EffectKind.reference)

    def has_write(self) -> bool:
        return self._has(EffectKind.write)

    @overload
    def has_fpe(self) -> bool: ...

    @overload
    def has_fpe(self, *, with_kind: Literal[False]) -> bool: ...

    @overload
    def has_fpe(self, *, with_kind: Literal[True]) -> tuple[bool, int]: ...

    def has_fpe(self, *, with_kind: bool = False) -> bool | tuple[bool, int]:
        """Whether a floating-point exception was observed.

        With ``with_kind=True`` the full kind word is returned alongside, so
        the FpeKind detail can be read from the same sample.
        """
        result = self._has(EffectKind.fpe)
        if with_kind:
            return result, self._kind
        return result

    def has_variation_os(self) -> bool:
        return self._has(EffectKind.variation_os)

    def has_variation_hardware(self) -> bool:
        return self._has(EffectKind.variation_hardware)

    def report(self) -> EffectReport:
        """Sample, then describe the current classification."""
        self._sample()
        return build_report(self._kind, self._permitted)

    # ------------------------------------------------------------------ #
    # Region reports
    # ------------------------------------------------------------------ #

    def _report_value(self, value: object) -> None:
        kind = EffectKind.pure
        if is_memory_owned(value):
            kind |= EffectKind.write
        floating_point = is_floating_point(value)
        if floating_point:
            # floating-point use reads the global rounding mode
            kind |= EffectKind.reference
        self._update(kind, floating_point=floating_point)

    def _report_constant(self, constant: object) -> None:
        kind = EffectKind.pure
        if is_memory_owned(constant):
            kind |= EffectKind.write
        floating_point = is_floating_point(constant)
        if floating_point:
            kind |= EffectKind.reference
        self._update(kind, floating_point=floating_point)

    def _report_reference(self, referent: object) -> None:
        kind = EffectKind.reference
        if is_memory_owned(referent):
            kind |= EffectKind.write
        self._update(kind, floating_point=is_floating_point(referent))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _update(self, kind: int, *, floating_point: bool) -> None:
        self._check_thread()
        if floating_point:
            raised = self._environment.sample()
            if raised:
                kind |= EffectKind.fpe | raised
        self._kind = int(self._kind | kind)

    def _sample(self) -> None:
        self._update(EffectKind.pure, floating_point=True)

    def _has(self, flag: EffectKind) -> bool:
        self._sample()
        return bool(self._kind & flag)

    def _check_thread(self) -> None:
        current = threading.get_ident()
        if current != self._owner_thread:
            raise ContextThreadError(self._owner_thread, current)

    # ------------------------------------------------------------------ #
    # Protocols
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ExecutionContext:
        self._check_thread()
        manager: contextlib.AbstractContextManager[object] = (
            self._environment.errstate() if self._numpy_errors else contextlib.nullcontext()
        )
        manager.__enter__()
        self._entered.append(manager)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        manager = self._entered.pop()
        manager.__exit__(exc_type, exc, traceback)

    def __copy__(self) -> NoReturn:
        raise ContextCopyError("copied")

    def __deepcopy__(self, memo: dict[int, object]) -> NoReturn:
        raise ContextCopyError("deep-copied")

    def __reduce_ex__(self, protocol: object) -> NoReturn:
        raise ContextCopyError("pickled")

    def __repr__(self) -> str:
        return (
            f"ExecutionContext(kind={format_kind(self._kind)!r}, "
            f"permitted={format_kind(self._permitted)!r}, "
            f"context_type={self._context_type.value!r})"
        )
