"""
Run a unit of work inside a fresh context and judge the result.

:func:`run_tracked` is the boundary where the boolean ``valid()`` verdict is
turned into a :class:`~effectscope.result.Result`::

    >>> def mean(ctx: ExecutionContext) -> float:
    ...     values = ctx.observe(Const([1.0, 2.0, 4.0]))
    ...     return sum(values) / len(values)
    >>> match run_tracked(mean, build_context_config(permitted="reference|fpe").unwrap()):
    ...     case Success(run):
    ...         print(run.value, run.report.label)
    ...     case Failure(violation):
    ...         print("impure:", violation.report.disallowed)

Exceptions raised by the unit of work propagate unchanged.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from effectscope.config import ContextConfig
from effectscope.context import ExecutionContext
from effectscope.errors.tracking import EffectViolation
from effectscope.fenv.environment import FloatingPointEnvironment
from effectscope.report import EffectReport
from effectscope.result import Failure, Result, Success


__all__ = ["TrackedRun", "run_tracked", "tracked"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TrackedRun(Generic[T]):
    """Return value of a tracked unit of work together with its classification."""

    value: T
    report: EffectReport


def _qualified_name(fn: Callable[..., object]) -> str:
    module = getattr(fn, "__module__", None) or ""
    name = getattr(fn, "__qualname__", None) or repr(fn)
    return f"{module}.{name}" if module else name


def run_tracked(
    fn: Callable[[ExecutionContext], T],
    config: ContextConfig,
    *,
    environment: FloatingPointEnvironment | None = None,
) -> Result[TrackedRun[T], EffectViolation]:
    """Call ``fn`` with a new context built from ``config``.

    Returns:
        Success with the value and report when only permitted effects were
        observed, otherwise Failure with an :class:`EffectViolation`.
    """
    with ExecutionContext.from_config(config, environment=environment) as ctx:
        value = fn(ctx)
        report = ctx.report()
    if report.valid:
        return Success(TrackedRun(value=value, report=report))
    function = _qualified_name(fn)
    logger.warning(
        "%s exhibited disallowed effects: %s (kind=%#06x)",
        function,
        "|".join(report.disallowed),
        report.kind,
    )
    return Failure(EffectViolation(report=report, function=function))


def tracked(
    config: ContextConfig,
    *,
    environment: FloatingPointEnvironment | None = None,
) -> Callable[
    [Callable[..., T]],
    Callable[..., Result[TrackedRun[T], EffectViolation]],
]:
    """Decorator form of :func:`run_tracked`.

    The decorated function receives the context as its first argument; the
    wrapper takes the remaining arguments. ``environment`` is passed to every
    run, as in :func:`run_tracked`::

        @tracked(build_context_config(permitted="reference").unwrap())
        def scale(ctx: ExecutionContext, factor: int) -> int:
            return ctx.observe(ItemRef(SETTINGS, "base")) * factor

        scale(3)  # Result[TrackedRun[int], EffectViolation]
    """

    def decorator(
        fn: Callable[..., T],
    ) -> Callable[..., Result[TrackedRun[T], EffectViolation]]:
        @functools.wraps(fn)
        def wrapper(*args: object, **kwargs: object) -> Result[TrackedRun[T], EffectViolation]:
            @functools.wraps(fn)
            def call(ctx: ExecutionContext) -> T:
                return fn(ctx, *args, **kwargs)

            return run_tracked(call, config, environment=environment)

        return wrapper

    return decorator
