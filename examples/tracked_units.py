#!/usr/bin/env python3
"""
Tracked unit-of-work example.

Demonstrates:
- Loading a context configuration with kind names
- run_tracked and the @tracked decorator
- Handling EffectViolation results
"""

from __future__ import annotations

import json
import logging

from effectscope import (
    Const,
    EffectViolation,
    ExecutionContext,
    Failure,
    ItemRef,
    Result,
    Success,
    TrackedRun,
    build_context_config,
    run_tracked,
    tracked,
)

PRICES = {"widget": 2.5, "gadget": 4.0}
CONFIG_TEXT = '{"permitted": "reference|fpe", "context_type": "terminating"}'


def order_total(ctx: ExecutionContext) -> float:
    """Sum a fixed order against the price table."""
    total = ctx.observe(0.0)
    for item, quantity in (("widget", 3), ("gadget", 1)):
        price = ctx.observe(Const(PRICES[item]))
        total.assign(total + price * quantity)
    return float(total)


@tracked(build_context_config(permitted="reference|fpe").unwrap())
def apply_discount(ctx: ExecutionContext, item: str, rate: float) -> float:
    """Rewrites the caller's price table, so it needs ``reference``."""
    price = ctx.observe(ItemRef(PRICES, item))
    price.value = price * (1.0 - rate)
    return float(price)


@tracked(build_context_config(permitted="pure").unwrap())
def strict_total(ctx: ExecutionContext) -> float:
    """Same computation under a pure-only policy: floating point is disallowed."""
    return order_total(ctx)


def describe(label: str, result: Result[TrackedRun[float], EffectViolation]) -> None:
    match result:
        case Success(run):
            print(f"  ✓ {label}: {run.value:.2f} [{run.report.label}]")
        case Failure(violation):
            print(f"  ✗ {label}: disallowed {'|'.join(violation.report.disallowed)}")


def main() -> None:
    """Run the tracked-unit demo."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    print("=== Tracked Units ===")

    config = build_context_config(**json.loads(CONFIG_TEXT)).unwrap()
    print(f"\nconfig: permitted={config.permitted:#04x} type={config.context_type.value}")

    describe("order_total", run_tracked(order_total, config))
    describe("apply_discount", apply_discount("widget", 0.2))
    describe("strict_total", strict_total())


if __name__ == "__main__":
    main()
