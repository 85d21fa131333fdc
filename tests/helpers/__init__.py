# tests/helpers/__init__.py
"""Shared test utilities for the effectscope test suite.

Usage:
    >>> from tests.helpers import ContextFactory, expect_success, divide
"""

from __future__ import annotations

from typing import Callable

from effectscope import ExecutionContext
from tests.helpers.operands import DBL_MAX, DBL_MIN, INF, divide, multiply, subtract
from tests.helpers.result_utils import expect_failure, expect_success

ContextFactory = Callable[..., ExecutionContext]
"""Signature of the ``make_context`` fixture."""

__all__ = [
    "ContextFactory",
    "DBL_MAX",
    "DBL_MIN",
    "INF",
    "divide",
    "expect_failure",
    "expect_success",
    "multiply",
    "subtract",
]
