"""
Async harness shared by the Oracle-facing components.

- ``bounded``: wraps one Oracle call in a timeout surfaced as ``OracleTimeout``.
- ``Outcome`` / ``settle``: turn a branch of a fan-out into an explicit
  success/failure value so the join point can apply per-branch policy.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar

from loguru import logger

from .errors import LingoPopError, OracleTimeout

T = TypeVar("T")


async def bounded(call: Awaitable[T], *, operation: str, timeout: float) -> T:
    """Await an Oracle call, failing with OracleTimeout after ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning(f"Oracle {operation} exceeded {timeout:g}s")
        raise OracleTimeout(operation, timeout) from exc


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of one fan-out branch: exactly one of value/error is meaningful."""

    value: T | None = None
    error: LingoPopError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle(
    call: Awaitable[T], failure: type[LingoPopError] = LingoPopError
) -> Outcome[T]:
    """
    Await ``call`` and capture its failure instead of raising it.

    Taxonomy errors are kept as they are; anything else is wrapped in
    ``failure`` so a branch can never escape the join.
    """
    try:
        return Outcome(value=await call)
    except LingoPopError as exc:
        return Outcome(error=exc)
    except Exception as exc:
        logger.opt(exception=exc).warning(f"Unexpected {type(exc).__name__} in fan-out branch")
        error = failure(f"{type(exc).__name__}: {exc}")
        error.__cause__ = exc
        return Outcome(error=error)
