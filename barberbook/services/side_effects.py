"""Bounded execution of blocking calls to external collaborators."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class SideEffectOutcome:
    """Result of one best-effort step that followed a committed transition."""

    name: str
    succeeded: bool
    error: str | None = None


async def call_with_timeout(
    func: Callable[..., T], *args: Any, timeout: float
) -> T:
    """Run a blocking callable in a worker thread, bounded by ``timeout`` seconds.

    Raises :class:`TimeoutError` when the bound is exceeded; the worker thread is
    left to finish on its own.
    """
    return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)


async def best_effort(
    name: str, func: Callable[..., Any], *args: Any, timeout: float
) -> SideEffectOutcome:
    """Run a side effect, logging and reporting failure instead of raising."""
    try:
        await call_with_timeout(func, *args, timeout=timeout)
    except TimeoutError:
        logger.warning("Side effect %s timed out after %.1fs", name, timeout)
        return SideEffectOutcome(name=name, succeeded=False, error="timeout")
    except Exception as exc:
        logger.exception("Side effect %s failed", name)
        return SideEffectOutcome(
            name=name, succeeded=False, error=str(exc) or type(exc).__name__
        )
    return SideEffectOutcome(name=name, succeeded=True)
