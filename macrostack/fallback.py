"""Section results and ordered fallback chains.

Each adapter describes its degrade path as a list of :class:`Strategy`
objects, best source first.  :func:`run_chain` evaluates them in order
and returns a :class:`SectionResult`, from which the pipeline derives the
snapshot's ``errors`` list mechanically.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

import httpx

from ._http import _sanitize_exc
from .error_taxonomy import PayloadError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Status = Literal["success", "degraded", "unavailable"]

# Failures a strategy may raise that mean "try the next tier".
SOFT_FAILURES: tuple[type[Exception], ...] = (httpx.HTTPError, PayloadError)


@dataclass(frozen=True, slots=True)
class SectionResult(Generic[T]):
    status: Status
    value: T | None = None
    reason: str = ""

    @classmethod
    def success(cls, value: T) -> SectionResult[T]:
        return cls("success", value)

    @classmethod
    def degraded(cls, value: T, reason: str) -> SectionResult[T]:
        return cls("degraded", value, reason)

    @classmethod
    def unavailable(cls, reason: str) -> SectionResult[T]:
        return cls("unavailable", None, reason)

    @property
    def ok(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True, slots=True)
class Strategy(Generic[T]):
    """One tier of a fallback chain.  ``fn()`` returns a value or ``None``."""

    name: str
    fn: Callable[[], T | None]


def run_chain(section: str, strategies: Sequence[Strategy[Any]]) -> SectionResult[Any]:
    """Evaluate *strategies* in order until one yields a value.

    Tiers are exclusive: the first value wins and is never blended with
    another tier's output.  The first tier counts as ``success``; a value
    from any later tier is ``degraded`` with a reason naming the tiers
    that failed before it.
    """
    failures: list[str] = []
    for idx, strategy in enumerate(strategies):
        try:
            value = strategy.fn()
        except SOFT_FAILURES as exc:
            logger.warning(
                "%s: %s failed – %s: %s",
                section, strategy.name, type(exc).__name__, _sanitize_exc(exc),
            )
            failures.append(f"{strategy.name}: {type(exc).__name__}")
            continue
        if value is None:
            logger.warning("%s: %s returned no result", section, strategy.name)
            failures.append(f"{strategy.name}: no result")
            continue
        if idx == 0:
            return SectionResult.success(value)
        reason = "; ".join(failures)
        logger.info("%s: served by fallback tier %r (%s)", section, strategy.name, reason)
        return SectionResult.degraded(value, reason)
    return SectionResult.unavailable("; ".join(failures) or "no strategies")
