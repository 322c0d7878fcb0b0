"""
Shared plumbing for the scoring strategies.

Every strategy run goes through `guarded`, and every plain store read the
service makes itself goes through `guarded_read`. Both are bounded by a
timeout; any failure is logged and turned into an empty result, so one
unavailable store never aborts a whole ranking call. Strategy failures and
read failures are counted under separate metrics. Cancellation of the caller
is not caught and propagates as usual.
"""
import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from opentelemetry import trace

from feed_ranker.config import EngineConfig
from feed_ranker.errors import StoreUnavailable
from feed_ranker.telemetry import (
    SCORER_CANDIDATES_TOTAL,
    SCORER_FAILURES_TOTAL,
    STORE_READ_FAILURES_TOTAL,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

T = TypeVar("T")

# Returns a float in [0, 1). Tests pin it to `lambda: 0.0`.
RandomSource = Callable[[], float]
Clock = Callable[[], datetime]


def default_random_source() -> float:
    return random.random()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def _bounded(
    span_name: str,
    label: str,
    work: Awaitable[list[T]],
    timeout: float,
) -> list[T] | None:
    """Await `work` under a timeout; None means it failed and was logged."""
    with tracer.start_as_current_span(span_name) as span:
        try:
            result = await asyncio.wait_for(work, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "%s timed out after %.2fs — contributing nothing", label, timeout
            )
        except StoreUnavailable as exc:
            logger.warning("%s: %s — contributing nothing", label, exc)
        except Exception as exc:
            logger.warning(
                "%s failed unexpectedly: %r — contributing nothing", label, exc
            )
        else:
            span.set_attribute("result.size", len(result))
            return result
        span.set_attribute("failed", True)
        return None


async def guarded(
    strategy: str,
    work: Awaitable[list[T]],
    timeout: float,
) -> list[T]:
    """Run one strategy's reads; degrade to [] on timeout or store failure."""
    result = await _bounded(
        f"strategy.{strategy}", f"{strategy} strategy", work, timeout
    )
    if result is None:
        SCORER_FAILURES_TOTAL.labels(strategy=strategy).inc()
        return []
    SCORER_CANDIDATES_TOTAL.labels(strategy=strategy).inc(len(result))
    return result


async def guarded_read(
    operation: str,
    work: Awaitable[list[T]],
    timeout: float,
) -> list[T]:
    """Same contract as `guarded` for the service's own store reads."""
    result = await _bounded(f"read.{operation}", f"{operation} read", work, timeout)
    if result is None:
        STORE_READ_FAILURES_TOTAL.labels(operation=operation).inc()
        return []
    return result


class Strategy:
    """Base for the scorers: holds config and the guarded runner."""

    name = "strategy"

    def __init__(self, config: EngineConfig) -> None:
        self.config = config

    async def _guarded(self, work: Awaitable[list[T]]) -> list[T]:
        return await guarded(self.name, work, self.config.strategy_timeout_seconds)
