import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 5.0


def backoff_delay(retry_number: int, base: float = DEFAULT_BASE_DELAY, cap: float = DEFAULT_MAX_DELAY) -> float:
    # exponential backoff, capped; no jitter
    return min(base * (2 ** retry_number), cap)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    description: str = "operation",
) -> T:
    """Run ``operation`` up to ``attempts`` times.

    Every exception is retried. Callers that treat some outcome as terminal
    (e.g. "not found") must catch it inside ``operation`` and return instead
    of raising. After the last attempt the final exception is re-raised as is.
    """
    last_exc: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            last_exc = exc
            if attempt == attempts:
                break
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %r",
                description, attempt, attempts, delay, exc,
            )
            await sleep(delay)
    assert last_exc is not None
    raise last_exc


def retry_policy(settings, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> dict:
    """Keyword arguments for ``with_retry`` taken from the service settings."""
    return {
        "attempts": settings.retry_attempts,
        "base_delay": settings.retry_base_delay_seconds,
        "max_delay": settings.retry_max_delay_seconds,
        "sleep": sleep,
    }
