"""
Retry mechanism for resilient operations.
"""

import asyncio
from typing import Any, Optional, Callable, Awaitable

from shared.logging import get_logger


class RetryConfig:
    """Configuration for retry behavior.

    ``max_retries`` counts retries after the first attempt, so an operation
    runs at most ``max_retries + 1`` times. The delay before retry ``n``
    (0-based) is ``base_delay * exponential_base ** n``.
    """

    def __init__(self,
                 max_retries: int = 3,
                 base_delay: float = 1.0,
                 max_delay: float = 60.0,
                 exponential_base: float = 2.0):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base


def _always(exc: BaseException) -> bool:
    return True


async def retry_async(operation: Callable[[], Awaitable[Any]],
                      config: Optional[RetryConfig] = None,
                      is_retryable: Callable[[BaseException], bool] = _always,
                      sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
                      name: str = "operation") -> Any:
    """Run ``operation`` with bounded exponential backoff.

    Exceptions for which ``is_retryable`` is false propagate immediately.
    When retries are exhausted the last exception propagates unchanged.
    """
    if config is None:
        config = RetryConfig()

    logger = get_logger(f"retry.{name}")
    attempt = 0

    while True:
        try:
            result = await operation()

            if attempt > 0:
                logger.info("Retry succeeded", attempt=attempt + 1, function=name)

            return result

        except Exception as e:
            if not is_retryable(e):
                raise

            if attempt >= config.max_retries:
                logger.error(
                    "All retry attempts exhausted",
                    attempts=attempt + 1,
                    max_retries=config.max_retries,
                    function=name,
                    error=str(e)
                )
                raise

            delay = _calculate_delay(attempt, config)

            logger.warning(
                "Retry attempt failed, waiting before next attempt",
                attempt=attempt + 1,
                max_retries=config.max_retries,
                delay=delay,
                function=name,
                error=str(e)
            )

            await sleep(delay)
            attempt += 1


def _calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay before retry number ``attempt`` (0-based)."""
    delay = config.base_delay * (config.exponential_base ** attempt)
    return min(delay, config.max_delay)
