"""
Bounded retry with exponential backoff for async operations.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    multiplier: float = 2.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Call ``func`` until it succeeds or the attempt limit is reached.

    Args:
        func: Zero-argument coroutine function to call.
        max_attempts: Maximum number of calls (at least 1).
        initial_delay: Seconds to wait before the second attempt.
        multiplier: Factor applied to the delay after every failed attempt.
        retry_on: Exception types that trigger another attempt. Anything
            else propagates immediately.
        sleep: Awaitable sleep function.

    Returns:
        The first successful result.

    Raises:
        The exception from the last attempt once attempts are exhausted.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    delay = initial_delay
    for attempt in range(1, max_attempts + 1):
        try:
            return await func()
        except retry_on as e:
            if attempt == max_attempts:
                raise
            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s"
            )
            await sleep(delay)
            delay *= multiplier

    # Unreachable: the loop either returns or raises
    raise RuntimeError("retry_async exited without a result")
