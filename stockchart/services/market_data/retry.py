"""Retry with linear backoff for provider calls."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from stockchart.services.market_data.errors import ApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run `fn` up to `max_attempts` times, waiting delay * attempt between tries.

    invalid_api_key and invalid_symbol errors are raised immediately; the
    last error is raised once attempts are exhausted.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except ApiError as e:
            if not e.retryable or attempt == max_attempts:
                raise

            wait = delay * attempt
            logger.warning(
                f"{e.service_name} request failed with {e.kind.value} "
                f"(attempt {attempt}/{max_attempts}). Retrying in {wait}s."
            )
            await sleep(wait)

    raise ValueError("max_attempts must be at least 1")
