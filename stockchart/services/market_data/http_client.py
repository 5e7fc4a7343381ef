"""
Shared HTTP pipeline for live providers.

Per call:
    BUILD_REQUEST -> RATE_LIMIT_WAIT -> SEND -> PARSE -> NORMALIZE
        -> CACHE_STORE -> RETURN
with any failure raised as ApiError. Retries wrap everything after the
cache lookup; a cancelled call never reaches CACHE_STORE.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

import aiohttp

from stockchart.core.config import ClientConfig
from stockchart.schemas.market import OutputSize, Resolution
from stockchart.services.cache.response_cache import ResponseCache
from stockchart.services.market_data.errors import ApiError, ApiErrorKind
from stockchart.services.market_data.interface import MarketDataProvider
from stockchart.services.market_data.normalizer import resolve_timezone
from stockchart.services.market_data.retry import with_retry
from stockchart.services.rate_limit.limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")


def choose_output_size(from_ts: int, to_ts: int, threshold_days: int = 90) -> OutputSize:
    """Full history for spans longer than the threshold, compact otherwise."""
    return OutputSize.FULL if to_ts - from_ts > threshold_days * 86400 else OutputSize.COMPACT


class HTTPMarketDataProvider(MarketDataProvider):
    """
    Base class for HTTP providers.

    The cache and rate limiter are injected so several clients can share
    them; each defaults to a private instance built from the config.
    """

    def __init__(
        self,
        config: ClientConfig,
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.cache = cache or ResponseCache(max_entries=config.cache_max_entries)
        self.rate_limiter = rate_limiter or SlidingWindowRateLimiter(
            max_requests=config.rate_limit_requests,
            window_seconds=config.rate_limit_window,
            safety_margin=config.rate_limit_safety_margin,
            sleep=sleep,
        )
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep
        self._tz = resolve_timezone(config.timezone)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"Accept": "application/json"})
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _require_api_key(self) -> str:
        if not self.config.api_key:
            raise ApiError(
                ApiErrorKind.INVALID_API_KEY,
                f"{self.name} API key is not configured",
                service_name=self.name,
            )
        return self.config.api_key

    def _check_payload(self, payload: Any) -> Optional[ApiError]:
        """Provider-specific inspection of HTTP-200 bodies."""
        return None

    async def _send(
        self, url: str, params: dict[str, Any], timeout: Optional[float] = None
    ) -> Any:
        """Rate-limited GET returning the decoded JSON body."""
        session = await self._ensure_session()
        await self.rate_limiter.acquire()

        client_timeout = aiohttp.ClientTimeout(total=timeout or self.config.request_timeout)
        try:
            async with session.get(url, params=params, timeout=client_timeout) as resp:
                if resp.status != 200:
                    raise ApiError.from_status(
                        resp.status, resp.headers.get("Retry-After"), service_name=self.name
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise ApiError(
                        ApiErrorKind.UNKNOWN, f"Invalid JSON response: {e}", 200, service_name=self.name
                    ) from e
        except asyncio.TimeoutError as e:
            raise ApiError(ApiErrorKind.NETWORK, "Request timed out", service_name=self.name) from e
        except aiohttp.ClientError as e:
            raise ApiError(ApiErrorKind.NETWORK, f"Network error: {e}", service_name=self.name) from e

    async def _request(self, url: str, params: dict[str, Any]) -> Any:
        """Send, then reject bodies that carry an error."""
        logger.info(f"{self.name} request: {params.get('function') or url}")
        payload = await self._send(url, params)

        error = self._check_payload(payload)
        if error is not None:
            raise error
        return payload

    async def _cached(self, key: str, ttl: float, fetch: Callable[[], Awaitable[T]]) -> T:
        """Serve from cache or fetch with retry and store the result."""
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            result = await with_retry(
                fetch,
                max_attempts=self.config.max_retries,
                delay=self.config.retry_delay,
                sleep=self._sleep,
            )
        except ApiError as e:
            logger.error(f"{self.name} request failed ({e.kind.value}): {e.message}")
            raise

        self.cache.set(key, result, ttl)
        return result

    def _candle_ttl(self, resolution: Resolution) -> float:
        if resolution.is_intraday:
            return self.config.ttl_intraday
        if resolution == Resolution.D1:
            return self.config.ttl_daily
        return self.config.ttl_historical
