"""
Market Data Service Implementation

Serves candles, quotes, symbol search and company profiles from the
configured data source.

Falls back to mock candles only if the live source fails and
fallback_to_mock is enabled; the result is then flagged degraded and
carries the failure's kind and message.
"""

import logging
from typing import Optional

import aiohttp

from stockchart.core.config import ClientConfig
from stockchart.schemas.market import (
    CandleRequest,
    CandleSeries,
    CompanyProfile,
    DataSource,
    Quote,
    SymbolSearchResult,
)
from stockchart.services.base import BaseService, ValidationError
from stockchart.services.cache.response_cache import ResponseCache
from stockchart.services.market_data.alpha_vantage import AlphaVantageClient
from stockchart.services.market_data.errors import ApiError
from stockchart.services.market_data.finnhub import FinnhubClient
from stockchart.services.market_data.interface import MarketDataProvider
from stockchart.services.market_data.mock_data import MockDataProvider
from stockchart.services.rate_limit.limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


def create_provider(
    config: ClientConfig,
    cache: Optional[ResponseCache] = None,
    rate_limiter: Optional[SlidingWindowRateLimiter] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> MarketDataProvider:
    """Provider for config.data_source."""
    if config.data_source == DataSource.ALPHA_VANTAGE:
        return AlphaVantageClient(config, cache=cache, rate_limiter=rate_limiter, session=session)
    if config.data_source == DataSource.FINNHUB:
        return FinnhubClient(config, cache=cache, rate_limiter=rate_limiter, session=session)
    return MockDataProvider()


class MarketDataService(BaseService[CandleRequest, CandleSeries]):
    """
    Market Data Service.

    Wraps one provider and, optionally, the mock generator as fallback.
    """

    def __init__(
        self,
        config: ClientConfig,
        provider: Optional[MarketDataProvider] = None,
        mock: Optional[MockDataProvider] = None,
    ):
        self.config = config
        self.provider = provider or create_provider(config)
        self.mock = mock or MockDataProvider()

    @property
    def name(self) -> str:
        return "MarketDataService"

    @property
    def is_live(self) -> bool:
        return self.provider.source != DataSource.MOCK

    async def validate_input(self, input_data: CandleRequest) -> CandleRequest:
        if input_data.from_ts > input_data.to_ts:
            raise ValidationError(
                self.name,
                "from_ts must not be after to_ts",
                {"from_ts": input_data.from_ts, "to_ts": input_data.to_ts},
            )
        return input_data

    async def execute(self, input_data: CandleRequest) -> CandleSeries:
        """
        Fetch a candle series.

        Raises:
            ValidationError: If the window is inverted
            ApiError: If the provider fails and fallback is disabled
        """
        request = await self.validate_input(input_data)
        symbol = request.symbol.upper()

        try:
            candles = await self.provider.get_candles(
                symbol, request.resolution, request.from_ts, request.to_ts
            )
        except ApiError as e:
            if not (self.is_live and self.config.fallback_to_mock):
                raise

            logger.warning(f"Using mock data for {symbol}: {e.message}")
            candles = await self.mock.get_candles(
                symbol, request.resolution, request.from_ts, request.to_ts
            )
            return CandleSeries(
                symbol=symbol,
                resolution=request.resolution,
                source=DataSource.MOCK,
                candles=candles,
                degraded=True,
                error_kind=e.kind.value,
                error_message=e.user_message,
            )

        logger.info(f"Got {len(candles)} candles for {symbol} from {self.provider.name}")
        return CandleSeries(
            symbol=symbol,
            resolution=request.resolution,
            source=self.provider.source,
            candles=candles,
        )

    async def get_quote(self, symbol: str) -> Quote:
        return await self.provider.get_quote(symbol)

    async def search_symbols(self, query: str) -> list[SymbolSearchResult]:
        return await self.provider.search_symbols(query)

    async def get_company_profile(self, symbol: str) -> CompanyProfile:
        return await self.provider.get_company_profile(symbol)

    async def health_check(self) -> bool:
        """Mock is always healthy; a live source needs a key and a working search."""
        if not self.is_live:
            return True
        if not self.config.api_key:
            return False
        try:
            await self.provider.search_symbols("IBM")
        except ApiError as e:
            logger.warning(f"{self.provider.name} health check failed: {e.message}")
            return False
        return True

    async def close(self) -> None:
        await self.provider.close()


def create_market_data_service(
    config: ClientConfig,
    cache: Optional[ResponseCache] = None,
    rate_limiter: Optional[SlidingWindowRateLimiter] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> MarketDataService:
    """Build a service and its provider from an injected config."""
    provider = create_provider(config, cache=cache, rate_limiter=rate_limiter, session=session)
    return MarketDataService(config, provider=provider)
