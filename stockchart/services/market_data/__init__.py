"""
Market Data Service

CONTRACT:
    Input:  symbol + resolution + time window
    Output: normalized candles, quotes, symbol matches, company profiles

RESPONSIBILITIES:
    - Alpha Vantage and Finnhub REST clients
    - Rate limiting, response caching and retry with backoff
    - Error classification into a closed set of kinds
    - Payload normalization into canonical schemas
    - Deterministic mock generator and offline symbol search
    - Optional degraded fallback to mock data

Uses aiohttp for HTTP.
"""

from stockchart.services.market_data.alpha_vantage import AlphaVantageClient, ApiKeyValidation
from stockchart.services.market_data.errors import ApiError, ApiErrorKind, get_error_message
from stockchart.services.market_data.finnhub import FinnhubClient
from stockchart.services.market_data.interface import MarketDataProvider
from stockchart.services.market_data.mock_data import MockDataProvider, generate_mock_ohlcv
from stockchart.services.market_data.retry import with_retry
from stockchart.services.market_data.service import (
    MarketDataService,
    create_market_data_service,
    create_provider,
)

__all__ = [
    "AlphaVantageClient",
    "ApiKeyValidation",
    "ApiError",
    "ApiErrorKind",
    "get_error_message",
    "FinnhubClient",
    "MarketDataProvider",
    "MockDataProvider",
    "generate_mock_ohlcv",
    "with_retry",
    "MarketDataService",
    "create_market_data_service",
    "create_provider",
]
