"""
Market Data Provider Interface

Defines the contract every data source (live API or mock) implements.
"""

from abc import ABC, abstractmethod

from stockchart.schemas.market import (
    Candle,
    CompanyProfile,
    DataSource,
    Quote,
    Resolution,
    SymbolSearchResult,
)


class MarketDataProvider(ABC):
    """
    Market Data Provider Contract.

    get_candles returns candles ascending by time within [from_ts, to_ts].
    Failures raise ApiError; nothing else escapes a provider.
    """

    source: DataSource

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging."""
        pass

    @abstractmethod
    async def get_candles(
        self, symbol: str, resolution: Resolution, from_ts: int, to_ts: int
    ) -> list[Candle]:
        """OHLCV candles for a symbol and time window."""
        pass

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """Latest quote."""
        pass

    @abstractmethod
    async def search_symbols(self, query: str) -> list[SymbolSearchResult]:
        """Symbol lookup by ticker or name fragment."""
        pass

    @abstractmethod
    async def get_company_profile(self, symbol: str) -> CompanyProfile:
        """Company details."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
