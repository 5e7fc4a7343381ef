"""
Finnhub API client.

REST endpoints under /api/v1 with a `token` query parameter:
    /stock/candle    symbol, resolution (1 5 15 30 60 D W M), from, to
    /quote           symbol
    /search          q
    /stock/profile2  symbol

Errors are reported with HTTP status codes; a candle response with
s == "no_data" means an empty series.
"""

import logging
from typing import Any

from stockchart.schemas.market import (
    Candle,
    CompanyProfile,
    DataSource,
    Quote,
    Resolution,
    SymbolSearchResult,
)
from stockchart.services.cache.response_cache import generate_key
from stockchart.services.market_data.errors import ApiError, ApiErrorKind
from stockchart.services.market_data.http_client import HTTPMarketDataProvider, choose_output_size
from stockchart.services.market_data.normalizer import (
    normalize_finnhub_candles,
    normalize_finnhub_profile,
    normalize_finnhub_quote,
    normalize_finnhub_search,
)

logger = logging.getLogger(__name__)


class FinnhubClient(HTTPMarketDataProvider):
    """Finnhub data source."""

    source = DataSource.FINNHUB

    @property
    def name(self) -> str:
        return "Finnhub"

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        params = {**params, "token": self._require_api_key()}
        return await self._request(f"{self.config.finnhub_base_url}{path}", params)

    async def _fetch_candles(
        self, symbol: str, resolution: Resolution, from_ts: int, to_ts: int
    ) -> list[Candle]:
        payload = await self._get(
            "/stock/candle",
            {"symbol": symbol.upper(), "resolution": resolution.value, "from": from_ts, "to": to_ts},
        )
        if payload.get("s") == "no_data":
            logger.info(f"Finnhub has no candles for {symbol.upper()} {resolution.value}")
            return []
        return normalize_finnhub_candles(payload)

    async def get_candles(
        self, symbol: str, resolution: Resolution, from_ts: int, to_ts: int
    ) -> list[Candle]:
        """Candles for [from_ts, to_ts]; Finnhub filters server-side, so the window is part of the key."""
        outputsize = choose_output_size(from_ts, to_ts, self.config.full_output_threshold_days)
        key = generate_key(
            "candles",
            self.source.value,
            symbol.upper(),
            resolution.value,
            outputsize.value,
            from_ts,
            to_ts,
        )
        return await self._cached(
            key,
            self._candle_ttl(resolution),
            lambda: self._fetch_candles(symbol, resolution, from_ts, to_ts),
        )

    async def _fetch_quote(self, symbol: str) -> Quote:
        payload = await self._get("/quote", {"symbol": symbol.upper()})
        quote = normalize_finnhub_quote(payload, symbol)
        if quote is None:
            raise ApiError(
                ApiErrorKind.INVALID_SYMBOL,
                f"No quote returned for {symbol.upper()}",
                service_name=self.name,
            )
        return quote

    async def get_quote(self, symbol: str) -> Quote:
        key = generate_key("quote", self.source.value, symbol.upper())
        return await self._cached(key, self.config.ttl_quote, lambda: self._fetch_quote(symbol))

    async def _fetch_search(self, query: str) -> list[SymbolSearchResult]:
        payload = await self._get("/search", {"q": query})
        return normalize_finnhub_search(payload)

    async def search_symbols(self, query: str) -> list[SymbolSearchResult]:
        query = query.strip()
        if not query:
            return []

        key = generate_key("search", self.source.value, query.lower())
        return await self._cached(
            key, self.config.ttl_symbol_search, lambda: self._fetch_search(query)
        )

    async def _fetch_profile(self, symbol: str) -> CompanyProfile:
        payload = await self._get("/stock/profile2", {"symbol": symbol.upper()})
        profile = normalize_finnhub_profile(payload)
        if profile is None:
            raise ApiError(
                ApiErrorKind.NOT_FOUND, f"No profile found for {symbol.upper()}", service_name=self.name
            )
        return profile

    async def get_company_profile(self, symbol: str) -> CompanyProfile:
        key = generate_key("profile", self.source.value, symbol.upper())
        return await self._cached(
            key, self.config.ttl_company_profile, lambda: self._fetch_profile(symbol)
        )
