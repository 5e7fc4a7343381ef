"""
Alpha Vantage API client.

Endpoints used (all GET on the query URL, `apikey` parameter):
    TIME_SERIES_INTRADAY  symbol, interval=<n>min, outputsize
    TIME_SERIES_DAILY     symbol, outputsize
    TIME_SERIES_WEEKLY    symbol
    TIME_SERIES_MONTHLY   symbol
    GLOBAL_QUOTE          symbol
    SYMBOL_SEARCH         keywords

Alpha Vantage reports most failures as HTTP 200 with "Note", "Error Message"
or "Information" in the body, so every payload is inspected before it is
normalized. The free tier allows 5 calls per minute.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from stockchart.schemas.market import (
    Candle,
    CompanyProfile,
    DataSource,
    OutputSize,
    Quote,
    Resolution,
    SymbolSearchResult,
)
from stockchart.services.cache.response_cache import generate_key
from stockchart.services.market_data.errors import ApiError, ApiErrorKind, check_in_band_error
from stockchart.services.market_data.http_client import HTTPMarketDataProvider, choose_output_size
from stockchart.services.market_data.normalizer import (
    normalize_global_quote,
    normalize_symbol_search,
    normalize_time_series,
    series_key,
)
from stockchart.services.transforms.aggregation import filter_by_date_range

logger = logging.getLogger(__name__)


FUNCTION_MAP = {
    Resolution.D1: "TIME_SERIES_DAILY",
    Resolution.W1: "TIME_SERIES_WEEKLY",
    Resolution.MN: "TIME_SERIES_MONTHLY",
}


@dataclass
class ApiKeyValidation:
    """Outcome of an API key check."""

    valid: bool
    error: Optional[str] = None


class AlphaVantageClient(HTTPMarketDataProvider):
    """Alpha Vantage data source."""

    source = DataSource.ALPHA_VANTAGE

    @property
    def name(self) -> str:
        return "AlphaVantage"

    def _check_payload(self, payload: Any) -> Optional[ApiError]:
        return check_in_band_error(payload, service_name=self.name)

    def build_candle_params(
        self, symbol: str, resolution: Resolution, outputsize: OutputSize
    ) -> dict[str, str]:
        """Query parameters for a time-series call."""
        params = {"symbol": symbol.upper(), "apikey": self._require_api_key()}

        if resolution.is_intraday:
            params["function"] = "TIME_SERIES_INTRADAY"
            params["interval"] = f"{resolution.value}min"
            params["outputsize"] = outputsize.value
        else:
            params["function"] = FUNCTION_MAP[resolution]
            if resolution == Resolution.D1:
                params["outputsize"] = outputsize.value

        return params

    async def _fetch_candles(
        self, symbol: str, resolution: Resolution, outputsize: OutputSize
    ) -> list[Candle]:
        params = self.build_candle_params(symbol, resolution, outputsize)
        payload = await self._request(self.config.alpha_vantage_base_url, params)
        return normalize_time_series(payload, series_key(resolution), self._tz)

    async def get_candles(
        self, symbol: str, resolution: Resolution, from_ts: int, to_ts: int
    ) -> list[Candle]:
        """
        Candles for [from_ts, to_ts].

        The whole compact or full series is cached per
        (source, symbol, resolution, outputsize) and sliced per request.
        """
        outputsize = choose_output_size(from_ts, to_ts, self.config.full_output_threshold_days)
        key = generate_key(
            "candles", self.source.value, symbol.upper(), resolution.value, outputsize.value
        )

        candles = await self._cached(
            key,
            self._candle_ttl(resolution),
            lambda: self._fetch_candles(symbol, resolution, outputsize),
        )
        return filter_by_date_range(candles, from_ts, to_ts)

    async def _fetch_quote(self, symbol: str) -> Quote:
        params = {
            "function": "GLOBAL_QUOTE",
            "symbol": symbol.upper(),
            "apikey": self._require_api_key(),
        }
        payload = await self._request(self.config.alpha_vantage_base_url, params)

        quote = normalize_global_quote(payload, tz=self._tz)
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
        params = {
            "function": "SYMBOL_SEARCH",
            "keywords": query,
            "apikey": self._require_api_key(),
        }
        payload = await self._request(self.config.alpha_vantage_base_url, params)
        return normalize_symbol_search(payload)

    async def search_symbols(self, query: str) -> list[SymbolSearchResult]:
        query = query.strip()
        if not query:
            return []

        key = generate_key("search", self.source.value, query.lower())
        return await self._cached(
            key, self.config.ttl_symbol_search, lambda: self._fetch_search(query)
        )

    async def get_company_profile(self, symbol: str) -> CompanyProfile:
        """Profile derived from the exact SYMBOL_SEARCH match."""
        symbol = symbol.upper()
        key = generate_key("profile", self.source.value, symbol)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        matches = await self.search_symbols(symbol)
        match = next((m for m in matches if m.symbol.upper() == symbol), None)
        if match is None:
            raise ApiError(
                ApiErrorKind.NOT_FOUND, f"No profile found for {symbol}", service_name=self.name
            )

        profile = CompanyProfile(
            symbol=match.symbol,
            name=match.name,
            exchange=match.exchange,
            currency=match.currency,
        )
        self.cache.set(key, profile, self.config.ttl_company_profile)
        return profile

    async def validate_api_key(self, api_key: str) -> ApiKeyValidation:
        """
        Check a key with a GLOBAL_QUOTE call for IBM.

        Bypasses cache and retries; uses the validation timeout.
        """
        if not api_key or not api_key.strip():
            return ApiKeyValidation(False, "API key cannot be empty")

        params = {"function": "GLOBAL_QUOTE", "symbol": "IBM", "apikey": api_key.strip()}
        try:
            payload = await self._send(
                self.config.alpha_vantage_base_url, params, timeout=self.config.validation_timeout
            )
        except ApiError as e:
            if e.kind == ApiErrorKind.NETWORK and "timed out" in e.message:
                return ApiKeyValidation(False, "Request timed out. Please try again.")
            return ApiKeyValidation(False, f"Network error: {e.message}")

        if not isinstance(payload, dict):
            return ApiKeyValidation(False, "Unexpected response from API")

        if "Error Message" in payload:
            message = str(payload["Error Message"])
            if "apikey" in message.lower() or "invalid" in message.lower():
                return ApiKeyValidation(False, "Invalid API key")
            return ApiKeyValidation(False, message)

        if "Note" in payload:
            return ApiKeyValidation(False, "Rate limit exceeded. Please wait before testing again.")

        if "Information" in payload:
            info = str(payload["Information"])
            if "premium" in info.lower() or "rate" in info.lower():
                return ApiKeyValidation(False, "Rate limit exceeded. Please wait before testing again.")
            return ApiKeyValidation(False, info)

        # An empty quote still proves the key was accepted
        if isinstance(payload.get("Global Quote"), dict):
            return ApiKeyValidation(True)

        return ApiKeyValidation(False, "Unexpected response from API")
