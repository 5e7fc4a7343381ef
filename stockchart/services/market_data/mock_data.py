"""
Mock Data Generator

Generates deterministic mock market data for development, demos and as
the fallback when a live provider fails.

Series are reproducible: the random walk is driven by a linear
congruential generator seeded from a hash of
"{symbol}-{time_range}-{resolution}", so the same request always yields
the same prices. Intraday bars only fall on weekdays between 09:30 and
16:00 ET (UTC-5, no daylight saving); daily and longer bars skip weekends.
"""

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from stockchart.schemas.market import (
    Candle,
    CompanyProfile,
    DataSource,
    Quote,
    Resolution,
    SymbolSearchResult,
    TimeRange,
    DEFAULT_RESOLUTIONS,
)
from stockchart.services.market_data.errors import ApiError, ApiErrorKind
from stockchart.services.market_data.interface import MarketDataProvider
from stockchart.services.market_data.symbols import search_symbols
from stockchart.services.transforms.aggregation import filter_by_date_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompanyInfo:
    symbol: str
    name: str
    exchange: str
    sector: str
    base_price: float
    volatility: float
    shares_outstanding: float
    pe_ratio: float


COMPANIES = {
    "AAPL": CompanyInfo("AAPL", "Apple Inc.", "NASDAQ", "Technology", 185.50, 0.02, 15.5e9, 29.5),
    "MSFT": CompanyInfo("MSFT", "Microsoft Corporation", "NASDAQ", "Technology", 378.25, 0.018, 7.43e9, 35.2),
    "GOOGL": CompanyInfo("GOOGL", "Alphabet Inc.", "NASDAQ", "Technology", 141.80, 0.022, 5.89e9, 25.8),
    "AMZN": CompanyInfo(
        "AMZN", "Amazon.com, Inc.", "NASDAQ", "Consumer Discretionary", 178.50, 0.025, 10.35e9, 42.3
    ),
    "TSLA": CompanyInfo(
        "TSLA", "Tesla, Inc.", "NASDAQ", "Consumer Discretionary", 248.75, 0.035, 3.18e9, 65.4
    ),
}

FALLBACK_SYMBOL = "AAPL"

TRADING_MINUTES_PER_DAY = 390
MAX_INTRADAY_POINTS = 5000
AVG_VOLUME = 50_000_000
SECONDS_PER_DAY = 86_400

# Trading days covered by each chart range
TIME_RANGE_DAYS = {
    TimeRange.D1: 1,
    TimeRange.D5: 5,
    TimeRange.M1: 22,
    TimeRange.M6: 130,
    TimeRange.Y1: 252,
    TimeRange.Y5: 1260,
    TimeRange.MAX: 2520,
}

# 09:30 to 16:00 in minutes after midnight ET
MARKET_OPEN_MINUTES = 570
MARKET_CLOSE_MINUTES = 960
ET_UTC_OFFSET_HOURS = -5


class SeededRandom:
    """Linear congruential generator returning floats in [0, 1]."""

    def __init__(self, seed: int):
        self.seed = seed

    def __call__(self) -> float:
        self.seed = (self.seed * 1103515245 + 12345) & 0x7FFFFFFF
        return self.seed / 0x7FFFFFFF


def hash_string(text: str) -> int:
    """31-multiplier string hash with 32-bit signed wraparound, made non-negative."""
    value = 0
    for char in text:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


def _utc(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def is_weekday(timestamp: int) -> bool:
    return _utc(timestamp).weekday() < 5


def is_within_trading_hours(timestamp: int) -> bool:
    dt = _utc(timestamp)
    minutes = (dt.hour + ET_UTC_OFFSET_HOURS) * 60 + dt.minute
    return MARKET_OPEN_MINUTES <= minutes <= MARKET_CLOSE_MINUTES


def data_point_count(time_range: TimeRange, resolution: Resolution, now: float) -> int:
    """Number of bars for a chart range at a bar size."""
    if time_range == TimeRange.YTD:
        today = _utc(int(now))
        start_of_year = today.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        elapsed_days = math.ceil((today - start_of_year).total_seconds() / SECONDS_PER_DAY)
        days = max(1, math.ceil(elapsed_days * 0.7))
    else:
        days = TIME_RANGE_DAYS[time_range]

    if resolution == Resolution.D1:
        return days
    if resolution == Resolution.W1:
        return math.ceil(days / 5)
    if resolution == Resolution.MN:
        return math.ceil(days / 22)

    per_day = TRADING_MINUTES_PER_DAY // resolution.minutes
    return min(days * per_day, MAX_INTRADAY_POINTS)


def bar_times(count: int, resolution: Resolution, end_time: int) -> list[int]:
    """
    Open times of `count` bars ending at or before end_time, ascending.

    Walks backwards from end_time so no bar lies in the future.
    """
    interval = resolution.seconds
    times: list[int] = []

    if resolution.is_intraday:
        t = end_time - end_time % interval
        while len(times) < count:
            if is_weekday(t) and is_within_trading_hours(t):
                times.append(t)
            t -= interval
    else:
        t = end_time - end_time % SECONDS_PER_DAY
        while len(times) < count:
            if is_weekday(t):
                times.append(t)
                t -= interval
            else:
                t -= SECONDS_PER_DAY

    times.reverse()
    return times


def get_company_info(symbol: str) -> Optional[CompanyInfo]:
    return COMPANIES.get(symbol.upper())


def generate_mock_ohlcv(
    symbol: str,
    time_range: TimeRange,
    resolution: Optional[Resolution] = None,
    end_time: Optional[int] = None,
) -> list[Candle]:
    """
    Generate mock OHLCV candles.

    Args:
        symbol: Ticker; unknown tickers get AAPL data
        time_range: Chart range, sets the number of bars
        resolution: Bar size; defaults to the range's default bar size
        end_time: Epoch seconds of the newest bar (default: now)

    Returns:
        Candles ascending by time, prices rounded to cents
    """
    resolution = resolution or DEFAULT_RESOLUTIONS[time_range]
    end_time = int(time.time()) if end_time is None else int(end_time)

    company = get_company_info(symbol)
    if company is None:
        logger.debug(f"No mock data for {symbol}, using {FALLBACK_SYMBOL}")
        company = COMPANIES[FALLBACK_SYMBOL]

    count = data_point_count(time_range, resolution, end_time)
    times = bar_times(count, resolution, end_time)

    random = SeededRandom(hash_string(f"{company.symbol}-{time_range.value}-{resolution.value}"))
    trend_bias = (random() - 0.48) * 0.001
    volatility = company.volatility * 0.3 if resolution.is_intraday else company.volatility

    candles = []
    price = company.base_price

    for timestamp in times:
        # Random walk
        change = (random() - 0.5 + trend_bias) * volatility * price

        open_price = price
        close_price = price + change
        high_price = max(open_price, close_price) + random() * volatility * 0.5 * price
        low_price = min(open_price, close_price) - random() * volatility * 0.5 * price

        # Bigger moves trade more shares
        volume_multiplier = 0.5 + random() * 1.5
        move_size = abs(close_price - open_price) / open_price
        volume = math.floor(AVG_VOLUME * volume_multiplier * (1 + move_size * 10) / count * 100)

        candles.append(
            Candle(
                time=timestamp,
                open=round(open_price, 2),
                high=round(high_price, 2),
                low=round(low_price, 2),
                close=round(close_price, 2),
                volume=volume,
            )
        )
        price = close_price

    return candles


def time_range_for_span(from_ts: int, to_ts: int) -> TimeRange:
    """Smallest chart range covering a window."""
    days = (to_ts - from_ts) / SECONDS_PER_DAY
    if days <= 1:
        return TimeRange.D1
    if days <= 5:
        return TimeRange.D5
    if days <= 31:
        return TimeRange.M1
    if days <= 183:
        return TimeRange.M6
    if days <= 366:
        return TimeRange.Y1
    if days <= 5 * 366:
        return TimeRange.Y5
    return TimeRange.MAX


# =============================================================================
# QUOTES AND PROFILES
# =============================================================================


def _default_quote(symbol: str, now: int) -> Quote:
    return Quote(
        symbol=symbol.upper(),
        company_name="Unknown Company",
        price=100.0,
        open=100.0,
        high=100.0,
        low=100.0,
        previous_close=100.0,
        volume=0,
        timestamp=now,
    )


def get_mock_quote(symbol: str, now: Optional[int] = None) -> Quote:
    """Quote built from the mock intraday and one-year series."""
    now = int(time.time()) if now is None else int(now)
    company = get_company_info(symbol)
    if company is None:
        return _default_quote(symbol, now)

    intraday = generate_mock_ohlcv(company.symbol, TimeRange.D1, Resolution.M5, end_time=now)
    year = generate_mock_ohlcv(company.symbol, TimeRange.Y1, Resolution.D1, end_time=now)

    price = intraday[-1].close
    random = SeededRandom(hash_string(f"{company.symbol}-previous-close"))
    previous_close = company.base_price * (0.98 + random() * 0.04)
    change = price - previous_close

    return Quote(
        symbol=company.symbol,
        company_name=company.name,
        price=round(price, 2),
        change=round(change, 2),
        change_percent=round(change / previous_close * 100, 2),
        open=intraday[0].open,
        high=max(c.high for c in intraday),
        low=min(c.low for c in intraday),
        previous_close=round(previous_close, 2),
        volume=sum(c.volume for c in intraday),
        timestamp=now,
        market_cap=price * company.shares_outstanding,
        pe_ratio=company.pe_ratio,
        week52_high=max(c.high for c in year),
        week52_low=min(c.low for c in year),
        avg_volume=math.floor(sum(c.volume for c in year) / len(year)),
    )


def get_mock_profile(symbol: str, now: Optional[int] = None) -> Optional[CompanyProfile]:
    company = get_company_info(symbol)
    if company is None:
        return None

    quote = get_mock_quote(company.symbol, now)
    return CompanyProfile(
        symbol=company.symbol,
        name=company.name,
        industry=company.sector,
        country="US",
        exchange=company.exchange,
        market_cap=round(quote.market_cap / 1e6, 2),
        currency="USD",
    )


# =============================================================================
# PROVIDER
# =============================================================================


class MockDataProvider(MarketDataProvider):
    """Offline data source backed by the deterministic generator."""

    source = DataSource.MOCK

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    @property
    def name(self) -> str:
        return "MockData"

    async def get_candles(
        self, symbol: str, resolution: Resolution, from_ts: int, to_ts: int
    ) -> list[Candle]:
        time_range = time_range_for_span(from_ts, to_ts)
        candles = generate_mock_ohlcv(symbol, time_range, resolution, end_time=to_ts)
        return filter_by_date_range(candles, from_ts, to_ts)

    async def get_quote(self, symbol: str) -> Quote:
        return get_mock_quote(symbol, int(self._clock()))

    async def search_symbols(self, query: str) -> list[SymbolSearchResult]:
        return search_symbols(query)

    async def get_company_profile(self, symbol: str) -> CompanyProfile:
        profile = get_mock_profile(symbol, int(self._clock()))
        if profile is None:
            raise ApiError(
                ApiErrorKind.NOT_FOUND, f"No profile found for {symbol.upper()}", service_name=self.name
            )
        return profile
