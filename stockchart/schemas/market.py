"""
CONTRACT 1: Market Data Layer

Input: CandleRequest (symbol, resolution, time window)
Output: CandleSeries, Quote, SymbolSearchResult, CompanyProfile

Provider payloads (Alpha Vantage, Finnhub, mock generator) are normalized
into these shapes before anything downstream sees them.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================


class DataSource(str, Enum):
    MOCK = "mock"
    ALPHA_VANTAGE = "alphavantage"
    FINNHUB = "finnhub"


class Resolution(str, Enum):
    M1 = "1"
    M5 = "5"
    M15 = "15"
    M30 = "30"
    H1 = "60"
    D1 = "D"
    W1 = "W"
    MN = "M"

    @property
    def is_intraday(self) -> bool:
        return self.value.isdigit()

    @property
    def minutes(self) -> int:
        """Nominal bar length in minutes (a month counts as 30 days)."""
        if self.is_intraday:
            return int(self.value)
        return {"D": 1440, "W": 10080, "M": 43200}[self.value]

    @property
    def seconds(self) -> int:
        return self.minutes * 60


class TimeRange(str, Enum):
    D1 = "1D"
    D5 = "5D"
    M1 = "1M"
    M6 = "6M"
    YTD = "YTD"
    Y1 = "1Y"
    Y5 = "5Y"
    MAX = "MAX"


class OutputSize(str, Enum):
    COMPACT = "compact"
    FULL = "full"


class SymbolType(str, Enum):
    STOCK = "Stock"
    ETF = "ETF"
    INDEX = "Index"
    CRYPTO = "Crypto"


class PriceSource(str, Enum):
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    HL2 = "hl2"
    HLC3 = "hlc3"
    OHLC4 = "ohlc4"


# Default bar size per chart range
DEFAULT_RESOLUTIONS = {
    TimeRange.D1: Resolution.M5,
    TimeRange.D5: Resolution.M15,
    TimeRange.M1: Resolution.H1,
    TimeRange.M6: Resolution.D1,
    TimeRange.YTD: Resolution.D1,
    TimeRange.Y1: Resolution.D1,
    TimeRange.Y5: Resolution.W1,
    TimeRange.MAX: Resolution.W1,
}

# Intraday bars are only served for short ranges
INTRADAY_TIME_RANGES = {TimeRange.D1, TimeRange.D5, TimeRange.M1}


def is_resolution_allowed(time_range: TimeRange, resolution: Resolution) -> bool:
    """Check whether a bar size may be requested for a chart range."""
    if resolution.is_intraday:
        return time_range in INTRADAY_TIME_RANGES
    return True


def time_range_bounds(
    time_range: TimeRange, now: Optional[datetime] = None
) -> tuple[int, int]:
    """
    Resolve a chart range to (from, to) epoch seconds.

    1D starts at local midnight, YTD at January 1st, MAX at the epoch.
    """
    now = now or datetime.now()
    to_ts = int(now.timestamp())

    if time_range == TimeRange.D1:
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elif time_range == TimeRange.YTD:
        start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    elif time_range == TimeRange.MAX:
        return 0, to_ts
    else:
        days = {
            TimeRange.D5: 5,
            TimeRange.M1: 30,
            TimeRange.M6: 180,
            TimeRange.Y1: 365,
            TimeRange.Y5: 5 * 365,
        }[time_range]
        start = now - timedelta(days=days)

    return int(start.timestamp()), to_ts


# =============================================================================
# INPUT: CandleRequest
# =============================================================================


class CandleRequest(BaseModel):
    """
    Request for a candle series.
    Sent by: Chart / Indicator consumers
    Received by: Market Data Service
    """

    symbol: str = Field(..., min_length=1, description="Ticker symbol (e.g., 'AAPL')")
    resolution: Resolution = Field(default=Resolution.D1, description="Bar size")
    from_ts: int = Field(..., ge=0, description="Window start, epoch seconds (inclusive)")
    to_ts: int = Field(..., ge=0, description="Window end, epoch seconds (inclusive)")


# =============================================================================
# OUTPUT: Market Data Components
# =============================================================================


class Candle(BaseModel):
    """Single candlestick data point."""

    model_config = ConfigDict(frozen=True)

    time: int = Field(..., description="Bar open time, epoch seconds")
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(0.0, ge=0)

    @property
    def hl2(self) -> float:
        return (self.high + self.low) / 2

    @property
    def hlc3(self) -> float:
        return (self.high + self.low + self.close) / 3

    @property
    def ohlc4(self) -> float:
        return (self.open + self.high + self.low + self.close) / 4

    def price(self, source: PriceSource = PriceSource.CLOSE) -> float:
        """Price extracted by source selector."""
        return getattr(self, source.value)


class CandleSeries(BaseModel):
    """
    Candle series returned to consumers.

    degraded is set when the candles are mock data served in place of a
    failed live call; error_kind and error_message describe that failure.
    """

    symbol: str
    resolution: Resolution
    source: DataSource
    candles: list[Candle] = Field(default_factory=list)
    degraded: bool = False
    error_kind: Optional[str] = None
    error_message: Optional[str] = None


class Quote(BaseModel):
    """Latest quote for a symbol."""

    symbol: str
    company_name: Optional[str] = None
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    previous_close: float = 0.0
    volume: float = 0.0
    timestamp: int = Field(..., description="Quote time, epoch seconds")

    # Extended fields (mock and profile-backed quotes)
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    avg_volume: Optional[float] = None


class SymbolSearchResult(BaseModel):
    """Single symbol search match."""

    symbol: str
    name: str
    type: SymbolType = SymbolType.STOCK
    exchange: str = ""
    currency: str = "USD"


class CompanyProfile(BaseModel):
    """Company profile details."""

    symbol: str
    name: str
    logo: Optional[str] = None
    industry: Optional[str] = None
    country: Optional[str] = None
    exchange: Optional[str] = None
    market_cap: Optional[float] = Field(None, description="Millions of currency units")
    currency: Optional[str] = None
    weburl: Optional[str] = None
