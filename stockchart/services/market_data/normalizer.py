"""
Response Normalizer

Transforms provider-native payloads into canonical schemas.

Alpha Vantage time series are maps keyed by date/time strings, newest
first. Normalization:
    - parses each key to epoch seconds (intraday keys in the provider
      timezone, date-only keys as local calendar dates)
    - skips entries missing a required field or with an unparseable key
    - coerces numbers with safe_float (0 on failure) and skips bars that
      are then internally inconsistent, so an unparseable price drops the
      bar while an unparseable volume keeps it with volume 0
    - sorts ascending by time
"""

import logging
import math
from datetime import datetime, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

from stockchart.schemas.market import (
    Candle,
    CompanyProfile,
    Quote,
    Resolution,
    SymbolSearchResult,
    SymbolType,
)

logger = logging.getLogger(__name__)

FIELD_OPEN = "1. open"
FIELD_HIGH = "2. high"
FIELD_LOW = "3. low"
FIELD_CLOSE = "4. close"
FIELD_VOLUME = "5. volume"
REQUIRED_FIELDS = (FIELD_OPEN, FIELD_HIGH, FIELD_LOW, FIELD_CLOSE, FIELD_VOLUME)

TIMESTAMP_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


def safe_float(value: Any, default: float = 0.0) -> float:
    """Parse a number, returning `default` for missing or non-finite input."""
    if value is None:
        return default
    try:
        result = float(str(value).strip().rstrip("%"))
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """ZoneInfo for a configured timezone name; None means host local time."""
    return ZoneInfo(name) if name else None


def parse_timestamp(value: str, tz: Optional[tzinfo] = None) -> Optional[int]:
    """Parse a provider date or date-time string to epoch seconds."""
    text = str(value).strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if tz is not None:
            parsed = parsed.replace(tzinfo=tz)
        return int(parsed.timestamp())
    return None


def is_consistent(candle: Candle) -> bool:
    return (
        candle.low <= min(candle.open, candle.close)
        and max(candle.open, candle.close) <= candle.high
        and candle.volume >= 0
    )


# =============================================================================
# ALPHA VANTAGE
# =============================================================================


def series_key(resolution: Resolution) -> str:
    """Key of the time-series map in an Alpha Vantage payload."""
    if resolution.is_intraday:
        return f"Time Series ({resolution.value}min)"
    if resolution == Resolution.D1:
        return "Time Series (Daily)"
    if resolution == Resolution.W1:
        return "Weekly Time Series"
    return "Monthly Time Series"


def normalize_time_series(
    payload: dict, key: str, tz: Optional[tzinfo] = None
) -> list[Candle]:
    """Alpha Vantage time-series map -> ascending candles."""
    series = payload.get(key)
    if not isinstance(series, dict):
        logger.debug(f"No '{key}' in payload")
        return []

    candles: list[Candle] = []
    skipped = 0

    for time_key, fields in series.items():
        if not isinstance(fields, dict) or any(f not in fields for f in REQUIRED_FIELDS):
            skipped += 1
            continue

        timestamp = parse_timestamp(time_key, tz)
        if timestamp is None:
            skipped += 1
            continue

        volume = safe_float(fields[FIELD_VOLUME])
        if volume < 0:
            skipped += 1
            continue

        candle = Candle(
            time=timestamp,
            open=safe_float(fields[FIELD_OPEN]),
            high=safe_float(fields[FIELD_HIGH]),
            low=safe_float(fields[FIELD_LOW]),
            close=safe_float(fields[FIELD_CLOSE]),
            volume=volume,
        )
        if not is_consistent(candle):
            skipped += 1
            continue

        candles.append(candle)

    if skipped:
        logger.warning(f"Skipped {skipped} malformed entries in '{key}'")

    candles.sort(key=lambda c: c.time)
    return candles


def map_symbol_type(raw_type: str) -> SymbolType:
    lowered = (raw_type or "").lower()
    if "etf" in lowered or "etp" in lowered:
        return SymbolType.ETF
    if "index" in lowered:
        return SymbolType.INDEX
    if "crypto" in lowered or "digital" in lowered:
        return SymbolType.CRYPTO
    return SymbolType.STOCK


def normalize_symbol_search(payload: dict) -> list[SymbolSearchResult]:
    """Alpha Vantage SYMBOL_SEARCH bestMatches -> search results."""
    results = []
    for match in payload.get("bestMatches") or []:
        symbol = match.get("1. symbol")
        if not symbol:
            continue
        results.append(
            SymbolSearchResult(
                symbol=symbol,
                name=match.get("2. name", ""),
                type=map_symbol_type(match.get("3. type", "")),
                exchange=match.get("4. region", ""),
                currency=match.get("8. currency", "USD"),
            )
        )
    return results


def normalize_global_quote(
    payload: dict, company_name: Optional[str] = None, tz: Optional[tzinfo] = None
) -> Optional[Quote]:
    """Alpha Vantage GLOBAL_QUOTE -> Quote, or None when the quote is empty."""
    quote = payload.get("Global Quote") or {}
    symbol = quote.get("01. symbol")
    if not symbol:
        return None

    timestamp = parse_timestamp(quote.get("07. latest trading day", ""), tz)

    return Quote(
        symbol=symbol,
        company_name=company_name,
        price=safe_float(quote.get("05. price")),
        change=safe_float(quote.get("09. change")),
        change_percent=safe_float(quote.get("10. change percent")),
        open=safe_float(quote.get("02. open")),
        high=safe_float(quote.get("03. high")),
        low=safe_float(quote.get("04. low")),
        previous_close=safe_float(quote.get("08. previous close")),
        volume=safe_float(quote.get("06. volume")),
        timestamp=timestamp if timestamp is not None else 0,
    )


# =============================================================================
# FINNHUB
# =============================================================================


def normalize_finnhub_candles(payload: dict) -> list[Candle]:
    """Finnhub /stock/candle column arrays -> ascending candles."""
    if payload.get("s") != "ok":
        return []

    columns = [payload.get(k) or [] for k in ("t", "o", "h", "l", "c", "v")]
    candles = []
    for t, o, h, l, c, v in zip(*columns):
        if t is None or c is None:
            continue
        candle = Candle(
            time=int(t),
            open=safe_float(o),
            high=safe_float(h),
            low=safe_float(l),
            close=safe_float(c),
            volume=max(safe_float(v), 0.0),
        )
        if is_consistent(candle):
            candles.append(candle)

    candles.sort(key=lambda c: c.time)
    return candles


def normalize_finnhub_quote(payload: dict, symbol: str) -> Optional[Quote]:
    """Finnhub /quote -> Quote; None when the provider has no price."""
    if not payload.get("t"):
        return None
    return Quote(
        symbol=symbol.upper(),
        price=safe_float(payload.get("c")),
        change=safe_float(payload.get("d")),
        change_percent=safe_float(payload.get("dp")),
        open=safe_float(payload.get("o")),
        high=safe_float(payload.get("h")),
        low=safe_float(payload.get("l")),
        previous_close=safe_float(payload.get("pc")),
        timestamp=int(payload["t"]),
    )


def normalize_finnhub_search(payload: dict) -> list[SymbolSearchResult]:
    return [
        SymbolSearchResult(
            symbol=item["symbol"],
            name=item.get("description", ""),
            type=map_symbol_type(item.get("type", "")),
        )
        for item in payload.get("result") or []
        if item.get("symbol")
    ]


def normalize_finnhub_profile(payload: dict) -> Optional[CompanyProfile]:
    """Finnhub /stock/profile2 -> CompanyProfile; None for an empty body."""
    if not payload.get("ticker"):
        return None
    return CompanyProfile(
        symbol=payload["ticker"],
        name=payload.get("name", ""),
        logo=payload.get("logo"),
        industry=payload.get("finnhubIndustry"),
        country=payload.get("country"),
        exchange=payload.get("exchange"),
        market_cap=payload.get("marketCapitalization"),
        currency=payload.get("currency"),
        weburl=payload.get("weburl"),
    )
