from __future__ import annotations

from datetime import timezone

from stockchart.schemas.market import Resolution, SymbolType
from stockchart.services.market_data.normalizer import (
    map_symbol_type,
    normalize_finnhub_candles,
    normalize_finnhub_profile,
    normalize_finnhub_quote,
    normalize_global_quote,
    normalize_symbol_search,
    normalize_time_series,
    parse_timestamp,
    safe_float,
    series_key,
)

UTC = timezone.utc


def _bar(close: str, high: str = "110.0", low: str = "90.0") -> dict:
    return {
        "1. open": "100.0",
        "2. high": high,
        "3. low": low,
        "4. close": close,
        "5. volume": "12345",
    }


def test_daily_series_is_sorted_and_skips_incomplete_entries() -> None:
    series = {
        "2024-01-08": _bar("105.0"),
        "2024-01-05": _bar("104.0"),
        "2024-01-04": _bar("103.0"),
        "2024-01-03": _bar("102.0"),
        "2024-01-02": _bar("101.0"),
        "2024-01-01": {"1. open": "1", "2. high": "2", "3. low": "0.5", "5. volume": "1"},
    }

    candles = normalize_time_series({"Time Series (Daily)": series}, "Time Series (Daily)", UTC)

    assert [c.close for c in candles] == [101.0, 102.0, 103.0, 104.0, 105.0]
    assert candles[0].time == 1_704_153_600
    assert candles[0].volume == 12345.0


def test_inconsistent_bar_is_skipped() -> None:
    series = {
        "2024-01-02": _bar("101.0"),
        "2024-01-03": _bar("120.0", high="110.0"),
    }

    candles = normalize_time_series({"k": series}, "k", UTC)

    assert [c.close for c in candles] == [101.0]


def test_unparseable_price_drops_bar_but_bad_volume_is_zero() -> None:
    bad_open = dict(_bar("101.0"), **{"1. open": "N/A"})
    bad_volume = dict(_bar("102.0"), **{"5. volume": "x"})
    series = {"2024-01-02": bad_open, "2024-01-03": bad_volume}

    (candle,) = normalize_time_series({"k": series}, "k", UTC)

    assert candle.close == 102.0
    assert candle.volume == 0.0


def test_missing_series_key_gives_empty_list() -> None:
    assert normalize_time_series({"Meta Data": {}}, "Time Series (Daily)", UTC) == []


def test_parse_timestamp() -> None:
    assert parse_timestamp("2024-01-02", UTC) == 1_704_153_600
    assert parse_timestamp("2024-01-02 09:30:00", UTC) == 1_704_187_800
    assert parse_timestamp("2024-01-02 09:30", UTC) == 1_704_187_800
    assert parse_timestamp("yesterday", UTC) is None


def test_safe_float() -> None:
    assert safe_float("1.5") == 1.5
    assert safe_float("1.2345%") == 1.2345
    assert safe_float(None) == 0.0
    assert safe_float("n/a") == 0.0
    assert safe_float("nan", default=-1.0) == -1.0


def test_series_key() -> None:
    assert series_key(Resolution.M5) == "Time Series (5min)"
    assert series_key(Resolution.H1) == "Time Series (60min)"
    assert series_key(Resolution.D1) == "Time Series (Daily)"
    assert series_key(Resolution.W1) == "Weekly Time Series"
    assert series_key(Resolution.MN) == "Monthly Time Series"


def test_global_quote() -> None:
    payload = {
        "Global Quote": {
            "01. symbol": "IBM",
            "02. open": "160.00",
            "03. high": "162.50",
            "04. low": "159.10",
            "05. price": "161.75",
            "06. volume": "3456789",
            "07. latest trading day": "2024-01-02",
            "08. previous close": "160.50",
            "09. change": "1.25",
            "10. change percent": "0.7788%",
        }
    }

    quote = normalize_global_quote(payload, company_name="International Business Machines", tz=UTC)

    assert quote.symbol == "IBM"
    assert quote.price == 161.75
    assert quote.change_percent == 0.7788
    assert quote.volume == 3_456_789.0
    assert quote.timestamp == 1_704_153_600
    assert quote.company_name == "International Business Machines"


def test_empty_global_quote_is_none() -> None:
    assert normalize_global_quote({"Global Quote": {}}) is None
    assert normalize_global_quote({}) is None


def test_symbol_search() -> None:
    payload = {
        "bestMatches": [
            {"1. symbol": "SPY", "2. name": "SPDR S&P 500 ETF", "3. type": "ETF", "4. region": "United States", "8. currency": "USD"},
            {"1. symbol": "IBM", "2. name": "International Business Machines", "3. type": "Equity"},
            {"2. name": "no symbol"},
        ]
    }

    results = normalize_symbol_search(payload)

    assert [r.symbol for r in results] == ["SPY", "IBM"]
    assert results[0].type == SymbolType.ETF
    assert results[1].type == SymbolType.STOCK


def test_map_symbol_type() -> None:
    assert map_symbol_type("ETF") == SymbolType.ETF
    assert map_symbol_type("Index") == SymbolType.INDEX
    assert map_symbol_type("Digital Currency") == SymbolType.CRYPTO
    assert map_symbol_type("Common Stock") == SymbolType.STOCK
    assert map_symbol_type("") == SymbolType.STOCK


def test_finnhub_candles() -> None:
    payload = {
        "s": "ok",
        "t": [1_704_240_000, 1_704_153_600],
        "o": [101.0, 100.0],
        "h": [103.0, 102.0],
        "l": [100.5, 99.0],
        "c": [102.5, 101.0],
        "v": [2000, 1000],
    }

    candles = normalize_finnhub_candles(payload)

    assert [c.time for c in candles] == [1_704_153_600, 1_704_240_000]
    assert candles[1].close == 102.5


def test_finnhub_no_data() -> None:
    assert normalize_finnhub_candles({"s": "no_data"}) == []


def test_finnhub_quote_and_profile() -> None:
    quote = normalize_finnhub_quote({"c": 10.0, "d": 0.5, "dp": 5.26, "pc": 9.5, "t": 1_704_153_600}, "aapl")

    assert quote.symbol == "AAPL"
    assert quote.previous_close == 9.5
    assert normalize_finnhub_quote({"c": 0, "t": 0}, "AAPL") is None

    profile = normalize_finnhub_profile({"ticker": "AAPL", "name": "Apple Inc", "marketCapitalization": 2_900_000.0})

    assert profile.symbol == "AAPL"
    assert profile.market_cap == 2_900_000.0
    assert normalize_finnhub_profile({}) is None
