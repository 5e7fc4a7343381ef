from __future__ import annotations

import pytest

from stockchart.schemas.indicators import (
    IndicatorCategory,
    IndicatorType,
    RSIParams,
    SMAParams,
)
from stockchart.schemas.market import PriceSource, Resolution, TimeRange
from stockchart.services.base import ValidationError
from stockchart.services.indicators.registry import IndicatorRegistry, get_indicator_registry
from stockchart.services.market_data.mock_data import generate_mock_ohlcv

# 2024-07-01 00:00 UTC
END = 1_719_792_000


@pytest.fixture(scope="module")
def daily_candles():
    return generate_mock_ohlcv("AAPL", TimeRange.Y1, Resolution.D1, end_time=END)


def test_catalog_lists_every_indicator() -> None:
    registry = IndicatorRegistry()

    types = [m.type for m in registry.list_indicators()]

    assert len(types) == 25
    assert set(types) == set(IndicatorType)
    assert len(registry.overlays()) == 10
    assert len(registry.oscillators()) == 15


def test_metadata_and_defaults() -> None:
    registry = get_indicator_registry()

    metadata = registry.get_metadata(IndicatorType.BOLLINGER_BANDS)

    assert metadata.short_name == "BB"
    assert metadata.overlay is True
    assert metadata.outputs == ["upper", "middle", "lower"]
    assert registry.get_default_params("sma") == {"period": 20, "source": "close"}
    assert registry.get_default_params(IndicatorType.MACD) == {
        "fast_period": 12,
        "slow_period": 26,
        "signal_period": 9,
    }
    assert registry.get_default_params(IndicatorType.OBV) == {}


def test_default_params_are_copies() -> None:
    registry = IndicatorRegistry()

    registry.get_default_params(IndicatorType.RSI)["period"] = 2

    assert registry.get_default_params(IndicatorType.RSI)["period"] == 14


def test_by_category() -> None:
    volume = {m.type for m in IndicatorRegistry().by_category(IndicatorCategory.VOLUME)}

    assert volume == {IndicatorType.VWAP, IndicatorType.OBV, IndicatorType.CMF, IndicatorType.MFI}


def test_resolve_params_merges_partial_dict() -> None:
    params = IndicatorRegistry().resolve_params(IndicatorType.SMA, {"period": 5})

    assert isinstance(params, SMAParams)
    assert params.period == 5
    assert params.source == PriceSource.CLOSE


def test_resolve_params_rejects_wrong_variant() -> None:
    registry = IndicatorRegistry()

    with pytest.raises(ValidationError):
        registry.resolve_params(IndicatorType.SMA, RSIParams())
    with pytest.raises(ValidationError):
        registry.resolve_params(IndicatorType.SMA, {"kind": "rsi"})


def test_resolve_params_rejects_invalid_values() -> None:
    with pytest.raises(ValidationError) as exc_info:
        IndicatorRegistry().resolve_params(IndicatorType.RSI, {"period": 0})

    assert exc_info.value.details["errors"]


def test_unknown_indicator_type() -> None:
    with pytest.raises(ValidationError, match="Unknown indicator type"):
        IndicatorRegistry().calculate("supertrend", [])


@pytest.mark.parametrize("indicator_type", list(IndicatorType))
def test_minimum_candles_is_exact(indicator_type, daily_candles) -> None:
    registry = IndicatorRegistry()
    minimum = registry.minimum_candles(indicator_type)

    assert registry.calculate(indicator_type, daily_candles[: minimum - 1]) == []
    assert registry.calculate(indicator_type, daily_candles[:minimum]) != []


def test_minimum_follows_params() -> None:
    registry = IndicatorRegistry()

    assert registry.minimum_candles(IndicatorType.ADX, {"period": 5}) == 10
    assert registry.minimum_candles(IndicatorType.MACD, {"fast_period": 3, "slow_period": 6, "signal_period": 4}) == 9
    assert registry.minimum_candles(IndicatorType.STOCHASTIC_RSI) == 32
    assert registry.minimum_candles(IndicatorType.TEMA) == 58


def test_calculate_with_custom_params(daily_candles) -> None:
    points = IndicatorRegistry().calculate(IndicatorType.EMA, daily_candles, {"period": 10})

    assert len(points) == len(daily_candles) - 9
    assert points[0].time == daily_candles[9].time
