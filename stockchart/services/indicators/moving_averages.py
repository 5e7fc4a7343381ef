"""
Moving average overlays: SMA, EMA, WMA, DEMA, TEMA.

Each function returns points aligned to candle times, starting at the first
bar where the average is defined, or [] when there is not enough data.
"""

from typing import Sequence

from stockchart.schemas.market import Candle, PriceSource
from stockchart.schemas.indicators import IndicatorPoint
from stockchart.services.indicators import calculations as calc
from stockchart.services.indicators.utils import (
    extract_prices,
    line_points,
    periods_valid,
    to_ohlcv,
)


def calculate_sma(
    candles: Sequence[Candle], period: int = 20, source: PriceSource = PriceSource.CLOSE
) -> list[IndicatorPoint]:
    """Simple Moving Average; first point at index period - 1."""
    if not periods_valid("SMA", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    values = calc.sma(extract_prices(data, source), period)
    return line_points(data.timestamps, values, period - 1)


def calculate_ema(
    candles: Sequence[Candle], period: int = 20, source: PriceSource = PriceSource.CLOSE
) -> list[IndicatorPoint]:
    """Exponential Moving Average seeded with the SMA of the first period."""
    if not periods_valid("EMA", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    values = calc.ema(extract_prices(data, source), period)
    return line_points(data.timestamps, values, period - 1)


def calculate_wma(
    candles: Sequence[Candle], period: int = 20, source: PriceSource = PriceSource.CLOSE
) -> list[IndicatorPoint]:
    """Linearly Weighted Moving Average."""
    if not periods_valid("WMA", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    values = calc.wma(extract_prices(data, source), period)
    return line_points(data.timestamps, values, period - 1)


def calculate_dema(
    candles: Sequence[Candle], period: int = 20, source: PriceSource = PriceSource.CLOSE
) -> list[IndicatorPoint]:
    """Double EMA; needs 2 * period - 1 candles."""
    if not periods_valid("DEMA", period) or len(candles) < 2 * period - 1:
        return []

    data = to_ohlcv(candles)
    values = calc.dema(extract_prices(data, source), period)
    return line_points(data.timestamps, values, 2 * period - 2)


def calculate_tema(
    candles: Sequence[Candle], period: int = 20, source: PriceSource = PriceSource.CLOSE
) -> list[IndicatorPoint]:
    """Triple EMA; needs 3 * period - 2 candles."""
    if not periods_valid("TEMA", period) or len(candles) < 3 * period - 2:
        return []

    data = to_ohlcv(candles)
    values = calc.tema(extract_prices(data, source), period)
    return line_points(data.timestamps, values, 3 * period - 3)
