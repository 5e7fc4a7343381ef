"""
Volatility indicators: Bollinger Bands, Envelope, ATR.
"""

from typing import Sequence

import numpy as np

from stockchart.schemas.market import Candle, PriceSource
from stockchart.schemas.indicators import BandPoint, IndicatorPoint
from stockchart.services.indicators import calculations as calc
from stockchart.services.indicators.utils import (
    extract_prices,
    line_points,
    periods_valid,
    to_ohlcv,
)


def _band_points(
    timestamps: np.ndarray,
    upper: np.ndarray,
    middle: np.ndarray,
    lower: np.ndarray,
    start: int,
) -> list[BandPoint]:
    return [
        BandPoint(time=int(timestamps[i]), upper=float(upper[i]), middle=float(middle[i]), lower=float(lower[i]))
        for i in range(start, len(timestamps))
    ]


def calculate_bollinger_bands(
    candles: Sequence[Candle],
    period: int = 20,
    std_dev_multiplier: float = 2.0,
    source: PriceSource = PriceSource.CLOSE,
) -> list[BandPoint]:
    """
    Bollinger Bands.

    middle = SMA(period), upper/lower = middle +/- multiplier * population
    standard deviation of the same window.
    """
    if not periods_valid("Bollinger Bands", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    upper, middle, lower, _, _ = calc.bollinger_bands(
        extract_prices(data, source), period, std_dev_multiplier
    )
    return _band_points(data.timestamps, upper, middle, lower, period - 1)


def calculate_bollinger_bandwidth(
    candles: Sequence[Candle], period: int = 20, std_dev_multiplier: float = 2.0
) -> list[IndicatorPoint]:
    """Band width as a percentage of the middle band; bars with a zero middle are skipped."""
    if not periods_valid("Bollinger Bandwidth", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    _, _, _, bandwidth, _ = calc.bollinger_bands(data.closes, period, std_dev_multiplier)
    return [p for p in line_points(data.timestamps, bandwidth, period - 1) if not np.isnan(p.value)]


def calculate_percent_b(
    candles: Sequence[Candle], period: int = 20, std_dev_multiplier: float = 2.0
) -> list[IndicatorPoint]:
    """%B: close position within the bands; bars with zero band width are skipped."""
    if not periods_valid("%B", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    _, _, _, _, percent_b = calc.bollinger_bands(data.closes, period, std_dev_multiplier)
    return [p for p in line_points(data.timestamps, percent_b, period - 1) if not np.isnan(p.value)]


def calculate_envelope(
    candles: Sequence[Candle], period: int = 20, percentage: float = 2.5
) -> list[BandPoint]:
    """Moving Average Envelope: SMA shifted up and down by a percentage."""
    if not periods_valid("Envelope", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    upper, middle, lower = calc.envelope(data.closes, period, percentage)
    return _band_points(data.timestamps, upper, middle, lower, period - 1)


def calculate_atr(candles: Sequence[Candle], period: int = 14) -> list[IndicatorPoint]:
    """
    Average True Range.

    TR of the first bar is high - low. The first ATR is the mean of the first
    `period` true ranges, emitted at index period - 1; after that
    atr = (prev * (period - 1) + tr) / period. A constant true range R yields
    exactly R.
    """
    if not periods_valid("ATR", period) or len(candles) < period + 1:
        return []

    data = to_ohlcv(candles)
    values = calc.atr(data.highs, data.lows, data.closes, period)
    return line_points(data.timestamps, values, period - 1)
