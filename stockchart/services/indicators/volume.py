"""
Volume indicators: VWAP, OBV, CMF, MFI.
"""

from typing import Sequence

from stockchart.schemas.market import Candle
from stockchart.schemas.indicators import IndicatorPoint, VWAPBandPoint
from stockchart.services.indicators import calculations as calc
from stockchart.services.indicators.utils import line_points, periods_valid, to_ohlcv


def calculate_vwap(candles: Sequence[Candle], reset_daily: bool = True) -> list[IndicatorPoint]:
    """
    Volume Weighted Average Price on the typical price.

    Accumulation restarts at each UTC day boundary when reset_daily is set.
    """
    if not candles:
        return []

    data = to_ohlcv(candles)
    values = calc.vwap(
        data.timestamps, data.highs, data.lows, data.closes, data.volumes, reset_daily
    )
    return line_points(data.timestamps, values, 0)


def calculate_vwap_bands(
    candles: Sequence[Candle], multiplier: float = 2.0, reset_daily: bool = True
) -> list[VWAPBandPoint]:
    """VWAP with bands at +/- multiplier volume-weighted standard deviations."""
    if not candles:
        return []

    data = to_ohlcv(candles)
    center, upper, lower = calc.vwap_bands(
        data.timestamps,
        data.highs,
        data.lows,
        data.closes,
        data.volumes,
        multiplier,
        reset_daily,
    )
    return [
        VWAPBandPoint(
            time=int(data.timestamps[i]),
            vwap=float(center[i]),
            upper=float(upper[i]),
            lower=float(lower[i]),
        )
        for i in range(len(candles))
    ]


def calculate_obv(candles: Sequence[Candle]) -> list[IndicatorPoint]:
    """On-Balance Volume starting at 0 on the first candle."""
    if not candles:
        return []

    data = to_ohlcv(candles)
    return line_points(data.timestamps, calc.obv(data.closes, data.volumes), 0)


def calculate_obv_signal(candles: Sequence[Candle], period: int = 20) -> list[IndicatorPoint]:
    """SMA of OBV, used as a signal line."""
    if not periods_valid("OBV signal", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    signal = calc.sma(calc.obv(data.closes, data.volumes), period)
    return line_points(data.timestamps, signal, period - 1)


def calculate_cmf(candles: Sequence[Candle], period: int = 20) -> list[IndicatorPoint]:
    """Chaikin Money Flow in [-1, 1]."""
    if not periods_valid("CMF", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    values = calc.cmf(data.highs, data.lows, data.closes, data.volumes, period)
    return line_points(data.timestamps, values, period - 1)


def calculate_mfi(candles: Sequence[Candle], period: int = 14) -> list[IndicatorPoint]:
    """Money Flow Index; first point at index period."""
    if not periods_valid("MFI", period) or len(candles) < period + 1:
        return []

    data = to_ohlcv(candles)
    values = calc.mfi(data.highs, data.lows, data.closes, data.volumes, period)
    return line_points(data.timestamps, values, period)
