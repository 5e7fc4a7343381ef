"""
Trend indicators: ADX, Aroon, Parabolic SAR, Ichimoku.
"""

import math
from typing import Optional, Sequence

from stockchart.schemas.market import Candle
from stockchart.schemas.indicators import (
    ADXPoint,
    AroonPoint,
    IchimokuPoint,
    IndicatorPoint,
    ParabolicSARPoint,
    Trend,
)
from stockchart.services.indicators import calculations as calc
from stockchart.services.indicators.utils import periods_valid, to_ohlcv


def calculate_adx(candles: Sequence[Candle], period: int = 14) -> list[ADXPoint]:
    """
    Average Directional Index with +DI / -DI.

    DM and TR are Wilder running sums, DX is averaged again with Wilder
    smoothing. Points start at index 2 * period - 2; needs 2 * period candles.
    """
    if not periods_valid("ADX", period) or len(candles) < 2 * period:
        return []

    data = to_ohlcv(candles)
    adx, plus_di, minus_di = calc.adx(data.highs, data.lows, data.closes, period)
    return [
        ADXPoint(
            time=int(data.timestamps[i]),
            adx=float(adx[i]),
            plus_di=float(plus_di[i]),
            minus_di=float(minus_di[i]),
        )
        for i in range(2 * period - 2, len(candles))
    ]


def calculate_aroon(candles: Sequence[Candle], period: int = 25) -> list[AroonPoint]:
    """Aroon Up / Down; first point at index period."""
    if not periods_valid("Aroon", period) or len(candles) < period + 1:
        return []

    data = to_ohlcv(candles)
    up, down = calc.aroon(data.highs, data.lows, period)
    return [
        AroonPoint(time=int(data.timestamps[i]), up=float(up[i]), down=float(down[i]))
        for i in range(period, len(candles))
    ]


def calculate_aroon_oscillator(candles: Sequence[Candle], period: int = 25) -> list[IndicatorPoint]:
    """Aroon Up minus Aroon Down."""
    return [
        IndicatorPoint(time=point.time, value=point.up - point.down)
        for point in calculate_aroon(candles, period)
    ]


def calculate_parabolic_sar(
    candles: Sequence[Candle], step: float = 0.02, max_step: float = 0.2
) -> list[ParabolicSARPoint]:
    """Parabolic SAR with trend direction; one point per candle."""
    if not periods_valid("Parabolic SAR", step, max_step) or len(candles) < 2:
        return []

    data = to_ohlcv(candles)
    sar, trend = calc.parabolic_sar(data.highs, data.lows, data.closes, step, max_step)
    return [
        ParabolicSARPoint(
            time=int(data.timestamps[i]),
            value=float(sar[i]),
            trend=Trend.UP if trend[i] > 0 else Trend.DOWN,
        )
        for i in range(len(candles))
    ]


def _optional(value: float) -> Optional[float]:
    return None if math.isnan(value) else float(value)


def calculate_ichimoku(
    candles: Sequence[Candle],
    tenkan_period: int = 9,
    kijun_period: int = 26,
    senkou_period: int = 52,
) -> list[IchimokuPoint]:
    """
    Ichimoku Cloud.

    Points start once every conversion line is defined (index
    max(periods) - 1). Leading spans are plotted kijun_period bars after the
    bar they are computed from; the lagging span is the close kijun_period
    bars ahead. Undefined spans are None.
    """
    if not periods_valid("Ichimoku", tenkan_period, kijun_period, senkou_period):
        return []
    longest = max(tenkan_period, kijun_period, senkou_period)
    if len(candles) < longest:
        return []

    data = to_ohlcv(candles)
    tenkan, kijun, senkou_a, senkou_b, chikou = calc.ichimoku(
        data.highs, data.lows, data.closes, tenkan_period, kijun_period, senkou_period
    )
    return [
        IchimokuPoint(
            time=int(data.timestamps[i]),
            tenkan=float(tenkan[i]),
            kijun=float(kijun[i]),
            senkou_a=_optional(senkou_a[i]),
            senkou_b=_optional(senkou_b[i]),
            chikou=_optional(chikou[i]),
        )
        for i in range(longest - 1, len(candles))
    ]
