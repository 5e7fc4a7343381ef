"""
Momentum oscillators: RSI, MACD, Stochastic, Stochastic RSI, Williams %R,
CCI, ROC, Momentum, Awesome Oscillator.
"""

from typing import Optional, Sequence

from stockchart.schemas.market import Candle
from stockchart.schemas.indicators import IndicatorPoint, MACDPoint, StochasticPoint
from stockchart.services.indicators import calculations as calc
from stockchart.services.indicators.utils import line_points, periods_valid, to_ohlcv


def calculate_rsi(candles: Sequence[Candle], period: int = 14) -> list[IndicatorPoint]:
    """Relative Strength Index (Wilder smoothing); first point at index period."""
    if not periods_valid("RSI", period) or len(candles) < period + 1:
        return []

    data = to_ohlcv(candles)
    return line_points(data.timestamps, calc.rsi(data.closes, period), period)


def calculate_macd(
    candles: Sequence[Candle],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> list[MACDPoint]:
    """
    MACD line, signal line and histogram.

    Points start where the signal line is defined, at index
    slow_period + signal_period - 2.
    """
    if not periods_valid("MACD", fast_period, slow_period, signal_period):
        return []
    longest = max(fast_period, slow_period)
    if len(candles) < longest + signal_period - 1:
        return []

    data = to_ohlcv(candles)
    macd_line, signal_line, histogram = calc.macd(
        data.closes, fast_period, slow_period, signal_period
    )
    start = longest + signal_period - 2
    return [
        MACDPoint(
            time=int(data.timestamps[i]),
            macd=float(macd_line[i]),
            signal=float(signal_line[i]),
            histogram=float(histogram[i]),
        )
        for i in range(start, len(candles))
    ]


def _stochastic_points(timestamps, k, d, start: int) -> list[StochasticPoint]:
    return [
        StochasticPoint(time=int(timestamps[i]), k=float(k[i]), d=float(d[i]))
        for i in range(start, len(timestamps))
    ]


def calculate_stochastic(
    candles: Sequence[Candle], k_period: int = 14, d_period: int = 3, smooth: int = 3
) -> list[StochasticPoint]:
    """
    Stochastic Oscillator.

    raw %K = (close - lowest low) / (highest high - lowest low) * 100, or 50
    for a flat window; %K = SMA(raw, smooth); %D = SMA(%K, d_period).
    """
    if not periods_valid("Stochastic", k_period, d_period, smooth):
        return []
    if len(candles) < k_period + d_period + smooth - 2:
        return []

    data = to_ohlcv(candles)
    k, d = calc.stochastic(data.highs, data.lows, data.closes, k_period, d_period, smooth)
    return _stochastic_points(data.timestamps, k, d, k_period + d_period + smooth - 3)


def calculate_stochastic_rsi(
    candles: Sequence[Candle],
    rsi_period: int = 14,
    stoch_period: int = 14,
    k_smooth: int = 3,
    d_period: int = 3,
) -> list[StochasticPoint]:
    """Stochastic oscillator applied to RSI values."""
    if not periods_valid("Stochastic RSI", rsi_period, stoch_period, k_smooth, d_period):
        return []
    warmup = rsi_period + stoch_period + k_smooth + d_period - 2
    if len(candles) < warmup:
        return []

    data = to_ohlcv(candles)
    k, d = calc.stochastic_rsi(data.closes, rsi_period, stoch_period, k_smooth, d_period)
    return _stochastic_points(data.timestamps, k, d, warmup - 1)


def calculate_williams_r(candles: Sequence[Candle], period: int = 14) -> list[IndicatorPoint]:
    """Williams %R in [-100, 0]; -50 for a flat window."""
    if not periods_valid("Williams %R", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    values = calc.williams_r(data.highs, data.lows, data.closes, period)
    return line_points(data.timestamps, values, period - 1)


def calculate_cci(candles: Sequence[Candle], period: int = 20) -> list[IndicatorPoint]:
    """Commodity Channel Index on the typical price."""
    if not periods_valid("CCI", period) or len(candles) < period:
        return []

    data = to_ohlcv(candles)
    values = calc.cci(data.highs, data.lows, data.closes, period)
    return line_points(data.timestamps, values, period - 1)


def calculate_roc(candles: Sequence[Candle], period: int = 12) -> list[IndicatorPoint]:
    """Rate of Change in percent."""
    if not periods_valid("ROC", period) or len(candles) < period + 1:
        return []

    data = to_ohlcv(candles)
    return line_points(data.timestamps, calc.roc(data.closes, period), period)


def calculate_momentum(candles: Sequence[Candle], period: int = 10) -> list[IndicatorPoint]:
    """Close minus the close `period` bars back."""
    if not periods_valid("Momentum", period) or len(candles) < period + 1:
        return []

    data = to_ohlcv(candles)
    return line_points(data.timestamps, calc.momentum(data.closes, period), period)


def calculate_awesome_oscillator(
    candles: Sequence[Candle], fast_period: int = 5, slow_period: int = 34
) -> list[IndicatorPoint]:
    """SMA(median, fast) - SMA(median, slow) with median = (high + low) / 2."""
    if not periods_valid("Awesome Oscillator", fast_period, slow_period):
        return []
    longest = max(fast_period, slow_period)
    if len(candles) < longest:
        return []

    data = to_ohlcv(candles)
    values = calc.awesome_oscillator(data.highs, data.lows, fast_period, slow_period)
    return line_points(data.timestamps, values, longest - 1)


def awesome_oscillator_colors(points: Sequence[IndicatorPoint]) -> list[str]:
    """
    Histogram bar colors.

    The first bar is colored by sign, later bars by direction versus the
    previous bar (green when not falling).
    """
    colors = []
    previous: Optional[float] = None
    for point in points:
        reference = 0.0 if previous is None else previous
        colors.append("green" if point.value >= reference else "red")
        previous = point.value
    return colors
