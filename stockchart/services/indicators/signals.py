"""
Signal classification for indicator readings.

Thresholds are the conventional chart levels; every helper takes plain
floats so it can be applied to the latest point of any series.
"""

from enum import Enum
from typing import Callable, Optional, Sequence

import numpy as np

from stockchart.services.indicators import calculations as calc


class Signal(str, Enum):
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class TrendStrength(str, Enum):
    WEAK = "weak"
    STRONG = "strong"
    VERY_STRONG = "very_strong"
    EXTREME = "extreme"


class ZeroLineCross(str, Enum):
    BULLISH_CROSS = "bullish_cross"
    BEARISH_CROSS = "bearish_cross"


# =============================================================================
# LEVELS
# =============================================================================

RSI_LEVELS = {"overbought": 70, "oversold": 30, "middle": 50}
STOCHASTIC_LEVELS = {"overbought": 80, "oversold": 20}
CCI_LEVELS = {"overbought": 100, "oversold": -100}
MFI_LEVELS = {"overbought": 80, "oversold": 20}
WILLIAMS_R_LEVELS = {"overbought": -20, "oversold": -80}
ADX_LEVELS = {"weak": 25, "strong": 50, "very_strong": 75}
AROON_LEVELS = {"strong": 70, "weak": 30}
CMF_THRESHOLD = 0.05
ADX_DIRECTION_THRESHOLD = 5


def _band_signal(value: float, overbought: float, oversold: float) -> Signal:
    if value >= overbought:
        return Signal.OVERBOUGHT
    if value <= oversold:
        return Signal.OVERSOLD
    return Signal.NEUTRAL


# =============================================================================
# OSCILLATOR ZONES
# =============================================================================


def rsi_signal(value: float) -> Signal:
    return _band_signal(value, RSI_LEVELS["overbought"], RSI_LEVELS["oversold"])


def stochastic_signal(k: float, d: Optional[float] = None) -> Signal:
    """Zone of %K, or of the %K/%D average when %D is given."""
    value = (k + d) / 2 if d is not None else k
    return _band_signal(value, STOCHASTIC_LEVELS["overbought"], STOCHASTIC_LEVELS["oversold"])


def cci_signal(value: float) -> Signal:
    return _band_signal(value, CCI_LEVELS["overbought"], CCI_LEVELS["oversold"])


def mfi_signal(value: float) -> Signal:
    return _band_signal(value, MFI_LEVELS["overbought"], MFI_LEVELS["oversold"])


def williams_r_signal(value: float) -> Signal:
    return _band_signal(value, WILLIAMS_R_LEVELS["overbought"], WILLIAMS_R_LEVELS["oversold"])


# =============================================================================
# DIRECTIONAL
# =============================================================================


def macd_signal(histogram: float, previous_histogram: float) -> Signal:
    """Bullish on an expanding positive histogram, bearish on an expanding negative one."""
    if histogram > 0 and histogram > previous_histogram:
        return Signal.BULLISH
    if histogram < 0 and histogram < previous_histogram:
        return Signal.BEARISH
    return Signal.NEUTRAL


def momentum_signal(value: float, previous: Optional[float] = None) -> Signal:
    """Sign of momentum; with a previous value the move must also be extending."""
    if previous is not None:
        if value > 0 and value > previous:
            return Signal.BULLISH
        if value < 0 and value < previous:
            return Signal.BEARISH
        return Signal.NEUTRAL

    if value > 0:
        return Signal.BULLISH
    if value < 0:
        return Signal.BEARISH
    return Signal.NEUTRAL


def awesome_oscillator_signal(value: float, previous: float) -> Signal:
    return momentum_signal(value, previous)


def detect_zero_line_cross(value: float, previous: float) -> Optional[ZeroLineCross]:
    """Zero-line crossover between two consecutive readings, if any."""
    if previous < 0 and value >= 0:
        return ZeroLineCross.BULLISH_CROSS
    if previous > 0 and value <= 0:
        return ZeroLineCross.BEARISH_CROSS
    return None


def obv_signal(value: float, previous: float) -> Signal:
    change = value - previous
    if change > 0:
        return Signal.BULLISH
    if change < 0:
        return Signal.BEARISH
    return Signal.NEUTRAL


def cmf_signal(value: float) -> Signal:
    if value > CMF_THRESHOLD:
        return Signal.BULLISH
    if value < -CMF_THRESHOLD:
        return Signal.BEARISH
    return Signal.NEUTRAL


def aroon_signal(up: float, down: float) -> Signal:
    if up > AROON_LEVELS["strong"] and down < AROON_LEVELS["weak"]:
        return Signal.BULLISH
    if down > AROON_LEVELS["strong"] and up < AROON_LEVELS["weak"]:
        return Signal.BEARISH
    return Signal.NEUTRAL


def adx_strength(adx: float) -> TrendStrength:
    if adx >= ADX_LEVELS["very_strong"]:
        return TrendStrength.EXTREME
    if adx >= ADX_LEVELS["strong"]:
        return TrendStrength.VERY_STRONG
    if adx >= ADX_LEVELS["weak"]:
        return TrendStrength.STRONG
    return TrendStrength.WEAK


def adx_direction(plus_di: float, minus_di: float) -> Signal:
    diff = plus_di - minus_di
    if abs(diff) < ADX_DIRECTION_THRESHOLD:
        return Signal.NEUTRAL
    return Signal.BULLISH if diff > 0 else Signal.BEARISH


# =============================================================================
# LATEST READINGS
# =============================================================================


def latest_values(values: Sequence[float], count: int = 2) -> list[float]:
    """Last `count` non-NaN readings, oldest first."""
    arr = np.asarray(values, dtype=float)
    readings: list[float] = []
    while len(readings) < count:
        value = calc.get_last_valid(arr)
        if value is None:
            break
        readings.insert(0, value)
        arr = arr[: int(np.flatnonzero(~np.isnan(arr))[-1])]
    return readings


def latest_signal(values: Sequence[float], classify: Callable[[float], Signal]) -> Optional[Signal]:
    """Classify the most recent reading; None while the series is still warming up."""
    value = calc.get_last_valid(np.asarray(values, dtype=float))
    if value is None:
        return None
    return classify(value)


def latest_change_signal(
    values: Sequence[float], classify: Callable[[float, float], Signal]
) -> Optional[Signal]:
    """Classify the latest reading against the one before it."""
    readings = latest_values(values, 2)
    if len(readings) < 2:
        return None
    previous, value = readings
    return classify(value, previous)
