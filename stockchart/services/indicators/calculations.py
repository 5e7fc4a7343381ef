"""
Technical Indicator Calculations

Pure Python/NumPy implementations of technical indicators.
All math is deterministic.

Every function takes equal-length arrays and returns arrays of the same
length, NaN where the value is not yet defined. NaN prefixes are contiguous,
so series can be fed back into another calculation (EMA of an EMA, SMA of
%K) and the warm-up simply accumulates.
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass


@dataclass
class OHLCVData:
    """OHLCV data arrays for calculations."""

    timestamps: np.ndarray
    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray

    def __len__(self) -> int:
        return len(self.closes)


def first_valid_index(data: np.ndarray) -> Optional[int]:
    """Index of the first non-NaN value, or None."""
    valid = np.flatnonzero(~np.isnan(data))
    return int(valid[0]) if len(valid) > 0 else None


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average."""
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result

    for i in range(period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return result


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Seeded with the SMA of the first `period` defined values, then
    ema = (x - prev) * k + prev with k = 2 / (period + 1).
    """
    result = np.full(len(data), np.nan)
    start = first_valid_index(data)
    if start is None or len(data) - start < period:
        return result

    multiplier = 2 / (period + 1)
    seed = start + period - 1

    # Start with SMA
    result[seed] = np.mean(data[start : seed + 1])

    for i in range(seed + 1, len(data)):
        result[i] = (data[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


def wma(data: np.ndarray, period: int) -> np.ndarray:
    """Weighted Moving Average (newest value weighted `period`)."""
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result

    weights = np.arange(1, period + 1)
    divisor = period * (period + 1) / 2

    for i in range(period - 1, len(data)):
        result[i] = np.sum(data[i - period + 1 : i + 1] * weights) / divisor

    return result


def dema(data: np.ndarray, period: int) -> np.ndarray:
    """Double EMA: 2 * EMA - EMA(EMA)."""
    ema1 = ema(data, period)
    ema2 = ema(ema1, period)
    return 2 * ema1 - ema2


def tema(data: np.ndarray, period: int) -> np.ndarray:
    """Triple EMA: 3 * EMA1 - 3 * EMA2 + EMA3."""
    ema1 = ema(data, period)
    ema2 = ema(ema1, period)
    ema3 = ema(ema2, period)
    return 3 * ema1 - 3 * ema2 + ema3


def wilder_average(data: np.ndarray, period: int) -> np.ndarray:
    """Wilder smoothing seeded with the mean of the first `period` values."""
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result

    result[period - 1] = np.mean(data[:period])
    for i in range(period, len(data)):
        result[i] = (result[i - 1] * (period - 1) + data[i]) / period

    return result


def wilder_sum(data: np.ndarray, period: int) -> np.ndarray:
    """Wilder running sum: seed = sum of first `period`, then s - s/period + x."""
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result

    result[period - 1] = np.sum(data[:period])
    for i in range(period, len(data)):
        result[i] = result[i - 1] - result[i - 1] / period + data[i]

    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index (Wilder)."""
    if len(closes) < period + 1:
        return np.full(len(closes), np.nan)

    # Calculate price changes
    deltas = np.diff(closes)

    # Separate gains and losses
    gains = np.where(deltas > 0, deltas, 0)
    losses = np.where(deltas < 0, -deltas, 0)

    # First average
    avg_gain = np.mean(gains[:period])
    avg_loss = np.mean(losses[:period])

    result = np.full(len(closes), np.nan)

    # First RSI
    if avg_loss == 0:
        result[period] = 100
    else:
        rs = avg_gain / avg_loss
        result[period] = 100 - (100 / (1 + rs))

    # Subsequent RSI values using smoothed averages
    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period

        if avg_loss == 0:
            result[i + 1] = 100
        else:
            rs = avg_gain / avg_loss
            result[i + 1] = 100 - (100 / (1 + rs))

    return result


def macd(
    closes: np.ndarray,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    Returns: (macd_line, signal_line, histogram)
    """
    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    macd_line = fast_ema - slow_ema

    # Signal line is EMA of the defined part of the MACD line
    signal_line = ema(macd_line, signal_period)

    histogram = macd_line - signal_line

    return macd_line, signal_line, histogram


def _window_stochastic(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int
) -> np.ndarray:
    """Raw %K over a rolling window; 50 when the window has no range."""
    result = np.full(len(closes), np.nan)

    for i in range(period - 1, len(closes)):
        highest_high = np.max(highs[i - period + 1 : i + 1])
        lowest_low = np.min(lows[i - period + 1 : i + 1])

        if np.isnan(highest_high) or np.isnan(lowest_low) or np.isnan(closes[i]):
            continue
        if highest_high == lowest_low:
            result[i] = 50
        else:
            result[i] = ((closes[i] - lowest_low) / (highest_high - lowest_low)) * 100

    return result


def stochastic(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    k_period: int = 14,
    d_period: int = 3,
    smooth: int = 3,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Stochastic Oscillator.

    Returns: (k, d) where k is raw %K smoothed by `smooth` and d is SMA(k).
    """
    raw_k = _window_stochastic(highs, lows, closes, k_period)
    k = sma(raw_k, smooth)
    d = sma(k, d_period)

    return k, d


def stochastic_rsi(
    closes: np.ndarray,
    rsi_period: int = 14,
    stoch_period: int = 14,
    k_smooth: int = 3,
    d_period: int = 3,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Stochastic RSI.

    Returns: (k, d) - stochastic of RSI over `stoch_period`, smoothed.
    """
    rsi_values = rsi(closes, rsi_period)
    raw_k = _window_stochastic(rsi_values, rsi_values, rsi_values, stoch_period)
    k = sma(raw_k, k_smooth)
    d = sma(k, d_period)

    return k, d


def cci(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 20
) -> np.ndarray:
    """Commodity Channel Index; 0 when mean deviation is 0."""
    typical_price = (highs + lows + closes) / 3
    tp_sma = sma(typical_price, period)

    result = np.full(len(closes), np.nan)
    for i in range(period - 1, len(closes)):
        mean_dev = np.mean(np.abs(typical_price[i - period + 1 : i + 1] - tp_sma[i]))
        if mean_dev == 0:
            result[i] = 0
        else:
            result[i] = (typical_price[i] - tp_sma[i]) / (0.015 * mean_dev)

    return result


def williams_r(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Williams %R."""
    if len(closes) < period:
        return np.full(len(closes), np.nan)

    result = np.full(len(closes), np.nan)

    for i in range(period - 1, len(closes)):
        highest_high = np.max(highs[i - period + 1 : i + 1])
        lowest_low = np.min(lows[i - period + 1 : i + 1])

        if highest_high == lowest_low:
            result[i] = -50
        else:
            result[i] = ((highest_high - closes[i]) / (highest_high - lowest_low)) * -100

    return result


def roc(closes: np.ndarray, period: int = 12) -> np.ndarray:
    """Rate of Change in percent; 0 when the reference close is 0."""
    result = np.full(len(closes), np.nan)

    for i in range(period, len(closes)):
        past = closes[i - period]
        result[i] = 0 if past == 0 else (closes[i] - past) / past * 100

    return result


def momentum(closes: np.ndarray, period: int = 10) -> np.ndarray:
    """Momentum: close minus the close `period` bars back."""
    result = np.full(len(closes), np.nan)
    if len(closes) > period:
        result[period:] = closes[period:] - closes[:-period]
    return result


def awesome_oscillator(
    highs: np.ndarray, lows: np.ndarray, fast_period: int = 5, slow_period: int = 34
) -> np.ndarray:
    """Awesome Oscillator: SMA(median, fast) - SMA(median, slow)."""
    median = (highs + lows) / 2
    return sma(median, fast_period) - sma(median, slow_period)


def mfi(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    period: int = 14,
) -> np.ndarray:
    """Money Flow Index."""
    typical_price = (highs + lows + closes) / 3
    raw_money_flow = typical_price * volumes

    # Positive and negative money flow
    pos_flow = np.zeros(len(closes))
    neg_flow = np.zeros(len(closes))

    for i in range(1, len(closes)):
        if typical_price[i] > typical_price[i - 1]:
            pos_flow[i] = raw_money_flow[i]
        elif typical_price[i] < typical_price[i - 1]:
            neg_flow[i] = raw_money_flow[i]

    result = np.full(len(closes), np.nan)

    for i in range(period, len(closes)):
        pos_sum = np.sum(pos_flow[i - period + 1 : i + 1])
        neg_sum = np.sum(neg_flow[i - period + 1 : i + 1])

        if neg_sum == 0:
            result[i] = 100
        else:
            money_ratio = pos_sum / neg_sum
            result[i] = 100 - (100 / (1 + money_ratio))

    return result


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True Range; the first bar uses high - low."""
    tr = np.zeros(len(closes))
    if len(closes) == 0:
        return tr

    tr[0] = highs[0] - lows[0]
    for i in range(1, len(closes)):
        tr[i] = max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        )
    return tr


def atr(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Average True Range (Wilder average of TR)."""
    return wilder_average(true_range(highs, lows, closes), period)


def bollinger_bands(
    closes: np.ndarray, period: int = 20, std_dev: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Bollinger Bands.

    Returns: (upper, middle, lower, bandwidth, percent_b)
    bandwidth is in percent of the middle band; both derived series are NaN
    where their denominator is 0.
    """
    middle = sma(closes, period)

    # Population standard deviation
    std = np.full(len(closes), np.nan)
    for i in range(period - 1, len(closes)):
        std[i] = np.std(closes[i - period + 1 : i + 1])

    upper = middle + (std_dev * std)
    lower = middle - (std_dev * std)

    with np.errstate(divide="ignore", invalid="ignore"):
        bandwidth = np.where(middle != 0, (upper - lower) / middle * 100, np.nan)
        percent_b = np.where(upper != lower, (closes - lower) / (upper - lower), np.nan)

    return upper, middle, lower, bandwidth, percent_b


def envelope(
    data: np.ndarray, period: int = 20, percentage: float = 2.5
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Moving Average Envelope.

    Returns: (upper, middle, lower)
    """
    middle = sma(data, period)
    offset = percentage / 100
    return middle * (1 + offset), middle, middle * (1 - offset)


# =============================================================================
# VOLUME INDICATORS
# =============================================================================


def vwap(
    timestamps: np.ndarray,
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    reset_daily: bool = True,
) -> np.ndarray:
    """
    Volume Weighted Average Price.

    Accumulation restarts when the UTC calendar day changes (if reset_daily).
    Falls back to the typical price while accumulated volume is 0.
    """
    typical_price = (highs + lows + closes) / 3
    result = np.full(len(closes), np.nan)

    cumulative_tpv = 0.0
    cumulative_volume = 0.0
    current_day = None

    for i in range(len(closes)):
        day = int(timestamps[i]) // 86400
        if reset_daily and day != current_day:
            cumulative_tpv = 0.0
            cumulative_volume = 0.0
            current_day = day

        cumulative_tpv += typical_price[i] * volumes[i]
        cumulative_volume += volumes[i]

        if cumulative_volume == 0:
            result[i] = typical_price[i]
        else:
            result[i] = cumulative_tpv / cumulative_volume

    return result


def vwap_bands(
    timestamps: np.ndarray,
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    multiplier: float = 2.0,
    reset_daily: bool = True,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    VWAP with volume-weighted standard deviation bands.

    Returns: (vwap, upper, lower)
    """
    typical_price = (highs + lows + closes) / 3
    center = np.full(len(closes), np.nan)
    upper = np.full(len(closes), np.nan)
    lower = np.full(len(closes), np.nan)

    sum_tpv = sum_tp2v = sum_volume = 0.0
    current_day = None

    for i in range(len(closes)):
        day = int(timestamps[i]) // 86400
        if reset_daily and day != current_day:
            sum_tpv = sum_tp2v = sum_volume = 0.0
            current_day = day

        sum_tpv += typical_price[i] * volumes[i]
        sum_tp2v += typical_price[i] ** 2 * volumes[i]
        sum_volume += volumes[i]

        if sum_volume == 0:
            center[i] = upper[i] = lower[i] = typical_price[i]
            continue

        mean = sum_tpv / sum_volume
        variance = max(sum_tp2v / sum_volume - mean**2, 0.0)
        deviation = np.sqrt(variance) * multiplier
        center[i] = mean
        upper[i] = mean + deviation
        lower[i] = mean - deviation

    return center, upper, lower


def obv(closes: np.ndarray, volumes: np.ndarray) -> np.ndarray:
    """On-Balance Volume, starting from 0."""
    result = np.zeros(len(closes))

    for i in range(1, len(closes)):
        if closes[i] > closes[i - 1]:
            result[i] = result[i - 1] + volumes[i]
        elif closes[i] < closes[i - 1]:
            result[i] = result[i - 1] - volumes[i]
        else:
            result[i] = result[i - 1]

    return result


def cmf(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    period: int = 20,
) -> np.ndarray:
    """Chaikin Money Flow."""
    ranges = highs - lows
    with np.errstate(divide="ignore", invalid="ignore"):
        multiplier = np.where(
            ranges != 0, ((closes - lows) - (highs - closes)) / ranges, 0.0
        )
    money_flow_volume = multiplier * volumes

    result = np.full(len(closes), np.nan)
    for i in range(period - 1, len(closes)):
        volume_sum = np.sum(volumes[i - period + 1 : i + 1])
        if volume_sum == 0:
            result[i] = 0
        else:
            result[i] = np.sum(money_flow_volume[i - period + 1 : i + 1]) / volume_sum

    return result


# =============================================================================
# TREND INDICATORS
# =============================================================================


def adx(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Average Directional Index.

    Returns: (adx, plus_di, minus_di)
    DI lines start at index period - 1, ADX at 2 * period - 2.
    """
    n = len(closes)
    if n < period:
        nan_arr = np.full(n, np.nan)
        return nan_arr, nan_arr.copy(), nan_arr.copy()

    # Calculate +DM and -DM
    plus_dm = np.zeros(n)
    minus_dm = np.zeros(n)

    for i in range(1, n):
        up_move = highs[i] - highs[i - 1]
        down_move = lows[i - 1] - lows[i]

        if up_move > down_move and up_move > 0:
            plus_dm[i] = up_move
        if down_move > up_move and down_move > 0:
            minus_dm[i] = down_move

    tr = true_range(highs, lows, closes)

    # Wilder running sums
    smoothed_plus_dm = wilder_sum(plus_dm, period)
    smoothed_minus_dm = wilder_sum(minus_dm, period)
    smoothed_tr = wilder_sum(tr, period)

    plus_di = np.full(n, np.nan)
    minus_di = np.full(n, np.nan)
    dx = np.full(n, np.nan)

    for i in range(period - 1, n):
        if smoothed_tr[i] == 0:
            plus_di[i] = 0
            minus_di[i] = 0
        else:
            plus_di[i] = 100 * smoothed_plus_dm[i] / smoothed_tr[i]
            minus_di[i] = 100 * smoothed_minus_dm[i] / smoothed_tr[i]

        di_sum = plus_di[i] + minus_di[i]
        dx[i] = 0 if di_sum == 0 else 100 * abs(plus_di[i] - minus_di[i]) / di_sum

    # ADX is the Wilder average of DX
    adx_result = np.full(n, np.nan)
    adx_result[period - 1 :] = wilder_average(dx[period - 1 :], period)

    return adx_result, plus_di, minus_di


def aroon(
    highs: np.ndarray, lows: np.ndarray, period: int = 25
) -> tuple[np.ndarray, np.ndarray]:
    """
    Aroon Up / Down over a window of period + 1 bars.

    Ties resolve to the most recent extreme.
    Returns: (up, down)
    """
    up = np.full(len(highs), np.nan)
    down = np.full(len(highs), np.nan)

    for i in range(period, len(highs)):
        highest_idx = lowest_idx = i - period
        for j in range(i - period, i + 1):
            if highs[j] >= highs[highest_idx]:
                highest_idx = j
            if lows[j] <= lows[lowest_idx]:
                lowest_idx = j

        up[i] = (period - (i - highest_idx)) / period * 100
        down[i] = (period - (i - lowest_idx)) / period * 100

    return up, down


def parabolic_sar(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    step: float = 0.02,
    max_step: float = 0.2,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Parabolic SAR.

    Returns: (sar, trend) where trend is +1 (up) or -1 (down).
    """
    n = len(closes)
    sar_values = np.full(n, np.nan)
    trend = np.zeros(n)
    if n < 2:
        return sar_values, trend

    is_up = closes[1] > closes[0]
    af = step
    extreme = highs[0] if is_up else lows[0]
    sar = lows[0] if is_up else highs[0]

    sar_values[0] = sar
    trend[0] = 1 if is_up else -1

    for i in range(1, n):
        new_sar = sar + af * (extreme - sar)

        if is_up:
            # SAR may not rise above the prior two lows
            new_sar = min(new_sar, lows[i - 1], lows[i - 2] if i >= 2 else lows[i - 1])
            if lows[i] < new_sar:
                is_up = False
                new_sar = extreme
                extreme = lows[i]
                af = step
            elif highs[i] > extreme:
                extreme = highs[i]
                af = min(af + step, max_step)
        else:
            new_sar = max(new_sar, highs[i - 1], highs[i - 2] if i >= 2 else highs[i - 1])
            if highs[i] > new_sar:
                is_up = True
                new_sar = extreme
                extreme = highs[i]
                af = step
            elif lows[i] < extreme:
                extreme = lows[i]
                af = min(af + step, max_step)

        sar = new_sar
        sar_values[i] = sar
        trend[i] = 1 if is_up else -1

    return sar_values, trend


def midpoint(highs: np.ndarray, lows: np.ndarray, period: int) -> np.ndarray:
    """(highest high + lowest low) / 2 over a rolling window."""
    result = np.full(len(highs), np.nan)
    for i in range(period - 1, len(highs)):
        result[i] = (
            np.max(highs[i - period + 1 : i + 1]) + np.min(lows[i - period + 1 : i + 1])
        ) / 2
    return result


def ichimoku(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    tenkan_period: int = 9,
    kijun_period: int = 26,
    senkou_period: int = 52,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Ichimoku Cloud, indexed by the bar each value is plotted at.

    senkou_a/senkou_b at bar i come from bar i - kijun; chikou at bar i is
    the close kijun bars ahead.
    Returns: (tenkan, kijun, senkou_a, senkou_b, chikou)
    """
    n = len(closes)
    tenkan = midpoint(highs, lows, tenkan_period)
    kijun = midpoint(highs, lows, kijun_period)
    senkou_b_base = midpoint(highs, lows, senkou_period)

    senkou_a = np.full(n, np.nan)
    senkou_b = np.full(n, np.nan)
    chikou = np.full(n, np.nan)

    if n > kijun_period:
        senkou_a[kijun_period:] = (tenkan[:-kijun_period] + kijun[:-kijun_period]) / 2
        senkou_b[kijun_period:] = senkou_b_base[:-kijun_period]
        chikou[:-kijun_period] = closes[kijun_period:]

    return tenkan, kijun, senkou_a, senkou_b, chikou


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_last_valid(arr: np.ndarray) -> Optional[float]:
    """Get last non-NaN value from array."""
    valid = arr[~np.isnan(arr)]
    return float(valid[-1]) if len(valid) > 0 else None
