"""
Candle Aggregation

Resample ascending candles into wider fixed-width bars and slice series by
time or length.
"""

import logging
from typing import Optional, Sequence

from stockchart.schemas.market import Candle, Resolution

logger = logging.getLogger(__name__)


def aggregate_candles(candles: Sequence[Candle], interval_minutes: int) -> list[Candle]:
    """
    Bucket candles into bars of `interval_minutes`.

    Bucket key is floor(time / bucket_seconds) * bucket_seconds. Within a
    bucket: first open, last close, max high, min low, summed volume.
    Input must be ascending; output keeps input order, one bar per
    populated bucket.
    """
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
    if not candles:
        return []

    bucket_seconds = interval_minutes * 60
    result: list[Candle] = []

    bucket_time: Optional[int] = None
    open_ = high = low = close = volume = 0.0

    for candle in candles:
        key = (candle.time // bucket_seconds) * bucket_seconds

        if key != bucket_time:
            if bucket_time is not None:
                result.append(
                    Candle(time=bucket_time, open=open_, high=high, low=low, close=close, volume=volume)
                )
            bucket_time = key
            open_, high, low, close, volume = (
                candle.open,
                candle.high,
                candle.low,
                candle.close,
                candle.volume,
            )
        else:
            high = max(high, candle.high)
            low = min(low, candle.low)
            close = candle.close
            volume += candle.volume

    result.append(Candle(time=bucket_time, open=open_, high=high, low=low, close=close, volume=volume))

    logger.debug(f"Aggregated {len(candles)} candles into {len(result)} x {interval_minutes}m bars")
    return result


def aggregate_to_resolution(candles: Sequence[Candle], resolution: Resolution) -> list[Candle]:
    """Aggregate to a chart resolution (a month counts as 30 days)."""
    return aggregate_candles(candles, resolution.minutes)


def filter_by_date_range(candles: Sequence[Candle], start: int, end: int) -> list[Candle]:
    """Candles with start <= time <= end."""
    return [c for c in candles if start <= c.time <= end]


def limit_data_points(candles: Sequence[Candle], max_points: int) -> list[Candle]:
    """Keep the most recent `max_points` candles."""
    if max_points <= 0:
        return []
    if len(candles) <= max_points:
        return list(candles)
    return list(candles[-max_points:])
