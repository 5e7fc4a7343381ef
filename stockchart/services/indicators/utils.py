"""
Candle <-> array helpers shared by the indicator modules.
"""

import logging
from typing import Sequence

import numpy as np

from stockchart.schemas.market import Candle, PriceSource
from stockchart.schemas.indicators import IndicatorPoint
from stockchart.services.indicators.calculations import OHLCVData

logger = logging.getLogger(__name__)


def to_ohlcv(candles: Sequence[Candle]) -> OHLCVData:
    """Convert a candle list to numpy arrays."""
    return OHLCVData(
        timestamps=np.array([c.time for c in candles], dtype=np.int64),
        opens=np.array([c.open for c in candles], dtype=float),
        highs=np.array([c.high for c in candles], dtype=float),
        lows=np.array([c.low for c in candles], dtype=float),
        closes=np.array([c.close for c in candles], dtype=float),
        volumes=np.array([c.volume for c in candles], dtype=float),
    )


def extract_prices(data: OHLCVData, source: PriceSource = PriceSource.CLOSE) -> np.ndarray:
    """Select the price series an indicator runs on."""
    if source == PriceSource.OPEN:
        return data.opens
    if source == PriceSource.HIGH:
        return data.highs
    if source == PriceSource.LOW:
        return data.lows
    if source == PriceSource.HL2:
        return (data.highs + data.lows) / 2
    if source == PriceSource.HLC3:
        return (data.highs + data.lows + data.closes) / 3
    if source == PriceSource.OHLC4:
        return (data.opens + data.highs + data.lows + data.closes) / 4
    return data.closes


def periods_valid(indicator: str, *periods: float) -> bool:
    """Log and reject non-positive periods."""
    if all(p > 0 for p in periods):
        return True
    logger.warning(f"Invalid period(s) for {indicator}: {periods}")
    return False


def line_points(timestamps: np.ndarray, values: np.ndarray, start: int) -> list[IndicatorPoint]:
    """Build single-line points from `start` onward."""
    return [
        IndicatorPoint(time=int(t), value=float(v))
        for t, v in zip(timestamps[start:], values[start:])
    ]
