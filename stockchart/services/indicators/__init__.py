"""
Indicator Engine Service

CONTRACT:
    Input:  candle series + indicator type + parameter set
    Output: time-aligned indicator points

RESPONSIBILITIES:
    - Moving averages (SMA, EMA, WMA, DEMA, TEMA)
    - Volatility (Bollinger Bands, Envelope, ATR)
    - Momentum oscillators (RSI, MACD, Stochastic, Stochastic RSI,
      Williams %R, CCI, ROC, Momentum, Awesome Oscillator)
    - Trend (ADX, Aroon, Parabolic SAR, Ichimoku)
    - Volume (VWAP, OBV, CMF, MFI)
    - Registry metadata and default parameters
    - Signal classification of the latest readings

Uses NumPy for calculations.
Short input yields an empty series, never an error.
"""

from stockchart.services.indicators.interface import IndicatorServiceInterface
from stockchart.services.indicators.service import IndicatorService, get_indicator_service
from stockchart.services.indicators.registry import IndicatorRegistry, get_indicator_registry
from stockchart.services.indicators.signals import (
    Signal,
    TrendStrength,
    ZeroLineCross,
    latest_change_signal,
    latest_signal,
    latest_values,
)

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "get_indicator_service",
    "IndicatorRegistry",
    "get_indicator_registry",
    "Signal",
    "TrendStrength",
    "ZeroLineCross",
    "latest_signal",
    "latest_change_signal",
    "latest_values",
]
