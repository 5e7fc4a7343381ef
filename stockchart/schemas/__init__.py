"""
Data Contracts

Pydantic schemas shared by the market data layer and the indicator engine.
"""

from stockchart.schemas.market import (
    DataSource,
    Resolution,
    TimeRange,
    OutputSize,
    SymbolType,
    PriceSource,
    CandleRequest,
    Candle,
    CandleSeries,
    Quote,
    SymbolSearchResult,
    CompanyProfile,
)
from stockchart.schemas.indicators import (
    IndicatorType,
    IndicatorCategory,
    Trend,
    IndicatorParams,
    IndicatorPoint,
    MACDPoint,
    BandPoint,
    StochasticPoint,
    ADXPoint,
    AroonPoint,
    ParabolicSARPoint,
    IchimokuPoint,
    VWAPBandPoint,
    IndicatorMetadata,
    IndicatorConfig,
    IndicatorRequest,
    IndicatorResponse,
)

__all__ = [
    # Market
    "DataSource",
    "Resolution",
    "TimeRange",
    "OutputSize",
    "SymbolType",
    "PriceSource",
    "CandleRequest",
    "Candle",
    "CandleSeries",
    "Quote",
    "SymbolSearchResult",
    "CompanyProfile",
    # Indicators
    "IndicatorType",
    "IndicatorCategory",
    "Trend",
    "IndicatorParams",
    "IndicatorPoint",
    "MACDPoint",
    "BandPoint",
    "StochasticPoint",
    "ADXPoint",
    "AroonPoint",
    "ParabolicSARPoint",
    "IchimokuPoint",
    "VWAPBandPoint",
    "IndicatorMetadata",
    "IndicatorConfig",
    "IndicatorRequest",
    "IndicatorResponse",
]
