"""
CONTRACT 2: Indicator Engine

Input: candle series + indicator type + parameter set
Output: time-aligned indicator points

This module defines the parameter variants (one per indicator kind, tagged
by `kind`), the output point shapes and the registry metadata.
Pure Python/NumPy calculations live in stockchart.services.indicators.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, Field

from stockchart.schemas.market import Candle, PriceSource


# =============================================================================
# ENUMS
# =============================================================================


class IndicatorType(str, Enum):
    SMA = "sma"
    EMA = "ema"
    WMA = "wma"
    DEMA = "dema"
    TEMA = "tema"
    BOLLINGER_BANDS = "bollingerBands"
    ENVELOPE = "envelope"
    PARABOLIC_SAR = "parabolicSar"
    ICHIMOKU = "ichimoku"
    VWAP = "vwap"
    RSI = "rsi"
    MACD = "macd"
    STOCHASTIC = "stochastic"
    STOCHASTIC_RSI = "stochasticRsi"
    WILLIAMS_R = "williamsR"
    CCI = "cci"
    ATR = "atr"
    ADX = "adx"
    ROC = "roc"
    MOMENTUM = "momentum"
    AWESOME_OSCILLATOR = "awesomeOscillator"
    AROON = "aroon"
    OBV = "obv"
    CMF = "cmf"
    MFI = "mfi"


class IndicatorCategory(str, Enum):
    TREND = "trend"
    MOMENTUM = "momentum"
    VOLATILITY = "volatility"
    VOLUME = "volume"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"


# =============================================================================
# PARAMETERS (tagged variants)
# =============================================================================


class SMAParams(BaseModel):
    kind: Literal["sma"] = "sma"
    period: int = Field(20, gt=0)
    source: PriceSource = PriceSource.CLOSE


class EMAParams(BaseModel):
    kind: Literal["ema"] = "ema"
    period: int = Field(20, gt=0)
    source: PriceSource = PriceSource.CLOSE


class WMAParams(BaseModel):
    kind: Literal["wma"] = "wma"
    period: int = Field(20, gt=0)
    source: PriceSource = PriceSource.CLOSE


class DEMAParams(BaseModel):
    kind: Literal["dema"] = "dema"
    period: int = Field(20, gt=0)
    source: PriceSource = PriceSource.CLOSE


class TEMAParams(BaseModel):
    kind: Literal["tema"] = "tema"
    period: int = Field(20, gt=0)
    source: PriceSource = PriceSource.CLOSE


class BollingerBandsParams(BaseModel):
    kind: Literal["bollingerBands"] = "bollingerBands"
    period: int = Field(20, gt=0)
    std_dev_multiplier: float = Field(2.0, gt=0)
    source: PriceSource = PriceSource.CLOSE


class EnvelopeParams(BaseModel):
    kind: Literal["envelope"] = "envelope"
    period: int = Field(20, gt=0)
    percentage: float = Field(2.5, ge=0)


class ParabolicSARParams(BaseModel):
    kind: Literal["parabolicSar"] = "parabolicSar"
    step: float = Field(0.02, gt=0)
    max_step: float = Field(0.2, gt=0)


class IchimokuParams(BaseModel):
    kind: Literal["ichimoku"] = "ichimoku"
    tenkan_period: int = Field(9, gt=0)
    kijun_period: int = Field(26, gt=0)
    senkou_period: int = Field(52, gt=0)


class VWAPParams(BaseModel):
    kind: Literal["vwap"] = "vwap"
    reset_daily: bool = True


class RSIParams(BaseModel):
    kind: Literal["rsi"] = "rsi"
    period: int = Field(14, gt=0)


class MACDParams(BaseModel):
    kind: Literal["macd"] = "macd"
    fast_period: int = Field(12, gt=0)
    slow_period: int = Field(26, gt=0)
    signal_period: int = Field(9, gt=0)


class StochasticParams(BaseModel):
    kind: Literal["stochastic"] = "stochastic"
    k_period: int = Field(14, gt=0)
    d_period: int = Field(3, gt=0)
    smooth: int = Field(3, gt=0)


class StochasticRSIParams(BaseModel):
    kind: Literal["stochasticRsi"] = "stochasticRsi"
    rsi_period: int = Field(14, gt=0)
    stoch_period: int = Field(14, gt=0)
    k_smooth: int = Field(3, gt=0)
    d_period: int = Field(3, gt=0)


class WilliamsRParams(BaseModel):
    kind: Literal["williamsR"] = "williamsR"
    period: int = Field(14, gt=0)


class CCIParams(BaseModel):
    kind: Literal["cci"] = "cci"
    period: int = Field(20, gt=0)


class ATRParams(BaseModel):
    kind: Literal["atr"] = "atr"
    period: int = Field(14, gt=0)


class ADXParams(BaseModel):
    kind: Literal["adx"] = "adx"
    period: int = Field(14, gt=0)


class ROCParams(BaseModel):
    kind: Literal["roc"] = "roc"
    period: int = Field(12, gt=0)


class MomentumParams(BaseModel):
    kind: Literal["momentum"] = "momentum"
    period: int = Field(10, gt=0)


class AwesomeOscillatorParams(BaseModel):
    kind: Literal["awesomeOscillator"] = "awesomeOscillator"
    fast_period: int = Field(5, gt=0)
    slow_period: int = Field(34, gt=0)


class AroonParams(BaseModel):
    kind: Literal["aroon"] = "aroon"
    period: int = Field(25, gt=0)


class OBVParams(BaseModel):
    kind: Literal["obv"] = "obv"


class CMFParams(BaseModel):
    kind: Literal["cmf"] = "cmf"
    period: int = Field(20, gt=0)


class MFIParams(BaseModel):
    kind: Literal["mfi"] = "mfi"
    period: int = Field(14, gt=0)


IndicatorParams = Annotated[
    Union[
        SMAParams,
        EMAParams,
        WMAParams,
        DEMAParams,
        TEMAParams,
        BollingerBandsParams,
        EnvelopeParams,
        ParabolicSARParams,
        IchimokuParams,
        VWAPParams,
        RSIParams,
        MACDParams,
        StochasticParams,
        StochasticRSIParams,
        WilliamsRParams,
        CCIParams,
        ATRParams,
        ADXParams,
        ROCParams,
        MomentumParams,
        AwesomeOscillatorParams,
        AroonParams,
        OBVParams,
        CMFParams,
        MFIParams,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# OUTPUT: Indicator Points
# =============================================================================


class IndicatorPoint(BaseModel):
    """Single-line indicator value."""

    time: int
    value: float


class MACDPoint(BaseModel):
    time: int
    macd: float
    signal: float
    histogram: float


class BandPoint(BaseModel):
    """Upper/middle/lower band triple (Bollinger, Envelope)."""

    time: int
    upper: float
    middle: float
    lower: float


class StochasticPoint(BaseModel):
    time: int
    k: float
    d: float


class ADXPoint(BaseModel):
    time: int
    adx: float
    plus_di: float
    minus_di: float


class AroonPoint(BaseModel):
    time: int
    up: float
    down: float


class ParabolicSARPoint(BaseModel):
    time: int
    value: float
    trend: Trend


class IchimokuPoint(BaseModel):
    """
    Ichimoku lines at one bar.

    Leading spans and the lagging span are None where their lookback or
    lookahead falls outside the series.
    """

    time: int
    tenkan: float
    kijun: float
    senkou_a: Optional[float] = None
    senkou_b: Optional[float] = None
    chikou: Optional[float] = None


class VWAPBandPoint(BaseModel):
    time: int
    vwap: float
    upper: float
    lower: float


IndicatorOutputPoint = Union[
    IndicatorPoint,
    MACDPoint,
    BandPoint,
    StochasticPoint,
    ADXPoint,
    AroonPoint,
    ParabolicSARPoint,
    IchimokuPoint,
]


# =============================================================================
# REGISTRY METADATA
# =============================================================================


class IndicatorMetadata(BaseModel):
    """Catalog entry describing one indicator kind."""

    type: IndicatorType
    name: str
    short_name: str
    category: IndicatorCategory
    overlay: bool = Field(..., description="Drawn on the price pane when True")
    default_params: dict[str, Any]
    default_color: str
    description: str
    outputs: list[str] = Field(default_factory=lambda: ["value"])


# =============================================================================
# SERVICE I/O
# =============================================================================


class IndicatorConfig(BaseModel):
    """One indicator to compute; params are merged over the defaults."""

    type: IndicatorType
    params: dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = Field(None, description="Result key; defaults to the type")


class IndicatorRequest(BaseModel):
    """
    Request for indicator calculation.
    Sent by: Chart consumers
    Received by: Indicator Service
    """

    candles: list[Candle]
    indicators: list[IndicatorConfig] = Field(..., min_length=1)


class IndicatorResponse(BaseModel):
    """Computed series keyed by config id, plus per-config errors."""

    results: dict[str, list[IndicatorOutputPoint]] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
