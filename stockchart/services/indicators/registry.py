"""
Indicator Registry

Catalog of every supported indicator: metadata for pickers, the parameter
variant with its defaults, the calculation, and the minimum candle count.
Consumers go through calculate(type, candles, params) and never need to
know which module implements an indicator.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from stockchart.schemas.market import Candle
from stockchart.schemas.indicators import (
    ADXParams,
    ATRParams,
    AroonParams,
    AwesomeOscillatorParams,
    BollingerBandsParams,
    CCIParams,
    CMFParams,
    DEMAParams,
    EMAParams,
    EnvelopeParams,
    IchimokuParams,
    IndicatorCategory,
    IndicatorMetadata,
    IndicatorType,
    MACDParams,
    MFIParams,
    MomentumParams,
    OBVParams,
    ParabolicSARParams,
    ROCParams,
    RSIParams,
    SMAParams,
    StochasticParams,
    StochasticRSIParams,
    TEMAParams,
    VWAPParams,
    WMAParams,
    WilliamsRParams,
)
from stockchart.services.base import ValidationError
from stockchart.services.indicators.moving_averages import (
    calculate_dema,
    calculate_ema,
    calculate_sma,
    calculate_tema,
    calculate_wma,
)
from stockchart.services.indicators.volatility import (
    calculate_atr,
    calculate_bollinger_bands,
    calculate_envelope,
)
from stockchart.services.indicators.momentum import (
    calculate_awesome_oscillator,
    calculate_cci,
    calculate_macd,
    calculate_momentum,
    calculate_roc,
    calculate_rsi,
    calculate_stochastic,
    calculate_stochastic_rsi,
    calculate_williams_r,
)
from stockchart.services.indicators.trend import (
    calculate_adx,
    calculate_aroon,
    calculate_ichimoku,
    calculate_parabolic_sar,
)
from stockchart.services.indicators.volume import (
    calculate_cmf,
    calculate_mfi,
    calculate_obv,
    calculate_vwap,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "IndicatorRegistry"


@dataclass(frozen=True)
class IndicatorDefinition:
    """Everything the registry knows about one indicator kind."""

    metadata: IndicatorMetadata
    params_model: type[BaseModel]
    compute: Callable[[Sequence[Candle], Any], list]
    minimum: Callable[[Any], int]


def _define(
    type_: IndicatorType,
    name: str,
    short_name: str,
    category: IndicatorCategory,
    overlay: bool,
    color: str,
    description: str,
    params_model: type[BaseModel],
    compute: Callable[[Sequence[Candle], Any], list],
    minimum: Callable[[Any], int],
    outputs: Optional[list[str]] = None,
) -> IndicatorDefinition:
    defaults = params_model().model_dump(mode="json", exclude={"kind"})
    metadata = IndicatorMetadata(
        type=type_,
        name=name,
        short_name=short_name,
        category=category,
        overlay=overlay,
        default_params=defaults,
        default_color=color,
        description=description,
        outputs=outputs or ["value"],
    )
    return IndicatorDefinition(metadata, params_model, compute, minimum)


T = IndicatorType
C = IndicatorCategory

DEFINITIONS: list[IndicatorDefinition] = [
    # Overlays
    _define(
        T.SMA, "Simple Moving Average", "SMA", C.TREND, True, "#2196F3",
        "Average of closing prices over a specified period",
        SMAParams,
        lambda c, p: calculate_sma(c, p.period, p.source),
        lambda p: p.period,
    ),
    _define(
        T.EMA, "Exponential Moving Average", "EMA", C.TREND, True, "#FF9800",
        "Weighted average giving more importance to recent prices",
        EMAParams,
        lambda c, p: calculate_ema(c, p.period, p.source),
        lambda p: p.period,
    ),
    _define(
        T.WMA, "Weighted Moving Average", "WMA", C.TREND, True, "#9C27B0",
        "Linear weighted moving average",
        WMAParams,
        lambda c, p: calculate_wma(c, p.period, p.source),
        lambda p: p.period,
    ),
    _define(
        T.DEMA, "Double Exponential Moving Average", "DEMA", C.TREND, True, "#00BCD4",
        "Faster-responding moving average with reduced lag",
        DEMAParams,
        lambda c, p: calculate_dema(c, p.period, p.source),
        lambda p: 2 * p.period - 1,
    ),
    _define(
        T.TEMA, "Triple Exponential Moving Average", "TEMA", C.TREND, True, "#4CAF50",
        "Even faster-responding moving average",
        TEMAParams,
        lambda c, p: calculate_tema(c, p.period, p.source),
        lambda p: 3 * p.period - 2,
    ),
    _define(
        T.VWAP, "Volume Weighted Average Price", "VWAP", C.VOLUME, True, "#673AB7",
        "Average price weighted by volume",
        VWAPParams,
        lambda c, p: calculate_vwap(c, p.reset_daily),
        lambda p: 1,
    ),
    _define(
        T.BOLLINGER_BANDS, "Bollinger Bands", "BB", C.VOLATILITY, True, "#607D8B",
        "Volatility bands around moving average",
        BollingerBandsParams,
        lambda c, p: calculate_bollinger_bands(c, p.period, p.std_dev_multiplier, p.source),
        lambda p: p.period,
        ["upper", "middle", "lower"],
    ),
    _define(
        T.ENVELOPE, "Moving Average Envelope", "ENV", C.VOLATILITY, True, "#795548",
        "Percentage bands around moving average",
        EnvelopeParams,
        lambda c, p: calculate_envelope(c, p.period, p.percentage),
        lambda p: p.period,
        ["upper", "middle", "lower"],
    ),
    _define(
        T.PARABOLIC_SAR, "Parabolic SAR", "PSAR", C.TREND, True, "#E91E63",
        "Stop and reverse trend indicator",
        ParabolicSARParams,
        lambda c, p: calculate_parabolic_sar(c, p.step, p.max_step),
        lambda p: 2,
        ["value", "trend"],
    ),
    _define(
        T.ICHIMOKU, "Ichimoku Cloud", "ICHI", C.TREND, True, "#3F51B5",
        "Comprehensive trend indicator with cloud support/resistance",
        IchimokuParams,
        lambda c, p: calculate_ichimoku(c, p.tenkan_period, p.kijun_period, p.senkou_period),
        lambda p: max(p.tenkan_period, p.kijun_period, p.senkou_period),
        ["tenkan", "kijun", "senkou_a", "senkou_b", "chikou"],
    ),
    # Oscillators
    _define(
        T.RSI, "Relative Strength Index", "RSI", C.MOMENTUM, False, "#9C27B0",
        "Momentum oscillator measuring speed and change of price movements",
        RSIParams,
        lambda c, p: calculate_rsi(c, p.period),
        lambda p: p.period + 1,
    ),
    _define(
        T.MACD, "Moving Average Convergence Divergence", "MACD", C.MOMENTUM, False, "#2196F3",
        "Trend-following momentum indicator",
        MACDParams,
        lambda c, p: calculate_macd(c, p.fast_period, p.slow_period, p.signal_period),
        lambda p: max(p.fast_period, p.slow_period) + p.signal_period - 1,
        ["macd", "signal", "histogram"],
    ),
    _define(
        T.STOCHASTIC, "Stochastic Oscillator", "STOCH", C.MOMENTUM, False, "#FF5722",
        "Momentum indicator comparing closing price to price range",
        StochasticParams,
        lambda c, p: calculate_stochastic(c, p.k_period, p.d_period, p.smooth),
        lambda p: p.k_period + p.d_period + p.smooth - 2,
        ["k", "d"],
    ),
    _define(
        T.STOCHASTIC_RSI, "Stochastic RSI", "SRSI", C.MOMENTUM, False, "#8BC34A",
        "Stochastic oscillator applied to RSI values",
        StochasticRSIParams,
        lambda c, p: calculate_stochastic_rsi(c, p.rsi_period, p.stoch_period, p.k_smooth, p.d_period),
        lambda p: p.rsi_period + p.stoch_period + p.k_smooth + p.d_period - 2,
        ["k", "d"],
    ),
    _define(
        T.WILLIAMS_R, "Williams %R", "%R", C.MOMENTUM, False, "#00BCD4",
        "Momentum indicator showing overbought/oversold levels",
        WilliamsRParams,
        lambda c, p: calculate_williams_r(c, p.period),
        lambda p: p.period,
    ),
    _define(
        T.CCI, "Commodity Channel Index", "CCI", C.MOMENTUM, False, "#FFC107",
        "Oscillator measuring price deviation from average",
        CCIParams,
        lambda c, p: calculate_cci(c, p.period),
        lambda p: p.period,
    ),
    _define(
        T.ATR, "Average True Range", "ATR", C.VOLATILITY, False, "#FF9800",
        "Volatility indicator measuring price range",
        ATRParams,
        lambda c, p: calculate_atr(c, p.period),
        lambda p: p.period + 1,
    ),
    _define(
        T.ADX, "Average Directional Index", "ADX", C.TREND, False, "#673AB7",
        "Trend strength indicator",
        ADXParams,
        lambda c, p: calculate_adx(c, p.period),
        lambda p: 2 * p.period,
        ["adx", "plus_di", "minus_di"],
    ),
    _define(
        T.ROC, "Rate of Change", "ROC", C.MOMENTUM, False, "#03A9F4",
        "Momentum oscillator measuring percentage change",
        ROCParams,
        lambda c, p: calculate_roc(c, p.period),
        lambda p: p.period + 1,
    ),
    _define(
        T.MOMENTUM, "Momentum", "MOM", C.MOMENTUM, False, "#4CAF50",
        "Price change over a specified period",
        MomentumParams,
        lambda c, p: calculate_momentum(c, p.period),
        lambda p: p.period + 1,
    ),
    _define(
        T.OBV, "On-Balance Volume", "OBV", C.VOLUME, False, "#9E9E9E",
        "Cumulative volume-based momentum indicator",
        OBVParams,
        lambda c, p: calculate_obv(c),
        lambda p: 1,
    ),
    _define(
        T.CMF, "Chaikin Money Flow", "CMF", C.VOLUME, False, "#795548",
        "Volume-weighted measure of accumulation/distribution",
        CMFParams,
        lambda c, p: calculate_cmf(c, p.period),
        lambda p: p.period,
    ),
    _define(
        T.MFI, "Money Flow Index", "MFI", C.VOLUME, False, "#E91E63",
        "Volume-weighted RSI",
        MFIParams,
        lambda c, p: calculate_mfi(c, p.period),
        lambda p: p.period + 1,
    ),
    _define(
        T.AROON, "Aroon Indicator", "AROON", C.TREND, False, "#3F51B5",
        "Identifies trend changes and strength",
        AroonParams,
        lambda c, p: calculate_aroon(c, p.period),
        lambda p: p.period + 1,
        ["up", "down"],
    ),
    _define(
        T.AWESOME_OSCILLATOR, "Awesome Oscillator", "AO", C.MOMENTUM, False, "#22c55e",
        "Measures market momentum",
        AwesomeOscillatorParams,
        lambda c, p: calculate_awesome_oscillator(c, p.fast_period, p.slow_period),
        lambda p: max(p.fast_period, p.slow_period),
    ),
]


ParamsInput = Union[None, dict[str, Any], BaseModel]


class IndicatorRegistry:
    """Lookup and dispatch over the indicator catalog."""

    def __init__(self, definitions: Optional[list[IndicatorDefinition]] = None):
        self._definitions = {d.metadata.type: d for d in (definitions or DEFINITIONS)}

    def _definition(self, indicator_type: Union[IndicatorType, str]) -> IndicatorDefinition:
        try:
            key = IndicatorType(indicator_type)
        except ValueError:
            raise ValidationError(SERVICE_NAME, f"Unknown indicator type: {indicator_type}")

        definition = self._definitions.get(key)
        if definition is None:
            raise ValidationError(SERVICE_NAME, f"Indicator not registered: {key.value}")
        return definition

    def list_indicators(self) -> list[IndicatorMetadata]:
        """All indicator metadata in catalog order."""
        return [d.metadata for d in self._definitions.values()]

    def get_metadata(self, indicator_type: Union[IndicatorType, str]) -> IndicatorMetadata:
        return self._definition(indicator_type).metadata

    def get_default_params(self, indicator_type: Union[IndicatorType, str]) -> dict[str, Any]:
        """Default parameter set (a fresh copy)."""
        return dict(self._definition(indicator_type).metadata.default_params)

    def resolve_params(
        self, indicator_type: Union[IndicatorType, str], params: ParamsInput = None
    ) -> BaseModel:
        """
        Turn caller params into the indicator's parameter variant.

        Accepts None (defaults), a partial dict merged over the defaults, or a
        parameter model of the matching kind.
        """
        definition = self._definition(indicator_type)
        model = definition.params_model
        kind = definition.metadata.type.value

        if params is None:
            return model()

        if isinstance(params, BaseModel):
            if not isinstance(params, model):
                raise ValidationError(
                    SERVICE_NAME,
                    f"Parameters of type {type(params).__name__} do not match indicator {kind}",
                )
            return params

        merged = {**definition.metadata.default_params, **params}
        if merged.get("kind", kind) != kind:
            raise ValidationError(
                SERVICE_NAME, f"Parameter kind {merged['kind']} does not match indicator {kind}"
            )
        merged["kind"] = kind

        try:
            return model.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(
                SERVICE_NAME,
                f"Invalid parameters for {kind}",
                details={"errors": e.errors(include_url=False)},
            )

    def minimum_candles(
        self, indicator_type: Union[IndicatorType, str], params: ParamsInput = None
    ) -> int:
        """Smallest candle count that yields a non-empty series."""
        definition = self._definition(indicator_type)
        return definition.minimum(self.resolve_params(indicator_type, params))

    def calculate(
        self,
        indicator_type: Union[IndicatorType, str],
        candles: Sequence[Candle],
        params: ParamsInput = None,
    ) -> list:
        """
        Run an indicator.

        Returns the indicator's point list, [] when there are fewer candles
        than it needs.

        Raises:
            ValidationError: unknown type or invalid parameters
        """
        definition = self._definition(indicator_type)
        resolved = self.resolve_params(indicator_type, params)

        required = definition.minimum(resolved)
        if len(candles) < required:
            logger.debug(
                f"{definition.metadata.short_name}: {len(candles)} candles, need {required}"
            )
            return []

        return definition.compute(candles, resolved)

    def by_category(self, category: Union[IndicatorCategory, str]) -> list[IndicatorMetadata]:
        category = IndicatorCategory(category)
        return [m for m in self.list_indicators() if m.category == category]

    def overlays(self) -> list[IndicatorMetadata]:
        """Indicators drawn on the price pane."""
        return [m for m in self.list_indicators() if m.overlay]

    def oscillators(self) -> list[IndicatorMetadata]:
        """Indicators drawn in their own pane."""
        return [m for m in self.list_indicators() if not m.overlay]


# Module-level catalog (immutable definitions, safe to share)
_registry: Optional[IndicatorRegistry] = None


def get_indicator_registry() -> IndicatorRegistry:
    """Get or create the shared registry."""
    global _registry
    if _registry is None:
        _registry = IndicatorRegistry()
    return _registry
