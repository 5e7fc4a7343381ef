"""Heikin-Ashi candle derivation."""

from typing import Sequence

from stockchart.schemas.market import Candle


def heikin_ashi(candles: Sequence[Candle]) -> list[Candle]:
    """
    Convert regular candles to Heikin-Ashi candles.

    ha_close = (O + H + L + C) / 4
    ha_open  = (prev ha_open + prev ha_close) / 2, or (O + C) / 2 for the first bar
    ha_high  = max(H, ha_open, ha_close)
    ha_low   = min(L, ha_open, ha_close)

    Each bar depends on the previous Heikin-Ashi bar, so this is sequential.
    Time and volume pass through.
    """
    result: list[Candle] = []

    for candle in candles:
        ha_close = (candle.open + candle.high + candle.low + candle.close) / 4
        if result:
            previous = result[-1]
            ha_open = (previous.open + previous.close) / 2
        else:
            ha_open = (candle.open + candle.close) / 2

        result.append(
            Candle(
                time=candle.time,
                open=ha_open,
                high=max(candle.high, ha_open, ha_close),
                low=min(candle.low, ha_open, ha_close),
                close=ha_close,
                volume=candle.volume,
            )
        )

    return result
