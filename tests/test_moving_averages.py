from __future__ import annotations

import pytest

from stockchart.schemas.market import PriceSource
from stockchart.services.indicators.moving_averages import (
    calculate_dema,
    calculate_ema,
    calculate_sma,
    calculate_tema,
    calculate_wma,
)


def test_sma_points_align_to_candle_times(make_candles) -> None:
    candles = make_candles([float(x) for x in range(1, 11)])

    points = calculate_sma(candles, 3)

    assert len(points) == 8
    assert points[0].time == candles[2].time
    assert points[0].value == pytest.approx(2.0)
    assert points[-1].value == pytest.approx(9.0)


def test_sma_short_input_is_empty(make_candles) -> None:
    assert calculate_sma(make_candles([1.0, 2.0]), 3) == []


def test_sma_rejects_non_positive_period(make_candles) -> None:
    assert calculate_sma(make_candles([1.0, 2.0, 3.0]), 0) == []


def test_sma_price_source(make_candles) -> None:
    candles = make_candles([10.0, 10.0, 10.0], spread=2.0)

    highs = calculate_sma(candles, 3, PriceSource.HIGH)
    hl2 = calculate_sma(candles, 3, PriceSource.HL2)

    assert highs[0].value == pytest.approx(12.0)
    assert hl2[0].value == pytest.approx(10.0)


def test_ema_first_point_is_sma(make_candles) -> None:
    candles = make_candles([2.0, 4.0, 6.0, 8.0])

    points = calculate_ema(candles, 3)

    assert [p.time for p in points] == [candles[2].time, candles[3].time]
    assert points[0].value == pytest.approx(4.0)
    assert points[1].value == pytest.approx(6.0)


def test_wma_first_value(make_candles) -> None:
    points = calculate_wma(make_candles([1.0, 2.0, 3.0]), 3)

    assert len(points) == 1
    assert points[0].value == pytest.approx(14 / 6)


def test_dema_needs_two_periods_less_one(make_candles) -> None:
    closes = [float(x) for x in range(1, 31)]

    assert calculate_dema(make_candles(closes[:8]), 5) == []
    points = calculate_dema(make_candles(closes[:9]), 5)
    assert len(points) == 1
    assert points[0].time == make_candles(closes[:9])[8].time


def test_tema_needs_three_periods_less_two(make_candles) -> None:
    closes = [float(x) for x in range(1, 31)]

    assert calculate_tema(make_candles(closes[:12]), 5) == []
    assert len(calculate_tema(make_candles(closes[:13]), 5)) == 1
    assert len(calculate_tema(make_candles(closes), 5)) == 18


def test_dema_and_tema_track_a_flat_series(make_candles) -> None:
    candles = make_candles([50.0] * 30)

    assert all(p.value == pytest.approx(50.0) for p in calculate_dema(candles, 5))
    assert all(p.value == pytest.approx(50.0) for p in calculate_tema(candles, 5))
