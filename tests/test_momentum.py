from __future__ import annotations

import pytest

from stockchart.schemas.indicators import IndicatorPoint
from stockchart.services.indicators.momentum import (
    awesome_oscillator_colors,
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


def test_rsi_rising_series(make_candles) -> None:
    candles = make_candles([float(x) for x in range(1, 21)])

    points = calculate_rsi(candles, 14)

    assert len(points) == 6
    assert points[0].time == candles[14].time
    assert all(p.value == 100.0 for p in points)


def test_rsi_stays_in_range(make_candles) -> None:
    closes = [100.0, 102.0, 101.0, 99.0, 103.0, 104.0, 100.0, 98.0, 97.0, 101.0, 105.0, 104.0]

    for point in calculate_rsi(make_candles(closes), 5):
        assert 0.0 <= point.value <= 100.0


def test_rsi_needs_period_plus_one(make_candles) -> None:
    assert calculate_rsi(make_candles([1.0] * 14), 14) == []


def test_macd_starts_where_signal_is_defined(make_candles) -> None:
    closes = [100.0 + (i % 7) for i in range(40)]

    assert calculate_macd(make_candles(closes[:33])) == []

    candles = make_candles(closes[:34])
    points = calculate_macd(candles)
    assert len(points) == 1
    assert points[0].time == candles[33].time


def test_macd_histogram_is_exact_difference(make_candles) -> None:
    closes = [100.0 + (i % 7) * 1.3 - (i % 4) * 0.7 for i in range(80)]

    points = calculate_macd(make_candles(closes))

    assert len(points) == 80 - 33
    for point in points:
        assert point.histogram == point.macd - point.signal


def test_stochastic_flat_market(make_candles) -> None:
    # close sits mid-range in every window
    candles = make_candles([100.0] * 20)

    points = calculate_stochastic(candles)

    assert len(points) == 3
    assert points[0].time == candles[17].time
    assert all(p.k == pytest.approx(50.0) and p.d == pytest.approx(50.0) for p in points)


def test_stochastic_rsi_minimum(make_candles) -> None:
    closes = [100.0 + (i % 5) * 2 - (i % 3) for i in range(40)]

    assert calculate_stochastic_rsi(make_candles(closes[:31])) == []
    points = calculate_stochastic_rsi(make_candles(closes[:32]))
    assert len(points) == 1
    assert 0.0 <= points[0].k <= 100.0


def test_stochastic_rsi_honors_smoothing(make_candles) -> None:
    closes = [100.0 + (i % 5) * 2 - (i % 3) for i in range(40)]
    candles = make_candles(closes)

    smoothed = calculate_stochastic_rsi(candles, 14, 14, 3, 3)
    raw = calculate_stochastic_rsi(candles, 14, 14, 1, 1)

    assert len(raw) == len(smoothed) + 4


def test_williams_r_mid_range(make_candles) -> None:
    points = calculate_williams_r(make_candles([100.0] * 14), 14)

    assert len(points) == 1
    assert points[0].value == pytest.approx(-50.0)


def test_cci_flat_is_zero(make_candles) -> None:
    points = calculate_cci(make_candles([50.0] * 20), 20)

    assert [p.value for p in points] == [0.0]


def test_roc_and_momentum(make_candles) -> None:
    candles = make_candles([100.0, 110.0, 121.0])

    assert [p.value for p in calculate_roc(candles, 1)] == pytest.approx([10.0, 10.0])
    assert [p.value for p in calculate_momentum(candles, 2)] == pytest.approx([21.0])
    assert calculate_momentum(candles, 3) == []


def test_awesome_oscillator_minimum(make_candles) -> None:
    closes = [100.0] * 34

    assert calculate_awesome_oscillator(make_candles(closes[:33])) == []
    points = calculate_awesome_oscillator(make_candles(closes))
    assert [p.value for p in points] == pytest.approx([0.0])


def test_awesome_oscillator_colors() -> None:
    points = [IndicatorPoint(time=i, value=v) for i, v in enumerate([-1.0, -0.5, -0.8, 0.2])]

    assert awesome_oscillator_colors(points) == ["red", "green", "red", "green"]
