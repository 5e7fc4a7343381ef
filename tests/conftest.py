from __future__ import annotations

from typing import Any, Optional, Sequence

import pytest

from stockchart.schemas.market import Candle

DAY = 86_400
# 2024-01-01 00:00 UTC, a Monday
START = 1_704_067_200


def build_candles(
    closes: Sequence[float],
    start: int = START,
    step: int = DAY,
    spread: float = 1.0,
    volume: float = 1000.0,
) -> list[Candle]:
    """Candles that open at the previous close and extend `spread` beyond the body."""
    candles = []
    previous = closes[0]
    for i, close in enumerate(closes):
        candles.append(
            Candle(
                time=start + i * step,
                open=previous,
                high=max(previous, close) + spread,
                low=min(previous, close) - spread,
                close=close,
                volume=volume,
            )
        )
        previous = close
    return candles


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep stand-in that records delays and optionally moves a clock."""

    def __init__(self, clock: Optional[FakeClock] = None) -> None:
        self.delays: list[float] = []
        self.clock = clock

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


class FakeResponse:
    def __init__(self, payload: Any = None, status: int = 200, headers: Optional[dict] = None) -> None:
        self.payload = payload
        self.status = status
        self.headers = headers or {}

    async def json(self, content_type: Optional[str] = None) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class _RequestContext:
    def __init__(self, outcome: Any) -> None:
        self.outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, *_exc: Any) -> None:
        return None


class FakeSession:
    """Replays queued responses or exceptions, one per GET."""

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def queue(self, *outcomes: Any) -> None:
        self.outcomes.extend(outcomes)

    def get(self, url: str, params: Optional[dict] = None, timeout: Any = None) -> _RequestContext:
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        if not self.outcomes:
            raise AssertionError(f"Unexpected request to {url}")
        return _RequestContext(self.outcomes.pop(0))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_candles():
    return build_candles


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1000.0)


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()
