from __future__ import annotations

import logging
from datetime import datetime

import pydantic
import pytest

from stockchart.core.config import ClientConfig, Settings
from stockchart.core.logging import LOG_FORMAT, setup_logging
from stockchart.schemas.market import (
    DataSource,
    Resolution,
    TimeRange,
    is_resolution_allowed,
    time_range_bounds,
)


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCKCHART_DATA_SOURCE", "alphavantage")
    monkeypatch.setenv("STOCKCHART_ALPHA_VANTAGE_API_KEY", "av-key")
    monkeypatch.setenv("STOCKCHART_FINNHUB_API_KEY", "fh-key")
    monkeypatch.setenv("STOCKCHART_FALLBACK_TO_MOCK", "true")

    config = Settings(_env_file=None).to_client_config()

    assert config.data_source == DataSource.ALPHA_VANTAGE
    assert config.api_key == "av-key"
    assert config.fallback_to_mock is True


def test_mock_source_has_no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STOCKCHART_DATA_SOURCE", raising=False)
    monkeypatch.setenv("STOCKCHART_ALPHA_VANTAGE_API_KEY", "av-key")

    config = Settings(_env_file=None).to_client_config()

    assert config.data_source == DataSource.MOCK
    assert config.api_key is None


def test_client_config_defaults_and_validation() -> None:
    config = ClientConfig()

    assert config.rate_limit_requests == 5
    assert config.max_retries == 3
    assert config.ttl_daily == 300.0
    assert config.ttl_historical == 900.0

    with pytest.raises(pydantic.ValidationError):
        ClientConfig(max_retries=0)
    with pytest.raises(pydantic.ValidationError):
        ClientConfig(rate_limit_window=0)


def test_setup_logging_is_idempotent() -> None:
    logger = logging.getLogger("stockchart")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    logger.handlers.clear()

    try:
        setup_logging("debug")
        setup_logging("warning")

        assert len(logger.handlers) == 1
        assert logger.handlers[0].formatter._fmt == LOG_FORMAT
        assert logger.level == logging.WARNING
        assert logger.propagate is False
    finally:
        logger.handlers[:] = saved[1]
        logger.setLevel(saved[0])
        logger.propagate = saved[2]


def test_resolution_properties() -> None:
    assert Resolution.M15.is_intraday
    assert not Resolution.D1.is_intraday
    assert Resolution.H1.seconds == 3600
    assert Resolution.W1.minutes == 10080


def test_intraday_only_for_short_ranges() -> None:
    assert is_resolution_allowed(TimeRange.D5, Resolution.M5)
    assert not is_resolution_allowed(TimeRange.Y1, Resolution.M5)
    assert is_resolution_allowed(TimeRange.Y1, Resolution.W1)


def test_time_range_bounds() -> None:
    now = datetime(2024, 6, 28, 15, 30)

    assert time_range_bounds(TimeRange.D1, now)[0] == int(datetime(2024, 6, 28).timestamp())
    assert time_range_bounds(TimeRange.YTD, now)[0] == int(datetime(2024, 1, 1).timestamp())
    assert time_range_bounds(TimeRange.MAX, now) == (0, int(now.timestamp()))
    from_ts, to_ts = time_range_bounds(TimeRange.D5, now)
    assert to_ts - from_ts == 5 * 86_400
