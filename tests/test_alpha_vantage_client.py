from __future__ import annotations

import asyncio

import aiohttp
import pytest

from conftest import FakeResponse, FakeSession, RecordingSleep
from stockchart.core.config import ClientConfig
from stockchart.schemas.market import DataSource, OutputSize, Resolution
from stockchart.services.market_data import AlphaVantageClient, ApiError, ApiErrorKind

# 2024-01-02 .. 2024-01-05 00:00 UTC
JAN_2 = 1_704_153_600
JAN_4 = 1_704_326_400


def _config(**overrides) -> ClientConfig:
    values = {
        "data_source": DataSource.ALPHA_VANTAGE,
        "api_key": "demo-key",
        "timezone": "UTC",
        "rate_limit_requests": 100,
    }
    values.update(overrides)
    return ClientConfig(**values)


def _client(session: FakeSession, sleeper: RecordingSleep, **overrides) -> AlphaVantageClient:
    return AlphaVantageClient(_config(**overrides), session=session, sleep=sleeper)


def _bar(close: float) -> dict:
    return {
        "1. open": str(close - 0.5),
        "2. high": str(close + 1.0),
        "3. low": str(close - 1.0),
        "4. close": str(close),
        "5. volume": "1000",
    }


def _daily_payload() -> dict:
    return {
        "Meta Data": {"2. Symbol": "IBM"},
        "Time Series (Daily)": {
            "2024-01-05": _bar(104.0),
            "2024-01-04": _bar(103.0),
            "2024-01-03": _bar(102.0),
            "2024-01-02": _bar(101.0),
        },
    }


def test_daily_candles_request_and_window(sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse(_daily_payload()))
    client = _client(session, sleeper)

    candles = asyncio.run(client.get_candles("ibm", Resolution.D1, JAN_2, JAN_4))

    assert [c.close for c in candles] == [101.0, 102.0, 103.0]
    (call,) = session.calls
    assert call["url"] == "https://www.alphavantage.co/query"
    assert call["params"] == {
        "function": "TIME_SERIES_DAILY",
        "symbol": "IBM",
        "apikey": "demo-key",
        "outputsize": "compact",
    }
    assert call["timeout"].total == 10.0


def test_malformed_entry_is_dropped_from_thirty_day_request(sleeper: RecordingSleep) -> None:
    payload = _daily_payload()
    payload["Time Series (Daily)"]["2024-01-08"] = _bar(105.0)
    payload["Time Series (Daily)"]["2024-01-09"] = {"1. open": "1", "2. high": "2", "3. low": "0.5", "5. volume": "1"}
    session = FakeSession(FakeResponse(payload))
    client = _client(session, sleeper)

    candles = asyncio.run(client.get_candles("AAPL", Resolution.D1, JAN_2 - 20 * 86_400, JAN_2 + 10 * 86_400))

    assert len(candles) == 5
    assert [c.close for c in candles] == [101.0, 102.0, 103.0, 104.0, 105.0]
    assert session.calls[0]["params"]["outputsize"] == "compact"


def test_cache_hit_skips_network_and_limiter(sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse(_daily_payload()))
    client = _client(session, sleeper)

    async def scenario() -> list:
        await client.get_candles("IBM", Resolution.D1, JAN_2, JAN_4)
        return await client.get_candles("IBM", Resolution.D1, JAN_4, JAN_4 + 86_400)

    candles = asyncio.run(scenario())

    assert [c.close for c in candles] == [103.0, 104.0]
    assert len(session.calls) == 1
    assert len(client.rate_limiter) == 1


class _StalledRequest:
    def __init__(self, session: "StalledSession") -> None:
        self.session = session

    async def __aenter__(self) -> FakeResponse:
        self.session.sent.set()
        await self.session.release.wait()
        return FakeResponse(_daily_payload())

    async def __aexit__(self, *_exc) -> None:
        return None


class StalledSession(FakeSession):
    """Session whose GET stays in flight until released."""

    def __init__(self) -> None:
        super().__init__()
        self.sent = asyncio.Event()
        self.release = asyncio.Event()

    def get(self, url: str, params=None, timeout=None) -> _StalledRequest:
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        return _StalledRequest(self)


def test_cancelled_request_counts_but_is_not_cached(sleeper: RecordingSleep) -> None:
    async def scenario() -> AlphaVantageClient:
        session = StalledSession()
        client = _client(session, sleeper)
        task = asyncio.create_task(client.get_candles("IBM", Resolution.D1, JAN_2, JAN_4))
        await session.sent.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(session.calls) == 1
        return client

    client = asyncio.run(scenario())

    assert len(client.rate_limiter) == 1
    assert client.cache.size() == 0


def test_long_span_requests_full_history(sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse(_daily_payload()))
    client = _client(session, sleeper)

    asyncio.run(client.get_candles("IBM", Resolution.D1, JAN_2 - 200 * 86_400, JAN_4))

    assert session.calls[0]["params"]["outputsize"] == "full"


def test_intraday_parameters(sleeper: RecordingSleep) -> None:
    payload = {
        "Time Series (5min)": {
            "2024-01-02 09:35:00": _bar(101.0),
            "2024-01-02 09:30:00": _bar(100.0),
        }
    }
    session = FakeSession(FakeResponse(payload))
    client = _client(session, sleeper)

    candles = asyncio.run(client.get_candles("IBM", Resolution.M5, JAN_2, JAN_2 + 86_400))

    params = session.calls[0]["params"]
    assert params["function"] == "TIME_SERIES_INTRADAY"
    assert params["interval"] == "5min"
    assert [c.time for c in candles] == [JAN_2 + 34_200, JAN_2 + 34_500]


def test_weekly_has_no_outputsize(sleeper: RecordingSleep) -> None:
    client = _client(FakeSession(), sleeper)

    params = client.build_candle_params("ibm", Resolution.W1, OutputSize.FULL)

    assert params == {"symbol": "IBM", "apikey": "demo-key", "function": "TIME_SERIES_WEEKLY"}


def test_rate_limit_note_is_retried(sleeper: RecordingSleep) -> None:
    session = FakeSession(
        FakeResponse({"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."}),
        FakeResponse(_daily_payload()),
    )
    client = _client(session, sleeper)

    candles = asyncio.run(client.get_candles("IBM", Resolution.D1, JAN_2, JAN_4))

    assert len(candles) == 3
    assert len(session.calls) == 2
    assert sleeper.delays == [1.0]


def test_missing_api_key_fails_without_request(sleeper: RecordingSleep) -> None:
    session = FakeSession()
    client = _client(session, sleeper, api_key=None)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_candles("IBM", Resolution.D1, JAN_2, JAN_4))

    assert exc_info.value.kind == ApiErrorKind.INVALID_API_KEY
    assert session.calls == []


def test_invalid_symbol_is_not_retried(sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse({"Error Message": "Invalid API call. Please retry or visit the documentation."}))
    client = _client(session, sleeper)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_candles("NOPE", Resolution.D1, JAN_2, JAN_4))

    assert exc_info.value.kind == ApiErrorKind.INVALID_SYMBOL
    assert len(session.calls) == 1
    assert client.cache.size() == 0


def test_http_429_carries_retry_after(sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse({}, status=429, headers={"Retry-After": "30"}))
    client = _client(session, sleeper, max_retries=1)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_quote("IBM"))

    assert exc_info.value.kind == ApiErrorKind.RATE_LIMIT
    assert exc_info.value.retry_after == 30
    assert exc_info.value.status_code == 429


@pytest.mark.parametrize(
    "failure",
    [aiohttp.ClientConnectionError("connection refused"), asyncio.TimeoutError()],
)
def test_transport_failures_are_network_errors(failure: BaseException, sleeper: RecordingSleep) -> None:
    session = FakeSession(failure, failure, failure)
    client = _client(session, sleeper)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_quote("IBM"))

    assert exc_info.value.kind == ApiErrorKind.NETWORK
    assert len(session.calls) == 3
    assert sleeper.delays == [1.0, 2.0]
    assert client.cache.size() == 0


def test_invalid_json_is_unknown(sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse(ValueError("Expecting value")))
    client = _client(session, sleeper, max_retries=1)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_quote("IBM"))

    assert exc_info.value.kind == ApiErrorKind.UNKNOWN


def test_quote(sleeper: RecordingSleep) -> None:
    payload = {
        "Global Quote": {
            "01. symbol": "IBM",
            "05. price": "161.75",
            "07. latest trading day": "2024-01-02",
            "08. previous close": "160.50",
            "09. change": "1.25",
            "10. change percent": "0.7788%",
        }
    }
    session = FakeSession(FakeResponse(payload))
    client = _client(session, sleeper)

    quote = asyncio.run(client.get_quote("ibm"))

    assert quote.price == 161.75
    assert quote.timestamp == JAN_2
    assert session.calls[0]["params"]["function"] == "GLOBAL_QUOTE"


def test_empty_quote_is_invalid_symbol(sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse({"Global Quote": {}}))
    client = _client(session, sleeper)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_quote("ZZZZ"))

    assert exc_info.value.kind == ApiErrorKind.INVALID_SYMBOL


def test_search_and_profile_share_one_request(sleeper: RecordingSleep) -> None:
    payload = {
        "bestMatches": [
            {"1. symbol": "IBM", "2. name": "International Business Machines Corp", "3. type": "Equity", "4. region": "United States", "8. currency": "USD"},
            {"1. symbol": "IBMN", "2. name": "iShares iBonds", "3. type": "ETF", "4. region": "United States", "8. currency": "USD"},
        ]
    }
    session = FakeSession(FakeResponse(payload))
    client = _client(session, sleeper)

    async def scenario():
        results = await client.search_symbols("  IBM ")
        profile = await client.get_company_profile("ibm")
        return results, profile

    results, profile = asyncio.run(scenario())

    assert [r.symbol for r in results] == ["IBM", "IBMN"]
    assert session.calls[0]["params"]["keywords"] == "IBM"
    assert profile.name == "International Business Machines Corp"
    assert profile.currency == "USD"
    assert len(session.calls) == 1


def test_profile_without_exact_match_is_not_found(sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse({"bestMatches": [{"1. symbol": "IBMN", "2. name": "x"}]}))
    client = _client(session, sleeper)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_company_profile("IBM"))

    assert exc_info.value.kind == ApiErrorKind.NOT_FOUND


def test_blank_search_makes_no_request(sleeper: RecordingSleep) -> None:
    session = FakeSession()
    client = _client(session, sleeper)

    assert asyncio.run(client.search_symbols("   ")) == []
    assert session.calls == []


# =============================================================================
# API KEY VALIDATION
# =============================================================================


@pytest.mark.parametrize(
    ("payload", "valid", "error"),
    [
        ({"Global Quote": {"01. symbol": "IBM", "05. price": "161.75"}}, True, None),
        ({"Global Quote": {}}, True, None),
        ({"Error Message": "the parameter apikey is invalid or missing."}, False, "Invalid API key"),
        ({"Note": "call frequency"}, False, "Rate limit exceeded. Please wait before testing again."),
        ({"Information": "This is a premium endpoint"}, False, "Rate limit exceeded. Please wait before testing again."),
        ({"Information": "Please subscribe"}, False, "Please subscribe"),
        ({"unexpected": True}, False, "Unexpected response from API"),
    ],
)
def test_validate_api_key(payload: dict, valid: bool, error, sleeper: RecordingSleep) -> None:
    session = FakeSession(FakeResponse(payload))
    client = _client(session, sleeper, api_key=None)

    result = asyncio.run(client.validate_api_key(" new-key "))

    assert result.valid is valid
    assert result.error == error
    params = session.calls[0]["params"]
    assert params["apikey"] == "new-key"
    assert params["symbol"] == "IBM"
    assert session.calls[0]["timeout"].total == 5.0


def test_validate_empty_api_key(sleeper: RecordingSleep) -> None:
    session = FakeSession()
    client = _client(session, sleeper)

    result = asyncio.run(client.validate_api_key("  "))

    assert not result.valid
    assert result.error == "API key cannot be empty"
    assert session.calls == []


def test_validate_api_key_timeout(sleeper: RecordingSleep) -> None:
    client = _client(FakeSession(asyncio.TimeoutError()), sleeper)

    result = asyncio.run(client.validate_api_key("key"))

    assert result.error == "Request timed out. Please try again."


def test_close_leaves_injected_session_open(sleeper: RecordingSleep) -> None:
    session = FakeSession()
    client = _client(session, sleeper)

    asyncio.run(client.close())

    assert session.closed is False
