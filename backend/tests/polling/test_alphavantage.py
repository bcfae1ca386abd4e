"""Tests for AlphaVantageQuoteSource (mocked session)."""

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest
import requests

from pricefeed.polling.alphavantage import AlphaVantageQuoteSource
from pricefeed.polling.errors import MalformedQuote, RateLimited, SourceUnavailable


def _session(payload=None, status_code=200, json_error=False, raises=None) -> MagicMock:
    session = MagicMock()
    if raises is not None:
        session.get.side_effect = raises
        return session
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    session.get.return_value = response
    return session


SERIES_PAYLOAD = {
    "Meta Data": {"2. Symbol": "AAPL", "6. Time Zone": "US/Eastern"},
    "Time Series (1min)": {
        "2024-02-09 15:58:00": {"1. open": "188.80", "4. close": "188.85"},
        "2024-02-09 15:59:00": {"1. open": "188.85", "4. close": "188.90"},
        "2024-02-09 15:57:00": {"1. open": "188.70", "4. close": "188.75"},
    },
}


class TestAlphaVantageQuoteSource:
    def test_latest_bar_close(self):
        source = AlphaVantageQuoteSource(api_key="k", session=_session(SERIES_PAYLOAD))

        quote = source.fetch_latest("AAPL")

        expected_ts = datetime(2024, 2, 9, 15, 59, tzinfo=ZoneInfo("US/Eastern")).timestamp()
        assert quote.price == Decimal("188.90")
        assert quote.observed_at == expected_ts

    def test_request_parameters(self):
        session = _session(SERIES_PAYLOAD)
        source = AlphaVantageQuoteSource(api_key="secret", session=session, timeout=3.0)

        source.fetch_latest("AAPL")

        _, kwargs = session.get.call_args
        assert kwargs["params"] == {
            "function": "TIME_SERIES_INTRADAY",
            "symbol": "AAPL",
            "interval": "1min",
            "apikey": "secret",
        }
        assert kwargs["timeout"] == 3.0

    def test_throttle_note_is_rate_limited(self):
        payload = {"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute"}
        source = AlphaVantageQuoteSource(api_key="k", session=_session(payload))

        with pytest.raises(RateLimited):
            source.fetch_latest("AAPL")

    def test_information_message_is_rate_limited(self):
        source = AlphaVantageQuoteSource(api_key="k", session=_session({"Information": "rate limit reached"}))

        with pytest.raises(RateLimited):
            source.fetch_latest("AAPL")

    def test_http_429_is_rate_limited(self):
        source = AlphaVantageQuoteSource(api_key="k", session=_session(status_code=429))

        with pytest.raises(RateLimited):
            source.fetch_latest("AAPL")

    def test_error_message_is_malformed(self):
        payload = {"Error Message": "Invalid API call."}
        source = AlphaVantageQuoteSource(api_key="k", session=_session(payload))

        with pytest.raises(MalformedQuote):
            source.fetch_latest("NOPE")

    def test_non_json_is_malformed(self):
        source = AlphaVantageQuoteSource(api_key="k", session=_session(json_error=True))

        with pytest.raises(MalformedQuote):
            source.fetch_latest("AAPL")

    def test_bad_close_is_malformed(self):
        payload = {"Time Series (1min)": {"2024-02-09 15:59:00": {"4. close": "n/a"}}}
        source = AlphaVantageQuoteSource(api_key="k", session=_session(payload))

        with pytest.raises(MalformedQuote):
            source.fetch_latest("AAPL")

    def test_network_error_is_unavailable(self):
        session = _session(raises=requests.ConnectionError("refused"))
        source = AlphaVantageQuoteSource(api_key="k", session=session)

        with pytest.raises(SourceUnavailable):
            source.fetch_latest("AAPL")

    def test_server_error_is_unavailable(self):
        source = AlphaVantageQuoteSource(api_key="k", session=_session(status_code=503))

        with pytest.raises(SourceUnavailable):
            source.fetch_latest("AAPL")

    def test_close_closes_session(self):
        session = _session(SERIES_PAYLOAD)
        AlphaVantageQuoteSource(api_key="k", session=session).close()
        session.close.assert_called_once()
