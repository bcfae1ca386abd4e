"""Tests for MassiveQuoteSource (mocked)."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from pricefeed.polling.errors import MalformedQuote, RateLimited, SourceUnavailable
from pricefeed.polling.massive_client import MassiveQuoteSource


def _make_snapshot(ticker: str, price: float, timestamp_ms: int) -> MagicMock:
    """Create a mock Massive snapshot object."""
    snap = MagicMock()
    snap.ticker = ticker
    snap.last_trade = MagicMock()
    snap.last_trade.price = price
    snap.last_trade.timestamp = timestamp_ms
    return snap


class TestMassiveQuoteSource:
    """Unit tests for MassiveQuoteSource with mocked API."""

    def test_fetch_returns_last_trade(self):
        source = MassiveQuoteSource(api_key="test-key")

        with patch.object(source, "_fetch_snapshots", return_value=[_make_snapshot("AAPL", 190.50, 1707580800000)]):
            quote = source.fetch_latest("AAPL")

        assert quote.price == Decimal("190.5")
        assert quote.observed_at == 1707580800.0  # Converted to seconds

    def test_picks_requested_ticker(self):
        source = MassiveQuoteSource(api_key="test-key")
        snapshots = [
            _make_snapshot("GOOGL", 175.25, 1707580800000),
            _make_snapshot("AAPL", 190.50, 1707580801000),
        ]

        with patch.object(source, "_fetch_snapshots", return_value=snapshots):
            quote = source.fetch_latest("AAPL")

        assert quote.price == Decimal("190.5")

    def test_missing_snapshot_is_malformed(self):
        source = MassiveQuoteSource(api_key="test-key")

        with patch.object(source, "_fetch_snapshots", return_value=[]):
            with pytest.raises(MalformedQuote):
                source.fetch_latest("AAPL")

    def test_snapshot_without_trade_is_malformed(self):
        source = MassiveQuoteSource(api_key="test-key")
        bad_snap = MagicMock()
        bad_snap.ticker = "AAPL"
        bad_snap.last_trade = None  # Will cause AttributeError

        with patch.object(source, "_fetch_snapshots", return_value=[bad_snap]):
            with pytest.raises(MalformedQuote):
                source.fetch_latest("AAPL")

    def test_api_error_is_unavailable(self):
        source = MassiveQuoteSource(api_key="test-key")

        with patch.object(source, "_fetch_snapshots", side_effect=Exception("network error")):
            with pytest.raises(SourceUnavailable):
                source.fetch_latest("AAPL")

    def test_http_429_is_rate_limited(self):
        source = MassiveQuoteSource(api_key="test-key")
        error = Exception("too many requests")
        error.response = MagicMock(status_code=429)

        with patch.object(source, "_fetch_snapshots", side_effect=error):
            with pytest.raises(RateLimited):
                source.fetch_latest("AAPL")

    def test_close_is_idempotent(self):
        source = MassiveQuoteSource(api_key="test-key")
        source.close()
        source.close()  # Should not raise
