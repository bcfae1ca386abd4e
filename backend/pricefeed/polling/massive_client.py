"""Massive (Polygon.io) API client for real quotes."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import MalformedQuote, RateLimited, SourceUnavailable
from .interface import QuoteSource
from .models import Quote

logger = logging.getLogger(__name__)


class MassiveQuoteSource(QuoteSource):
    """QuoteSource backed by the Massive (Polygon.io) REST API.

    Calls GET /v2/snapshot/locale/us/markets/stocks/tickers for the single
    tracked symbol and reports its last trade.

    Rate limits:
      - Free tier: 5 req/min -> keep the interval at 15s or above
      - Paid tiers: higher limits -> intervals of a few seconds are fine
    """

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key
        self._client: Any = None  # Lazy import to avoid hard dependency at import time

    def fetch_latest(self, symbol: str) -> Quote:
        try:
            snapshots = self._fetch_snapshots(symbol)
        except Exception as e:
            # Common failures: 401 (bad key), 429 (rate limit), network errors.
            if _status_code_from_error(e) == 429:
                raise RateLimited(f"Massive rate limit for {symbol}") from e
            raise SourceUnavailable(f"Massive request failed for {symbol}: {e}") from e

        snap = next((s for s in snapshots or [] if getattr(s, "ticker", None) == symbol), None)
        if snap is None:
            raise MalformedQuote(f"No snapshot returned for {symbol}")

        try:
            price = Decimal(str(snap.last_trade.price))
            # Massive timestamps are Unix milliseconds -> convert to seconds
            observed_at = snap.last_trade.timestamp / 1000.0
            return Quote(price=price, observed_at=observed_at)
        except (AttributeError, TypeError, InvalidOperation, ValueError) as e:
            raise MalformedQuote(f"Unusable snapshot for {symbol}: {e}") from e

    def close(self) -> None:
        self._client = None

    def _fetch_snapshots(self, symbol: str) -> list:
        """Synchronous call to the Massive REST API. Runs in a worker thread."""
        from massive import RESTClient
        from massive.rest.models import SnapshotMarketType

        if self._client is None:
            self._client = RESTClient(api_key=self._api_key)
        return self._client.get_snapshot_all(
            market_type=SnapshotMarketType.STOCKS,
            tickers=[symbol],
        )


def _status_code_from_error(exc: Exception) -> int | None:
    response = getattr(exc, "response", None)
    code = getattr(response, "status_code", None) or getattr(exc, "status", None)
    if isinstance(code, int):
        return code
    return None
