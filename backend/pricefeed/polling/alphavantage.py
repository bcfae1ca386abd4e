"""Alpha Vantage intraday client."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import requests

from .errors import MalformedQuote, RateLimited, SourceUnavailable
from .interface import QuoteSource
from .models import Quote

logger = logging.getLogger(__name__)

_SERIES_KEY = "Time Series (1min)"
_DEFAULT_TZ = "US/Eastern"


class AlphaVantageQuoteSource(QuoteSource):
    """QuoteSource using TIME_SERIES_INTRADAY at 1-minute resolution.

    The latest bar's close is reported as the price, its bar time as
    observed_at. Free keys are throttled hard (a few calls per minute); a
    throttled call comes back HTTP 200 with a "Note" or "Information" message
    instead of the series.
    """

    BASE_URL = "https://www.alphavantage.co/query"

    def __init__(
        self,
        api_key: str,
        session: Optional[Any] = None,
        base_url: Optional[str] = None,
        timeout: float = 5.0,
    ) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout

    def fetch_latest(self, symbol: str) -> Quote:
        try:
            response = self.session.get(
                self.base_url,
                params={
                    "function": "TIME_SERIES_INTRADAY",
                    "symbol": symbol,
                    "interval": "1min",
                    "apikey": self.api_key,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SourceUnavailable(f"Alpha Vantage request failed for {symbol}: {e}") from e

        if response.status_code == 429:
            raise RateLimited(f"Alpha Vantage HTTP 429 for {symbol}")
        if response.status_code >= 400:
            raise SourceUnavailable(f"Alpha Vantage HTTP {response.status_code} for {symbol}")

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedQuote(f"Alpha Vantage returned non-JSON for {symbol}") from e

        return self._parse(symbol, payload)

    def close(self) -> None:
        close = getattr(self.session, "close", None)
        if close is not None:
            close()

    @staticmethod
    def _parse(symbol: str, payload: Any) -> Quote:
        if not isinstance(payload, dict):
            raise MalformedQuote(f"Unexpected payload for {symbol}")

        series = payload.get(_SERIES_KEY)
        if not series:
            note = payload.get("Note") or payload.get("Information")
            if note:
                raise RateLimited(f"Alpha Vantage throttled {symbol}: {note}")
            raise MalformedQuote(f"Invalid response for {symbol}: {payload.get('Error Message') or payload}")

        latest_ts = sorted(series)[-1]
        try:
            close = Decimal(str(series[latest_ts]["4. close"]))
            if close < 0:
                raise MalformedQuote(f"Negative close for {symbol}: {close}")
            tz_name = payload.get("Meta Data", {}).get("6. Time Zone", _DEFAULT_TZ)
            observed_at = _to_unix(latest_ts, tz_name)
        except (KeyError, TypeError, InvalidOperation, ValueError) as e:
            raise MalformedQuote(f"Unusable bar {latest_ts} for {symbol}: {e}") from e

        logger.debug("Alpha Vantage %s close=%s at %s", symbol, close, latest_ts)
        return Quote(price=close, observed_at=observed_at)


def _to_unix(bar_time: str, tz_name: str) -> float:
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        tz = ZoneInfo("America/New_York")
    return datetime.strptime(bar_time, "%Y-%m-%d %H:%M:%S").replace(tzinfo=tz).timestamp()
