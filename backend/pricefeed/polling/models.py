"""Data models for the polling subsystem."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import Decimal

from .errors import InvalidConfig


@dataclass(frozen=True, slots=True)
class PollConfig:
    """Which symbol to poll and how often.

    Not validated on construction so that callers can hand a bad config to
    PollScheduler.start() and get InvalidConfig back. Use validate() or
    PollConfig.parse() at the edges.
    """

    symbol: str
    interval_seconds: int

    def validate(self) -> None:
        """Raise InvalidConfig unless symbol is non-empty and interval positive."""
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise InvalidConfig("Invalid symbol")
        # bool is an int subclass; True is not an interval
        if (
            not isinstance(self.interval_seconds, int)
            or isinstance(self.interval_seconds, bool)
            or self.interval_seconds <= 0
        ):
            raise InvalidConfig("Interval must be a positive integer")

    @classmethod
    def parse(cls, symbol: object, interval: object) -> PollConfig:
        """Build a validated config from loosely-typed request input.

        Symbols are normalized to uppercase without surrounding whitespace.
        Intervals may be ints or integer strings ("30").
        """
        if not isinstance(symbol, str) or not symbol.strip():
            raise InvalidConfig("Invalid symbol")

        if isinstance(interval, bool):
            raise InvalidConfig("Interval must be a positive integer")
        if isinstance(interval, int):
            interval_seconds = interval
        elif isinstance(interval, str):
            try:
                interval_seconds = int(interval.strip())
            except ValueError:
                raise InvalidConfig("Interval must be a positive integer") from None
        else:
            raise InvalidConfig("Interval must be a positive integer")

        config = cls(symbol=symbol.strip().upper(), interval_seconds=interval_seconds)
        config.validate()
        return config

    def to_dict(self) -> dict:
        """Serialize in the shape the config API returns."""
        return {"symbol": self.symbol, "interval_sec": self.interval_seconds}


@dataclass(frozen=True, slots=True)
class Quote:
    """Latest price reported by a quote source."""

    price: Decimal
    observed_at: float  # Unix seconds

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"price must be >= 0, got {self.price}")


@dataclass(frozen=True, slots=True)
class Sample:
    """Immutable price sample for one symbol, written once to the sink."""

    symbol: str
    price: Decimal
    observed_at: float = field(default_factory=time.time)  # Unix seconds

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"price must be >= 0, got {self.price}")

    @classmethod
    def from_quote(cls, symbol: str, quote: Quote) -> Sample:
        return cls(symbol=symbol, price=quote.price, observed_at=quote.observed_at)

    def to_dict(self) -> dict:
        """Serialize for JSON / stream transmission. Price is kept as a string."""
        return {
            "symbol": self.symbol,
            "price": str(self.price),
            "observed_at": self.observed_at,
        }
