"""Abstract interfaces for the scheduler's collaborators."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import PollConfig, Quote, Sample


class ConfigStore(ABC):
    """Durable single-row polling configuration.

    Calls are blocking; the scheduler and API run them in a worker thread.
    """

    def initialize(self) -> None:
        """Create any backing storage. Safe to call more than once."""

    @abstractmethod
    def read_config(self) -> PollConfig:
        """Return the persisted config. Raises ConfigNotFound if none exists."""

    @abstractmethod
    def write_config(self, config: PollConfig) -> None:
        """Persist the config, replacing the existing row. Raises StoreError."""


class QuoteSource(ABC):
    """Contract for quote providers.

    Lifecycle:
        source = create_quote_source(settings)
        quote = source.fetch_latest("AAPL")   # blocking, called from a thread
        ...
        source.close()
    """

    @abstractmethod
    def fetch_latest(self, symbol: str) -> Quote:
        """Return the latest observed price for symbol.

        Raises SourceUnavailable, RateLimited or MalformedQuote. Must not
        retry internally; the scheduler decides what happens next tick.
        """

    def close(self) -> None:
        """Release network resources. Safe to call multiple times."""


class SampleSink(ABC):
    """Append-only store of price samples."""

    def initialize(self) -> None:
        """Create any backing storage. Safe to call more than once."""

    @abstractmethod
    def append(self, sample: Sample) -> None:
        """Durably append one sample. Raises StoreError."""

    @abstractmethod
    def recent(self, symbol: str, limit: int = 20) -> list[Sample]:
        """Most recent samples for symbol, newest first."""


class EventPublisher(ABC):
    """Best-effort downstream publish of stored samples."""

    @abstractmethod
    def publish(self, sample: Sample) -> None:
        """Hand the sample to the stream. Errors may be raised; callers log them."""

    def close(self) -> None:
        """Release the connection. Safe to call multiple times."""
