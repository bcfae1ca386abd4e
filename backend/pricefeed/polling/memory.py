"""Thread-safe in-memory config store and sample sink."""

from __future__ import annotations

from threading import Lock

from .errors import ConfigNotFound
from .interface import ConfigStore, SampleSink
from .models import PollConfig, Sample


class InMemoryConfigStore(ConfigStore):
    """Single-row config held in process memory. Lost on restart."""

    def __init__(self, config: PollConfig | None = None) -> None:
        self._config = config
        self._lock = Lock()
        self.writes = 0

    def read_config(self) -> PollConfig:
        with self._lock:
            if self._config is None:
                raise ConfigNotFound("No config found")
            return self._config

    def write_config(self, config: PollConfig) -> None:
        with self._lock:
            self._config = config
            self.writes += 1


class InMemorySampleSink(SampleSink):
    """Append-only list of samples.

    Writers: PollScheduler ticks (from worker threads).
    Readers: the samples route and tests.
    """

    def __init__(self) -> None:
        self._samples: list[Sample] = []
        self._lock = Lock()
        self._version: int = 0  # Monotonically increasing; bumped on every append

    def append(self, sample: Sample) -> None:
        with self._lock:
            self._samples.append(sample)
            self._version += 1

    def recent(self, symbol: str, limit: int = 20) -> list[Sample]:
        with self._lock:
            rows = [s for s in self._samples if s.symbol == symbol]
        return list(reversed(rows[-limit:])) if limit > 0 else []

    def all(self) -> list[Sample]:
        """Snapshot of every sample in append order. Returns a shallow copy."""
        with self._lock:
            return list(self._samples)

    def latest(self, symbol: str) -> Sample | None:
        """Most recent sample for symbol, or None if none stored."""
        rows = self.recent(symbol, limit=1)
        return rows[0] if rows else None

    @property
    def version(self) -> int:
        """Number of appends so far."""
        return self._version

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
