"""SQLite-backed config store and sample sink."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from decimal import Decimal
from pathlib import Path

from .errors import ConfigNotFound, StoreError
from .interface import ConfigStore, SampleSink
from .models import PollConfig, Sample

logger = logging.getLogger(__name__)


class _SqliteBackend:
    """Opens a short-lived connection per call; safe to share across threads."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.path, timeout=5.0)

    def _execute(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            with closing(self._connect()) as conn, conn:
                return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"{self.path}: {e}") from e


class SqliteConfigStore(_SqliteBackend, ConfigStore):
    """Polling config in the first row (by id) of the fetch_config table."""

    def initialize(self) -> None:
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS fetch_config (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                symbol TEXT NOT NULL,
                interval_sec INTEGER NOT NULL
            )
            """
        )

    def read_config(self) -> PollConfig:
        rows = self._execute("SELECT symbol, interval_sec FROM fetch_config ORDER BY id LIMIT 1")
        if not rows:
            raise ConfigNotFound("No config found")
        symbol, interval_sec = rows[0]
        return PollConfig(symbol=symbol, interval_seconds=int(interval_sec))

    def write_config(self, config: PollConfig) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                row = conn.execute("SELECT id FROM fetch_config ORDER BY id LIMIT 1").fetchone()
                if row is None:
                    conn.execute(
                        "INSERT INTO fetch_config (symbol, interval_sec) VALUES (?, ?)",
                        (config.symbol, config.interval_seconds),
                    )
                else:
                    conn.execute(
                        "UPDATE fetch_config SET symbol = ?, interval_sec = ? WHERE id = ?",
                        (config.symbol, config.interval_seconds, row[0]),
                    )
        except sqlite3.Error as e:
            raise StoreError(f"{self.path}: {e}") from e
        logger.info("Config saved (symbol=%s, interval=%ds)", config.symbol, config.interval_seconds)


class SqliteSampleSink(_SqliteBackend, SampleSink):
    """Samples in the stocks table. Prices are stored as text to keep Decimal exact."""

    def initialize(self) -> None:
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS stocks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                symbol TEXT NOT NULL,
                price TEXT NOT NULL,
                observed_at REAL NOT NULL
            )
            """
        )
        self._execute("CREATE INDEX IF NOT EXISTS idx_stocks_symbol ON stocks (symbol, id)")

    def append(self, sample: Sample) -> None:
        self._execute(
            "INSERT INTO stocks (symbol, price, observed_at) VALUES (?, ?, ?)",
            (sample.symbol, str(sample.price), sample.observed_at),
        )

    def recent(self, symbol: str, limit: int = 20) -> list[Sample]:
        rows = self._execute(
            "SELECT symbol, price, observed_at FROM stocks WHERE symbol = ? ORDER BY id DESC LIMIT ?",
            (symbol, limit),
        )
        return [Sample(symbol=s, price=Decimal(p), observed_at=float(t)) for s, p, t in rows]
