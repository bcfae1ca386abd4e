"""Config read/update operations behind the HTTP routes."""

from __future__ import annotations

import asyncio
import logging

from .interface import ConfigStore, SampleSink
from .models import PollConfig, Sample
from .scheduler import PollScheduler

logger = logging.getLogger(__name__)


class ConfigService:
    """Reads and updates the polling config, keeping the scheduler in step.

    An update is validated, persisted, and only then applied to the scheduler.
    A failed write raises StoreError and leaves the running cycle untouched.
    """

    def __init__(self, store: ConfigStore, scheduler: PollScheduler, sink: SampleSink | None = None) -> None:
        self.store = store
        self.scheduler = scheduler
        self.sink = sink
        # Serializes updates so store order matches scheduler order
        self._update_lock = asyncio.Lock()

    async def read(self) -> PollConfig:
        """Current persisted config. Raises ConfigNotFound if the store is empty."""
        return await asyncio.to_thread(self.store.read_config)

    async def update(self, symbol: object, interval: object) -> PollConfig:
        config = PollConfig.parse(symbol, interval)
        async with self._update_lock:
            await asyncio.to_thread(self.store.write_config, config)
            logger.info("Updated config to (symbol=%s, interval=%ds)", config.symbol, config.interval_seconds)
            await self.scheduler.reconfigure(config)
        return config

    async def recent_samples(self, limit: int = 20) -> list[Sample]:
        """Latest stored samples for the symbol currently being polled."""
        if self.sink is None:
            return []
        config = self.scheduler.config or await self.read()
        return await asyncio.to_thread(self.sink.recent, config.symbol, limit)
