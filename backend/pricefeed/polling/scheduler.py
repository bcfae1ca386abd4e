"""Reconfigurable poll scheduler.

One Cycle is live at a time. Each Cycle is an asyncio task that wakes every
interval, fetches a quote for its symbol and appends the sample to the sink.
Reconfiguring bumps the epoch and starts a fresh Cycle; the previous one is
cancelled if it is sleeping, or left to finish its fetch if one is in flight.
A finished fetch re-checks that its Cycle is still current, under the same
lock reconfigure takes, before anything is written.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from .errors import QuoteSourceError, SourceUnavailable
from .interface import EventPublisher, QuoteSource, SampleSink
from .models import PollConfig, Quote, Sample

logger = logging.getLogger(__name__)


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    TICKING = "ticking"


@dataclass(eq=False)
class Cycle:
    """Run-token for one scheduling epoch. Never persisted."""

    epoch: int
    config: PollConfig
    started_at: float  # event loop clock
    task: asyncio.Task | None = field(default=None, repr=False)
    ticking: bool = False
    # Fetch that outlived call_timeout; the next tick waits for it
    abandoned_fetch: asyncio.Future | None = field(default=None, repr=False)


class PollScheduler:
    """Runs the recurring fetch-and-store job for a single symbol.

    Usage:
        scheduler = PollScheduler(quote_source, sample_sink, publisher)
        await scheduler.start(PollConfig("AAPL", 30))
        await scheduler.reconfigure(PollConfig("MSFT", 10))
        await scheduler.stop()

    All methods must be awaited on the loop that owns the scheduler. Other
    threads go through asyncio.run_coroutine_threadsafe().

    `time_scale` multiplies every interval (1.0 = seconds). `call_timeout`
    bounds each fetch; None waits forever. Appends are left to the sink's own
    timeouts.
    """

    def __init__(
        self,
        quote_source: QuoteSource,
        sample_sink: SampleSink,
        publisher: EventPublisher | None = None,
        *,
        time_scale: float = 1.0,
        call_timeout: float | None = 10.0,
    ) -> None:
        if time_scale <= 0:
            raise ValueError("time_scale must be positive")
        self._source = quote_source
        self._sink = sample_sink
        self._publisher = publisher
        self._time_scale = time_scale
        self._call_timeout = call_timeout

        # Guards _current and the commit step of every tick
        self._lock = asyncio.Lock()
        self._epoch = 0
        self._current: Cycle | None = None
        self._publish_tasks: set[asyncio.Task] = set()

        self._ticks = 0
        self._stored = 0
        self._failed = 0
        self._discarded = 0
        self._publish_errors = 0

    # --- Public API ---

    async def start(self, config: PollConfig) -> Cycle:
        """Bind a new Cycle to config and arm its timer.

        Raises InvalidConfig without touching the current Cycle. The first tick
        fires one full interval after this call returns.
        """
        config.validate()
        async with self._lock:
            retired = self._retire_locked()
            cycle = self._arm_locked(config)
        await self._reap(retired)
        logger.info(
            "Polling %s every %ds (epoch %d)",
            config.symbol,
            config.interval_seconds,
            cycle.epoch,
        )
        return cycle

    async def reconfigure(self, config: PollConfig) -> Cycle:
        """Retire the current Cycle and start one bound to config.

        The timer is always recreated, even when config is unchanged, so ticks
        realign to the moment of this call.
        """
        config.validate()
        previous = self._current
        cycle = await self.start(config)
        if previous is not None:
            logger.info(
                "Reconfigured %s/%ds -> %s/%ds (epoch %d -> %d)",
                previous.config.symbol,
                previous.config.interval_seconds,
                config.symbol,
                config.interval_seconds,
                previous.epoch,
                cycle.epoch,
            )
        return cycle

    async def stop(self) -> None:
        """Invalidate the current Cycle. Safe to call multiple times."""
        async with self._lock:
            retired = self._retire_locked()
        if retired is None:
            return
        await self._reap(retired)
        logger.info("Polling stopped (epoch %d)", retired.epoch)

    @property
    def state(self) -> SchedulerState:
        cycle = self._current
        if cycle is None:
            return SchedulerState.IDLE
        if cycle.ticking:
            return SchedulerState.TICKING
        return SchedulerState.SCHEDULED

    @property
    def epoch(self) -> int:
        """Epoch of the most recently armed Cycle (0 before the first start)."""
        return self._epoch

    @property
    def config(self) -> PollConfig | None:
        """Config bound to the current Cycle, or None when idle."""
        cycle = self._current
        return cycle.config if cycle else None

    def is_current(self, cycle: Cycle) -> bool:
        return self._current is cycle

    def metrics(self) -> dict[str, Any]:
        config = self.config
        return {
            "state": self.state.value,
            "epoch": self._epoch,
            "symbol": config.symbol if config else None,
            "interval_sec": config.interval_seconds if config else None,
            "ticks": self._ticks,
            "stored": self._stored,
            "failed": self._failed,
            "discarded": self._discarded,
            "publish_errors": self._publish_errors,
        }

    # --- Internals ---

    def _arm_locked(self, config: PollConfig) -> Cycle:
        loop = asyncio.get_running_loop()
        self._epoch += 1
        cycle = Cycle(epoch=self._epoch, config=config, started_at=loop.time())
        cycle.task = asyncio.create_task(self._run_cycle(cycle), name=f"poll-cycle-{cycle.epoch}")
        self._current = cycle
        return cycle

    def _retire_locked(self) -> Cycle | None:
        """Mark the current Cycle stale. Returns it for _reap()."""
        cycle = self._current
        self._current = None
        return cycle

    async def _reap(self, cycle: Cycle | None) -> None:
        """Cancel a retired Cycle's task unless a fetch is in flight.

        An in-flight fetch is left to complete; it will find itself stale at
        commit time and discard its result.
        """
        if cycle is None or cycle.task is None:
            return
        task = cycle.task
        if task.done() or cycle.ticking:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run_cycle(self, cycle: Cycle) -> None:
        """Tick on a fixed grid anchored at cycle.started_at.

        An overrunning tick delays the next one rather than stacking ticks. A
        fetch abandoned after call_timeout still holds the Cycle: the next tick
        waits for its thread to return before fetching again.
        """
        loop = asyncio.get_running_loop()
        period = cycle.config.interval_seconds * self._time_scale
        deadline = cycle.started_at
        while True:
            deadline += period
            now = loop.time()
            if deadline < now:
                deadline = now
            await asyncio.sleep(deadline - now)
            if cycle.abandoned_fetch is not None:
                if not cycle.abandoned_fetch.done():
                    logger.warning(
                        "Tick delayed for %s (epoch %d): previous fetch still running",
                        cycle.config.symbol,
                        cycle.epoch,
                    )
                    await asyncio.wait({cycle.abandoned_fetch})
                cycle.abandoned_fetch = None
            if not self.is_current(cycle):
                return
            await self._tick(cycle)
            if not self.is_current(cycle):
                return

    async def _tick(self, cycle: Cycle) -> None:
        symbol = cycle.config.symbol
        cycle.ticking = True
        self._ticks += 1
        try:
            try:
                quote = await self._fetch(cycle)
            except QuoteSourceError as e:
                self._failed += 1
                logger.warning("Fetch skipped for %s (epoch %d): %s: %s", symbol, cycle.epoch, type(e).__name__, e)
                return
            except Exception:
                self._failed += 1
                logger.exception("Fetch failed for %s (epoch %d)", symbol, cycle.epoch)
                return

            sample = Sample.from_quote(symbol, quote)
            async with self._lock:
                if not self.is_current(cycle):
                    self._discarded += 1
                    logger.info("Discarding stale sample for %s (epoch %d)", symbol, cycle.epoch)
                    return
                # Not bounded by call_timeout: an abandoned write could land after
                # this Cycle is retired. Sinks bound their own I/O.
                try:
                    await asyncio.to_thread(self._sink.append, sample)
                except Exception as e:
                    self._failed += 1
                    logger.error("Dropped sample for %s: append failed: %s", symbol, e)
                    return
                self._stored += 1

            logger.debug("Stored %s %s @ %s", symbol, sample.price, sample.observed_at)
            self._publish(sample)
        finally:
            cycle.ticking = False

    async def _fetch(self, cycle: Cycle) -> Quote:
        """Fetch in a worker thread, bounded by call_timeout.

        On timeout the thread keeps running; its future is parked on the Cycle
        so no second fetch starts before it returns.
        """
        future = asyncio.ensure_future(asyncio.to_thread(self._source.fetch_latest, cycle.config.symbol))
        future.add_done_callback(_consume_result)
        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout=self._call_timeout)
        except asyncio.TimeoutError:
            cycle.abandoned_fetch = future
            raise SourceUnavailable(f"fetch_latest timed out after {self._call_timeout}s") from None

    def _publish(self, sample: Sample) -> None:
        """Fire-and-forget publish; never blocks or fails the tick."""
        if self._publisher is None:
            return
        task = asyncio.create_task(asyncio.to_thread(self._publisher.publish, sample), name="sample-publish")
        self._publish_tasks.add(task)
        task.add_done_callback(self._on_published)

    def _on_published(self, task: asyncio.Task) -> None:
        self._publish_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._publish_errors += 1
            logger.warning("Publish failed: %s", exc)


def _consume_result(future: asyncio.Future) -> None:
    # An abandoned fetch has no awaiter; mark its exception retrieved
    if not future.cancelled():
        future.exception()
