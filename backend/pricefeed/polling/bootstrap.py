"""Startup: seed the config store once and start polling from it."""

from __future__ import annotations

import asyncio
import logging

from .errors import ConfigNotFound
from .interface import ConfigStore
from .models import PollConfig
from .scheduler import PollScheduler

logger = logging.getLogger(__name__)


def load_or_seed_config(store: ConfigStore, default: PollConfig) -> PollConfig:
    """Return the persisted config, writing `default` first if the store is empty.

    Seeding happens only when no row exists; an existing config is never
    overwritten by the default, and the default is only validated when it is
    about to be written.
    """
    try:
        return store.read_config()
    except ConfigNotFound:
        default.validate()
        store.write_config(default)
        logger.info(
            "No config found; inserted default (%s, %ds)",
            default.symbol,
            default.interval_seconds,
        )
        return default


async def bootstrap_scheduler(
    scheduler: PollScheduler,
    store: ConfigStore,
    default: PollConfig,
) -> PollConfig:
    """Initialize storage, load (or seed) the config and start the scheduler."""
    await asyncio.to_thread(store.initialize)
    config = await asyncio.to_thread(load_or_seed_config, store, default)
    await scheduler.start(config)
    return config
