"""FastAPI application entry point.

Run with:
    uvicorn --factory pricefeed.main:create_app --port 3000
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .polling import (
    ConfigService,
    PollConfig,
    PollScheduler,
    bootstrap_scheduler,
    create_config_router,
    create_event_publisher,
    create_quote_source,
)
from .polling.storage import SqliteConfigStore, SqliteSampleSink
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(level_name: str = "INFO") -> None:
    """Configure the root logger. Unknown level names fall back to INFO."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Wire collaborators from settings and return the app.

    The scheduler is started in the lifespan, after the config store has been
    initialized and seeded.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    config_store = SqliteConfigStore(settings.database_path)
    sample_sink = SqliteSampleSink(settings.database_path)
    quote_source = create_quote_source(settings)
    publisher = create_event_publisher(settings)
    scheduler = PollScheduler(
        quote_source,
        sample_sink,
        publisher,
        call_timeout=settings.call_timeout_sec,
    )
    service = ConfigService(config_store, scheduler, sample_sink)
    default = PollConfig(symbol=settings.default_symbol, interval_seconds=settings.default_interval_sec)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await asyncio.to_thread(sample_sink.initialize)
        config = await bootstrap_scheduler(scheduler, config_store, default)
        logger.info("Ready: polling %s every %ds", config.symbol, config.interval_seconds)
        try:
            yield
        finally:
            await scheduler.stop()
            quote_source.close()
            publisher.close()
            logger.info("Shut down")

    app = FastAPI(title="pricefeed", version="0.1.0", lifespan=lifespan)
    app.include_router(create_config_router(service))
    app.state.settings = settings
    app.state.scheduler = scheduler
    app.state.config_service = service
    return app

