"""Factories for the scheduler's collaborators."""

from __future__ import annotations

import logging

from ..settings import Settings
from .interface import EventPublisher, QuoteSource
from .publisher import NullPublisher, RedisStreamPublisher

logger = logging.getLogger(__name__)


def create_quote_source(settings: Settings) -> QuoteSource:
    """Pick the quote source from configured API keys.

    - ALPHA_VANTAGE_KEY set -> AlphaVantageQuoteSource
    - else MASSIVE_API_KEY set -> MassiveQuoteSource
    - otherwise -> SimulatedQuoteSource (GBM simulation)
    """
    if settings.alpha_vantage_key:
        from .alphavantage import AlphaVantageQuoteSource

        logger.info("Quote source: Alpha Vantage")
        return AlphaVantageQuoteSource(api_key=settings.alpha_vantage_key, timeout=settings.call_timeout_sec)
    elif settings.massive_api_key:
        from .massive_client import MassiveQuoteSource

        logger.info("Quote source: Massive API (real data)")
        return MassiveQuoteSource(api_key=settings.massive_api_key)
    else:
        from .simulator import SimulatedQuoteSource

        logger.info("Quote source: GBM Simulator")
        return SimulatedQuoteSource()


def create_event_publisher(settings: Settings) -> EventPublisher:
    """Redis stream publisher when ENABLE_STREAM is on, else a no-op publisher."""
    if settings.enable_stream:
        logger.info("Stream publishing: ENABLED (%s -> %s)", settings.redis_url, settings.stream_name)
        return RedisStreamPublisher(url=settings.redis_url, stream=settings.stream_name)
    logger.info("Stream publishing: DISABLED (ENABLE_STREAM is not set)")
    return NullPublisher()
