"""Polling subsystem for pricefeed.

Public API:
    PollConfig          - Symbol + interval the scheduler is bound to
    Sample              - Immutable stored price sample
    PollScheduler       - Reconfigurable single-symbol poll scheduler
    ConfigService       - Config read/update operations
    ConfigStore, QuoteSource, SampleSink, EventPublisher - Collaborator interfaces
    create_quote_source, create_event_publisher - Factories driven by Settings
    create_config_router - FastAPI router factory for the config API
"""

from .bootstrap import bootstrap_scheduler, load_or_seed_config
from .errors import (
    ConfigNotFound,
    InvalidConfig,
    MalformedQuote,
    PollingError,
    QuoteSourceError,
    RateLimited,
    SourceUnavailable,
    StoreError,
)
from .factory import create_event_publisher, create_quote_source
from .interface import ConfigStore, EventPublisher, QuoteSource, SampleSink
from .models import PollConfig, Quote, Sample
from .routes import create_config_router
from .scheduler import PollScheduler, SchedulerState
from .service import ConfigService

__all__ = [
    "PollConfig",
    "Quote",
    "Sample",
    "PollScheduler",
    "SchedulerState",
    "ConfigService",
    "ConfigStore",
    "QuoteSource",
    "SampleSink",
    "EventPublisher",
    "PollingError",
    "InvalidConfig",
    "ConfigNotFound",
    "StoreError",
    "QuoteSourceError",
    "SourceUnavailable",
    "RateLimited",
    "MalformedQuote",
    "bootstrap_scheduler",
    "load_or_seed_config",
    "create_quote_source",
    "create_event_publisher",
    "create_config_router",
]
