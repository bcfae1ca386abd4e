"""Exceptions raised by the polling subsystem.

Quote-source errors are per-tick: the scheduler logs them and skips the tick.
Store errors surface to whoever triggered the write, except at tick time where
the sample is dropped and the cycle carries on.
"""


class PollingError(Exception):
    """Base class for polling errors."""


class InvalidConfig(PollingError, ValueError):
    """Symbol empty or interval not a positive integer."""


class ConfigNotFound(PollingError):
    """The config store holds no row yet."""


class StoreError(PollingError):
    """A config or sample write/read failed."""


class QuoteSourceError(PollingError):
    """The quote source could not produce a price for this tick."""


class SourceUnavailable(QuoteSourceError):
    """Network failure, timeout, or upstream error."""


class RateLimited(QuoteSourceError):
    """The provider throttled the request."""


class MalformedQuote(QuoteSourceError):
    """The provider answered, but not with a usable price."""
