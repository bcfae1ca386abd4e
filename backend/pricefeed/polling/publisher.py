"""Downstream publishers for stored samples."""

from __future__ import annotations

import json
import logging
from typing import Any

from .interface import EventPublisher
from .models import Sample

logger = logging.getLogger(__name__)


class NullPublisher(EventPublisher):
    """Used when streaming is disabled. Drops every sample."""

    def publish(self, sample: Sample) -> None:
        return None


class RedisStreamPublisher(EventPublisher):
    """Appends each sample to a Redis stream as a JSON payload.

    Entries look like {"data": '{"symbol": "AAPL", "price": "190.5", ...}'}.
    The stream is capped at roughly `maxlen` entries.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        stream: str = "price_samples",
        maxlen: int | None = 10_000,
        client: Any = None,
    ) -> None:
        self._url = url
        self._stream = stream
        self._maxlen = maxlen
        self._client: Any = client

    @property
    def stream(self) -> str:
        return self._stream

    def _get_client(self) -> Any:
        if self._client is None:
            import redis

            self._client = redis.Redis.from_url(self._url, socket_timeout=2.0, socket_connect_timeout=2.0)
            logger.info("Redis publisher connected: %s -> %s", self._url, self._stream)
        return self._client

    def publish(self, sample: Sample) -> None:
        message = json.dumps(sample.to_dict())
        self._get_client().xadd(
            self._stream,
            {"data": message},
            maxlen=self._maxlen,
            approximate=True,
        )
        logger.debug("Published to %s: %s", self._stream, message)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
