"""HTTP routes for reading and updating the polling config."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from .errors import ConfigNotFound, InvalidConfig, StoreError
from .service import ConfigService

logger = logging.getLogger(__name__)


class ConfigUpdateRequest(BaseModel):
    """Body of POST /api/fetch-config. Types are checked by ConfigService."""

    symbol: Any = None
    interval: Any = None


def create_config_router(service: ConfigService) -> APIRouter:
    """Create the config API router bound to a ConfigService.

    This factory pattern lets us inject the service without globals.
    """
    router = APIRouter(prefix="/api", tags=["config"])

    @router.get("/fetch-config")
    async def get_fetch_config() -> dict:
        """Return the current config from the store."""
        try:
            config = await service.read()
        except ConfigNotFound:
            raise HTTPException(status_code=404, detail="No config found") from None
        except StoreError as e:
            logger.error("[GET /api/fetch-config] Error: %s", e)
            raise HTTPException(status_code=500, detail="Internal Server Error") from e
        return config.to_dict()

    @router.post("/fetch-config")
    async def update_fetch_config(body: ConfigUpdateRequest) -> dict:
        """Persist a new {symbol, interval} and reschedule the fetch job.

        Body: {"symbol": "MSFT", "interval": 15}
        """
        try:
            config = await service.update(body.symbol, body.interval)
        except InvalidConfig as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except StoreError as e:
            logger.error("[POST /api/fetch-config] Error: %s", e)
            raise HTTPException(status_code=500, detail="Internal Server Error") from e
        return {
            "symbol": config.symbol,
            "interval": config.interval_seconds,
            "message": "Config updated",
        }

    @router.get("/scheduler/status")
    async def get_scheduler_status() -> dict:
        """Scheduler state, current epoch and tick counters."""
        return service.scheduler.metrics()

    @router.get("/samples")
    async def get_samples(limit: int = Query(default=20, ge=1, le=500)) -> list[dict]:
        """Most recent stored samples for the tracked symbol, newest first."""
        try:
            samples = await service.recent_samples(limit)
        except ConfigNotFound:
            return []
        except StoreError as e:
            logger.error("[GET /api/samples] Error: %s", e)
            raise HTTPException(status_code=500, detail="Internal Server Error") from e
        return [s.to_dict() for s in samples]

    return router
