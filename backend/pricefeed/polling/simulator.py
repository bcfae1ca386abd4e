"""GBM-based simulated quote source."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from decimal import Decimal
from threading import Lock

import numpy as np

from .interface import QuoteSource
from .models import Quote
from .seed_prices import profile_for

logger = logging.getLogger(__name__)


class GBMWalk:
    """Geometric Brownian Motion price path for one ticker.

    Math:
        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    Where:
        S(t)   = current price
        mu     = annualized drift (expected return)
        sigma  = annualized volatility
        dt     = elapsed time as fraction of a trading year
        Z      = standard normal random variable
    """

    # 252 trading days * 6.5 hours/day * 3600 seconds/hour = 5,896,800 seconds
    TRADING_SECONDS_PER_YEAR = 252 * 6.5 * 3600

    def __init__(self, price: float, mu: float, sigma: float, rng: np.random.Generator) -> None:
        self.price = price
        self.mu = mu
        self.sigma = sigma
        self._rng = rng

    def step(self, elapsed_seconds: float) -> float:
        """Advance the path by elapsed_seconds of trading time. Returns the new price."""
        if elapsed_seconds <= 0:
            return self.price
        dt = elapsed_seconds / self.TRADING_SECONDS_PER_YEAR
        drift = (self.mu - 0.5 * self.sigma**2) * dt
        diffusion = self.sigma * math.sqrt(dt) * self._rng.standard_normal()
        self.price *= math.exp(drift + diffusion)
        return self.price


class SimulatedQuoteSource(QuoteSource):
    """QuoteSource that never touches the network.

    Each symbol gets its own GBM walk, opened from its SymbolProfile (or a
    random price for unknown tickers) and advanced by the wall time elapsed
    since the previous fetch of that symbol.
    """

    def __init__(self, seed: int | None = None, clock: Callable[[], float] = time.time) -> None:
        self._rng = np.random.default_rng(seed)
        self._clock = clock
        self._walks: dict[str, GBMWalk] = {}
        self._last_fetch: dict[str, float] = {}
        self._lock = Lock()

    def fetch_latest(self, symbol: str) -> Quote:
        now = self._clock()
        with self._lock:
            walk = self._walks.get(symbol)
            if walk is None:
                walk = self._new_walk(symbol)
                self._walks[symbol] = walk
                price = walk.price
            else:
                price = walk.step(now - self._last_fetch[symbol])
            self._last_fetch[symbol] = now
        return Quote(price=Decimal(f"{price:.2f}"), observed_at=now)

    def _new_walk(self, symbol: str) -> GBMWalk:
        profile = profile_for(symbol, self._rng)
        logger.debug("Simulator: new walk for %s starting at %.2f", symbol, profile.price)
        return GBMWalk(price=profile.price, mu=profile.mu, sigma=profile.sigma, rng=self._rng)
