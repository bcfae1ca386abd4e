"""Tests for the GBM walk and SimulatedQuoteSource."""

from decimal import Decimal

import numpy as np

from pricefeed.polling.seed_prices import FALLBACK_PRICE_RANGE, PROFILES, profile_for
from pricefeed.polling.simulator import GBMWalk, SimulatedQuoteSource


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class TestGBMWalk:
    """Unit tests for the GBM price path."""

    def test_prices_are_positive(self):
        """GBM prices can never go negative (exp() is always positive)."""
        walk = GBMWalk(price=100.0, mu=0.05, sigma=0.5, rng=np.random.default_rng(1))
        for _ in range(10_000):
            assert walk.step(30.0) > 0

    def test_zero_elapsed_is_noop(self):
        walk = GBMWalk(price=100.0, mu=0.05, sigma=0.5, rng=np.random.default_rng(1))
        assert walk.step(0.0) == 100.0

    def test_small_step_moves_little(self):
        walk = GBMWalk(price=100.0, mu=0.05, sigma=0.22, rng=np.random.default_rng(7))
        assert abs(walk.step(30.0) - 100.0) < 5.0


class TestSimulatedQuoteSource:
    def test_first_quote_is_seed_price(self):
        clock = FakeClock()
        source = SimulatedQuoteSource(seed=0, clock=clock)

        quote = source.fetch_latest("AAPL")

        assert quote.price == Decimal(f"{PROFILES['AAPL'].price:.2f}")
        assert quote.observed_at == clock.now

    def test_unknown_ticker_gets_price_in_range(self):
        source = SimulatedQuoteSource(seed=0, clock=FakeClock())
        low, high = FALLBACK_PRICE_RANGE
        assert low <= float(source.fetch_latest("ZZZZ").price) <= high

    def test_price_evolves_with_time(self):
        clock = FakeClock()
        source = SimulatedQuoteSource(seed=3, clock=clock)
        prices = [source.fetch_latest("TSLA").price]
        for _ in range(20):
            clock.now += 30.0
            prices.append(source.fetch_latest("TSLA").price)

        assert len(set(prices)) > 1
        assert all(p > 0 for p in prices)

    def test_two_decimal_places(self):
        clock = FakeClock()
        source = SimulatedQuoteSource(seed=5, clock=clock)
        source.fetch_latest("MSFT")
        clock.now += 60.0
        assert source.fetch_latest("MSFT").price.as_tuple().exponent == -2

    def test_same_seed_is_deterministic(self):
        a_clock, b_clock = FakeClock(), FakeClock()
        a = SimulatedQuoteSource(seed=11, clock=a_clock)
        b = SimulatedQuoteSource(seed=11, clock=b_clock)
        for _ in range(5):
            a_clock.now += 10.0
            b_clock.now += 10.0
            assert a.fetch_latest("NVDA") == b.fetch_latest("NVDA")


class TestProfileFor:
    def test_known_symbol_uses_its_profile(self):
        assert profile_for("TSLA", np.random.default_rng(0)) is PROFILES["TSLA"]

    def test_unknown_symbol_gets_fallback_volatility(self):
        profile = profile_for("ZZZZ", np.random.default_rng(0))
        low, high = FALLBACK_PRICE_RANGE
        assert low <= profile.price <= high
        assert profile.sigma == 0.25
