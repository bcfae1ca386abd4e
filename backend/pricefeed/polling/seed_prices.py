"""Starting points for the simulated quote source."""

from typing import NamedTuple


class SymbolProfile(NamedTuple):
    price: float  # opening price of the walk
    sigma: float  # annualized volatility
    mu: float  # annualized drift


PROFILES: dict[str, SymbolProfile] = {
    "AAPL": SymbolProfile(price=190.0, sigma=0.22, mu=0.05),
    "MSFT": SymbolProfile(price=420.0, sigma=0.20, mu=0.05),
    "GOOGL": SymbolProfile(price=175.0, sigma=0.25, mu=0.05),
    "NVDA": SymbolProfile(price=800.0, sigma=0.40, mu=0.08),
    "TSLA": SymbolProfile(price=250.0, sigma=0.50, mu=0.03),
}

# Symbols without a profile open at a random price in this range
FALLBACK_PRICE_RANGE: tuple[float, float] = (50.0, 300.0)
FALLBACK_SIGMA = 0.25
FALLBACK_MU = 0.05


def profile_for(symbol: str, rng) -> SymbolProfile:
    """Known profile for symbol, or a fallback with a price drawn from rng."""
    profile = PROFILES.get(symbol)
    if profile is not None:
        return profile
    low, high = FALLBACK_PRICE_RANGE
    return SymbolProfile(price=float(rng.uniform(low, high)), sigma=FALLBACK_SIGMA, mu=FALLBACK_MU)
