"""Sample portfolio shown whenever live data cannot be produced."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Tuple

from ..config.holdings import Holding, HoldingConfig
from .engine import value_holdings
from .models import PortfolioSnapshot, PriceQuote

SAMPLE_AS_OF = datetime(2025, 7, 24, tzinfo=timezone.utc)

SAMPLE_HOLDINGS: HoldingConfig = (
    Holding('bitcoin', 'BTC', 'Bitcoin', 0.25),
    Holding('ethereum', 'ETH', 'Ethereum', 5.8),
    Holding('cardano', 'ADA', 'Cardano', 1000.0),
    Holding('solana', 'SOL', 'Solana', 12.0),
)

SAMPLE_MARKET: Tuple[PriceQuote, ...] = (
    PriceQuote('bitcoin', 45230.50, 2.5, 880_000_000_000, 25_000_000_000, symbol='BTC', name='Bitcoin'),
    PriceQuote('ethereum', 2310.75, 5.2, 280_000_000_000, 15_000_000_000, symbol='ETH', name='Ethereum'),
    PriceQuote('cardano', 0.52, -1.3, 18_000_000_000, 800_000_000, symbol='ADA', name='Cardano'),
    PriceQuote('solana', 102.40, 3.8, 42_000_000_000, 2_200_000_000, symbol='SOL', name='Solana'),
    PriceQuote('ripple', 0.58, 1.2, 31_000_000_000, 1_800_000_000, symbol='XRP', name='XRP'),
    PriceQuote('polkadot', 7.25, -0.8, 9_000_000_000, 400_000_000, symbol='DOT', name='Polkadot'),
)

SAMPLE_HISTORY: Tuple[Tuple[date, float], ...] = (
    (date(2025, 7, 18), 24850.20),
    (date(2025, 7, 19), 25100.75),
    (date(2025, 7, 20), 24950.30),
    (date(2025, 7, 21), 25200.80),
    (date(2025, 7, 22), 25350.45),
    (date(2025, 7, 23), 25120.60),
    (date(2025, 7, 24), 25430.75),
)

_FALLBACK_SNAPSHOT = value_holdings(
    SAMPLE_HOLDINGS,
    {quote.asset_id: quote for quote in SAMPLE_MARKET},
    market_ids=[quote.asset_id for quote in SAMPLE_MARKET],
    as_of=SAMPLE_AS_OF,
)


def get_fallback_snapshot() -> PortfolioSnapshot:
    """Return the frozen sample snapshot; the same object on every call."""
    return _FALLBACK_SNAPSHOT


def get_fallback_history() -> Tuple[Tuple[date, float], ...]:
    return SAMPLE_HISTORY


__all__ = [
    'SAMPLE_HISTORY',
    'SAMPLE_HOLDINGS',
    'SAMPLE_MARKET',
    'get_fallback_history',
    'get_fallback_snapshot',
]
