"""Shared pytest fixtures for the dashboard test-suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from portfolio_dashboard.config import Holding  # noqa: E402
from portfolio_dashboard.valuation import PriceQuote  # noqa: E402


@pytest.fixture
def holdings() -> tuple:
    return (
        Holding('bitcoin', 'BTC', 'Bitcoin', 0.5),
        Holding('ethereum', 'ETH', 'Ethereum', 5.0),
        Holding('cardano', 'ADA', 'Cardano', 1000.0),
    )


@pytest.fixture
def quotes() -> dict:
    return {
        'bitcoin': PriceQuote('bitcoin', 45230.50, -2.5, sparkline_7d=(44000.0, 45000.0, 45230.5)),
        'ethereum': PriceQuote('ethereum', 2310.75, 5.2),
        'cardano': PriceQuote('cardano', 0.52, -1.3),
    }


def _markets_payload(*coins: dict) -> list:
    return [
        {
            'id': coin['id'],
            'symbol': coin.get('symbol', coin['id'][:3]),
            'name': coin.get('name', coin['id'].title()),
            'current_price': coin['price'],
            'price_change_percentage_24h': coin.get('change', 0.0),
            'market_cap': coin.get('market_cap', 1_000_000_000),
            'total_volume': coin.get('volume', 500_000_000),
            'sparkline_in_7d': {'price': coin.get('sparkline', [])},
        }
        for coin in coins
    ]


@pytest.fixture
def markets_payload():
    """Builder for `/coins/markets` style response bodies."""
    return _markets_payload
