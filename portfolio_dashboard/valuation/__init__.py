"""Portfolio valuation layer."""

from .engine import ValuationEngine, percent_of, value_holdings
from .fallback import get_fallback_history, get_fallback_snapshot
from .history import PortfolioHistory
from .models import PortfolioSnapshot, PriceQuote, ValuedAsset

__all__ = [
    'PortfolioHistory',
    'PortfolioSnapshot',
    'PriceQuote',
    'ValuationEngine',
    'ValuedAsset',
    'get_fallback_history',
    'get_fallback_snapshot',
    'percent_of',
    'value_holdings',
]
