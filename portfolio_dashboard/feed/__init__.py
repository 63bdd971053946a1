"""Market data feed layer."""

from .price_feed import PriceFeedClient, parse_markets, parse_simple_prices
from .proxy import create_proxy_app, serve_proxy

__all__ = [
    'PriceFeedClient',
    'create_proxy_app',
    'parse_markets',
    'parse_simple_prices',
    'serve_proxy',
]
