"""Configuration utilities for the dashboard."""

from .config import Settings, load_settings
from .feed_config import FeedConfig
from .holdings import (
    COINGECKO_IDS,
    DEFAULT_HOLDINGS,
    MARKET_OVERVIEW_SYMBOLS,
    Holding,
    HoldingConfig,
    load_holdings,
    resolve_asset_ids,
)

__all__ = [
    'COINGECKO_IDS',
    'DEFAULT_HOLDINGS',
    'FeedConfig',
    'Holding',
    'HoldingConfig',
    'MARKET_OVERVIEW_SYMBOLS',
    'Settings',
    'load_holdings',
    'load_settings',
    'resolve_asset_ids',
]
