"""Static holdings configuration and the ticker -> feed id vocabulary."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Ticker symbol -> CoinGecko id. Symbols missing here cannot be priced.
COINGECKO_IDS: Mapping[str, str] = {
    'BTC': 'bitcoin',
    'ETH': 'ethereum',
    'ADA': 'cardano',
    'SOL': 'solana',
    'XRP': 'ripple',
    'DOT': 'polkadot',
}

MARKET_OVERVIEW_SYMBOLS: Tuple[str, ...] = (
    'BTC', 'ETH', 'ADA', 'SOL', 'XRP', 'DOT', 'DOGE', 'SHIB', 'LUNA', 'AVAX',
)


@dataclass(frozen=True)
class Holding:
    asset_id: str
    symbol: str
    display_name: str
    quantity: float

    def __post_init__(self) -> None:
        if not self.asset_id:
            raise ValueError(f'Holding {self.symbol!r} has no feed id')
        if self.quantity < 0:
            raise ValueError(f'Holding {self.symbol!r} has a negative quantity')


HoldingConfig = Tuple[Holding, ...]

DEFAULT_HOLDINGS: HoldingConfig = (
    Holding('bitcoin', 'BTC', 'Bitcoin', 0.5),
    Holding('ethereum', 'ETH', 'Ethereum', 5.0),
    Holding('cardano', 'ADA', 'Cardano', 1000.0),
)


def resolve_asset_id(identifier: str) -> Optional[str]:
    """Map a ticker symbol or a feed id onto a known feed id."""
    if not identifier:
        return None
    by_symbol = COINGECKO_IDS.get(identifier.upper())
    if by_symbol is not None:
        return by_symbol
    lowered = identifier.lower()
    if lowered in COINGECKO_IDS.values():
        return lowered
    return None


def resolve_asset_ids(identifiers: Iterable[str], known_ids: Iterable[str] = ()) -> List[str]:
    """Resolve identifiers in order, dropping duplicates and unknown entries.

    Entries of `known_ids` (feed ids named explicitly by the holdings) are
    accepted as they are.
    """
    extra = set(known_ids)
    resolved: List[str] = []
    for identifier in identifiers:
        asset_id = identifier if identifier in extra else resolve_asset_id(identifier)
        if asset_id is None:
            logger.debug('Skipping %r: not in the feed vocabulary', identifier)
            continue
        if asset_id not in resolved:
            resolved.append(asset_id)
    return resolved


def build_holdings(entries: Sequence[Mapping[str, object]]) -> HoldingConfig:
    holdings: List[Holding] = []
    for entry in entries:
        symbol = str(entry['symbol']).upper()
        asset_id = entry.get('asset_id') or resolve_asset_id(symbol)
        if asset_id is None:
            raise ValueError(f'Unknown asset symbol {symbol!r}; provide an explicit asset_id')
        holdings.append(
            Holding(
                asset_id=str(asset_id),
                symbol=symbol,
                display_name=str(entry.get('display_name') or symbol),
                quantity=float(entry['quantity']),
            )
        )
    return tuple(holdings)


def load_holdings(path: Optional[str | Path] = None) -> HoldingConfig:
    """Load holdings from a JSON list, or return the built-in defaults."""
    if path is None:
        return DEFAULT_HOLDINGS
    with open(path, 'r', encoding='utf-8') as handle:
        entries = json.load(handle)
    if not isinstance(entries, list) or not entries:
        raise ValueError(f'{path} must contain a non-empty JSON list of holdings')
    return build_holdings(entries)


__all__ = [
    'COINGECKO_IDS',
    'DEFAULT_HOLDINGS',
    'Holding',
    'HoldingConfig',
    'MARKET_OVERVIEW_SYMBOLS',
    'build_holdings',
    'load_holdings',
    'resolve_asset_id',
    'resolve_asset_ids',
]
