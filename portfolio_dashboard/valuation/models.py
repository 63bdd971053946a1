"""Value objects flowing through the valuation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class PriceQuote:
    asset_id: str
    unit_price_usd: float
    change_24h_percent: float = 0.0
    market_cap_usd: Optional[float] = None
    volume_usd: Optional[float] = None
    sparkline_7d: Tuple[float, ...] = ()
    symbol: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class ValuedAsset:
    asset_id: str
    symbol: str
    display_name: str
    unit_price_usd: float
    change_24h_percent: float
    quantity: float
    value_usd: float
    allocation_percent: float
    sparkline_7d: Tuple[float, ...] = ()


@dataclass(frozen=True)
class PortfolioSnapshot:
    total_value_usd: float
    aggregate_change_usd: float
    aggregate_change_percent: float
    assets: Tuple[ValuedAsset, ...]
    as_of: datetime
    market_overview: Tuple[PriceQuote, ...] = field(default=())

    def asset(self, asset_id: str) -> Optional[ValuedAsset]:
        for valued in self.assets:
            if valued.asset_id == asset_id:
                return valued
        return None


__all__ = ['PortfolioSnapshot', 'PriceQuote', 'ValuedAsset']
