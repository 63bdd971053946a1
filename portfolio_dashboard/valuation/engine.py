"""Turns holdings plus fetched quotes into a portfolio snapshot."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional

from ..config.holdings import Holding, HoldingConfig
from ..errors import ComputationDegenerate
from .models import PortfolioSnapshot, PriceQuote, ValuedAsset

logger = logging.getLogger(__name__)


def percent_of(part: float, whole: float) -> float:
    if whole == 0:
        raise ComputationDegenerate(f'Cannot express {part} as a share of zero')
    return 100.0 * part / whole


def _safe_percent(part: float, whole: float) -> float:
    try:
        return percent_of(part, whole)
    except ComputationDegenerate as error:
        logger.debug('Defaulting to 0%%: %s', error)
        return 0.0


def _value_holding(
    holding: Holding,
    quote: Optional[PriceQuote],
    previous: Optional[PortfolioSnapshot],
) -> ValuedAsset:
    if quote is not None:
        return ValuedAsset(
            asset_id=holding.asset_id,
            symbol=holding.symbol,
            display_name=holding.display_name,
            unit_price_usd=quote.unit_price_usd,
            change_24h_percent=quote.change_24h_percent,
            quantity=holding.quantity,
            value_usd=quote.unit_price_usd * holding.quantity,
            allocation_percent=0.0,
            sparkline_7d=quote.sparkline_7d,
        )

    prior = previous.asset(holding.asset_id) if previous is not None else None
    if prior is not None:
        logger.debug('No quote for %s; reusing the previous cycle', holding.symbol)
        return prior
    logger.debug('No quote for %s and no previous value; valuing at zero', holding.symbol)
    return ValuedAsset(
        asset_id=holding.asset_id,
        symbol=holding.symbol,
        display_name=holding.display_name,
        unit_price_usd=0.0,
        change_24h_percent=0.0,
        quantity=holding.quantity,
        value_usd=0.0,
        allocation_percent=0.0,
    )


def value_holdings(
    config: HoldingConfig,
    quotes: Mapping[str, PriceQuote],
    *,
    previous: Optional[PortfolioSnapshot] = None,
    market_ids: Iterable[str] = (),
    as_of: Optional[datetime] = None,
) -> PortfolioSnapshot:
    """Value every holding against `quotes` and derive the portfolio totals.

    Holdings without a quote keep their entry from `previous`, or are valued
    at zero when there is none. Totals and allocations are always recomputed
    from this cycle's values.
    """
    valued = [_value_holding(holding, quotes.get(holding.asset_id), previous) for holding in config]
    total = sum(asset.value_usd for asset in valued)

    assets: List[ValuedAsset] = []
    for asset in valued:
        allocation = _safe_percent(asset.value_usd, total)
        assets.append(
            ValuedAsset(
                asset_id=asset.asset_id,
                symbol=asset.symbol,
                display_name=asset.display_name,
                unit_price_usd=asset.unit_price_usd,
                change_24h_percent=asset.change_24h_percent,
                quantity=asset.quantity,
                value_usd=asset.value_usd,
                allocation_percent=allocation,
                sparkline_7d=asset.sparkline_7d,
            )
        )

    change_usd = sum(asset.value_usd * (asset.change_24h_percent / 100.0) for asset in assets)
    # Percent is measured against the implied value 24h ago.
    change_percent = _safe_percent(change_usd, total - change_usd)

    overview = tuple(quotes[asset_id] for asset_id in market_ids if asset_id in quotes)
    return PortfolioSnapshot(
        total_value_usd=total,
        aggregate_change_usd=change_usd,
        aggregate_change_percent=change_percent,
        assets=tuple(assets),
        as_of=as_of or datetime.now(tz=timezone.utc),
        market_overview=overview,
    )


class ValuationEngine:
    """Stateful wrapper remembering the last snapshot for missing quotes."""

    def __init__(self) -> None:
        self._previous: Optional[PortfolioSnapshot] = None

    @property
    def previous(self) -> Optional[PortfolioSnapshot]:
        return self._previous

    def compute_snapshot(
        self,
        config: HoldingConfig,
        quotes: Mapping[str, PriceQuote],
        market_ids: Iterable[str] = (),
        as_of: Optional[datetime] = None,
    ) -> PortfolioSnapshot:
        snapshot = value_holdings(
            config,
            quotes,
            previous=self._previous,
            market_ids=market_ids,
            as_of=as_of,
        )
        self._previous = snapshot
        return snapshot

    def reset(self) -> None:
        self._previous = None


__all__ = ['ValuationEngine', 'percent_of', 'value_holdings']
