"""Dashboard view model consumed by the rendering layer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, Optional, Tuple

from ..monitoring.notices import Notice
from ..valuation.models import PortfolioSnapshot, PriceQuote, ValuedAsset
from .formatting import (
    Point,
    change_class,
    format_billions,
    format_currency,
    format_percent,
    format_quantity,
    sparkline_points,
)

ALLOCATION_COLORS: Tuple[str, ...] = (
    '#0ea5e9',
    '#8b5cf6',
    '#ec4899',
    '#f59e0b',
    '#10b981',
    '#ef4444',
)

SparklineBox = Tuple[float, float]
DEFAULT_SPARKLINE_BOX: SparklineBox = (100.0, 30.0)


@dataclass(frozen=True)
class HoldingRow:
    icon: str
    name: str
    symbol: str
    price: str
    change: str
    change_class: str
    quantity: str
    value: str
    allocation: str
    sparkline: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class MarketCard:
    symbol: str
    name: str
    price: str
    change: str
    change_class: str
    market_cap: str
    volume: str
    price_plain: str
    sparkline: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class ChartSeries:
    labels: Tuple[str, ...]
    data: Tuple[float, ...]
    colors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class NoticeView:
    notice_id: int
    message: str
    level: str


@dataclass(frozen=True)
class DashboardViewModel:
    total_balance: str
    portfolio_value: str
    change_24h_usd: str
    change_24h_percent: str
    change_24h_class: str
    holdings: Tuple[HoldingRow, ...]
    market: Tuple[MarketCard, ...]
    allocation_chart: ChartSeries
    performance_chart: ChartSeries
    as_of: str
    state: str = 'ready'
    notices: Tuple[NoticeView, ...] = field(default=())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _holding_row(asset: ValuedAsset, box: SparklineBox) -> HoldingRow:
    return HoldingRow(
        icon=asset.symbol[:1],
        name=asset.display_name,
        symbol=asset.symbol,
        price=format_currency(asset.unit_price_usd),
        change=format_percent(asset.change_24h_percent),
        change_class=change_class(asset.change_24h_percent),
        quantity=format_quantity(asset.quantity),
        value=format_currency(asset.value_usd),
        allocation=f'{asset.allocation_percent:.1f}%',
        sparkline=tuple(sparkline_points(asset.sparkline_7d, *box)),
    )


def _market_card(quote: PriceQuote, box: SparklineBox) -> MarketCard:
    return MarketCard(
        symbol=quote.symbol or quote.asset_id.upper(),
        name=quote.name or quote.asset_id.title(),
        price=format_currency(quote.unit_price_usd),
        change=format_percent(quote.change_24h_percent),
        change_class=change_class(quote.change_24h_percent),
        market_cap=format_billions(quote.market_cap_usd),
        volume=format_billions(quote.volume_usd),
        price_plain=f'${quote.unit_price_usd:.2f}',
        sparkline=tuple(sparkline_points(quote.sparkline_7d, *box)),
    )


def to_view_model(
    snapshot: PortfolioSnapshot,
    *,
    history: Iterable[Tuple[date, float]] = (),
    sparkline_box: SparklineBox = DEFAULT_SPARKLINE_BOX,
    state: str = 'ready',
    notices: Iterable[Notice] = (),
) -> DashboardViewModel:
    """Format a snapshot into the strings and series the dashboard renders."""
    total = format_currency(snapshot.total_value_usd)
    labels = tuple(asset.symbol for asset in snapshot.assets)
    colors = tuple(ALLOCATION_COLORS[index % len(ALLOCATION_COLORS)] for index in range(len(labels)))
    points = list(history)
    return DashboardViewModel(
        total_balance=total,
        portfolio_value=total,
        change_24h_usd=format_currency(abs(snapshot.aggregate_change_usd)),
        change_24h_percent=format_percent(snapshot.aggregate_change_percent),
        change_24h_class=change_class(snapshot.aggregate_change_percent),
        holdings=tuple(_holding_row(asset, sparkline_box) for asset in snapshot.assets),
        market=tuple(_market_card(quote, sparkline_box) for quote in snapshot.market_overview),
        allocation_chart=ChartSeries(
            labels=labels,
            data=tuple(asset.allocation_percent for asset in snapshot.assets),
            colors=colors,
        ),
        performance_chart=ChartSeries(
            labels=tuple(day.isoformat() for day, _ in points),
            data=tuple(value for _, value in points),
        ),
        as_of=snapshot.as_of.isoformat(),
        state=state,
        notices=tuple(
            NoticeView(notice_id=notice.notice_id, message=notice.message, level=notice.level.value)
            for notice in notices
        ),
    )


def filter_market(cards: Iterable[MarketCard], term: Optional[str]) -> Tuple[MarketCard, ...]:
    """Keep cards whose symbol or name contains `term`, case-insensitively."""
    needle = (term or '').strip().lower()
    if not needle:
        return tuple(cards)
    return tuple(card for card in cards if needle in card.symbol.lower() or needle in card.name.lower())


__all__ = [
    'ALLOCATION_COLORS',
    'ChartSeries',
    'DashboardViewModel',
    'HoldingRow',
    'MarketCard',
    'NoticeView',
    'filter_market',
    'to_view_model',
]
