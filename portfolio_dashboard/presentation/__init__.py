"""Presentation adapter: snapshots in, renderable strings and series out."""

from .formatting import (
    change_class,
    format_billions,
    format_currency,
    format_percent,
    format_quantity,
    sparkline_points,
)
from .view_model import (
    ChartSeries,
    DashboardViewModel,
    HoldingRow,
    MarketCard,
    filter_market,
    to_view_model,
)

__all__ = [
    'ChartSeries',
    'DashboardViewModel',
    'HoldingRow',
    'MarketCard',
    'change_class',
    'filter_market',
    'format_billions',
    'format_currency',
    'format_percent',
    'format_quantity',
    'sparkline_points',
    'to_view_model',
]
