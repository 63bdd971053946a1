"""String formatting shared by the dashboard widgets."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

Point = Tuple[float, float]


def format_currency(value: float) -> str:
    """`$1,234.50` with grouping and two decimals; `-$1.00` for losses."""
    digits = f'{abs(value):,.2f}'
    sign = '-' if value < 0 and digits.strip('0.,') else ''
    return f'{sign}${digits}'


def format_percent(value: float, decimals: int = 2) -> str:
    prefix = '+' if value >= 0 else ''
    return f'{prefix}{value:.{decimals}f}%'


def change_class(value: float) -> str:
    return 'positive' if value >= 0 else 'negative'


def format_billions(value: Optional[float]) -> str:
    if value is None:
        return 'N/A'
    return f'${value / 1_000_000_000:.2f}B'


def format_quantity(value: float) -> str:
    text = f'{value:.8f}'.rstrip('0').rstrip('.')
    return text or '0'


def sparkline_points(series: Sequence[float], width: float, height: float) -> List[Point]:
    """Min-max scale a price series into a `width` x `height` pixel box.

    Points are spread evenly along x; y grows downwards as in SVG, so the
    highest price sits at y=0. A flat series (or a single point) is drawn
    along the vertical centre.
    """
    count = len(series)
    if count == 0:
        return []
    low, high = min(series), max(series)
    span = high - low
    step = width / (count - 1) if count > 1 else 0.0
    points: List[Point] = []
    for index, price in enumerate(series):
        x = index * step if count > 1 else width / 2
        y = height / 2 if span == 0 else height - (price - low) / span * height
        points.append((round(x, 2), round(y, 2)))
    return points


__all__ = [
    'Point',
    'change_class',
    'format_billions',
    'format_currency',
    'format_percent',
    'format_quantity',
    'sparkline_points',
]
