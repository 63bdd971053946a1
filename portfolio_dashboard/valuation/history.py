"""Daily portfolio value series backing the performance chart."""

from __future__ import annotations

import threading
from collections import OrderedDict
from datetime import date
from typing import Iterable, List, Tuple

from .models import PortfolioSnapshot

HistoryPoint = Tuple[date, float]


class PortfolioHistory:
    """Keeps one closing value per calendar day for the last `max_days` days."""

    def __init__(self, seed: Iterable[HistoryPoint] = (), max_days: int = 7) -> None:
        if max_days <= 0:
            raise ValueError('max_days must be positive')
        self._max_days = max_days
        self._points: 'OrderedDict[date, float]' = OrderedDict()
        self._lock = threading.Lock()
        for day, value in seed:
            self._store(day, value)

    def record(self, snapshot: PortfolioSnapshot) -> None:
        self._store(snapshot.as_of.date(), snapshot.total_value_usd)

    def points(self) -> List[HistoryPoint]:
        with self._lock:
            return list(self._points.items())

    def _store(self, day: date, value: float) -> None:
        with self._lock:
            points = OrderedDict(self._points)
            points[day] = value
            points = OrderedDict(sorted(points.items()))
            while len(points) > self._max_days:
                points.popitem(last=False)
            self._points = points

    def __len__(self) -> int:
        with self._lock:
            return len(self._points)


__all__ = ['HistoryPoint', 'PortfolioHistory']
