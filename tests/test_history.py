"""Tests for :mod:`portfolio_dashboard.valuation.history`."""

from __future__ import annotations

import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from portfolio_dashboard.valuation import PortfolioHistory, PortfolioSnapshot


def _snapshot(day: datetime, total: float) -> PortfolioSnapshot:
    return PortfolioSnapshot(
        total_value_usd=total,
        aggregate_change_usd=0.0,
        aggregate_change_percent=0.0,
        assets=(),
        as_of=day,
    )


def test_one_point_per_day_latest_value_wins() -> None:
    history = PortfolioHistory()
    morning = datetime(2025, 7, 24, 9, tzinfo=timezone.utc)

    history.record(_snapshot(morning, 100.0))
    history.record(_snapshot(morning + timedelta(hours=8), 120.0))

    assert history.points() == [(date(2025, 7, 24), 120.0)]


def test_only_the_most_recent_days_are_kept() -> None:
    seed = [(date(2025, 7, day), float(day)) for day in range(1, 8)]
    history = PortfolioHistory(seed, max_days=7)

    history.record(_snapshot(datetime(2025, 7, 8, tzinfo=timezone.utc), 8.0))

    assert len(history) == 7
    assert history.points()[0] == (date(2025, 7, 2), 2.0)
    assert history.points()[-1] == (date(2025, 7, 8), 8.0)


def test_max_days_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PortfolioHistory(max_days=0)


def test_points_can_be_read_while_recording_from_another_thread() -> None:
    history = PortfolioHistory(max_days=7)
    errors = []
    start = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def writer() -> None:
        for offset in range(2_000):
            history.record(_snapshot(start + timedelta(days=offset), float(offset)))

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        while thread.is_alive():
            points = history.points()
            assert len(points) <= 7
    except Exception as error:
        errors.append(error)
    thread.join(timeout=10)

    assert errors == []
    assert history.points()[-1][1] == 1999.0
