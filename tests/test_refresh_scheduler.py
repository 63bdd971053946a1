"""Integration-style tests for :mod:`portfolio_dashboard.scheduler.refresh_scheduler`."""

from __future__ import annotations

import asyncio
from typing import List, Optional

import pytest

from portfolio_dashboard.config import Settings
from portfolio_dashboard.config.holdings import build_holdings
from portfolio_dashboard.errors import FeedUnavailable
from portfolio_dashboard.monitoring import NoticeBoard, NoticeLevel
from portfolio_dashboard.scheduler import RefreshScheduler, RefreshState
from portfolio_dashboard.scheduler.refresh_scheduler import (
    REFRESH_FAILURE_MESSAGE,
    REFRESH_SUCCESS_MESSAGE,
    STARTUP_FAILURE_MESSAGE,
)
from portfolio_dashboard.valuation import PriceQuote, get_fallback_snapshot


class StubFeed:
    def __init__(self, quotes: Optional[dict] = None, error: Optional[Exception] = None) -> None:
        self.quotes = quotes or {}
        self.error = error
        self.gate: Optional[asyncio.Event] = None
        self.requests: List[List[str]] = []
        self.known_ids: List[List[str]] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def fetch_quotes(self, asset_ids, known_ids=()) -> dict:
        self.requests.append(list(asset_ids))
        self.known_ids.append(list(known_ids))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return dict(self.quotes)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _scheduler(feed: StubFeed, holdings, **kwargs) -> RefreshScheduler:
    settings = kwargs.pop('settings', Settings(refresh_interval=60))
    return RefreshScheduler(settings, feed, holdings, **kwargs)


def test_successful_refresh_publishes_ready_snapshot(holdings, quotes) -> None:
    feed = StubFeed(quotes)
    scheduler = _scheduler(feed, holdings)
    assert scheduler.state is RefreshState.IDLE
    assert scheduler.current_view() is None

    snapshot = asyncio.run(scheduler.refresh())

    assert scheduler.state is RefreshState.READY
    assert scheduler.current_snapshot() is snapshot
    assert snapshot.asset('bitcoin').value_usd == 22615.25
    view = scheduler.current_view()
    assert view.state == 'ready'
    assert view.notices == ()
    assert len(view.performance_chart.data) == 1
    # Holdings and market overview ids go out in one request.
    assert feed.calls == 1
    assert feed.requests[0][:3] == ['bitcoin', 'ethereum', 'cardano']
    assert 'solana' in feed.requests[0]


def test_feed_failure_degrades_to_sample_data_with_notice(holdings) -> None:
    feed = StubFeed(error=FeedUnavailable('Feed request failed', status=500))
    scheduler = _scheduler(feed, holdings)

    snapshot = asyncio.run(scheduler.refresh())

    assert scheduler.state is RefreshState.DEGRADED
    assert snapshot is get_fallback_snapshot()
    view = scheduler.current_view()
    assert view.state == 'degraded'
    assert [notice.message for notice in view.notices] == [STARTUP_FAILURE_MESSAGE]
    assert len(view.holdings) == 4
    assert len(view.performance_chart.data) == 7


def test_unexpected_error_also_degrades(holdings) -> None:
    scheduler = _scheduler(StubFeed(error=KeyError('usd')), holdings)

    asyncio.run(scheduler.refresh())

    assert scheduler.state is RefreshState.DEGRADED


def test_manual_refresh_notices(holdings, quotes) -> None:
    feed = StubFeed(quotes)
    scheduler = _scheduler(feed, holdings)

    asyncio.run(scheduler.refresh(manual=True))
    assert [notice.message for notice in scheduler.notices.active()] == [REFRESH_SUCCESS_MESSAGE]

    feed.error = FeedUnavailable('down')
    asyncio.run(scheduler.refresh(manual=True))
    active = scheduler.notices.active()
    assert active[-1].message == REFRESH_FAILURE_MESSAGE
    assert active[-1].level is NoticeLevel.WARNING


def test_failure_notice_expires(holdings) -> None:
    clock = FakeClock()
    notices = NoticeBoard(duration=5.0, clock=clock)
    scheduler = _scheduler(StubFeed(error=FeedUnavailable('down')), holdings, notices=notices)

    asyncio.run(scheduler.refresh())
    assert len(scheduler.current_view().notices) == 1

    clock.now = 5.0
    assert scheduler.current_view().notices == ()
    # The dashboard stays populated after the banner clears.
    assert len(scheduler.current_view().holdings) == 4


def test_refresh_while_loading_joins_in_flight_cycle(holdings, quotes) -> None:
    async def scenario() -> None:
        feed = StubFeed(quotes)
        feed.gate = asyncio.Event()
        scheduler = _scheduler(feed, holdings)

        first = asyncio.create_task(scheduler.refresh())
        for _ in range(3):
            await asyncio.sleep(0)
        assert scheduler.state is RefreshState.LOADING

        second = asyncio.create_task(scheduler.refresh(manual=True))
        for _ in range(3):
            await asyncio.sleep(0)
        feed.gate.set()
        results = await asyncio.gather(first, second)

        assert feed.calls == 1
        assert results[0] is results[1]
        assert scheduler.state is RefreshState.READY

    asyncio.run(scenario())


def test_timer_refreshes_periodically_and_stops(holdings, quotes) -> None:
    async def scenario() -> int:
        feed = StubFeed(quotes)
        scheduler = _scheduler(feed, holdings, settings=Settings(refresh_interval=0.01))
        scheduler.start()
        with pytest.raises(RuntimeError):
            scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()
        calls = feed.calls
        await asyncio.sleep(0.05)
        assert feed.calls == calls
        return calls

    assert asyncio.run(scenario()) >= 2


def test_listeners_receive_published_view(holdings, quotes) -> None:
    received = []

    async def listener(view) -> None:
        received.append(view)

    async def broken(view) -> None:
        raise RuntimeError('renderer crashed')

    scheduler = _scheduler(StubFeed(quotes), holdings)
    scheduler.subscribe(broken)
    scheduler.subscribe(listener)

    asyncio.run(scheduler.refresh())

    assert len(received) == 1
    assert received[0].holdings[0].symbol == 'BTC'


def test_request_refresh_from_another_thread(holdings, quotes) -> None:
    async def scenario() -> None:
        feed = StubFeed(quotes)
        scheduler = _scheduler(feed, holdings)
        scheduler.start()
        await asyncio.sleep(0.01)
        snapshot = await asyncio.to_thread(lambda: scheduler.request_refresh().result(timeout=2))
        await scheduler.stop()
        assert snapshot.total_value_usd > 0
        assert REFRESH_SUCCESS_MESSAGE in [notice.message for notice in scheduler.notices.active()]

    asyncio.run(scenario())


def test_request_refresh_requires_running_scheduler(holdings) -> None:
    scheduler = _scheduler(StubFeed(), holdings)

    with pytest.raises(RuntimeError):
        scheduler.request_refresh()


def test_empty_holdings_are_rejected() -> None:
    with pytest.raises(ValueError):
        RefreshScheduler(Settings(), StubFeed(), ())


def test_holding_with_explicit_feed_id_is_requested_and_valued() -> None:
    holdings = build_holdings([
        {'symbol': 'BTC', 'quantity': 1},
        {'symbol': 'LUNA', 'asset_id': 'terra-luna-2', 'quantity': 3},
    ])
    feed = StubFeed({
        'bitcoin': PriceQuote('bitcoin', 100.0, 1.0),
        'terra-luna-2': PriceQuote('terra-luna-2', 0.5, -2.0),
    })
    scheduler = _scheduler(feed, holdings)

    snapshot = asyncio.run(scheduler.refresh())

    assert 'terra-luna-2' in feed.requests[0]
    assert feed.known_ids[0] == ['bitcoin', 'terra-luna-2']
    assert snapshot.asset('terra-luna-2').value_usd == 0.5 * 3


def test_view_keeps_published_state_while_next_cycle_loads(holdings, quotes) -> None:
    async def scenario() -> None:
        feed = StubFeed(quotes)
        scheduler = _scheduler(feed, holdings)
        await scheduler.refresh()

        feed.gate = asyncio.Event()
        pending = asyncio.create_task(scheduler.refresh())
        for _ in range(3):
            await asyncio.sleep(0)
        assert scheduler.state is RefreshState.LOADING
        view = scheduler.current_view()
        assert view.state == 'ready'
        assert len(view.performance_chart.data) == 1

        feed.gate.set()
        await pending

    asyncio.run(scenario())


def test_listener_may_trigger_another_refresh(holdings, quotes) -> None:
    async def scenario() -> int:
        feed = StubFeed(quotes)
        scheduler = _scheduler(feed, holdings)
        seen = []

        async def refreshing_listener(view) -> None:
            seen.append(view)
            if len(seen) == 1:
                await scheduler.refresh()

        scheduler.subscribe(refreshing_listener)
        await asyncio.wait_for(scheduler.refresh(), timeout=2)
        return feed.calls

    assert asyncio.run(scenario()) == 2
