"""Drives the fetch -> value -> present cycle on a timer and on demand."""

from __future__ import annotations

import asyncio
import concurrent.futures
import contextlib
import enum
import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple

from ..config import Settings
from ..config.holdings import DEFAULT_HOLDINGS, MARKET_OVERVIEW_SYMBOLS, HoldingConfig, resolve_asset_ids
from ..errors import DashboardError
from ..feed import PriceFeedClient
from ..monitoring import NoticeBoard, NoticeLevel
from ..presentation import DashboardViewModel, to_view_model
from ..valuation import (
    PortfolioHistory,
    PortfolioSnapshot,
    ValuationEngine,
    get_fallback_history,
    get_fallback_snapshot,
)

logger = logging.getLogger(__name__)

Listener = Callable[[DashboardViewModel], Awaitable[None]]

STARTUP_FAILURE_MESSAGE = 'Failed to load cryptocurrency data. Showing sample data instead.'
REFRESH_FAILURE_MESSAGE = 'Failed to refresh data. Please try again.'
REFRESH_SUCCESS_MESSAGE = 'Data refreshed successfully!'


class RefreshState(str, enum.Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    READY = 'ready'
    DEGRADED = 'degraded'


class RefreshScheduler:
    """Owns the current snapshot and the only code path that replaces it.

    At most one cycle runs at a time; refresh requests arriving while a
    cycle is loading wait for that cycle and share its result.
    """

    def __init__(
        self,
        settings: Settings,
        feed: PriceFeedClient,
        holdings: HoldingConfig = DEFAULT_HOLDINGS,
        *,
        market_symbols: Iterable[str] = MARKET_OVERVIEW_SYMBOLS,
        engine: Optional[ValuationEngine] = None,
        notices: Optional[NoticeBoard] = None,
        history: Optional[PortfolioHistory] = None,
    ) -> None:
        if not holdings:
            raise ValueError('At least one holding is required')
        self._settings = settings
        self._feed = feed
        self._holdings = holdings
        self._market_ids = resolve_asset_ids(market_symbols)
        self._holding_ids = [holding.asset_id for holding in holdings]
        self._request_ids = list(dict.fromkeys(self._holding_ids + self._market_ids))
        self._engine = engine or ValuationEngine()
        self._notices = notices or NoticeBoard(duration=settings.notice_duration)
        self._history = history or PortfolioHistory()
        self._state = RefreshState.IDLE
        self._published: Optional[Tuple[PortfolioSnapshot, RefreshState]] = None
        self._inflight: Optional[asyncio.Future[PortfolioSnapshot]] = None
        self._timer_task: Optional[asyncio.Task[None]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._listeners: List[Listener] = []

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def notices(self) -> NoticeBoard:
        return self._notices

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def current_snapshot(self) -> Optional[PortfolioSnapshot]:
        published = self._published
        return published[0] if published else None

    def current_view(self) -> Optional[DashboardViewModel]:
        published = self._published
        if published is None:
            return None
        snapshot, state = published
        history = self._history.points() if state is RefreshState.READY else get_fallback_history()
        return to_view_model(
            snapshot,
            history=history,
            sparkline_box=(self._settings.sparkline_width, self._settings.sparkline_height),
            state=state.value,
            notices=self._notices.active(),
        )

    async def refresh(self, *, manual: bool = False) -> PortfolioSnapshot:
        if self._inflight is not None and not self._inflight.done():
            logger.debug('Refresh requested while loading; joining the in-flight cycle')
            return await asyncio.shield(self._inflight)
        self._inflight = asyncio.ensure_future(self._run_cycle(manual))
        snapshot = await asyncio.shield(self._inflight)
        # Listeners run once the cycle has resolved, so they may refresh again.
        await self._notify()
        return snapshot

    def request_refresh(self) -> 'concurrent.futures.Future[PortfolioSnapshot]':
        """Schedule a manual refresh from another thread."""
        if self._loop is None:
            raise RuntimeError('Scheduler is not running')
        return asyncio.run_coroutine_threadsafe(self.refresh(manual=True), self._loop)

    def start(self) -> 'asyncio.Task[None]':
        if self._timer_task and not self._timer_task.done():
            raise RuntimeError('Scheduler already running')
        self._loop = asyncio.get_running_loop()
        self._timer_task = asyncio.create_task(self.run())
        return self._timer_task

    async def stop(self) -> None:
        if self._timer_task:
            self._timer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer_task
            self._timer_task = None
        if self._inflight is not None and not self._inflight.done():
            await asyncio.shield(self._inflight)
        self._loop = None

    async def run(self) -> None:
        await self.refresh()
        while True:
            await asyncio.sleep(self._settings.refresh_interval)
            await self.refresh()

    async def _run_cycle(self, manual: bool) -> PortfolioSnapshot:
        self._state = RefreshState.LOADING
        try:
            quotes = await self._feed.fetch_quotes(self._request_ids, known_ids=self._holding_ids)
            snapshot = self._engine.compute_snapshot(self._holdings, quotes, market_ids=self._market_ids)
        except DashboardError as error:
            logger.warning('Refresh failed, showing sample data: %s', error)
            snapshot, state = self._degrade(manual)
        except Exception:
            logger.exception('Unexpected error during refresh, showing sample data')
            snapshot, state = self._degrade(manual)
        else:
            state = RefreshState.READY
            self._history.record(snapshot)
            if manual:
                self._notices.post(REFRESH_SUCCESS_MESSAGE, NoticeLevel.INFO)
            logger.info(
                'Portfolio refreshed: total=%.2f change=%.2f%%',
                snapshot.total_value_usd,
                snapshot.aggregate_change_percent,
            )

        self._published = (snapshot, state)
        self._state = state
        return snapshot

    def _degrade(self, manual: bool) -> Tuple[PortfolioSnapshot, RefreshState]:
        message = REFRESH_FAILURE_MESSAGE if manual else STARTUP_FAILURE_MESSAGE
        self._notices.post(message, NoticeLevel.WARNING)
        return get_fallback_snapshot(), RefreshState.DEGRADED

    async def _notify(self) -> None:
        view = self.current_view()
        if view is None or not self._listeners:
            return
        listeners = list(self._listeners)
        results = await asyncio.gather(*(listener(view) for listener in listeners), return_exceptions=True)
        for result, listener in zip(results, listeners):
            if isinstance(result, Exception):
                logger.error('Dashboard listener %r failed: %s', listener, result)


__all__ = [
    'REFRESH_FAILURE_MESSAGE',
    'REFRESH_SUCCESS_MESSAGE',
    'RefreshScheduler',
    'RefreshState',
    'STARTUP_FAILURE_MESSAGE',
]
