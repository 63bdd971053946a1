"""Command line entry point for the crypto portfolio dashboard."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Optional

from portfolio_dashboard.api import serve_dashboard_api
from portfolio_dashboard.config import FeedConfig, Settings, load_holdings, load_settings
from portfolio_dashboard.feed import PriceFeedClient, serve_proxy
from portfolio_dashboard.monitoring import configure_logging
from portfolio_dashboard.presentation import to_view_model
from portfolio_dashboard.scheduler import RefreshScheduler
from portfolio_dashboard.valuation import get_fallback_history, get_fallback_snapshot


logger = logging.getLogger(__name__)


async def run_dashboard(
    settings: Settings,
    feed_config: FeedConfig,
    duration: Optional[float] = None,
    api_host: Optional[str] = None,
    api_port: Optional[int] = None,
) -> None:
    configure_logging(settings.log_level)
    holdings = load_holdings(settings.holdings_file)
    if not feed_config.is_authenticated:
        logger.info('No CoinGecko API key configured; using the public tier.')

    async with PriceFeedClient(feed_config) as feed:
        scheduler = RefreshScheduler(settings, feed, holdings)
        scheduler.start()

        server = thread = None
        if api_port is not None:
            def payload() -> Optional[dict]:
                view = scheduler.current_view()
                return view.to_dict() if view is not None else None

            server, thread = serve_dashboard_api(
                payload,
                scheduler.request_refresh,
                host=api_host or '127.0.0.1',
                port=api_port,
            )
            logger.info('Dashboard API available at http://%s:%s/api/dashboard', api_host or '127.0.0.1', api_port)

        try:
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)
        finally:
            await scheduler.stop()
            if server:
                server.shutdown()
                if thread:
                    thread.join(timeout=1)
                logger.info('Dashboard API stopped')


async def run_snapshot(settings: Settings, feed_config: FeedConfig, fallback: bool = False) -> dict:
    configure_logging(settings.log_level)
    box = (settings.sparkline_width, settings.sparkline_height)
    if fallback:
        view = to_view_model(get_fallback_snapshot(), history=get_fallback_history(), sparkline_box=box, state='degraded')
        return view.to_dict()

    async with PriceFeedClient(feed_config) as feed:
        scheduler = RefreshScheduler(settings, feed, load_holdings(settings.holdings_file))
        await scheduler.refresh()
        view = scheduler.current_view()
    return view.to_dict() if view is not None else {}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Crypto portfolio dashboard CLI')
    sub = parser.add_subparsers(dest='command', required=True)

    run = sub.add_parser('run', help='Run the refresh loop and optionally the dashboard API')
    run.add_argument('--duration', type=float, help='Runtime in seconds (forever when omitted)')
    run.add_argument('--api-port', type=int, help='Expose dashboard data on the given port')
    run.add_argument('--api-host', default='127.0.0.1')

    snapshot = sub.add_parser('snapshot', help='Run one refresh cycle and print the view model')
    snapshot.add_argument('--fallback', action='store_true', help='Print the sample data without fetching')

    proxy = sub.add_parser('proxy', help='Serve the feed proxy')
    proxy.add_argument('--host', default='127.0.0.1')
    proxy.add_argument('--port', type=int, default=8888)

    return parser


async def async_main(args: argparse.Namespace) -> None:
    settings = load_settings()
    feed_config = FeedConfig.from_env()
    if args.command == 'run':
        await run_dashboard(settings, feed_config, args.duration, args.api_host, args.api_port)
    elif args.command == 'snapshot':
        payload = await run_snapshot(settings, feed_config, args.fallback)
        print(json.dumps(payload, indent=2))
    else:  # pragma: no cover
        raise ValueError(f'Unknown command {args.command}')


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    if args.command == 'proxy':
        settings = load_settings()
        configure_logging(settings.log_level)
        serve_proxy(FeedConfig.from_env(), host=args.host, port=args.port)
        return
    asyncio.run(async_main(args))


if __name__ == '__main__':
    main()
