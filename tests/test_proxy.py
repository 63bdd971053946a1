"""Tests for :mod:`portfolio_dashboard.feed.proxy`."""

from __future__ import annotations

import asyncio
import json
from typing import List

from aiohttp import test_utils, web

from portfolio_dashboard.config import FeedConfig
from portfolio_dashboard.feed import create_proxy_app
from portfolio_dashboard.feed.proxy import upstream_url


class Upstream:
    def __init__(self, status: int = 200, raw: bytes = b'{"bitcoin": {"usd": 1.5}}') -> None:
        self.status = status
        self.raw = raw
        self.seen: List[str] = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get('/api/v3/{tail:.*}', self._handle)
        return app

    async def _handle(self, request: web.Request) -> web.Response:
        self.seen.append(str(request.rel_url))
        return web.Response(status=self.status, body=self.raw, content_type='application/json')


async def _proxy_get(upstream: Upstream, path: str, api_key: str = '', close_upstream: bool = False):
    upstream_server = test_utils.TestServer(upstream.app())
    await upstream_server.start_server()
    config = FeedConfig(upstream_url=str(upstream_server.make_url('/api/v3')), api_key=api_key, request_timeout=5)
    if close_upstream:
        await upstream_server.close()
    try:
        async with test_utils.TestClient(test_utils.TestServer(create_proxy_app(config))) as client:
            response = await client.get(path)
            return response.status, dict(response.headers), await response.read()
    finally:
        await upstream_server.close()


def _assert_browser_headers(headers: dict) -> None:
    assert headers['Content-Type'].startswith('application/json')
    assert headers['Access-Control-Allow-Origin'] == '*'


def test_proxy_strips_prefix_and_relays_body_unchanged() -> None:
    upstream = Upstream()

    status, headers, body = asyncio.run(
        _proxy_get(upstream, '/api/simple/price?ids=bitcoin&vs_currencies=usd&include_24hr_change=true')
    )

    assert status == 200
    assert body == upstream.raw
    _assert_browser_headers(headers)
    assert upstream.seen == ['/api/v3/simple/price?ids=bitcoin&vs_currencies=usd&include_24hr_change=true']


def test_proxy_appends_api_key_when_configured() -> None:
    upstream = Upstream()

    asyncio.run(_proxy_get(upstream, '/api/coins/markets?vs_currency=usd', api_key='k3y'))

    assert upstream.seen == ['/api/v3/coins/markets?vs_currency=usd&x_cg_pro_api_key=k3y']


def test_upstream_error_becomes_500_with_error_body() -> None:
    status, headers, body = asyncio.run(_proxy_get(Upstream(status=503, raw=b'{}'), '/api/simple/price?ids=bitcoin'))

    assert status == 500
    _assert_browser_headers(headers)
    assert 'HTTP 503' in json.loads(body)['error']


def test_invalid_upstream_json_becomes_500() -> None:
    status, headers, body = asyncio.run(_proxy_get(Upstream(raw=b'<html>'), '/api/simple/price'))

    assert status == 500
    _assert_browser_headers(headers)
    assert 'error' in json.loads(body)


def test_unreachable_upstream_becomes_500() -> None:
    status, headers, body = asyncio.run(_proxy_get(Upstream(), '/api/ping', close_upstream=True))

    assert status == 500
    _assert_browser_headers(headers)
    assert json.loads(body)['error'].startswith('Failed to fetch data from CoinGecko')


def test_upstream_url_without_query() -> None:
    config = FeedConfig(upstream_url='https://feed.example/api/v3/')

    assert str(upstream_url(config, 'ping', '')) == 'https://feed.example/api/v3/ping'
