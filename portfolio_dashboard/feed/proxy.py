"""Pass-through HTTP proxy placing the feed behind a browser-friendly origin."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import AsyncIterator, Optional
from urllib.parse import urlencode

import aiohttp
from aiohttp import web
from yarl import URL

from ..config import FeedConfig

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey('feed_config', FeedConfig)
SESSION_KEY = web.AppKey('upstream_session', aiohttp.ClientSession)

_RESPONSE_HEADERS = {
    'Content-Type': 'application/json',
    'Access-Control-Allow-Origin': '*',
}


def _error_response(message: str) -> web.Response:
    return web.Response(
        status=500,
        body=json.dumps({'error': message}).encode('utf-8'),
        headers=_RESPONSE_HEADERS,
    )


def upstream_url(config: FeedConfig, tail: str, raw_query: str) -> URL:
    """Build the upstream URL, keeping the caller's query string verbatim."""
    query = raw_query
    auth = config.auth_params()
    if auth:
        query = f'{query}&{urlencode(auth)}' if query else urlencode(auth)
    target = f"{config.upstream_url}/{tail.lstrip('/')}"
    if query:
        target = f'{target}?{query}'
    return URL(target, encoded=True)


async def _forward(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    session = request.app[SESSION_KEY]
    target = upstream_url(config, request.match_info['tail'], request.rel_url.raw_query_string)
    try:
        async with session.get(target) as upstream:
            body = await upstream.read()
            if not 200 <= upstream.status < 300:
                logger.warning('Upstream answered HTTP %s for %s', upstream.status, request.rel_url)
                return _error_response(f'Failed to fetch data from CoinGecko: HTTP {upstream.status}')
    except (aiohttp.ClientError, asyncio.TimeoutError) as error:
        logger.warning('Upstream request for %s failed: %s', request.rel_url, error)
        return _error_response(f'Failed to fetch data from CoinGecko: {str(error) or type(error).__name__}')

    try:
        json.loads(body)
    except ValueError as error:
        logger.warning('Upstream returned invalid JSON for %s: %s', request.rel_url, error)
        return _error_response('Failed to fetch data from CoinGecko: invalid JSON')
    return web.Response(status=200, body=body, headers=_RESPONSE_HEADERS)


def create_proxy_app(
    config: FeedConfig,
    session: Optional[aiohttp.ClientSession] = None,
) -> web.Application:
    """Create the proxy application.

    Requests under `config.proxy_prefix` are forwarded to
    `config.upstream_url` with the prefix stripped. An injected session is
    left open on shutdown.
    """
    app = web.Application()
    app[CONFIG_KEY] = config

    async def _upstream_session(app: web.Application) -> AsyncIterator[None]:
        if session is not None:
            app[SESSION_KEY] = session
            yield
            return
        owned = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=config.request_timeout))
        app[SESSION_KEY] = owned
        yield
        await owned.close()

    app.cleanup_ctx.append(_upstream_session)
    app.router.add_get(f'{config.proxy_prefix}/{{tail:.*}}', _forward)
    return app


def serve_proxy(config: FeedConfig, host: str = '127.0.0.1', port: int = 8888) -> None:
    """Run the proxy until interrupted."""
    logger.info('Proxying http://%s:%s%s/* -> %s', host, port, config.proxy_prefix, config.upstream_url)
    web.run_app(create_proxy_app(config), host=host, port=port, print=None)


__all__ = ['create_proxy_app', 'serve_proxy', 'upstream_url']
