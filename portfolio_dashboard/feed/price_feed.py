"""CoinGecko price feed client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

import aiohttp

from ..config import FeedConfig
from ..config.holdings import resolve_asset_ids
from ..errors import FeedUnavailable, InvalidRequest
from ..valuation.models import PriceQuote

logger = logging.getLogger(__name__)

MARKETS_PATH = '/coins/markets'
SIMPLE_PRICE_PATH = '/simple/price'


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_markets(payload: Any, requested: Iterable[str]) -> Dict[str, PriceQuote]:
    """Normalize a `/coins/markets` array into quotes keyed by feed id."""
    if not isinstance(payload, list):
        raise FeedUnavailable(f'Unexpected markets payload: {type(payload).__name__}')
    wanted = set(requested)
    quotes: Dict[str, PriceQuote] = {}
    for coin in payload:
        if not isinstance(coin, Mapping) or coin.get('id') not in wanted:
            continue
        price = _as_float(coin.get('current_price'))
        if price is None:
            logger.debug('Market entry for %s has no price', coin.get('id'))
            continue
        sparkline = (coin.get('sparkline_in_7d') or {}).get('price') or []
        quotes[coin['id']] = PriceQuote(
            asset_id=coin['id'],
            unit_price_usd=price,
            change_24h_percent=_as_float(coin.get('price_change_percentage_24h')) or 0.0,
            market_cap_usd=_as_float(coin.get('market_cap')),
            volume_usd=_as_float(coin.get('total_volume')),
            sparkline_7d=tuple(point for point in map(_as_float, sparkline) if point is not None),
            symbol=str(coin.get('symbol') or '').upper() or None,
            name=coin.get('name'),
        )
    return quotes


def parse_simple_prices(payload: Any, requested: Iterable[str]) -> Dict[str, PriceQuote]:
    """Normalize a `/simple/price` mapping into quotes keyed by feed id."""
    if not isinstance(payload, Mapping):
        raise FeedUnavailable(f'Unexpected price payload: {type(payload).__name__}')
    quotes: Dict[str, PriceQuote] = {}
    for asset_id in requested:
        entry = payload.get(asset_id)
        if not isinstance(entry, Mapping):
            continue
        price = _as_float(entry.get('usd'))
        if price is None:
            continue
        quotes[asset_id] = PriceQuote(
            asset_id=asset_id,
            unit_price_usd=price,
            change_24h_percent=_as_float(entry.get('usd_24h_change')) or 0.0,
        )
    return quotes


class PriceFeedClient:
    """Fetches quotes for many assets with a single request per call.

    The session is created lazily and owned by the client unless one is
    injected. There is no retry and no caching.
    """

    def __init__(
        self,
        config: FeedConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._config = config
        self._session = session
        self._owns_session = session is None
        self._lock = asyncio.Lock()

    @property
    def config(self) -> FeedConfig:
        return self._config

    async def fetch_quotes(
        self,
        asset_ids: Iterable[str],
        *,
        include_market_data: bool = True,
        known_ids: Iterable[str] = (),
    ) -> Dict[str, PriceQuote]:
        requested = list(asset_ids)
        if not requested:
            raise InvalidRequest('No asset identifiers requested')
        ids = resolve_asset_ids(requested, known_ids)
        if not ids:
            raise InvalidRequest(f'None of {requested} is known to the feed')

        csv = ','.join(ids)
        if include_market_data:
            payload = await self._get_json(
                MARKETS_PATH,
                {'vs_currency': 'usd', 'ids': csv, 'sparkline': 'true'},
            )
            quotes = parse_markets(payload, ids)
        else:
            payload = await self._get_json(
                SIMPLE_PRICE_PATH,
                {'ids': csv, 'vs_currencies': 'usd', 'include_24hr_change': 'true'},
            )
            quotes = parse_simple_prices(payload, ids)
        logger.debug('Fetched %d/%d quotes', len(quotes), len(ids))
        return quotes

    async def close(self) -> None:
        async with self._lock:
            if self._session is not None and self._owns_session:
                await self._session.close()
                self._session = None

    async def __aenter__(self) -> 'PriceFeedClient':
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _client(self) -> aiohttp.ClientSession:
        async with self._lock:
            if self._session is None:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
                )
                self._owns_session = True
            return self._session

    async def _get_json(self, path: str, params: Dict[str, str]) -> Any:
        session = await self._client()
        url = f'{self._config.base_url}{path}'
        query = {**params, **self._config.auth_params()}
        try:
            async with session.get(
                url,
                params=query,
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    raise FeedUnavailable('Feed request failed', status=response.status)
                try:
                    return await response.json(content_type=None)
                except ValueError as error:
                    raise FeedUnavailable(f'Malformed JSON from feed: {error}', status=response.status) from error
        except asyncio.TimeoutError as error:
            raise FeedUnavailable(f'Feed request timed out after {self._config.request_timeout}s') from error
        except aiohttp.ClientError as error:
            raise FeedUnavailable(f'Feed request failed: {error}') from error


__all__ = ['PriceFeedClient', 'parse_markets', 'parse_simple_prices']
