"""Market-data feed specific settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .config import resolve_env

DEFAULT_BASE_URL = 'https://api.coingecko.com/api/v3'
API_KEY_PARAM = 'x_cg_pro_api_key'


@dataclass
class FeedConfig:
    """Normalized representation of the CoinGecko feed configuration.

    `base_url` is where the dashboard sends its requests (the feed itself or
    a proxy in front of it); `upstream_url` is where the proxy forwards to.
    """

    base_url: str = DEFAULT_BASE_URL
    api_key: str = ''
    request_timeout: float = 10.0
    proxy_prefix: str = '/api'
    upstream_url: str = DEFAULT_BASE_URL

    def __post_init__(self) -> None:
        if not self.base_url.startswith(('http://', 'https://')):
            raise ValueError(f'Unsupported feed base URL: {self.base_url}')
        if not self.upstream_url.startswith(('http://', 'https://')):
            raise ValueError(f'Unsupported upstream URL: {self.upstream_url}')
        if self.request_timeout <= 0:
            raise ValueError(f'request_timeout must be positive, got {self.request_timeout}')
        self.base_url = self.base_url.rstrip('/')
        self.upstream_url = self.upstream_url.rstrip('/')
        self.proxy_prefix = '/' + self.proxy_prefix.strip('/') if self.proxy_prefix.strip('/') else ''

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api_key)

    def auth_params(self) -> dict[str, str]:
        """Query parameters that authenticate against the paid tier, if any."""
        return {API_KEY_PARAM: self.api_key} if self.api_key else {}

    @classmethod
    def from_env(
        cls,
        env_file: str = '.env',
        environ: Optional[Mapping[str, str]] = None,
    ) -> 'FeedConfig':
        env = resolve_env(env_file, environ)
        return cls(
            base_url=env.get('FEED_BASE_URL', DEFAULT_BASE_URL),
            api_key=env.get('COINGECKO_API_KEY', ''),
            request_timeout=float(env.get('FEED_TIMEOUT', cls.request_timeout)),
            proxy_prefix=env.get('PROXY_PREFIX', cls.proxy_prefix),
            upstream_url=env.get('FEED_UPSTREAM_URL', DEFAULT_BASE_URL),
        )


__all__ = ['API_KEY_PARAM', 'DEFAULT_BASE_URL', 'FeedConfig']
