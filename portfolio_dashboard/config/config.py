"""Application-wide configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

_ENV_COMMENT_PREFIX = '#'


def _load_env_file(path: Path) -> Dict[str, str]:
    """Load simple KEY=VALUE pairs from a .env style file if it exists."""
    if not path.exists():
        return {}

    values: Dict[str, str] = {}
    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith(_ENV_COMMENT_PREFIX):
            continue
        if '=' not in line:
            continue
        key, value = line.split('=', 1)
        values[key.strip()] = value.strip().strip('"').strip("\'")
    return values


def _merge_env(sources: Iterable[Mapping[str, str]]) -> Dict[str, str]:
    merged: Dict[str, str] = {}
    for source in sources:
        merged.update(source)
    return merged


def resolve_env(
    env_file: str | Path = '.env',
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Merge the `.env` file with the process environment (environment wins)."""
    env_file_values = _load_env_file(Path(env_file))
    return _merge_env([env_file_values, dict(os.environ if environ is None else environ)])


@dataclass
class Settings:
    """Container for application level settings.

    Values are resolved from (in order): process environment, `.env` file,
    and finally the provided defaults.
    """

    environment: str = 'development'
    log_level: str = 'INFO'
    refresh_interval: float = 60.0
    notice_duration: float = 5.0
    holdings_file: Optional[Path] = None
    sparkline_width: float = 100.0
    sparkline_height: float = 30.0

    def __post_init__(self) -> None:
        if self.refresh_interval <= 0:
            raise ValueError(f'refresh_interval must be positive, got {self.refresh_interval}')
        if self.notice_duration < 0:
            raise ValueError(f'notice_duration must not be negative, got {self.notice_duration}')
        if self.sparkline_width <= 0 or self.sparkline_height <= 0:
            raise ValueError('Sparkline box dimensions must be positive')
        if self.holdings_file is not None:
            self.holdings_file = Path(self.holdings_file)

    @classmethod
    def from_env(
        cls,
        env_file: str | Path = '.env',
        environ: Optional[Mapping[str, str]] = None,
    ) -> 'Settings':
        merged = resolve_env(env_file, environ)

        kwargs = {
            'environment': merged.get('APP_ENV', cls.environment),
            'log_level': merged.get('LOG_LEVEL', cls.log_level),
            'refresh_interval': float(merged.get('REFRESH_INTERVAL', cls.refresh_interval)),
            'notice_duration': float(merged.get('NOTICE_DURATION', cls.notice_duration)),
            'holdings_file': merged.get('HOLDINGS_FILE') or None,
            'sparkline_width': float(merged.get('SPARKLINE_WIDTH', cls.sparkline_width)),
            'sparkline_height': float(merged.get('SPARKLINE_HEIGHT', cls.sparkline_height)),
        }
        return cls(**kwargs)


load_settings = Settings.from_env

__all__ = ['Settings', 'load_settings', 'resolve_env']
