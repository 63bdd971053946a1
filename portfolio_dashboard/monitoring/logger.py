"""Logging helpers."""

from __future__ import annotations

import logging

_NOISY_LOGGERS = ('aiohttp.access',)


def configure_logging(level: str = 'INFO', *, include_timestamp: bool = True) -> None:
    """Configure root logging handlers for the dashboard processes."""
    fmt = '%(asctime)s - %(name)s - %(levelname)s - %(message)s' if include_timestamp else '%(name)s - %(levelname)s - %(message)s'
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=fmt)
    # Access lines for every proxied request drown out the pipeline at INFO.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))


__all__ = ['configure_logging']
