"""Core package for the crypto portfolio dashboard."""

from importlib import metadata

try:
    __version__ = metadata.version('portfolio_dashboard')
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = '0.1.0-dev'

__all__ = ['__version__']
