"""Error hierarchy shared by the feed, valuation and scheduler layers."""

from __future__ import annotations

from typing import Optional


class DashboardError(Exception):
    """Base class for every error raised by the dashboard pipeline."""


class FeedError(DashboardError):
    """Raised by the price feed client."""


class InvalidRequest(FeedError):
    """The caller asked for nothing, or for nothing the feed knows about."""


class FeedUnavailable(FeedError):
    """The feed could not be reached or answered with something unusable."""

    def __init__(self, reason: str, status: Optional[int] = None) -> None:
        self.reason = reason
        self.status = status
        message = f'{reason} (HTTP {status})' if status is not None else reason
        super().__init__(message)


class ComputationDegenerate(DashboardError):
    """A ratio was requested against a zero denominator."""


__all__ = [
    'ComputationDegenerate',
    'DashboardError',
    'FeedError',
    'FeedUnavailable',
    'InvalidRequest',
]
