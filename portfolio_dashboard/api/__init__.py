"""HTTP surface for the rendering layer."""

from .server import serve_dashboard_api

__all__ = ['serve_dashboard_api']
