"""Minimal HTTP endpoint exposing the dashboard view model."""

from __future__ import annotations

import json
import logging
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DashboardPayload = Dict[str, object]
StateProvider = Callable[[], Optional[DashboardPayload]]
RefreshTrigger = Callable[[], object]

_DASHBOARD_PATHS = {'/api/dashboard', '/api/dashboard/'}
_REFRESH_PATHS = {'/api/refresh', '/api/refresh/'}


def _make_handler(state_provider: StateProvider, refresh_trigger: Optional[RefreshTrigger]) -> type[BaseHTTPRequestHandler]:
    class DashboardHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802 (BaseHTTPRequestHandler contract)
            if self.path not in _DASHBOARD_PATHS:
                self.send_error(HTTPStatus.NOT_FOUND)
                return
            payload = state_provider()
            if payload is None:
                self._send_json(HTTPStatus.SERVICE_UNAVAILABLE, {'error': 'Dashboard is still loading'})
                return
            self._send_json(HTTPStatus.OK, payload)

        def do_POST(self) -> None:  # noqa: N802 (BaseHTTPRequestHandler contract)
            if self.path not in _REFRESH_PATHS or refresh_trigger is None:
                self.send_error(HTTPStatus.NOT_FOUND)
                return
            try:
                refresh_trigger()
            except RuntimeError as error:
                self._send_json(HTTPStatus.SERVICE_UNAVAILABLE, {'error': str(error)})
                return
            self._send_json(HTTPStatus.ACCEPTED, {'status': 'refresh scheduled'})

        def _send_json(self, status: HTTPStatus, payload: DashboardPayload) -> None:
            body = json.dumps(payload).encode('utf-8')
            self.send_response(status)
            self.send_header('Content-Type', 'application/json')
            self.send_header('Content-Length', str(len(body)))
            self.send_header('Access-Control-Allow-Origin', '*')
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args) -> None:  # noqa: A003 (shadow builtins)
            logger.debug('%s - %s', self.address_string(), format % args)

    return DashboardHandler


def serve_dashboard_api(
    state_provider: StateProvider,
    refresh_trigger: Optional[RefreshTrigger] = None,
    host: str = '127.0.0.1',
    port: int = 8000,
) -> Tuple[ThreadingHTTPServer, threading.Thread]:
    """Start the dashboard API in a background thread."""
    handler = _make_handler(state_provider, refresh_trigger)
    server = ThreadingHTTPServer((host, port), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server, thread


__all__ = ['serve_dashboard_api']
