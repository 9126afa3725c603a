"""HTTP server exposing live and historical telemetry as JSON."""

from __future__ import annotations

import errno
import json
import logging
from datetime import timedelta
from functools import partial
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, ClassVar
from urllib.parse import parse_qs, urlsplit

from hostwatch.app import TelemetryEngine
from hostwatch.engine.store import utc_now

logger = logging.getLogger(__name__)

ANALYTICS_RANGES: dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_RANGE = "24h"


class TelemetryRequestHandler(BaseHTTPRequestHandler):
    """Serves the current sample, the live history and stored analytics."""

    server_version: ClassVar[str] = "Hostwatch/1.0"

    def __init__(self, *args: Any, engine: TelemetryEngine, **kwargs: Any) -> None:
        self._engine = engine
        super().__init__(*args, **kwargs)

    def do_GET(self) -> None:  # noqa: N802
        url = urlsplit(self.path)
        if url.path == "/api/current":
            latest = self._engine.service.latest()
            self._send_json(latest.to_dict() if latest else {})
            return
        if url.path == "/api/history":
            self._send_json([stats.to_dict() for stats in self._engine.service.history()])
            return
        if url.path == "/api/diagnostics":
            self._send_json(self._engine.service.diagnostics())
            return
        if url.path == "/api/alerts":
            self._send_json([alert.to_dict() for alert in self._engine.alerts.recent_alerts()])
            return
        if url.path == "/api/analytics":
            self._send_analytics(parse_qs(url.query))
            return
        self._send_json({"error": "not_found"}, status=HTTPStatus.NOT_FOUND)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A003 - parity with BaseHTTPRequestHandler
        logger.debug("%s - %s", self.client_address[0], format % args)

    def _send_analytics(self, query: dict[str, list[str]]) -> None:
        requested = query.get("range", [DEFAULT_RANGE])[0]
        window = ANALYTICS_RANGES.get(requested, ANALYTICS_RANGES[DEFAULT_RANGE])
        try:
            records = self._engine.store.fetch_since(utc_now() - window)
        except Exception as exc:
            logger.exception("Failed to fetch analytics data", exc_info=exc)
            self._send_json(
                {"message": "Failed to fetch analytics data"},
                status=HTTPStatus.INTERNAL_SERVER_ERROR,
            )
            return
        self._send_json([record.to_dict() for record in records])

    def _send_json(self, payload: Any, status: HTTPStatus = HTTPStatus.OK) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


class TelemetryServer:
    """Wraps the HTTP server around an engine; tries the next ports when busy."""

    def __init__(self, engine: TelemetryEngine, host: str = "127.0.0.1", port: int = 8080) -> None:
        self._engine = engine
        handler = partial(TelemetryRequestHandler, engine=engine)

        max_attempts = 1 if port == 0 else 10
        for attempt in range(max_attempts):
            try:
                self._httpd = ThreadingHTTPServer((host, port + attempt), handler)
                break
            except OSError as exc:
                if exc.errno == errno.EADDRINUSE and attempt < max_attempts - 1:
                    continue
                raise

    def serve_forever(self) -> None:
        self._httpd.serve_forever()

    def stop(self) -> None:
        try:
            self._httpd.shutdown()
        finally:
            self._httpd.server_close()

    def server_address(self) -> str:
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"


def create_app(engine: TelemetryEngine, host: str = "127.0.0.1", port: int = 8080) -> TelemetryServer:
    """Factory helper used by the CLI, scripts and tests."""

    return TelemetryServer(engine, host=host, port=port)
