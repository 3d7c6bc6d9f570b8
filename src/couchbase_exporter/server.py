"""
Exposition endpoint: a registry holding the collectors plus a small WSGI
app serving it over HTTP.
"""

from __future__ import annotations

import logging
import socket
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, PlatformCollector, ProcessCollector, make_wsgi_app

from couchbase_exporter import __version__
from couchbase_exporter.client import CouchbaseClient
from couchbase_exporter.collector.cluster import ClusterCollector


log = logging.getLogger(__name__)

DEFAULT_LISTEN_ADDRESS = ":9420"
DEFAULT_TELEMETRY_PATH = "/metrics"

_LANDING_PAGE = """<html>
<head><title>Couchbase Exporter</title></head>
<body>
<h1>Couchbase Exporter</h1>
<p>Version {version}</p>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def build_registry(client: CouchbaseClient, process_metrics: bool = True) -> CollectorRegistry:
    """Create a registry with the cluster collector registered on it."""
    registry = CollectorRegistry()
    registry.register(ClusterCollector(client))
    if process_metrics:
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
    return registry


class ExporterApp:
    """Routes the telemetry path to the registry and serves a landing page on /."""

    def __init__(self, registry: CollectorRegistry, telemetry_path: str = DEFAULT_TELEMETRY_PATH):
        if not telemetry_path.startswith("/"):
            telemetry_path = "/" + telemetry_path
        self.telemetry_path = telemetry_path
        self._metrics_app = make_wsgi_app(registry)
        self._landing = _LANDING_PAGE.format(version=__version__, path=telemetry_path).encode()

    def __call__(self, environ, start_response):
        path = environ.get("PATH_INFO", "/")
        if path == self.telemetry_path:
            return self._metrics_app(environ, start_response)
        if path == "/":
            start_response("200 OK", [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(self._landing))),
            ])
            return [self._landing]
        start_response("404 Not Found", [("Content-Type", "text/plain")])
        return [b"Not Found"]


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port``. An empty host means all interfaces."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address {address!r}, expected host:port")
    return host.strip("[]") or "0.0.0.0", int(port)


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _ThreadingWSGIServerV6(_ThreadingWSGIServer):
    address_family = socket.AF_INET6


def server_class_for(host: str) -> type:
    """IPv6 literals need an AF_INET6 socket."""
    return _ThreadingWSGIServerV6 if ":" in host else _ThreadingWSGIServer


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


def serve(app: ExporterApp, listen_address: str = DEFAULT_LISTEN_ADDRESS):
    """Serve until interrupted."""
    host, port = parse_listen_address(listen_address)
    httpd = make_server(host, port, app, server_class_for(host), handler_class=_QuietHandler)
    log.info("Listening on %s:%d, metrics at %s", host, port, app.telemetry_path)
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()
        log.info("Exporter stopped")
