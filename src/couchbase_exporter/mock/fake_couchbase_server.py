"""
Fake Couchbase admin API for testing without a cluster.

    couchbase-exporter mock-server --port 8091
    couchbase-exporter --couchbase.url http://localhost:8091 watch
"""

from __future__ import annotations

import base64
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional

from couchbase_exporter.mock.generator import MockCouchbaseCluster


class _AdminHandler(BaseHTTPRequestHandler):
    server: "FakeCouchbaseServer"

    def do_GET(self):
        if not self._authorized():
            self._send(401, b'{"error": "unauthorized"}')
            return

        if self.path == "/pools/default":
            if self.server.failing:
                self._send(500, b'{"error": "internal server error"}')
                return
            body = json.dumps(self.server.next_document()).encode()
            self._send(200, body)
        else:
            self._send(404, b'{"error": "not found"}')

    def _authorized(self) -> bool:
        expected = base64.b64encode(
            f"{self.server.username}:{self.server.password}".encode()
        ).decode()
        return self.headers.get("Authorization") == f"Basic {expected}"

    def _send(self, status: int, body: bytes):
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


class FakeCouchbaseServer(ThreadingHTTPServer):
    """Serves /pools/default from a MockCouchbaseCluster."""

    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        username: str = "admin",
        password: str = "password",
        cluster: Optional[MockCouchbaseCluster] = None,
    ):
        super().__init__(address, _AdminHandler)
        self.username = username
        self.password = password
        self.failing = False
        self._lock = threading.Lock()
        self._cluster = cluster or MockCouchbaseCluster()

    def next_document(self) -> dict:
        # handler threads share one generator
        with self._lock:
            return self._cluster.pools_default()

    def set_failing(self, failing: bool):
        """Make /pools/default answer 500 until switched back."""
        self.failing = failing

    @property
    def url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"


def run_fake_server(
    host: str = "127.0.0.1",
    port: int = 8091,
    username: str = "admin",
    password: str = "password",
):
    server = FakeCouchbaseServer((host, port), username=username, password=password)
    print(f"Fake Couchbase admin API running at {server.url}/pools/default")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
