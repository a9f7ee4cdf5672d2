"""Preview HTTP server for the build directory."""

from __future__ import annotations

import functools
import logging
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

logger = logging.getLogger(__name__)


class _PreviewHandler(SimpleHTTPRequestHandler):
    def log_message(self, format: str, *args) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class PreviewServer:
    """Serves a directory over HTTP from a background thread.

    The directory is looked up on every request, so it may be wiped and
    rebuilt while the server runs.
    """

    def __init__(self, directory: str | Path, host: str = "127.0.0.1", port: int = 8000) -> None:
        self.directory = Path(directory)
        self.host = host
        self.port = port
        self._httpd: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        host, port = self.host, self.port
        if self._httpd is not None:
            port = self._httpd.server_address[1]
        return f"http://{host}:{port}/"

    def start(self) -> None:
        if self._httpd is not None:
            return
        self.directory.mkdir(parents=True, exist_ok=True)
        handler = functools.partial(_PreviewHandler, directory=str(self.directory.resolve()))
        self._httpd = ThreadingHTTPServer((self.host, self.port), handler)
        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="sabresite-preview", daemon=True
        )
        self._thread.start()
        logger.info("Serving %s at %s", self.directory, self.url)

    def stop(self) -> None:
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._httpd = None
        self._thread = None
        logger.info("Preview server stopped.")
