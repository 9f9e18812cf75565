from __future__ import annotations

import logging
import os
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

from .server_http import (
    BodyTooLargeError,
    parse_json_body,
    read_body,
    send_preflight_response,
    send_text_response,
)
from .store import InvalidRequestError, PayloadStore, RayRequest

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 23517
AVAILABILITY_PATH = "/_availability_check"


def build_ray_handler(store: PayloadStore) -> type[BaseHTTPRequestHandler]:
    """Return a request handler class that feeds Ray requests into ``store``."""

    class RayHandler(BaseHTTPRequestHandler):
        def log_message(self, format: str, *args: object) -> None:  # noqa: A003
            if os.environ.get("RAYTAIL_SERVER_LOGS") == "1":
                super().log_message(format, *args)

        def _method_not_allowed(self) -> None:
            send_text_response(self, "Method not allowed", status=405)

        def do_OPTIONS(self) -> None:  # noqa: N802
            send_preflight_response(self)

        def do_GET(self) -> None:  # noqa: N802
            if urlparse(self.path).path == AVAILABILITY_PATH:
                send_text_response(self, "OK", cors=True)
                return
            self._method_not_allowed()

        def do_PUT(self) -> None:  # noqa: N802
            self._method_not_allowed()

        def do_DELETE(self) -> None:  # noqa: N802
            self._method_not_allowed()

        def do_PATCH(self) -> None:  # noqa: N802
            self._method_not_allowed()

        def do_POST(self) -> None:  # noqa: N802
            try:
                raw = read_body(self)
            except BodyTooLargeError:
                logger.info("rejected oversized request from %s", self.client_address[0])
                send_text_response(self, "Payload too large", status=413)
                return
            data = parse_json_body(raw)
            if not isinstance(data, dict):
                logger.info("rejected unparseable request body")
                send_text_response(self, "Invalid JSON", status=400)
                return
            try:
                request = RayRequest.from_dict(data)
            except InvalidRequestError as exc:
                logger.info("rejected request: %s", exc)
                send_text_response(self, "Invalid payload structure", status=400)
                return
            store.add_request(request)
            send_text_response(self, "OK", cors=True)

    return RayHandler


def make_server(
    store: PayloadStore,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> ThreadingHTTPServer:
    server = ThreadingHTTPServer((host, port), build_ray_handler(store))
    server.daemon_threads = True
    return server


def start_server(
    store: PayloadStore,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    background: bool = True,
) -> ThreadingHTTPServer:
    server = make_server(store, host, port)
    logger.info("listening on %s:%s", host, server.server_address[1])
    if background:
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
    else:
        server.serve_forever()
    return server


def stop_server(server: ThreadingHTTPServer) -> None:
    server.shutdown()
    server.server_close()
