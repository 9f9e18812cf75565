from __future__ import annotations

import json
import os
from http.server import BaseHTTPRequestHandler
from typing import Any

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _safe_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


MAX_BODY_BYTES = _safe_int_env("RAYTAIL_MAX_BODY_BYTES", 10 * 1024 * 1024)


class BodyTooLargeError(ValueError):
    pass


def send_text_response(
    handler: BaseHTTPRequestHandler,
    text: str,
    status: int = 200,
    *,
    cors: bool = False,
) -> None:
    body = text.encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "text/plain; charset=utf-8")
    handler.send_header("Content-Length", str(len(body)))
    if cors:
        handler.send_header("Access-Control-Allow-Origin", "*")
    handler.end_headers()
    handler.wfile.write(body)


def send_preflight_response(handler: BaseHTTPRequestHandler) -> None:
    handler.send_response(204)
    for key, value in CORS_HEADERS.items():
        handler.send_header(key, value)
    handler.send_header("Content-Length", "0")
    handler.end_headers()


def _discard_body(handler: BaseHTTPRequestHandler, length: int) -> None:
    remaining = length
    while remaining > 0:
        chunk = handler.rfile.read(min(remaining, 65536))
        if not chunk:
            return
        remaining -= len(chunk)


def read_body(handler: BaseHTTPRequestHandler, max_bytes: int | None = None) -> bytes:
    limit = MAX_BODY_BYTES if max_bytes is None else max_bytes
    try:
        length = int(handler.headers.get("Content-Length", "0") or 0)
    except (TypeError, ValueError):
        length = 0
    if length <= 0:
        return b""
    if length > limit:
        # Drain so the client still sees the response instead of a reset.
        _discard_body(handler, length)
        raise BodyTooLargeError("payload_too_large")
    return handler.rfile.read(length)


def parse_json_body(raw: bytes) -> Any:
    """Decode a JSON request body, returning None when it is not valid JSON."""

    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (ValueError, RecursionError):
        # Covers decode errors, the int digit limit and overly deep nesting.
        return None
