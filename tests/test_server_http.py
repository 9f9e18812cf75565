from __future__ import annotations

import io

import pytest

from raytail import server_http
from raytail.server_http import (
    BodyTooLargeError,
    parse_json_body,
    read_body,
    send_preflight_response,
    send_text_response,
)


class DummyHandler:
    def __init__(self, body: bytes = b"", headers: dict[str, str] | None = None) -> None:
        self.headers = headers or {}
        self.rfile = io.BytesIO(body)
        self.wfile = io.BytesIO()
        self.status: int | None = None
        self.response_headers: list[tuple[str, str]] = []
        self.headers_ended = False

    def send_response(self, status: int) -> None:
        self.status = status

    def send_header(self, key: str, value: str) -> None:
        self.response_headers.append((key, value))

    def end_headers(self) -> None:
        self.headers_ended = True


def _header_value(handler: DummyHandler, name: str) -> str | None:
    for key, value in handler.response_headers:
        if key == name:
            return value
    return None


def test_send_text_response() -> None:
    handler = DummyHandler()

    send_text_response(handler, "OK", cors=True)

    assert handler.status == 200
    assert _header_value(handler, "Content-Type") == "text/plain; charset=utf-8"
    assert _header_value(handler, "Content-Length") == "2"
    assert _header_value(handler, "Access-Control-Allow-Origin") == "*"
    assert handler.headers_ended is True
    assert handler.wfile.getvalue() == b"OK"


def test_send_text_response_without_cors() -> None:
    handler = DummyHandler()

    send_text_response(handler, "Method not allowed", status=405)

    assert handler.status == 405
    assert _header_value(handler, "Access-Control-Allow-Origin") is None


def test_send_preflight_response() -> None:
    handler = DummyHandler()

    send_preflight_response(handler)

    assert handler.status == 204
    assert _header_value(handler, "Access-Control-Allow-Methods") == "POST, OPTIONS"
    assert handler.wfile.getvalue() == b""


def test_read_body() -> None:
    handler = DummyHandler(body=b'{"a": 1}', headers={"Content-Length": "8"})

    assert read_body(handler) == b'{"a": 1}'


def test_read_body_missing_or_bad_length() -> None:
    assert read_body(DummyHandler(body=b"abc")) == b""
    assert read_body(DummyHandler(body=b"abc", headers={"Content-Length": "x"})) == b""


def test_read_body_too_large_drains_input(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(server_http, "MAX_BODY_BYTES", 4)
    handler = DummyHandler(body=b"0123456789", headers={"Content-Length": "10"})

    with pytest.raises(BodyTooLargeError):
        read_body(handler)
    assert handler.rfile.read() == b""


def test_parse_json_body() -> None:
    assert parse_json_body(b'{"uuid": "x"}') == {"uuid": "x"}
    assert parse_json_body(b"[1]") == [1]
    assert parse_json_body(b"") is None
    assert parse_json_body(b"not-json") is None
    assert parse_json_body(b"\xff\xfe") is None


def test_parse_json_body_rejects_oversized_numbers_and_deep_nesting() -> None:
    assert parse_json_body(b"1" * 5000) is None
    assert parse_json_body(b"[" * 100_000 + b"]" * 100_000) is None
