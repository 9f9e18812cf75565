from __future__ import annotations

import datetime as dt
from typing import Any

from rich.console import Console

from raytail.live import LiveView, StreamView, build_payload_table
from raytail.store import PayloadStore, RayRequest

NOW = dt.datetime(2024, 1, 1, 12, 0, 0, tzinfo=dt.UTC)


def _store() -> PayloadStore:
    return PayloadStore(clock=lambda: NOW)


def _request(uuid: str, *payloads: dict[str, Any]) -> RayRequest:
    return RayRequest.from_dict({"uuid": uuid, "payloads": list(payloads)})


def _text(renderable: Any) -> str:
    console = Console(record=True, width=120, color_system=None)
    console.print(renderable)
    return console.export_text()


def test_empty_table_shows_waiting_row() -> None:
    output = _text(build_payload_table(_store()))
    assert "Waiting for payloads..." in output


def test_table_lists_payloads_with_labels() -> None:
    store = _store()
    store.add_request(
        _request(
            "a",
            {"type": "log", "content": {"values": ["hello"]}},
            {"type": "label", "content": {"label": "Greeting"}},
        )
    )
    store.add_request(_request("b", {"type": "executed_query", "content": {"sql": "select 1"}}))

    output = _text(build_payload_table(store))

    assert "[log]" in output
    assert "Greeting" in output
    assert "hello" in output
    assert "[query]" in output
    assert "select 1" in output


def test_table_filters_by_screen_and_limits_rows() -> None:
    store = _store()
    store.add_request(_request("a", {"type": "log", "content": {"values": ["before"]}}))
    store.add_request(
        _request(
            "b",
            {"type": "new_screen", "content": {"name": "checkout"}},
            {"type": "log", "content": {"values": ["first"]}},
            {"type": "log", "content": {"values": ["second"]}},
        )
    )

    output = _text(build_payload_table(store, screen="checkout", limit=1))

    assert "second" in output
    assert "first" not in output
    assert "before" not in output


def test_live_view_title_tracks_store() -> None:
    store = _store()
    store.add_request(
        _request(
            "a",
            {"type": "new_screen", "content": {"name": "orders"}},
            {"type": "log", "content": {"values": [1]}},
        )
    )
    view = LiveView(store, Console(record=True, width=120), port=23517)

    table = view.render()

    assert table.title == "raytail:23517 | 1 payloads | screen orders"


def test_live_view_marks_changes_from_store() -> None:
    store = _store()
    view = LiveView(store)

    with store.subscription(view.mark_changed):
        store.add_request(_request("a", {"type": "null", "content": {}}))

    assert view._changed.is_set()
    view.stop()
    assert view._stop.is_set()


def test_stream_view_prints_only_new_payloads() -> None:
    store = _store()
    console = Console(record=True, width=120, color_system=None)
    view = StreamView(store, console)

    store.add_request(_request("a", {"type": "log", "content": {"values": ["one"]}}))
    view.flush()
    store.add_request(
        _request(
            "b",
            {"type": "text", "content": {"content": "two"}},
            {"type": "label", "content": {"label": "Second"}},
        )
    )
    view.flush()
    view.flush()

    lines = [line for line in console.export_text().splitlines() if line.strip()]
    assert len(lines) == 2
    assert "[log]" in lines[0] and "one" in lines[0]
    assert "[text]" in lines[1] and "Second" in lines[1] and "two" in lines[1]


def test_stream_view_details_prints_rendered_payload() -> None:
    store = _store()
    console = Console(record=True, width=120, color_system=None)
    view = StreamView(store, console, details=True)

    store.add_request(
        _request(
            "a",
            {"type": "exception", "content": {"class": "LogicException", "message": "bad"}},
            {"type": "label", "content": {"label": "Checkout"}},
        )
    )
    view.flush()
    view.flush()

    output = console.export_text()
    assert output.count("EXCEPTION - Checkout") == 1
    assert "LogicException" in output
    assert "bad" in output
