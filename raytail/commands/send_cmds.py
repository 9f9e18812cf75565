from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich import print

from ..classifier import detect_language
from ..client import build_request, default_project_name, post_request
from .serve_cmds import validate_port


def _coerce_value(value: str) -> object:
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered == "null":
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def send_cmd(
    *,
    messages: list[str],
    host: str,
    port: int,
    request_uuid: str | None,
    payload_type: str,
    label: str | None,
) -> None:
    """Post a log or text payload to a running receiver."""

    validate_port(port)
    if payload_type not in {"log", "text"}:
        print(f"[red]Unsupported payload type: {payload_type} (use log or text)[/red]")
        raise typer.Exit(code=1)
    values: list[object] = list(messages)
    if payload_type == "log":
        values = [_coerce_value(message) for message in messages]
    body = build_request(
        values,
        payload_type=payload_type,
        request_uuid=request_uuid,
        project_name=default_project_name(),
    )
    if label:
        body["payloads"].append({"type": "label", "content": {"label": label}})
    try:
        status, text = post_request(host, port, body)
    except OSError as exc:
        print(f"[red]Could not reach http://{host}:{port}: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    if status != 200:
        print(f"[red]Receiver answered {status}: {text}[/red]")
        raise typer.Exit(code=1)
    print(f"[green]Sent {payload_type} payload ({body['uuid']})[/green]")


def detect_cmd(*, path: str | None) -> None:
    """Print the language guessed for a file or stdin."""

    if path and path != "-":
        try:
            text = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            print(f"[red]Could not read {path}: {exc}[/red]")
            raise typer.Exit(code=1) from exc
    else:
        text = sys.stdin.read()
    print(detect_language(text) or "plain")
