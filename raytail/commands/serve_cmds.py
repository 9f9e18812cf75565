from __future__ import annotations

import logging
import socket

import typer
from rich import print
from rich.console import Console

from ..live import LiveView, StreamView
from ..server import start_server, stop_server
from ..store import PayloadStore

logger = logging.getLogger(__name__)


def _port_open(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(0.2)
        try:
            return sock.connect_ex((host, port)) == 0
        except OSError:
            return False


def validate_port(port: int) -> None:
    if port < 1 or port > 65535:
        print(f"[red]Invalid port: {port}[/red]")
        raise typer.Exit(code=1)


def serve(
    *,
    host: str,
    port: int,
    max_payloads: int,
    preview_length: int,
    stream: bool,
    screen: str | None,
    details: bool = False,
) -> None:
    """Run the Ray receiver and show incoming payloads until interrupted."""

    validate_port(port)
    if max_payloads < 1:
        print("[red]--max-payloads must be at least 1[/red]")
        raise typer.Exit(code=1)
    if _port_open(host, port):
        print(f"[yellow]Something is already listening on {host}:{port}[/yellow]")
        raise typer.Exit(code=1)

    store = PayloadStore(max_payloads=max_payloads)
    try:
        server = start_server(store, host, port)
    except OSError as exc:
        print(f"[red]Could not listen on {host}:{port}: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    console = Console()
    print(f"[green]raytail listening on http://{host}:{port}[/green]")
    view: LiveView | StreamView
    if stream or details:
        view = StreamView(store, console, preview_length=preview_length, details=details)
    else:
        view = LiveView(store, console, screen=screen, preview_length=preview_length, port=port)
    try:
        view.run()
    except KeyboardInterrupt:
        view.stop()
    finally:
        stop_server(server)
        logger.info("server on %s:%s stopped", host, port)
    print(f"[green]Stopped ({store.count()} payloads in history)[/green]")
