from __future__ import annotations

import typer
from rich import print

from . import __version__
from .commands.send_cmds import detect_cmd, send_cmd
from .commands.serve_cmds import serve as _serve
from .config import load_config
from .logging_setup import configure_logging

app = typer.Typer(help="raytail: receive Ray debug payloads in your terminal")


@app.callback()
def _configure(
    log_level: str = typer.Option(None, help="Log level (defaults to config)"),
    log_file: str = typer.Option(None, help="Write logs to this file instead of stderr"),
) -> None:
    cfg = load_config()
    configure_logging(log_level or cfg.log_level, log_file or cfg.log_file)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind the receiver"),
    port: int = typer.Option(None, "--port", "-p", help="Port to listen on"),
    max_payloads: int = typer.Option(None, help="Number of payloads to keep"),
    preview_length: int = typer.Option(None, help="Preview width in characters"),
    stream: bool = typer.Option(
        False, "--stream", help="Print one line per payload instead of a live table"
    ),
    screen: str = typer.Option(None, help="Only show payloads of this screen"),
    details: bool = typer.Option(
        False, "--details", help="Stream the full rendered payload instead of one line"
    ),
) -> None:
    """Listen for Ray payloads and show them as they arrive."""

    cfg = load_config()
    _serve(
        host=host or cfg.host,
        port=port if port is not None else cfg.port,
        max_payloads=max_payloads if max_payloads is not None else cfg.max_payloads,
        preview_length=preview_length if preview_length is not None else cfg.preview_length,
        stream=stream or cfg.stream,
        screen=screen,
        details=details,
    )


@app.command()
def send(
    messages: list[str] = typer.Argument(..., help="Values to send"),
    host: str = typer.Option(None, help="Receiver host"),
    port: int = typer.Option(None, "--port", "-p", help="Receiver port"),
    request_uuid: str = typer.Option(None, "--uuid", help="Correlation uuid to reuse"),
    payload_type: str = typer.Option("log", "--type", help="Payload type: log or text"),
    label: str = typer.Option(None, help="Label to attach to the payload"),
) -> None:
    """Send a test payload to a running receiver."""

    cfg = load_config()
    send_cmd(
        messages=messages,
        host=host or cfg.host,
        port=port if port is not None else cfg.port,
        request_uuid=request_uuid,
        payload_type=payload_type,
        label=label,
    )


@app.command()
def detect(
    path: str = typer.Argument(None, help="File to inspect ('-' or omitted for stdin)"),
) -> None:
    """Print the language raytail would highlight a text as."""

    detect_cmd(path=path)


@app.command("version")
def version() -> None:
    """Print version."""

    print(__version__)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
