from __future__ import annotations

import threading

from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from .classifier import PREVIEW_LENGTH, entry_color, preview_text, short_type_label
from .render import render_payload
from .store import PayloadStore, StoredPayload

DEFAULT_ROW_LIMIT = 30
REFRESH_INTERVAL_S = 0.25


def _payload_row(payload: StoredPayload, preview_length: int) -> tuple[Text, Text, Text, Text]:
    color = entry_color(payload)
    return (
        Text(payload.timestamp.astimezone().strftime("%H:%M:%S"), style="white"),
        Text(f"[{short_type_label(payload.type)}]", style=f"bold {color}"),
        Text(payload.label or "", style="bright_cyan"),
        Text(preview_text(payload, preview_length), no_wrap=True, overflow="ellipsis"),
    )


def build_payload_table(
    store: PayloadStore,
    *,
    screen: str | None = None,
    limit: int = DEFAULT_ROW_LIMIT,
    preview_length: int = PREVIEW_LENGTH,
    title: str | None = None,
) -> Table:
    payloads = store.get_payloads_by_screen(screen) if screen else store.get_payloads()
    table = Table(title=title, expand=True, show_edge=False, header_style="bold")
    table.add_column("Time", no_wrap=True, width=8)
    table.add_column("Type", no_wrap=True)
    table.add_column("Label", no_wrap=True)
    table.add_column("Preview", ratio=1)
    if not payloads:
        table.add_row("", "", "", Text("Waiting for payloads...", style="italic grey50"))
        return table
    for payload in payloads[-limit:]:
        table.add_row(*_payload_row(payload, preview_length))
    return table


class LiveView:
    """Redraw a payload table whenever the store changes.

    The store listener only flags a pending refresh, the redraw happens on
    the thread running :meth:`run`.
    """

    def __init__(
        self,
        store: PayloadStore,
        console: Console | None = None,
        *,
        screen: str | None = None,
        limit: int = DEFAULT_ROW_LIMIT,
        preview_length: int = PREVIEW_LENGTH,
        port: int | None = None,
    ) -> None:
        self.store = store
        self.console = console or Console()
        self.screen = screen
        self.limit = limit
        self.preview_length = preview_length
        self.port = port
        self._changed = threading.Event()
        self._stop = threading.Event()

    def mark_changed(self) -> None:
        self._changed.set()

    def stop(self) -> None:
        self._stop.set()
        self._changed.set()

    def _title(self) -> str:
        screen = self.screen or self.store.get_current_screen()
        parts = ["raytail"]
        if self.port is not None:
            parts.append(f":{self.port}")
        parts.append(f" | {len(self.store.get_payloads())} payloads | screen {screen}")
        return "".join(parts)

    def render(self) -> Table:
        return build_payload_table(
            self.store,
            screen=self.screen,
            limit=self.limit,
            preview_length=self.preview_length,
            title=self._title(),
        )

    def run(self) -> None:
        with self.store.subscription(self.mark_changed):
            with Live(self.render(), console=self.console, auto_refresh=False) as live:
                while not self._stop.is_set():
                    if not self._changed.wait(REFRESH_INTERVAL_S):
                        continue
                    self._changed.clear()
                    live.update(self.render(), refresh=True)


class StreamView:
    """Print each newly stored payload once instead of redrawing a table.

    By default that is one summary line per payload; with ``details`` the
    full rendered payload is printed.
    """

    def __init__(
        self,
        store: PayloadStore,
        console: Console | None = None,
        *,
        preview_length: int = PREVIEW_LENGTH,
        details: bool = False,
    ) -> None:
        self.store = store
        self.console = console or Console()
        self.preview_length = preview_length
        self.details = details
        self._last_id = 0
        self._lock = threading.Lock()
        self._stop = threading.Event()

    def flush(self) -> None:
        with self._lock:
            fresh = [p for p in self.store.get_payloads() if p.id > self._last_id]
            for payload in fresh:
                self._last_id = payload.id
                if self.details:
                    self.console.print(render_payload(payload))
                    continue
                time_text, type_text, label_text, preview = _payload_row(
                    payload, self.preview_length
                )
                line = Text.assemble(time_text, " ", type_text)
                if label_text.plain:
                    line.append(" ")
                    line.append_text(label_text)
                line.append(" ")
                line.append_text(preview)
                self.console.print(line)

    def stop(self) -> None:
        self._stop.set()

    def run(self) -> None:
        changed = threading.Event()
        with self.store.subscription(changed.set):
            while not self._stop.is_set():
                if changed.wait(REFRESH_INTERVAL_S):
                    changed.clear()
                    self.flush()
