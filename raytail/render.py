from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from typing import Any, Final

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from .classifier import detect_language, entry_color, language_for_file, stringify
from .payloads import (
    ApplicationLogContent,
    BoolContent,
    CallerContent,
    CarbonContent,
    CustomContent,
    ExceptionContent,
    FileContentsContent,
    GenericContent,
    HtmlContent,
    ImageContent,
    JsonContent,
    LogContent,
    MeasureContent,
    NotifyContent,
    NullContent,
    QueryContent,
    SeparatorContent,
    StackFrame,
    TableContent,
    TextContent,
    TraceContent,
    XmlContent,
)
from .store.types import StoredPayload

EXCEPTION_FRAME_LIMIT = 10
TRACE_FRAME_LIMIT = 15
TABLE_ROW_LIMIT = 20
SYNTAX_THEME = "ansi_dark"

LEVEL_COLORS: Final[dict[str, str]] = {
    "emergency": "bright_red",
    "alert": "bright_red",
    "critical": "bright_red",
    "error": "bright_red",
    "warning": "bright_yellow",
    "notice": "bright_cyan",
    "info": "bright_green",
    "debug": "white",
}


def highlighted(code: str, language: str) -> Syntax:
    return Syntax(
        code,
        language,
        theme=SYNTAX_THEME,
        word_wrap=True,
        background_color="default",
    )


def highlight_value(value: Any) -> RenderableType:
    """Render a logged value, highlighting strings that look like code."""

    if isinstance(value, (dict, list)):
        return highlighted(stringify(value), "json")
    if isinstance(value, str):
        language = detect_language(value)
        if language:
            return highlighted(value, language)
        return Text(value)
    return Text(stringify(value))


def _frame_lines(frames: tuple[StackFrame, ...], limit: int) -> list[RenderableType]:
    lines: list[RenderableType] = []
    for frame in frames[:limit]:
        line = Text(f"  {frame.location()}", style="dim" if frame.vendor_frame else "white")
        name = frame.callable_name()
        if name:
            line.append(f" in {name}")
        lines.append(line)
    if len(frames) > limit:
        lines.append(Text(f"  ... {len(frames) - limit} more frames", style="grey50"))
    return lines


def _render_log(content: LogContent, payload_type: str) -> RenderableType:
    parts: list[RenderableType] = []
    if content.label:
        parts.append(Text(content.label, style="bold bright_cyan"))
    parts.extend(highlight_value(value) for value in content.values)
    return Group(*parts)


def _render_custom(content: CustomContent, payload_type: str) -> RenderableType:
    return Group(Text(content.label, style="bold cyan"), Text(content.content))


def _render_exception(content: ExceptionContent, payload_type: str) -> RenderableType:
    return Group(
        Text(content.class_name, style="bold red"),
        Text(content.message, style="red"),
        Text(""),
        Text("Stack Trace:", style="bold grey50"),
        *_frame_lines(content.frames, EXCEPTION_FRAME_LIMIT),
    )


def _render_query(content: QueryContent, payload_type: str) -> RenderableType:
    is_slow = payload_type == "slow_query" or content.is_slow
    is_duplicate = payload_type == "duplicate_query" or content.is_duplicate
    parts: list[RenderableType] = []
    if is_slow:
        parts.append(Text("⚠ SLOW QUERY", style="bold bright_yellow"))
    if is_duplicate:
        parts.append(Text("⚠ DUPLICATE QUERY", style="bold bright_magenta"))
    parts.append(highlighted(content.sql, "sql"))
    if content.bindings:
        parts.append(Text(""))
        parts.append(Text("Bindings:"))
        parts.append(highlight_value(list(content.bindings)))
    if content.time is not None:
        parts.append(
            Text(f"Time: {stringify(content.time)}ms", style="bright_yellow" if is_slow else "")
        )
    if content.connection_name:
        parts.append(Text(f"Connection: {content.connection_name}"))
    return Group(*parts)


def _render_table(content: TableContent, payload_type: str) -> RenderableType:
    if not content.rows:
        return Text("Empty table", style="grey50")
    table = Table(title=content.label, header_style="bold cyan", show_edge=False)
    keys = list(content.rows[0].keys())
    for key in keys:
        table.add_column(str(key))
    for row in content.rows[:TABLE_ROW_LIMIT]:
        table.add_row(*(stringify(row.get(key, ""), 0) for key in keys))
    if len(content.rows) > TABLE_ROW_LIMIT:
        return Group(
            table, Text(f"... {len(content.rows) - TABLE_ROW_LIMIT} more rows", style="grey50")
        )
    return table


def _render_trace(content: TraceContent, payload_type: str) -> RenderableType:
    return Group(
        Text("Stack Trace:", style="bold grey50"),
        *_frame_lines(content.frames, TRACE_FRAME_LIMIT),
    )


def _render_notify(content: NotifyContent, payload_type: str) -> RenderableType:
    return Panel(Text(content.value, style="yellow"), border_style="yellow", expand=False)


def _render_measure(content: MeasureContent, payload_type: str) -> RenderableType:
    parts: list[RenderableType] = [Text(content.name, style="bold blue")]
    if content.total_time is not None:
        parts.append(Text(f"Time: {stringify(content.total_time)}ms"))
    if content.max_memory_usage_during_total_time is not None:
        megabytes = content.max_memory_usage_during_total_time / 1024 / 1024
        parts.append(Text(f"Memory: {megabytes:.2f}MB"))
    return Group(*parts)


def _render_bool(content: BoolContent, payload_type: str) -> RenderableType:
    return Text(stringify(content.value), style="bold green" if content.value else "bold red")


def _render_null(content: NullContent, payload_type: str) -> RenderableType:
    return Text("null", style="italic grey50")


def _render_carbon(content: CarbonContent, payload_type: str) -> RenderableType:
    parts: list[RenderableType] = [Text(content.formatted, style="cyan")]
    if content.timezone:
        parts.append(Text(f"Timezone: {content.timezone}", style="grey50"))
    return Group(*parts)


def _render_application_log(content: ApplicationLogContent, payload_type: str) -> RenderableType:
    parts: list[RenderableType] = []
    if content.level:
        color = LEVEL_COLORS.get(content.level.lower(), "white")
        parts.append(Text(f"[{content.level.upper()}]", style=f"bold {color}"))
    parts.append(Text(content.value))
    if content.context:
        parts.append(Text(""))
        parts.append(Text("Context:"))
        parts.append(highlight_value(content.context))
    return Group(*parts)


def _render_text(content: TextContent, payload_type: str) -> RenderableType:
    return Text(content.content)


def _render_html(content: HtmlContent, payload_type: str) -> RenderableType:
    return Group(Text("(HTML)", style="italic"), highlighted(content.content, "html"))


def _render_xml(content: XmlContent, payload_type: str) -> RenderableType:
    return Group(Text("(XML)", style="italic"), highlighted(content.value, "xml"))


def _render_json(content: JsonContent, payload_type: str) -> RenderableType:
    return highlight_value(content.value)


def _render_image(content: ImageContent, payload_type: str) -> RenderableType:
    parts: list[RenderableType] = [Text("Image", style="bold yellow")]
    if content.url:
        parts.append(Text(f"URL: {content.url}"))
    if content.path:
        parts.append(Text(f"Path: {content.path}"))
    return Group(*parts)


def _render_caller(content: CallerContent, payload_type: str) -> RenderableType:
    frame = content.frame
    line = Text()
    line.append(frame.file_name, style="bright_cyan")
    line.append(f":{frame.line_number}", style="bright_yellow")
    name = frame.callable_name()
    if name:
        line.append(" in ")
        line.append(name, style="bright_magenta")
    return Group(Text("Called from:"), line)


def _render_file_contents(content: FileContentsContent, payload_type: str) -> RenderableType:
    return Group(
        Text(content.file, style="bold bright_cyan"),
        highlighted(content.contents, language_for_file(content.file)),
    )


def _render_separator(content: SeparatorContent, payload_type: str) -> RenderableType:
    return Rule(style="white")


def _render_generic(content: Any, payload_type: str) -> RenderableType:
    raw = content.raw if isinstance(content, GenericContent) else content
    return Group(Text(f"({payload_type})", style="italic"), highlight_value(raw))


RENDERERS: Final[dict[type, Callable[[Any, str], RenderableType]]] = {
    LogContent: _render_log,
    CustomContent: _render_custom,
    ExceptionContent: _render_exception,
    QueryContent: _render_query,
    TableContent: _render_table,
    TraceContent: _render_trace,
    NotifyContent: _render_notify,
    MeasureContent: _render_measure,
    BoolContent: _render_bool,
    NullContent: _render_null,
    CarbonContent: _render_carbon,
    ApplicationLogContent: _render_application_log,
    TextContent: _render_text,
    HtmlContent: _render_html,
    XmlContent: _render_xml,
    JsonContent: _render_json,
    ImageContent: _render_image,
    CallerContent: _render_caller,
    FileContentsContent: _render_file_contents,
    SeparatorContent: _render_separator,
    GenericContent: _render_generic,
}


def render_detail(payload: StoredPayload) -> RenderableType:
    renderer = RENDERERS.get(type(payload.content), _render_generic)
    return renderer(payload.content, payload.type)


def format_relative_time(timestamp: dt.datetime, now: dt.datetime | None = None) -> str:
    current = now or dt.datetime.now(dt.UTC)
    seconds = max(int((current - timestamp).total_seconds()), 0)
    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    return f"{minutes // 60}h ago"


def render_header(payload: StoredPayload, now: dt.datetime | None = None) -> RenderableType:
    title = Text(payload.type.upper(), style=f"bold {entry_color(payload)}")
    if payload.label:
        title.append(f" - {payload.label}", style="cyan")
    lines: list[RenderableType] = [title]

    local_time = payload.timestamp.astimezone().strftime("%H:%M:%S")
    lines.append(
        Text.assemble(
            "Time: ",
            (local_time, "bright_white"),
            f" ({format_relative_time(payload.timestamp, now)})",
        )
    )
    origin = payload.origin
    if origin:
        lines.append(
            Text.assemble(
                "File: ", (origin.file, "bright_cyan"), (f":{origin.line_number}", "bright_yellow")
            )
        )
        if origin.function_name:
            name = origin.function_name
            if origin.class_name:
                name = f"{origin.class_name}::{name}"
            lines.append(Text.assemble("Function: ", (name, "bright_magenta")))
        if origin.hostname:
            lines.append(Text.assemble("Host: ", (origin.hostname, "bright_white")))
    meta = payload.meta
    if meta and meta.project_name:
        lines.append(Text.assemble("Project: ", (meta.project_name, "bright_white")))
    if payload.screen:
        lines.append(Text.assemble("Screen: ", (payload.screen, "bright_white")))
    return Group(*lines)


def render_payload(payload: StoredPayload, now: dt.datetime | None = None) -> RenderableType:
    """Header, content and version footer of one payload."""

    parts: list[RenderableType] = [
        render_header(payload, now),
        Rule(style="grey50"),
        render_detail(payload),
    ]
    if payload.meta:
        versions = payload.meta.versions_line()
        if versions:
            parts.append(Text(versions, style="dim"))
    return Group(*parts)
