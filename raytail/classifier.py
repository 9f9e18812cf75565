from __future__ import annotations

import json
import re
from collections.abc import Callable
from pathlib import PurePath
from typing import Any, Final

from .payloads import (
    ApplicationLogContent,
    BoolContent,
    CallerContent,
    CarbonContent,
    Content,
    CustomContent,
    ExceptionContent,
    FileContentsContent,
    HtmlContent,
    ImageContent,
    JsonContent,
    LogContent,
    MeasureContent,
    NotifyContent,
    NullContent,
    QueryContent,
    SeparatorContent,
    TableContent,
    TextContent,
    TraceContent,
    XmlContent,
)
from .store.types import StoredPayload

PREVIEW_LENGTH = 50
SEPARATOR_PREVIEW = "─" * 8

_SQL_RE = re.compile(
    r"^\s*(SELECT|INSERT|UPDATE|DELETE|CREATE|ALTER|DROP|TRUNCATE|WITH)\s", re.IGNORECASE
)
_XMLNS_RE = re.compile(r"<[a-z]+[^>]*xmlns", re.IGNORECASE)
_JAVASCRIPT_RE = re.compile(
    r"^(function\s|const\s|let\s|var\s|class\s|async\s|export\s|import\s"
    r"|\([^)]*\)\s*=>|[a-zA-Z_$][a-zA-Z0-9_$]*\s*=\s*function)"
)
_CSS_RULE_RE = re.compile(r"^[.#@][a-zA-Z].*\{")
_CSS_DECLARATION_RE = re.compile(r"^[a-z-]+\s*:\s*[^;]+;", re.IGNORECASE)


def detect_language(text: str) -> str | None:
    """Guess the language of a free-form string for syntax highlighting.

    Container formats are checked before keyword heuristics, so a JSON
    object holding SQL-looking strings still comes back as ``json``.
    """

    trimmed = text.strip()

    if trimmed.startswith("<") and ("</" in trimmed or "/>" in trimmed):
        lowered = trimmed.lower()
        if "<script" in lowered or "</script>" in lowered:
            return "html"
        if trimmed.startswith("<?xml") or _XMLNS_RE.search(trimmed):
            return "xml"
        return "html"

    if (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    ):
        try:
            json.loads(trimmed)
        except ValueError:
            pass
        else:
            return "json"

    if _SQL_RE.match(trimmed):
        return "sql"

    if trimmed.startswith("<?php") or trimmed.startswith("<?="):
        return "php"

    if _JAVASCRIPT_RE.match(trimmed):
        return "javascript"

    if _CSS_RULE_RE.match(trimmed) or _CSS_DECLARATION_RE.match(trimmed):
        return "css"

    return None


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stringify(value: Any, indent: int = 2) -> str:
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    try:
        if indent:
            return json.dumps(value, ensure_ascii=False, indent=indent)
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return repr(value)


def truncate(text: str, max_length: int = PREVIEW_LENGTH) -> str:
    single_line = text.replace("\n", " ").strip()
    if len(single_line) <= max_length:
        return single_line
    return single_line[: max(max_length - 3, 0)] + "..."


def _preview_log(content: LogContent, limit: int) -> str:
    return truncate(", ".join(stringify(v, 0) for v in content.values), limit)


def _preview_custom(content: CustomContent, limit: int) -> str:
    return truncate(content.content, limit)


def _preview_exception(content: ExceptionContent, limit: int) -> str:
    return truncate(f"{content.class_name}: {content.message}", limit)


def _preview_query(content: QueryContent, limit: int) -> str:
    return truncate(content.sql, limit)


def _preview_table(content: TableContent, limit: int) -> str:
    return f"{len(content.rows)} rows"


def _preview_trace(content: TraceContent, limit: int) -> str:
    return f"{len(content.frames)} frames"


def _preview_notify(content: NotifyContent, limit: int) -> str:
    return truncate(content.value, limit)


def _preview_measure(content: MeasureContent, limit: int) -> str:
    if content.total_time is not None:
        return f"{content.name}: {_format_number(content.total_time)}ms"
    return content.name


def _preview_bool(content: BoolContent, limit: int) -> str:
    return stringify(content.value)


def _preview_null(content: NullContent, limit: int) -> str:
    return "null"


def _preview_carbon(content: CarbonContent, limit: int) -> str:
    return content.formatted


def _preview_application_log(content: ApplicationLogContent, limit: int) -> str:
    return truncate(content.value, limit)


def _preview_text(content: TextContent | HtmlContent, limit: int) -> str:
    return truncate(content.content, limit)


def _preview_xml(content: XmlContent, limit: int) -> str:
    return truncate(content.value, limit)


def _preview_json(content: JsonContent, limit: int) -> str:
    return truncate(stringify(content.value, 0), limit)


def _preview_image(content: ImageContent, limit: int) -> str:
    return truncate(content.url or content.path or "Image", limit)


def _preview_caller(content: CallerContent, limit: int) -> str:
    return content.frame.location()


def _preview_file_contents(content: FileContentsContent, limit: int) -> str:
    return truncate(content.file, limit)


def _preview_separator(content: SeparatorContent, limit: int) -> str:
    return SEPARATOR_PREVIEW


PREVIEWERS: Final[dict[type, Callable[[Any, int], str]]] = {
    LogContent: _preview_log,
    CustomContent: _preview_custom,
    ExceptionContent: _preview_exception,
    QueryContent: _preview_query,
    TableContent: _preview_table,
    TraceContent: _preview_trace,
    NotifyContent: _preview_notify,
    MeasureContent: _preview_measure,
    BoolContent: _preview_bool,
    NullContent: _preview_null,
    CarbonContent: _preview_carbon,
    ApplicationLogContent: _preview_application_log,
    TextContent: _preview_text,
    HtmlContent: _preview_text,
    XmlContent: _preview_xml,
    JsonContent: _preview_json,
    ImageContent: _preview_image,
    CallerContent: _preview_caller,
    FileContentsContent: _preview_file_contents,
    SeparatorContent: _preview_separator,
}


def preview_content(payload_type: str, content: Content, max_length: int = PREVIEW_LENGTH) -> str:
    previewer = PREVIEWERS.get(type(content))
    if previewer is None:
        return payload_type
    return previewer(content, max_length)


def preview_text(payload: StoredPayload, max_length: int = PREVIEW_LENGTH) -> str:
    """Single-line summary of a stored payload for list views."""

    return preview_content(payload.type, payload.content, max_length)


FALLBACK_COLOR = "bright_white"

TYPE_COLORS: Final[dict[str, str]] = {
    "log": "bright_green",
    "custom": "bright_cyan",
    "exception": "bright_red",
    "executed_query": "bright_blue",
    "slow_query": "bright_yellow",
    "duplicate_query": "bright_magenta",
    "table": "bright_cyan",
    "trace": "white",
    "notify": "bright_yellow",
    "measure": "bright_blue",
    "bool": "bright_green",
    "null": "white",
    "carbon": "bright_cyan",
    "application_log": "bright_green",
    "text": "bright_white",
    "html": "bright_magenta",
    "xml": "bright_magenta",
    "json": "bright_cyan",
    "image": "bright_yellow",
    "caller": "white",
    "file_contents": "bright_blue",
    "separator": "white",
}

# Colors accepted by Ray's ->color() helper.
RAY_COLORS: Final[dict[str, str]] = {
    "green": "green",
    "orange": "dark_orange",
    "red": "red",
    "purple": "magenta",
    "blue": "blue",
    "gray": "grey50",
    "grey": "grey50",
}


def type_color(payload_type: str) -> str:
    return TYPE_COLORS.get(payload_type, FALLBACK_COLOR)


def entry_color(payload: StoredPayload) -> str:
    if payload.color:
        return RAY_COLORS.get(payload.color.strip().lower(), type_color(payload.type))
    return type_color(payload.type)


SHORT_TYPE_LABELS: Final[dict[str, str]] = {
    "executed_query": "query",
    "slow_query": "slow",
    "duplicate_query": "dup",
    "application_log": "app_log",
    "file_contents": "file",
}


def short_type_label(payload_type: str) -> str:
    return SHORT_TYPE_LABELS.get(payload_type, payload_type)


FILE_LANGUAGES: Final[dict[str, str]] = {
    "php": "php",
    "js": "javascript",
    "ts": "typescript",
    "jsx": "javascript",
    "tsx": "typescript",
    "json": "json",
    "html": "html",
    "css": "css",
    "sql": "sql",
    "py": "python",
    "rb": "ruby",
    "go": "go",
    "rs": "rust",
    "java": "java",
    "xml": "xml",
    "yml": "yaml",
    "yaml": "yaml",
    "md": "markdown",
    "sh": "bash",
    "bash": "bash",
}


def language_for_file(path: str) -> str:
    suffix = PurePath(path).suffix.lstrip(".").lower()
    return FILE_LANGUAGES.get(suffix, "text")
