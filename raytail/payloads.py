from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final

DIRECTIVE_TYPES: Final[tuple[str, ...]] = (
    "color",
    "label",
    "size",
    "new_screen",
    "clear_all",
    "hide",
    "remove",
    "show_app",
    "hide_app",
    "confetti",
)

# Desktop-app commands with no meaning in a terminal.
NOOP_TYPES: Final[frozenset[str]] = frozenset({"show_app", "hide_app", "confetti"})

ENTRY_TYPES: Final[tuple[str, ...]] = (
    "log",
    "custom",
    "table",
    "exception",
    "trace",
    "executed_query",
    "slow_query",
    "duplicate_query",
    "html",
    "json",
    "image",
    "text",
    "separator",
    "notify",
    "measure",
    "caller",
    "bool",
    "null",
    "carbon",
    "application_log",
    "file_contents",
    "xml",
)

SIZES: Final[frozenset[str]] = frozenset({"sm", "lg"})


class ContentError(ValueError):
    """Raised when a payload's content cannot be used for its type."""


def _require_mapping(raw: Any, payload_type: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ContentError(f"{payload_type} content must be an object")
    return raw


def _require(raw: Mapping[str, Any], key: str, payload_type: str) -> Any:
    if key not in raw or raw[key] is None:
        raise ContentError(f"{payload_type} content is missing '{key}'")
    return raw[key]


def _require_str(raw: Mapping[str, Any], key: str, payload_type: str) -> str:
    value = _require(raw, key, payload_type)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ContentError(f"{payload_type} '{key}' must be a string")


def _optional_str(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _optional_number(raw: Mapping[str, Any], key: str) -> float | None:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def safe_int(value: Any, default: int = 0) -> int:
    """Coerce a JSON scalar to int; NaN, infinities and junk give ``default``."""

    try:
        return int(value or 0)
    except (TypeError, ValueError, OverflowError):
        return default


def _optional_bool(raw: Mapping[str, Any], key: str) -> bool | None:
    value = raw.get(key)
    return value if isinstance(value, bool) else None


@dataclass(frozen=True, slots=True)
class StackFrame:
    file_name: str
    line_number: int
    class_name: str | None = None
    method: str | None = None
    vendor_frame: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> StackFrame | None:
        if not isinstance(raw, Mapping):
            return None
        file_name = raw.get("file_name")
        if not isinstance(file_name, str):
            return None
        return cls(
            file_name=file_name,
            line_number=safe_int(raw.get("line_number")),
            class_name=_optional_str(raw, "class"),
            method=_optional_str(raw, "method"),
            vendor_frame=bool(raw.get("vendor_frame")),
        )

    def location(self) -> str:
        return f"{self.file_name}:{self.line_number}"

    def callable_name(self) -> str | None:
        if not self.method:
            return None
        if self.class_name:
            return f"{self.class_name}::{self.method}"
        return self.method


def _parse_frames(raw: Any) -> tuple[StackFrame, ...]:
    if not isinstance(raw, list):
        return ()
    frames = (StackFrame.from_dict(item) for item in raw)
    return tuple(frame for frame in frames if frame is not None)


@dataclass(frozen=True, slots=True)
class LogContent:
    values: tuple[Any, ...]
    label: str | None = None

    @classmethod
    def parse(cls, raw: Any) -> LogContent:
        data = _require_mapping(raw, "log")
        values = _require(data, "values", "log")
        if not isinstance(values, list):
            raise ContentError("log 'values' must be a list")
        return cls(values=tuple(values), label=_optional_str(data, "label"))


@dataclass(frozen=True, slots=True)
class CustomContent:
    content: str
    label: str

    @classmethod
    def parse(cls, raw: Any) -> CustomContent:
        data = _require_mapping(raw, "custom")
        content = _require(data, "content", "custom")
        label = _require(data, "label", "custom")
        return cls(
            content=content if isinstance(content, str) else str(content),
            label=label if isinstance(label, str) else str(label),
        )


@dataclass(frozen=True, slots=True)
class TableContent:
    rows: tuple[dict[str, Any], ...]
    label: str | None = None

    @classmethod
    def parse(cls, raw: Any) -> TableContent:
        data = _require_mapping(raw, "table")
        values = _require(data, "values", "table")
        if isinstance(values, Mapping):
            # Ray sends associative arrays as objects keyed by row name.
            values = list(values.values())
        if not isinstance(values, list):
            raise ContentError("table 'values' must be a list")
        rows = tuple(
            dict(row) if isinstance(row, Mapping) else {"value": row} for row in values
        )
        return cls(rows=rows, label=_optional_str(data, "label"))


@dataclass(frozen=True, slots=True)
class ExceptionContent:
    class_name: str
    message: str
    frames: tuple[StackFrame, ...] = ()

    @classmethod
    def parse(cls, raw: Any) -> ExceptionContent:
        data = _require_mapping(raw, "exception")
        return cls(
            class_name=_require_str(data, "class", "exception"),
            message=_require_str(data, "message", "exception"),
            frames=_parse_frames(data.get("frames")),
        )


@dataclass(frozen=True, slots=True)
class TraceContent:
    frames: tuple[StackFrame, ...]

    @classmethod
    def parse(cls, raw: Any) -> TraceContent:
        data = _require_mapping(raw, "trace")
        frames = _require(data, "frames", "trace")
        if not isinstance(frames, list):
            raise ContentError("trace 'frames' must be a list")
        return cls(frames=_parse_frames(frames))


@dataclass(frozen=True, slots=True)
class QueryContent:
    sql: str
    bindings: tuple[Any, ...] = ()
    time: float | None = None
    connection_name: str | None = None
    is_slow: bool = False
    is_duplicate: bool = False

    @classmethod
    def parse(cls, raw: Any) -> QueryContent:
        data = _require_mapping(raw, "query")
        bindings = data.get("bindings")
        return cls(
            sql=_require_str(data, "sql", "query"),
            bindings=tuple(bindings) if isinstance(bindings, list) else (),
            time=_optional_number(data, "time"),
            connection_name=_optional_str(data, "connection_name"),
            is_slow=bool(_optional_bool(data, "is_slow")),
            is_duplicate=bool(_optional_bool(data, "is_duplicate")),
        )


@dataclass(frozen=True, slots=True)
class TextContent:
    content: str

    @classmethod
    def parse(cls, raw: Any) -> TextContent:
        data = _require_mapping(raw, "text")
        return cls(content=_require_str(data, "content", "text"))


@dataclass(frozen=True, slots=True)
class HtmlContent:
    content: str

    @classmethod
    def parse(cls, raw: Any) -> HtmlContent:
        data = _require_mapping(raw, "html")
        return cls(content=_require_str(data, "content", "html"))


@dataclass(frozen=True, slots=True)
class XmlContent:
    value: str

    @classmethod
    def parse(cls, raw: Any) -> XmlContent:
        data = _require_mapping(raw, "xml")
        return cls(value=_require_str(data, "value", "xml"))


@dataclass(frozen=True, slots=True)
class JsonContent:
    value: Any

    @classmethod
    def parse(cls, raw: Any) -> JsonContent:
        data = _require_mapping(raw, "json")
        if "value" not in data:
            raise ContentError("json content is missing 'value'")
        return cls(value=data["value"])


@dataclass(frozen=True, slots=True)
class ImageContent:
    url: str | None = None
    path: str | None = None
    location: str | None = None

    @classmethod
    def parse(cls, raw: Any) -> ImageContent:
        data = _require_mapping(raw, "image")
        return cls(
            url=_optional_str(data, "url"),
            path=_optional_str(data, "path"),
            location=_optional_str(data, "location"),
        )


@dataclass(frozen=True, slots=True)
class SeparatorContent:
    @classmethod
    def parse(cls, raw: Any) -> SeparatorContent:
        return cls()


@dataclass(frozen=True, slots=True)
class NotifyContent:
    value: str

    @classmethod
    def parse(cls, raw: Any) -> NotifyContent:
        data = _require_mapping(raw, "notify")
        return cls(value=_require_str(data, "value", "notify"))


@dataclass(frozen=True, slots=True)
class MeasureContent:
    name: str
    total_time: float | None = None
    max_memory_usage_during_total_time: float | None = None
    is_new_timer: bool = False

    @classmethod
    def parse(cls, raw: Any) -> MeasureContent:
        data = _require_mapping(raw, "measure")
        return cls(
            name=_require_str(data, "name", "measure"),
            total_time=_optional_number(data, "total_time"),
            max_memory_usage_during_total_time=_optional_number(
                data, "max_memory_usage_during_total_time"
            ),
            is_new_timer=bool(_optional_bool(data, "is_new_timer")),
        )


@dataclass(frozen=True, slots=True)
class CallerContent:
    frame: StackFrame

    @classmethod
    def parse(cls, raw: Any) -> CallerContent:
        data = _require_mapping(raw, "caller")
        frame = StackFrame.from_dict(data.get("frame"))
        if frame is None:
            raise ContentError("caller content is missing a usable 'frame'")
        return cls(frame=frame)


@dataclass(frozen=True, slots=True)
class BoolContent:
    value: bool

    @classmethod
    def parse(cls, raw: Any) -> BoolContent:
        data = _require_mapping(raw, "bool")
        value = data.get("value")
        if not isinstance(value, bool):
            raise ContentError("bool 'value' must be a boolean")
        return cls(value=value)


@dataclass(frozen=True, slots=True)
class NullContent:
    @classmethod
    def parse(cls, raw: Any) -> NullContent:
        return cls()


@dataclass(frozen=True, slots=True)
class CarbonContent:
    formatted: str
    timestamp: float | None = None
    timezone: str | None = None

    @classmethod
    def parse(cls, raw: Any) -> CarbonContent:
        data = _require_mapping(raw, "carbon")
        return cls(
            formatted=_require_str(data, "formatted", "carbon"),
            timestamp=_optional_number(data, "timestamp"),
            timezone=_optional_str(data, "timezone"),
        )


@dataclass(frozen=True, slots=True)
class ApplicationLogContent:
    value: str
    level: str | None = None
    context: dict[str, Any] | None = None

    @classmethod
    def parse(cls, raw: Any) -> ApplicationLogContent:
        data = _require_mapping(raw, "application_log")
        context = data.get("context")
        return cls(
            value=_require_str(data, "value", "application_log"),
            level=_optional_str(data, "level"),
            context=dict(context) if isinstance(context, Mapping) else None,
        )


@dataclass(frozen=True, slots=True)
class FileContentsContent:
    file: str
    contents: str

    @classmethod
    def parse(cls, raw: Any) -> FileContentsContent:
        data = _require_mapping(raw, "file_contents")
        return cls(
            file=_require_str(data, "file", "file_contents"),
            contents=_optional_str(data, "contents") or "",
        )


@dataclass(frozen=True, slots=True)
class ColorContent:
    color: str

    @classmethod
    def parse(cls, raw: Any) -> ColorContent:
        data = _require_mapping(raw, "color")
        return cls(color=_require_str(data, "color", "color"))


@dataclass(frozen=True, slots=True)
class LabelContent:
    label: str

    @classmethod
    def parse(cls, raw: Any) -> LabelContent:
        data = _require_mapping(raw, "label")
        return cls(label=_require_str(data, "label", "label"))


@dataclass(frozen=True, slots=True)
class SizeContent:
    size: str

    @classmethod
    def parse(cls, raw: Any) -> SizeContent:
        data = _require_mapping(raw, "size")
        size = _require_str(data, "size", "size")
        if size not in SIZES:
            raise ContentError(f"size must be one of {sorted(SIZES)}, got {size!r}")
        return cls(size=size)


@dataclass(frozen=True, slots=True)
class NewScreenContent:
    name: str

    @classmethod
    def parse(cls, raw: Any) -> NewScreenContent:
        data = _require_mapping(raw, "new_screen")
        name = _optional_str(data, "name")
        return cls(name=name.strip() if name and name.strip() else "default")


@dataclass(frozen=True, slots=True)
class EmptyContent:
    """Content of directives that carry no data (clear_all, hide, remove, no-ops)."""

    @classmethod
    def parse(cls, raw: Any) -> EmptyContent:
        return cls()


@dataclass(frozen=True, slots=True)
class GenericContent:
    """Raw content of a payload type this viewer does not know."""

    raw: Any

    @classmethod
    def parse(cls, raw: Any) -> GenericContent:
        return cls(raw=raw)


Content = (
    LogContent
    | CustomContent
    | TableContent
    | ExceptionContent
    | TraceContent
    | QueryContent
    | TextContent
    | HtmlContent
    | XmlContent
    | JsonContent
    | ImageContent
    | SeparatorContent
    | NotifyContent
    | MeasureContent
    | CallerContent
    | BoolContent
    | NullContent
    | CarbonContent
    | ApplicationLogContent
    | FileContentsContent
    | ColorContent
    | LabelContent
    | SizeContent
    | NewScreenContent
    | EmptyContent
    | GenericContent
)

CONTENT_PARSERS: Final[dict[str, Callable[[Any], Content]]] = {
    "log": LogContent.parse,
    "custom": CustomContent.parse,
    "table": TableContent.parse,
    "exception": ExceptionContent.parse,
    "trace": TraceContent.parse,
    "executed_query": QueryContent.parse,
    "slow_query": QueryContent.parse,
    "duplicate_query": QueryContent.parse,
    "html": HtmlContent.parse,
    "json": JsonContent.parse,
    "image": ImageContent.parse,
    "text": TextContent.parse,
    "separator": SeparatorContent.parse,
    "notify": NotifyContent.parse,
    "measure": MeasureContent.parse,
    "caller": CallerContent.parse,
    "bool": BoolContent.parse,
    "null": NullContent.parse,
    "carbon": CarbonContent.parse,
    "application_log": ApplicationLogContent.parse,
    "file_contents": FileContentsContent.parse,
    "xml": XmlContent.parse,
    "color": ColorContent.parse,
    "label": LabelContent.parse,
    "size": SizeContent.parse,
    "new_screen": NewScreenContent.parse,
    "clear_all": EmptyContent.parse,
    "hide": EmptyContent.parse,
    "remove": EmptyContent.parse,
    "show_app": EmptyContent.parse,
    "hide_app": EmptyContent.parse,
    "confetti": EmptyContent.parse,
}


def parse_content(payload_type: str, raw: Any) -> Content:
    """Turn raw payload content into the variant for ``payload_type``.

    Unknown types are wrapped verbatim in :class:`GenericContent`. Raises
    :class:`ContentError` when a known type's content is structurally unusable.
    """

    parser = CONTENT_PARSERS.get(payload_type)
    if parser is None:
        return GenericContent(raw=raw)
    return parser(raw)
