from __future__ import annotations

import dataclasses
import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..payloads import Content, GenericContent, safe_int


class InvalidRequestError(ValueError):
    """Raised when a request envelope lacks a uuid or a payloads list."""


@dataclass(frozen=True, slots=True)
class RayOrigin:
    file: str
    line_number: int
    function_name: str | None = None
    class_name: str | None = None
    hostname: str | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> RayOrigin | None:
        if not isinstance(raw, Mapping):
            return None
        file = raw.get("file")
        if not isinstance(file, str):
            return None

        def _text(key: str) -> str | None:
            value = raw.get(key)
            return value if isinstance(value, str) and value else None

        return cls(
            file=file,
            line_number=safe_int(raw.get("line_number")),
            function_name=_text("function_name"),
            class_name=_text("class_name"),
            hostname=_text("hostname"),
        )


@dataclass(frozen=True, slots=True)
class RayMeta:
    php_version: str | None = None
    php_version_id: int | None = None
    project_name: str | None = None
    ray_package_version: str | None = None
    laravel_version: str | None = None
    laravel_ray_package_version: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> RayMeta | None:
        if not isinstance(raw, Mapping):
            return None
        known = {f.name for f in dataclasses.fields(cls)} - {"extra"}
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in raw.items():
            if key not in known:
                extra[str(key)] = value
                continue
            if key == "php_version_id":
                values[key] = value if isinstance(value, int) else None
            elif value is not None:
                values[key] = str(value)
        return cls(**values, extra=extra)

    def versions_line(self) -> str:
        parts: list[str] = []
        if self.php_version:
            parts.append(f"PHP {self.php_version}")
        if self.laravel_version:
            parts.append(f"Laravel {self.laravel_version}")
        if self.ray_package_version:
            parts.append(f"ray {self.ray_package_version}")
        return " | ".join(parts)


@dataclass(frozen=True, slots=True)
class RayPayload:
    type: str
    content: Any
    origin: RayOrigin | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> RayPayload:
        payload_type = raw.get("type")
        return cls(
            type=payload_type if isinstance(payload_type, str) else str(payload_type),
            content=raw.get("content"),
            origin=RayOrigin.from_dict(raw.get("origin")),
        )


@dataclass(frozen=True, slots=True)
class RayRequest:
    uuid: str
    payloads: tuple[RayPayload, ...]
    meta: RayMeta | None = None

    @classmethod
    def from_dict(cls, data: Any) -> RayRequest:
        if not isinstance(data, Mapping):
            raise InvalidRequestError("request must be an object")
        uuid = data.get("uuid")
        payloads = data.get("payloads")
        if not isinstance(uuid, str) or not uuid:
            raise InvalidRequestError("request is missing 'uuid'")
        if not isinstance(payloads, list):
            raise InvalidRequestError("request is missing a 'payloads' list")
        return cls(
            uuid=uuid,
            payloads=tuple(
                RayPayload.from_dict(item) for item in payloads if isinstance(item, Mapping)
            ),
            meta=RayMeta.from_dict(data.get("meta")),
        )


@dataclass(slots=True)
class StoredPayload:
    id: int
    uuid: str
    type: str
    content: Content
    timestamp: dt.datetime
    screen: str
    origin: RayOrigin | None = None
    meta: RayMeta | None = None
    color: str | None = None
    label: str | None = None
    size: str | None = None
    hidden: bool = False

    def to_dict(self) -> dict[str, Any]:
        content = self.content
        if isinstance(content, GenericContent):
            content_data: Any = content.raw
        else:
            content_data = dataclasses.asdict(content)
        return {
            "id": self.id,
            "uuid": self.uuid,
            "type": self.type,
            "content": content_data,
            "timestamp": self.timestamp.isoformat(),
            "screen": self.screen,
            "origin": dataclasses.asdict(self.origin) if self.origin else None,
            "meta": dataclasses.asdict(self.meta) if self.meta else None,
            "color": self.color,
            "label": self.label,
            "size": self.size,
            "hidden": self.hidden,
        }
