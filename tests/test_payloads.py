from __future__ import annotations

import pytest

from raytail.payloads import (
    CONTENT_PARSERS,
    DIRECTIVE_TYPES,
    ENTRY_TYPES,
    ContentError,
    CustomContent,
    ExceptionContent,
    GenericContent,
    NewScreenContent,
    QueryContent,
    StackFrame,
    TableContent,
    parse_content,
    safe_int,
)
from raytail.store import InvalidRequestError, RayMeta, RayOrigin, RayRequest


def test_every_known_type_has_a_parser() -> None:
    assert set(CONTENT_PARSERS) == set(ENTRY_TYPES) | set(DIRECTIVE_TYPES)
    assert not set(ENTRY_TYPES) & set(DIRECTIVE_TYPES)


def test_safe_int() -> None:
    assert safe_int(12) == 12
    assert safe_int("7") == 7
    assert safe_int(3.9) == 3
    assert safe_int(None) == 0
    assert safe_int("twelve") == 0
    assert safe_int(float("inf")) == 0
    assert safe_int(float("nan"), default=-1) == -1


def test_parse_exception_drops_malformed_frames() -> None:
    content = parse_content(
        "exception",
        {
            "class": "RuntimeException",
            "message": "boom",
            "frames": [
                {"file_name": "a.php", "line_number": 3, "class": "A", "method": "run"},
                "garbage",
                {"line_number": 9},
            ],
        },
    )

    assert isinstance(content, ExceptionContent)
    assert content.frames == (
        StackFrame(file_name="a.php", line_number=3, class_name="A", method="run"),
    )
    assert content.frames[0].callable_name() == "A::run"


def test_parse_query_defaults() -> None:
    content = parse_content("slow_query", {"sql": "select 1", "time": 12.5})

    assert content == QueryContent(sql="select 1", time=12.5)


def test_parse_table_accepts_keyed_rows() -> None:
    content = parse_content("table", {"values": {"first": {"a": 1}, "second": 2}})

    assert isinstance(content, TableContent)
    assert content.rows == ({"a": 1}, {"value": 2})


@pytest.mark.parametrize(
    ("payload_type", "raw"),
    [
        ("log", None),
        ("log", {"values": {"a": 1}}),
        ("exception", {"message": "no class"}),
        ("executed_query", {"sql": ["not", "text"]}),
        ("bool", {"value": "yes"}),
        ("caller", {"frame": "nowhere"}),
        ("size", {"size": "xl"}),
        ("label", {}),
        ("json", {}),
    ],
)
def test_unusable_content_raises(payload_type: str, raw: object) -> None:
    with pytest.raises(ContentError):
        parse_content(payload_type, raw)


def test_unknown_type_is_generic() -> None:
    assert parse_content("expand", [1, 2]) == GenericContent(raw=[1, 2])


def test_new_screen_without_name_uses_default() -> None:
    assert parse_content("new_screen", {"name": "  "}) == NewScreenContent(name="default")


def test_request_from_dict_requires_envelope() -> None:
    with pytest.raises(InvalidRequestError):
        RayRequest.from_dict({"payloads": []})
    with pytest.raises(InvalidRequestError):
        RayRequest.from_dict({"uuid": "abc"})
    with pytest.raises(InvalidRequestError):
        RayRequest.from_dict({"uuid": "abc", "payloads": {}})
    with pytest.raises(InvalidRequestError):
        RayRequest.from_dict(["uuid"])


def test_request_from_dict_skips_non_object_payloads() -> None:
    request = RayRequest.from_dict(
        {"uuid": "abc", "payloads": [{"type": "null", "content": {}}, "junk", 3]}
    )

    assert [p.type for p in request.payloads] == ["null"]


def test_origin_and_meta_parsing() -> None:
    assert RayOrigin.from_dict({"line_number": 3}) is None
    origin = RayOrigin.from_dict(
        {"file": "x.php", "line_number": "7", "function_name": "go", "class_name": "C"}
    )
    assert origin == RayOrigin(file="x.php", line_number=7, function_name="go", class_name="C")

    meta = RayMeta.from_dict({"php_version": "8.3", "laravel_version": "11", "custom": 1})
    assert meta is not None
    assert meta.extra == {"custom": 1}
    assert meta.versions_line() == "PHP 8.3 | Laravel 11"


@pytest.mark.parametrize(
    ("payload_type", "raw"),
    [
        ("exception", {"class": "RuntimeException"}),
        ("exception", {"class": "RuntimeException", "message": None}),
        ("custom", {"content": "body"}),
        ("custom", {"label": "L"}),
    ],
)
def test_required_fields_missing_is_content_error(payload_type: str, raw: dict) -> None:
    with pytest.raises(ContentError):
        parse_content(payload_type, raw)


def test_custom_and_exception_coerce_to_text() -> None:
    custom = parse_content("custom", {"content": 42, "label": ""})
    exception = parse_content("exception", {"class": "E", "message": ""})

    assert custom == CustomContent(content="42", label="")
    assert isinstance(exception, ExceptionContent)
    assert exception.message == ""
