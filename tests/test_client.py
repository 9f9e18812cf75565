from __future__ import annotations

from raytail.client import build_request
from raytail.store import RayRequest


def test_build_request_log_payload() -> None:
    body = build_request(["hello", 42], request_uuid="abc", project_name="shop")

    assert body["uuid"] == "abc"
    assert body["meta"] == {"project_name": "shop"}
    (payload,) = body["payloads"]
    assert payload["type"] == "log"
    assert payload["content"] == {"values": ["hello", 42]}
    assert payload["origin"]["file"] == "raytail"


def test_build_request_text_payload_joins_values() -> None:
    body = build_request(["one", "two"], payload_type="text")

    assert body["payloads"][0]["content"] == {"content": "one\ntwo"}
    assert body["meta"] == {}
    assert body["uuid"]


def test_build_request_is_a_valid_ray_request() -> None:
    request = RayRequest.from_dict(build_request(["x"], request_uuid="abc"))

    assert request.uuid == "abc"
    assert [payload.type for payload in request.payloads] == ["log"]
    assert request.payloads[0].origin is not None
