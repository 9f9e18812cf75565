from __future__ import annotations

import json
import os
import socket
import uuid as uuid_module
from http.client import HTTPConnection
from typing import Any


def build_request(
    values: list[Any],
    *,
    payload_type: str = "log",
    request_uuid: str | None = None,
    project_name: str | None = None,
) -> dict[str, Any]:
    """Build a Ray request body carrying ``values`` as one payload."""

    if payload_type == "log":
        content: dict[str, Any] = {"values": values}
    else:
        content = {"content": "\n".join(str(value) for value in values)}
    meta: dict[str, Any] = {}
    if project_name:
        meta["project_name"] = project_name
    return {
        "uuid": request_uuid or str(uuid_module.uuid4()),
        "payloads": [
            {
                "type": payload_type,
                "content": content,
                "origin": {
                    "file": "raytail",
                    "line_number": 0,
                    "hostname": socket.gethostname(),
                },
            }
        ],
        "meta": meta,
    }


def post_request(
    host: str,
    port: int,
    body: dict[str, Any],
    *,
    timeout_s: float = 3.0,
) -> tuple[int, str]:
    payload = json.dumps(body, ensure_ascii=False).encode("utf-8")
    conn = HTTPConnection(host, port, timeout=timeout_s)
    try:
        conn.request(
            "POST",
            "/",
            body=payload,
            headers={
                "Content-Type": "application/json",
                "Content-Length": str(len(payload)),
            },
        )
        resp = conn.getresponse()
        return int(resp.status), resp.read().decode("utf-8", errors="replace")
    finally:
        conn.close()


def default_project_name() -> str:
    return os.path.basename(os.getcwd()) or "raytail"
