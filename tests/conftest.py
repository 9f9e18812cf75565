from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RAYTAIL_CONFIG", str(tmp_path / "config.json"))
    for name in (
        "RAYTAIL_HOST",
        "RAYTAIL_PORT",
        "RAYTAIL_MAX_PAYLOADS",
        "RAYTAIL_PREVIEW_LENGTH",
        "RAYTAIL_STREAM",
        "RAYTAIL_LOG_LEVEL",
        "RAYTAIL_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
