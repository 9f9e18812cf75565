import json
from pathlib import Path

import pytest

from raytail.config import (
    RaytailConfig,
    env_var_for,
    get_config_path,
    get_env_overrides,
    load_config,
    read_config_file,
)


def test_read_config_file_rejects_invalid_json(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("{not-json}")
    with pytest.raises(ValueError, match="invalid config json"):
        read_config_file(config_path)


def test_read_config_file_rejects_non_object(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2]")
    with pytest.raises(ValueError, match="config must be an object"):
        read_config_file(config_path)


def test_read_config_file_missing_or_empty(tmp_path: Path) -> None:
    assert read_config_file(tmp_path / "missing.json") == {}
    empty = tmp_path / "empty.json"
    empty.write_text("  \n")
    assert read_config_file(empty) == {}


def test_get_config_path_uses_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "custom.json"
    monkeypatch.setenv("RAYTAIL_CONFIG", str(target))
    assert get_config_path() == target


def test_load_config_defaults() -> None:
    assert load_config() == RaytailConfig()


def test_load_config_reads_file(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"host": "0.0.0.0", "port": "24000", "stream": "yes", "unknown": 1})
    )

    cfg = load_config(config_path)

    assert cfg.host == "0.0.0.0"
    assert cfg.port == 24000
    assert cfg.stream is True
    assert cfg.max_payloads == 1000


def test_env_overrides_win_over_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"port": 24000, "log_level": "INFO"}))
    monkeypatch.setenv("RAYTAIL_PORT", "25000")
    monkeypatch.setenv("RAYTAIL_STREAM", "1")

    cfg = load_config(config_path)

    assert get_env_overrides() == {"port": "25000", "stream": "1"}
    assert cfg.port == 25000
    assert cfg.stream is True
    assert cfg.log_level == "INFO"


def test_invalid_int_warns_and_keeps_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAYTAIL_MAX_PAYLOADS", "lots")

    with pytest.warns(RuntimeWarning, match="Invalid int for max_payloads"):
        cfg = load_config()

    assert cfg.max_payloads == 1000


def test_invalid_config_file_is_ignored(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("{broken")

    with pytest.warns(RuntimeWarning, match="invalid config json"):
        cfg = load_config(config_path)

    assert cfg == RaytailConfig()


def test_non_object_config_file_is_ignored(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text('["port", 1]')

    with pytest.warns(RuntimeWarning, match="config must be an object"):
        cfg = load_config(config_path)

    assert cfg == RaytailConfig()


def test_invalid_bool_warns_and_keeps_default(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"stream": "sometimes", "log_file": "/tmp/raytail.log"}))

    with pytest.warns(RuntimeWarning, match="Invalid bool for stream"):
        cfg = load_config(config_path)

    assert cfg.stream is False
    assert cfg.log_file == "/tmp/raytail.log"


def test_env_var_names_follow_field_names() -> None:
    assert env_var_for("max_payloads") == "RAYTAIL_MAX_PAYLOADS"
    assert env_var_for("log_file") == "RAYTAIL_LOG_FILE"
