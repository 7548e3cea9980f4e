from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from webpush_testing.services.settings import Settings, validate_port


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    for name in ("HOST", "PORT", "LOG_LEVEL"):
        monkeypatch.delenv(f"WEBPUSH_TESTING_{name}", raising=False)
    monkeypatch.setenv("WEBPUSH_TESTING_BASE_DIR", str(tmp_path / "wpt"))


def test_defaults(tmp_path):
    settings = Settings.from_sources()

    assert settings.base_dir == tmp_path / "wpt"
    assert settings.port == 8090
    assert settings.notify_url == "http://localhost:8090/notify/"
    assert settings.process_state_path == tmp_path / "wpt" / "processes.json"


def test_config_file_then_environment(tmp_path, monkeypatch):
    base = Path(tmp_path / "wpt")
    base.mkdir()
    (base / "config.yaml").write_text(yaml.safe_dump({"port": 9000, "host": "127.0.0.1", "log_level": "debug"}), encoding="utf-8")

    settings = Settings.from_sources()
    assert (settings.host, settings.port, settings.log_level) == ("127.0.0.1", 9000, "DEBUG")

    monkeypatch.setenv("WEBPUSH_TESTING_PORT", "9100")
    assert Settings.from_sources().port == 9100


def test_overrides_ignore_none():
    settings = Settings.from_sources().with_overrides(port=None, host="0.0.0.0")

    assert settings.port == 8090
    assert settings.base_url == "http://0.0.0.0:8090"


@pytest.mark.parametrize("port", ["test", 0, 70000, True, "8.5"])
def test_invalid_port(port):
    with pytest.raises(ValueError, match="Invalid port supplied"):
        validate_port(port)


def test_invalid_log_level():
    with pytest.raises(ValueError):
        Settings.from_sources().with_overrides(log_level="LOUD")
