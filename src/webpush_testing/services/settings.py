"""Runtime settings for the mock push server and its CLI.

Sources, lowest precedence first: built-in defaults from
:mod:`webpush_testing.config.const`, ``<base_dir>/config.yaml`` and
``WEBPUSH_TESTING_*`` environment variables.  Command line flags are applied
on top with :meth:`Settings.with_overrides`.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping
import logging
import os

import yaml

from webpush_testing.config import const

__all__ = ["Settings", "validate_port"]

_log = logging.getLogger("webpush_testing.settings")

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def validate_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid port supplied: {value}") from None
    if isinstance(value, bool) or not 0 < port < 65536:
        raise ValueError(f"Invalid port supplied: {value}")
    return port


def _validate_log_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Invalid log level: {value}")
    return level


def _env(name: str) -> str | None:
    value = os.getenv(const.ENV_PREFIX + name)
    return value if value else None


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        _log.warning("ignoring %s: top level is not a mapping", path)
        return {}
    return {key: data[key] for key in ("host", "port", "log_level") if key in data}


@dataclass(frozen=True, slots=True)
class Settings:
    base_dir: Path
    host: str = const.DEFAULT_HOST
    port: int = const.DEFAULT_PORT
    log_level: str = const.DEFAULT_LOG_LEVEL

    @classmethod
    def from_sources(cls) -> "Settings":
        base_dir = Path(_env("BASE_DIR") or const.DEFAULT_BASE_DIR).expanduser()
        values: dict[str, Any] = _read_config_file(base_dir / const.CONFIG_FILE_NAME)
        for key in ("host", "port", "log_level"):
            env_value = _env(key.upper())
            if env_value is not None:
                values[key] = env_value
        return cls(base_dir=base_dir).with_overrides(**values)

    def with_overrides(self, **overrides: Any) -> "Settings":
        clean = {key: value for key, value in overrides.items() if value is not None}
        if "base_dir" in clean:
            clean["base_dir"] = Path(clean["base_dir"]).expanduser()
        if "port" in clean:
            clean["port"] = validate_port(clean["port"])
        if "log_level" in clean:
            clean["log_level"] = _validate_log_level(clean["log_level"])
        if "host" in clean:
            clean["host"] = str(clean["host"])
        return replace(self, **clean)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def notify_url(self) -> str:
        return f"{self.base_url}/notify/"

    @property
    def process_state_path(self) -> Path:
        return self.base_dir / const.PROCESS_STATE_FILE_NAME
