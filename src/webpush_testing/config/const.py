# src/webpush_testing/config/const.py
from __future__ import annotations

# defaults, overridden by <base_dir>/config.yaml and WEBPUSH_TESTING_* env vars
DEFAULT_HOST: str = "localhost"
DEFAULT_PORT: int = 8090
DEFAULT_LOG_LEVEL: str = "INFO"
DEFAULT_BASE_DIR: str = "~/.webpush-testing"

CONFIG_FILE_NAME: str = "config.yaml"
PROCESS_STATE_FILE_NAME: str = "processes.json"

ENV_PREFIX: str = "WEBPUSH_TESTING_"

# how long `start` waits for a spawned server to answer /status
STARTUP_TIMEOUT_S: float = 10.0
STARTUP_POLL_INTERVAL_S: float = 0.2
