"""Persistence of the background server processes started by the CLI."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict
import json
import logging
import os

__all__ = ["load_process_state", "save_process_state", "record_process", "forget_process", "pid_for_port"]

_log = logging.getLogger("webpush_testing.cli.state")


def _coerce(data: Any) -> Dict[str, int]:
    if not isinstance(data, dict):
        return {}
    state: Dict[str, int] = {}
    for port, pid in data.items():
        try:
            state[str(int(port))] = int(pid)
        except (TypeError, ValueError):
            _log.warning("dropping malformed process entry %r=%r", port, pid)
    return state


def load_process_state(path: Path) -> Dict[str, int]:
    """Mapping of port (as string) to pid; empty when nothing was recorded."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError:
        _log.warning("process state %s is not valid JSON, ignoring it", path)
        return {}
    return _coerce(data)


def save_process_state(path: Path, state: Dict[str, int]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state, indent=2, sort_keys=True), encoding="utf-8")
    try:
        os.chmod(path, 0o600)
    except PermissionError:
        pass
    return path


def pid_for_port(path: Path, port: int) -> int | None:
    return load_process_state(path).get(str(port))


def record_process(path: Path, port: int, pid: int) -> None:
    state = load_process_state(path)
    state[str(port)] = int(pid)
    save_process_state(path, state)


def forget_process(path: Path, port: int) -> bool:
    state = load_process_state(path)
    if state.pop(str(port), None) is None:
        return False
    save_process_state(path, state)
    return True
