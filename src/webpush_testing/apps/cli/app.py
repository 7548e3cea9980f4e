# src/webpush_testing/apps/cli/app.py
"""``webpush-testing`` command line tool.

``start`` launches ``serve`` as a detached background process and records
its pid per port, ``stop`` terminates it again.
"""
from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
import time
from typing import Optional

import httpx
import typer
import uvicorn

from webpush_testing.build_info import BUILD_INFO
from webpush_testing.config import const
from webpush_testing.services.settings import Settings

from .process_state import forget_process, pid_for_port, record_process

app = typer.Typer(help="Mock push service for testing Web Push libraries.", add_completion=False)

_log = logging.getLogger("webpush_testing.cli")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(BUILD_INFO.describe())
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    base_dir: Optional[str] = typer.Option(None, "--base-dir", help="Directory for config.yaml, process state and logs"),
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
):
    if base_dir:
        # spawned servers inherit it through the environment
        os.environ[const.ENV_PREFIX + "BASE_DIR"] = base_dir
    ctx.obj = Settings.from_sources()


def _settings(ctx: typer.Context, **overrides) -> Settings:
    settings: Settings = ctx.obj if isinstance(ctx.obj, Settings) else Settings.from_sources()
    try:
        return settings.with_overrides(**overrides)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _probe(settings: Settings, timeout: float = 1.0) -> bool:
    try:
        response = httpx.post(f"{settings.base_url}/status", timeout=timeout)
    except httpx.HTTPError:
        return False
    return response.status_code == 200


def _wait_until_ready(settings: Settings, proc: subprocess.Popen) -> bool:
    deadline = time.monotonic() + const.STARTUP_TIMEOUT_S
    while time.monotonic() < deadline:
        if proc.poll() is not None:
            return False
        if _probe(settings):
            return True
        time.sleep(const.STARTUP_POLL_INTERVAL_S)
    return False


def _spawn_server(settings: Settings) -> subprocess.Popen:
    argv = [
        sys.executable,
        "-m",
        "webpush_testing",
        "serve",
        "--host",
        settings.host,
        "--port",
        str(settings.port),
    ]
    settings.base_dir.mkdir(parents=True, exist_ok=True)
    log_path = settings.base_dir / f"server-{settings.port}.log"
    with open(log_path, "ab") as log_file:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=log_file,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )


@app.command("start")
def start(
    ctx: typer.Context,
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port the service will run on"),
):
    """Start the server in the background."""
    settings = _settings(ctx, port=port)
    state_path = settings.process_state_path
    if pid_for_port(state_path, settings.port) is not None:
        typer.echo(f"Server seems to already run on port {settings.port}")
        typer.echo("Stop server first before starting it on the same port.")
        raise typer.Exit(1)

    typer.echo(f"Starting server on port {settings.port}")
    proc = _spawn_server(settings)
    if not _wait_until_ready(settings, proc):
        if proc.poll() is None:
            proc.terminate()
        typer.echo("Failed to start testing server.", err=True)
        typer.echo(f"See {settings.base_dir / f'server-{settings.port}.log'} for details.", err=True)
        raise typer.Exit(1)

    record_process(state_path, settings.port, proc.pid)
    _log.debug("server pid %s recorded in %s", proc.pid, state_path)
    typer.echo(f"Server running on port {settings.port}")


@app.command("stop")
def stop(
    ctx: typer.Context,
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port of the server to stop"),
):
    """Stop a server started with ``start``."""
    settings = _settings(ctx, port=port)
    state_path = settings.process_state_path
    pid = pid_for_port(state_path, settings.port)
    if pid is None:
        typer.echo(f"Server does not seem to run on port {settings.port}")
        return

    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        # already gone, the record is stale
        pass
    forget_process(state_path, settings.port)
    typer.echo(f"Server at port {settings.port} has been stopped.")


@app.command("status")
def status(
    ctx: typer.Context,
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port of the server to check"),
):
    """Report whether a server answers on the given port."""
    settings = _settings(ctx, port=port)
    pid = pid_for_port(settings.process_state_path, settings.port)
    if not _probe(settings):
        typer.echo(f"No server answering on port {settings.port}")
        raise typer.Exit(1)
    suffix = f" (pid {pid})" if pid is not None else ""
    typer.echo(f"Server running on port {settings.port}{suffix}")


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port the service will run on"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
):
    """Run the server in the foreground."""
    from webpush_testing.apps.api.server import create_app

    settings = _settings(ctx, host=host, port=port, log_level=log_level)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _log.info("serving on %s", settings.base_url)
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


def main() -> None:
    app(prog_name="webpush-testing")


if __name__ == "__main__":
    main()
