"""Daemon entrypoint: build one session, connect it, and serve the local app."""

from __future__ import annotations

import argparse
import signal
from pathlib import Path
from threading import Event
from typing import Any

from src.streamdesk.core.channel import SocketIOChannel
from src.streamdesk.core.config_loader import (
    get_action_delays,
    get_app_config,
    get_form_defaults,
    get_logging_config,
    get_pending_stop_timeout_sec,
    get_server_config,
    get_timezone,
    load_config,
)
from src.streamdesk.core.logger import configure_logging, get_logger
from src.streamdesk.core.schedule_form import ScheduleDraft, resolve_tz
from src.streamdesk.runtime.session import StreamSession

log = get_logger("daemon")


def _install_signal_handlers(stop_event: Event) -> None:
    def _handler(_sig, _frame) -> None:  # type: ignore[no-untyped-def]
        stop_event.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def load_runtime_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Config file contents, or an empty dict (all defaults) when no file exists."""
    try:
        return load_config(config_path)
    except FileNotFoundError:
        log.info("No config file found; using defaults")
        return {}


def build_session(config: dict[str, Any], *, server_url: str | None = None) -> StreamSession:
    server = get_server_config(config)
    channel = SocketIOChannel(
        server_url or server["url"],
        socketio_path=server["socketio_path"],
        transports=server["transports"],
        reconnection=server["reconnection"],
        wait_timeout_sec=server["wait_timeout_sec"],
    )
    tz = resolve_tz(get_timezone(config))
    delays = get_action_delays(config)
    form = get_form_defaults(config)
    return StreamSession(
        channel=channel,
        tz=tz,
        delete_delay_sec=delays["delete_sec"],
        emergency_stop_delay_sec=delays["emergency_stop_sec"],
        pending_stop_timeout_sec=get_pending_stop_timeout_sec(config),
        draft=ScheduleDraft.new(tz=tz, rtmp_server=form["rtmp_server"], duration=form["duration_minutes"]),
    )


def run_daemon(
    *,
    session: StreamSession,
    with_app: bool = True,
    host: str = "127.0.0.1",
    port: int = 8000,
    tick_sec: float = 0.5,
    stop_event: Event | None = None,
) -> int:
    session.connect()

    if with_app:
        try:
            import uvicorn
        except Exception as exc:  # pragma: no cover - dependency error guard
            session.close()
            raise RuntimeError("uvicorn is required for daemon app mode") from exc

        from app.main import create_app

        try:
            uvicorn.run(create_app(session), host=host, port=port, reload=False)
        finally:
            session.close()
        return 0

    signal_event = stop_event or Event()
    _install_signal_handlers(signal_event)
    try:
        while not signal_event.is_set():
            signal_event.wait(timeout=max(0.05, tick_sec))
    finally:
        session.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the StreamDesk operator client.")
    parser.add_argument("--config", default=None, help="Path to config JSON (defaults to config/config.json).")
    parser.add_argument("--server-url", default=None, help="Scheduling server URL (overrides config).")
    parser.add_argument("--host", default=None, help="Local bind host for app mode.")
    parser.add_argument("--port", type=int, default=None, help="Local bind port for app mode.")
    parser.add_argument(
        "--no-app",
        action="store_true",
        help="Keep the session connected without launching the local app server.",
    )
    parser.add_argument(
        "--tick-sec",
        type=float,
        default=0.5,
        help="Idle loop poll interval when running without app.",
    )
    args = parser.parse_args(argv)

    config = load_runtime_config(args.config)
    logging_cfg = get_logging_config(config)
    configure_logging(level=logging_cfg["level"], log_dir=logging_cfg["log_dir"])
    app_cfg = get_app_config(config)
    session = build_session(config, server_url=args.server_url)
    return run_daemon(
        session=session,
        with_app=not args.no_app,
        host=args.host or app_cfg["host"],
        port=args.port or app_cfg["port"],
        tick_sec=max(0.05, float(args.tick_sec)),
    )


if __name__ == "__main__":
    raise SystemExit(main())
