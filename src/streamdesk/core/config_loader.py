"""Load and query StreamDesk JSON config files."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from .schedule_form import DEFAULT_DURATION_MINUTES, DEFAULT_RTMP_SERVER

DEFAULT_CONFIG_PATH = Path("config/config.json")
DEFAULT_SERVER_URL = "http://127.0.0.1:5000"
DEFAULT_DELETE_DELAY_SEC = 0.5
DEFAULT_EMERGENCY_STOP_DELAY_SEC = 1.0
_CONFIG_CACHE: dict[Path, tuple[int, dict[str, Any]]] = {}


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[3]


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    """Resolve config path against repo root.

    Priority:
    1. explicit function argument
    2. `STREAMDESK_CONFIG_PATH` environment variable
    3. default `config/config.json`
    """
    raw_path: str | Path | None = config_path or os.getenv("STREAMDESK_CONFIG_PATH")
    candidate = Path(raw_path) if raw_path else DEFAULT_CONFIG_PATH
    if not candidate.is_absolute():
        candidate = _repo_root() / candidate
    return candidate.resolve()


def load_config(config_path: str | Path | None = None, *, use_cache: bool = True) -> dict[str, Any]:
    """Load config JSON as a dictionary."""
    resolved = resolve_config_path(config_path)
    if not resolved.exists():
        raise FileNotFoundError(f"Config file not found: {resolved}")

    mtime_ns = resolved.stat().st_mtime_ns
    if use_cache and resolved in _CONFIG_CACHE:
        cached_mtime_ns, cached_payload = _CONFIG_CACHE[resolved]
        if cached_mtime_ns == mtime_ns:
            return cached_payload

    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in config file: {resolved}") from exc

    if not isinstance(payload, dict):
        raise ValueError(f"Config root must be a JSON object: {resolved}")

    _CONFIG_CACHE[resolved] = (mtime_ns, payload)
    return payload


def clear_config_cache() -> None:
    """Clear in-memory config cache."""
    _CONFIG_CACHE.clear()


def _section(name: str, config: dict[str, Any] | None) -> dict[str, Any]:
    payload = config if config is not None else load_config()
    value = payload.get(name)
    return value if isinstance(value, dict) else {}


def _positive_float(value: Any, default: float | None) -> float | None:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)) and value > 0:
        return float(value)
    return default


def get_timezone(config: dict[str, Any] | None = None) -> str | None:
    payload = config if config is not None else load_config()
    value = payload.get("timezone")
    return value if isinstance(value, str) and value else None


def get_server_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return Socket.IO server settings with defaults applied."""
    server = _section("server", config)
    url = server.get("url")
    path = server.get("socketio_path")
    transports = server.get("transports")
    return {
        "url": url if isinstance(url, str) and url.strip() else DEFAULT_SERVER_URL,
        "socketio_path": path if isinstance(path, str) and path.strip() else "socket.io",
        "transports": [str(t) for t in transports] if isinstance(transports, list) and transports else None,
        "reconnection": bool(server.get("reconnection", True)),
        "wait_timeout_sec": _positive_float(server.get("wait_timeout_sec"), 5.0),
    }


def get_action_delays(config: dict[str, Any] | None = None) -> dict[str, float]:
    """Fixed client-side delays standing in for server processing of optimistic actions."""
    actions = _section("actions", config)
    return {
        "delete_sec": _positive_float(actions.get("delete_delay_sec"), DEFAULT_DELETE_DELAY_SEC),
        "emergency_stop_sec": _positive_float(actions.get("emergency_stop_delay_sec"), DEFAULT_EMERGENCY_STOP_DELAY_SEC),
    }


def get_pending_stop_timeout_sec(config: dict[str, Any] | None = None) -> float | None:
    """Timeout for unconfirmed stops; None keeps them pending indefinitely."""
    actions = _section("actions", config)
    return _positive_float(actions.get("pending_stop_timeout_sec"), None)


def get_app_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    app = _section("app", config)
    host = app.get("host")
    port = app.get("port")
    return {
        "host": host if isinstance(host, str) and host.strip() else "127.0.0.1",
        "port": port if isinstance(port, int) and not isinstance(port, bool) and port > 0 else 8000,
    }


def get_form_defaults(config: dict[str, Any] | None = None) -> dict[str, Any]:
    form = _section("form", config)
    rtmp = form.get("rtmp_server")
    duration = form.get("duration_minutes")
    return {
        "rtmp_server": rtmp if isinstance(rtmp, str) and rtmp.strip() else DEFAULT_RTMP_SERVER,
        "duration_minutes": (
            duration
            if isinstance(duration, int) and not isinstance(duration, bool) and duration > 0
            else DEFAULT_DURATION_MINUTES
        ),
    }


def get_logging_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    logging_cfg = _section("logging", config)
    level = logging_cfg.get("level")
    log_dir = logging_cfg.get("log_dir")
    return {
        "level": level.upper() if isinstance(level, str) and level.strip() else "INFO",
        "log_dir": log_dir if isinstance(log_dir, str) and log_dir.strip() else None,
    }
