"""Per-schedule rows derived for the operator UI."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Iterable

from .schedule_types import DebugSnapshot, Schedule
from .status_policy import can_delete, can_stop, emergency_control_visible, status_display


def format_broadcast_time(value: str | None, tz: tzinfo | None = None) -> str:
    """`HH:MM - D/M/YYYY` in the given zone (system local when None)."""
    if not value:
        return "N/A"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return "N/A"
    local = parsed.astimezone(tz)
    return f"{local:%H:%M} - {local.day}/{local.month}/{local.year}"


def format_duration(minutes: int | None) -> str:
    return f"{minutes} min" if minutes else "Unlimited"


def build_schedule_row(
    schedule: Schedule,
    *,
    snapshot: DebugSnapshot | None = None,
    show_debug: bool = False,
    tz: tzinfo | None = None,
) -> dict[str, Any]:
    pid = None
    if show_debug and snapshot is not None:
        pid = snapshot.schedule_pids.get(schedule.id)
    return {
        "id": schedule.id,
        "title": schedule.title,
        "status": schedule.status_value,
        "display": status_display(schedule.status_value).to_dict(),
        "can_stop": can_stop(schedule.status_value),
        "can_delete": can_delete(schedule.status_value),
        "broadcast_time": format_broadcast_time(schedule.broadcast_datetime, tz),
        "source": schedule.source,
        "duration": format_duration(schedule.duration_minutes),
        "pid": pid,
    }


def build_schedule_rows(
    schedules: Iterable[Schedule],
    *,
    snapshot: DebugSnapshot | None = None,
    show_debug: bool = False,
    tz: tzinfo | None = None,
) -> list[dict[str, Any]]:
    return [build_schedule_row(item, snapshot=snapshot, show_debug=show_debug, tz=tz) for item in schedules]


def build_dashboard(
    schedules: list[Schedule],
    *,
    connected: bool,
    snapshot: DebugSnapshot | None = None,
    show_debug: bool = False,
    tz: tzinfo | None = None,
) -> dict[str, Any]:
    return {
        "ok": True,
        "connected": connected,
        "count": len(schedules),
        "emergency_visible": emergency_control_visible(schedules),
        "show_debug": show_debug,
        "schedules": build_schedule_rows(schedules, snapshot=snapshot, show_debug=show_debug, tz=tz),
    }
