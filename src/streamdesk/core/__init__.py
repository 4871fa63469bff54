"""Core client state for StreamDesk."""

from .action_correlator import ActionCorrelator
from .channel import ChannelAdapter, SocketIOChannel
from .config_loader import (
    clear_config_cache,
    get_action_delays,
    get_app_config,
    get_form_defaults,
    get_logging_config,
    get_pending_stop_timeout_sec,
    get_server_config,
    get_timezone,
    load_config,
    resolve_config_path,
)
from .debug_snapshot import DebugSnapshotCache
from .logger import configure_logging, get_logger
from .notifications import Notification, NotificationCenter
from .schedule_form import ScheduleDraft, resolve_tz
from .schedule_store import ScheduleStore
from .schedule_types import ActionOutcome, DebugSnapshot, PendingAction, Schedule, ScheduleStatus, parse_status
from .schedule_view import build_dashboard, build_schedule_rows, format_broadcast_time, format_duration
from .status_policy import (
    StatusDisplay,
    can_delete,
    can_stop,
    emergency_control_visible,
    is_active,
    is_terminal,
    status_display,
)

__all__ = [
    "ActionCorrelator",
    "ActionOutcome",
    "ChannelAdapter",
    "DebugSnapshot",
    "DebugSnapshotCache",
    "Notification",
    "NotificationCenter",
    "PendingAction",
    "Schedule",
    "ScheduleDraft",
    "ScheduleStatus",
    "ScheduleStore",
    "SocketIOChannel",
    "StatusDisplay",
    "build_dashboard",
    "build_schedule_rows",
    "can_delete",
    "can_stop",
    "clear_config_cache",
    "configure_logging",
    "emergency_control_visible",
    "format_broadcast_time",
    "format_duration",
    "get_action_delays",
    "get_app_config",
    "get_form_defaults",
    "get_logger",
    "get_logging_config",
    "get_pending_stop_timeout_sec",
    "get_server_config",
    "get_timezone",
    "is_active",
    "is_terminal",
    "load_config",
    "parse_status",
    "resolve_config_path",
    "resolve_tz",
    "status_display",
]
