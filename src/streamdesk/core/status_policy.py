"""Status-derived display metadata and action eligibility."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, assert_never

from .schedule_types import Schedule, ScheduleStatus, parse_status

Indicator = Literal["ping", "spin", "bounce", "pulse"]

STOP_ELIGIBLE = frozenset(
    {
        ScheduleStatus.LIVE,
        ScheduleStatus.RETRYING,
        ScheduleStatus.DOWNLOADING_VIDEO,
        ScheduleStatus.QUEUED_FOR_DOWNLOAD,
    }
)
DELETE_ELIGIBLE = frozenset(
    {
        ScheduleStatus.PENDING,
        ScheduleStatus.COMPLETED,
        ScheduleStatus.FAILED,
        ScheduleStatus.STOPPING,
        ScheduleStatus.DOWNLOADING_VIDEO,
        ScheduleStatus.QUEUED_FOR_DOWNLOAD,
    }
)
ACTIVE = frozenset(
    {
        ScheduleStatus.LIVE,
        ScheduleStatus.RETRYING,
        ScheduleStatus.DOWNLOADING_VIDEO,
        ScheduleStatus.QUEUED_FOR_DOWNLOAD,
    }
)
TERMINAL = frozenset({ScheduleStatus.COMPLETED, ScheduleStatus.FAILED})
TERMINAL_SUCCESS = ScheduleStatus.COMPLETED


@dataclass(frozen=True, slots=True)
class StatusDisplay:
    label: str
    color: str
    background: str
    indicator: Indicator | None = None
    notice: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "color": self.color,
            "background": self.background,
            "indicator": self.indicator,
            "notice": self.notice,
        }


UNKNOWN_DISPLAY = StatusDisplay(label="UNKNOWN", color="text-gray-500", background="bg-gray-800")


def status_display(status: Any) -> StatusDisplay:
    """Map a status to its badge; unrecognized values get the UNKNOWN badge."""
    parsed = parse_status(status)
    if parsed is None:
        return UNKNOWN_DISPLAY
    match parsed:
        case ScheduleStatus.LIVE:
            return StatusDisplay("LIVE", "text-green-400", "bg-green-900/50", indicator="ping")
        case ScheduleStatus.COMPLETED:
            return StatusDisplay("COMPLETED", "text-gray-400", "bg-gray-700/80")
        case ScheduleStatus.FAILED:
            return StatusDisplay("FAILED", "text-red-400", "bg-red-900/50")
        case ScheduleStatus.PENDING:
            return StatusDisplay("WAITING", "text-yellow-400", "bg-yellow-900/50")
        case ScheduleStatus.STOPPING:
            return StatusDisplay("STOPPING", "text-orange-400", "bg-orange-900/50", indicator="spin")
        case ScheduleStatus.RETRYING:
            return StatusDisplay(
                "RECONNECTING",
                "text-blue-400",
                "bg-blue-900/50",
                indicator="spin",
                notice="Reconnecting the stream... the server retries automatically.",
            )
        case ScheduleStatus.DOWNLOADING_VIDEO:
            return StatusDisplay(
                "DOWNLOADING VIDEO",
                "text-indigo-400",
                "bg-indigo-900/50",
                indicator="bounce",
                notice="Downloading the video from its URL. Please wait...",
            )
        case ScheduleStatus.QUEUED_FOR_DOWNLOAD:
            return StatusDisplay(
                "QUEUED FOR DOWNLOAD",
                "text-purple-400",
                "bg-purple-900/50",
                indicator="pulse",
                notice="The video is waiting to be downloaded.",
            )
        case _:
            assert_never(parsed)


def can_stop(status: Any) -> bool:
    return parse_status(status) in STOP_ELIGIBLE


def can_delete(status: Any) -> bool:
    return parse_status(status) in DELETE_ELIGIBLE


def is_active(status: Any) -> bool:
    return parse_status(status) in ACTIVE


def is_terminal(status: Any) -> bool:
    return parse_status(status) in TERMINAL


def is_terminal_success(status: Any) -> bool:
    return parse_status(status) is TERMINAL_SUCCESS


def emergency_control_visible(schedules: Iterable[Schedule]) -> bool:
    """True iff at least one schedule currently counts as active."""
    return any(is_active(schedule.status_value) for schedule in schedules)
