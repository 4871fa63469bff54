"""Core schemas for schedule state synchronization."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

OutcomeState = Literal["requested", "confirmed", "assumed", "rejected", "cancelled"]
ActionName = Literal["create", "stop", "delete", "emergency_stop"]

_OUTCOME_STATES = {"requested", "confirmed", "assumed", "rejected", "cancelled"}
_ACTION_NAMES = {"create", "stop", "delete", "emergency_stop"}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ScheduleStatus(str, Enum):
    """Server-asserted lifecycle state of a schedule."""

    PENDING = "PENDING"
    QUEUED_FOR_DOWNLOAD = "QUEUED_FOR_DOWNLOAD"
    DOWNLOADING_VIDEO = "DOWNLOADING_VIDEO"
    LIVE = "LIVE"
    RETRYING = "RETRYING"
    STOPPING = "STOPPING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


def parse_status(value: Any) -> ScheduleStatus | None:
    """Return the enum member for a raw status value, or None when unrecognized."""
    if isinstance(value, ScheduleStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ScheduleStatus(value)
    except ValueError:
        return None


def _optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _optional_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


@dataclass(slots=True)
class Schedule:
    """One schedule record exactly as the server delivered it."""

    id: str
    title: str
    status_value: Any
    broadcast_datetime: str | None = None
    duration_minutes: int | None = None
    video_url: str | None = None
    video_identifier: str | None = None
    rtmp_server: str | None = None
    stream_key: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Schedule":
        if not isinstance(raw, dict):
            raise TypeError("Schedule record must be a JSON object.")
        if raw.get("id") is None:
            raise TypeError("Schedule record must carry an id.")
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title") or ""),
            status_value=raw.get("status"),
            broadcast_datetime=_optional_str(raw.get("broadcastDateTime")),
            duration_minutes=_optional_int(raw.get("durationMinutes")),
            video_url=_optional_str(raw.get("videoUrl")),
            video_identifier=_optional_str(raw.get("videoIdentifier")),
            rtmp_server=_optional_str(raw.get("rtmpServer")),
            stream_key=_optional_str(raw.get("streamKey")),
            fields=dict(raw),
        )

    @property
    def wire_id(self) -> Any:
        """The id exactly as the server sent it; used in outbound requests."""
        return self.fields.get("id", self.id)

    @property
    def status(self) -> ScheduleStatus | None:
        return parse_status(self.status_value)

    @property
    def source(self) -> str | None:
        return self.video_identifier or self.video_url

    def to_dict(self) -> dict[str, Any]:
        return dict(self.fields)


@dataclass(slots=True)
class PendingAction:
    """A stop request waiting for a broadcast to confirm it."""

    schedule_id: str
    title: str
    notification_id: str
    requested_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not self.schedule_id.strip():
            raise ValueError("PendingAction.schedule_id must be non-empty.")
        if not self.notification_id.strip():
            raise ValueError("PendingAction.notification_id must be non-empty.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedule_id": self.schedule_id,
            "title": self.title,
            "notification_id": self.notification_id,
            "requested_at": self.requested_at.isoformat(),
        }


@dataclass(slots=True)
class DebugSnapshot:
    """On-demand backend process and resource stats."""

    running_streams_count: int = 0
    schedule_pids: dict[str, Any] = field(default_factory=dict)
    retry_counts: dict[str, Any] = field(default_factory=dict)
    download_queue_length: int = 0
    downloads_in_progress: list[str] = field(default_factory=list)
    ffmpeg_processes: list[str] = field(default_factory=list)
    received_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DebugSnapshot":
        if not isinstance(raw, dict):
            raise TypeError("Process stats payload must be a JSON object.")
        pids = raw.get("schedule_pids")
        retries = raw.get("retry_counts")
        downloads = raw.get("downloads_in_progress")
        processes = raw.get("ffmpeg_processes")
        return cls(
            running_streams_count=int(raw.get("running_streams_count") or 0),
            schedule_pids=dict(pids) if isinstance(pids, dict) else {},
            retry_counts=dict(retries) if isinstance(retries, dict) else {},
            download_queue_length=int(raw.get("download_queue_length") or 0),
            downloads_in_progress=list(downloads) if isinstance(downloads, list) else [],
            ffmpeg_processes=[str(line) for line in processes] if isinstance(processes, list) else [],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "running_streams_count": self.running_streams_count,
            "schedule_pids": dict(self.schedule_pids),
            "retry_counts": dict(self.retry_counts),
            "download_queue_length": self.download_queue_length,
            "downloads_in_progress": list(self.downloads_in_progress),
            "ffmpeg_processes": list(self.ffmpeg_processes),
        }


@dataclass(slots=True)
class ActionOutcome:
    """Result of a user intent, separating sent requests from confirmed ones."""

    action: ActionName
    state: OutcomeState
    schedule_id: str | None = None
    notification_id: str | None = None
    error: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.action not in _ACTION_NAMES:
            raise ValueError("ActionOutcome.action is invalid.")
        if self.state not in _OUTCOME_STATES:
            raise ValueError("ActionOutcome.state is invalid.")
        if self.state == "rejected" and not self.error:
            raise ValueError("ActionOutcome.error is required when state='rejected'.")

    @property
    def ok(self) -> bool:
        return self.state in {"requested", "confirmed", "assumed"}

    @property
    def confirmed(self) -> bool:
        return self.state == "confirmed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "action": self.action,
            "state": self.state,
            "schedule_id": self.schedule_id,
            "notification_id": self.notification_id,
            "error": self.error,
            "field_errors": dict(self.field_errors),
        }
