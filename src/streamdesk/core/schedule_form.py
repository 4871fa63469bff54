"""Create-schedule draft: validation, wire payload and reset rules."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime, tzinfo
import re
from typing import Any, Literal
from zoneinfo import ZoneInfo

DurationType = Literal["infinite", "custom"]

DEFAULT_RTMP_SERVER = "rtmp://a.rtmp.youtube.com/live2"
DEFAULT_DURATION_MINUTES = 60
_LEADING_INT = re.compile(r"\s*\+?(\d+)")


def resolve_tz(name: str | None) -> tzinfo | None:
    """ZoneInfo for an IANA name; None selects the system local zone."""
    if not name:
        return None
    return ZoneInfo(name)


def _parse_positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        # leading digits only, like parseInt
        match = _LEADING_INT.match(value)
        if match is None:
            return None
        parsed = int(match.group(1))
        return parsed if parsed > 0 else None
    if isinstance(value, float) and value > 0:
        return int(value)
    return None


@dataclass(slots=True)
class ScheduleDraft:
    """Form state for a new schedule."""

    title: str = ""
    video_input: str = ""
    date: str = ""
    time: str = ""
    stream_key: str = ""
    rtmp_server: str = DEFAULT_RTMP_SERVER
    duration_type: DurationType = "infinite"
    duration: int | str = DEFAULT_DURATION_MINUTES

    @classmethod
    def new(
        cls,
        *,
        now: datetime | None = None,
        tz: tzinfo | None = None,
        rtmp_server: str = DEFAULT_RTMP_SERVER,
        duration: int = DEFAULT_DURATION_MINUTES,
    ) -> "ScheduleDraft":
        """Blank draft preset to the current local date and time."""
        current = (now or datetime.now(UTC)).astimezone(tz)
        return cls(
            date=current.strftime("%Y-%m-%d"),
            time=current.strftime("%H:%M"),
            rtmp_server=rtmp_server,
            duration=duration,
        )

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.title.strip():
            errors["title"] = "Please enter a title."
        if not self.video_input.strip():
            errors["video_input"] = "Please enter a video URL."
        if not self.date:
            errors["date"] = "Please choose a broadcast date."
        if not self.time:
            errors["time"] = "Please choose a broadcast time."
        if not self.rtmp_server.strip():
            errors["rtmp_server"] = "Please enter an RTMP server."
        if not self.stream_key.strip():
            errors["stream_key"] = "Please enter a stream key."
        if self.duration_type not in {"infinite", "custom"}:
            errors["duration_type"] = "Duration type must be 'infinite' or 'custom'."
        elif self.duration_type == "custom" and _parse_positive_int(self.duration) is None:
            errors["duration"] = "Please enter a valid duration (minutes)."
        if "date" not in errors and "time" not in errors:
            try:
                self.local_start()
            except ValueError:
                errors["date"] = "Broadcast date/time is not valid."
        return errors

    def local_start(self, tz: tzinfo | None = None) -> datetime:
        naive = datetime.strptime(f"{self.date}T{self.time}", "%Y-%m-%dT%H:%M")
        if tz is None:
            return naive.astimezone()
        return naive.replace(tzinfo=tz)

    def broadcast_datetime(self, tz: tzinfo | None = None) -> str:
        """UTC ISO timestamp with millisecond precision and a `Z` suffix."""
        start = self.local_start(tz).astimezone(UTC)
        return start.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def to_payload(self, tz: tzinfo | None = None) -> dict[str, Any]:
        return {
            "title": self.title,
            "streamKey": self.stream_key,
            "rtmpServer": self.rtmp_server,
            "broadcastDateTime": self.broadcast_datetime(tz),
            "durationMinutes": _parse_positive_int(self.duration) if self.duration_type == "custom" else None,
            "videoUrl": self.video_input,
        }

    def reset_after_success(self) -> "ScheduleDraft":
        # date, time and RTMP server carry over to the next draft
        return replace(
            self,
            title="",
            video_input="",
            stream_key="",
            duration_type="infinite",
            duration=DEFAULT_DURATION_MINUTES,
        )
