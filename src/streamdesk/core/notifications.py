"""Transient operator notifications, updated in place by handle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Literal
from uuid import uuid4

NotificationKind = Literal["loading", "success", "error"]

DEFAULT_MAX_ENTRIES = 200


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class Notification:
    notification_id: str
    kind: NotificationKind
    message: str
    duration_sec: float | None = None
    created_at: str = field(default_factory=_utc_now_iso)
    updated_at: str = field(default_factory=_utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "notification_id": self.notification_id,
            "kind": self.kind,
            "message": self.message,
            "duration_sec": self.duration_sec,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class NotificationCenter:
    """Keep the most recent notifications; settled entries are evicted oldest first."""

    def __init__(self, *, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._entries: dict[str, Notification] = {}
        self._lock = RLock()

    def _evict_locked(self) -> None:
        overflow = len(self._entries) - self._max_entries
        if overflow <= 0:
            return
        settled = [nid for nid, entry in self._entries.items() if entry.kind != "loading"]
        for nid in settled[:overflow]:
            self._entries.pop(nid, None)

    def _put(
        self,
        kind: NotificationKind,
        message: str,
        *,
        notification_id: str | None,
        duration_sec: float | None,
    ) -> str:
        with self._lock:
            existing = self._entries.get(notification_id) if notification_id else None
            if existing is not None:
                existing.kind = kind
                existing.message = message
                existing.duration_sec = duration_sec
                existing.updated_at = _utc_now_iso()
                return existing.notification_id
            nid = notification_id or f"ntf_{uuid4().hex}"
            self._entries[nid] = Notification(
                notification_id=nid,
                kind=kind,
                message=message,
                duration_sec=duration_sec,
            )
            self._evict_locked()
            return nid

    def loading(self, message: str, *, notification_id: str | None = None) -> str:
        return self._put("loading", message, notification_id=notification_id, duration_sec=None)

    def success(self, message: str, *, notification_id: str | None = None, duration_sec: float | None = None) -> str:
        return self._put("success", message, notification_id=notification_id, duration_sec=duration_sec)

    def error(self, message: str, *, notification_id: str | None = None, duration_sec: float | None = None) -> str:
        return self._put("error", message, notification_id=notification_id, duration_sec=duration_sec)

    def dismiss(self, notification_id: str) -> bool:
        with self._lock:
            return self._entries.pop(notification_id, None) is not None

    def get(self, notification_id: str) -> Notification | None:
        with self._lock:
            return self._entries.get(notification_id)

    def recent(self, limit: int = 20) -> list[Notification]:
        """Newest first."""
        with self._lock:
            entries = list(self._entries.values())
        entries.sort(key=lambda entry: entry.updated_at, reverse=True)
        return entries[: max(0, int(limit))]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
