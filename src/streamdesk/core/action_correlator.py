"""Correlate stop requests with the broadcasts that confirm them."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from .channel import REQUEST_STOP_SCHEDULE, ChannelAdapter
from .logger import get_logger
from .notifications import NotificationCenter
from .schedule_types import PendingAction, Schedule
from .status_policy import is_terminal_success

log = get_logger("action_correlator")


def is_expired(requested_at: datetime, *, timeout_sec: float | None, now: datetime | None = None) -> bool:
    if timeout_sec is None:
        return False
    now_dt = now or datetime.now(timezone.utc)
    return requested_at + timedelta(seconds=timeout_sec) <= now_dt


class ActionCorrelator:
    """Pending stop actions keyed by schedule id.

    An entry is resolved only when a later broadcast shows the schedule
    COMPLETED. With `pending_timeout_sec=None` an entry whose schedule never
    comes back stays pending for the rest of the session.
    """

    def __init__(
        self,
        *,
        channel: ChannelAdapter,
        notifications: NotificationCenter,
        pending_timeout_sec: float | None = None,
    ) -> None:
        if pending_timeout_sec is not None and pending_timeout_sec <= 0:
            raise ValueError("pending_timeout_sec must be > 0 when set")
        self._channel = channel
        self._notifications = notifications
        self._pending_timeout_sec = pending_timeout_sec
        self._pending: dict[str, PendingAction] = {}

    def begin_stop(self, schedule_id: str, title: str, *, wire_id: Any = None) -> str:
        """Send the stop request and track it. Caller must have confirmed with the user.

        `wire_id` is the id as the server delivered it; the request carries it
        unchanged. A failed send raises before anything is recorded.
        """
        self._channel.emit(REQUEST_STOP_SCHEDULE, {"id": schedule_id if wire_id is None else wire_id})
        message = f'Sending stop request for "{title}"...'
        existing = self._pending.get(schedule_id)
        if existing is not None:
            # one entry per schedule; re-sent requests share the notification
            self._notifications.loading(message, notification_id=existing.notification_id)
            existing.requested_at = datetime.now(timezone.utc)
            log.info(f"Stop re-sent for schedule {schedule_id}")
            return existing.notification_id

        notification_id = self._notifications.loading(message)
        self._pending[schedule_id] = PendingAction(
            schedule_id=schedule_id,
            title=title,
            notification_id=notification_id,
        )
        log.info(f"Stop requested for schedule {schedule_id}")
        return notification_id

    def reconcile(self, updated: Iterable[Schedule]) -> list[str]:
        """Resolve pending stops whose schedule reached COMPLETED; return their ids."""
        if not self._pending:
            return []
        by_id = {schedule.id: schedule for schedule in updated}
        resolved: list[str] = []
        for schedule_id, action in list(self._pending.items()):
            schedule = by_id.get(schedule_id)
            if schedule is None or not is_terminal_success(schedule.status_value):
                continue
            self._notifications.success(
                f'Stopped "{schedule.title}" successfully!',
                notification_id=action.notification_id,
            )
            del self._pending[schedule_id]
            resolved.append(schedule_id)
            log.info(f"Stop confirmed for schedule {schedule_id}")
        return resolved

    def expire(self, *, now: datetime | None = None) -> list[str]:
        if self._pending_timeout_sec is None or not self._pending:
            return []
        expired: list[str] = []
        for schedule_id, action in list(self._pending.items()):
            if not is_expired(action.requested_at, timeout_sec=self._pending_timeout_sec, now=now):
                continue
            self._notifications.error(
                f'No stop confirmation for "{action.title}"',
                notification_id=action.notification_id,
            )
            del self._pending[schedule_id]
            expired.append(schedule_id)
            log.warning(f"Stop for schedule {schedule_id} expired without confirmation")
        return expired

    def discard(self, schedule_id: str) -> bool:
        action = self._pending.pop(schedule_id, None)
        if action is None:
            return False
        self._notifications.dismiss(action.notification_id)
        log.info(f"Pending stop for schedule {schedule_id} discarded")
        return True

    def is_pending(self, schedule_id: str) -> bool:
        return schedule_id in self._pending

    def pending(self) -> list[PendingAction]:
        return list(self._pending.values())

    def __len__(self) -> int:
        return len(self._pending)
