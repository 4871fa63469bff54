"""Long-lived session owning the channel and all synchronized client state."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from threading import RLock, Timer
from typing import Any, Callable

from src.streamdesk.core.action_correlator import ActionCorrelator
from src.streamdesk.core.channel import (
    EVENT_BROADCAST_UPDATE,
    EVENT_CONNECT,
    EVENT_DISCONNECT,
    EVENT_PROCESS_STATS,
    REQUEST_CREATE_SCHEDULE,
    REQUEST_DELETE_SCHEDULE,
    REQUEST_EMERGENCY_STOP_ALL,
    ChannelAdapter,
)
from src.streamdesk.core.config_loader import DEFAULT_DELETE_DELAY_SEC, DEFAULT_EMERGENCY_STOP_DELAY_SEC
from src.streamdesk.core.debug_snapshot import DebugSnapshotCache
from src.streamdesk.core.logger import get_logger
from src.streamdesk.core.notifications import NotificationCenter
from src.streamdesk.core.schedule_form import ScheduleDraft
from src.streamdesk.core.schedule_store import ScheduleStore
from src.streamdesk.core.schedule_types import ActionName, ActionOutcome, DebugSnapshot, Schedule
from src.streamdesk.core.schedule_view import build_dashboard
from src.streamdesk.core.status_policy import can_delete, can_stop, emergency_control_visible

log = get_logger("session")

Confirm = Callable[[str], bool]
Scheduler = Callable[[float, Callable[[], None]], Any]

CREATE_ERROR_DURATION_SEC = 5.0


def confirmation_prompt(action: str, title: str | None = None) -> str:
    """Yes/no question shown before a destructive action is sent."""
    if action == "stop":
        return f'Are you sure you want to STOP the livestream "{title}"?'
    if action == "delete":
        return f'Are you sure you want to DELETE the schedule "{title}"?'
    if action == "emergency_stop":
        return (
            "WARNING: emergency stop ALL streams?\n\n"
            "This will:\n"
            "- Stop ALL streams currently broadcasting\n"
            "- Kill every FFmpeg process\n"
            "- Cannot be undone\n\n"
            "Are you sure?"
        )
    raise ValueError(f"No confirmation prompt for action: {action}")


def _timer_scheduler(delay_sec: float, fn: Callable[[], None]) -> Timer:
    timer = Timer(delay_sec, fn)
    timer.daemon = True
    timer.start()
    return timer


class StreamSession:
    """Single authority for schedule state, pending actions and the debug snapshot."""

    def __init__(
        self,
        *,
        channel: ChannelAdapter,
        tz: tzinfo | None = None,
        delete_delay_sec: float = DEFAULT_DELETE_DELAY_SEC,
        emergency_stop_delay_sec: float = DEFAULT_EMERGENCY_STOP_DELAY_SEC,
        pending_stop_timeout_sec: float | None = None,
        draft: ScheduleDraft | None = None,
        scheduler: Scheduler | None = None,
        notifications: NotificationCenter | None = None,
    ) -> None:
        self._lock = RLock()
        self._channel = channel
        self._tz = tz
        self._delete_delay_sec = delete_delay_sec
        self._emergency_stop_delay_sec = emergency_stop_delay_sec
        self._schedule = scheduler or _timer_scheduler
        self.notifications = notifications or NotificationCenter()
        self.store = ScheduleStore()
        self.correlator = ActionCorrelator(
            channel=channel,
            notifications=self.notifications,
            pending_timeout_sec=pending_stop_timeout_sec,
        )
        self.snapshot_cache = DebugSnapshotCache(channel=channel)
        self.draft = draft or ScheduleDraft.new(tz=tz)
        self._connected = False
        self._is_scheduling = False
        self._show_debug = False
        self._last_broadcast_at: str | None = None
        self._last_connect_at: str | None = None
        self._last_disconnect_at: str | None = None

        channel.on(EVENT_CONNECT, self.on_connect)
        channel.on(EVENT_DISCONNECT, self.on_disconnect)
        channel.on(EVENT_BROADCAST_UPDATE, self.on_broadcast)
        channel.on(EVENT_PROCESS_STATS, self.on_process_stats)

    @staticmethod
    def _utc_now_iso() -> str:
        return datetime.now(tz=UTC).isoformat()

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def is_scheduling(self) -> bool:
        return self._is_scheduling

    @property
    def show_debug(self) -> bool:
        return self._show_debug

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> dict[str, Any]:
        try:
            self._channel.connect()
        except Exception as exc:
            log.error(f"Initial connection failed: {exc}")
            self.notifications.error(f"Could not connect to server: {exc}")
            return {"ok": False, "error": str(exc)}
        return {"ok": True, "connected": self._channel.connected}

    def close(self) -> dict[str, Any]:
        self._channel.disconnect()
        return {"ok": True}

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def on_connect(self, *_args: Any) -> None:
        with self._lock:
            self._connected = True
            self._last_connect_at = self._utc_now_iso()
        log.info("Connected to server")
        self.notifications.success("Connected to server!")

    def on_disconnect(self, *_args: Any) -> None:
        # store and pending stops survive; the next broadcast replaces them
        with self._lock:
            self._connected = False
            self._last_disconnect_at = self._utc_now_iso()
        log.warning("Lost connection to server")
        self.notifications.error("Lost connection to server!")

    def on_broadcast(self, payload: list[dict[str, Any]]) -> list[str]:
        with self._lock:
            schedules = self.store.apply_broadcast(payload)
            self._last_broadcast_at = self._utc_now_iso()
            resolved = self.correlator.reconcile(schedules)
            self.correlator.expire()
        log.debug(f"Broadcast applied: {len(schedules)} schedules, {len(resolved)} stops confirmed")
        return resolved

    def on_process_stats(self, data: dict[str, Any]) -> DebugSnapshot:
        with self._lock:
            return self.snapshot_cache.apply_snapshot(data)

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    def create_schedule(
        self,
        draft: ScheduleDraft | None = None,
        *,
        on_done: Callable[[bool], None] | None = None,
    ) -> ActionOutcome:
        with self._lock:
            if draft is not None:
                self.draft = draft
            current = self.draft
            if self._is_scheduling:
                return ActionOutcome(action="create", state="rejected", error="A schedule is already being created.")
            field_errors = current.validate()
            if field_errors:
                self.notifications.error("Please fill in all required fields with valid values!")
                return ActionOutcome(
                    action="create",
                    state="rejected",
                    error="validation_failed",
                    field_errors=field_errors,
                )
            payload = current.to_payload(self._tz)
            self._is_scheduling = True
            notification_id = self.notifications.loading("Sending and validating schedule...")

        title = current.title

        def _ack(response: Any = None, *_rest: Any) -> None:
            with self._lock:
                self._is_scheduling = False
                if isinstance(response, dict) and response.get("success"):
                    self.notifications.success(f'Scheduled "{title}" successfully!', notification_id=notification_id)
                    self.draft = current.reset_after_success()
                    ok = True
                else:
                    message = response.get("error") if isinstance(response, dict) else None
                    self.notifications.error(
                        str(message) if message else "No response from server.",
                        notification_id=notification_id,
                        duration_sec=CREATE_ERROR_DURATION_SEC,
                    )
                    ok = False
            log.info(f"create_schedule {'accepted' if ok else 'rejected'} for {title!r}")
            if on_done is not None:
                on_done(ok)

        try:
            self._channel.emit(REQUEST_CREATE_SCHEDULE, payload, callback=_ack)
        except Exception as exc:
            with self._lock:
                self._is_scheduling = False
            self.notifications.error(f"Could not send schedule: {exc}", notification_id=notification_id)
            return ActionOutcome(action="create", state="rejected", notification_id=notification_id, error=str(exc))
        return ActionOutcome(action="create", state="requested", notification_id=notification_id)

    def stop_schedule(self, schedule_id: str, title: str, *, confirm: Confirm) -> ActionOutcome:
        if not confirm(confirmation_prompt("stop", title)):
            return ActionOutcome(action="stop", state="cancelled", schedule_id=schedule_id)
        with self._lock:
            schedule = self.store.get(schedule_id)
            if schedule is None or not can_stop(schedule.status_value):
                return ActionOutcome(
                    action="stop",
                    state="rejected",
                    schedule_id=schedule_id,
                    error="Schedule cannot be stopped in its current state.",
                )
            try:
                notification_id = self.correlator.begin_stop(schedule.id, title, wire_id=schedule.wire_id)
            except Exception as exc:
                return self._send_failed("stop", f'Could not send stop request for "{title}"', exc, schedule.id)
        return ActionOutcome(action="stop", state="requested", schedule_id=schedule.id, notification_id=notification_id)

    def delete_schedule(self, schedule_id: str, title: str, *, confirm: Confirm) -> ActionOutcome:
        if not confirm(confirmation_prompt("delete", title)):
            return ActionOutcome(action="delete", state="cancelled", schedule_id=schedule_id)
        with self._lock:
            schedule = self.store.get(schedule_id)
            if schedule is None or not can_delete(schedule.status_value):
                return ActionOutcome(
                    action="delete",
                    state="rejected",
                    schedule_id=schedule_id,
                    error="Schedule cannot be deleted in its current state.",
                )
        try:
            self._channel.emit(REQUEST_DELETE_SCHEDULE, {"id": schedule.wire_id})
        except Exception as exc:
            return self._send_failed("delete", f'Could not send delete request for "{title}"', exc, schedule.id)
        notification_id = self.notifications.loading(f'Deleting "{title}"...')
        self._schedule(
            self._delete_delay_sec,
            lambda: self.notifications.success(f'Deleted "{title}".', notification_id=notification_id),
        )
        log.info(f"Delete requested for schedule {schedule.id}")
        return ActionOutcome(action="delete", state="assumed", schedule_id=schedule.id, notification_id=notification_id)

    def emergency_stop_all(self, *, confirm: Confirm) -> ActionOutcome:
        with self._lock:
            visible = emergency_control_visible(self.store.schedules())
        if not visible:
            return ActionOutcome(action="emergency_stop", state="rejected", error="No active streams to stop.")
        if not confirm(confirmation_prompt("emergency_stop")):
            return ActionOutcome(action="emergency_stop", state="cancelled")
        try:
            self._channel.emit(REQUEST_EMERGENCY_STOP_ALL)
        except Exception as exc:
            return self._send_failed("emergency_stop", "Could not send emergency stop", exc)
        notification_id = self.notifications.loading("Emergency stopping all streams...")
        self._schedule(
            self._emergency_stop_delay_sec,
            lambda: self.notifications.success("All streams emergency stopped!", notification_id=notification_id),
        )
        log.warning("Emergency stop of all streams requested")
        return ActionOutcome(action="emergency_stop", state="assumed", notification_id=notification_id)

    def _send_failed(
        self,
        action: ActionName,
        message: str,
        exc: Exception,
        schedule_id: str | None = None,
    ) -> ActionOutcome:
        log.error(f"{message}: {exc}")
        notification_id = self.notifications.error(f"{message}: {exc}")
        return ActionOutcome(
            action=action,
            state="rejected",
            schedule_id=schedule_id,
            notification_id=notification_id,
            error=str(exc) or message,
        )

    def discard_pending_stop(self, schedule_id: str) -> dict[str, Any]:
        with self._lock:
            removed = self.correlator.discard(schedule_id)
        return {"ok": removed, "schedule_id": schedule_id}

    # ------------------------------------------------------------------
    # Debug snapshot
    # ------------------------------------------------------------------

    def request_snapshot(self) -> dict[str, Any]:
        try:
            self.snapshot_cache.request_snapshot()
        except Exception as exc:
            log.error(f"Could not request process stats: {exc}")
            self.notifications.error(f"Could not request debug stats: {exc}")
            return {"ok": False, "requested": False, "error": str(exc)}
        return {"ok": True, "requested": True}

    def set_debug_visible(self, visible: bool) -> dict[str, Any]:
        with self._lock:
            was_visible = self._show_debug
            self._show_debug = bool(visible)
        result: dict[str, Any] = {"ok": True, "show_debug": self._show_debug}
        if self._show_debug and not was_visible:
            requested = self.request_snapshot()
            if not requested["ok"]:
                result["snapshot_error"] = requested["error"]
        return result

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            snap = self.snapshot_cache.snapshot()
            return {
                "ok": True,
                "snapshot": snap.to_dict() if snap is not None else None,
                "received_at": snap.received_at.isoformat() if snap is not None else None,
                "summary": self.snapshot_cache.summary(),
            }

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def schedules(self) -> list[Schedule]:
        with self._lock:
            return self.store.schedules()

    def dashboard(self) -> dict[str, Any]:
        with self._lock:
            self.correlator.expire()
            return build_dashboard(
                self.store.schedules(),
                connected=self._connected,
                snapshot=self.snapshot_cache.snapshot(),
                show_debug=self._show_debug,
                tz=self._tz,
            )

    def pending(self) -> dict[str, Any]:
        with self._lock:
            rows = [action.to_dict() for action in self.correlator.pending()]
        return {"ok": True, "pending": rows, "count": len(rows)}

    def health(self) -> dict[str, Any]:
        with self._lock:
            return {
                "ok": True,
                "source": "stream_session",
                "connected": self._connected,
                "schedule_count": len(self.store),
                "broadcast_revision": self.store.revision,
                "pending_stops": [action.schedule_id for action in self.correlator.pending()],
                "is_scheduling": self._is_scheduling,
                "last_broadcast_at": self._last_broadcast_at,
                "last_connect_at": self._last_connect_at,
                "last_disconnect_at": self._last_disconnect_at,
            }
