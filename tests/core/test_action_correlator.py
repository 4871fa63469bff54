from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from src.streamdesk.core.action_correlator import ActionCorrelator, is_expired
from src.streamdesk.core.notifications import NotificationCenter
from src.streamdesk.core.schedule_types import Schedule


class _FakeChannel:
    def __init__(self) -> None:
        self.connected = True
        self.emitted: list[tuple[str, Any]] = []
        self.callbacks: list[Any] = []

    def on(self, event, handler) -> None:  # noqa: ANN001
        _ = event, handler

    def emit(self, event: str, data: Any = None, *, callback=None) -> None:  # noqa: ANN001
        self.emitted.append((event, data))
        self.callbacks.append(callback)


def _schedules(*rows: tuple[str, str, str]) -> list[Schedule]:
    return [Schedule.from_dict({"id": sid, "status": status, "title": title}) for sid, status, title in rows]


def _correlator(**kwargs) -> tuple[ActionCorrelator, _FakeChannel, NotificationCenter]:
    channel = _FakeChannel()
    notifications = NotificationCenter()
    return ActionCorrelator(channel=channel, notifications=notifications, **kwargs), channel, notifications


def test_begin_stop_emits_without_ack_and_tracks_pending():
    correlator, channel, notifications = _correlator()
    nid = correlator.begin_stop("a", "X")

    assert channel.emitted == [("stop_schedule", {"id": "a"})]
    assert channel.callbacks == [None]
    assert correlator.is_pending("a")
    entry = notifications.get(nid)
    assert entry is not None
    assert entry.kind == "loading"
    assert '"X"' in entry.message


def test_reconcile_resolves_completed_stop_once():
    correlator, _channel, notifications = _correlator()
    nid = correlator.begin_stop("a", "X")

    resolved = correlator.reconcile(_schedules(("a", "COMPLETED", "X")))
    assert resolved == ["a"]
    assert len(correlator) == 0
    entry = notifications.get(nid)
    assert entry is not None and entry.kind == "success"
    assert "X" in entry.message

    assert correlator.reconcile(_schedules(("a", "COMPLETED", "X"))) == []


def test_reconcile_leaves_non_terminal_failed_and_missing_pending():
    correlator, _channel, notifications = _correlator()
    correlator.begin_stop("a", "A")
    correlator.begin_stop("b", "B")
    correlator.begin_stop("c", "C")

    resolved = correlator.reconcile(_schedules(("a", "STOPPING", "A"), ("b", "FAILED", "B")))
    assert resolved == []
    assert {p.schedule_id for p in correlator.pending()} == {"a", "b", "c"}
    assert all(notifications.get(p.notification_id).kind == "loading" for p in correlator.pending())


def test_stop_for_vanished_schedule_stays_pending_without_timeout():
    correlator, _channel, _notifications = _correlator()
    correlator.begin_stop("gone", "Gone")
    for _ in range(5):
        correlator.reconcile(_schedules(("other", "LIVE", "Other")))
    later = datetime.now(timezone.utc) + timedelta(days=365)
    assert correlator.expire(now=later) == []
    assert correlator.is_pending("gone")


def test_reconcile_uses_broadcast_title():
    correlator, _channel, notifications = _correlator()
    nid = correlator.begin_stop("a", "Old title")
    correlator.reconcile(_schedules(("a", "COMPLETED", "New title")))
    assert "New title" in notifications.get(nid).message


def test_second_stop_reuses_notification():
    correlator, channel, notifications = _correlator()
    first = correlator.begin_stop("a", "X")
    second = correlator.begin_stop("a", "X")
    assert first == second
    assert len(correlator) == 1
    assert len(channel.emitted) == 2
    assert len(notifications) == 1


def test_expire_with_timeout_marks_error():
    correlator, _channel, notifications = _correlator(pending_timeout_sec=30)
    nid = correlator.begin_stop("a", "X")
    assert correlator.expire(now=datetime.now(timezone.utc)) == []

    expired = correlator.expire(now=datetime.now(timezone.utc) + timedelta(seconds=31))
    assert expired == ["a"]
    assert not correlator.is_pending("a")
    assert notifications.get(nid).kind == "error"


def test_discard_dismisses_notification():
    correlator, _channel, notifications = _correlator()
    nid = correlator.begin_stop("a", "X")
    assert correlator.discard("a") is True
    assert notifications.get(nid) is None
    assert correlator.discard("a") is False


def test_invalid_timeout_raises():
    with pytest.raises(ValueError, match="pending_timeout_sec"):
        _correlator(pending_timeout_sec=0)


def test_is_expired_helper():
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert is_expired(start, timeout_sec=None, now=start + timedelta(days=10)) is False
    assert is_expired(start, timeout_sec=10, now=start + timedelta(seconds=9)) is False
    assert is_expired(start, timeout_sec=10, now=start + timedelta(seconds=10)) is True


def test_begin_stop_sends_wire_id_and_keys_by_normalized_id():
    correlator, channel, _notifications = _correlator()
    correlator.begin_stop("7", "X", wire_id=7)
    assert channel.emitted == [("stop_schedule", {"id": 7})]
    assert correlator.reconcile(_schedules(("7", "COMPLETED", "X"))) == ["7"]


def test_begin_stop_records_nothing_when_send_fails(monkeypatch):
    correlator, channel, notifications = _correlator()

    def _refuse(event, data=None, *, callback=None):  # noqa: ANN001
        raise ConnectionError("/ is not a connected namespace.")

    monkeypatch.setattr(channel, "emit", _refuse)
    with pytest.raises(ConnectionError):
        correlator.begin_stop("a", "X")
    assert len(correlator) == 0
    assert len(notifications) == 0
