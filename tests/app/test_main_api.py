from __future__ import annotations

from typing import Any, Callable

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from app.main import create_app
from src.streamdesk.runtime.session import StreamSession


class _FakeChannel:
    def __init__(self) -> None:
        self.connected = True
        self.handlers: dict[str, Callable[..., Any]] = {}
        self.emitted: list[tuple[str, Any]] = []
        self.callbacks: list[Any] = []

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.handlers[event] = handler

    def emit(self, event: str, data: Any = None, *, callback=None) -> None:  # noqa: ANN001
        self.emitted.append((event, data))
        self.callbacks.append(callback)

    def connect(self) -> None:
        self.handlers["connect"]()

    def disconnect(self) -> None:
        self.handlers["disconnect"]()


def _client() -> tuple[TestClient, StreamSession, _FakeChannel]:
    channel = _FakeChannel()
    session = StreamSession(channel=channel, scheduler=lambda delay, fn: fn())
    channel.handlers["broadcast_update"](
        [
            {"id": "a", "title": "Live one", "status": "LIVE"},
            {"id": "b", "title": "Done one", "status": "COMPLETED"},
        ]
    )
    return TestClient(create_app(session)), session, channel


def test_health_endpoint_uses_session():
    client, _session, _channel = _client()
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["source"] == "stream_session"
    assert body["schedule_count"] == 2


def test_dashboard_and_schedules_endpoints():
    client, _session, _channel = _client()
    dashboard = client.get("/api/dashboard").json()
    assert dashboard["emergency_visible"] is True
    assert [row["can_stop"] for row in dashboard["schedules"]] == [True, False]
    assert [row["can_delete"] for row in dashboard["schedules"]] == [False, True]

    raw = client.get("/api/schedules").json()
    assert raw["schedules"][0] == {"id": "a", "title": "Live one", "status": "LIVE"}


def test_stop_requires_confirmation():
    client, session, channel = _client()
    res = client.post("/api/schedules/a/stop", json={"confirmed": False})
    assert res.json()["state"] == "cancelled"
    assert channel.emitted == []

    res = client.post("/api/schedules/a/stop", json={"confirmed": True})
    body = res.json()
    assert body["ok"] is True
    assert body["state"] == "requested"
    assert session.correlator.is_pending("a")

    pending = client.get("/api/pending").json()
    assert pending["count"] == 1
    assert pending["pending"][0]["title"] == "Live one"


def test_discard_pending_endpoint():
    client, session, _channel = _client()
    client.post("/api/schedules/a/stop", json={"confirmed": True})

    assert client.delete("/api/pending/a").json() == {"ok": True, "schedule_id": "a"}
    assert not session.correlator.is_pending("a")
    assert client.delete("/api/pending/a").json()["ok"] is False


def test_actions_on_dropped_channel_return_rejected_outcomes(monkeypatch):
    client, session, channel = _client()

    def _refuse(event, data=None, *, callback=None):  # noqa: ANN001
        raise ConnectionError("/ is not a connected namespace.")

    monkeypatch.setattr(channel, "emit", _refuse)
    res = client.post("/api/schedules/a/stop", json={"confirmed": True})
    assert res.status_code == 200
    assert res.json()["state"] == "rejected"
    assert not session.correlator.is_pending("a")

    res = client.delete("/api/schedules/b", params={"confirmed": True})
    assert res.status_code == 200
    assert res.json()["state"] == "rejected"

    assert client.post("/api/debug/refresh").json()["ok"] is False


def test_delete_endpoint_is_optimistic():
    client, _session, channel = _client()
    body = client.delete("/api/schedules/b", params={"confirmed": True}).json()
    assert body["state"] == "assumed"
    assert channel.emitted == [("delete_schedule", {"id": "b"})]

    notes = client.get("/api/notifications").json()["notifications"]
    assert any(n["message"] == 'Deleted "Done one".' and n["kind"] == "success" for n in notes)


def test_emergency_stop_endpoint():
    client, _session, channel = _client()
    body = client.post("/api/emergency-stop", json={"confirmed": True}).json()
    assert body["state"] == "assumed"
    assert channel.emitted == [("emergency_stop_all", None)]


def test_create_endpoint_reports_validation_errors():
    client, _session, channel = _client()
    body = client.post("/api/schedules", json={"title": "x"}).json()
    assert body["ok"] is False
    assert "stream_key" in body["field_errors"]
    assert channel.emitted == []


def test_create_endpoint_sends_request():
    client, session, channel = _client()
    body = client.post(
        "/api/schedules",
        json={
            "title": "New",
            "video_input": "https://v",
            "date": "2026-03-01",
            "time": "10:00",
            "stream_key": "k",
            "duration_type": "custom",
            "duration": 20,
        },
    ).json()
    assert body["state"] == "requested"
    assert channel.emitted[0][0] == "create_schedule"
    assert channel.emitted[0][1]["durationMinutes"] == 20
    channel.callbacks[0]({"success": False, "error": "bad key"})
    assert session.notifications.get(body["notification_id"]).message == "bad key"


def test_debug_endpoints():
    client, _session, channel = _client()
    assert client.get("/api/debug/snapshot").json()["snapshot"] is None

    assert client.post("/api/debug", json={"visible": True}).json()["show_debug"] is True
    assert channel.emitted == [("get_process_stats", None)]
    channel.handlers["process_stats"]({"running_streams_count": 1, "schedule_pids": {"a": 12}})

    snap = client.get("/api/debug/snapshot").json()
    assert snap["snapshot"]["schedule_pids"] == {"a": 12}
    assert "Active PIDs: 12" in snap["summary"]
    assert client.get("/api/dashboard").json()["schedules"][0]["pid"] == 12

    client.post("/api/debug/refresh")
    assert channel.emitted[-1] == ("get_process_stats", None)


def test_index_page():
    client, _session, _channel = _client()
    res = client.get("/")
    assert res.status_code == 200
    assert "StreamDesk" in res.text
