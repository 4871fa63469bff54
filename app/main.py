"""Local operator web surface over a StreamSession."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from src.streamdesk.core.schedule_form import DEFAULT_DURATION_MINUTES, DEFAULT_RTMP_SERVER, ScheduleDraft
from src.streamdesk.runtime.session import StreamSession


class CreateScheduleRequest(BaseModel):
    title: str = ""
    video_input: str = ""
    date: str = ""
    time: str = ""
    stream_key: str = ""
    rtmp_server: str = DEFAULT_RTMP_SERVER
    duration_type: Literal["infinite", "custom"] = "infinite"
    duration: int | str = DEFAULT_DURATION_MINUTES


class ConfirmRequest(BaseModel):
    confirmed: bool = False
    title: str | None = None


class DebugToggleRequest(BaseModel):
    visible: bool


def _session(request: Request) -> StreamSession:
    return request.app.state.session


def _confirmed(flag: bool):
    return lambda _prompt: flag


def _title_for(session: StreamSession, schedule_id: str, fallback: str | None) -> str:
    if fallback:
        return fallback
    schedule = session.store.get(schedule_id)
    return schedule.title if schedule is not None else schedule_id


def create_app(session: StreamSession) -> FastAPI:
    app = FastAPI(title="StreamDesk")
    app.state.session = session

    @app.get("/health")
    def health(request: Request) -> dict:
        return _session(request).health()

    @app.get("/api/dashboard")
    def dashboard(request: Request) -> dict:
        return _session(request).dashboard()

    @app.get("/api/schedules")
    def schedules(request: Request) -> dict:
        rows = [item.to_dict() for item in _session(request).schedules()]
        return {"ok": True, "schedules": rows, "count": len(rows)}

    @app.post("/api/schedules")
    def create_schedule(req: CreateScheduleRequest, request: Request) -> dict:
        draft = ScheduleDraft(
            title=req.title,
            video_input=req.video_input,
            date=req.date,
            time=req.time,
            stream_key=req.stream_key,
            rtmp_server=req.rtmp_server,
            duration_type=req.duration_type,
            duration=req.duration,
        )
        return _session(request).create_schedule(draft).to_dict()

    @app.post("/api/schedules/{schedule_id}/stop")
    def stop_schedule(schedule_id: str, req: ConfirmRequest, request: Request) -> dict:
        session = _session(request)
        title = _title_for(session, schedule_id, req.title)
        return session.stop_schedule(schedule_id, title, confirm=_confirmed(req.confirmed)).to_dict()

    @app.delete("/api/schedules/{schedule_id}")
    def delete_schedule(schedule_id: str, request: Request, confirmed: bool = False) -> dict:
        session = _session(request)
        title = _title_for(session, schedule_id, None)
        return session.delete_schedule(schedule_id, title, confirm=_confirmed(confirmed)).to_dict()

    @app.post("/api/emergency-stop")
    def emergency_stop(req: ConfirmRequest, request: Request) -> dict:
        return _session(request).emergency_stop_all(confirm=_confirmed(req.confirmed)).to_dict()

    @app.get("/api/pending")
    def pending(request: Request) -> dict:
        return _session(request).pending()

    @app.delete("/api/pending/{schedule_id}")
    def discard_pending(schedule_id: str, request: Request) -> dict:
        return _session(request).discard_pending_stop(schedule_id)

    @app.get("/api/notifications")
    def notifications(request: Request, limit: int = 20) -> dict:
        safe_limit = max(1, min(200, int(limit)))
        rows: list[dict[str, Any]] = [n.to_dict() for n in _session(request).notifications.recent(safe_limit)]
        return {"ok": True, "notifications": rows, "count": len(rows)}

    @app.post("/api/debug")
    def toggle_debug(req: DebugToggleRequest, request: Request) -> dict:
        return _session(request).set_debug_visible(req.visible)

    @app.post("/api/debug/refresh")
    def refresh_debug(request: Request) -> dict:
        return _session(request).request_snapshot()

    @app.get("/api/debug/snapshot")
    def debug_snapshot(request: Request) -> dict:
        return _session(request).snapshot()

    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse(_INDEX_HTML)

    return app


_INDEX_HTML = """<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>StreamDesk</title>
  <style>
    body { background: #111827; color: #f3f4f6; font-family: sans-serif; margin: 2rem; }
    .row { border: 1px solid #374151; border-radius: 6px; padding: .75rem; margin: .5rem 0; }
    .badge { font-size: .75rem; padding: .1rem .5rem; border-radius: 999px; }
    #conn { font-size: .8rem; }
  </style>
</head>
<body>
  <h1>StreamDesk <span id="conn"></span></h1>
  <div id="schedules"></div>
  <script>
    async function refresh() {
      const res = await fetch('/api/dashboard');
      const body = await res.json();
      document.getElementById('conn').textContent = body.connected ? 'Connected' : 'Disconnected';
      const list = document.getElementById('schedules');
      list.innerHTML = '';
      for (const row of body.schedules) {
        const el = document.createElement('div');
        el.className = 'row';
        el.textContent = `${row.title} | ${row.display.label} | ${row.broadcast_time} | ${row.duration}`;
        list.appendChild(el);
      }
    }
    refresh();
    setInterval(refresh, 2000);
  </script>
</body>
</html>
"""
