from __future__ import annotations

from typing import Any

from src.streamdesk.core.debug_snapshot import DebugSnapshotCache


class _FakeChannel:
    def __init__(self) -> None:
        self.connected = True
        self.emitted: list[tuple[str, Any]] = []

    def on(self, event, handler) -> None:  # noqa: ANN001
        _ = event, handler

    def emit(self, event: str, data: Any = None, *, callback=None) -> None:  # noqa: ANN001
        self.emitted.append((event, data))


_STATS = {
    "running_streams_count": 1,
    "schedule_pids": {"a": 4242},
    "retry_counts": {"b": 30},
    "download_queue_length": 2,
    "downloads_in_progress": ["c"],
    "ffmpeg_processes": ["4242 ffmpeg -re -i a.mp4"],
}


def test_snapshot_absent_until_applied():
    cache = DebugSnapshotCache(channel=_FakeChannel())
    assert cache.snapshot() is None
    assert cache.pid_for("a") is None
    assert cache.summary() == []


def test_request_snapshot_emits_without_payload():
    channel = _FakeChannel()
    cache = DebugSnapshotCache(channel=channel)
    cache.request_snapshot()
    assert channel.emitted == [("get_process_stats", None)]
    assert cache.request_count == 1
    assert cache.snapshot() is None


def test_applied_snapshot_is_returned_unchanged_until_next_apply():
    cache = DebugSnapshotCache(channel=_FakeChannel())
    applied = cache.apply_snapshot(_STATS)
    assert cache.snapshot() is applied
    assert cache.snapshot().to_dict() == _STATS
    cache.request_snapshot()
    assert cache.snapshot() is applied

    cache.apply_snapshot({"running_streams_count": 0})
    assert cache.snapshot().running_streams_count == 0
    assert cache.snapshot().schedule_pids == {}


def test_pid_lookup_treats_missing_entry_as_no_process():
    cache = DebugSnapshotCache(channel=_FakeChannel())
    cache.apply_snapshot(_STATS)
    assert cache.pid_for("a") == 4242
    assert cache.pid_for("zzz") is None


def test_pid_zero_is_kept():
    cache = DebugSnapshotCache(channel=_FakeChannel())
    cache.apply_snapshot({"schedule_pids": {"a": 0}})
    assert cache.pid_for("a") == 0


def test_summary_lines():
    cache = DebugSnapshotCache(channel=_FakeChannel())
    cache.apply_snapshot(_STATS)
    lines = cache.summary()
    assert lines[0] == "Running Streams: 1"
    assert "Active PIDs: 4242" in lines
    assert 'Retry Times (seconds): {"b": 30}' in lines
    assert "Download Queue: 2 items" in lines
    assert "Downloads In Progress: c" in lines
    assert lines[-1] == "4242 ffmpeg -re -i a.mp4"


def test_summary_for_idle_backend():
    cache = DebugSnapshotCache(channel=_FakeChannel())
    cache.apply_snapshot({"running_streams_count": 0, "download_queue_length": 0})
    lines = cache.summary()
    assert "Active PIDs: None" in lines
    assert "Downloads In Progress: None" in lines
    assert not any(line.startswith("Retry Times") for line in lines)
    assert not any(line.startswith("FFmpeg") for line in lines)
