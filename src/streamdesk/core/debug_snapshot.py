"""On-demand process stats, kept apart from the schedule store."""

from __future__ import annotations

import json
from typing import Any

from .channel import REQUEST_GET_PROCESS_STATS, ChannelAdapter
from .schedule_types import DebugSnapshot


class DebugSnapshotCache:
    """Holds the last `process_stats` response; refreshed only on request."""

    def __init__(self, *, channel: ChannelAdapter) -> None:
        self._channel = channel
        self._snapshot: DebugSnapshot | None = None
        self._requests = 0

    @property
    def request_count(self) -> int:
        return self._requests

    def request_snapshot(self) -> None:
        self._channel.emit(REQUEST_GET_PROCESS_STATS)
        self._requests += 1

    def apply_snapshot(self, data: DebugSnapshot | dict[str, Any]) -> DebugSnapshot:
        snapshot = data if isinstance(data, DebugSnapshot) else DebugSnapshot.from_dict(data)
        self._snapshot = snapshot
        return snapshot

    def snapshot(self) -> DebugSnapshot | None:
        return self._snapshot

    def pid_for(self, schedule_id: str) -> Any | None:
        """Process id for a schedule; None means no associated process."""
        if self._snapshot is None:
            return None
        return self._snapshot.schedule_pids.get(schedule_id)

    def summary(self) -> list[str]:
        snap = self._snapshot
        if snap is None:
            return []
        pids = ", ".join(str(pid) for pid in snap.schedule_pids.values()) or "None"
        lines = [
            f"Running Streams: {snap.running_streams_count}",
            f"Active PIDs: {pids}",
        ]
        if snap.retry_counts:
            lines.append(f"Retry Times (seconds): {json.dumps(snap.retry_counts)}")
        lines.append(f"Download Queue: {snap.download_queue_length} items")
        downloads = ", ".join(str(item) for item in snap.downloads_in_progress) or "None"
        lines.append(f"Downloads In Progress: {downloads}")
        if snap.ffmpeg_processes:
            lines.append(f"FFmpeg Processes ({len(snap.ffmpeg_processes)}):")
            lines.extend(snap.ffmpeg_processes)
        return lines
