"""Authoritative schedule list, replaced wholesale on every broadcast."""

from __future__ import annotations

from typing import Any

from .schedule_types import Schedule


class ScheduleStore:
    def __init__(self) -> None:
        self._schedules: tuple[Schedule, ...] = ()
        self._revision = 0

    @property
    def revision(self) -> int:
        """Number of broadcasts applied so far."""
        return self._revision

    def apply_broadcast(self, payload: list[dict[str, Any]]) -> list[Schedule]:
        """Replace the whole collection; server order is kept as delivered."""
        if not isinstance(payload, list):
            raise TypeError("broadcast_update payload must be a list of schedules.")
        self._schedules = tuple(Schedule.from_dict(item) for item in payload)
        self._revision += 1
        return list(self._schedules)

    def schedules(self) -> list[Schedule]:
        return list(self._schedules)

    def as_dicts(self) -> list[dict[str, Any]]:
        return [schedule.to_dict() for schedule in self._schedules]

    def get(self, schedule_id: str) -> Schedule | None:
        for schedule in self._schedules:
            if schedule.id == str(schedule_id):
                return schedule
        return None

    def __len__(self) -> int:
        return len(self._schedules)
