from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from app.schemas.timetable import TimetableEntryPayload


def assigned_hours_by_teacher(entries: Iterable[TimetableEntryPayload]) -> Counter[str]:
    # Every entry is a one-hour meeting.
    return Counter(entry.teacherId for entry in entries)


def workload_overage(assigned_hours: int, max_hours: int) -> int:
    return max(0, assigned_hours - max_hours)


def utilization_percent(used: int, capacity: int) -> float:
    if capacity <= 0:
        return 0.0
    return round(used / capacity * 100, 1)
