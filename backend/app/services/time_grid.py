"""Weekly slot catalogue and the preference/break filter applied to it."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from app.schemas.settings import SchedulingPreferencesPayload, minutes_to_time, parse_time_to_minutes
from app.schemas.timetable import TeacherPayload, TimeSlotPayload

GRID_DAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
GRID_DAY_START = "09:00"
GRID_DAY_END = "17:00"
# Always excluded from the grid, independent of the configurable lunch window.
GRID_MIDDAY_GAP = ("13:00", "14:00")
SLOT_MINUTES = 60


def _build_time_grid() -> tuple[TimeSlotPayload, ...]:
    day_start = parse_time_to_minutes(GRID_DAY_START)
    day_end = parse_time_to_minutes(GRID_DAY_END)
    gap_start, gap_end = (parse_time_to_minutes(value) for value in GRID_MIDDAY_GAP)

    slots: list[TimeSlotPayload] = []
    for day in GRID_DAYS:
        for start in range(day_start, day_end, SLOT_MINUTES):
            if gap_start <= start < gap_end:
                continue
            slots.append(
                TimeSlotPayload(
                    day=day,
                    startTime=minutes_to_time(start),
                    endTime=minutes_to_time(start + SLOT_MINUTES),
                )
            )
    return tuple(slots)


TIME_GRID: tuple[TimeSlotPayload, ...] = _build_time_grid()
GRID_START_TIMES: tuple[str, ...] = tuple(dict.fromkeys(slot.startTime for slot in TIME_GRID))


def is_consecutive_slot(first_start: str, second_start: str) -> bool:
    return abs(parse_time_to_minutes(second_start) - parse_time_to_minutes(first_start)) == SLOT_MINUTES


def _starts_within(start: int, window_start: str, window_end: str) -> bool:
    return parse_time_to_minutes(window_start) <= start < parse_time_to_minutes(window_end)


def compute_available_slots(
    grid: Sequence[TimeSlotPayload],
    preferences: SchedulingPreferencesPayload,
    breaks: Iterable,
) -> list[TimeSlotPayload]:
    """Return the grid slots usable for placement, in grid order.

    ``breaks`` holds anything with ``day``, ``startTime`` and ``endTime``.
    The returned order is the greedy scan order of the generator.
    """
    break_windows = [(item.day, item.startTime, item.endTime) for item in breaks]
    available: list[TimeSlotPayload] = []
    for slot in grid:
        start = slot.start_minutes
        if not _starts_within(start, preferences.preferredStartTime, preferences.preferredEndTime):
            continue
        if preferences.lunchBreakRequired and _starts_within(
            start, preferences.lunchBreakStart, preferences.lunchBreakEnd
        ):
            continue
        if any(
            day == slot.day and _starts_within(start, break_start, break_end)
            for day, break_start, break_end in break_windows
        ):
            continue
        available.append(slot)
    return available


def is_teacher_available(teacher: TeacherPayload, slot: TimeSlotPayload) -> bool:
    if not teacher.availability:
        return True
    return any(
        window.day == slot.day
        and window.start_minutes <= slot.start_minutes
        and window.end_minutes >= slot.end_minutes
        for window in teacher.availability
    )
