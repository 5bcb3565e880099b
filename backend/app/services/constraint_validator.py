"""Post-generation checks over a finished set of timetable entries.

Double-booking is reported as one hard constraint per resource kind whose
``violated`` flag is shared across all resources of that kind. Workload and
availability problems are itemised as one soft constraint each.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence

from app.schemas.timetable import TeacherPayload, TimetableConstraintPayload, TimetableEntryPayload
from app.services.time_grid import is_teacher_available
from app.services.workload import assigned_hours_by_teacher

DOUBLE_BOOKING_CHECKS: tuple[tuple[str, Callable[[TimetableEntryPayload], str]], ...] = (
    ("No teacher double-booking", lambda entry: entry.teacherId),
    ("No room double-booking", lambda entry: entry.roomId),
    ("No section double-booking", lambda entry: entry.sectionId),
)


def has_double_booking(
    entries: Iterable[TimetableEntryPayload],
    resource_of: Callable[[TimetableEntryPayload], str],
) -> bool:
    seen: dict[str, set[tuple[str, str]]] = defaultdict(set)
    for entry in entries:
        slots = seen[resource_of(entry)]
        if entry.timeSlot.key in slots:
            return True
        slots.add(entry.timeSlot.key)
    return False


def double_booking_constraints(entries: Sequence[TimetableEntryPayload]) -> list[TimetableConstraintPayload]:
    return [
        TimetableConstraintPayload(
            type="hard",
            description=description,
            violated=has_double_booking(entries, resource_of),
        )
        for description, resource_of in DOUBLE_BOOKING_CHECKS
    ]


def workload_constraints(
    entries: Sequence[TimetableEntryPayload],
    teachers: Sequence[TeacherPayload],
) -> list[TimetableConstraintPayload]:
    hours = assigned_hours_by_teacher(entries)
    constraints: list[TimetableConstraintPayload] = []
    for teacher in teachers:
        assigned = hours.get(teacher.id, 0)
        if assigned > teacher.maxHoursPerWeek:
            constraints.append(
                TimetableConstraintPayload(
                    type="soft",
                    description=f"{teacher.name} exceeds maximum hours: {assigned}/{teacher.maxHoursPerWeek}",
                    violated=True,
                )
            )
    return constraints


def availability_constraints(
    entries: Sequence[TimetableEntryPayload],
    teachers: Sequence[TeacherPayload],
) -> list[TimetableConstraintPayload]:
    teacher_by_id = {teacher.id: teacher for teacher in teachers}
    constraints: list[TimetableConstraintPayload] = []
    for entry in entries:
        teacher = teacher_by_id.get(entry.teacherId)
        if teacher is None or is_teacher_available(teacher, entry.timeSlot):
            continue
        constraints.append(
            TimetableConstraintPayload(
                type="soft",
                description=(
                    f"{teacher.name} scheduled outside availability on "
                    f"{entry.timeSlot.day} at {entry.timeSlot.startTime}"
                ),
                violated=True,
            )
        )
    return constraints


def validate_constraints(
    entries: Sequence[TimetableEntryPayload],
    teachers: Sequence[TeacherPayload],
) -> list[TimetableConstraintPayload]:
    return [
        *double_booking_constraints(entries),
        *workload_constraints(entries, teachers),
        *availability_constraints(entries, teachers),
    ]


def count_hard_conflicts(constraints: Iterable[TimetableConstraintPayload]) -> int:
    return sum(1 for item in constraints if item.type == "hard" and item.violated)
