from __future__ import annotations

from collections import Counter
import math

from app.schemas.statistics import (
    OverallStatistics,
    RoomUtilizationEntry,
    TeacherWorkloadEntry,
    TimetableStatisticsOut,
)
from app.schemas.timetable import GeneratedTimetablePayload
from app.services.snapshot import GenerationInputs
from app.services.time_grid import TIME_GRID
from app.services.workload import assigned_hours_by_teacher, utilization_percent, workload_overage

LOW_ROOM_UTILIZATION = 30.0
HIGH_ROOM_UTILIZATION = 80.0
LOW_TEACHER_UTILIZATION = 40.0
HIGH_TEACHER_UTILIZATION = 90.0


def _most_common_key(counter: Counter[str]) -> str:
    # Ties go to the key seen first.
    if not counter:
        return "N/A"
    return max(counter, key=counter.__getitem__)


def _recommendations(rooms: list[RoomUtilizationEntry], teachers: list[TeacherWorkloadEntry]) -> list[str]:
    notes: list[str] = []
    if any(item.utilization < LOW_ROOM_UTILIZATION for item in rooms):
        notes.append(
            "Some rooms have low utilization (<30%). Consider consolidating classes "
            "or repurposing underutilized rooms."
        )
    if any(item.utilization > HIGH_TEACHER_UTILIZATION for item in teachers):
        notes.append(
            "Some teachers are near maximum capacity (>90%). Consider redistributing "
            "workload or hiring additional faculty."
        )
    if any(item.utilization > HIGH_ROOM_UTILIZATION for item in rooms):
        notes.append("High room utilization (>80%) detected.")
    if any(item.utilization < LOW_TEACHER_UTILIZATION for item in teachers):
        notes.append(
            "Some teachers have light workloads (<40%). They may be able to take on "
            "additional subjects or sections."
        )
    return notes


def compute_statistics(timetable: GeneratedTimetablePayload, inputs: GenerationInputs) -> TimetableStatisticsOut:
    """Summarise resource usage of one timetable against the current entities.

    Room utilisation is measured against the full weekly grid, whatever the
    preferences and breaks removed at generation time.
    """
    total_slots = len(TIME_GRID)
    room_usage = Counter(entry.roomId for entry in timetable.entries)
    rooms = [
        RoomUtilizationEntry(
            room_id=room.id,
            room_name=room.name,
            total_slots=total_slots,
            used_slots=room_usage.get(room.id, 0),
            utilization=utilization_percent(room_usage.get(room.id, 0), total_slots),
        )
        for room in inputs.rooms
    ]

    teacher_hours = assigned_hours_by_teacher(timetable.entries)
    teachers = [
        TeacherWorkloadEntry(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            assigned_hours=teacher_hours.get(teacher.id, 0),
            max_hours=teacher.maxHoursPerWeek,
            utilization=utilization_percent(teacher_hours.get(teacher.id, 0), teacher.maxHoursPerWeek),
            overloaded=workload_overage(teacher_hours.get(teacher.id, 0), teacher.maxHoursPerWeek) > 0,
        )
        for teacher in inputs.teachers
    ]

    day_counts = Counter(entry.timeSlot.day for entry in timetable.entries)
    time_counts = Counter(entry.timeSlot.startTime for entry in timetable.entries)
    total_students = sum(section.studentCount for section in inputs.sections)
    avg_class_size = math.floor(total_students / len(inputs.sections) + 0.5) if inputs.sections else 0

    overall = OverallStatistics(
        total_classes=len(timetable.entries),
        avg_class_size=avg_class_size,
        peak_day=_most_common_key(day_counts),
        peak_time=_most_common_key(time_counts),
        hard_conflicts=timetable.conflicts,
        unmet_soft_constraints=sum(
            1 for item in timetable.constraints if item.type == "soft" and item.violated
        ),
    )
    return TimetableStatisticsOut(
        timetable_id=timetable.id,
        overall=overall,
        rooms=rooms,
        teachers=teachers,
        recommendations=_recommendations(rooms, teachers),
    )
