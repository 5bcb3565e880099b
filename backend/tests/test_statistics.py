from datetime import datetime, timezone

from app.schemas.settings import DEFAULT_SCHEDULING_PREFERENCES
from app.schemas.timetable import (
    GeneratedTimetablePayload,
    RoomPayload,
    SectionPayload,
    TeacherPayload,
    TimeSlotPayload,
    TimetableConstraintPayload,
    TimetableEntryPayload,
)
from app.services.snapshot import GenerationInputs
from app.services.statistics import compute_statistics
from app.services.workload import utilization_percent, workload_overage


def _inputs(**overrides):
    values = dict(
        teachers=(
            TeacherPayload(id="t1", name="Ada", maxHoursPerWeek=2),
            TeacherPayload(id="t2", name="Alan", maxHoursPerWeek=10),
        ),
        subjects=(),
        rooms=(
            RoomPayload(id="r1", name="Room 1", type="classroom", capacity=40),
            RoomPayload(id="r2", name="Room 2", type="classroom", capacity=40),
        ),
        sections=(
            SectionPayload(id="s1", name="A", studentCount=30),
            SectionPayload(id="s2", name="B", studentCount=35),
        ),
        breaks=(),
        preferences=DEFAULT_SCHEDULING_PREFERENCES,
    )
    values.update(overrides)
    return GenerationInputs(**values)


def _entry(entry_id, teacher, room, day, start):
    hour = int(start[:2]) + 1
    return TimetableEntryPayload(
        id=entry_id,
        sectionId="s1",
        subjectId="c1",
        teacherId=teacher,
        roomId=room,
        timeSlot=TimeSlotPayload(day=day, startTime=start, endTime=f"{hour:02d}:00"),
    )


def _timetable(entries, constraints=()):
    return GeneratedTimetablePayload(
        id="tt1",
        name="Draft",
        entries=tuple(entries),
        constraints=tuple(constraints),
        generatedAt=datetime(2025, 1, 6, tzinfo=timezone.utc),
        conflicts=0,
    )


def test_room_and_teacher_usage():
    timetable = _timetable(
        [
            _entry("e1", "t1", "r1", "Tuesday", "10:00"),
            _entry("e2", "t1", "r1", "Monday", "09:00"),
            _entry("e3", "t1", "r1", "Tuesday", "09:00"),
        ],
        [TimetableConstraintPayload(type="soft", description="Ada exceeds maximum hours: 3/2", violated=True)],
    )
    stats = compute_statistics(timetable, _inputs())

    assert [(item.room_id, item.used_slots, item.total_slots) for item in stats.rooms] == [
        ("r1", 3, 35),
        ("r2", 0, 35),
    ]
    assert stats.rooms[0].utilization == 8.6
    ada, alan = stats.teachers
    assert (ada.assigned_hours, ada.utilization, ada.overloaded) == (3, 150.0, True)
    assert (alan.assigned_hours, alan.utilization, alan.overloaded) == (0, 0.0, False)
    assert stats.overall.total_classes == 3
    assert stats.overall.peak_day == "Tuesday"
    assert stats.overall.unmet_soft_constraints == 1
    assert stats.overall.hard_conflicts == 0


def test_peak_ties_go_to_first_seen_and_empty_is_na():
    tied = _timetable([_entry("e1", "t2", "r2", "Wednesday", "14:00"), _entry("e2", "t2", "r2", "Monday", "09:00")])
    stats = compute_statistics(tied, _inputs())
    assert stats.overall.peak_day == "Wednesday"
    assert stats.overall.peak_time == "14:00"

    empty = compute_statistics(_timetable([]), _inputs())
    assert empty.overall.peak_day == "N/A"
    assert empty.overall.peak_time == "N/A"
    assert empty.overall.total_classes == 0


def test_average_class_size_rounds_half_up():
    stats = compute_statistics(_timetable([]), _inputs())
    assert stats.overall.avg_class_size == 33
    assert compute_statistics(_timetable([]), _inputs(sections=())).overall.avg_class_size == 0


def test_serialises_with_camel_case_aliases():
    data = compute_statistics(_timetable([]), _inputs()).model_dump(by_alias=True)
    assert set(data["overall"]) >= {"totalClasses", "avgClassSize", "peakDay", "peakTime"}
    assert data["rooms"][0]["roomName"] == "Room 1"
    assert data["timetableId"] == "tt1"


def test_recommendations_follow_thresholds():
    stats = compute_statistics(_timetable([]), _inputs())
    assert any("low utilization" in item for item in stats.recommendations)
    assert any("light workloads" in item for item in stats.recommendations)
    assert not any("near maximum capacity" in item for item in stats.recommendations)


def test_workload_helpers():
    assert workload_overage(5, 3) == 2
    assert workload_overage(2, 3) == 0
    assert utilization_percent(1, 3) == 33.3
    assert utilization_percent(4, 0) == 0.0
