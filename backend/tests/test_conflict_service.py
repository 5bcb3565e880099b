from datetime import datetime, timezone

import pytest

from app.schemas.settings import BreakTimePayload
from app.schemas.timetable import (
    GeneratedTimetablePayload,
    SectionPayload,
    SubjectPayload,
    TeacherPayload,
    TimeSlotPayload,
    TimetableEntryPayload,
)
from app.services.conflict_service import ConflictService


def _entry(entry_id, *, section="s1", subject="c1", teacher="t1", room="r1", day="Monday", start="09:00", end="10:00"):
    return TimetableEntryPayload(
        id=entry_id,
        sectionId=section,
        subjectId=subject,
        teacherId=teacher,
        roomId=room,
        timeSlot=TimeSlotPayload(day=day, startTime=start, endTime=end),
    )


def _timetable(*entries):
    return GeneratedTimetablePayload(
        id="tt1",
        name="Draft",
        entries=entries,
        generatedAt=datetime(2025, 1, 6, tzinfo=timezone.utc),
    )


@pytest.fixture
def lookups():
    return {
        "teacher_map": {
            "t1": TeacherPayload(id="t1", name="Prof A"),
            "t2": TeacherPayload(
                id="t2",
                name="Prof B",
                availability=(TimeSlotPayload(day="Tuesday", startTime="09:00", endTime="17:00"),),
            ),
        },
        "subject_map": {
            "c1": SubjectPayload(id="c1", name="Course 1", code="C1", hoursPerWeek=3),
            "c2": SubjectPayload(id="c2", name="Course 2", code="C2", hoursPerWeek=3),
        },
        "section_map": {
            "s1": SectionPayload(id="s1", name="CSE-A", studentCount=30),
            "s2": SectionPayload(id="s2", name="CSE-B", studentCount=30),
        },
        "room_names": {"r1": "Room 1", "r2": "Room 2"},
    }


def test_detect_room_conflict(lookups):
    payload = _timetable(
        _entry("e1"),
        _entry("e2", section="s2", subject="c2", teacher="t2", day="Monday"),
    )
    report = ConflictService(payload, **lookups).detect_conflicts()

    room_conflicts = [item for item in report.conflicts if item.conflict_type == "room_conflict"]
    assert len(room_conflicts) == 1
    assert room_conflicts[0].severity == "high"
    assert "Room 1" in room_conflicts[0].description
    assert "C1 and C2" in room_conflicts[0].description
    assert set(room_conflicts[0].affected_entries) == {"e1", "e2"}
    assert report.timetable_id == "tt1"


def test_detect_teacher_and_section_conflicts(lookups):
    payload = _timetable(_entry("e1"), _entry("e2", subject="c2", room="r2"))
    report = ConflictService(payload, **lookups).detect_conflicts()

    kinds = sorted(item.conflict_type for item in report.conflicts)
    assert kinds == ["section_conflict", "teacher_conflict"]
    assert report.high_severity_count == 2
    assert all(item.suggestion for item in report.conflicts)


def test_partial_overlap_is_detected(lookups):
    payload = _timetable(
        _entry("e1", start="09:00", end="10:00"),
        _entry("e2", section="s2", teacher="t1", room="r2", start="09:30", end="10:30"),
    )
    report = ConflictService(payload, **lookups).detect_conflicts()
    assert [item.conflict_type for item in report.conflicts] == ["teacher_conflict"]


def test_adjacent_entries_do_not_conflict(lookups):
    payload = _timetable(_entry("e1"), _entry("e2", start="10:00", end="11:00"))
    assert ConflictService(payload, **lookups).detect_conflicts().conflicts == []


def test_availability_and_break_conflicts(lookups):
    payload = _timetable(_entry("e1", teacher="t2", day="Wednesday", start="11:00", end="12:00"))
    breaks = [BreakTimePayload(id="b1", name="Assembly", day="Wednesday", startTime="11:30", endTime="12:30")]
    report = ConflictService(payload, breaks=breaks, **lookups).detect_conflicts()

    by_kind = {item.conflict_type: item for item in report.conflicts}
    assert set(by_kind) == {"availability_conflict", "break_conflict"}
    assert by_kind["availability_conflict"].severity == "medium"
    assert "Prof B" in by_kind["availability_conflict"].description
    assert by_kind["break_conflict"].severity == "low"
    assert "Assembly" in by_kind["break_conflict"].description
    assert report.high_severity_count == 0


def test_deleted_entities_fall_back_to_ids(lookups):
    payload = _timetable(
        _entry("e1", subject="gone", room="r9"),
        _entry("e2", section="s2", subject="gone", teacher="t3", room="r9"),
    )
    report = ConflictService(payload, **lookups).detect_conflicts()
    assert [item.conflict_type for item in report.conflicts] == ["room_conflict"]
    assert "r9" in report.conflicts[0].description
