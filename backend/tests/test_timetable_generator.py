from collections import Counter, defaultdict

from app.schemas.settings import BreakTimePayload, DEFAULT_SCHEDULING_PREFERENCES, SchedulingPreferencesPayload
from app.schemas.timetable import RoomPayload, SectionPayload, SubjectPayload, TeacherPayload, TimeSlotPayload
from app.services.timetable_generator import TimetableGenerator, generate


def teacher(teacher_id, *, windows=(), max_hours=20):
    return TeacherPayload(
        id=teacher_id,
        name=f"Teacher {teacher_id}",
        departmentId="cse",
        availability=tuple(TimeSlotPayload(day=day, startTime=start, endTime=end) for day, start, end in windows),
        maxHoursPerWeek=max_hours,
    )


def subject(subject_id, teacher_id, hours, *, lab=False):
    return SubjectPayload(
        id=subject_id,
        name=f"Subject {subject_id}",
        code=subject_id.upper(),
        departmentId="cse",
        hoursPerWeek=hours,
        requiresLab=lab,
        assignedTeacherId=teacher_id,
    )


def room(room_id, *, kind="classroom", capacity=60):
    return RoomPayload(id=room_id, name=f"Room {room_id}", type=kind, capacity=capacity)


def section(section_id, subject_ids, *, students=40, department="cse"):
    return SectionPayload(
        id=section_id,
        name=f"Section {section_id}",
        departmentId=department,
        studentCount=students,
        subjects=tuple(subject_ids),
    )


def run(teachers, subjects, rooms, sections, *, breaks=(), preferences=DEFAULT_SCHEDULING_PREFERENCES):
    return generate(teachers, subjects, rooms, sections, breaks, preferences)


def soft_descriptions(result):
    return [item.description for item in result.constraints if item.type == "soft" and item.violated]


def placements(result):
    return [
        (entry.sectionId, entry.subjectId, entry.teacherId, entry.roomId, entry.timeSlot.key)
        for entry in result.entries
    ]


def longest_runs(entries):
    starts = defaultdict(list)
    for entry in entries:
        starts[(entry.sectionId, entry.timeSlot.day)].append(entry.timeSlot.start_minutes)
    runs = {}
    for key, values in starts.items():
        values.sort()
        best = current = 1
        for previous, value in zip(values, values[1:]):
            current = current + 1 if value - previous == 60 else 1
            best = max(best, current)
        runs[key] = best
    return runs


def test_single_subject_is_fully_scheduled():
    result = run(
        [teacher("t1")],
        [subject("math", "t1", 3)],
        [room(f"r{index}") for index in range(5)],
        [section("a", ["math"])],
    )

    assert len(result.entries) == 3
    assert result.conflicts == 0
    assert soft_descriptions(result) == []
    # back-to-back hours are skipped, the 12:00/14:00 pair is not adjacent
    assert [entry.timeSlot.key for entry in result.entries] == [
        ("Monday", "09:00"),
        ("Monday", "11:00"),
        ("Monday", "14:00"),
    ]
    assert [item.description for item in result.constraints if item.type == "hard"] == [
        "No teacher double-booking",
        "No room double-booking",
        "No section double-booking",
    ]


def test_lab_subject_without_lab_rooms_reports_full_shortfall():
    result = run(
        [teacher("t1")],
        [subject("chem", "t1", 2, lab=True)],
        [room("r1"), room("r2", kind="auditorium", capacity=300)],
        [section("a", ["chem"])],
    )

    assert result.entries == ()
    assert soft_descriptions(result) == ["Only scheduled 0/2 hours for Subject chem in Section a"]
    assert result.conflicts == 0


def test_subject_without_teacher_is_a_hard_violation():
    result = run(
        [teacher("t1")],
        [subject("math", None, 3), subject("phys", "t1", 1)],
        [room("r1")],
        [section("a", ["math", "phys"])],
    )

    hard = [item for item in result.constraints if item.type == "hard" and item.violated]
    assert [item.description for item in hard] == ["No teacher assigned to Subject math for Section a"]
    assert result.conflicts == 1
    assert {entry.subjectId for entry in result.entries} == {"phys"}


def test_unknown_teacher_id_counts_as_unassigned():
    result = run([teacher("t1")], [subject("math", "ghost", 2)], [room("r1")], [section("a", ["math"])])
    assert result.entries == ()
    assert "No teacher assigned to Subject math for Section a" in [item.description for item in result.constraints]


def test_shared_teacher_favours_first_section():
    shared = teacher("t1", windows=[("Monday", "09:00", "12:00")])
    result = run(
        [shared],
        [subject("algo", "t1", 2), subject("nets", "t1", 2)],
        [room("r1"), room("r2")],
        [section("a", ["algo"]), section("b", ["nets"])],
    )

    per_subject = Counter(entry.subjectId for entry in result.entries)
    assert per_subject == {"algo": 2, "nets": 1}
    assert soft_descriptions(result) == ["Only scheduled 1/2 hours for Subject nets in Section b"]
    assert result.conflicts == 0


def test_back_to_back_rejection_leaves_a_shortfall():
    result = run(
        [teacher("t1", windows=[("Monday", "09:00", "11:00")])],
        [subject("math", "t1", 2)],
        [room("r1")],
        [section("a", ["math"])],
    )

    assert [entry.timeSlot.key for entry in result.entries] == [("Monday", "09:00")]
    assert soft_descriptions(result) == ["Only scheduled 1/2 hours for Subject math in Section a"]


def test_back_to_back_allowed_when_preference_is_off():
    preferences = SchedulingPreferencesPayload(avoidBackToBackSameSubject=False)
    result = run(
        [teacher("t1", windows=[("Monday", "09:00", "11:00")])],
        [subject("math", "t1", 2)],
        [room("r1")],
        [section("a", ["math"])],
        preferences=preferences,
    )
    assert len(result.entries) == 2
    assert soft_descriptions(result) == []


def test_consecutive_cap_is_never_exceeded():
    preferences = SchedulingPreferencesPayload(avoidBackToBackSameSubject=False, maxConsecutiveHours=2)
    result = run([teacher("t1")], [subject("math", "t1", 7)], [room("r1")], [section("a", ["math"])], preferences=preferences)

    assert len(result.entries) == 7
    assert [entry.timeSlot.key for entry in result.entries] == [
        ("Monday", "09:00"),
        ("Monday", "10:00"),
        ("Monday", "12:00"),
        ("Monday", "14:00"),
        ("Monday", "15:00"),
        ("Tuesday", "09:00"),
        ("Tuesday", "10:00"),
    ]
    assert max(longest_runs(result.entries).values()) <= 2


def test_consecutive_cap_counts_hours_placed_after_the_slot():
    preferences = SchedulingPreferencesPayload(avoidBackToBackSameSubject=False, maxConsecutiveHours=2)
    result = run(
        [teacher("t1", windows=[("Monday", "10:00", "12:00")]), teacher("t2")],
        [subject("math", "t1", 2), subject("art", "t2", 1)],
        [room("r1")],
        [section("a", ["math", "art"])],
        preferences=preferences,
    )

    art = [entry.timeSlot.key for entry in result.entries if entry.subjectId == "art"]
    # 09:00 would join 10:00 and 11:00 into a three hour run
    assert art == [("Monday", "14:00")]
    assert max(longest_runs(result.entries).values()) <= 2


def test_subjects_follow_subject_list_order_not_section_order():
    result = run(
        [teacher("t1"), teacher("t2")],
        [subject("first", "t1", 1), subject("second", "t2", 1)],
        [room("r1")],
        [section("a", ["second", "first", "missing"])],
    )
    assert [entry.subjectId for entry in result.entries] == ["first", "second"]
    assert [entry.timeSlot.key for entry in result.entries] == [("Monday", "09:00"), ("Monday", "10:00")]


def test_breaks_and_preferences_limit_the_scan():
    breaks = [BreakTimePayload(id="b1", name="Assembly", day="Monday", startTime="09:00", endTime="10:00")]
    preferences = SchedulingPreferencesPayload(preferredStartTime="10:00", preferredEndTime="12:00")
    result = run(
        [teacher("t1")],
        [subject("math", "t1", 3)],
        [room("r1")],
        [section("a", ["math"])],
        breaks=breaks,
        preferences=preferences,
    )
    assert [entry.timeSlot.key for entry in result.entries] == [
        ("Monday", "10:00"),
        ("Tuesday", "10:00"),
        ("Wednesday", "10:00"),
    ]


def test_workload_overrun_is_reported_as_soft_constraint():
    result = run([teacher("t1", max_hours=2)], [subject("math", "t1", 3)], [room("r1")], [section("a", ["math"])])
    assert len(result.entries) == 3
    assert "Teacher t1 exceeds maximum hours: 3/2" in soft_descriptions(result)
    assert result.conflicts == 0


def _campus():
    teachers = [teacher("t1"), teacher("t2", windows=[("Monday", "09:00", "17:00"), ("Wednesday", "09:00", "13:00")]), teacher("t3")]
    subjects = [
        subject("math", "t1", 4),
        subject("phys", "t2", 3),
        subject("chem", "t3", 3, lab=True),
        subject("prog", "t1", 4),
        subject("ethics", "t3", 2),
    ]
    rooms = [room("r1", capacity=45), room("r2", capacity=70), room("lab", kind="lab", capacity=50)]
    sections = [
        section("a", ["math", "phys", "chem"], students=40),
        section("b", ["math", "prog", "ethics"], students=65),
        section("c", ["phys", "chem", "prog", "ethics"], students=30),
    ]
    return teachers, subjects, rooms, sections


def test_generated_entries_respect_booking_and_room_invariants():
    teachers, subjects, rooms, sections = _campus()
    result = run(teachers, subjects, rooms, sections)

    assert result.entries
    for resource in ("teacherId", "roomId", "sectionId"):
        keys = Counter((getattr(entry, resource), *entry.timeSlot.key) for entry in result.entries)
        assert max(keys.values()) == 1
    assert not any(item.violated for item in result.constraints if item.type == "hard")

    room_by_id = {item.id: item for item in rooms}
    section_by_id = {item.id: item for item in sections}
    subject_by_id = {item.id: item for item in subjects}
    for entry in result.entries:
        chosen = room_by_id[entry.roomId]
        assert chosen.capacity >= section_by_id[entry.sectionId].studentCount
        if subject_by_id[entry.subjectId].requiresLab:
            assert chosen.type == "lab"
    assert max(longest_runs(result.entries).values()) <= DEFAULT_SCHEDULING_PREFERENCES.maxConsecutiveHours


def test_generation_is_deterministic_apart_from_ids():
    teachers, subjects, rooms, sections = _campus()
    first = run(teachers, subjects, rooms, sections)
    second = run(teachers, subjects, rooms, sections)

    assert placements(first) == placements(second)
    assert first.constraints == second.constraints
    assert first.id != second.id


def test_result_metadata():
    teachers, subjects, rooms, sections = _campus()
    result = TimetableGenerator(teachers=teachers, subjects=subjects, rooms=rooms, sections=sections).generate()
    assert result.name.startswith("Timetable ")
    assert result.name == f"Timetable {result.generatedAt.date().isoformat()}"
    assert result.departmentId == "cse"

    named = TimetableGenerator(teachers=teachers, subjects=subjects, rooms=rooms, sections=sections).generate(
        name="Spring draft"
    )
    assert named.name == "Spring draft"


def test_empty_sections_produce_empty_timetable():
    result = run([teacher("t1")], [subject("math", "t1", 1)], [room("r1")], [])
    assert result.entries == ()
    assert result.departmentId == ""
    assert result.conflicts == 0
