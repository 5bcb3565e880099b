"""Load persisted entities into the immutable inputs the generator consumes."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.room import Room
from app.models.scheduling import BreakTime, SchedulingPreferences
from app.models.section import Section
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.schemas.settings import (
    DEFAULT_SCHEDULING_PREFERENCES,
    BreakTimePayload,
    SchedulingPreferencesPayload,
)
from app.schemas.timetable import (
    RoomPayload,
    SectionPayload,
    SubjectPayload,
    TeacherPayload,
    TimeSlotPayload,
)


@dataclass(frozen=True)
class GenerationInputs:
    teachers: tuple[TeacherPayload, ...]
    subjects: tuple[SubjectPayload, ...]
    rooms: tuple[RoomPayload, ...]
    sections: tuple[SectionPayload, ...]
    breaks: tuple[BreakTimePayload, ...]
    preferences: SchedulingPreferencesPayload


def teacher_to_payload(teacher: Teacher) -> TeacherPayload:
    return TeacherPayload(
        id=teacher.id,
        name=teacher.name,
        departmentId=teacher.department_id,
        email=teacher.email,
        availability=tuple(
            TimeSlotPayload(day=item["day"], startTime=item["start_time"], endTime=item["end_time"])
            for item in teacher.availability or []
        ),
        maxHoursPerWeek=teacher.max_hours_per_week,
    )


def subject_to_payload(subject: Subject) -> SubjectPayload:
    return SubjectPayload(
        id=subject.id,
        name=subject.name,
        code=subject.code,
        departmentId=subject.department_id,
        hoursPerWeek=subject.hours_per_week,
        requiresLab=subject.requires_lab,
        assignedTeacherId=subject.assigned_teacher_id,
    )


def room_to_payload(room: Room) -> RoomPayload:
    return RoomPayload(
        id=room.id,
        name=room.name,
        type=room.type.value,
        capacity=room.capacity,
        departmentId=room.department_id,
    )


def section_to_payload(section: Section) -> SectionPayload:
    return SectionPayload(
        id=section.id,
        name=section.name,
        departmentId=section.department_id,
        semester=section.semester,
        studentCount=section.student_count,
        subjects=tuple(section.subject_ids or []),
    )


def break_to_payload(item: BreakTime) -> BreakTimePayload:
    return BreakTimePayload(
        id=item.id,
        name=item.name,
        day=item.day,
        startTime=item.start_time,
        endTime=item.end_time,
    )


def preferences_to_payload(row: SchedulingPreferences | None) -> SchedulingPreferencesPayload:
    if row is None:
        return DEFAULT_SCHEDULING_PREFERENCES
    return SchedulingPreferencesPayload(
        minGapBetweenClasses=row.min_gap_between_classes,
        maxConsecutiveHours=row.max_consecutive_hours,
        lunchBreakRequired=row.lunch_break_required,
        lunchBreakStart=row.lunch_break_start,
        lunchBreakEnd=row.lunch_break_end,
        avoidBackToBackSameSubject=row.avoid_back_to_back_same_subject,
        preferredStartTime=row.preferred_start_time,
        preferredEndTime=row.preferred_end_time,
    )


def apply_preferences(row: SchedulingPreferences, payload: SchedulingPreferencesPayload) -> None:
    row.min_gap_between_classes = payload.minGapBetweenClasses
    row.max_consecutive_hours = payload.maxConsecutiveHours
    row.lunch_break_required = payload.lunchBreakRequired
    row.lunch_break_start = payload.lunchBreakStart
    row.lunch_break_end = payload.lunchBreakEnd
    row.avoid_back_to_back_same_subject = payload.avoidBackToBackSameSubject
    row.preferred_start_time = payload.preferredStartTime
    row.preferred_end_time = payload.preferredEndTime


def load_preferences(db: Session) -> SchedulingPreferencesPayload:
    return preferences_to_payload(db.get(SchedulingPreferences, 1))


def load_generation_inputs(db: Session, *, department_id: str | None = None) -> GenerationInputs:
    """Snapshot every entity in creation order.

    Creation order becomes the generator's processing order, so sections
    and subjects created first get first pick of the slots. When
    ``department_id`` is given only that department's sections are
    scheduled; teachers, subjects and rooms stay shared.
    """
    section_query = select(Section).order_by(Section.created_at, Section.id)
    if department_id is not None:
        section_query = section_query.where(Section.department_id == department_id)

    teachers = db.execute(select(Teacher).order_by(Teacher.created_at, Teacher.id)).scalars().all()
    subjects = db.execute(select(Subject).order_by(Subject.created_at, Subject.id)).scalars().all()
    rooms = db.execute(select(Room).order_by(Room.created_at, Room.id)).scalars().all()
    sections = db.execute(section_query).scalars().all()
    breaks = db.execute(select(BreakTime).order_by(BreakTime.created_at, BreakTime.id)).scalars().all()

    return GenerationInputs(
        teachers=tuple(teacher_to_payload(item) for item in teachers),
        subjects=tuple(subject_to_payload(item) for item in subjects),
        rooms=tuple(room_to_payload(item) for item in rooms),
        sections=tuple(section_to_payload(item) for item in sections),
        breaks=tuple(break_to_payload(item) for item in breaks),
        preferences=load_preferences(db),
    )
