from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from time import perf_counter
import uuid

from app.schemas.settings import BreakTimePayload, DEFAULT_SCHEDULING_PREFERENCES, SchedulingPreferencesPayload
from app.schemas.timetable import (
    GeneratedTimetablePayload,
    RoomPayload,
    SectionPayload,
    SubjectPayload,
    TeacherPayload,
    TimeSlotPayload,
    TimetableConstraintPayload,
    TimetableEntryPayload,
)
from app.services.constraint_validator import count_hard_conflicts, validate_constraints
from app.services.room_selector import find_room
from app.services.time_grid import SLOT_MINUTES, TIME_GRID, compute_available_slots, is_teacher_available

logger = logging.getLogger(__name__)


@dataclass
class PlacementLedger:
    """Entries placed so far in one generation run, indexed for conflict checks."""

    entries: list[TimetableEntryPayload] = field(default_factory=list)
    teacher_slots: set[tuple[str, str, str]] = field(default_factory=set)
    section_slots: set[tuple[str, str, str]] = field(default_factory=set)
    section_day_starts: dict[tuple[str, str], list[int]] = field(default_factory=lambda: defaultdict(list))

    def teacher_busy(self, teacher_id: str, slot: TimeSlotPayload) -> bool:
        return (teacher_id, *slot.key) in self.teacher_slots

    def section_busy(self, section_id: str, slot: TimeSlotPayload) -> bool:
        return (section_id, *slot.key) in self.section_slots

    def starts_for(self, section_id: str, day: str) -> list[int]:
        return sorted(self.section_day_starts.get((section_id, day), ()))

    def add(self, entry: TimetableEntryPayload) -> None:
        slot = entry.timeSlot
        self.entries.append(entry)
        self.teacher_slots.add((entry.teacherId, *slot.key))
        self.section_slots.add((entry.sectionId, *slot.key))
        self.section_day_starts[(entry.sectionId, slot.day)].append(slot.start_minutes)


@dataclass
class SubjectScan:
    """Scan state for one (section, subject) pair."""

    required_hours: int
    scheduled_hours: int = 0
    last_day: str | None = None
    last_start: int | None = None

    @property
    def complete(self) -> bool:
        return self.scheduled_hours >= self.required_hours

    def record(self, slot: TimeSlotPayload) -> None:
        self.scheduled_hours += 1
        self.last_day = slot.day
        self.last_start = slot.start_minutes


class TimetableGenerator:
    """Single-pass greedy placement of weekly class hours.

    Sections are processed in input order; within a section, subjects follow
    the order of the global ``subjects`` input list, not the order of
    ``section.subjects``, which only decides membership. Each subject scans the available
    slots once and keeps the first slot that passes every check. Nothing is
    revisited, so earlier sections and subjects win contested slots.
    """

    def __init__(
        self,
        *,
        teachers: Sequence[TeacherPayload],
        subjects: Sequence[SubjectPayload],
        rooms: Sequence[RoomPayload],
        sections: Sequence[SectionPayload],
        breaks: Sequence[BreakTimePayload] = (),
        preferences: SchedulingPreferencesPayload | None = None,
        grid: Sequence[TimeSlotPayload] = TIME_GRID,
    ) -> None:
        self.teachers = tuple(teachers)
        self.subjects = tuple(subjects)
        self.rooms = tuple(rooms)
        self.sections = tuple(sections)
        self.breaks = tuple(breaks)
        self.preferences = preferences or DEFAULT_SCHEDULING_PREFERENCES
        self.grid = tuple(grid)
        self.teacher_by_id = {teacher.id: teacher for teacher in self.teachers}

    def generate(self, *, name: str | None = None) -> GeneratedTimetablePayload:
        started = perf_counter()
        ledger = PlacementLedger()
        constraints: list[TimetableConstraintPayload] = []

        available_slots = compute_available_slots(self.grid, self.preferences, self.breaks)
        logger.info(
            "Timetable generation started: sections=%d subjects=%d teachers=%d rooms=%d available_slots=%d",
            len(self.sections),
            len(self.subjects),
            len(self.teachers),
            len(self.rooms),
            len(available_slots),
        )

        for section in self.sections:
            constraints.extend(self._schedule_section(section, available_slots, ledger))

        constraints.extend(validate_constraints(ledger.entries, self.teachers))
        conflicts = count_hard_conflicts(constraints)

        generated_at = datetime.now(timezone.utc)
        result = GeneratedTimetablePayload(
            id=str(uuid.uuid4()),
            name=name or f"Timetable {generated_at.date().isoformat()}",
            departmentId=self.sections[0].departmentId if self.sections else "",
            entries=tuple(ledger.entries),
            constraints=tuple(constraints),
            generatedAt=generated_at,
            conflicts=conflicts,
        )
        logger.info(
            "Timetable generation finished: entries=%d hard_conflicts=%d violated=%d runtime_ms=%d",
            len(result.entries),
            conflicts,
            len(result.violated_constraints),
            int((perf_counter() - started) * 1000),
        )
        return result

    def _subjects_for(self, section: SectionPayload) -> list[SubjectPayload]:
        wanted = set(section.subjects)
        return [subject for subject in self.subjects if subject.id in wanted]

    def _schedule_section(
        self,
        section: SectionPayload,
        available_slots: Sequence[TimeSlotPayload],
        ledger: PlacementLedger,
    ) -> list[TimetableConstraintPayload]:
        constraints: list[TimetableConstraintPayload] = []
        for subject in self._subjects_for(section):
            teacher = self.teacher_by_id.get(subject.assignedTeacherId) if subject.assignedTeacherId else None
            if teacher is None:
                logger.warning("No teacher assigned to %s for %s", subject.name, section.name)
                constraints.append(
                    TimetableConstraintPayload(
                        type="hard",
                        description=f"No teacher assigned to {subject.name} for {section.name}",
                        violated=True,
                    )
                )
                continue

            scan = SubjectScan(required_hours=subject.hoursPerWeek)
            for slot in available_slots:
                if scan.complete:
                    break
                room = self._place_candidate(section, subject, teacher, slot, scan, ledger)
                if room is None:
                    continue
                ledger.add(
                    TimetableEntryPayload(
                        id=str(uuid.uuid4()),
                        sectionId=section.id,
                        subjectId=subject.id,
                        teacherId=teacher.id,
                        roomId=room.id,
                        timeSlot=slot,
                    )
                )
                scan.record(slot)

            if not scan.complete:
                logger.info(
                    "Under-scheduled %s in %s: %d/%d hours",
                    subject.name,
                    section.name,
                    scan.scheduled_hours,
                    scan.required_hours,
                )
                constraints.append(
                    TimetableConstraintPayload(
                        type="soft",
                        description=(
                            f"Only scheduled {scan.scheduled_hours}/{scan.required_hours} hours "
                            f"for {subject.name} in {section.name}"
                        ),
                        violated=True,
                    )
                )
        return constraints

    def _place_candidate(
        self,
        section: SectionPayload,
        subject: SubjectPayload,
        teacher: TeacherPayload,
        slot: TimeSlotPayload,
        scan: SubjectScan,
        ledger: PlacementLedger,
    ) -> RoomPayload | None:
        # Check order matters: the first failing rule rejects the slot.
        if not is_teacher_available(teacher, slot):
            return None
        if ledger.teacher_busy(teacher.id, slot):
            return None
        if ledger.section_busy(section.id, slot):
            return None
        if self._exceeds_consecutive_cap(section.id, slot, ledger):
            return None
        if self.preferences.avoidBackToBackSameSubject and self._is_back_to_back(slot, scan):
            return None
        return find_room(subject, slot, section.studentCount, self.rooms, ledger.entries)

    def _exceeds_consecutive_cap(self, section_id: str, slot: TimeSlotPayload, ledger: PlacementLedger) -> bool:
        starts = ledger.starts_for(section_id, slot.day)
        if not starts:
            return False
        target = slot.start_minutes

        run = 0
        cursor = target
        for start in reversed([value for value in starts if value < target]):
            if cursor - start != SLOT_MINUTES:
                break
            run += 1
            cursor = start

        # Hours already placed right after the slot would join the same run.
        cursor = target
        for start in (value for value in starts if value > target):
            if start - cursor != SLOT_MINUTES:
                break
            run += 1
            cursor = start

        return run >= self.preferences.maxConsecutiveHours

    @staticmethod
    def _is_back_to_back(slot: TimeSlotPayload, scan: SubjectScan) -> bool:
        if scan.last_day != slot.day or scan.last_start is None:
            return False
        return slot.start_minutes - scan.last_start == SLOT_MINUTES


def generate(
    teachers: Sequence[TeacherPayload],
    subjects: Sequence[SubjectPayload],
    rooms: Sequence[RoomPayload],
    sections: Sequence[SectionPayload],
    breaks: Sequence[BreakTimePayload],
    preferences: SchedulingPreferencesPayload,
    *,
    name: str | None = None,
) -> GeneratedTimetablePayload:
    return TimetableGenerator(
        teachers=teachers,
        subjects=subjects,
        rooms=rooms,
        sections=sections,
        breaks=breaks,
        preferences=preferences,
    ).generate(name=name)
