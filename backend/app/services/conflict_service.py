from collections import defaultdict
from typing import Dict, List, Sequence

from app.schemas.conflict import ConflictDetail, ConflictReport
from app.schemas.settings import BreakTimePayload, parse_time_to_minutes
from app.schemas.timetable import (
    GeneratedTimetablePayload,
    SectionPayload,
    SubjectPayload,
    TeacherPayload,
    TimetableEntryPayload,
)
from app.services.time_grid import is_teacher_available


class ConflictService:
    """Itemises the problems in a stored timetable, one detail per finding.

    The generator only reports a yes/no flag per double-booking kind; this
    service names the clashing entries so they can be fixed by hand.
    """

    def __init__(
        self,
        payload: GeneratedTimetablePayload,
        teacher_map: Dict[str, TeacherPayload],
        subject_map: Dict[str, SubjectPayload],
        section_map: Dict[str, SectionPayload],
        room_names: Dict[str, str],
        breaks: Sequence[BreakTimePayload] = (),
    ):
        self.payload = payload
        self.teacher_map = teacher_map
        self.subject_map = subject_map
        self.section_map = section_map
        self.room_names = room_names
        self.breaks = list(breaks)
        self.entries: List[TimetableEntryPayload] = list(payload.entries)

    def _subject_label(self, entry: TimetableEntryPayload) -> str:
        subject = self.subject_map.get(entry.subjectId)
        if subject is None:
            return entry.subjectId
        return subject.code or subject.name

    def detect_conflicts(self) -> ConflictReport:
        conflicts: List[ConflictDetail] = []

        entries_by_day = defaultdict(list)
        for entry in self.entries:
            entries_by_day[entry.timeSlot.day].append(entry)

        for day, day_entries in entries_by_day.items():
            n = len(day_entries)
            for i in range(n):
                e1 = day_entries[i]
                for j in range(i + 1, n):
                    e2 = day_entries[j]
                    slot1, slot2 = e1.timeSlot, e2.timeSlot
                    if max(slot1.start_minutes, slot2.start_minutes) >= min(slot1.end_minutes, slot2.end_minutes):
                        continue
                    pair = f"{self._subject_label(e1)} and {self._subject_label(e2)}"
                    if e1.teacherId == e2.teacherId:
                        teacher = self.teacher_map.get(e1.teacherId)
                        conflicts.append(ConflictDetail(
                            id=f"teacher-{e1.id}-{e2.id}",
                            conflict_type="teacher_conflict",
                            severity="high",
                            description=f"{teacher.name if teacher else e1.teacherId} double-booked on {day} at {slot1.startTime}: {pair}",
                            affected_entries=[e1.id, e2.id],
                            suggestion="Move one class to a slot where the teacher is free",
                        ))
                    if e1.roomId == e2.roomId:
                        room_name = self.room_names.get(e1.roomId, e1.roomId)
                        conflicts.append(ConflictDetail(
                            id=f"room-{e1.id}-{e2.id}",
                            conflict_type="room_conflict",
                            severity="high",
                            description=f"Room {room_name} double-booked on {day} at {slot1.startTime}: {pair}",
                            affected_entries=[e1.id, e2.id],
                            suggestion="Assign a different room of the same type and capacity",
                        ))
                    if e1.sectionId == e2.sectionId:
                        section = self.section_map.get(e1.sectionId)
                        conflicts.append(ConflictDetail(
                            id=f"section-{e1.id}-{e2.id}",
                            conflict_type="section_conflict",
                            severity="high",
                            description=f"{section.name if section else e1.sectionId} has overlapping classes on {day} at {slot1.startTime}: {pair}",
                            affected_entries=[e1.id, e2.id],
                            suggestion="Move one class to a free slot for this section",
                        ))

        for entry in self.entries:
            slot = entry.timeSlot
            teacher = self.teacher_map.get(entry.teacherId)
            if teacher is not None and not is_teacher_available(teacher, slot):
                conflicts.append(ConflictDetail(
                    id=f"availability-{entry.id}",
                    conflict_type="availability_conflict",
                    severity="medium",
                    description=f"{teacher.name} is not available on {slot.day} at {slot.startTime}",
                    affected_entries=[entry.id],
                    suggestion="Reschedule within the teacher's availability",
                ))
            for item in self.breaks:
                if item.day != slot.day:
                    continue
                if max(slot.start_minutes, parse_time_to_minutes(item.startTime)) < min(
                    slot.end_minutes, parse_time_to_minutes(item.endTime)
                ):
                    conflicts.append(ConflictDetail(
                        id=f"break-{item.id}-{entry.id}",
                        conflict_type="break_conflict",
                        severity="low",
                        description=f"{self._subject_label(entry)} overlaps {item.name} on {slot.day} at {slot.startTime}",
                        affected_entries=[entry.id],
                        suggestion="Move the class outside the break window",
                    ))

        return ConflictReport(timetable_id=self.payload.id, conflicts=conflicts)
