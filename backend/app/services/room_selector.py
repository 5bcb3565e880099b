from __future__ import annotations

from collections.abc import Iterable, Sequence

from app.schemas.timetable import RoomPayload, SubjectPayload, TimeSlotPayload, TimetableEntryPayload


def room_is_suitable(room: RoomPayload, subject: SubjectPayload, student_count: int) -> bool:
    if subject.requiresLab and room.type != "lab":
        return False
    return room.capacity >= student_count


def find_room(
    subject: SubjectPayload,
    time_slot: TimeSlotPayload,
    student_count: int,
    rooms: Sequence[RoomPayload],
    existing_entries: Iterable[TimetableEntryPayload],
) -> RoomPayload | None:
    """First-fit room lookup.

    Returns the first room in ``rooms`` order that suits the subject, holds
    ``student_count`` students and is not already booked at the slot's
    (day, start). Tighter capacity matches are not preferred.
    """
    occupied = {entry.roomId for entry in existing_entries if entry.timeSlot.key == time_slot.key}
    for room in rooms:
        if not room_is_suitable(room, subject, student_count):
            continue
        if room.id in occupied:
            continue
        return room
    return None
