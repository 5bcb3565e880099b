"""Flat CSV and day-by-time grid renderings of a generated timetable."""

from __future__ import annotations

import csv
from dataclasses import dataclass
import io
from typing import Literal

from app.core.exceptions import ResourceNotFoundError
from app.schemas.timetable import GeneratedTimetablePayload, GridViewOut, TimetableEntryPayload
from app.services.snapshot import GenerationInputs
from app.services.time_grid import GRID_DAYS, GRID_START_TIMES

CSV_HEADERS = ("Section", "Subject", "Teacher", "Room", "Day", "Start Time", "End Time")

GridLayout = Literal["section", "teacher", "room"]


@dataclass(frozen=True)
class TimetableDirectory:
    """Id to display-name lookups. Entities deleted since generation render blank."""

    section_names: dict[str, str]
    subject_names: dict[str, str]
    subject_codes: dict[str, str]
    teacher_names: dict[str, str]
    room_names: dict[str, str]

    @classmethod
    def from_inputs(cls, inputs: GenerationInputs) -> "TimetableDirectory":
        return cls(
            section_names={item.id: item.name for item in inputs.sections},
            subject_names={item.id: item.name for item in inputs.subjects},
            subject_codes={item.id: item.code for item in inputs.subjects},
            teacher_names={item.id: item.name for item in inputs.teachers},
            room_names={item.id: item.name for item in inputs.rooms},
        )

    def names_for(self, layout: GridLayout) -> dict[str, str]:
        return {
            "section": self.section_names,
            "teacher": self.teacher_names,
            "room": self.room_names,
        }[layout]


def build_csv(timetable: GeneratedTimetablePayload, directory: TimetableDirectory) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for entry in timetable.entries:
        writer.writerow(
            (
                directory.section_names.get(entry.sectionId, ""),
                directory.subject_names.get(entry.subjectId, ""),
                directory.teacher_names.get(entry.teacherId, ""),
                directory.room_names.get(entry.roomId, ""),
                entry.timeSlot.day,
                entry.timeSlot.startTime,
                entry.timeSlot.endTime,
            )
        )
    return buffer.getvalue()


def _entry_target(entry: TimetableEntryPayload, layout: GridLayout) -> str:
    if layout == "section":
        return entry.sectionId
    if layout == "teacher":
        return entry.teacherId
    return entry.roomId


def _cell_text(entry: TimetableEntryPayload, layout: GridLayout, directory: TimetableDirectory) -> str:
    code = directory.subject_codes.get(entry.subjectId, "")
    section = directory.section_names.get(entry.sectionId, "")
    teacher = directory.teacher_names.get(entry.teacherId, "")
    room = directory.room_names.get(entry.roomId, "")
    if layout == "section":
        return f"{code}\n{teacher}\n{room}"
    if layout == "teacher":
        return f"{code}\n{section}\n{room}"
    return f"{code}\n{section}\n{teacher}"


def build_grid(
    timetable: GeneratedTimetablePayload,
    directory: TimetableDirectory,
    layout: GridLayout,
    target_id: str,
) -> GridViewOut:
    """One row per display time, the time first and then one cell per weekday.

    Cells with no class are empty strings. When several entries share a
    cell, the first one in timetable order is shown.
    """
    names = directory.names_for(layout)
    if target_id not in names:
        raise ResourceNotFoundError(layout, target_id)

    cells: dict[tuple[str, str], str] = {}
    for entry in timetable.entries:
        if _entry_target(entry, layout) != target_id:
            continue
        cells.setdefault(entry.timeSlot.key, _cell_text(entry, layout, directory))

    rows = [
        [start, *(cells.get((day, start), "") for day in GRID_DAYS)]
        for start in GRID_START_TIMES
    ]
    return GridViewOut(
        layout=layout,
        targetId=target_id,
        targetName=names[target_id],
        days=list(GRID_DAYS),
        times=list(GRID_START_TIMES),
        rows=rows,
    )
