from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.settings import DayOfWeek, parse_time_to_minutes, validate_time_value

RoomKind = Literal["classroom", "lab", "auditorium"]
ConstraintKind = Literal["hard", "soft"]


class TimeSlotPayload(BaseModel):
    """One weekly meeting window. Two slots are equal when day and start match."""

    day: DayOfWeek
    startTime: str
    endTime: str

    model_config = {"frozen": True}

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "TimeSlotPayload":
        if parse_time_to_minutes(self.endTime) <= parse_time_to_minutes(self.startTime):
            raise ValueError("End time must be after start time")
        return self

    @property
    def key(self) -> tuple[str, str]:
        return (self.day, self.startTime)

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.startTime)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.endTime)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeSlotPayload):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


class TeacherPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    departmentId: str = ""
    email: str | None = None
    availability: tuple[TimeSlotPayload, ...] = ()
    maxHoursPerWeek: int = Field(default=20, ge=0, le=168)

    model_config = {"frozen": True}


class SubjectPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    code: str = ""
    departmentId: str = ""
    hoursPerWeek: int = Field(ge=0, le=40)
    requiresLab: bool = False
    assignedTeacherId: str | None = None

    model_config = {"frozen": True}


class RoomPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    type: RoomKind
    capacity: int = Field(ge=0, le=10000)
    departmentId: str | None = None

    model_config = {"frozen": True}


class SectionPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    departmentId: str = ""
    semester: int = Field(default=1, ge=1, le=20)
    studentCount: int = Field(ge=0, le=10000)
    subjects: tuple[str, ...] = ()

    model_config = {"frozen": True}


class TimetableEntryPayload(BaseModel):
    id: str
    sectionId: str
    subjectId: str
    teacherId: str
    roomId: str
    timeSlot: TimeSlotPayload

    model_config = {"frozen": True}


class TimetableConstraintPayload(BaseModel):
    type: ConstraintKind
    description: str
    violated: bool

    model_config = {"frozen": True}


class GeneratedTimetablePayload(BaseModel):
    id: str
    name: str
    departmentId: str = ""
    entries: tuple[TimetableEntryPayload, ...] = ()
    constraints: tuple[TimetableConstraintPayload, ...] = ()
    generatedAt: datetime
    conflicts: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @property
    def violated_constraints(self) -> list[TimetableConstraintPayload]:
        return [item for item in self.constraints if item.violated]


class TimetableSummaryOut(BaseModel):
    id: str
    name: str
    departmentId: str
    generatedAt: datetime
    conflicts: int
    entryCount: int
    violatedSoftConstraints: int


class GridViewOut(BaseModel):
    layout: Literal["section", "teacher", "room"]
    targetId: str
    targetName: str
    days: list[str]
    times: list[str]
    rows: list[list[str]] = Field(default_factory=list)
