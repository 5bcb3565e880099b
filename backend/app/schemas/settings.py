from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DayOfWeek = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DAY_VALUES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

TIME_PATTERN: re.Pattern[str] = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError(f"Time must be in HH:MM 24-hour format, got {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


def validate_time_value(value: str) -> str:
    parse_time_to_minutes(value)
    return value


class SchedulingPreferencesPayload(BaseModel):
    """Generation-wide placement rules.

    ``minGapBetweenClasses`` is stored and round-tripped but the generator
    does not consult it.
    """

    minGapBetweenClasses: int = Field(default=10, ge=0, le=240)
    maxConsecutiveHours: int = Field(default=3, ge=1, le=12)
    lunchBreakRequired: bool = True
    lunchBreakStart: str = "13:00"
    lunchBreakEnd: str = "14:00"
    avoidBackToBackSameSubject: bool = True
    preferredStartTime: str = "09:00"
    preferredEndTime: str = "17:00"

    model_config = {"frozen": True}

    @field_validator("lunchBreakStart", "lunchBreakEnd", "preferredStartTime", "preferredEndTime")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_windows(self) -> "SchedulingPreferencesPayload":
        if parse_time_to_minutes(self.preferredEndTime) <= parse_time_to_minutes(self.preferredStartTime):
            raise ValueError("preferredEndTime must be after preferredStartTime")
        if self.lunchBreakRequired and parse_time_to_minutes(self.lunchBreakEnd) <= parse_time_to_minutes(
            self.lunchBreakStart
        ):
            raise ValueError("lunchBreakEnd must be after lunchBreakStart")
        return self


DEFAULT_SCHEDULING_PREFERENCES = SchedulingPreferencesPayload()


class SchedulingPreferencesOut(SchedulingPreferencesPayload):
    id: int = 1


class BreakTimeBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    day: DayOfWeek
    startTime: str
    endTime: str

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Break name cannot be empty")
        return trimmed

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "BreakTimeBase":
        if parse_time_to_minutes(self.endTime) <= parse_time_to_minutes(self.startTime):
            raise ValueError("Break end time must be after start time")
        return self


class BreakTimeCreate(BreakTimeBase):
    pass


class BreakTimePayload(BreakTimeBase):
    id: str = Field(min_length=1, max_length=36)

    model_config = {"frozen": True}
