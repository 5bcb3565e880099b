from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from app.schemas.settings import SchedulingPreferencesPayload
from app.schemas.timetable import GeneratedTimetablePayload


class GenerateTimetableRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    department_id: str | None = Field(default=None, min_length=1, max_length=36)
    persist: bool = True
    preferences_override: SchedulingPreferencesPayload | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class GenerateTimetableResponse(BaseModel):
    timetable: GeneratedTimetablePayload
    runtime_ms: int
    persisted: bool
    warning: str | None = None
