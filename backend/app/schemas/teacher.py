from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.schemas.settings import DayOfWeek, parse_time_to_minutes, validate_time_value


class AvailabilityWindow(BaseModel):
    day: DayOfWeek
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_order(self) -> "AvailabilityWindow":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class TeacherBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    department_id: str = Field(min_length=1, max_length=36)
    max_hours_per_week: int = Field(default=20, ge=0, le=168)
    availability: list[AvailabilityWindow] = Field(default_factory=list, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else None


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    department_id: str | None = Field(default=None, min_length=1, max_length=36)
    max_hours_per_week: int | None = Field(default=None, ge=0, le=168)
    availability: list[AvailabilityWindow] | None = Field(default=None, max_length=100)


class TeacherOut(TeacherBase):
    id: str

    model_config = {"from_attributes": True}
