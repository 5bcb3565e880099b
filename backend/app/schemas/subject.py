from pydantic import BaseModel, Field, field_validator


class SubjectBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    department_id: str = Field(min_length=1, max_length=36)
    hours_per_week: int = Field(default=3, ge=0, le=40)
    requires_lab: bool = False
    assigned_teacher_id: str | None = Field(default=None, max_length=36)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("assigned_teacher_id")
    @classmethod
    def blank_teacher_is_unassigned(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    department_id: str | None = Field(default=None, min_length=1, max_length=36)
    hours_per_week: int | None = Field(default=None, ge=0, le=40)
    requires_lab: bool | None = None
    assigned_teacher_id: str | None = Field(default=None, max_length=36)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class SubjectOut(SubjectBase):
    id: str

    model_config = {"from_attributes": True}
