from pydantic import BaseModel, Field, field_validator


def _dedupe_ids(value: list[str]) -> list[str]:
    return list(dict.fromkeys(item.strip() for item in value if item.strip()))


class SectionBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    department_id: str = Field(min_length=1, max_length=36)
    semester: int = Field(default=1, ge=1, le=20)
    student_count: int = Field(ge=0, le=10000)
    subject_ids: list[str] = Field(default_factory=list, max_length=100)

    @field_validator("subject_ids")
    @classmethod
    def normalize_subject_ids(cls, value: list[str]) -> list[str]:
        return _dedupe_ids(value)


class SectionCreate(SectionBase):
    pass


class SectionUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    department_id: str | None = Field(default=None, min_length=1, max_length=36)
    semester: int | None = Field(default=None, ge=1, le=20)
    student_count: int | None = Field(default=None, ge=0, le=10000)
    subject_ids: list[str] | None = Field(default=None, max_length=100)

    @field_validator("subject_ids")
    @classmethod
    def normalize_subject_ids(cls, value: list[str] | None) -> list[str] | None:
        return _dedupe_ids(value) if value is not None else None


class SectionOut(SectionBase):
    id: str

    model_config = {"from_attributes": True}
