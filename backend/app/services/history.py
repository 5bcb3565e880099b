from __future__ import annotations

from sqlalchemy.orm import Session

from app.models.timetable import GeneratedTimetableRecord
from app.models.user import User
from app.schemas.timetable import GeneratedTimetablePayload, TimetableSummaryOut


def record_to_payload(record: GeneratedTimetableRecord) -> GeneratedTimetablePayload:
    return GeneratedTimetablePayload(
        id=record.id,
        name=record.name,
        departmentId=record.department_id,
        entries=record.entries or [],
        constraints=record.constraints or [],
        generatedAt=record.generated_at,
        conflicts=record.conflicts,
    )


def record_to_summary(record: GeneratedTimetableRecord) -> TimetableSummaryOut:
    return TimetableSummaryOut(
        id=record.id,
        name=record.name,
        departmentId=record.department_id,
        generatedAt=record.generated_at,
        conflicts=record.conflicts,
        entryCount=len(record.entries or []),
        violatedSoftConstraints=sum(
            1 for item in record.constraints or [] if item.get("type") == "soft" and item.get("violated")
        ),
    )


def save_timetable(
    db: Session,
    timetable: GeneratedTimetablePayload,
    *,
    generated_by: User | None = None,
) -> GeneratedTimetableRecord:
    """Stage the timetable for insert. The caller commits."""
    record = GeneratedTimetableRecord(
        id=timetable.id,
        name=timetable.name,
        department_id=timetable.departmentId,
        entries=[entry.model_dump(mode="json") for entry in timetable.entries],
        constraints=[item.model_dump(mode="json") for item in timetable.constraints],
        conflicts=timetable.conflicts,
        generated_at=timetable.generatedAt,
        generated_by_id=generated_by.id if generated_by is not None else None,
    )
    db.add(record)
    return record
