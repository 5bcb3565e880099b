import re
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, get_timetable_record, require_scheduler
from app.models.timetable import GeneratedTimetableRecord
from app.models.user import User
from app.schemas.conflict import ConflictReport
from app.schemas.statistics import TimetableStatisticsOut
from app.schemas.timetable import GeneratedTimetablePayload, GridViewOut, TimetableSummaryOut
from app.services.audit import log_activity
from app.services.conflict_service import ConflictService
from app.services.export import TimetableDirectory, build_csv, build_grid
from app.services.history import record_to_payload, record_to_summary
from app.services.snapshot import load_generation_inputs
from app.services.statistics import compute_statistics

router = APIRouter()


@router.get("/", response_model=list[TimetableSummaryOut])
def list_timetables(
    department_id: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TimetableSummaryOut]:
    query = select(GeneratedTimetableRecord).order_by(
        GeneratedTimetableRecord.generated_at.desc(), GeneratedTimetableRecord.id
    )
    if department_id is not None:
        query = query.where(GeneratedTimetableRecord.department_id == department_id)
    return [record_to_summary(record) for record in db.execute(query).scalars()]


@router.get("/{timetable_id}", response_model=GeneratedTimetablePayload)
def get_timetable(
    record: GeneratedTimetableRecord = Depends(get_timetable_record),
    current_user: User = Depends(get_current_user),
) -> GeneratedTimetablePayload:
    return record_to_payload(record)


@router.delete("/{timetable_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_timetable(
    record: GeneratedTimetableRecord = Depends(get_timetable_record),
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> None:
    log_activity(
        db,
        actor=current_user,
        action="timetable.delete",
        entity_type="timetable",
        entity_id=record.id,
        summary=f"{current_user.name} deleted {record.name}.",
    )
    db.delete(record)
    db.commit()


@router.get("/{timetable_id}/export.csv")
def export_timetable_csv(
    record: GeneratedTimetableRecord = Depends(get_timetable_record),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    directory = TimetableDirectory.from_inputs(load_generation_inputs(db))
    content = build_csv(record_to_payload(record), directory)
    filename = f"timetable-{re.sub(r'[^A-Za-z0-9._-]+', '-', record.name)}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{timetable_id}/grid", response_model=GridViewOut)
def get_timetable_grid(
    layout: Literal["section", "teacher", "room"] = Query(default="section"),
    target_id: str | None = Query(default=None, min_length=1, max_length=36),
    record: GeneratedTimetableRecord = Depends(get_timetable_record),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GridViewOut:
    if target_id is None:
        # Students default to the section they registered with.
        if layout != "section" or not current_user.section_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="target_id is required")
        target_id = current_user.section_id
    directory = TimetableDirectory.from_inputs(load_generation_inputs(db))
    return build_grid(record_to_payload(record), directory, layout, target_id)


@router.get("/{timetable_id}/statistics", response_model=TimetableStatisticsOut, response_model_by_alias=True)
def get_timetable_statistics(
    record: GeneratedTimetableRecord = Depends(get_timetable_record),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableStatisticsOut:
    return compute_statistics(record_to_payload(record), load_generation_inputs(db))


@router.get("/{timetable_id}/conflicts", response_model=ConflictReport)
def get_timetable_conflicts(
    record: GeneratedTimetableRecord = Depends(get_timetable_record),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ConflictReport:
    inputs = load_generation_inputs(db)
    service = ConflictService(
        record_to_payload(record),
        teacher_map={item.id: item for item in inputs.teachers},
        subject_map={item.id: item for item in inputs.subjects},
        section_map={item.id: item for item in inputs.sections},
        room_names={item.id: item.name for item in inputs.rooms},
        breaks=inputs.breaks,
    )
    return service.detect_conflicts()
