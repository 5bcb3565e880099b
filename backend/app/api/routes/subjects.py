from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.models.department import Department
from app.models.section import Section
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.user import User
from app.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate
from app.services.audit import log_activity

router = APIRouter()


def _validate_references(db: Session, data: dict) -> None:
    if data.get("department_id") and db.get(Department, data["department_id"]) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department not found")
    if data.get("assigned_teacher_id") and db.get(Teacher, data["assigned_teacher_id"]) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Assigned teacher not found")


@router.get("/", response_model=list[SubjectOut])
def list_subjects(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[SubjectOut]:
    return list(db.execute(select(Subject).order_by(Subject.created_at, Subject.id)).scalars())


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(
    subject_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    return subject


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SubjectOut:
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    data = payload.model_dump()
    _validate_references(db, data)

    subject = Subject(**data)
    db.add(subject)
    db.flush()
    log_activity(
        db,
        actor=current_user,
        action="subject.create",
        entity_type="subject",
        entity_id=subject.id,
        summary=f"{current_user.name} created subject {payload.code} ({payload.name}).",
    )
    db.commit()
    db.refresh(subject)
    return subject


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")

    data = payload.model_dump(exclude_unset=True)
    if "code" in data:
        existing = db.execute(
            select(Subject).where(Subject.code == data["code"], Subject.id != subject_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    _validate_references(db, data)

    for key, value in data.items():
        setattr(subject, key, value)
    if data:
        log_activity(
            db,
            actor=current_user,
            action="subject.update",
            entity_type="subject",
            entity_id=subject.id,
            summary=f"{current_user.name} updated subject {subject.code}.",
            details={"fields": sorted(data)},
        )
    db.commit()
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}")
def delete_subject(
    subject_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")

    for section in db.execute(select(Section)).scalars():
        if subject_id in (section.subject_ids or []):
            section.subject_ids = [item for item in section.subject_ids if item != subject_id]

    log_activity(
        db,
        actor=current_user,
        action="subject.delete",
        entity_type="subject",
        entity_id=subject.id,
        summary=f"{current_user.name} deleted subject {subject.code}.",
    )
    db.delete(subject)
    db.commit()
    return {"success": True}
