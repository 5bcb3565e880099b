from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.models.department import Department
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.user import User
from app.schemas.teacher import TeacherCreate, TeacherOut, TeacherUpdate
from app.services.audit import log_activity

router = APIRouter()


def _ensure_department(db: Session, department_id: str) -> None:
    if db.get(Department, department_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department not found")


def _ensure_email_free(db: Session, email: str | None, teacher_id: str | None = None) -> None:
    if not email:
        return
    query = select(Teacher).where(Teacher.email == email)
    if teacher_id is not None:
        query = query.where(Teacher.id != teacher_id)
    if db.execute(query).scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")


@router.get("/", response_model=list[TeacherOut])
def list_teachers(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[TeacherOut]:
    return list(db.execute(select(Teacher).order_by(Teacher.created_at, Teacher.id)).scalars())


@router.get("/{teacher_id}", response_model=TeacherOut)
def get_teacher(
    teacher_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return teacher


@router.post("/", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> TeacherOut:
    _ensure_department(db, payload.department_id)
    _ensure_email_free(db, payload.email)
    teacher = Teacher(**payload.model_dump())
    db.add(teacher)
    db.flush()
    log_activity(
        db,
        actor=current_user,
        action="teacher.create",
        entity_type="teacher",
        entity_id=teacher.id,
        summary=f"{current_user.name} added teacher {payload.name}.",
    )
    db.commit()
    db.refresh(teacher)
    return teacher


@router.put("/{teacher_id}", response_model=TeacherOut)
def update_teacher(
    teacher_id: str,
    payload: TeacherUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")

    data = payload.model_dump(exclude_unset=True)
    if data.get("department_id"):
        _ensure_department(db, data["department_id"])
    if "email" in data:
        _ensure_email_free(db, data["email"], teacher_id)

    for key, value in data.items():
        setattr(teacher, key, value)
    if data:
        log_activity(
            db,
            actor=current_user,
            action="teacher.update",
            entity_type="teacher",
            entity_id=teacher.id,
            summary=f"{current_user.name} updated teacher {teacher.name}.",
            details={"fields": sorted(data)},
        )
    db.commit()
    db.refresh(teacher)
    return teacher


@router.delete("/{teacher_id}")
def delete_teacher(
    teacher_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")

    # Subjects taught by this teacher become unassigned.
    subjects = db.execute(select(Subject).where(Subject.assigned_teacher_id == teacher_id)).scalars().all()
    for subject in subjects:
        subject.assigned_teacher_id = None

    log_activity(
        db,
        actor=current_user,
        action="teacher.delete",
        entity_type="teacher",
        entity_id=teacher.id,
        summary=f"{current_user.name} removed teacher {teacher.name}.",
        details={"unassigned_subjects": [subject.id for subject in subjects]},
    )
    db.delete(teacher)
    db.commit()
    return {"success": True}
