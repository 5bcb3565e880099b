from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.models.department import Department
from app.models.section import Section
from app.models.subject import Subject
from app.models.user import User
from app.schemas.section import SectionCreate, SectionOut, SectionUpdate
from app.services.audit import log_activity

router = APIRouter()


def _validate_references(db: Session, data: dict) -> None:
    if data.get("department_id") and db.get(Department, data["department_id"]) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department not found")
    subject_ids = data.get("subject_ids") or []
    if subject_ids:
        known = set(db.execute(select(Subject.id).where(Subject.id.in_(subject_ids))).scalars())
        unknown = [item for item in subject_ids if item not in known]
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown subject ids: {', '.join(unknown)}",
            )


def _ensure_name_free(db: Session, department_id: str, name: str, section_id: str | None = None) -> None:
    query = select(Section).where(Section.department_id == department_id, Section.name == name)
    if section_id is not None:
        query = query.where(Section.id != section_id)
    if db.execute(query).scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Section already exists in this department")


@router.get("/", response_model=list[SectionOut])
def list_sections(
    department_id: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[SectionOut]:
    query = select(Section).order_by(Section.created_at, Section.id)
    if department_id is not None:
        query = query.where(Section.department_id == department_id)
    return list(db.execute(query).scalars())


@router.get("/{section_id}", response_model=SectionOut)
def get_section(
    section_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SectionOut:
    section = db.get(Section, section_id)
    if section is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
    return section


@router.post("/", response_model=SectionOut, status_code=status.HTTP_201_CREATED)
def create_section(
    payload: SectionCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SectionOut:
    data = payload.model_dump()
    _validate_references(db, data)
    _ensure_name_free(db, payload.department_id, payload.name)

    section = Section(**data)
    db.add(section)
    db.flush()
    log_activity(
        db,
        actor=current_user,
        action="section.create",
        entity_type="section",
        entity_id=section.id,
        summary=f"{current_user.name} created section {payload.name} with {len(payload.subject_ids)} subjects.",
    )
    db.commit()
    db.refresh(section)
    return section


@router.put("/{section_id}", response_model=SectionOut)
def update_section(
    section_id: str,
    payload: SectionUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SectionOut:
    section = db.get(Section, section_id)
    if section is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")

    data = payload.model_dump(exclude_unset=True)
    _validate_references(db, data)
    if "name" in data or "department_id" in data:
        _ensure_name_free(
            db,
            data.get("department_id", section.department_id),
            data.get("name", section.name),
            section_id,
        )

    for key, value in data.items():
        setattr(section, key, value)
    if data:
        log_activity(
            db,
            actor=current_user,
            action="section.update",
            entity_type="section",
            entity_id=section.id,
            summary=f"{current_user.name} updated section {section.name}.",
            details={"fields": sorted(data)},
        )
    db.commit()
    db.refresh(section)
    return section


@router.delete("/{section_id}")
def delete_section(
    section_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    section = db.get(Section, section_id)
    if section is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")

    # Students bound to this section lose the binding.
    students = db.execute(select(User).where(User.section_id == section_id)).scalars().all()
    for student in students:
        student.section_id = None

    log_activity(
        db,
        actor=current_user,
        action="section.delete",
        entity_type="section",
        entity_id=section.id,
        summary=f"{current_user.name} deleted section {section.name}.",
        details={"unbound_users": [student.id for student in students]},
    )
    db.delete(section)
    db.commit()
    return {"success": True}
