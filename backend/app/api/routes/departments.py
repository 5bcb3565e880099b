from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.models.department import Department
from app.models.user import User
from app.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate
from app.services.audit import log_activity

router = APIRouter()


@router.get("/", response_model=list[DepartmentOut])
def list_departments(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[DepartmentOut]:
    return list(db.execute(select(Department).order_by(Department.created_at, Department.id)).scalars())


@router.get("/{department_id}", response_model=DepartmentOut)
def get_department(
    department_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DepartmentOut:
    department = db.get(Department, department_id)
    if department is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    return department


@router.post("/", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> DepartmentOut:
    existing = db.execute(
        select(Department).where(or_(Department.name == payload.name, Department.code == payload.code))
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department name or code already exists")
    department = Department(**payload.model_dump())
    db.add(department)
    db.flush()
    log_activity(
        db,
        actor=current_user,
        action="department.create",
        entity_type="department",
        entity_id=department.id,
        summary=f"{current_user.name} created department {payload.code} ({payload.name}).",
    )
    db.commit()
    db.refresh(department)
    return department


@router.put("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: str,
    payload: DepartmentUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> DepartmentOut:
    department = db.get(Department, department_id)
    if department is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")

    data = payload.model_dump(exclude_unset=True)
    clashes = []
    if "name" in data:
        clashes.append(Department.name == data["name"])
    if "code" in data:
        clashes.append(Department.code == data["code"])
    if clashes:
        existing = db.execute(
            select(Department).where(or_(*clashes), Department.id != department_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department name or code already exists")

    for key, value in data.items():
        setattr(department, key, value)
    if data:
        log_activity(
            db,
            actor=current_user,
            action="department.update",
            entity_type="department",
            entity_id=department.id,
            summary=f"{current_user.name} updated department {department.code}.",
            details={"fields": sorted(data)},
        )
    db.commit()
    db.refresh(department)
    return department


@router.delete("/{department_id}")
def delete_department(
    department_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    department = db.get(Department, department_id)
    if department is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    log_activity(
        db,
        actor=current_user,
        action="department.delete",
        entity_type="department",
        entity_id=department.id,
        summary=f"{current_user.name} deleted department {department.code}.",
    )
    db.delete(department)
    db.commit()
    return {"success": True}
